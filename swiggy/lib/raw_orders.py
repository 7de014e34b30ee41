"""
raw_orders.py

Staging of the flat Swiggy order feed.

Raw headers are normalized to snake_case, every record gets an ingestion
sequence number, and values are cast to their warehouse types in DuckDB with
TRY_CAST so that unparseable dates or numbers surface as NULLs (and are
reported by the validator) instead of aborting the load.
"""

import datetime
import re
import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query

TEXT_COLUMNS = ["state", "city", "location", "restaurant_name", "category", "dish_name"]
RAW_COLUMNS = TEXT_COLUMNS + ["order_date", "price", "rating", "rating_count"]

# Columns that must not be blank (empty or whitespace-only)
REQUIRED_TEXT_COLUMNS = ["state", "city", "restaurant_name", "location", "category", "dish_name"]

# Full business identity of an order row (duplicate detection and removal)
BUSINESS_KEY = [
    "state", "city", "order_date", "restaurant_name", "location",
    "category", "dish_name", "price", "rating", "rating_count",
]

COLUMN_ALIASES = {
    "price_inr": "price",
    "restaurant": "restaurant_name",
    "dish": "dish_name",
    "date": "order_date",
}

STAGE_SQL = """
    SELECT
        CAST(ingest_seq AS BIGINT) AS ingest_seq,
        CAST(state AS VARCHAR) AS state,
        CAST(city AS VARCHAR) AS city,
        CAST(location AS VARCHAR) AS location,
        CAST(restaurant_name AS VARCHAR) AS restaurant_name,
        CAST(category AS VARCHAR) AS category,
        CAST(dish_name AS VARCHAR) AS dish_name,
        CAST(TRY_CAST(CAST(order_date AS VARCHAR) AS TIMESTAMP) AS DATE) AS order_date,
        TRY_CAST(CAST(price AS VARCHAR) AS DECIMAL(10, 2)) AS price,
        TRY_CAST(CAST(rating AS VARCHAR) AS DECIMAL(4, 2)) AS rating,
        TRY_CAST(TRY_CAST(CAST(rating_count AS VARCHAR) AS DOUBLE) AS INTEGER) AS rating_count
    FROM raw_text
    ORDER BY ingest_seq
"""


def normalize_column_name(name) -> str:
    """'Price (INR)' -> 'price', 'Restaurant Name' -> 'restaurant_name'"""
    slug = str(name).strip().lower().replace(" ", "_").replace("-", "_")
    slug = re.sub(r"[^a-z0-9_]", "", slug)
    slug = re.sub(r"_+", "_", slug).strip("_")
    return COLUMN_ALIASES.get(slug, slug)


def normalize_columns(frame: pd.DataFrame) -> pd.DataFrame:
    renamed = frame.copy()
    renamed.columns = [normalize_column_name(c) for c in frame.columns]
    return renamed


def _as_text(value):
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return None if pd.isna(value) else value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, datetime.date):
        return value.isoformat()
    if pd.isna(value):
        return None
    return str(value)


def stage_raw_orders(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Return a typed copy of the raw feed.

    Args:
        frame (DataFrame): raw records; headers may use the export's
            'Restaurant Name' / 'Price (INR)' spelling

    Returns:
        DataFrame: `ingest_seq` plus RAW_COLUMNS, typed, in feed order

    Raises:
        ValueError: if any required column is missing
    """
    frame = normalize_columns(frame)
    missing = [c for c in RAW_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Raw order feed is missing columns: {missing}")

    if "ingest_seq" in frame.columns:
        sequence = frame["ingest_seq"].astype("int64").to_numpy()
    else:
        sequence = range(len(frame))

    raw_text = pd.DataFrame({"ingest_seq": list(sequence)}, dtype="int64")
    for column in RAW_COLUMNS:
        raw_text[column] = pd.Series([_as_text(v) for v in frame[column]], dtype=object)

    staged = run_query(STAGE_SQL, raw_text=raw_text)
    logger.info(f"📥 Staged {len(staged):,} raw order records")
    return staged


def read_raw_orders(path: str) -> pd.DataFrame:
    """Read the raw CSV export with every value kept as text."""
    logger.info(f"📁 Reading raw orders from {path}")
    # Blank fields stay empty strings and names such as "NA" stay text
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    logger.info(f"📊 {len(frame):,} rows, {len(frame.columns)} columns")
    return normalize_columns(frame)
