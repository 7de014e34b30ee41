"""
dimensions.py

Derive the five lookup dimensions of the order star schema from deduplicated
raw orders.

Each dimension holds one row per distinct natural key, numbered with a dense
surrogate key (1..N) in ascending natural-key order. Natural keys with a NULL
component are left out; the orders carrying them are dropped later by the fact
loader's inner joins.

Week numbers in dim_date follow ISO-8601 (weeks start on Monday, week 1 holds
the first Thursday of the year).
"""

from concurrent.futures import ThreadPoolExecutor
import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query

# dimension table -> (surrogate key, natural key columns)
DIMENSION_SPECS = {
    "dim_location": ("location_id", ["state", "city", "location"]),
    "dim_restaurant": ("restaurant_id", ["restaurant_name"]),
    "dim_category": ("category_id", ["category"]),
    "dim_dish": ("dish_id", ["dish_name"]),
}

DIMENSION_TABLES = ["dim_date"] + list(DIMENSION_SPECS)

DATE_DIM_SQL = """
    SELECT
        ROW_NUMBER() OVER (ORDER BY full_date) AS date_id,
        full_date,
        year(full_date) AS year,
        month(full_date) AS month,
        monthname(full_date) AS month_name,
        quarter(full_date) AS quarter,
        weekofyear(full_date) AS week,
        day(full_date) AS day
    FROM (
        SELECT DISTINCT CAST(order_date AS DATE) AS full_date
        FROM orders
        WHERE order_date IS NOT NULL
    ) dates
    ORDER BY date_id
"""


def build_date_dim(orders: pd.DataFrame) -> pd.DataFrame:
    return run_query(DATE_DIM_SQL, orders=orders)


def build_lookup_dim(orders: pd.DataFrame, key_column: str, natural_key: list) -> pd.DataFrame:
    """Distinct natural keys of `orders` with a dense surrogate key."""
    columns = ", ".join(natural_key)
    not_null = " AND ".join(f"{col} IS NOT NULL" for col in natural_key)
    return run_query(f"""
        SELECT
            ROW_NUMBER() OVER (ORDER BY {columns}) AS {key_column},
            {columns}
        FROM (
            SELECT DISTINCT {columns}
            FROM orders
            WHERE {not_null}
        ) keys
        ORDER BY {key_column}
    """, orders=orders)


def build_dimension(orders: pd.DataFrame, table: str) -> pd.DataFrame:
    if table == "dim_date":
        return build_date_dim(orders)
    if table not in DIMENSION_SPECS:
        raise KeyError(f"Unknown dimension: {table}")
    key_column, natural_key = DIMENSION_SPECS[table]
    return build_lookup_dim(orders, key_column, natural_key)


def build_dimensions(orders: pd.DataFrame, max_workers: int = 5) -> dict:
    """
    Build every dimension table.

    Dimensions share no state, so each one is derived in its own worker thread
    with its own DuckDB connection.

    Returns:
        dict: table name -> DataFrame, in DIMENSION_TABLES order
    """
    logger.info(f"🔑 Building {len(DIMENSION_TABLES)} dimensions from {len(orders):,} orders...")

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {
            table: pool.submit(build_dimension, orders, table)
            for table in DIMENSION_TABLES
        }
        dimensions = {table: future.result() for table, future in futures.items()}

    for table, frame in dimensions.items():
        logger.info(f"📊 {table}: {len(frame):,} rows")
    return dimensions
