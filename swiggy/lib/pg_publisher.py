"""
pg_publisher.py

Persist a warehouse snapshot into PostgreSQL as a transactional replace.

All six tables are truncated and reloaded with COPY inside one transaction.
Any failure rolls the transaction back, so the previously published star
schema remains exactly as it was.
"""

import csv
from io import StringIO
import pandas as pd
import psycopg2
from loguru import logger
from swiggy.lib.warehouse import RebuildFailure
from swiggy.tools.config import DB_CONFIG, WAREHOUSE_SCHEMA

TABLE_DDL = {
    "dim_date": """
        date_id INTEGER PRIMARY KEY,
        full_date DATE NOT NULL,
        year INTEGER,
        month INTEGER,
        month_name VARCHAR(20),
        quarter INTEGER,
        week INTEGER,
        day INTEGER
    """,
    "dim_location": """
        location_id INTEGER PRIMARY KEY,
        state VARCHAR(100),
        city VARCHAR(100),
        location VARCHAR(200)
    """,
    "dim_restaurant": """
        restaurant_id INTEGER PRIMARY KEY,
        restaurant_name VARCHAR(200)
    """,
    "dim_category": """
        category_id INTEGER PRIMARY KEY,
        category VARCHAR(200)
    """,
    "dim_dish": """
        dish_id INTEGER PRIMARY KEY,
        dish_name VARCHAR(200)
    """,
    "fact_orders": """
        order_id INTEGER PRIMARY KEY,
        date_id INTEGER REFERENCES {schema}.dim_date (date_id),
        price DECIMAL(10, 2),
        rating DECIMAL(4, 2),
        rating_count INTEGER,
        location_id INTEGER REFERENCES {schema}.dim_location (location_id),
        restaurant_id INTEGER REFERENCES {schema}.dim_restaurant (restaurant_id),
        category_id INTEGER REFERENCES {schema}.dim_category (category_id),
        dish_id INTEGER REFERENCES {schema}.dim_dish (dish_id)
    """,
}

# NULL marker in COPY input
COPY_NULL = "\\N"

# Dimensions before the fact table (FK order)
LOAD_ORDER = list(TABLE_DDL)

INTEGER_COLUMNS = {
    "dim_date": ["date_id", "year", "month", "quarter", "week", "day"],
    "dim_location": ["location_id"],
    "dim_restaurant": ["restaurant_id"],
    "dim_category": ["category_id"],
    "dim_dish": ["dish_id"],
    "fact_orders": [
        "order_id", "date_id", "rating_count", "location_id",
        "restaurant_id", "category_id", "dish_id",
    ],
}


def create_tables(cur, schema: str) -> None:
    cur.execute(f"CREATE SCHEMA IF NOT EXISTS {schema}")
    for table, columns in TABLE_DDL.items():
        cur.execute(f"CREATE TABLE IF NOT EXISTS {schema}.{table} ({columns.format(schema=schema)})")


def to_copy_csv(table: str, frame: pd.DataFrame) -> StringIO:
    """
    Render a snapshot table as headerless CSV for COPY ... FROM STDIN.
    NULLs are written as COPY_NULL; empty strings stay empty strings.
    """
    frame = frame.astype({col: "Int64" for col in INTEGER_COLUMNS[table]})
    if table == "dim_date":
        frame["full_date"] = pd.to_datetime(frame["full_date"]).dt.strftime("%Y-%m-%d")

    output = StringIO()
    frame.to_csv(output, index=False, header=False, quoting=csv.QUOTE_MINIMAL, na_rep=COPY_NULL)
    output.seek(0)
    return output


def publish_snapshot(snapshot, conn=None, schema: str = WAREHOUSE_SCHEMA) -> dict:
    """
    Replace the persisted star schema with `snapshot` in one transaction.

    Args:
        snapshot (WarehouseSnapshot): the generation to persist
        conn: optional psycopg2 connection (one is opened from DB_CONFIG otherwise)
        schema (str): target PostgreSQL schema

    Returns:
        dict: table -> rows loaded

    Raises:
        RebuildFailure: if anything fails; the transaction is rolled back
    """
    owns_connection = conn is None
    if owns_connection:
        conn = psycopg2.connect(**DB_CONFIG)

    load_stats = {}
    try:
        with conn.cursor() as cur:
            logger.info(f"🔄 Publishing generation {snapshot.generation} to schema {schema}...")
            create_tables(cur, schema)

            tables = ", ".join(f"{schema}.{table}" for table in reversed(LOAD_ORDER))
            cur.execute(f"TRUNCATE TABLE {tables}")

            for table in LOAD_ORDER:
                frame = snapshot.tables[table]
                cols = ",".join(frame.columns)
                cur.copy_expert(
                    f"COPY {schema}.{table} ({cols}) FROM STDIN WITH (FORMAT csv, NULL '{COPY_NULL}')",
                    to_copy_csv(table, frame),
                )

                cur.execute(f"SELECT COUNT(*) FROM {schema}.{table}")
                loaded_count = cur.fetchone()[0]
                if loaded_count != len(frame):
                    raise ValueError(
                        f"Record count mismatch in {table}: expected {len(frame)}, found {loaded_count}"
                    )
                load_stats[table] = loaded_count
                logger.info(f"✅ {table}: {loaded_count:,} records loaded")

        conn.commit()
        logger.success(f"✅ Generation {snapshot.generation} committed to PostgreSQL")
        return load_stats

    except Exception as e:
        conn.rollback()
        logger.error(f"❌ PostgreSQL publish failed, transaction rolled back: {e}")
        raise RebuildFailure(f"Publishing generation {snapshot.generation} failed: {e}") from e

    finally:
        if owns_connection:
            conn.close()
