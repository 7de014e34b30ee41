"""
deduplicator.py

Collapse raw orders that are identical across every business column.

The representative kept for each duplicate group is the record with the lowest
ingest_seq, which makes the result deterministic and idempotent: running it on
already-deduplicated data returns the same records.
"""

import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query
from swiggy.lib.raw_orders import BUSINESS_KEY


def deduplicate_orders(orders: pd.DataFrame) -> pd.DataFrame:
    partition = ", ".join(BUSINESS_KEY)
    deduped = run_query(f"""
        SELECT *
        FROM orders
        QUALIFY ROW_NUMBER() OVER (
            PARTITION BY {partition}
            ORDER BY ingest_seq
        ) = 1
        ORDER BY ingest_seq
    """, orders=orders)

    removed = len(orders) - len(deduped)
    if removed:
        logger.info(f"🧹 Removed {removed:,} duplicate records ({len(deduped):,} remain)")
    else:
        logger.info(f"✅ No duplicates found in {len(deduped):,} records")
    return deduped
