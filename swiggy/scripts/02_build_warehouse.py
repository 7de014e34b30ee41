#!/usr/bin/env python3
"""
Swiggy Order Warehouse ETL Pipeline
Script: 02_build_warehouse.py

Full rebuild of the order star schema and transactional publication to PostgreSQL.

Processing Logic:
1. Read and stage the raw order export
2. Validate (advisory) and deduplicate raw records
3. Build dim_date, dim_location, dim_restaurant, dim_category, dim_dish
4. Resolve surrogate keys and load fact_orders (inner-join semantics)
5. TRUNCATE + COPY every table inside one PostgreSQL transaction

A failure at any step rolls back; the previously published tables stay intact.
"""

import sys
from loguru import logger
from swiggy.lib.raw_orders import read_raw_orders
from swiggy.lib.warehouse import WarehouseStore
from swiggy.lib.pg_publisher import publish_snapshot
from swiggy.tools.config import RAW_ORDERS_PATH, BUILD_WORKERS
from swiggy.tools.file_logger import add_file_sink

add_file_sink("02_build_warehouse")


def main(path: str = RAW_ORDERS_PATH):
    logger.info("🎯 SCRIPT 02: Build Warehouse - Starting")

    try:
        raw_orders = read_raw_orders(path)
        store = WarehouseStore(publisher=publish_snapshot, max_workers=BUILD_WORKERS)
        snapshot = store.rebuild(raw_orders)

        logger.info(f"📊 Staged records: {snapshot.staged_records:,}")
        logger.info(f"📊 After deduplication: {snapshot.deduplicated_records:,}")
        logger.info(f"📊 Fact rows: {len(snapshot.fact_orders):,} ({snapshot.join_misses:,} join misses)")
        logger.info(f"🔐 Source fingerprint: {snapshot.source_hash[:12]}")
        logger.info("✅ SCRIPT 02 COMPLETE")
        return snapshot

    except Exception as e:
        logger.exception(f"❌ SCRIPT 02 FAILED: {e}")
        raise


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else RAW_ORDERS_PATH)
