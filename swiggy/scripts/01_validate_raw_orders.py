#!/usr/bin/env python3
"""
Swiggy Order Warehouse ETL Pipeline
Script: 01_validate_raw_orders.py

Run the advisory data quality checks over the raw order export.

Key Operations:
- Read the raw CSV export and stage it with typed columns
- Count NULL values per column
- List records with blank required text fields
- Report duplicated business tuples and the surplus rows they carry

Nothing is filtered or written; the warehouse build (script 02) runs
regardless of the findings.
"""

import sys
from loguru import logger
from swiggy.lib.raw_orders import read_raw_orders, stage_raw_orders
from swiggy.lib.validator import validate_orders
from swiggy.tools.config import RAW_ORDERS_PATH
from swiggy.tools.file_logger import add_file_sink

add_file_sink("01_validate_raw_orders")


def main(path: str = RAW_ORDERS_PATH):
    logger.info("🎯 SCRIPT 01: Validate Raw Orders - Starting")

    try:
        staged = stage_raw_orders(read_raw_orders(path))
        finding = validate_orders(staged)

        logger.info(f"📊 Records checked: {finding.total_records:,}")
        logger.info(f"📊 Blank-field records: {finding.blank_count:,}")
        logger.info(f"📊 Duplicate surplus rows: {finding.duplicate_rows:,}")
        for _, row in finding.blank_records.head(10).iterrows():
            logger.info(f"   ↳ blank fields in record #{row['ingest_seq']}: {row['restaurant_name']!r} / {row['dish_name']!r}")

        logger.info("✅ SCRIPT 01 COMPLETE")
        return finding

    except Exception as e:
        logger.exception(f"❌ SCRIPT 01 FAILED: {e}")
        raise


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else RAW_ORDERS_PATH)
