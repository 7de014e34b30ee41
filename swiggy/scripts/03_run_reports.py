#!/usr/bin/env python3
"""
Swiggy Order Warehouse ETL Pipeline
Script: 03_run_reports.py

Build the warehouse in memory and run the full report catalog concurrently.

Each report is exported as <REPORT_DIR>/<report>.csv; files whose content
did not change since the previous run are left untouched.
"""

import os
import sys
from loguru import logger
from swiggy.lib.raw_orders import read_raw_orders
from swiggy.lib.reports import ReportError
from swiggy.lib.warehouse import WarehouseStore
from swiggy.tools.config import RAW_ORDERS_PATH, REPORT_DIR
from swiggy.tools.file_logger import add_file_sink, save_file_if_changed

add_file_sink("03_run_reports")


def export_reports(results: dict, report_dir: str = REPORT_DIR) -> int:
    """Write each successful report to CSV. Returns the number of files written."""
    written = 0
    for name, result in results.items():
        if isinstance(result, ReportError):
            continue
        path = os.path.join(report_dir, f"{name}.csv")
        if save_file_if_changed(path, result.to_csv(index=False).encode("utf-8")):
            written += 1
            logger.info(f"📁 Wrote {path} ({len(result):,} rows)")
        else:
            logger.info(f"🔁 Unchanged: {path}")
    return written


def main(path: str = RAW_ORDERS_PATH):
    logger.info("🎯 SCRIPT 03: Run Reports - Starting")

    try:
        store = WarehouseStore()
        store.rebuild(read_raw_orders(path))

        results = store.run_reports()
        failed = [name for name, result in results.items() if isinstance(result, ReportError)]
        written = export_reports(results)

        logger.info(f"📊 {len(results) - len(failed)} reports ran, {written} files updated")
        if failed:
            logger.warning(f"⚠️ Failed reports: {', '.join(failed)}")
        logger.info("✅ SCRIPT 03 COMPLETE")
        return results

    except Exception as e:
        logger.exception(f"❌ SCRIPT 03 FAILED: {e}")
        raise


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else RAW_ORDERS_PATH)
