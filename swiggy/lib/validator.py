"""
validator.py

Read-only data quality checks over staged raw orders.

Nothing here filters or mutates the feed: findings are counted, logged and
handed back to the caller. The warehouse build runs regardless of what the
checks report.
"""

from dataclasses import dataclass
import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query
from swiggy.lib.raw_orders import RAW_COLUMNS, REQUIRED_TEXT_COLUMNS, BUSINESS_KEY


@dataclass(frozen=True, eq=False)
class ValidationFinding:
    """Outcome of the advisory checks on one raw feed."""
    total_records: int
    null_counts: dict
    blank_records: pd.DataFrame
    duplicate_groups: pd.DataFrame

    @property
    def blank_count(self) -> int:
        return len(self.blank_records)

    @property
    def duplicate_rows(self) -> int:
        """Rows that deduplication will discard."""
        if self.duplicate_groups.empty:
            return 0
        return int((self.duplicate_groups["duplicate_count"] - 1).sum())

    @property
    def is_clean(self) -> bool:
        return (
            not any(self.null_counts.values())
            and self.blank_count == 0
            and self.duplicate_rows == 0
        )


def null_counts(orders: pd.DataFrame) -> dict:
    """Count NULL values per raw column, keyed as null_<column>."""
    checks = ",\n".join(
        f"SUM(CASE WHEN {col} IS NULL THEN 1 ELSE 0 END) AS null_{col}"
        for col in RAW_COLUMNS
    )
    counts = run_query(f"SELECT {checks} FROM orders", orders=orders)
    # SUM over zero rows is NULL
    return {
        name: int(value) if pd.notna(value) else 0
        for name, value in counts.iloc[0].items()
    }


def blank_records(orders: pd.DataFrame) -> pd.DataFrame:
    """Records with an empty or whitespace-only value in any required text column."""
    predicate = " OR ".join(f"trim({col}) = ''" for col in REQUIRED_TEXT_COLUMNS)
    return run_query(
        f"SELECT * FROM orders WHERE {predicate} ORDER BY ingest_seq",
        orders=orders,
    )


def duplicate_groups(orders: pd.DataFrame) -> pd.DataFrame:
    """Business tuples that occur more than once, with their occurrence count."""
    key = ", ".join(BUSINESS_KEY)
    return run_query(f"""
        SELECT {key}, COUNT(*) AS duplicate_count
        FROM orders
        GROUP BY {key}
        HAVING COUNT(*) > 1
        ORDER BY duplicate_count DESC, MIN(ingest_seq)
    """, orders=orders)


def validate_orders(orders: pd.DataFrame) -> ValidationFinding:
    """Run every check and log a summary. Never raises for data problems."""
    logger.info(f"🔍 Validating {len(orders):,} raw order records...")

    finding = ValidationFinding(
        total_records=len(orders),
        null_counts=null_counts(orders),
        blank_records=blank_records(orders),
        duplicate_groups=duplicate_groups(orders),
    )

    for name, count in finding.null_counts.items():
        if count > 0:
            logger.warning(f"⚠️ {count:,} records with {name.replace('null_', '')} missing")
    if finding.blank_count > 0:
        logger.warning(f"⚠️ {finding.blank_count:,} records with blank required fields")
    if finding.duplicate_rows > 0:
        logger.warning(
            f"⚠️ {len(finding.duplicate_groups):,} duplicated orders "
            f"({finding.duplicate_rows:,} surplus rows)"
        )
    if finding.is_clean:
        logger.success("✅ Raw orders passed all validation checks")

    return finding
