"""
warehouse.py

Full-rebuild orchestration of the Swiggy order star schema.

A rebuild runs staging -> validation -> deduplication -> dimensions -> facts
and produces a brand-new WarehouseSnapshot. The store publishes it by swapping
a single reference, so report readers see either the previous generation or
the new one, never a partially built model. A failed rebuild leaves the
previous snapshot in place.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Mapping, Optional
import pandas as pd
from loguru import logger
from swiggy.lib.raw_orders import stage_raw_orders, RAW_COLUMNS
from swiggy.lib.validator import validate_orders, ValidationFinding
from swiggy.lib.deduplicator import deduplicate_orders
from swiggy.lib.dimensions import build_dimensions
from swiggy.lib.fact_loader import load_fact_orders
from swiggy.lib.reports import run_report, run_reports
from swiggy.tools.config import BUILD_WORKERS
from swiggy.tools.file_logger import compute_sha256


class RebuildFailure(RuntimeError):
    """Dimension/fact construction or publication failed; nothing was swapped."""
    pass


@dataclass(frozen=True, eq=False)
class WarehouseSnapshot:
    """One generation of the star schema. Frames must be treated as read-only."""
    generation: int
    built_at: datetime
    source_hash: str
    tables: Mapping[str, pd.DataFrame]
    validation: ValidationFinding
    staged_records: int
    deduplicated_records: int
    join_misses: int

    def table(self, name: str) -> pd.DataFrame:
        """Copy of one table, safe for the caller to modify."""
        return self.tables[name].copy()

    @property
    def fact_orders(self) -> pd.DataFrame:
        return self.tables["fact_orders"]


def fingerprint_orders(staged: pd.DataFrame) -> str:
    """SHA-256 of the staged feed content, used to tell generations apart."""
    return compute_sha256(staged[RAW_COLUMNS].to_csv(index=False).encode("utf-8"))


def build_snapshot(raw_orders: pd.DataFrame, generation: int = 1,
                   max_workers: int = BUILD_WORKERS) -> WarehouseSnapshot:
    """Run the whole pipeline over a raw feed and return the resulting snapshot."""
    logger.info(f"🚀 Building warehouse generation {generation}...")
    start_time = datetime.now()

    staged = stage_raw_orders(raw_orders)
    finding = validate_orders(staged)
    deduped = deduplicate_orders(staged)
    dimensions = build_dimensions(deduped, max_workers=max_workers)
    fact, join_misses = load_fact_orders(deduped, dimensions)

    tables = dict(dimensions)
    tables["fact_orders"] = fact

    snapshot = WarehouseSnapshot(
        generation=generation,
        built_at=datetime.now(),
        source_hash=fingerprint_orders(staged),
        tables=MappingProxyType(tables),
        validation=finding,
        staged_records=len(staged),
        deduplicated_records=len(deduped),
        join_misses=join_misses,
    )

    duration = (snapshot.built_at - start_time).total_seconds()
    logger.info(f"⏱️ Generation {generation} built in {duration:.1f} seconds")
    return snapshot


class WarehouseStore:
    """
    Holds the current snapshot and serializes rebuilds.

    Args:
        publisher: optional callable taking the new snapshot (e.g. a PostgreSQL
            publisher). It runs before the swap; if it raises, the rebuild fails.
        max_workers: threads used for dimension building
    """

    def __init__(self, publisher: Optional[Callable] = None, max_workers: int = BUILD_WORKERS):
        self._publisher = publisher
        self._max_workers = max_workers
        self._current = None
        self._lock = threading.Lock()
        self._rebuild_lock = threading.Lock()

    def current(self) -> Optional[WarehouseSnapshot]:
        with self._lock:
            return self._current

    def rebuild(self, raw_orders: pd.DataFrame) -> WarehouseSnapshot:
        """
        Exclusive full rebuild. Returns the newly published snapshot.

        Raises:
            RebuildFailure: on any error; the previous snapshot stays current
        """
        with self._rebuild_lock:
            previous = self.current()
            generation = previous.generation + 1 if previous else 1

            try:
                snapshot = build_snapshot(raw_orders, generation, self._max_workers)
                if self._publisher is not None:
                    self._publisher(snapshot)
            except RebuildFailure:
                logger.error(f"❌ Rebuild of generation {generation} failed; keeping previous model")
                raise
            except Exception as e:
                logger.exception(f"❌ Rebuild of generation {generation} failed: {e}")
                raise RebuildFailure(f"Warehouse rebuild failed: {e}") from e

            with self._lock:
                self._current = snapshot

            logger.success(
                f"✅ Generation {generation} published: "
                f"{len(snapshot.fact_orders):,} fact rows, {snapshot.join_misses:,} join misses"
            )
            return snapshot

    def run_report(self, name: str) -> pd.DataFrame:
        return run_report(self.current(), name)

    def run_reports(self, names=None, max_workers: int = 4) -> dict:
        return run_reports(self.current(), names, max_workers=max_workers)
