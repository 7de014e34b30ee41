"""
duckdb_utils.py

Short-lived in-memory DuckDB connections over pandas frames.

Every pipeline stage opens its own connection, registers its input frames as
views and fetches the result back as a new DataFrame, so stages never share
connection state and can run from separate threads.
"""

import duckdb
import pandas as pd


def run_query(sql: str, **frames: pd.DataFrame) -> pd.DataFrame:
    """Run `sql` against the given frames (registered under their keyword names)."""
    con = duckdb.connect(":memory:")
    try:
        for name, frame in frames.items():
            con.register(name, frame)
        return con.execute(sql).fetchdf()
    finally:
        con.close()


def fetch_scalar(sql: str, **frames: pd.DataFrame):
    """Run `sql` and return the first column of the first row."""
    con = duckdb.connect(":memory:")
    try:
        for name, frame in frames.items():
            con.register(name, frame)
        row = con.execute(sql).fetchone()
        return row[0] if row else None
    finally:
        con.close()
