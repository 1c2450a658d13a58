"""DuckDB persistence for the read-through cache of raw spreadsheet tables."""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Sequence

import duckdb

from pipelines.tables import SheetRecord

DB_ENV_VAR = "SHEET_CACHE_DB_PATH"
DEFAULT_DB_PATH = Path("data/sheet_cache.duckdb")

SHEET_CACHE_TABLE = "sheet_cache"


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def get_database_path(override: str | os.PathLike[str] | None = None) -> Path:
    """Resolve the DuckDB file path from an explicit override or environment variable."""

    if override is not None:
        return Path(override)
    env_value = os.getenv(DB_ENV_VAR)
    if env_value:
        return Path(env_value)
    return DEFAULT_DB_PATH


def connect(
    path: str | os.PathLike[str] | None = None,
    *,
    read_only: bool = False,
    ensure: bool = True,
) -> duckdb.DuckDBPyConnection:
    """Open the cache database, creating the cache table unless read-only."""

    db_path = get_database_path(path)
    if not read_only:
        _ensure_parent_dir(db_path)
    conn = duckdb.connect(str(db_path), read_only=read_only)
    if ensure and not read_only:
        ensure_sheet_cache_table(conn)
    return conn


def ensure_sheet_cache_table(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {SHEET_CACHE_TABLE} (
            table_name TEXT PRIMARY KEY,
            fetched_at TIMESTAMP NOT NULL,
            row_count INTEGER NOT NULL,
            records JSON NOT NULL
        )
        """
    )


def write_cached_table(
    conn: duckdb.DuckDBPyConnection,
    table_name: str,
    records: Sequence[SheetRecord],
    *,
    fetched_at: datetime,
) -> int:
    """Replace the cached copy of ``table_name``.

    Returns
    -------
    int
        Number of records stored.
    """

    payload = json.dumps([dict(record) for record in records], ensure_ascii=False)
    conn.execute(
        f"""
        INSERT OR REPLACE INTO {SHEET_CACHE_TABLE} (table_name, fetched_at, row_count, records)
        VALUES (?, ?, ?, ?)
        """,
        [table_name, fetched_at, len(records), payload],
    )
    return len(records)


def read_cached_table(
    conn: duckdb.DuckDBPyConnection, table_name: str
) -> tuple[datetime, list[dict[str, str]]] | None:
    """Return ``(fetched_at, records)`` for a cached table, or ``None``."""

    row = conn.execute(
        f"SELECT fetched_at, records FROM {SHEET_CACHE_TABLE} WHERE table_name = ?",
        [table_name],
    ).fetchone()
    if row is None:
        return None
    fetched_at, payload = row
    records = json.loads(payload) if isinstance(payload, str) else payload
    return fetched_at, [dict(record) for record in records]


def cached_row_counts(conn: duckdb.DuckDBPyConnection) -> dict[str, int]:
    rows = conn.execute(
        f"SELECT table_name, row_count FROM {SHEET_CACHE_TABLE} ORDER BY table_name"
    ).fetchall()
    return {name: count for name, count in rows}


__all__ = [
    "connect",
    "ensure_sheet_cache_table",
    "write_cached_table",
    "read_cached_table",
    "cached_row_counts",
    "SHEET_CACHE_TABLE",
    "get_database_path",
]
