"""Export helpers turning reconciled series into downloadable files via DuckDB."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import duckdb

from pipelines.model import SeriesPoint

SERIES_TABLE = "series"


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _series_query() -> str:
    return f"SELECT \"date\", value FROM {SERIES_TABLE} ORDER BY \"date\""


def series_connection(points: Sequence[SeriesPoint]) -> duckdb.DuckDBPyConnection:
    """Load ``points`` into a throwaway in-memory database."""

    conn = duckdb.connect()
    conn.execute(f"CREATE TABLE {SERIES_TABLE} (\"date\" TIMESTAMP NOT NULL, value DOUBLE NOT NULL)")
    if points:
        conn.executemany(
            f"INSERT INTO {SERIES_TABLE} VALUES (?, ?)",
            [(point.date, point.value) for point in points],
        )
    return conn


def _copy_to(conn: duckdb.DuckDBPyConnection, destination: str | Path, options: str) -> Path:
    dest_path = Path(destination)
    _ensure_parent(dest_path)
    sanitized_path = str(dest_path).replace("'", "''")
    conn.execute(f"COPY ({_series_query()}) TO '{sanitized_path}' ({options})")
    return dest_path


def export_to_csv(conn: duckdb.DuckDBPyConnection, destination: str | Path) -> Path:
    """Materialize the series table into a CSV file using DuckDB's COPY command."""

    return _copy_to(conn, destination, "FORMAT CSV, HEADER TRUE")


def export_to_parquet(conn: duckdb.DuckDBPyConnection, destination: str | Path) -> Path:
    return _copy_to(conn, destination, "FORMAT PARQUET")


def export_series(points: Sequence[SeriesPoint], destination: str | Path, *, fmt: str = "csv") -> Path:
    if fmt not in {"csv", "parquet"}:
        raise ValueError(f"Unsupported export format {fmt!r}")
    conn = series_connection(points)
    try:
        if fmt == "csv":
            return export_to_csv(conn, destination)
        return export_to_parquet(conn, destination)
    finally:
        conn.close()


__all__ = ["series_connection", "export_to_csv", "export_to_parquet", "export_series"]
