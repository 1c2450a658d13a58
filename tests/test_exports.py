from datetime import datetime

import duckdb
import pytest

from pipelines.model import SeriesPoint
from storage.exports import export_series, export_to_csv, series_connection

POINTS = [
    SeriesPoint(date=datetime(2011, 1, 1), value=15.0),
    SeriesPoint(date=datetime(2003, 1, 1), value=10.0),
]


def test_export_series_csv(tmp_path):
    dest = export_series(POINTS, tmp_path / "out" / "ipca.csv")

    lines = dest.read_text().splitlines()
    assert lines[0] == "date,value"
    assert len(lines) == 3
    assert lines[1].startswith("2003-01-01")


def test_export_series_parquet(tmp_path):
    dest = export_series(POINTS, tmp_path / "ipca.parquet", fmt="parquet")

    con = duckdb.connect()
    try:
        rows = con.execute("SELECT value FROM read_parquet(?) ORDER BY 1", [str(dest)]).fetchall()
    finally:
        con.close()
    assert rows == [(10.0,), (15.0,)]


def test_export_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        export_series(POINTS, tmp_path / "x.xlsx", fmt="xlsx")


def test_export_to_csv_writes_series_table_oldest_first(tmp_path):
    conn = series_connection(POINTS)
    try:
        dest = export_to_csv(conn, tmp_path / "nested" / "dir" / "ipca.csv")
    finally:
        conn.close()

    rows = dest.read_text().splitlines()[1:]
    assert [float(row.split(",")[1]) for row in rows] == [10.0, 15.0]
