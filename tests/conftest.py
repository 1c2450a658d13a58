from __future__ import annotations

import pytest

from pipelines.errors import RowSourceError
from pipelines.tables import SheetTables

TERMS_ROWS = [
    {"presidente": "itamar", "Nome": "Itamar Franco", "inicio": "1992-10-02", "fim": "1995-01-01"},
    {
        "presidente": "lula1",
        "Nome": "Lula",
        "inicio": "2003-01-01",
        "fim": "2011-01-01",
        "Foto": "https://upload.wikimedia.org/lula.jpg",
    },
    {"presidente": "fhc", "Nome": "FHC", "inicio": "1995-01-01", "fim": "2003-01-01", "Foto": ""},
    {"presidente": "dilma", "Nome": "Dilma", "inicio": "2011-01-01", "fim": "2016-08-31"},
]

SUMMARY_ROWS = [
    {
        "Presidente": "lula1",
        "Inflação Acumulada (%)": "56,78",
        "Data Final IPCA": "2011-01-01",
        "Variação Cambial (%)": "-52,84",
        "Data Final Dólar": "2010-12-31",
        "Variação Nominal SELIC (%)": "-57,00",
        "Data Final SELIC": "2011-01-01",
        "Variação Nominal Desemprego (%)": "",
        "Data Final Desemprego": "",
    },
    {
        "Presidente": "dilma",
        "Inflação Acumulada (%)": "40,00",
        "Data Final IPCA": "01/08/2016",
        "Variação Cambial (%)": "95,18",
        "Data Final Dólar": "2016-08-31",
        "Variação Nominal SELIC (%)": "32,56",
        "Data Final SELIC": "2016-08-01",
        "Variação Nominal Desemprego (%)": "49,37",
        "Data Final Desemprego": "2016-08-01",
    },
    {
        "Presidente": "fhc",
        "Inflação Acumulada (%)": "100,6",
        "Data Final IPCA": "2003-01-01",
        "Variação Cambial (%)": "314,12",
        "Data Final Dólar": "2003-01-02",
        "Variação Nominal SELIC (%)": "-37,5",
        "Data Final SELIC": "2003-01-01",
    },
    {
        "Presidente": "itamar",
        "Inflação Acumulada (%)": "",
        "Data Final IPCA": "1995-01-01",
        "Variação Cambial (%)": "",
        "Data Final Dólar": "1994-12-31",
        "Variação Nominal SELIC (%)": "",
        "Data Final SELIC": "1995-01-01",
    },
    {
        "Presidente": "ghost",
        "Inflação Acumulada (%)": "1,0",
        "Data Final IPCA": "2020-01-01",
        "Variação Cambial (%)": "1,0",
        "Data Final Dólar": "2020-01-01",
        "Variação Nominal SELIC (%)": "1,0",
        "Data Final SELIC": "2020-01-01",
    },
]

HISTORY_ROWS = [
    {
        "Data IPCA": "1995-01-01",
        "IPCA": "5",
        "Data Câmbio": "1995-01-02",
        "Câmbio": "0,85",
        "Data SELIC": "1995-01-01",
        "SELIC": "40,00",
        "Data Desemprego": "2012-03-01",
        "Desemprego": "7,9",
    },
    {
        "Data IPCA": "2003-01-01",
        "IPCA": "10",
        "Data Câmbio": "2003-01-02",
        "Câmbio": "3,52",
        "Data SELIC": "2003-01-01",
        "SELIC": "25,00",
        "Data Desemprego": "2016-08-01",
        "Desemprego": "11,8",
    },
    {
        "Data IPCA": "2011-01-01",
        "IPCA": "15",
        "Data Câmbio": "2010-12-31",
        "Câmbio": "1,66",
        "Data SELIC": "2011-01-01",
        "SELIC": "10,75",
    },
    {
        "Data IPCA": "2016-08-01",
        "IPCA": "20",
        "Data Câmbio": "2016-08-31",
        "Câmbio": "3,24",
        "Data SELIC": "2016-08-01",
        "SELIC": "14,25",
    },
]


class FakeRowSource:
    """In-memory row source recording every fetch."""

    def __init__(self, tables: dict[str, list[dict[str, str]]], *, fail: bool = False) -> None:
        self.tables = tables
        self.fail = fail
        self.calls: list[str] = []

    async def list_tables(self) -> list[str]:
        return list(self.tables)

    async def fetch_table(self, name: str) -> list[dict[str, str]]:
        self.calls.append(name)
        if self.fail:
            raise RowSourceError(f"simulated failure fetching {name}")
        return [dict(record) for record in self.tables[name]]


@pytest.fixture()
def sheet_tables() -> SheetTables:
    return SheetTables()


@pytest.fixture()
def sheet_rows(sheet_tables: SheetTables) -> dict[str, list[dict[str, str]]]:
    return {
        sheet_tables.terms: TERMS_ROWS,
        sheet_tables.summary: SUMMARY_ROWS,
        sheet_tables.history: HISTORY_ROWS,
    }


@pytest.fixture()
def row_source(sheet_rows) -> FakeRowSource:
    return FakeRowSource(sheet_rows)
