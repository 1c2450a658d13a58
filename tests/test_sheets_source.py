import asyncio

import httpx
import pytest

from pipelines.errors import RowSourceError
from pipelines.sources.sheets import GoogleSheetsRowSource, SheetsConfig, rows_to_records

CONFIG = SheetsConfig(
    spreadsheet_id="sheet-id",
    client_email="robot@example.iam.gserviceaccount.com",
    private_key="not-a-real-key",
)


class StaticCredentials:
    valid = True
    token = "test-token"

    def refresh(self, request):  # pragma: no cover - never expired
        raise AssertionError("refresh should not be needed")


def _handler(request: httpx.Request) -> httpx.Response:
    assert request.headers["Authorization"] == "Bearer test-token"
    path = request.url.path
    if path == "/v4/spreadsheets/sheet-id":
        return httpx.Response(
            200,
            json={
                "sheets": [
                    {"properties": {"title": "periodos_presidenciais"}},
                    {"properties": {"title": "historico"}},
                ]
            },
        )
    if path == "/v4/spreadsheets/sheet-id/values/periodos_presidenciais":
        assert request.url.params["valueRenderOption"] == "FORMATTED_VALUE"
        return httpx.Response(
            200,
            json={
                "range": "periodos_presidenciais!A1:E3",
                "majorDimension": "ROWS",
                "values": [
                    ["presidente", "Nome", "inicio", "fim", "Foto"],
                    ["lula1", "Lula", "2003-01-01", "2011-01-01"],
                    [],
                    ["dilma", "Dilma", "2011-01-01", "2016-08-31", "https://example.org/d.jpg"],
                ],
            },
        )
    if path == "/v4/spreadsheets/sheet-id/values/vazio":
        return httpx.Response(200, json={"range": "vazio!A1:Z1000"})
    return httpx.Response(404, json={"error": {"code": 404, "message": "not found"}})


@pytest.fixture()
def source():
    return GoogleSheetsRowSource(
        CONFIG, credentials=StaticCredentials(), transport=httpx.MockTransport(_handler)
    )


def test_list_tables(source):
    assert asyncio.run(source.list_tables()) == ["periodos_presidenciais", "historico"]


def test_fetch_table_keys_rows_by_header(source):
    records = asyncio.run(source.fetch_table("periodos_presidenciais"))

    assert records == [
        {"presidente": "lula1", "Nome": "Lula", "inicio": "2003-01-01", "fim": "2011-01-01"},
        {
            "presidente": "dilma",
            "Nome": "Dilma",
            "inicio": "2011-01-01",
            "fim": "2016-08-31",
            "Foto": "https://example.org/d.jpg",
        },
    ]


def test_sheet_without_values_is_empty(source):
    assert asyncio.run(source.fetch_table("vazio")) == []


def test_client_errors_become_row_source_errors(source):
    with pytest.raises(RowSourceError):
        asyncio.run(source.fetch_table("missing"))


def test_rows_to_records_ignores_blank_header_cells():
    values = [["a", "", "b"], ["1", "x", "2"], ["", "", " "]]
    assert rows_to_records(values) == [{"a": "1", "b": "2"}]


def test_config_repr_hides_private_key():
    assert "not-a-real-key" not in repr(CONFIG)
