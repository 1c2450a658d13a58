"""Google Sheets row source.

Reads whole worksheets through the Sheets v4 REST API and hands them back as
header-keyed records of raw cell text. Cells are requested formatted, exactly
as they appear in the pt-BR spreadsheet, and are parsed further up.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from pipelines.common import fetch_json
from pipelines.errors import RowSourceError
from pipelines.tables import SheetRecord

SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
SHEETS_SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetsConfig:
    """Credentials and spreadsheet identity needed to read the source tables."""

    spreadsheet_id: str
    client_email: str
    private_key: str = field(repr=False)
    token_uri: str = GOOGLE_TOKEN_URI

    def service_account_info(self) -> dict[str, str]:
        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key,
            "token_uri": self.token_uri,
        }


def rows_to_records(values: list[list[Any]]) -> list[dict[str, str]]:
    """Key every data row by the header row.

    The API trims trailing empty cells, so short rows simply lack those columns.
    Blank header cells are ignored.
    """

    if not values:
        return []
    header = [str(cell).strip() for cell in values[0]]
    records: list[dict[str, str]] = []
    for row in values[1:]:
        record = {
            column: str(cell)
            for column, cell in zip(header, row)
            if column
        }
        if any(cell.strip() for cell in record.values()):
            records.append(record)
    return records


class GoogleSheetsRowSource:
    """Row source backed by a single Google spreadsheet."""

    def __init__(
        self,
        config: SheetsConfig,
        *,
        credentials: Any = None,
        base_url: str = SHEETS_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._token_lock = asyncio.Lock()

    @property
    def spreadsheet_url(self) -> str:
        return f"{self._base_url}/{self._config.spreadsheet_id}"

    async def _access_token(self) -> str:
        async with self._token_lock:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_info(
                    self._config.service_account_info(), scopes=SHEETS_SCOPES
                )
            if not self._credentials.valid:
                logger.debug("Refreshing Google service account token for %s.", self._config.client_email)
                await asyncio.to_thread(self._credentials.refresh, Request())
            return self._credentials.token

    async def _get(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            token = await self._access_token()
            return await fetch_json(
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                transport=self._transport,
            )
        except GoogleAuthError as exc:
            raise RowSourceError(f"Google authentication failed: {exc}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise RowSourceError(f"Google Sheets request failed: {exc}") from exc

    async def list_tables(self) -> list[str]:
        payload = await self._get(self.spreadsheet_url, params={"fields": "sheets.properties.title"})
        sheets = payload.get("sheets") if isinstance(payload, Mapping) else None
        if not isinstance(sheets, list):
            return []
        titles: list[str] = []
        for sheet in sheets:
            properties = sheet.get("properties") if isinstance(sheet, Mapping) else None
            if isinstance(properties, Mapping) and properties.get("title"):
                titles.append(str(properties["title"]))
        return titles

    async def fetch_table(self, name: str) -> list[SheetRecord]:
        url = f"{self.spreadsheet_url}/values/{quote(name, safe='')}"
        payload = await self._get(
            url,
            params={"majorDimension": "ROWS", "valueRenderOption": "FORMATTED_VALUE"},
        )
        values = payload.get("values") if isinstance(payload, Mapping) else None
        if not isinstance(values, list):
            logger.warning("Sheet %r returned no values.", name)
            return []
        records = rows_to_records(values)
        logger.info("Fetched %s rows from sheet %r.", len(records), name)
        return records


__all__ = [
    "SheetsConfig",
    "GoogleSheetsRowSource",
    "rows_to_records",
    "SHEETS_BASE_URL",
    "SHEETS_SCOPES",
]
