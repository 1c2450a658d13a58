"""Shared HTTP helper for reading JSON from the Google Sheets API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

DEFAULT_TIMEOUT_SECONDS = 30.0
_DEFAULT_WAIT = wait_exponential(min=1, max=16)
_DEFAULT_STOP = stop_after_attempt(5)


Headers = Mapping[str, str] | None
Params = Mapping[str, Any] | None


def is_transient(exc: BaseException) -> bool:
    """Network hiccups, throttling and server errors are worth another attempt."""

    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


@retry(
    retry=retry_if_exception(is_transient),
    wait=_DEFAULT_WAIT,
    stop=_DEFAULT_STOP,
    reraise=True,
)
async def fetch_json(
    url: str,
    *,
    headers: Headers = None,
    params: Params = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET ``url`` and return the decoded JSON payload.

    Transient failures are retried with exponential backoff; client errors
    (bad credentials, unknown spreadsheet) raise immediately. ``transport`` is
    handed to ``httpx.AsyncClient`` so callers can plug a mock transport.
    """

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.get(url, headers=headers, params=params)

    response.raise_for_status()
    return response.json()


__all__ = ["fetch_json", "is_transient", "DEFAULT_TIMEOUT_SECONDS"]
