"""Read-through cache that sits in front of any row source."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import UTC, datetime, timedelta
from typing import Callable, Sequence

import duckdb

from pipelines.service import RowSource
from pipelines.tables import SheetRecord
from storage.db import connect, read_cached_table, write_cached_table

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class CachedRowSource:
    """Serve tables from DuckDB while they are younger than ``ttl_seconds``.

    Only raw source rows are stored. Expired or missing tables are fetched from
    the wrapped source and written back before being returned; fetch failures
    propagate unchanged. An unreadable or locked cache file is logged and
    bypassed, so the wrapped source is consulted directly.
    """

    def __init__(
        self,
        source: RowSource,
        *,
        ttl_seconds: float,
        db_path: str | os.PathLike[str] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._ttl = timedelta(seconds=ttl_seconds)
        self._db_path = db_path
        self._clock = clock

    async def list_tables(self) -> list[str]:
        return await self._source.list_tables()

    def _read_fresh(self, name: str) -> list[dict[str, str]] | None:
        try:
            conn = connect(self._db_path)
            try:
                cached = read_cached_table(conn, name)
            finally:
                conn.close()
        except (duckdb.Error, OSError) as exc:
            logger.warning("Cache read for %r failed, fetching from source: %s", name, exc)
            return None
        if cached is None:
            return None
        fetched_at, records = cached
        if self._clock() - fetched_at > self._ttl:
            logger.debug("Cached copy of %r expired (fetched at %s).", name, fetched_at)
            return None
        return records

    def _store(self, name: str, records: Sequence[SheetRecord]) -> int | None:
        try:
            conn = connect(self._db_path)
            try:
                return write_cached_table(conn, name, records, fetched_at=self._clock())
            finally:
                conn.close()
        except (duckdb.Error, OSError) as exc:
            logger.warning("Cache write for %r skipped: %s", name, exc)
            return None

    async def refresh_table(self, name: str) -> list[SheetRecord]:
        records = list(await self._source.fetch_table(name))
        written = await asyncio.to_thread(self._store, name, records)
        if written is not None:
            logger.info("Cached %s rows for %r.", written, name)
        return records

    async def fetch_table(self, name: str) -> list[SheetRecord]:
        cached = await asyncio.to_thread(self._read_fresh, name)
        if cached is not None:
            logger.debug("Serving %r from cache.", name)
            return cached
        return await self.refresh_table(name)


__all__ = ["CachedRowSource"]
