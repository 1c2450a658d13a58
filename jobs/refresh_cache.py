"""Job that refetches every source table and rewrites the read-through cache."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from jobs.config import AppConfig, load_config
from pipelines.service import ensure_required_tables
from pipelines.sources.sheets import GoogleSheetsRowSource
from storage.cache import CachedRowSource

logger = logging.getLogger(__name__)


async def refresh_cache_async(config: AppConfig) -> dict[str, int]:
    """Fetch the required tables straight from Sheets and store them in DuckDB."""

    sheets = GoogleSheetsRowSource(config.sheets)
    await ensure_required_tables(sheets, config.tables)
    if not config.cache.enabled:
        logger.warning("Cache TTL is 0; refreshed rows will never be served from cache.")
    cache = CachedRowSource(
        sheets, ttl_seconds=config.cache.ttl_seconds, db_path=config.cache.db_path
    )

    counts: dict[str, int] = {}
    for name in config.tables.required:
        records = await cache.refresh_table(name)
        counts[name] = len(records)
    return counts


def main(config: AppConfig | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    config = config or load_config()
    counts = asyncio.run(refresh_cache_async(config))
    logger.info(
        "Cache refresh finished (%s).",
        ", ".join(f"{name}={count}" for name, count in counts.items()),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
