"""Environment-driven configuration for the spreadsheet source and its cache."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from pipelines.errors import ConfigurationError
from pipelines.service import RowSource
from pipelines.sources.sheets import GoogleSheetsRowSource, SheetsConfig
from pipelines.tables import SheetTables
from storage.cache import CachedRowSource

SPREADSHEET_ID_ENV = "GOOGLE_SPREADSHEET_ID"
CLIENT_EMAIL_ENV = "GOOGLE_CLIENT_EMAIL"
PRIVATE_KEY_ENV = "GOOGLE_PRIVATE_KEY"
CACHE_TTL_ENV = "SHEET_CACHE_TTL_SECONDS"
CACHE_DB_ENV = "SHEET_CACHE_DB_PATH"
DEFAULT_CACHE_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheConfig:
    """Read-through cache settings; a zero TTL disables caching."""

    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    db_path: str | None = None

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0


@dataclass(frozen=True)
class AppConfig:
    sheets: SheetsConfig
    tables: SheetTables = field(default_factory=SheetTables)
    cache: CacheConfig = field(default_factory=CacheConfig)


def _environ(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def load_sheets_config(env: Mapping[str, str] | None = None) -> SheetsConfig:
    """Read spreadsheet credentials, failing with every missing variable named."""

    env = _environ(env)
    values = {
        name: (env.get(name) or "").strip()
        for name in (SPREADSHEET_ID_ENV, CLIENT_EMAIL_ENV, PRIVATE_KEY_ENV)
    }
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
    return SheetsConfig(
        spreadsheet_id=values[SPREADSHEET_ID_ENV],
        client_email=values[CLIENT_EMAIL_ENV],
        # Keys pasted into .env files usually carry escaped newlines.
        private_key=values[PRIVATE_KEY_ENV].replace("\\n", "\n"),
    )


def load_sheet_tables(env: Mapping[str, str] | None = None) -> SheetTables:
    env = _environ(env)
    defaults = SheetTables()
    return SheetTables(
        terms=env.get("SHEET_TERMS_TITLE") or defaults.terms,
        summary=env.get("SHEET_SUMMARY_TITLE") or defaults.summary,
        history=env.get("SHEET_HISTORY_TITLE") or defaults.history,
    )


def load_cache_config(env: Mapping[str, str] | None = None) -> CacheConfig:
    env = _environ(env)
    raw_ttl = env.get(CACHE_TTL_ENV)
    try:
        ttl = float(raw_ttl) if raw_ttl else DEFAULT_CACHE_TTL_SECONDS
    except ValueError as exc:
        raise ConfigurationError(f"{CACHE_TTL_ENV} must be a number of seconds, got {raw_ttl!r}") from exc
    return CacheConfig(ttl_seconds=max(ttl, 0.0), db_path=env.get(CACHE_DB_ENV) or None)


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    return AppConfig(
        sheets=load_sheets_config(env),
        tables=load_sheet_tables(env),
        cache=load_cache_config(env),
    )


def build_row_source(config: AppConfig) -> RowSource:
    """Google Sheets source, wrapped in the read-through cache when enabled."""

    source: RowSource = GoogleSheetsRowSource(config.sheets)
    if config.cache.enabled:
        source = CachedRowSource(
            source, ttl_seconds=config.cache.ttl_seconds, db_path=config.cache.db_path
        )
    return source


__all__ = [
    "AppConfig",
    "build_row_source",
    "CacheConfig",
    "load_config",
    "load_sheets_config",
    "load_sheet_tables",
    "load_cache_config",
]
