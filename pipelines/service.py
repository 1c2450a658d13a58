"""Fetch the three source tables and reconcile them into a ``Dashboard``."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from pipelines.errors import ConfigurationError, ReconciliationError, RowSourceError
from pipelines.model import Dashboard
from pipelines.reconcile import reconcile
from pipelines.tables import SheetRecord, SheetTables, parse_history, parse_summary, parse_terms

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    """Anything able to hand back the rows of a named table."""

    async def list_tables(self) -> list[str]: ...

    async def fetch_table(self, name: str) -> Sequence[SheetRecord]: ...


async def ensure_required_tables(source: RowSource, tables: SheetTables) -> None:
    """Fail fast when the spreadsheet lacks one of the required tables."""

    try:
        available = set(await source.list_tables())
    except RowSourceError as exc:
        raise ConfigurationError("Unable to list spreadsheet tables at startup") from exc
    missing = [name for name in tables.required if name not in available]
    if missing:
        raise ConfigurationError(f"Required tables not found: {', '.join(missing)}")


async def load_dashboard(source: RowSource, tables: SheetTables | None = None) -> Dashboard:
    """Fetch all tables concurrently, then reconcile.

    Any fetch failure fails the whole load; no partial dashboard is returned.
    """

    tables = tables or SheetTables()
    try:
        term_rows, summary_rows, history_rows = await asyncio.gather(
            source.fetch_table(tables.terms),
            source.fetch_table(tables.summary),
            source.fetch_table(tables.history),
        )
    except RowSourceError as exc:
        logger.error("Fetching source tables failed: %s", exc)
        raise ReconciliationError("Source tables could not be fetched") from exc

    terms = parse_terms(term_rows, table=tables.terms)
    summary = parse_summary(summary_rows, table=tables.summary)
    history = parse_history(history_rows, table=tables.history)
    indicators = reconcile(terms, summary, history)
    logger.info(
        "Reconciled %s indicators for %s terms (%s summary rows).",
        len(indicators),
        len(terms),
        len(summary),
    )
    return Dashboard(terms=terms, indicators=indicators)


__all__ = ["RowSource", "ensure_required_tables", "load_dashboard"]
