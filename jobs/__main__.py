"""Command-line entrypoint for dashboard jobs."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from dotenv import load_dotenv

from jobs.config import AppConfig, build_row_source, load_config
from jobs.refresh_cache import main as run_refresh_cache
from pipelines.errors import DashboardError
from pipelines.model import Dashboard, Term
from pipelines.service import ensure_required_tables, load_dashboard
from pipelines.sources.sheets import GoogleSheetsRowSource


def _format_term(term: Term) -> str:
    return (
        f"{term.id}: name='{term.name}' "
        f"start={term.start.date().isoformat()} end={term.end.date().isoformat()}"
    )


async def _load(config: AppConfig) -> Dashboard:
    return await load_dashboard(build_row_source(config), config.tables)


def _show(dashboard: Dashboard, term_id: str | None) -> int:
    entries = dashboard.entries()
    if term_id:
        entries = [entry for entry in entries if entry.term.id == term_id]
        if not entries:
            raise SystemExit(f"Unknown term id: {term_id}")
    payload = [entry.model_dump(mode="json") for entry in entries]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Presidential term indicators job runner")
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL for this invocation (e.g. DEBUG, INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-terms", help="Show presidential terms, newest first")
    show_parser = subparsers.add_parser("show", help="Print reconciled indicators as JSON")
    show_parser.add_argument("--term", help="Only print the given term id")
    subparsers.add_parser("check-tables", help="Verify the spreadsheet has every required table")
    subparsers.add_parser(
        "refresh-cache", help="Refetch all source tables and rewrite the DuckDB cache"
    )

    args = parser.parse_args(argv)

    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    try:
        config = load_config()
        if args.command == "refresh-cache":
            return run_refresh_cache(config)

        if args.command == "check-tables":
            asyncio.run(ensure_required_tables(GoogleSheetsRowSource(config.sheets), config.tables))
            print("All required tables present: " + ", ".join(config.tables.required))
            return 0

        dashboard = asyncio.run(_load(config))
    except DashboardError as exc:
        raise SystemExit(f"error: {exc}") from exc

    if args.command == "list-terms":
        for term in dashboard.terms:
            print(_format_term(term))
        return 0

    if args.command == "show":
        return _show(dashboard, args.term)

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
