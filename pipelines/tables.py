"""Typed read boundary for the three spreadsheet tables.

Raw records arrive as ``Mapping[str, str]`` (column name to cell text). The
functions here validate the header once and turn every row into the pydantic
models the reconciler works with, so nothing downstream touches raw cells.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from pydantic import ValidationError

from pipelines.errors import SchemaError
from pipelines.metrics import METRICS
from pipelines.model import MetricKind, Observation, SummaryRow, Term
from pipelines.parsing import parse_date, parse_number

logger = logging.getLogger(__name__)

SheetRecord = Mapping[str, str]

TERM_ID_COLUMN = "presidente"
TERM_NAME_COLUMN = "Nome"
TERM_START_COLUMN = "inicio"
TERM_END_COLUMN = "fim"
TERM_PHOTO_COLUMN = "Foto"
SUMMARY_PRESIDENT_COLUMN = "Presidente"

TERM_COLUMNS = (TERM_ID_COLUMN, TERM_NAME_COLUMN, TERM_START_COLUMN, TERM_END_COLUMN)
SUMMARY_COLUMNS = (
    SUMMARY_PRESIDENT_COLUMN,
    *(column for spec in METRICS if spec.required for column in (spec.variation_column, spec.end_date_column)),
)
HISTORY_COLUMNS = tuple(
    column
    for spec in METRICS
    if spec.required
    for column in (spec.history_date_column, spec.history_value_column)
)


@dataclass(frozen=True)
class SheetTables:
    """Titles of the worksheets backing each logical table."""

    terms: str = "periodos_presidenciais"
    summary: str = "indicadores"
    history: str = "historico"

    @property
    def required(self) -> tuple[str, str, str]:
        return (self.terms, self.summary, self.history)


def _cell(record: SheetRecord, column: str) -> str | None:
    value = record.get(column)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_columns(
    records: Sequence[SheetRecord], columns: Iterable[str], *, table: str
) -> None:
    if not records:
        return
    seen: set[str] = set()
    for record in records:
        seen.update(record.keys())
    missing = [column for column in columns if column not in seen]
    if missing:
        raise SchemaError(f"Table {table!r} is missing required columns: {', '.join(missing)}")


def parse_terms(records: Sequence[SheetRecord], *, table: str = "terms") -> list[Term]:
    """Build terms ordered by start date, newest first.

    Rows with a missing id, unparseable dates or ``start >= end`` are skipped
    with a warning; repeated ids keep the first occurrence.
    """

    _require_columns(records, TERM_COLUMNS, table=table)
    terms: list[Term] = []
    seen_ids: set[str] = set()
    for index, record in enumerate(records):
        term_id = _cell(record, TERM_ID_COLUMN)
        start = parse_date(_cell(record, TERM_START_COLUMN))
        end = parse_date(_cell(record, TERM_END_COLUMN))
        if not term_id or start is None or end is None:
            logger.warning("Skipping incomplete term row %s in %s.", index, table)
            continue
        if term_id in seen_ids:
            logger.warning("Duplicate term id %r in %s; keeping the first row.", term_id, table)
            continue
        try:
            term = Term(
                id=term_id,
                name=_cell(record, TERM_NAME_COLUMN) or term_id,
                start=start,
                end=end,
                photo_url=_cell(record, TERM_PHOTO_COLUMN) or "",
            )
        except ValidationError as exc:
            logger.warning("Skipping invalid term row %s in %s: %s", index, table, exc)
            continue
        seen_ids.add(term_id)
        terms.append(term)
    return sorted(terms, key=lambda term: term.start, reverse=True)


def parse_summary(records: Sequence[SheetRecord], *, table: str = "summary") -> list[SummaryRow]:
    _require_columns(records, SUMMARY_COLUMNS, table=table)
    rows: list[SummaryRow] = []
    for record in records:
        president_id = _cell(record, SUMMARY_PRESIDENT_COLUMN)
        if not president_id:
            continue
        rows.append(
            SummaryRow(
                president_id=president_id,
                variations={
                    spec.kind: parse_number(_cell(record, spec.variation_column)) for spec in METRICS
                },
                end_dates={
                    spec.kind: parse_date(_cell(record, spec.end_date_column)) for spec in METRICS
                },
            )
        )
    return rows


def parse_history(
    records: Sequence[SheetRecord], *, table: str = "history"
) -> dict[MetricKind, list[Observation]]:
    """Split the wide history sheet into one series per metric.

    Each metric occupies its own date/value column pair and the columns have
    different lengths, so rows without a date for a metric are not part of
    that metric's series. Source order is preserved.
    """

    _require_columns(records, HISTORY_COLUMNS, table=table)
    series: dict[MetricKind, list[Observation]] = {spec.kind: [] for spec in METRICS}
    for record in records:
        for spec in METRICS:
            observed_at = parse_date(_cell(record, spec.history_date_column))
            if observed_at is None:
                continue
            series[spec.kind].append(
                Observation(
                    date=observed_at,
                    value=parse_number(_cell(record, spec.history_value_column)),
                )
            )
    return series


__all__ = [
    "SheetRecord",
    "SheetTables",
    "TERM_COLUMNS",
    "SUMMARY_COLUMNS",
    "HISTORY_COLUMNS",
    "parse_terms",
    "parse_summary",
    "parse_history",
]
