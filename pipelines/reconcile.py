"""Build one reconciled ``Indicator`` per presidential term."""

from __future__ import annotations

import logging
from typing import Sequence

from pipelines.metrics import MetricSpec, get_metric
from pipelines.model import (
    HistoryTables,
    Indicator,
    MetricIndicator,
    MetricKind,
    SummaryRow,
    Term,
)
from pipelines.series import nearest_value, range_values

logger = logging.getLogger(__name__)


def _untracked(spec: MetricSpec) -> MetricIndicator:
    return MetricIndicator(metric=spec.kind)


def reconcile_metric(
    spec: MetricSpec, term: Term, row: SummaryRow, history: HistoryTables
) -> MetricIndicator:
    """Resolve endpoint values and the in-term history for a single metric."""

    end_date = row.end_date(spec.kind)
    variation = row.variation(spec.kind)

    if not spec.required and end_date is None:
        return _untracked(spec)

    if variation is None:
        # Required metrics always render a variation figure.
        variation = 0.0

    series = history.get(spec.kind, ())
    if end_date is None:
        logger.warning(
            "Summary row for %s has no end date for %s; history left empty.",
            term.id,
            spec.kind.value,
        )
        return MetricIndicator(
            metric=spec.kind,
            variation_percent=variation,
            start_value=nearest_value(series, spec.kind, term.start),
        )

    return MetricIndicator(
        metric=spec.kind,
        variation_percent=variation,
        period_end_date=end_date,
        start_value=nearest_value(series, spec.kind, term.start),
        end_value=nearest_value(series, spec.kind, end_date),
        history=range_values(series, spec.kind, term.start, end_date),
    )


def reconcile(
    terms: Sequence[Term],
    summary_rows: Sequence[SummaryRow],
    history: HistoryTables,
) -> list[Indicator]:
    """Join summary rows to terms and resolve every metric against the history.

    Summary rows naming an unknown president are dropped. Variations are taken
    as supplied and never recomputed from the endpoint values. Output follows
    the summary row order; callers sort for display.
    """

    by_id: dict[str, Term] = {}
    for term in terms:
        by_id.setdefault(term.id, term)

    indicators: list[Indicator] = []
    for row in summary_rows:
        term = by_id.get(row.president_id)
        if term is None:
            logger.debug("Dropping summary row for unknown president %r.", row.president_id)
            continue
        indicators.append(
            Indicator(
                president_id=term.id,
                inflation=reconcile_metric(get_metric(MetricKind.INFLATION), term, row, history),
                exchange=reconcile_metric(get_metric(MetricKind.EXCHANGE), term, row, history),
                policy_rate=reconcile_metric(get_metric(MetricKind.POLICY_RATE), term, row, history),
                unemployment=reconcile_metric(get_metric(MetricKind.UNEMPLOYMENT), term, row, history),
            )
        )
    return indicators


__all__ = ["reconcile", "reconcile_metric"]
