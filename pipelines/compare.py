"""Min-max scoring and multi-term comparison views.

Scores are always computed over the selection passed in, so changing the
selection changes every term's relative score. Nothing is cached here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from pipelines.metrics import METRICS, get_metric
from pipelines.model import Dashboard, DashboardEntry, MetricKind


class ComparisonEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    term_id: str
    label: str = Field(..., description="Display name with the mandate years, e.g. 'Lula (2003-2011)'.")
    value: Optional[float] = Field(default=None, description="Raw variation supplied by the summary sheet.")
    score: Optional[float] = Field(default=None, description="0-100, higher is better.")


class RadarAxis(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: MetricKind
    label: str
    scores: dict[str, Optional[float]] = Field(default_factory=dict)
    values: dict[str, Optional[float]] = Field(default_factory=dict)


class OverlayRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    values: dict[str, float] = Field(default_factory=dict)


def normalize(value: float, minimum: float, maximum: float) -> float:
    """Linear min-max scaling onto ``[0, 100]``; a degenerate range maps to 50."""

    if minimum == maximum:
        return 50.0
    return (value - minimum) / (maximum - minimum) * 100


def invert_if_lower_is_better(score: float, metric: MetricKind | str) -> float:
    if get_metric(metric).lower_is_better:
        return 100 - score
    return score


def selection_bounds(values: Iterable[Optional[float]]) -> tuple[float, float] | None:
    present = [value for value in values if value is not None]
    if not present:
        return None
    return min(present), max(present)


def score_values(
    values: dict[str, Optional[float]], metric: MetricKind | str
) -> dict[str, Optional[float]]:
    """Score each term's raw value against the bounds of ``values`` itself."""

    bounds = selection_bounds(values.values())
    scores: dict[str, Optional[float]] = {}
    for term_id, value in values.items():
        if value is None or bounds is None:
            scores[term_id] = None
            continue
        scores[term_id] = invert_if_lower_is_better(normalize(value, *bounds), metric)
    return scores


def select_entries(dashboard: Dashboard, term_ids: Sequence[str]) -> list[DashboardEntry]:
    """Entries for ``term_ids`` in the requested order; unknown ids are skipped."""

    by_id = {entry.term.id: entry for entry in dashboard.entries()}
    selected: list[DashboardEntry] = []
    for term_id in dict.fromkeys(term_ids):
        entry = by_id.get(term_id)
        if entry is not None:
            selected.append(entry)
    return selected


def term_label(entry: DashboardEntry) -> str:
    return f"{entry.term.name} ({entry.term.start.year}-{entry.term.end.year})"


def compare_terms(
    dashboard: Dashboard, term_ids: Sequence[str], metric: MetricKind | str
) -> list[ComparisonEntry]:
    metric = MetricKind(metric)
    entries = select_entries(dashboard, term_ids)
    values = {entry.term.id: entry.indicator.metric(metric).variation_percent for entry in entries}
    scores = score_values(values, metric)
    return [
        ComparisonEntry(
            term_id=entry.term.id,
            label=term_label(entry),
            value=values[entry.term.id],
            score=scores[entry.term.id],
        )
        for entry in entries
    ]


def radar_scores(dashboard: Dashboard, term_ids: Sequence[str]) -> list[RadarAxis]:
    """One axis per metric, each scored over the selected terms only."""

    entries = select_entries(dashboard, term_ids)
    axes: list[RadarAxis] = []
    for spec in METRICS:
        values = {entry.term.id: entry.indicator.metric(spec.kind).variation_percent for entry in entries}
        axes.append(
            RadarAxis(
                metric=spec.kind,
                label=spec.label,
                scores=score_values(values, spec.kind),
                values=values,
            )
        )
    return axes


def overlay_histories(
    dashboard: Dashboard, term_ids: Sequence[str], metric: MetricKind | str
) -> list[OverlayRow]:
    """Merge the selected terms' histories into rows keyed by date."""

    metric = MetricKind(metric)
    merged: dict[datetime, dict[str, float]] = {}
    for entry in select_entries(dashboard, term_ids):
        for point in entry.indicator.metric(metric).history:
            merged.setdefault(point.date, {})[entry.term.id] = point.value
    return [OverlayRow(date=observed_at, values=merged[observed_at]) for observed_at in sorted(merged)]


__all__ = [
    "ComparisonEntry",
    "RadarAxis",
    "OverlayRow",
    "normalize",
    "invert_if_lower_is_better",
    "selection_bounds",
    "score_values",
    "select_entries",
    "term_label",
    "compare_terms",
    "radar_scores",
    "overlay_histories",
]
