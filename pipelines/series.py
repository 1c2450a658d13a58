"""Date alignment helpers over the per-metric history series."""

from __future__ import annotations

from datetime import datetime
from functools import reduce

from pipelines.metrics import get_metric
from pipelines.model import HistorySeries, MetricKind, Observation, SeriesPoint


def align_target(metric: MetricKind | str, target: datetime) -> datetime:
    """Snap monthly metrics to the first day of the month they are keyed on."""

    if get_metric(metric).monthly:
        return target.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return target


def nearest_value(
    series: HistorySeries, metric: MetricKind | str, target: datetime
) -> float | None:
    """Return the value of the observation closest to ``target``.

    A single left-to-right reduction keeps the current best candidate and only
    replaces it with a strictly closer one, so equidistant observations resolve
    to the one appearing first in ``series``.
    """

    spec = get_metric(metric)
    if spec.available_from is not None and target < spec.available_from:
        return None

    aligned = align_target(spec.kind, target)
    observations = iter(series)
    first = next(observations, None)
    if first is None:
        return None

    def _closer(best: Observation, candidate: Observation) -> Observation:
        if abs(candidate.date - aligned) < abs(best.date - aligned):
            return candidate
        return best

    return reduce(_closer, observations, first).value


def range_values(
    series: HistorySeries,
    metric: MetricKind | str,
    start: datetime | None,
    end: datetime | None,
) -> list[SeriesPoint]:
    """Observations inside the closed interval ``[start, end]``, oldest first.

    Observations without a numeric value are left out rather than charted as zero.
    """

    MetricKind(metric)
    if start is None or end is None:
        return []
    points = [
        SeriesPoint(date=obs.date, value=obs.value)
        for obs in series
        if obs.value is not None and start <= obs.date <= end
    ]
    return sorted(points, key=lambda point: point.date)


__all__ = ["align_target", "nearest_value", "range_values"]
