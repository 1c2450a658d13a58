from datetime import datetime

import pytest

from pipelines.model import MetricKind, Observation
from pipelines.series import align_target, nearest_value, range_values


def _obs(year, month, day, value):
    return Observation(date=datetime(year, month, day), value=value)


DAILY_EXCHANGE = [
    _obs(1994, 6, 30, 2750.0),
    _obs(1994, 7, 1, 1.0),
    _obs(1994, 7, 4, 0.93),
]

MONTHLY_IPCA = [
    _obs(2020, 3, 1, 0.07),
    _obs(2020, 1, 1, 0.21),
    _obs(2020, 2, 1, 0.25),
]


@pytest.mark.parametrize(
    "target",
    [datetime(1994, 6, 30), datetime(1994, 6, 30, 23, 59), datetime(1980, 1, 1)],
)
def test_exchange_rate_is_undefined_before_real_plan(target):
    assert nearest_value(DAILY_EXCHANGE, MetricKind.EXCHANGE, target) is None


def test_exchange_rate_resolves_from_cutoff_on():
    assert nearest_value(DAILY_EXCHANGE, MetricKind.EXCHANGE, datetime(1994, 7, 1)) == 1.0
    assert nearest_value(DAILY_EXCHANGE, "variacaoCambial", datetime(1994, 7, 3)) == 0.93


def test_exchange_rate_is_not_month_aligned():
    assert align_target(MetricKind.EXCHANGE, datetime(2020, 5, 17)) == datetime(2020, 5, 17)


@pytest.mark.parametrize(
    "metric", [MetricKind.INFLATION, MetricKind.POLICY_RATE, MetricKind.UNEMPLOYMENT]
)
def test_monthly_metrics_collapse_dates_within_a_month(metric):
    early = nearest_value(MONTHLY_IPCA, metric, datetime(2020, 2, 1))
    late = nearest_value(MONTHLY_IPCA, metric, datetime(2020, 2, 28))
    assert early == late == 0.25


def test_mid_month_target_snaps_to_month_start():
    # Without alignment 2020-01-31 would be closer to February.
    assert nearest_value(MONTHLY_IPCA, MetricKind.INFLATION, datetime(2020, 1, 31)) == 0.21


def test_equidistant_points_resolve_to_first_seen():
    series = [_obs(2020, 1, 3, 2.0), _obs(2020, 1, 1, 1.0)]
    assert nearest_value(series, MetricKind.EXCHANGE, datetime(2020, 1, 2)) == 2.0
    assert nearest_value(list(reversed(series)), MetricKind.EXCHANGE, datetime(2020, 1, 2)) == 1.0


def test_nearest_value_on_empty_series_is_none():
    assert nearest_value([], MetricKind.INFLATION, datetime(2020, 1, 1)) is None


def test_nearest_value_returns_missing_value_as_none():
    series = [_obs(2020, 1, 1, None), _obs(2021, 1, 1, 3.0)]
    assert nearest_value(series, MetricKind.INFLATION, datetime(2020, 1, 1)) is None


def test_range_values_is_inclusive_and_sorted():
    points = range_values(
        MONTHLY_IPCA, MetricKind.INFLATION, datetime(2020, 1, 1), datetime(2020, 3, 1)
    )
    assert [point.date for point in points] == [
        datetime(2020, 1, 1),
        datetime(2020, 2, 1),
        datetime(2020, 3, 1),
    ]
    assert sorted(points, key=lambda point: point.date) == points


def test_range_values_uses_full_datetime_comparison():
    series = [Observation(date=datetime(2020, 3, 1, 12), value=1.0)]
    assert range_values(series, MetricKind.EXCHANGE, datetime(2020, 1, 1), datetime(2020, 3, 1)) == []


def test_range_values_without_end_is_empty():
    assert range_values(MONTHLY_IPCA, MetricKind.UNEMPLOYMENT, datetime(2020, 1, 1), None) == []


def test_range_values_skips_points_without_value():
    series = [_obs(2020, 1, 1, None), _obs(2020, 2, 1, 4.0)]
    points = range_values(series, MetricKind.INFLATION, datetime(2020, 1, 1), datetime(2020, 12, 1))
    assert [(point.date, point.value) for point in points] == [(datetime(2020, 2, 1), 4.0)]


def test_time_of_day_does_not_affect_monthly_alignment():
    series = [_obs(2020, 5, 1, 1.0), _obs(2020, 5, 2, 2.0)]

    assert align_target(MetricKind.INFLATION, datetime(2020, 5, 20, 18, 0)) == datetime(2020, 5, 1)
    assert nearest_value(series, MetricKind.INFLATION, datetime(2020, 5, 10)) == 1.0
    assert nearest_value(series, MetricKind.INFLATION, datetime(2020, 5, 20, 18, 0)) == 1.0
