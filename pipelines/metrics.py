"""Static catalog describing how each economic metric is laid out in the spreadsheet."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pipelines.model import MetricKind

# The exchange-rate series is meaningless before the Real was introduced.
REAL_PLAN_CUTOFF = datetime(1994, 7, 1)


@dataclass(frozen=True)
class MetricSpec:
    """Where a metric lives in the summary and history sheets, and how to read it."""

    kind: MetricKind
    label: str
    unit: str
    history_date_column: str
    history_value_column: str
    variation_column: str
    end_date_column: str
    monthly: bool = True
    required: bool = True
    lower_is_better: bool = True
    available_from: datetime | None = None


METRICS: tuple[MetricSpec, ...] = (
    MetricSpec(
        kind=MetricKind.INFLATION,
        label="Inflação acumulada (IPCA)",
        unit="%",
        history_date_column="Data IPCA",
        history_value_column="IPCA",
        variation_column="Inflação Acumulada (%)",
        end_date_column="Data Final IPCA",
    ),
    MetricSpec(
        kind=MetricKind.EXCHANGE,
        label="Câmbio",
        unit="BRL",
        history_date_column="Data Câmbio",
        history_value_column="Câmbio",
        variation_column="Variação Cambial (%)",
        end_date_column="Data Final Dólar",
        monthly=False,
        available_from=REAL_PLAN_CUTOFF,
    ),
    MetricSpec(
        kind=MetricKind.POLICY_RATE,
        label="SELIC",
        unit="%",
        history_date_column="Data SELIC",
        history_value_column="SELIC",
        variation_column="Variação Nominal SELIC (%)",
        end_date_column="Data Final SELIC",
        lower_is_better=False,
    ),
    MetricSpec(
        kind=MetricKind.UNEMPLOYMENT,
        label="Desemprego",
        unit="%",
        history_date_column="Data Desemprego",
        history_value_column="Desemprego",
        variation_column="Variação Nominal Desemprego (%)",
        end_date_column="Data Final Desemprego",
        required=False,
    ),
)


def get_metric(kind: MetricKind | str) -> MetricSpec:
    kind = MetricKind(kind)
    for spec in METRICS:
        if spec.kind is kind:
            return spec
    raise KeyError(kind)  # pragma: no cover - every MetricKind is catalogued


__all__ = ["MetricSpec", "METRICS", "REAL_PLAN_CUTOFF", "get_metric"]
