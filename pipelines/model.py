"""Canonical data model for presidential terms and their economic indicators."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MetricKind(str, Enum):
    """Economic variables tracked per term, keyed as the summary sheet names them."""

    INFLATION = "inflacaoAcumulada"
    EXCHANGE = "variacaoCambial"
    POLICY_RATE = "variacaoSelic"
    UNEMPLOYMENT = "variacaoDesemprego"


class Term(BaseModel):
    """A single presidential mandate."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Stable identifier shared with the summary sheet.")
    name: str = Field(..., description="Display name of the president.")
    start: datetime = Field(..., description="First day of the mandate.")
    end: datetime = Field(..., description="Last day of the mandate.")
    photo_url: str = Field(default="", description="Opaque photo reference, not interpreted.")

    @model_validator(mode="after")
    def _check_bounds(self) -> "Term":
        if self.start >= self.end:
            raise ValueError(f"Term {self.id!r} starts on or after its end date")
        return self


class Observation(BaseModel):
    """Raw history row for one metric; the value may be missing in the sheet."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    value: Optional[float] = None


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    value: float


class SummaryRow(BaseModel):
    """Typed row of the per-term summary sheet."""

    model_config = ConfigDict(frozen=True)

    president_id: str
    variations: dict[MetricKind, Optional[float]] = Field(default_factory=dict)
    end_dates: dict[MetricKind, Optional[datetime]] = Field(default_factory=dict)

    def variation(self, metric: MetricKind) -> float | None:
        return self.variations.get(metric)

    def end_date(self, metric: MetricKind) -> datetime | None:
        return self.end_dates.get(metric)


class MetricIndicator(BaseModel):
    """Reconciled view of one metric over one term."""

    model_config = ConfigDict(frozen=True)

    metric: MetricKind
    variation_percent: Optional[float] = Field(
        default=None, description="Percentage change as supplied by the summary sheet."
    )
    period_end_date: Optional[datetime] = Field(
        default=None, description="End of the observation window for this metric."
    )
    start_value: Optional[float] = None
    end_value: Optional[float] = None
    history: list[SeriesPoint] = Field(default_factory=list)

    @property
    def tracked(self) -> bool:
        return self.period_end_date is not None


class Indicator(BaseModel):
    """All reconciled metrics for one term."""

    model_config = ConfigDict(frozen=True)

    president_id: str
    inflation: MetricIndicator
    exchange: MetricIndicator
    policy_rate: MetricIndicator
    unemployment: MetricIndicator

    def metric(self, kind: MetricKind | str) -> MetricIndicator:
        kind = MetricKind(kind)
        if kind is MetricKind.INFLATION:
            return self.inflation
        if kind is MetricKind.EXCHANGE:
            return self.exchange
        if kind is MetricKind.POLICY_RATE:
            return self.policy_rate
        return self.unemployment


class DashboardEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: Term
    indicator: Indicator


class Dashboard(BaseModel):
    """Everything produced by one fetch-and-reconcile cycle."""

    model_config = ConfigDict(frozen=True)

    terms: list[Term] = Field(default_factory=list, description="Terms ordered by start, newest first.")
    indicators: list[Indicator] = Field(default_factory=list)

    def term(self, term_id: str) -> Term | None:
        for term in self.terms:
            if term.id == term_id:
                return term
        return None

    def indicator_for(self, term_id: str) -> Indicator | None:
        for indicator in self.indicators:
            if indicator.president_id == term_id:
                return indicator
        return None

    def entries(self) -> list[DashboardEntry]:
        """Pair every term with its indicator, skipping terms that have none."""

        paired: list[DashboardEntry] = []
        for term in self.terms:
            indicator = self.indicator_for(term.id)
            if indicator is None:
                continue
            paired.append(DashboardEntry(term=term, indicator=indicator))
        return paired


HistorySeries = Sequence[Observation]
HistoryTables = Mapping[MetricKind, HistorySeries]


__all__ = [
    "MetricKind",
    "Term",
    "Observation",
    "SeriesPoint",
    "SummaryRow",
    "MetricIndicator",
    "Indicator",
    "DashboardEntry",
    "Dashboard",
    "HistorySeries",
    "HistoryTables",
]
