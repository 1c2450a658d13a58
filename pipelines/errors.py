"""Exception types raised across the ingestion and reconciliation layers."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for every error surfaced by this project."""


class ConfigurationError(DashboardError):
    """Required settings or spreadsheet tables are missing."""


class RowSourceError(DashboardError):
    """A table could not be fetched from the row source."""


class SchemaError(DashboardError):
    """A fetched table does not carry the columns the reconciler needs."""


class ReconciliationError(DashboardError):
    """The dashboard dataset could not be built as a whole."""


__all__ = [
    "DashboardError",
    "ConfigurationError",
    "RowSourceError",
    "SchemaError",
    "ReconciliationError",
]
