from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard failures."""


class LoadError(DashboardError):
    """The sales source could not be read or is missing required columns."""


class EmptyDataError(DashboardError):
    """An aggregation has no records to work with; the chart should be skipped."""
