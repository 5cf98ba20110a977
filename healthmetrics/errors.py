"""Exceptions raised for malformed metric input."""


class HealthMetricsError(Exception):
    """Base class for all library errors."""


class MalformedMetricError(HealthMetricsError, ValueError):
    """Raw metric payload failed validation (e.g. a datapoint without a timestamp)."""


class UnknownCategoryError(HealthMetricsError, KeyError):
    """No formatter is registered for the requested metric category."""
