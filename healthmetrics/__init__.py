"""Metric transformation and formatting helpers for service health dashboards."""
