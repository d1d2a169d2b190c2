"""Metrics exposer deployed in the test pods."""

from .exposer import DEFAULT_INTERVAL_SECONDS
from .exposer import MetricsExposer

__all__ = ["DEFAULT_INTERVAL_SECONDS", "MetricsExposer"]
