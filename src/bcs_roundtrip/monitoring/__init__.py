"""Monitoring for the round-trip harness."""

from .metrics import Counter, MetricsRegistry

__all__ = ["Counter", "MetricsRegistry"]
