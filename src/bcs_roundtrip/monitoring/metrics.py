"""
Metrics collection for the harness.

Thread-safe labelled counters grouped in a registry. The harness counts
stores, signature attachments and retrievals by outcome, so a run can be
summarised without scraping logs.
"""

import threading
import time
from collections import defaultdict
from typing import Dict, List, Optional, Any


class Counter:
    """
    Counter metric that only increases.

    Values are kept per label combination.
    """

    def __init__(self, name: str, description: str = ""):
        """
        Initialize counter.

        Args:
            name: Metric name
            description: Metric description
        """
        self.name = name
        self.description = description
        self._lock = threading.Lock()
        self._created_at = time.time()
        self._values: Dict[str, float] = defaultdict(float)

    def increment(self, amount: float = 1.0, labels: Optional[Dict[str, str]] = None) -> None:
        """
        Increment counter.

        Args:
            amount: Amount to increment (must be >= 0)
            labels: Optional labels
        """
        if amount < 0:
            raise ValueError("Counter increment must be >= 0")

        with self._lock:
            self._values[self._labels_to_key(labels)] += amount

    def get_value(self, labels: Optional[Dict[str, str]] = None) -> float:
        """Get counter value for one label combination."""
        with self._lock:
            return self._values.get(self._labels_to_key(labels), 0.0)

    def get_all_values(self) -> Dict[str, float]:
        """Get all counter values by label combination."""
        with self._lock:
            return dict(self._values)

    def total(self) -> float:
        """Sum across all label combinations."""
        with self._lock:
            return sum(self._values.values())

    def reset(self) -> None:
        """Reset counter."""
        with self._lock:
            self._values.clear()

    @staticmethod
    def _labels_to_key(labels: Optional[Dict[str, str]]) -> str:
        """Convert labels dict to string key."""
        if not labels:
            return ""
        return "|".join(f"{k}={v}" for k, v in sorted(labels.items()))


class MetricsRegistry:
    """Registry of named counters."""

    def __init__(self):
        self._lock = threading.RLock()
        self._metrics: Dict[str, Counter] = {}

    def counter(self, name: str, description: str = "") -> Counter:
        """
        Get or create a counter.

        Args:
            name: Metric name
            description: Metric description

        Returns:
            Counter metric
        """
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = Counter(name, description)
                self._metrics[name] = metric
            return metric

    def list_metrics(self) -> List[str]:
        """Get list of metric names."""
        with self._lock:
            return list(self._metrics.keys())

    def collect_all(self) -> Dict[str, Any]:
        """
        Collect all metric values.

        Returns:
            Mapping of metric name to description, total and per-label values
        """
        with self._lock:
            metrics = list(self._metrics.items())

        return {
            name: {
                "description": metric.description,
                "total": metric.total(),
                "values": metric.get_all_values(),
            }
            for name, metric in metrics
        }

    def reset_all(self) -> None:
        """Reset all metrics."""
        with self._lock:
            for metric in self._metrics.values():
                metric.reset()


__all__ = [
    "Counter",
    "MetricsRegistry",
]
