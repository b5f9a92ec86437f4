"""
Metrics Collector - Simple labelled metrics collection.

Provides counter and histogram metrics without external dependencies.
Metrics are identified by name plus labels.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


def metric_key(name: str, labels: dict[str, str] | None = None) -> str:
    """
    Build the identity of a metric from its name and labels.

    Example:
        >>> metric_key("requests", {"error": "false", "endpoint": "get_user"})
        'requests{endpoint="get_user",error="false"}'
    """
    if not labels:
        return name
    rendered = ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


@dataclass
class Counter:
    """
    A monotonically increasing counter.

    Example:
        ```python
        requests = Counter("requests")
        requests.inc()
        requests.inc(5)
        print(requests.value)  # 6
        ```
    """

    name: str
    """Metric name."""

    description: str = ""
    """Human-readable description."""

    labels: dict[str, str] = field(default_factory=dict)
    """Labels for this counter."""

    _value: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def inc(self, amount: float = 1.0) -> None:
        """
        Increment the counter.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Counter {self.name} cannot decrease (got {amount})")
        with self._lock:
            self._value += amount

    @property
    def value(self) -> float:
        """Current counter value."""
        with self._lock:
            return self._value

    def reset(self) -> None:
        """Reset counter to 0."""
        with self._lock:
            self._value = 0.0


@dataclass
class Histogram:
    """
    Tracks distribution of values.

    Example:
        ```python
        latency = Histogram("request_latency_ms")
        latency.observe(45.2)
        latency.observe(123.5)
        print(latency.count)  # 2
        print(latency.sum)    # 168.7
        print(latency.avg)    # 84.35
        ```
    """

    name: str
    """Metric name."""

    description: str = ""
    """Human-readable description."""

    labels: dict[str, str] = field(default_factory=dict)
    """Labels for this histogram."""

    _count: int = 0
    _sum: float = 0.0
    _min: float = float("inf")
    _max: float = float("-inf")
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def observe(self, value: float) -> None:
        """Record a value."""
        with self._lock:
            self._count += 1
            self._sum += value
            self._min = min(self._min, value)
            self._max = max(self._max, value)

    @property
    def count(self) -> int:
        """Number of observations."""
        with self._lock:
            return self._count

    @property
    def sum(self) -> float:
        """Sum of all observed values."""
        with self._lock:
            return self._sum

    @property
    def min(self) -> float:
        """Minimum observed value."""
        with self._lock:
            return self._min if self._count > 0 else 0.0

    @property
    def max(self) -> float:
        """Maximum observed value."""
        with self._lock:
            return self._max if self._count > 0 else 0.0

    @property
    def avg(self) -> float:
        """Average observed value."""
        with self._lock:
            if self._count == 0:
                return 0.0
            return self._sum / self._count

    def summary(self) -> dict[str, float | int]:
        """Count, sum, min, max, and avg as a dictionary."""
        return {
            "count": self.count,
            "sum": self.sum,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
        }

    def reset(self) -> None:
        """Reset all values."""
        with self._lock:
            self._count = 0
            self._sum = 0.0
            self._min = float("inf")
            self._max = float("-inf")


class MetricsCollector:
    """
    Collects and manages labelled metrics.

    Example:
        ```python
        metrics = MetricsCollector()

        metrics.counter("requests", labels={"endpoint": "get_user"}).inc()
        metrics.histogram("latency_ms", labels={"endpoint": "get_user"}).observe(4.2)

        print(metrics.to_dict())
        ```
    """

    def __init__(self) -> None:
        """Initialize collector."""
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def counter(
        self,
        name: str,
        description: str = "",
        labels: dict[str, str] | None = None,
    ) -> Counter:
        """
        Get or create a counter.

        Args:
            name: Metric name
            description: Human-readable description
            labels: Labels for the counter

        Returns:
            Counter instance
        """
        key = metric_key(name, labels)
        with self._lock:
            if key not in self._counters:
                self._counters[key] = Counter(
                    name=name,
                    description=description,
                    labels=dict(labels or {}),
                )
            return self._counters[key]

    def histogram(
        self,
        name: str,
        description: str = "",
        labels: dict[str, str] | None = None,
    ) -> Histogram:
        """
        Get or create a histogram.

        Args:
            name: Metric name
            description: Human-readable description
            labels: Labels for the histogram

        Returns:
            Histogram instance
        """
        key = metric_key(name, labels)
        with self._lock:
            if key not in self._histograms:
                self._histograms[key] = Histogram(
                    name=name,
                    description=description,
                    labels=dict(labels or {}),
                )
            return self._histograms[key]

    def get_counter(
        self, name: str, labels: dict[str, str] | None = None
    ) -> Counter | None:
        """Look up a counter without creating it."""
        with self._lock:
            return self._counters.get(metric_key(name, labels))

    def get_histogram(
        self, name: str, labels: dict[str, str] | None = None
    ) -> Histogram | None:
        """Look up a histogram without creating it."""
        with self._lock:
            return self._histograms.get(metric_key(name, labels))

    def reset_all(self) -> None:
        """Reset all metrics."""
        with self._lock:
            for counter in self._counters.values():
                counter.reset()
            for histogram in self._histograms.values():
                histogram.reset()

    def to_dict(self) -> dict[str, dict[str, object]]:
        """
        Export all metrics as a dictionary keyed by ``metric_key``.

        Each entry carries the metric description next to its values.

        Returns:
            Dictionary of metric values
        """
        with self._lock:
            result: dict[str, dict[str, object]] = {}

            for key, counter in self._counters.items():
                result[key] = {
                    "description": counter.description,
                    "value": counter.value,
                }

            for key, histogram in self._histograms.items():
                result[key] = {
                    "description": histogram.description,
                    **histogram.summary(),
                }

            return result
