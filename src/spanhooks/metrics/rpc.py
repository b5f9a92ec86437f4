"""
RPC Metrics - Request counts and latency per server endpoint.

``RPCMetricsObserver`` is a one-phase observer: it receives every span
and decides at finish time whether the span was a server-side request
(``span.kind == "server"``). The kind and error tags may be set at start
or any time before finish.
"""

from __future__ import annotations

import re
import threading
import time
from typing import TYPE_CHECKING

from spanhooks.metrics.collector import MetricsCollector

if TYPE_CHECKING:
    from spanhooks.core.options import FinishOptions, StartSpanOptions

SPAN_KIND_TAG = "span.kind"
SPAN_KIND_SERVER = "server"
ERROR_TAG = "error"
OTHER_ENDPOINT = "other"

REQUESTS_METRIC = "requests"
LATENCY_METRIC = "request_latency_ms"

_INVALID_ENDPOINT_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def _is_error(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() == "true"
    return False


class EndpointNames:
    """
    Normalizes operation names into a bounded set of endpoint names.

    Characters outside ``[A-Za-z0-9_.-]`` become ``-``. Once
    ``max_endpoints`` distinct names are known, new names map to
    ``"other"``.
    """

    def __init__(self, max_endpoints: int = 200) -> None:
        if max_endpoints <= 0:
            raise ValueError(f"max_endpoints must be positive, got {max_endpoints}")
        self._max_endpoints = max_endpoints
        self._names: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def normalize(self, operation_name: str) -> str:
        """Return the endpoint name to report for an operation."""
        name = _INVALID_ENDPOINT_CHARS.sub("-", operation_name)
        with self._lock:
            if name in self._names:
                return name
            if len(self._names) >= self._max_endpoints:
                return OTHER_ENDPOINT
            self._names.add(name)
            return name


class RPCSpanObserver:
    """Tracks the kind, error state, and name of one span."""

    def __init__(
        self,
        metrics: RPCMetricsObserver,
        operation_name: str,
        options: StartSpanOptions,
    ) -> None:
        self._metrics = metrics
        self._lock = threading.Lock()
        self._operation_name = operation_name
        self._start_time = (
            options.start_time if options.start_time is not None else time.time()
        )
        self._kind: str | None = None
        self._error = False
        for key, value in options.tags.items():
            self._handle_tag(key, value)

    def _handle_tag(self, key: str, value: object) -> None:
        if key == SPAN_KIND_TAG:
            self._kind = str(value)
        elif key == ERROR_TAG:
            self._error = _is_error(value)

    def on_set_operation_name(self, operation_name: str) -> None:
        with self._lock:
            self._operation_name = operation_name

    def on_set_tag(self, key: str, value: object) -> None:
        with self._lock:
            self._handle_tag(key, value)

    def on_finish(self, options: FinishOptions) -> None:
        with self._lock:
            if self._kind != SPAN_KIND_SERVER:
                return
            operation_name = self._operation_name
            error = self._error
            start_time = self._start_time

        finish_time = (
            options.finish_time if options.finish_time is not None else time.time()
        )
        self._metrics.record(
            operation_name,
            error=error,
            latency_ms=(finish_time - start_time) * 1000,
        )


class RPCMetricsObserver:
    """
    Records ``requests`` and ``request_latency_ms`` for server spans.

    Both metrics carry ``endpoint`` and ``error`` labels.

    Example:
        ```python
        rpc_metrics = RPCMetricsObserver()
        tracer.register_observer(rpc_metrics)

        with tracer.span("get_user", tags={"span.kind": "server"}):
            ...

        print(rpc_metrics.requests("get_user"))  # 1.0
        ```
    """

    def __init__(
        self,
        collector: MetricsCollector | None = None,
        *,
        max_endpoints: int = 200,
    ) -> None:
        """
        Initialize RPC metrics observer.

        Args:
            collector: Where to record metrics (default: a new collector)
            max_endpoints: Distinct endpoints tracked before using "other"
        """
        self._collector = collector or MetricsCollector()
        self._endpoints = EndpointNames(max_endpoints)

    def __repr__(self) -> str:
        return f"RPCMetricsObserver(endpoints={len(self._endpoints)})"

    @property
    def collector(self) -> MetricsCollector:
        """Collector holding the recorded metrics."""
        return self._collector

    def on_start_span(
        self,
        operation_name: str,
        options: StartSpanOptions,
    ) -> RPCSpanObserver:
        return RPCSpanObserver(self, operation_name, options)

    def record(self, operation_name: str, *, error: bool, latency_ms: float) -> None:
        """Record one finished server request."""
        labels = {
            "endpoint": self._endpoints.normalize(operation_name),
            "error": "true" if error else "false",
        }
        self._collector.counter(
            REQUESTS_METRIC, "Server requests by endpoint", labels
        ).inc()
        self._collector.histogram(
            LATENCY_METRIC, "Server request latency by endpoint", labels
        ).observe(latency_ms)

    def _read_labels(self, endpoint: str, error: bool) -> dict[str, str]:
        # Same substitution as record(), without claiming an endpoint slot
        return {
            "endpoint": _INVALID_ENDPOINT_CHARS.sub("-", endpoint),
            "error": "true" if error else "false",
        }

    def requests(self, endpoint: str, *, error: bool = False) -> float:
        """Number of requests recorded for an endpoint (0.0 if none)."""
        counter = self._collector.get_counter(
            REQUESTS_METRIC, self._read_labels(endpoint, error)
        )
        return counter.value if counter is not None else 0.0

    def latency(self, endpoint: str, *, error: bool = False) -> dict[str, float | int]:
        """Latency summary (count, sum, min, max, avg) for an endpoint."""
        histogram = self._collector.get_histogram(
            LATENCY_METRIC, self._read_labels(endpoint, error)
        )
        if histogram is None:
            return {"count": 0, "sum": 0.0, "min": 0.0, "max": 0.0, "avg": 0.0}
        return histogram.summary()
