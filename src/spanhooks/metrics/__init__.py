"""Metrics - Labelled metrics and the RPC metrics observer."""

from spanhooks.metrics.collector import Counter, Histogram, MetricsCollector, metric_key
from spanhooks.metrics.rpc import EndpointNames, RPCMetricsObserver, RPCSpanObserver

__all__ = [
    "Counter",
    "Histogram",
    "MetricsCollector",
    "metric_key",
    "EndpointNames",
    "RPCMetricsObserver",
    "RPCSpanObserver",
]
