"""
spanhooks - Span lifecycle observers for tracing clients.

Extensions observe span starts, renames, tags, and finishes without
touching the tracer's span management.

Quick Start:
    ```python
    from spanhooks import BaseSpanObserver, Tracer

    class SlowSpanObserver(BaseSpanObserver):
        def on_finish(self, options):
            ...

    class DatabaseObserver:
        def on_start_span(self, span, operation_name, options):
            if not operation_name.startswith("db."):
                return None  # not interested
            return SlowSpanObserver()

    tracer = Tracer(service_name="checkout")
    tracer.register_contrib_observer(DatabaseObserver())

    with tracer.span("db.query") as span:
        span.set_tag("db.rows", 3)
    ```

Legacy Observers:
    ```python
    # One-phase observers receive every span
    tracer.register_observer(RPCMetricsObserver())
    ```
"""

from spanhooks.core.config import TracerConfig
from spanhooks.core.options import (
    FinishOptions,
    LogRecord,
    ReferenceType,
    SpanReference,
    StartSpanOptions,
)
from spanhooks.metrics.collector import Counter, Histogram, MetricsCollector
from spanhooks.metrics.rpc import RPCMetricsObserver
from spanhooks.observers.audit import AuditLogObserver
from spanhooks.observers.base import (
    BaseSpanObserver,
    ContribObserver,
    Observer,
    SpanObserver,
)
from spanhooks.observers.composite import (
    NOOP_SPAN_OBSERVER,
    CompositeObserver,
    CompositeSpanObserver,
)
from spanhooks.observers.isolation import (
    IsolatingObserver,
    IsolatingSpanObserver,
    isolate,
)
from spanhooks.observers.legacy import LegacyObserverAdapter
from spanhooks.tracing.span import Span, SpanContext
from spanhooks.tracing.tracer import Tracer

__version__ = "0.1.0"

__all__ = [
    # Config & options
    "TracerConfig",
    "StartSpanOptions",
    "FinishOptions",
    "LogRecord",
    "ReferenceType",
    "SpanReference",
    # Observer protocols
    "SpanObserver",
    "ContribObserver",
    "Observer",
    "BaseSpanObserver",
    # Dispatch
    "CompositeObserver",
    "CompositeSpanObserver",
    "NOOP_SPAN_OBSERVER",
    "LegacyObserverAdapter",
    "IsolatingObserver",
    "IsolatingSpanObserver",
    "isolate",
    # Tracing
    "Span",
    "SpanContext",
    "Tracer",
    # Built-in observers
    "AuditLogObserver",
    "RPCMetricsObserver",
    # Metrics
    "MetricsCollector",
    "Counter",
    "Histogram",
]
