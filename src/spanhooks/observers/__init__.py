"""Observers - Span lifecycle extension points and dispatch."""

from spanhooks.observers.audit import AuditLogObserver, AuditSpanObserver
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

__all__ = [
    # Protocols & Base
    "SpanObserver",
    "ContribObserver",
    "Observer",
    "BaseSpanObserver",
    # Dispatch
    "CompositeObserver",
    "CompositeSpanObserver",
    "NOOP_SPAN_OBSERVER",
    "LegacyObserverAdapter",
    # Isolation
    "IsolatingObserver",
    "IsolatingSpanObserver",
    "isolate",
    # Built-in
    "AuditLogObserver",
    "AuditSpanObserver",
]
