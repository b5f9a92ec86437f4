"""Tracing - Spans and the tracer that dispatches their lifecycle."""

from spanhooks.tracing.span import Span, SpanContext
from spanhooks.tracing.tracer import Tracer

__all__ = [
    "Span",
    "SpanContext",
    "Tracer",
]
