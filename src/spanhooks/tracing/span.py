"""
Span - Represents a unit of work in a trace.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

from spanhooks.core.options import FinishOptions, LogRecord
from spanhooks.observers.composite import NOOP_SPAN_OBSERVER, CompositeSpanObserver

if TYPE_CHECKING:
    from spanhooks.core.options import SpanReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpanContext:
    """
    Identifiers of a span within its trace.
    """

    trace_id: str
    """Unique ID for the entire trace."""

    span_id: str
    """Unique ID for this span."""

    parent_span_id: str | None = None
    """ID of the parent span, if any."""

    @classmethod
    def create(cls, parent: SpanContext | None = None) -> SpanContext:
        """Create a new span context, optionally as child of parent."""
        trace_id = parent.trace_id if parent else uuid4().hex[:16]
        return cls(
            trace_id=trace_id,
            span_id=uuid4().hex[:16],
            parent_span_id=parent.span_id if parent else None,
        )


@dataclass
class Span:
    """
    A span represents a single unit of work.

    Spans are created by ``Tracer.start_span``. Mutations are forwarded to
    the span's observer, which fans them out to every observer interested
    in this span.

    Example:
        ```python
        with tracer.start_span("process_request") as span:
            span.set_tag("user_id", 123)
            result = do_work()
            span.set_tag("result_size", len(result))
        # Span finished on exit
        ```
    """

    operation_name: str
    """Name of the operation (e.g., "GET /users", "db.query")."""

    context: SpanContext = field(default_factory=SpanContext.create)
    """Tracing context with IDs."""

    start_time: float = field(default_factory=time.time)
    """When the span started, in seconds since the epoch."""

    finish_time: float | None = None
    """When the span finished (None if still running)."""

    tags: dict[str, object] = field(default_factory=dict)
    """Key-value tags attached to the span."""

    logs: list[LogRecord] = field(default_factory=list)
    """Log records added during the span."""

    references: tuple[SpanReference, ...] = ()
    """References the span was started with."""

    observer: CompositeSpanObserver = field(default=NOOP_SPAN_OBSERVER, repr=False)
    """Receives this span's lifecycle notifications."""

    # === Mutators ===

    def set_operation_name(self, operation_name: str) -> Span:
        """
        Rename the span.

        Args:
            operation_name: New operation name

        Returns:
            Self for chaining
        """
        self.operation_name = operation_name
        self.observer.on_set_operation_name(operation_name)
        return self

    def set_tag(self, key: str, value: object) -> Span:
        """
        Set a tag on the span.

        Args:
            key: Tag name
            value: Tag value

        Returns:
            Self for chaining
        """
        self.tags[key] = value
        self.observer.on_set_tag(key, value)
        return self

    def log_kv(
        self, fields: Mapping[str, object], timestamp: float | None = None
    ) -> Span:
        """
        Record key-value fields on the span.

        Args:
            fields: Fields to log
            timestamp: Seconds since the epoch (None = now)

        Returns:
            Self for chaining
        """
        self.logs.append(
            LogRecord(
                timestamp=time.time() if timestamp is None else timestamp,
                fields=dict(fields),
            )
        )
        return self

    def finish(
        self,
        finish_time: float | None = None,
        log_records: list[LogRecord] | tuple[LogRecord, ...] = (),
    ) -> None:
        """
        Finish the span and notify observers.

        Finishing an already finished span does nothing.

        Args:
            finish_time: Seconds since the epoch (None = now)
            log_records: Extra log records to add at finish
        """
        if self.finish_time is not None:
            logger.debug("Span %s already finished", self.context.span_id)
            return

        options = FinishOptions(finish_time=finish_time, log_records=tuple(log_records))
        self.finish_time = time.time() if finish_time is None else finish_time
        self.logs.extend(options.log_records)
        self.observer.on_finish(options)

    # === Properties ===

    @property
    def duration_ms(self) -> float | None:
        """Duration in milliseconds, or None if not finished."""
        if self.finish_time is None:
            return None
        return (self.finish_time - self.start_time) * 1000

    @property
    def is_finished(self) -> bool:
        """Whether finish() has been called."""
        return self.finish_time is not None

    @property
    def trace_id(self) -> str:
        """Shortcut to context.trace_id."""
        return self.context.trace_id

    @property
    def span_id(self) -> str:
        """Shortcut to context.span_id."""
        return self.context.span_id

    @property
    def parent_span_id(self) -> str | None:
        """Shortcut to context.parent_span_id."""
        return self.context.parent_span_id

    # === Context Manager ===

    def __enter__(self) -> Span:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit context manager, tagging errors and finishing the span."""
        if exc_val is not None:
            self.set_tag("error", True)
            self.log_kv({"event": "error", "message": str(exc_val)})
        self.finish()
