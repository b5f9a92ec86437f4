"""
Observer Protocols - Interfaces for span lifecycle extensions.

Two generations of tracer-level observers exist:

- ``ContribObserver`` (two-phase): asked at span start whether it is
  interested, and returns a per-span ``SpanObserver`` only if it is.
- ``Observer`` (one-phase, legacy): always returns a ``SpanObserver``.
  Register it through ``LegacyObserverAdapter``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from spanhooks.core.options import FinishOptions, StartSpanOptions
    from spanhooks.tracing.span import Span


@runtime_checkable
class SpanObserver(Protocol):
    """
    Protocol for per-span observers.

    Created by a tracer-level observer when a span starts, then notified
    about that span's mutations until it finishes.

    Example:
        ```python
        class PrintingSpanObserver:
            def on_set_operation_name(self, operation_name: str) -> None:
                print("renamed to", operation_name)

            def on_set_tag(self, key: str, value: object) -> None:
                print("tag", key, value)

            def on_finish(self, options: FinishOptions) -> None:
                print("finished")
        ```
    """

    def on_set_operation_name(self, operation_name: str) -> None:
        """Called after the span's operation name changes."""
        ...

    def on_set_tag(self, key: str, value: object) -> None:
        """Called after a tag is set on the span."""
        ...

    def on_finish(self, options: FinishOptions) -> None:
        """Called once when the span finishes."""
        ...


class ContribObserver(Protocol):
    """
    Protocol for tracer-level observers.

    Registered once with the tracer, before spans are started.
    """

    def on_start_span(
        self,
        span: Span,
        operation_name: str,
        options: StartSpanOptions,
    ) -> SpanObserver | None:
        """
        Decide whether to observe a newly started span.

        Args:
            span: The span being started
            operation_name: Operation name the span was started with
            options: Start options (tags, start time, references)

        Returns:
            A span observer for this span, or None if not interested
        """
        ...


class Observer(Protocol):
    """
    Protocol for legacy one-phase observers.

    Every started span gets a span observer; there is no way to opt out.
    Prefer ``ContribObserver`` for new code.
    """

    def on_start_span(
        self,
        operation_name: str,
        options: StartSpanOptions,
    ) -> SpanObserver:
        """Create a span observer for a newly started span."""
        ...


class BaseSpanObserver:
    """
    Base class for span observers with no-op defaults.

    Subclasses override only the notifications they care about.
    """

    def on_set_operation_name(self, operation_name: str) -> None:
        """Operation name changed. Default: no-op."""
        pass

    def on_set_tag(self, key: str, value: object) -> None:
        """Tag set. Default: no-op."""
        pass

    def on_finish(self, options: FinishOptions) -> None:
        """Span finished. Default: no-op."""
        pass
