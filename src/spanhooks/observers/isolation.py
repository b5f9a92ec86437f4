"""
Failure isolation for observers.

By default an exception raised by one observer stops the notification
from reaching the observers after it. Wrapping an observer with
``isolate`` logs its exceptions instead, so the others are still notified.

A tracer-level observer that fails in ``on_start_span`` is treated as not
interested in that span.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spanhooks.core.options import FinishOptions, StartSpanOptions
    from spanhooks.observers.base import ContribObserver, SpanObserver
    from spanhooks.tracing.span import Span

logger = logging.getLogger(__name__)


class IsolatingSpanObserver:
    """Span observer wrapper that logs and swallows exceptions."""

    __slots__ = ("observer",)

    def __init__(self, observer: SpanObserver) -> None:
        self.observer = observer

    def __repr__(self) -> str:
        return f"IsolatingSpanObserver({self.observer!r})"

    def on_set_operation_name(self, operation_name: str) -> None:
        try:
            self.observer.on_set_operation_name(operation_name)
        except Exception:
            logger.exception(
                "Span observer %r failed in on_set_operation_name", self.observer
            )

    def on_set_tag(self, key: str, value: object) -> None:
        try:
            self.observer.on_set_tag(key, value)
        except Exception:
            logger.exception(
                "Span observer %r failed in on_set_tag(%r)", self.observer, key
            )

    def on_finish(self, options: FinishOptions) -> None:
        try:
            self.observer.on_finish(options)
        except Exception:
            logger.exception("Span observer %r failed in on_finish", self.observer)


class IsolatingObserver:
    """
    Tracer-level observer wrapper that logs and swallows exceptions.

    Span observers returned by the wrapped observer are wrapped in
    ``IsolatingSpanObserver``.
    """

    __slots__ = ("observer",)

    def __init__(self, observer: ContribObserver) -> None:
        self.observer = observer

    def __repr__(self) -> str:
        return f"IsolatingObserver({self.observer!r})"

    def on_start_span(
        self,
        span: Span,
        operation_name: str,
        options: StartSpanOptions,
    ) -> SpanObserver | None:
        try:
            span_observer = self.observer.on_start_span(span, operation_name, options)
        except Exception:
            logger.exception(
                "Observer %r failed in on_start_span(%r); skipping span",
                self.observer,
                operation_name,
            )
            return None
        if span_observer is None:
            return None
        return IsolatingSpanObserver(span_observer)


def isolate(observer: ContribObserver) -> IsolatingObserver:
    """
    Wrap an observer so its failures cannot affect other observers.

    Already isolated observers are returned unchanged.
    """
    if isinstance(observer, IsolatingObserver):
        return observer
    return IsolatingObserver(observer)
