"""
Composite observers - Fan span lifecycle notifications out to extensions.

``CompositeObserver`` holds the tracer-level observers. At span start it
asks each one whether it wants the span and bundles the resulting span
observers into a ``CompositeSpanObserver`` that the span keeps for its
lifetime.

Exceptions raised by observers are not caught: they abort the remaining
fan-out and propagate to the caller. Wrap observers with
``spanhooks.observers.isolation.isolate`` to log and continue instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spanhooks.core.options import FinishOptions, StartSpanOptions
    from spanhooks.observers.base import ContribObserver, SpanObserver
    from spanhooks.tracing.span import Span

logger = logging.getLogger(__name__)


class CompositeSpanObserver:
    """
    Dispatches span notifications to a fixed, ordered set of span observers.

    Membership is set at construction and never changes.
    """

    __slots__ = ("_observers",)

    def __init__(self, observers: Iterable[SpanObserver] = ()) -> None:
        object.__setattr__(self, "_observers", tuple(observers))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def observers(self) -> tuple[SpanObserver, ...]:
        """Member span observers, in notification order."""
        return self._observers

    def __len__(self) -> int:
        return len(self._observers)

    def __repr__(self) -> str:
        return f"CompositeSpanObserver(observers={len(self._observers)})"

    def on_set_operation_name(self, operation_name: str) -> None:
        for observer in self._observers:
            observer.on_set_operation_name(operation_name)

    def on_set_tag(self, key: str, value: object) -> None:
        for observer in self._observers:
            observer.on_set_tag(key, value)

    def on_finish(self, options: FinishOptions) -> None:
        for observer in self._observers:
            observer.on_finish(options)


NOOP_SPAN_OBSERVER = CompositeSpanObserver()
"""Shared span observer for spans that no observer is interested in."""


class CompositeObserver:
    """
    Dispatches span starts to the registered tracer-level observers.

    Observers are consulted in registration order. Registration is
    append-only and must finish before spans are started: ``register`` is
    not safe to call while another thread is inside ``on_start_span``.

    Example:
        ```python
        composite = CompositeObserver()
        composite.register(my_observer)
        composite.register(LegacyObserverAdapter(old_observer))

        span_observer = composite.on_start_span(span, "GET /users", options)
        span_observer.on_set_tag("http.status_code", 200)
        span_observer.on_finish(FinishOptions())
        ```
    """

    def __init__(self, observers: Iterable[ContribObserver] = ()) -> None:
        self._observers: list[ContribObserver] = list(observers)

    @property
    def observers(self) -> tuple[ContribObserver, ...]:
        """Registered observers, in registration order."""
        return tuple(self._observers)

    def __len__(self) -> int:
        return len(self._observers)

    def register(self, observer: ContribObserver) -> None:
        """
        Append an observer.

        No uniqueness check: registering the same observer twice notifies
        it twice.

        Args:
            observer: Tracer-level observer to add
        """
        self._observers.append(observer)
        logger.debug("Registered span observer %r", observer)

    def on_start_span(
        self,
        span: Span,
        operation_name: str,
        options: StartSpanOptions,
    ) -> CompositeSpanObserver:
        """
        Collect span observers from every interested observer.

        Args:
            span: The span being started
            operation_name: Operation name the span was started with
            options: Start options

        Returns:
            A new CompositeSpanObserver with the interested observers'
            span observers in registration order, or ``NOOP_SPAN_OBSERVER``
            if none is interested
        """
        span_observers: list[SpanObserver] = []
        for observer in self._observers:
            span_observer = observer.on_start_span(span, operation_name, options)
            if span_observer is not None:
                span_observers.append(span_observer)

        if not span_observers:
            return NOOP_SPAN_OBSERVER
        return CompositeSpanObserver(span_observers)
