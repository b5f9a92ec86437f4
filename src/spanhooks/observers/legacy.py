"""
Legacy Observer Adapter - Run one-phase observers as ContribObservers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from spanhooks.observers.base import BaseSpanObserver

if TYPE_CHECKING:
    from spanhooks.core.options import StartSpanOptions
    from spanhooks.observers.base import Observer, SpanObserver
    from spanhooks.tracing.span import Span

# Stands in for a legacy observer that returned None
_EMPTY_SPAN_OBSERVER = BaseSpanObserver()


class LegacyObserverAdapter:
    """
    Wraps a legacy ``Observer`` as a ``ContribObserver``.

    Legacy observers cannot decline a span, so the adapter is always
    interested and forwards every span start to the wrapped observer.
    If the legacy observer returns None anyway, the adapter still reports
    interest with a span observer that ignores every notification.

    Example:
        ```python
        composite.register(LegacyObserverAdapter(rpc_metrics_observer))
        ```
    """

    __slots__ = ("observer",)

    def __init__(self, observer: Observer) -> None:
        self.observer = observer

    def __repr__(self) -> str:
        return f"LegacyObserverAdapter({self.observer!r})"

    def on_start_span(
        self,
        span: Span,
        operation_name: str,
        options: StartSpanOptions,
    ) -> SpanObserver:
        span_observer = self.observer.on_start_span(operation_name, options)
        if span_observer is None:
            return _EMPTY_SPAN_OBSERVER
        return span_observer
