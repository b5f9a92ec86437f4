"""
Tracer - Creates spans and notifies observers about them.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from spanhooks.core.config import TracerConfig
from spanhooks.core.options import ReferenceType, SpanReference, StartSpanOptions
from spanhooks.metrics.rpc import RPCMetricsObserver
from spanhooks.observers.composite import CompositeObserver
from spanhooks.observers.isolation import isolate
from spanhooks.observers.legacy import LegacyObserverAdapter
from spanhooks.tracing.span import Span, SpanContext

if TYPE_CHECKING:
    from spanhooks.observers.base import ContribObserver, Observer

# Context variable to track the active span
_active_span: ContextVar[Span | None] = ContextVar("active_span", default=None)


class Tracer:
    """
    Creates spans and dispatches their lifecycle to registered observers.

    Observers are registered during setup, before spans are started.

    Example:
        ```python
        tracer = Tracer(service_name="checkout")
        tracer.register_contrib_observer(AuditLogObserver(include=["db.*"]))

        with tracer.span("handle_request", tags={"span.kind": "server"}) as span:
            with tracer.span("db.query") as child:
                child.set_tag("db.rows", 3)
        ```
    """

    def __init__(
        self,
        config: TracerConfig | None = None,
        *,
        service_name: str | None = None,
        observers: Iterable[Observer] = (),
        contrib_observers: Iterable[ContribObserver] = (),
    ) -> None:
        """
        Initialize tracer.

        Args:
            config: Tracer configuration (default: TracerConfig())
            service_name: Overrides config.service_name
            observers: Legacy one-phase observers to register
            contrib_observers: Two-phase observers to register
        """
        config = config or TracerConfig()
        self._config = config
        self._service_name = service_name or config.service_name
        self._observer = CompositeObserver()
        self._rpc_metrics: RPCMetricsObserver | None = None

        if config.rpc_metrics:
            self._rpc_metrics = RPCMetricsObserver(max_endpoints=config.max_endpoints)
            self.register_observer(self._rpc_metrics)

        for observer in observers:
            self.register_observer(observer)
        for contrib_observer in contrib_observers:
            self.register_contrib_observer(contrib_observer)

    # === Setup ===

    def register_observer(self, observer: Observer) -> None:
        """
        Register a legacy one-phase observer.

        The observer is adapted to the two-phase interface and receives
        every span.
        """
        self.register_contrib_observer(LegacyObserverAdapter(observer))

    def register_contrib_observer(self, observer: ContribObserver) -> None:
        """Register a two-phase observer."""
        if self._config.isolate_observer_failures:
            observer = isolate(observer)
        self._observer.register(observer)

    # === Spans ===

    def start_span(
        self,
        operation_name: str,
        *,
        child_of: Span | SpanContext | None = None,
        references: Iterable[SpanReference] = (),
        tags: Mapping[str, object] | None = None,
        start_time: float | None = None,
    ) -> Span:
        """
        Start a span.

        Remember to call span.finish() when done, or use the span as a
        context manager.

        Args:
            operation_name: Span name
            child_of: Parent span or context (adds a CHILD_OF reference)
            references: Additional references to other spans
            tags: Initial tags
            start_time: Seconds since the epoch (None = now)

        Returns:
            The started span
        """
        refs = list(references)
        if child_of is not None:
            parent = child_of.context if isinstance(child_of, Span) else child_of
            refs.insert(0, SpanReference(type=ReferenceType.CHILD_OF, context=parent))

        all_tags: dict[str, object] = {"service": self._service_name}
        all_tags.update(tags or {})
        options = StartSpanOptions.create(
            start_time=start_time, tags=all_tags, references=refs
        )

        parent_context = refs[0].context if refs else None
        span = Span(
            operation_name=operation_name,
            context=SpanContext.create(parent_context),
            tags=dict(options.tags),
            references=options.references,
        )
        if start_time is not None:
            span.start_time = start_time

        span.observer = self._observer.on_start_span(span, operation_name, options)
        return span

    @contextmanager
    def span(
        self,
        operation_name: str,
        *,
        tags: Mapping[str, object] | None = None,
    ) -> Generator[Span]:
        """
        Start a span as a context manager.

        The parent is the active span, and the new span is active until
        the block exits. Exceptions mark the span with an ``error`` tag.

        Args:
            operation_name: Span name
            tags: Initial tags

        Yields:
            The started span
        """
        span = self.start_span(
            operation_name, child_of=_active_span.get(), tags=tags
        )
        token = _active_span.set(span)
        try:
            with span:
                yield span
        finally:
            _active_span.reset(token)

    # === Properties ===

    @property
    def config(self) -> TracerConfig:
        """Tracer configuration."""
        return self._config

    @property
    def service_name(self) -> str:
        """Service name added to every span."""
        return self._service_name

    @property
    def observer(self) -> CompositeObserver:
        """Composite observer holding every registered observer."""
        return self._observer

    @property
    def rpc_metrics(self) -> RPCMetricsObserver | None:
        """Built-in RPC metrics observer, if enabled in config."""
        return self._rpc_metrics

    @property
    def active_span(self) -> Span | None:
        """Span of the innermost enclosing ``span()`` block."""
        return _active_span.get()
