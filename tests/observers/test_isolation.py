"""
Tests for opt-in observer failure isolation.
"""

import logging
from unittest.mock import Mock

import pytest

from spanhooks.core.options import FinishOptions, StartSpanOptions
from spanhooks.observers.base import BaseSpanObserver
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
from spanhooks.tracing.span import Span


class ExplodingSpanObserver(BaseSpanObserver):
    def on_set_operation_name(self, operation_name):
        raise RuntimeError("rename failed")

    def on_set_tag(self, key, value):
        raise RuntimeError("tag failed")

    def on_finish(self, options):
        raise RuntimeError("finish failed")


class ExplodingObserver:
    def on_start_span(self, span, operation_name, options):
        raise RuntimeError("start failed")


class TestIsolatingSpanObserver:
    """Tests for per-span isolation."""

    @pytest.mark.parametrize(
        "method,args",
        [
            ("on_set_operation_name", ("x",)),
            ("on_set_tag", ("k", "v")),
            ("on_finish", (FinishOptions(),)),
        ],
    )
    def test_failure_is_logged_and_swallowed(self, caplog, method, args):
        wrapper = IsolatingSpanObserver(ExplodingSpanObserver())

        with caplog.at_level(logging.ERROR, logger="spanhooks.observers.isolation"):
            getattr(wrapper, method)(*args)

        assert len(caplog.records) == 1
        assert method in caplog.records[0].getMessage()
        assert caplog.records[0].exc_info is not None

    def test_forwards_arguments(self):
        inner = Mock()
        wrapper = IsolatingSpanObserver(inner)
        options = FinishOptions(finish_time=1.0)

        wrapper.on_set_operation_name("renamed")
        wrapper.on_set_tag("k", 42)
        wrapper.on_finish(options)

        inner.on_set_operation_name.assert_called_once_with("renamed")
        inner.on_set_tag.assert_called_once_with("k", 42)
        inner.on_finish.assert_called_once_with(options)

    def test_later_members_still_notified(self):
        """Test one failing member does not suppress the others."""
        after = Mock()
        span_observer = CompositeSpanObserver(
            [IsolatingSpanObserver(ExplodingSpanObserver()), IsolatingSpanObserver(after)]
        )

        span_observer.on_finish(FinishOptions())

        after.on_finish.assert_called_once()


class TestIsolatingObserver:
    """Tests for tracer-level isolation."""

    def test_start_failure_means_not_interested(self, caplog):
        wrapper = IsolatingObserver(ExplodingObserver())

        with caplog.at_level(logging.ERROR, logger="spanhooks.observers.isolation"):
            result = wrapper.on_start_span(Span("op"), "op", StartSpanOptions())

        assert result is None
        assert "start failed" in caplog.text

    def test_not_interested_passes_through(self):
        inner = Mock()
        inner.on_start_span.return_value = None
        wrapper = IsolatingObserver(inner)

        assert wrapper.on_start_span(Span("op"), "op", StartSpanOptions()) is None

    def test_handle_is_wrapped(self):
        handle = BaseSpanObserver()
        inner = Mock()
        inner.on_start_span.return_value = handle
        wrapper = IsolatingObserver(inner)

        result = wrapper.on_start_span(Span("op"), "op", StartSpanOptions())

        assert isinstance(result, IsolatingSpanObserver)
        assert result.observer is handle

    def test_composite_skips_failing_observer(self):
        """Test a failing observer is excluded and the rest dispatch normally."""
        handle = Mock()
        healthy = Mock()
        healthy.on_start_span.return_value = handle
        composite = CompositeObserver([isolate(ExplodingObserver()), isolate(healthy)])

        span_observer = composite.on_start_span(Span("op"), "op", StartSpanOptions())

        assert len(span_observer) == 1
        span_observer.on_set_tag("k", "v")
        handle.on_set_tag.assert_called_once_with("k", "v")

    def test_all_failing_yields_noop(self):
        composite = CompositeObserver([isolate(ExplodingObserver())])

        result = composite.on_start_span(Span("op"), "op", StartSpanOptions())

        assert result is NOOP_SPAN_OBSERVER


class TestIsolate:
    def test_wraps_once(self):
        observer = Mock()

        wrapped = isolate(observer)

        assert isinstance(wrapped, IsolatingObserver)
        assert isolate(wrapped) is wrapped
