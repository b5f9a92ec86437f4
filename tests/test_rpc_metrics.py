"""
Tests for the metrics collector and the RPC metrics observer.
"""

import pytest

from spanhooks.core.options import FinishOptions, StartSpanOptions
from spanhooks.metrics.collector import Counter, Histogram, MetricsCollector, metric_key
from spanhooks.metrics.rpc import EndpointNames, RPCMetricsObserver
from spanhooks.tracing.tracer import Tracer


class TestMetrics:
    """Tests for metric classes."""

    def test_counter_increment(self):
        counter = Counter("requests")
        counter.inc()
        counter.inc(5)
        assert counter.value == 6

    def test_counter_no_negative(self):
        counter = Counter("requests")
        with pytest.raises(ValueError):
            counter.inc(-1)

    def test_histogram_observe(self):
        hist = Histogram("latency")
        hist.observe(10)
        hist.observe(30)

        assert hist.count == 2
        assert hist.sum == 40
        assert hist.min == 10
        assert hist.max == 30
        assert hist.avg == 20

    def test_empty_histogram(self):
        hist = Histogram("latency")
        assert hist.min == 0.0
        assert hist.max == 0.0
        assert hist.avg == 0.0

    def test_metric_key_sorts_labels(self):
        assert metric_key("requests") == "requests"
        assert (
            metric_key("requests", {"error": "false", "endpoint": "a"})
            == 'requests{endpoint="a",error="false"}'
        )


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_same_labels_same_metric(self):
        collector = MetricsCollector()

        first = collector.counter("requests", labels={"endpoint": "a"})
        second = collector.counter("requests", labels={"endpoint": "a"})
        other = collector.counter("requests", labels={"endpoint": "b"})

        assert first is second
        assert first is not other

    def test_to_dict_and_reset(self):
        collector = MetricsCollector()
        collector.counter("requests").inc(3)
        collector.histogram("latency", labels={"endpoint": "a"}).observe(25)

        snapshot = collector.to_dict()
        assert snapshot["requests"] == {"description": "", "value": 3}
        assert snapshot['latency{endpoint="a"}']["count"] == 1

        collector.reset_all()
        assert collector.counter("requests").value == 0
        assert collector.histogram("latency", labels={"endpoint": "a"}).count == 0

    def test_to_dict_includes_description(self):
        collector = MetricsCollector()
        collector.counter("requests", "Total requests").inc()
        collector.histogram("latency", "Request latency").observe(5)

        snapshot = collector.to_dict()

        assert snapshot["requests"]["description"] == "Total requests"
        assert snapshot["latency"]["description"] == "Request latency"
        assert snapshot["latency"]["avg"] == 5

    def test_get_does_not_create(self):
        collector = MetricsCollector()

        assert collector.get_counter("requests", {"endpoint": "a"}) is None
        assert collector.get_histogram("latency") is None
        assert collector.to_dict() == {}

        created = collector.counter("requests", labels={"endpoint": "a"})
        assert collector.get_counter("requests", {"endpoint": "a"}) is created


class TestEndpointNames:
    def test_normalizes_invalid_characters(self):
        names = EndpointNames()
        assert names.normalize("GET /users/{id}") == "GET--users--id-"
        assert names.normalize("db.query_v2") == "db.query_v2"

    def test_bounded(self):
        names = EndpointNames(max_endpoints=2)

        assert names.normalize("a") == "a"
        assert names.normalize("b") == "b"
        assert names.normalize("c") == "other"
        assert names.normalize("a") == "a"
        assert len(names) == 2

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            EndpointNames(max_endpoints=0)


class TestRPCMetricsObserver:
    """Tests for request metrics recorded from server spans."""

    @pytest.fixture
    def rpc_metrics(self) -> RPCMetricsObserver:
        return RPCMetricsObserver()

    def test_server_span_recorded(self, rpc_metrics):
        options = StartSpanOptions.create(start_time=10.0, tags={"span.kind": "server"})
        span_observer = rpc_metrics.on_start_span("get_user", options)

        span_observer.on_finish(FinishOptions(finish_time=10.25))

        assert rpc_metrics.requests("get_user") == 1
        latency = rpc_metrics.latency("get_user")
        assert latency["count"] == 1
        assert latency["avg"] == pytest.approx(250.0)

    def test_client_span_ignored(self, rpc_metrics):
        options = StartSpanOptions.create(tags={"span.kind": "client"})
        rpc_metrics.on_start_span("call_backend", options).on_finish(FinishOptions())

        assert rpc_metrics.collector.to_dict() == {}

    def test_kind_and_error_set_after_start(self, rpc_metrics):
        span_observer = rpc_metrics.on_start_span("get_user", StartSpanOptions(start_time=1.0))

        span_observer.on_set_tag("span.kind", "server")
        span_observer.on_set_tag("error", True)
        span_observer.on_finish(FinishOptions(finish_time=2.0))

        assert rpc_metrics.requests("get_user", error=True) == 1
        assert rpc_metrics.requests("get_user") == 0

    def test_string_error_tag(self, rpc_metrics):
        options = StartSpanOptions.create(
            start_time=1.0, tags={"span.kind": "server", "error": "TRUE"}
        )
        rpc_metrics.on_start_span("op", options).on_finish(FinishOptions(finish_time=1.0))

        assert rpc_metrics.requests("op", error=True) == 1

    def test_rename_before_finish_uses_new_name(self, rpc_metrics):
        options = StartSpanOptions.create(start_time=1.0, tags={"span.kind": "server"})
        span_observer = rpc_metrics.on_start_span("pending", options)

        span_observer.on_set_operation_name("get_order")
        span_observer.on_finish(FinishOptions(finish_time=1.5))

        assert rpc_metrics.requests("get_order") == 1
        assert rpc_metrics.requests("pending") == 0

    def test_endpoints_beyond_limit_fold_into_other(self):
        rpc_metrics = RPCMetricsObserver(max_endpoints=1)
        options = StartSpanOptions.create(start_time=1.0, tags={"span.kind": "server"})

        for name in ("first", "second", "third"):
            rpc_metrics.on_start_span(name, options).on_finish(FinishOptions(finish_time=1.0))

        assert rpc_metrics.requests("first") == 1
        assert rpc_metrics.requests("other") == 2

    def test_through_tracer_as_legacy_observer(self, rpc_metrics):
        tracer = Tracer(observers=[rpc_metrics])

        for _ in range(3):
            span = tracer.start_span("list_items", tags={"span.kind": "server"})
            span.finish()
        tracer.start_span("internal").finish()

        assert rpc_metrics.requests("list_items") == 3
        assert rpc_metrics.latency("list_items")["count"] == 3

    def test_reads_do_not_create_metrics(self, rpc_metrics):
        """Test querying an unknown endpoint leaves the collector empty."""
        assert rpc_metrics.requests("never_called") == 0.0
        assert rpc_metrics.requests("never_called", error=True) == 0.0
        assert rpc_metrics.latency("never_called") == {
            "count": 0,
            "sum": 0.0,
            "min": 0.0,
            "max": 0.0,
            "avg": 0.0,
        }

        assert rpc_metrics.collector.to_dict() == {}

    def test_reads_use_normalized_endpoint(self, rpc_metrics):
        """Test operation names with spaces and slashes read back as recorded."""
        options = StartSpanOptions.create(start_time=1.0, tags={"span.kind": "server"})
        rpc_metrics.on_start_span("GET /users", options).on_finish(
            FinishOptions(finish_time=1.5)
        )

        assert rpc_metrics.requests("GET /users") == 1
        assert rpc_metrics.requests("GET--users") == 1
        assert rpc_metrics.latency("GET /users")["avg"] == pytest.approx(500.0)

    def test_reads_do_not_claim_endpoint_slots(self):
        """Test lookups of unseen names never push recorded ones into "other"."""
        rpc_metrics = RPCMetricsObserver(max_endpoints=1)
        options = StartSpanOptions.create(start_time=1.0, tags={"span.kind": "server"})

        rpc_metrics.requests("looked_up_first")
        rpc_metrics.on_start_span("real", options).on_finish(FinishOptions(finish_time=1.0))

        assert rpc_metrics.requests("real") == 1
        assert rpc_metrics.requests("other") == 0
