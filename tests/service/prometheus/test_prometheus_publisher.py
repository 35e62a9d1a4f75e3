import threading

import pytest
from prometheus_client import CollectorRegistry, Gauge

from gk_quantiles.core.sketch import QuantileSummary
from gk_quantiles.service.constants import PROMETHEUS_METRIC_PREFIX
from gk_quantiles.service.prometheus.prometheus_publisher import (
    ENTRIES_METRIC,
    OBSERVATIONS_METRIC,
    QUANTILE_METRIC,
    PrometheusPublisher,
)


class TestPrometheusPublisher:

    @pytest.fixture
    def test_registry(self) -> CollectorRegistry:
        """Create a fresh registry for each test."""
        return CollectorRegistry()

    @pytest.fixture
    def publisher(self, test_registry: CollectorRegistry) -> PrometheusPublisher:
        """Create PrometheusPublisher with test registry."""
        return PrometheusPublisher(registry=test_registry)

    @pytest.fixture
    def summary(self) -> QuantileSummary:
        summary = QuantileSummary(epsilon=0.01)
        summary.insert_batch(range(1, 101))
        return summary

    def test_publish_counts(self, publisher: PrometheusPublisher, summary: QuantileSummary):
        publisher.publish("latency", summary)

        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "latency"}) == 100
        assert publisher.get_value(ENTRIES_METRIC, {"summary": "latency"}) == summary.size()

    def test_publish_registers_prefixed_gauges(self, publisher: PrometheusPublisher, summary: QuantileSummary):
        publisher.publish("latency", summary, [0.5])

        for metric_name in [OBSERVATIONS_METRIC, ENTRIES_METRIC, QUANTILE_METRIC]:
            full_name = f"{PROMETHEUS_METRIC_PREFIX}{metric_name}"
            assert full_name in publisher.registry._names_to_collectors

        gauge: Gauge = publisher.registry._names_to_collectors[f"{PROMETHEUS_METRIC_PREFIX}{QUANTILE_METRIC}"]
        assert set(gauge._labelnames) == {"summary", "quantile"}

    def test_publish_quantiles(self, publisher: PrometheusPublisher, summary: QuantileSummary):
        publisher.publish("latency", summary, [0.0, 0.5, 1.0])

        assert publisher.get_value(QUANTILE_METRIC, {"summary": "latency", "quantile": "0.0"}) == 1.0
        assert publisher.get_value(QUANTILE_METRIC, {"summary": "latency", "quantile": "0.5"}) == float(
            summary.quantile(0.5)
        )
        assert publisher.get_value(QUANTILE_METRIC, {"summary": "latency", "quantile": "1.0"}) == 100.0

    def test_publish_empty_summary_skips_quantiles(self, publisher: PrometheusPublisher):
        publisher.publish("empty", QuantileSummary(epsilon=0.01), [0.5])

        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "empty"}) == 0
        assert publisher.get_value(ENTRIES_METRIC, {"summary": "empty"}) == 0
        assert publisher.get_value(QUANTILE_METRIC, {"summary": "empty", "quantile": "0.5"}) is None

    def test_publish_overwrites_previous_values(self, publisher: PrometheusPublisher):
        summary = QuantileSummary(epsilon=0.01)
        summary.insert(1.0)
        publisher.publish("latency", summary)

        summary.insert(2.0)
        publisher.publish("latency", summary)

        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "latency"}) == 2

    def test_gauges_are_reused(self, publisher: PrometheusPublisher, summary: QuantileSummary):
        publisher.publish("a", summary, [0.5])
        publisher.publish("b", summary, [0.5])

        assert len(publisher._gauges) == 3
        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "a"}) == 100
        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "b"}) == 100

    def test_remove(self, publisher: PrometheusPublisher, summary: QuantileSummary):
        publisher.publish("a", summary, [0.5, 0.9])
        publisher.publish("b", summary, [0.5])

        publisher.remove("a")

        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "a"}) is None
        assert publisher.get_value(QUANTILE_METRIC, {"summary": "a", "quantile": "0.9"}) is None
        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "b"}) == 100
        assert publisher.get_value(QUANTILE_METRIC, {"summary": "b", "quantile": "0.5"}) is not None

    def test_remove_unknown_summary(self, publisher: PrometheusPublisher):
        publisher.remove("missing")

    def test_get_value_unpublished(self, publisher: PrometheusPublisher):
        assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": "missing"}) is None

    def test_thread_safety(self, publisher: PrometheusPublisher):
        """Concurrent publishing creates each gauge once."""
        errors = []

        def worker(worker_id: int) -> None:
            try:
                summary = QuantileSummary(epsilon=0.05)
                summary.insert_batch(range(worker_id * 10, worker_id * 10 + 10))
                publisher.publish(f"worker-{worker_id}", summary, [0.5])
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(publisher._gauges) == 3
        for i in range(10):
            assert publisher.get_value(OBSERVATIONS_METRIC, {"summary": f"worker-{i}"}) == 10
