import logging
import threading
from typing import Dict, Iterable, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from gk_quantiles.core.sketch import QuantileSummary
from gk_quantiles.service.constants import PROMETHEUS_METRIC_PREFIX, QUANTILE_LABEL, SUMMARY_LABEL

logger: logging.Logger = logging.getLogger(__name__)

OBSERVATIONS_METRIC = "summary_observations"
ENTRIES_METRIC = "summary_entries"
QUANTILE_METRIC = "summary_quantile"


class PrometheusPublisher:
    """Publishes the state of named quantile summaries as Prometheus gauges."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self.registry: CollectorRegistry = registry
        # prometheus_client doesn't expose public methods to retrieve
        # a registered gauge by name, so they are tracked here.
        self._gauges: Dict[str, Gauge] = {}
        self._gauges_lock: threading.RLock = threading.RLock()

    def _get_or_create_gauge(self, metric_name: str, documentation: str, labelnames: Iterable[str]) -> Gauge:
        full_name = self._get_full_metric_name(metric_name)
        with self._gauges_lock:
            if full_name not in self._gauges:
                self._gauges[full_name] = Gauge(
                    name=full_name,
                    documentation=documentation,
                    labelnames=list(labelnames),
                    registry=self.registry,
                )
            return self._gauges[full_name]

    def publish(self, name: str, summary: QuantileSummary, quantiles: Iterable[float] = ()) -> None:
        """
        Publish observation count, entry count and selected quantiles of a summary.

        Quantiles are only published for non-empty summaries.
        """
        observations = self._get_or_create_gauge(
            OBSERVATIONS_METRIC, "Number of observations incorporated in a quantile summary", [SUMMARY_LABEL]
        )
        entries = self._get_or_create_gauge(
            ENTRIES_METRIC, "Number of entries retained by a quantile summary", [SUMMARY_LABEL]
        )
        observations.labels(**{SUMMARY_LABEL: name}).set(summary.n)
        entries.labels(**{SUMMARY_LABEL: name}).set(summary.size())

        if summary.n == 0:
            logger.debug(f"Published empty summary {name}")
            return

        quantile_gauge = self._get_or_create_gauge(
            QUANTILE_METRIC, "Approximate quantile of a summary", [SUMMARY_LABEL, QUANTILE_LABEL]
        )
        published: Dict[str, float] = {}
        for phi in quantiles:
            value = float(summary.quantile(phi))
            quantile_gauge.labels(**{SUMMARY_LABEL: name, QUANTILE_LABEL: str(phi)}).set(value)
            published[str(phi)] = value

        logger.debug(f"Published summary {name} n={summary.n} size={summary.size()} quantiles={published}")

    def remove(self, name: str) -> None:
        """Remove every label set published for a summary."""
        with self._gauges_lock:
            for gauge in self._gauges.values():
                to_remove = []
                for labels in list(gauge._metrics.keys()):
                    labels_dict = dict(zip(gauge._labelnames, labels))
                    if labels_dict.get(SUMMARY_LABEL) == name:
                        to_remove.append(labels)

                for labels in to_remove:
                    gauge.remove(*labels)

    def get_value(self, metric_name: str, labels: Dict[str, str]) -> Optional[float]:
        """Read back a published value, or None if it was never published."""
        return self.registry.get_sample_value(self._get_full_metric_name(metric_name), labels)

    def _get_full_metric_name(self, metric_name: str) -> str:
        return f"{PROMETHEUS_METRIC_PREFIX}{metric_name.lower()}"
