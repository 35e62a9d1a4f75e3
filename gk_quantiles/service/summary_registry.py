import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from gk_quantiles.core.sketch import QuantileSummary, merge_all
from gk_quantiles.exceptions import InvalidArgumentError
from gk_quantiles.service.config import get_service_config
from gk_quantiles.service.exceptions import SummaryExistsError, SummaryNotFoundError
from gk_quantiles.service.prometheus.prometheus_publisher import PrometheusPublisher

logger: logging.Logger = logging.getLogger(__name__)


class SummaryRegistry:
    """
    Named quantile summaries shared by the HTTP endpoints.

    A QuantileSummary is not safe for concurrent mutation, so every operation
    on a registered summary runs under the registry lock.
    """

    def __init__(
        self,
        publisher: Optional[PrometheusPublisher] = None,
        service_config: Optional[Dict] = None,
    ) -> None:
        self.service_config: Dict = service_config or get_service_config()
        self.publisher: Optional[PrometheusPublisher] = publisher
        self._summaries: Dict[str, QuantileSummary] = {}
        self._lock: threading.RLock = threading.RLock()

    @property
    def default_epsilon(self) -> float:
        return self.service_config["default_epsilon"]

    def _get(self, name: str) -> QuantileSummary:
        try:
            return self._summaries[name]
        except KeyError:
            raise SummaryNotFoundError(name) from None

    def _publish(self, name: str) -> None:
        if self.publisher is not None:
            self.publisher.publish(name, self._summaries[name], self.service_config["metrics_quantiles"])

    def create(self, name: str, epsilon: Optional[float] = None) -> QuantileSummary:
        """
        Register a new empty summary.

        :raises SummaryExistsError: If the name is already registered
        :raises ConfigurationError: If epsilon is not in (0, 1)
        """
        summary = QuantileSummary(epsilon if epsilon is not None else self.default_epsilon)
        with self._lock:
            if name in self._summaries:
                raise SummaryExistsError(f"Summary already exists: {name}")
            self._summaries[name] = summary
            self._publish(name)
        logger.info(f"Created summary {name} with epsilon={summary.epsilon}")
        return summary

    def get(self, name: str) -> QuantileSummary:
        with self._lock:
            return self._get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._summaries)

    def insert(self, name: str, values: Iterable[Any]) -> Dict[str, Any]:
        """Insert observations into a summary and return its description."""
        with self._lock:
            summary = self._get(name)
            summary.insert_batch(values)
            self._publish(name)
            return self._describe(name, summary)

    def quantiles(self, name: str, phis: Iterable[float]) -> Dict[float, Any]:
        with self._lock:
            summary = self._get(name)
            return {phi: summary.quantile(phi) for phi in phis}

    def rank(self, name: str, value: Any) -> Dict[str, float]:
        with self._lock:
            summary = self._get(name)
            return {"rank": summary.rank(value), "cdf": summary.cdf(value)}

    def merge(self, target: str, sources: List[str], epsilon: Optional[float] = None) -> Dict[str, Any]:
        """
        Store the merge of ``sources`` under ``target``, replacing any existing target.

        Source summaries are left untouched. When ``epsilon`` is given, the sources are
        first merged into an empty summary with that error factor, so the result carries
        max(epsilon, source epsilons).

        :raises InvalidArgumentError: If no source is given
        :raises SummaryNotFoundError: If a source does not exist
        """
        if not sources:
            raise InvalidArgumentError("At least one source summary is required to merge")

        with self._lock:
            summaries = [self._get(source) for source in sources]
            if epsilon is not None:
                summaries.insert(0, QuantileSummary(epsilon))
            merged = merge_all(summaries)
            self._summaries[target] = merged
            self._publish(target)
            logger.info(f"Merged {sources} into {target}: n={merged.n}, size={merged.size()}")
            return self._describe(target, merged)

    def delete(self, name: str) -> None:
        with self._lock:
            self._get(name)
            del self._summaries[name]
            if self.publisher is not None:
                self.publisher.remove(name)
        logger.info(f"Deleted summary {name}")

    def describe(self, name: str) -> Dict[str, Any]:
        with self._lock:
            return self._describe(name, self._get(name))

    @staticmethod
    def _describe(name: str, summary: QuantileSummary) -> Dict[str, Any]:
        description: Dict[str, Any] = {
            "name": name,
            "epsilon": summary.epsilon,
            "n": summary.n,
            "size": summary.size(),
            "min": None,
            "max": None,
        }
        if summary.n > 0:
            description["min"] = summary.min()
            description["max"] = summary.max()
        return description


# Global shared SummaryRegistry instance
_shared_summary_registry = None


def get_shared_summary_registry() -> SummaryRegistry:
    """
    Get the shared SummaryRegistry instance used by the endpoints.

    Returns:
        The singleton SummaryRegistry instance
    """
    global _shared_summary_registry
    if _shared_summary_registry is None:
        _shared_summary_registry = SummaryRegistry(publisher=PrometheusPublisher())
    return _shared_summary_registry
