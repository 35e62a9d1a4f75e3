import logging
import os
from typing import Dict

from gk_quantiles.exceptions import ConfigurationError
from gk_quantiles.service.constants import DEFAULT_EPSILON, DEFAULT_HTTP_PORT, DEFAULT_METRICS_QUANTILES

logger: logging.Logger = logging.getLogger(__name__)


def _parse_quantiles(raw: str) -> tuple:
    try:
        phis = tuple(float(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise ConfigurationError(f"GK_METRICS_QUANTILES must be a comma separated list of floats: {raw}") from e

    for phi in phis:
        if not 0 <= phi <= 1:
            raise ConfigurationError(f"GK_METRICS_QUANTILES values must be in [0, 1], got {phi}")
    return phis


def get_service_config() -> Dict:
    """Get service configuration from environment variables."""

    raw_epsilon = os.getenv("GK_DEFAULT_EPSILON", str(DEFAULT_EPSILON))
    try:
        epsilon = float(raw_epsilon)
    except ValueError as e:
        raise ConfigurationError(f"GK_DEFAULT_EPSILON must be a float: {raw_epsilon}") from e
    if not 0 < epsilon < 1:
        raise ConfigurationError("GK_DEFAULT_EPSILON must be in the range (0, 1)", epsilon=epsilon)

    raw_quantiles = os.getenv("GK_METRICS_QUANTILES")
    if raw_quantiles:
        metrics_quantiles = _parse_quantiles(raw_quantiles)
    else:
        metrics_quantiles = DEFAULT_METRICS_QUANTILES

    raw_port = os.getenv("HTTP_PORT", str(DEFAULT_HTTP_PORT))
    try:
        http_port = int(raw_port)
    except ValueError as e:
        raise ConfigurationError(f"HTTP_PORT must be an integer: {raw_port}") from e

    logger.debug(f"Service configuration: epsilon={epsilon}, quantiles={metrics_quantiles}, port={http_port}")
    return {
        "default_epsilon": epsilon,
        "metrics_quantiles": metrics_quantiles,
        "http_port": http_port,
    }
