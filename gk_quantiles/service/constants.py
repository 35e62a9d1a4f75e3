# summary defaults
DEFAULT_EPSILON = 0.01
DEFAULT_METRICS_QUANTILES = (0.5, 0.9, 0.95, 0.99)

# Prometheus
PROMETHEUS_METRIC_PREFIX = "gk_"
SUMMARY_LABEL = "summary"
QUANTILE_LABEL = "quantile"

# HTTP
DEFAULT_HTTP_PORT = 8080
