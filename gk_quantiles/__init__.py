"""Streaming ε-approximate quantiles with mergeable Greenwald–Khanna summaries."""

from gk_quantiles.core.sketch import Entry, QuantileSummary, merge_all
from gk_quantiles.exceptions import (
    ConfigurationError,
    EmptySummaryError,
    InternalInvariantViolation,
    InvalidArgumentError,
)

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "EmptySummaryError",
    "Entry",
    "InternalInvariantViolation",
    "InvalidArgumentError",
    "QuantileSummary",
    "merge_all",
]
