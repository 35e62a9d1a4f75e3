from .entry import Entry
from .greenwald_khanna_summary import QuantileSummary, merge_all

__all__ = ["Entry", "QuantileSummary", "merge_all"]
