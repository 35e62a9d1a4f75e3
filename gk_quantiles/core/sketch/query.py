# pylint: disable=line-too-long
"""
Read-only queries over the ordered entries of a Greenwald–Khanna summary.

Ranks are 1-based, consistent with the GK paper.
"""

import bisect
from math import floor
from typing import Any, Sequence

from .entry import Entry, entry_value


def select_quantile(entries: Sequence[Entry], n: int, epsilon: float, phi: float) -> Any:
    """
    Walk the summary and return the value whose rank is within ⌊εn⌋ of ⌊φn⌋.

    The scan stops at the first entry whose maximum possible rank overshoots
    r + ⌊εn⌋ and returns the value before it. If no entry overshoots, the last
    value is returned.

    :param entries: Non-empty ordered entries
    :param n: Number of observations summarised by ``entries``
    :param epsilon: Error factor of the summary
    :param phi: Quantile in [0, 1]
    """
    r = floor(phi * n)
    en = floor(epsilon * n)

    first = entries[0]
    prev = first.value
    prev_rmin = first.g

    for entry in entries[1:]:
        rmax = prev_rmin + entry.g + entry.delta
        if rmax > r + en:
            return prev

        prev_rmin += entry.g
        prev = entry.value

    return prev


def estimate_rank(entries: Sequence[Entry], n: int, value: Any) -> int:
    """
    Estimate the number of observations less than or equal to ``value``.

    Returns 0 below the minimum, n at or above the maximum and otherwise the
    r_max of the rightmost entry whose value is <= ``value``.
    """
    if value < entries[0].value:
        return 0
    if value >= entries[-1].value:
        return n

    pos = bisect.bisect_right(entries, value, key=entry_value) - 1

    r_min = 0
    for entry in entries[: pos + 1]:
        r_min += entry.g
    return r_min + entries[pos].delta
