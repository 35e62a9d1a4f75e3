# pylint: disable=line-too-long
"""
COMPRESS operation of the Greenwald–Khanna summary (Section 3.2 of the GK paper).

Adjacent entries are coalesced when doing so cannot push any entry's rank
uncertainty past the global budget p = ⌊2εn⌋. An entry t_i may be deleted if BOTH:
1. Safety: g_i + g_{i+1} + Δ_{i+1} < p
2. Band: BAND(Δ_i, p) ≤ BAND(Δ_{i+1}, p)

The first entry (exact minimum) and the last entry (exact maximum) are never deleted.
"""

from math import floor
from typing import List

from gk_quantiles.exceptions import InternalInvariantViolation

from .entry import Entry


def uncertainty_budget(epsilon: float, n: int) -> int:
    """Return p = ⌊2εn⌋, the largest g + Δ any entry may carry."""
    return floor(2 * epsilon * n)


def compress_period(epsilon: float) -> int:
    """
    Number of insertions between two compressions, ⌊1/(2ε)⌋.

    For ε > 0.5 the period would be zero, in which case every insertion compresses.
    """
    return max(1, floor(1 / (2 * epsilon)))


def band(delta: int, p: int) -> int:
    """
    Compute which band Δ lies in: ⌊log2(p - Δ + 1)⌋.

    :raises InternalInvariantViolation: If Δ exceeds the budget p
    """
    if p < delta:
        raise InternalInvariantViolation(f"delta={delta} exceeds uncertainty budget p={p}")

    # bit_length gives an exact integer log2 without float rounding
    return (p - delta + 1).bit_length() - 1


def can_delete(entries: List[Entry], i: int, p: int) -> bool:
    """
    Decide whether the internal entry at index i may be folded into its successor.

    :param entries: The ordered entries of a summary
    :param i: Index in [1, len(entries) - 2]
    :param p: Current uncertainty budget
    """
    if not 0 < i < len(entries) - 1:
        raise InternalInvariantViolation(f"index {i} is not internal to a summary of {len(entries)} entries")

    current, successor = entries[i], entries[i + 1]

    safety = current.g + successor.g + successor.delta < p
    optimal = band(current.delta, p) <= band(successor.delta, p)

    return safety and optimal


def delete(entries: List[Entry], i: int) -> None:
    """Remove the entry at index i and fold its g into the entry that takes its place."""
    removed = entries.pop(i)
    successor = entries[i]
    entries[i] = successor._replace(g=successor.g + removed.g)


def compress(entries: List[Entry], p: int) -> int:
    """
    Compress ``entries`` in place.

    Indices are scanned from the second-to-last down to the second so that deletions
    never shift an index that has not been examined yet.

    :param entries: The ordered entries of a summary
    :param p: Current uncertainty budget ⌊2εn⌋
    :return: Number of entries removed
    """
    removed = 0
    for i in range(len(entries) - 2, 0, -1):
        if can_delete(entries, i, p):
            delete(entries, i)
            removed += 1
    return removed
