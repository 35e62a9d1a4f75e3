"""
Retained observation of a Greenwald–Khanna summary.
"""

from operator import attrgetter
from typing import Any, NamedTuple


class Entry(NamedTuple):
    """
    A 3-tuple (v, g, Δ) of the GK summary.

    - value: an observation from the stream
    - g: difference in minimum rank from the previous entry (g_i = r_min(v_i) - r_min(v_{i-1}))
    - delta: difference between the maximum and minimum rank of this entry (Δ_i = r_max(v_i) - r_min(v_i))

    Entries are positioned by ``value`` only, see ``entry_value``.
    """

    value: Any
    g: int
    delta: int


# Sort key used by every ordered search over a summary
entry_value = attrgetter("value")
