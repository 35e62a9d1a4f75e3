# pylint: disable=line-too-long
"""
Merge of two Greenwald–Khanna summaries built over disjoint observation sets.

The values of g do not change on merge, as they are lower bounds on the number of
observations between consecutive entries. Δ has to grow for entries that land inside
the other summary's observed range. As an example, take

    a = [(0, 1, 0), (20, 99, 0)]    # 100 values between 0 and 20
    b = [(10, 1, 0), (30, 49, 0)]   # 50 values between 10 and 30

The entry 10 from b could sit right after 0 or right before 20 in the combined
stream. The largest extra uncertainty an entry from b can suffer is
max(g_a + Δ_a) = ⌊2 ε_a n_a⌋, and symmetrically ⌊2 ε_b n_b⌋ for entries from a.
Entries below (or above) the whole other side are copied unmodified.

The merged summary carries ε_ab = max(ε_a, ε_b), which keeps the main invariant:
⌊2 ε_a n_a⌋ + ⌊2 ε_b n_b⌋ <= ⌊2 ε_ab (n_a + n_b)⌋.
"""

from typing import List, Sequence

from .compression import uncertainty_budget
from .entry import Entry


def merge_entries(
    a_entries: Sequence[Entry],
    a_epsilon: float,
    a_n: int,
    b_entries: Sequence[Entry],
    b_epsilon: float,
    b_n: int,
) -> List[Entry]:
    """
    Interleave two ordered entry sequences, widening Δ where the sides overlap.

    Neither input is modified. On equal values the entry from ``a`` is emitted first.

    :return: A new ordered list of entries, not yet compressed
    """
    additional_a_delta = uncertainty_budget(b_epsilon, b_n)
    additional_b_delta = uncertainty_budget(a_epsilon, a_n)

    merged: List[Entry] = []
    started_a, started_b = False, False
    i, j = 0, 0

    while i < len(a_entries) and j < len(b_entries):
        if not b_entries[j].value < a_entries[i].value:
            entry = a_entries[i]
            if started_b:
                entry = entry._replace(delta=entry.delta + additional_a_delta)
            started_a = True
            i += 1
        else:
            entry = b_entries[j]
            if started_a:
                entry = entry._replace(delta=entry.delta + additional_b_delta)
            started_b = True
            j += 1
        merged.append(entry)

    # At most one side has entries left, all outside the other side's range
    merged.extend(a_entries[i:])
    merged.extend(b_entries[j:])
    return merged
