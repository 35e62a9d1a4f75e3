# pylint: disable=line-too-long
"""
Greenwald–Khanna quantile summary for streaming quantile estimation.

Implementation of the space-efficient streaming quantile summary algorithm from:
M. Greenwald and S. Khanna. Space-efficient online computation of quantile summaries.
In SIGMOD, pages 58–66, 2001.

The summary keeps an ε-approximate view of a data stream of totally ordered values,
answering quantile queries whose rank is within εn of the requested rank, using
O(1/ε × log(εn)) entries. Summaries built independently (for example one per shard)
can be merged without re-reading the raw observations.

Note that ranks are 1-based indexed, consistent with the GK paper.
"""

import bisect
import logging
from functools import reduce
from typing import Any, Iterable, List, Tuple

from gk_quantiles.exceptions import ConfigurationError, EmptySummaryError, InvalidArgumentError

from . import compression
from .entry import Entry, entry_value
from .merge import merge_entries
from .query import estimate_rank, select_quantile

logger = logging.getLogger(__name__)


class QuantileSummary:
    """
    Greenwald–Khanna summary of a stream of totally ordered values.

    The summary consists of entries (v, g, Δ) sorted by v where:
    - v: observed value
    - g: difference in rank from previous entry (g_i = r_min(v_i) - r_min(v_{i-1}))
    - Δ: maximum error in rank (Δ_i = r_max(v_i) - r_min(v_i))

    The first and last entries always hold the exact minimum and maximum with Δ = 0.
    A summary is not safe for concurrent mutation; callers serialize access.
    """

    def __init__(self, epsilon: float = 0.01):
        """
        Initialize an empty summary.

        :param epsilon: Error factor ε ∈ (0, 1).
                        Quantile answers are within εn ranks of the requested rank.
                        Smaller ε requires more space but provides better accuracy.
        :raises ConfigurationError: If epsilon is not in the range (0, 1)
        """
        if not 0 < epsilon < 1:
            raise ConfigurationError("epsilon must be in the range (0, 1)", epsilon=epsilon)

        self._epsilon = epsilon
        self._n = 0
        self._entries: List[Entry] = []

    @property
    def epsilon(self) -> float:
        """The error factor of this summary."""
        return self._epsilon

    @property
    def n(self) -> int:
        """Number of observations incorporated, including through merges."""
        return self._n

    @property
    def entries(self) -> Tuple[Entry, ...]:
        """Snapshot of the retained entries in ascending value order."""
        return tuple(self._entries)

    def insert(self, value: Any) -> None:
        """
        Insert a new observation.

        A new minimum or maximum is inserted as (v, 1, 0), any other value as
        (v, 1, ⌊2εn⌋) with n counted before this insertion.

        :param value: The value to insert, comparable with previously inserted values
        """
        position = bisect.bisect(self._entries, value, key=entry_value)

        delta = 0
        if 0 < position < len(self._entries):
            delta = compression.uncertainty_budget(self._epsilon, self._n)

        self._entries.insert(position, Entry(value, 1, delta))
        self._n += 1

        if self._n % compression.compress_period(self._epsilon) == 0:
            self.compress()

    def insert_batch(self, values: Iterable[Any]) -> None:
        """
        Insert every value of an iterable, such as a list or a numpy array.

        :param values: Iterable of values to insert
        """
        for value in values:
            self.insert(value)

    def compress(self) -> None:
        """Remove entries that are redundant for answering any quantile within the ε bound."""
        p = compression.uncertainty_budget(self._epsilon, self._n)
        removed = compression.compress(self._entries, p)
        if removed:
            logger.debug(f"Compressed {removed} entries at n={self._n}, p={p}, size={len(self._entries)}")

    def quantile(self, phi: float) -> Any:
        """
        Query for the φ-quantile (approximate).

        :param phi: Quantile to query, must be in [0, 1]
        :return: A retained value whose rank is within εn of ⌊φn⌋
        :raises InvalidArgumentError: If phi is not in [0, 1]
        :raises EmptySummaryError: If no observation has been inserted
        """
        if not 0 <= phi <= 1:
            raise InvalidArgumentError("phi must be in the range [0, 1]")

        if not self._entries:
            raise EmptySummaryError("Cannot query quantile from empty summary")

        return select_quantile(self._entries, self._n, self._epsilon, phi)

    def quantiles(self, phis: Iterable[float]) -> List[Any]:
        """Query several quantiles at once, in the order given."""
        return [self.quantile(phi) for phi in phis]

    def rank(self, value: Any) -> int:
        """
        Estimate the rank of a value, i.e. the number of observations <= value.

        :param value: The value to estimate the rank for
        :return: Estimated rank (0 to n)
        :raises EmptySummaryError: If summary is empty
        """
        if not self._entries:
            raise EmptySummaryError("Cannot estimate rank from empty summary")
        return estimate_rank(self._entries, self._n, value)

    def cdf(self, value: Any) -> float:
        """
        Estimate the CDF at a given value: F(x) = P(X <= x).

        :param value: The value to estimate the CDF at
        :return: Estimated CDF value in [0, 1]
        """
        if not self._entries:
            raise EmptySummaryError("Cannot estimate CDF from empty summary")
        return self.rank(value) / self._n

    def min(self) -> Any:
        """Return the minimum value observed."""
        if not self._entries:
            raise EmptySummaryError("Cannot get min from empty summary")
        return self._entries[0].value

    def max(self) -> Any:
        """Return the maximum value observed."""
        if not self._entries:
            raise EmptySummaryError("Cannot get max from empty summary")
        return self._entries[-1].value

    def __len__(self) -> int:
        """Return the number of elements observed."""
        return self._n

    def size(self) -> int:
        """Return the number of entries in the summary. Space is O(1/ε × log(εn))."""
        return len(self._entries)

    def merge(self, other: "QuantileSummary") -> "QuantileSummary":
        """
        Merge two summaries into a new summary valid for the union of their streams.

        Neither this summary nor ``other`` is modified. The result carries the
        larger of the two error factors.

        :param other: Another summary built over a disjoint set of observations
        :return: A new, compressed summary
        """
        merged = QuantileSummary(max(self._epsilon, other._epsilon))
        merged._n = self._n + other._n
        merged._entries = merge_entries(
            self._entries,
            self._epsilon,
            self._n,
            other._entries,
            other._epsilon,
            other._n,
        )
        merged.compress()

        logger.debug(
            f"Merged summaries of {self._n} and {other._n} observations into {merged.size()} entries"
        )
        return merged

    def __repr__(self) -> str:
        return f"QuantileSummary(epsilon={self._epsilon}, n={self._n}, size={len(self._entries)})"


def merge_all(summaries: Iterable[QuantileSummary]) -> QuantileSummary:
    """
    Fold ``merge`` over several summaries, e.g. one per shard.

    :param summaries: Non-empty iterable of summaries
    :return: A new summary covering every input's observations
    :raises InvalidArgumentError: If no summary is given
    """
    summaries = list(summaries)
    if not summaries:
        raise InvalidArgumentError("At least one summary is required to merge")
    if len(summaries) == 1:
        return summaries[0].merge(QuantileSummary(summaries[0].epsilon))
    return reduce(QuantileSummary.merge, summaries)
