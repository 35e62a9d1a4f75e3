# pylint: disable=line-too-long
"""
Two-sample Kolmogorov–Smirnov test over quantile summaries.

Follows the streaming KS construction of:
Lall, A., 2015. Data streaming algorithms for the Kolmogorov–Smirnov test.
IEEE International Conference on Big Data (Big Data), pp. 95-104.
https://doi.org/10.1109/BigData.2015.7363746

Each sample is reduced to a QuantileSummary, so the statistic is computed from
O(1/ε × log(εn)) entries per side instead of the raw observations. Every CDF
estimate is off by at most 2ε, hence the statistic by at most 4ε.
"""

from typing import Any, Dict, Iterable

import numpy as np
from scipy.stats import kstwo

from gk_quantiles.core.sketch import QuantileSummary
from gk_quantiles.exceptions import EmptySummaryError


def ks_statistic(reference: QuantileSummary, current: QuantileSummary) -> float:
    """
    Approximate D = max_x |F_ref(x) - F_cur(x)| from two summaries.

    The entries of both summaries are walked together in value order and each CDF
    is read off the r_max of the last entry passed. Equal values move both sides.

    :raises EmptySummaryError: If either summary is empty
    """
    if reference.n == 0:
        raise EmptySummaryError("Reference summary is empty")
    if current.n == 0:
        raise EmptySummaryError("Current summary is empty")

    ref, cur = reference.entries, current.entries
    i, j = 0, 0
    ref_r_min = cur_r_min = 0
    ref_cdf = cur_cdf = 0.0
    d = 0.0

    while i < len(ref) or j < len(cur):
        take_ref = j == len(cur) or (i < len(ref) and not cur[j].value < ref[i].value)
        take_cur = i == len(ref) or (j < len(cur) and not ref[i].value < cur[j].value)

        if take_ref:
            ref_r_min += ref[i].g
            ref_cdf = (ref_r_min + ref[i].delta) / reference.n
            i += 1
        if take_cur:
            cur_r_min += cur[j].g
            cur_cdf = (cur_r_min + cur[j].delta) / current.n
            j += 1

        d = max(d, abs(ref_cdf - cur_cdf))

    return d


def ks_p_value(statistic: float, n_reference: int, n_current: int) -> float:
    """
    Two-sided p-value of a two-sample KS statistic.

    Same asymptotic treatment as scipy.stats.ks_2samp: the one-sample kstwo
    distribution at the effective size n1*n2/(n1+n2).
    """
    if n_reference == 0 or n_current == 0:
        raise EmptySummaryError("Both summaries must be non-empty")

    n_eff = round(n_reference * n_current / (n_reference + n_current))
    return float(kstwo.sf(statistic, n_eff))


class KolmogorovSmirnovStreaming:
    """
    Drift detector holding a reference and a current summary with a common ε.

        >>> ks = KolmogorovSmirnovStreaming(epsilon=0.01)
        >>> ks.insert_reference_batch(training_values)
        >>> for x in live_values:
        ...     ks.insert_current(x)
        >>> ks.kstest(alpha=0.05)["drift_detected"]
    """

    def __init__(self, epsilon: float = 0.01):
        """
        :param epsilon: Error factor of both summaries
        :raises ConfigurationError: If epsilon is not in (0, 1)
        """
        self.epsilon = epsilon
        self._reference = QuantileSummary(epsilon=epsilon)
        self._current = QuantileSummary(epsilon=epsilon)

    def insert_reference(self, value: float) -> None:
        self._reference.insert(value)

    def insert_current(self, value: float) -> None:
        self._current.insert(value)

    def insert_reference_batch(self, values: Iterable[float] | np.ndarray) -> None:
        """Insert every value of a list or numpy array into the reference summary."""
        self._reference.insert_batch(np.asarray(values, dtype=float).tolist())

    def insert_current_batch(self, values: Iterable[float] | np.ndarray) -> None:
        """Insert every value of a list or numpy array into the current summary."""
        self._current.insert_batch(np.asarray(values, dtype=float).tolist())

    def statistic(self) -> float:
        return ks_statistic(self._reference, self._current)

    def p_value(self) -> float:
        return ks_p_value(self.statistic(), self._reference.n, self._current.n)

    def kstest(self, alpha: float = 0.05) -> Dict[str, Any]:
        """
        Run the test at significance level ``alpha``.

        :return: statistic, p_value, alpha, drift_detected, n_reference, n_current and epsilon
        :raises EmptySummaryError: If either summary is empty
        """
        d = self.statistic()
        p = ks_p_value(d, self._reference.n, self._current.n)
        return {
            "statistic": d,
            "p_value": p,
            "alpha": alpha,
            "drift_detected": bool(p < alpha),
            "n_reference": self._reference.n,
            "n_current": self._current.n,
            "epsilon": self.epsilon,
        }

    def reset_reference(self) -> None:
        self._reference = QuantileSummary(epsilon=self.epsilon)

    def reset_current(self) -> None:
        self._current = QuantileSummary(epsilon=self.epsilon)

    def reset(self) -> None:
        self.reset_reference()
        self.reset_current()

    @property
    def n_reference(self) -> int:
        return self._reference.n

    @property
    def n_current(self) -> int:
        return self._current.n

    @property
    def reference_summary(self) -> QuantileSummary:
        return self._reference

    @property
    def current_summary(self) -> QuantileSummary:
        return self._current
