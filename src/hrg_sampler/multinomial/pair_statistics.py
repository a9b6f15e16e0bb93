"""
Fixed-difference statistics of a particle/antiparticle group pair.

Let N+ ~ Pois(λ+) and N- ~ Pois(λ-) be the counts of a group and its
antigroup. The net charge carried by the pair is d = N+ - N-, which
follows the Skellam distribution

    P(d) = Σ_m Pois(m + d; λ+) Pois(m; λ-)
         = exp(-(λ+ + λ-)) (λ+/λ-)^(d/2) I_|d|(2 √(λ+ λ-))

Exact conservation needs two things from a pair:

1. P(d) for the residual d left by the rest of the event. The ratio
   P(d) / max_d P(d) is the acceptance probability of a trial, and also
   its importance weight when events are returned weighted.
2. A draw of (N+, N-) conditioned on N+ - N- = d. Given d the number of
   antiparticles m has the Bessel distribution
   p(m) ∝ λ+^(m+d) λ-^m / ((m+d)! m!).

Both are evaluated in log space with log-gamma sums over a window of m
around the mode, so neither large means nor large residuals underflow.
"""

import math
from typing import Dict, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln, logsumexp, xlogy

from hrg_sampler.core.constants import PAIR_TAIL_SIGMAS, PAIR_TAIL_PADDING


def log_poisson_pmf(k, lam):
    """
    log Pois(k; λ) = k log λ - λ - log k!

    Valid for λ = 0 (gives 0 at k = 0 and -inf otherwise).
    """
    k = np.asarray(k, dtype=float)
    return xlogy(k, lam) - lam - gammaln(k + 1.0)


class FixedDifferencePair:
    """
    Two independent Poisson counts conditioned on their difference.

    Tables for each requested difference are built lazily and cached, so
    repeated residuals cost one uniform draw and a binary search.

    Attributes:
        lam_plus: Mean count of the positive group.
        lam_minus: Mean count of the negative group.
        log_mode_probability: max_d log P(d).
    """

    def __init__(
        self,
        lam_plus: float,
        lam_minus: float,
        tail_sigmas: float = PAIR_TAIL_SIGMAS,
        padding: int = PAIR_TAIL_PADDING,
    ):
        if lam_plus < 0 or lam_minus < 0 or not (np.isfinite(lam_plus) and np.isfinite(lam_minus)):
            raise ValueError(f"Pair means must be finite and non-negative, got ({lam_plus}, {lam_minus})")

        self.lam_plus = float(lam_plus)
        self.lam_minus = float(lam_minus)
        self.tail_sigmas = tail_sigmas
        self.padding = padding
        self._tables: Dict[int, Tuple[NDArray[np.int64], NDArray[np.floating], float]] = {}

        # Skellam is log-concave, so the integer mode sits next to λ+ - λ-
        center = int(math.floor(self.lam_plus - self.lam_minus))
        self.log_mode_probability = max(
            self.log_probability(d) for d in range(center - 2, center + 3)
        )

    @property
    def is_empty(self) -> bool:
        """True if neither group can produce a particle."""
        return self.lam_plus == 0.0 and self.lam_minus == 0.0

    def _window(self, d: int) -> NDArray[np.int64]:
        """Antiparticle counts m that carry non-negligible probability."""
        m_min = max(0, -d)
        # Mode of p(m) solves m (m + d) = λ+ λ-
        center = 0.5 * (-d + math.sqrt(d * d + 4.0 * self.lam_plus * self.lam_minus))
        width = self.tail_sigmas * math.sqrt(center + 1.0) + self.padding
        low = max(m_min, int(math.floor(center - width)))
        high = max(low, int(math.ceil(center + width)))
        return np.arange(low, high + 1, dtype=np.int64)

    def _table(self, d: int) -> Tuple[NDArray[np.int64], NDArray[np.floating], float]:
        if d not in self._tables:
            m = self._window(d)
            log_terms = log_poisson_pmf(m + d, self.lam_plus) + log_poisson_pmf(m, self.lam_minus)

            if np.all(np.isneginf(log_terms)):
                self._tables[d] = (m, np.zeros(len(m)), -np.inf)
            else:
                log_total = float(logsumexp(log_terms))
                cdf = np.cumsum(np.exp(log_terms - log_total))
                cdf /= cdf[-1]
                self._tables[d] = (m, cdf, log_total)
        return self._tables[d]

    def log_probability(self, d: int) -> float:
        """log P(N+ - N- = d)."""
        return self._table(int(d))[2]

    def log_acceptance(self, d: int) -> float:
        """log [P(d) / max P]; -inf when the difference is impossible."""
        log_p = self.log_probability(d)
        if np.isneginf(log_p):
            return -np.inf
        return min(0.0, log_p - self.log_mode_probability)

    def draw(self, d: int, rng: np.random.Generator) -> Tuple[int, int]:
        """
        Draw (N+, N-) conditioned on N+ - N- = d.

        Raises:
            ValueError: If the difference has zero probability.
        """
        m, cdf, log_total = self._table(int(d))
        if np.isneginf(log_total):
            raise ValueError(
                f"Net count {d} is impossible for means ({self.lam_plus}, {self.lam_minus})"
            )
        position = int(np.searchsorted(cdf, rng.random(), side='right'))
        n_minus = int(m[min(position, len(m) - 1)])
        return n_minus + int(d), n_minus
