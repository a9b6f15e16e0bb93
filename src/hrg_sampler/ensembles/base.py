"""
Shared pieces of the ensemble samplers.

Every sampler turns per-species mean counts into one event's integer
totals. The weight of the last event and the canonical acceptance
counters belong to the generator instance that owns the sampler, never to
the process, so independent generators can run in parallel workers.
"""

import math
from dataclasses import dataclass
from functools import reduce
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.core.configuration import Ensemble
from hrg_sampler.core.exceptions import ConfigurationError
from hrg_sampler.core.particle_configurations import Species, CONSERVED_CHARGES


@dataclass
class SampledTotals:
    """
    Multiplicities of one event plus its statistical weight.

    Attributes:
        totals: Non-negative count of each species, ordered like the
                species list.
        weight: Importance weight of the event. 1 for every exactly
                distributed event; only weighted canonical events carry
                another value.
        log_weight: Natural log of the weight.
        trials: Trials spent to produce the event.
        log_acceptance: Log of the probability with which the accepted
                trial passed its pair stages (0 for GCE).
    """
    totals: NDArray[np.int64]
    weight: float = 1.0
    log_weight: float = 0.0
    trials: int = 1
    log_acceptance: float = 0.0

    @property
    def acceptance(self) -> float:
        return math.exp(self.log_acceptance)

    def __len__(self) -> int:
        return len(self.totals)

    def __getitem__(self, index):
        return self.totals[index]

    def __iter__(self):
        return iter(self.totals)


@dataclass
class WeightState:
    """Weight and log-weight of the most recently generated event."""
    last_weight: float = 1.0
    last_log_weight: float = 0.0

    def update(self, weight: float, log_weight: float) -> None:
        self.last_weight = weight
        self.last_log_weight = log_weight


@dataclass
class AcceptanceCounters:
    """
    Trials and accepted events of the canonical samplers.

    Never reset automatically; take a snapshot before and after a run to
    get the acceptance of that run alone.
    """
    accepted: int = 0
    total: int = 0

    def record_trial(self) -> None:
        self.total += 1

    def record_acceptance(self) -> None:
        self.accepted += 1

    def snapshot(self) -> Tuple[int, int]:
        """(accepted, total) at this moment."""
        return self.accepted, self.total

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.total if self.total > 0 else 0.0

    def reset(self) -> None:
        self.accepted = 0
        self.total = 0


def charge_vectors(species: Sequence[Species]) -> Dict[str, NDArray[np.int64]]:
    """{charge name: per-species value} for B, S, Q, C."""
    return {
        q: np.array([s.quantum_number(q) for s in species], dtype=np.int64)
        for q in CONSERVED_CHARGES
    }


def check_conservation_feasibility(
    species: Sequence[Species],
    mean_counts: NDArray[np.floating],
    targets: Dict[str, int],
) -> None:
    """
    Make sure every exact target can be produced by the available species.

    A target is unreachable when no species with a non-zero mean carries
    the charge, when no such species carries it with the sign of the
    target, or when the target is not a multiple of the greatest common
    divisor of the carriers' charges.

    Raises:
        ConfigurationError: If a target is unreachable.
    """
    vectors = charge_vectors(species)
    for charge, target in targets.items():
        carried = vectors[charge][(vectors[charge] != 0) & (mean_counts > 0)]
        if len(carried) == 0:
            if target != 0:
                raise ConfigurationError(
                    f"Exact {charge} = {target} requested but no species with a "
                    f"non-zero mean carries {charge}"
                )
            continue
        if (target > 0 and not np.any(carried > 0)) or (target < 0 and not np.any(carried < 0)):
            raise ConfigurationError(
                f"Exact {charge} = {target} requested but no species with a "
                f"non-zero mean carries {charge} of that sign"
            )
        step = reduce(math.gcd, (abs(int(c)) for c in carried))
        if target % step != 0:
            raise ConfigurationError(
                f"Exact {charge} = {target} is not a multiple of {step}, the smallest "
                f"{charge} change the available species can make"
            )


class EnsembleSampler:
    """
    Base class of the multiplicity samplers.

    Subclasses implement sample(). The constructor receives everything the
    sampler needs; nothing is read from the generator afterwards, so a
    sampler is a complete snapshot of one configuration.
    """

    ensemble: Ensemble = Ensemble.GCE

    def __init__(
        self,
        species: Sequence[Species],
        mean_counts: NDArray[np.floating],
        rng: np.random.Generator,
        weights: Optional[WeightState] = None,
        counters: Optional[AcceptanceCounters] = None,
        targets: Optional[Dict[str, int]] = None,
        max_trials: Optional[int] = None,
        weighted_events: bool = False,
        verbose: bool = False,
    ):
        """
        Args:
            species: Ordered particle species.
            mean_counts: Clean (non-negative, finite) mean count per species.
            rng: Random source for all draws.
            weights: Weight state updated after every event.
            counters: Acceptance counters updated on every canonical trial.
            targets: Conserved totals {'B', 'Q', 'S', 'C'}; only the
                     ensemble's exact charges are used.
            max_trials: Trial cap per event (None = unbounded).
            weighted_events: Return importance-weighted events.
            verbose: Print diagnostic information.
        """
        self.species = list(species)
        self.mean_counts = np.asarray(mean_counts, dtype=float)
        self.rng = rng
        self.weights = weights if weights is not None else WeightState()
        self.counters = counters if counters is not None else AcceptanceCounters()
        targets = targets or {}
        self.targets = {q: int(targets.get(q, 0)) for q in self.ensemble.exact_charges}
        self.max_trials = max_trials
        self.weighted_events = weighted_events
        self.verbose = verbose
        self.charges = charge_vectors(self.species)

        if len(self.species) != len(self.mean_counts):
            raise ValueError(
                f"Got {len(self.species)} species but {len(self.mean_counts)} mean counts"
            )

    def sample(self) -> SampledTotals:
        """Sample one event's totals."""
        raise NotImplementedError

    def net_charge(self, totals: NDArray[np.int64], charge: str) -> int:
        """Σ_i q_i n_i for one conserved charge."""
        return int(np.dot(self.charges[charge], totals))

    def conserves(self, totals: NDArray[np.int64]) -> bool:
        """True if `totals` reproduce every exact target."""
        return all(self.net_charge(totals, q) == t for q, t in self.targets.items())

    def _budget_exhausted(self, trials: int) -> bool:
        return self.max_trials is not None and trials >= self.max_trials
