"""
Canonical samplers built on a cascade of group pairs.

A trial event is generated in stages:

1. Free species (not a member of any stage's groups) are drawn from
   independent Poisson distributions.
2. Each GroupPair in turn sees the residual charge
   r = target - Σ_i q_i n_i left by everything drawn so far. The pair's
   counts are drawn with N+ - N- = r fixed, then split among the member
   species by one multinomial draw per group.
3. The finished event is checked against every exact target.

Drawing a pair conditioned on its net count changes the trial density by
a factor 1 / P(r) with respect to independent Poisson sampling. Accepting
each stage with probability P(r) / max P therefore makes accepted events
exactly distributed as independent Poisson multiplicities conditioned on
the conserved totals, so they carry weight 1; the product of the ratios
is kept as the trial's acceptance probability. With weighted_events the
acceptance step is skipped and the product becomes the importance weight
of the event.

The same engine serves CE (four stages), SCE and CCE (one stage each).
A canonical_fraction < 1 restricts exact conservation to a sub-volume:
the carriers of the conserved charge are sampled canonically with their
means scaled by the fraction, and the rest of the volume adds
grand-canonical Poisson counts on top.
"""

import math
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.core.configuration import Ensemble
from hrg_sampler.core.exceptions import ConfigurationError, NonConvergentSamplingError
from hrg_sampler.ensembles.base import (
    EnsembleSampler,
    SampledTotals,
    check_conservation_feasibility,
)
from hrg_sampler.multinomial.grouping import CE_PAIRS, GroupPair, QuantumNumberGroup, group_species
from hrg_sampler.multinomial.pair_statistics import FixedDifferencePair
from hrg_sampler.multinomial.tables import MultinomialTable, build_tables


class _Stage(NamedTuple):
    pair: GroupPair
    charge_vector: NDArray[np.int64]
    positive: MultinomialTable
    negative: MultinomialTable
    statistics: FixedDifferencePair


class CascadeSampler(EnsembleSampler):
    """
    Exact conservation through a sequence of fixed-difference group pairs.

    Subclasses set `ensemble` and `pairs`.
    """

    pairs: Tuple[GroupPair, ...] = ()

    def __init__(
        self,
        *args,
        canonical_fraction: float = 1.0,
        groups: Optional[Dict[str, QuantumNumberGroup]] = None,
        tables: Optional[Dict[str, MultinomialTable]] = None,
        **kwargs,
    ):
        """
        Args:
            *args, **kwargs: See EnsembleSampler.
            canonical_fraction: Fraction of the volume in which the exact
                charges are conserved (1 = whole volume).
            groups, tables: Prebuilt groups and tables of the full-volume
                means. Used as they are when canonical_fraction is 1;
                a sub-volume sampler builds its own from the scaled means.
        """
        super().__init__(*args, **kwargs)

        if not 0.0 < canonical_fraction <= 1.0:
            raise ConfigurationError(
                f"canonical_fraction must be in (0, 1], got {canonical_fraction}"
            )
        self.canonical_fraction = float(canonical_fraction)

        carriers = np.zeros(len(self.species), dtype=bool)
        for charge in self.targets:
            carriers |= self.charges[charge] != 0
        self._carriers = np.flatnonzero(carriers)

        self.canonical_means = self.mean_counts.copy()
        self.canonical_means[carriers] *= self.canonical_fraction
        self._outside_means = self.mean_counts[carriers] * (1.0 - self.canonical_fraction)

        check_conservation_feasibility(self.species, self.canonical_means, self.targets)

        if self.canonical_fraction == 1.0 and groups is not None and tables is not None:
            self.groups = groups
            self.tables = tables
        else:
            names = [s.name for s in self.species]
            self.groups = group_species(self.species, self.canonical_means)
            self.tables = build_tables(self.groups, names)

        self.stages: List[_Stage] = []
        grouped = np.zeros(len(self.species), dtype=bool)
        for pair in self.pairs:
            positive = self.tables[pair.positive]
            negative = self.tables[pair.negative]
            self.stages.append(_Stage(
                pair=pair,
                charge_vector=pair.project(self.species),
                positive=positive,
                negative=negative,
                statistics=FixedDifferencePair(positive.mean, negative.mean),
            ))
            grouped[positive.indices] = True
            grouped[negative.indices] = True

        self._free = np.flatnonzero(~grouped)
        self._free_means = self.canonical_means[self._free]

        if self.verbose:
            print(f"=== {type(self).__name__} Initialized ===")
            print(f"  Exact targets: {self.targets}")
            print(f"  Free species: {len(self._free)}")
            for stage in self.stages:
                print(
                    f"  Stage {stage.pair.charge}: {stage.pair.positive} "
                    f"(mean {stage.positive.mean:.4f}) vs {stage.pair.negative} "
                    f"(mean {stage.negative.mean:.4f})"
                )
            if self.canonical_fraction < 1.0:
                print(f"  Canonical sub-volume fraction: {self.canonical_fraction:.4f}")

    def _trial(self) -> Optional[Tuple[NDArray[np.int64], float]]:
        """
        One trial of the cascade.

        Returns:
            (totals, log_acceptance), or None if a stage rejected the trial.
        """
        totals = np.zeros(len(self.species), dtype=np.int64)
        totals[self._free] = self.rng.poisson(self._free_means)

        log_total = 0.0
        for stage in self.stages:
            residual = self.targets.get(stage.pair.charge, 0) - int(np.dot(stage.charge_vector, totals))
            log_acceptance = stage.statistics.log_acceptance(residual)
            if np.isneginf(log_acceptance):
                return None
            if not self.weighted_events and self.rng.random() >= math.exp(log_acceptance):
                return None
            log_total += log_acceptance

            n_plus, n_minus = stage.statistics.draw(residual, self.rng)
            stage.positive.distribute(n_plus, totals, self.rng)
            stage.negative.distribute(n_minus, totals, self.rng)

        return totals, log_total

    def sample(self) -> SampledTotals:
        """
        Sample one event conserving the exact targets.

        Raises:
            NonConvergentSamplingError: If max_trials trials were rejected.
        """
        trials = 0
        while True:
            if self._budget_exhausted(trials):
                if self.verbose:
                    print(f"  {self.ensemble.value}: no event accepted after {trials} trials")
                raise NonConvergentSamplingError(self.ensemble.value, trials)
            trials += 1
            self.counters.record_trial()

            result = self._trial()
            if result is None:
                continue
            totals, log_acceptance = result
            if not self.conserves(totals):
                continue

            self.counters.record_acceptance()
            if self.canonical_fraction < 1.0:
                totals[self._carriers] += self.rng.poisson(self._outside_means)

            log_weight = log_acceptance if self.weighted_events else 0.0
            weight = math.exp(log_weight)
            self.weights.update(weight, log_weight)
            return SampledTotals(
                totals=totals,
                weight=weight,
                log_weight=log_weight,
                trials=trials,
                log_acceptance=log_acceptance,
            )


class CanonicalSampler(CascadeSampler):
    """Exact B, S, Q and C conservation."""

    ensemble = Ensemble.CE
    pairs = CE_PAIRS
