"""
Strangeness-canonical samplers.

Only net strangeness is fixed event by event; baryon number, charge and
charm fluctuate grand-canonically. Strange baryons carry strangeness too,
so the strangeness balance spans the baryon sector even though baryon
number itself is not conserved.

Two variants produce the same distribution of totals:

- StrangenessCanonicalSampler (refined): strange baryons and all other
  ungrouped species are free Poisson draws; the unit-strangeness mesons
  are drawn as one group pair with their net fixed to the residual.
- LegacyStrangenessCanonicalSampler: every strange species is drawn
  independently and the whole draw is rejected unless the net
  strangeness matches. Simple, but the acceptance drops like
  1/√(mean strange multiplicity).
"""

import numpy as np

from hrg_sampler.core.configuration import Ensemble
from hrg_sampler.core.exceptions import NonConvergentSamplingError
from hrg_sampler.ensembles.base import EnsembleSampler, SampledTotals, check_conservation_feasibility
from hrg_sampler.ensembles.canonical import CascadeSampler
from hrg_sampler.multinomial.grouping import SCE_PAIRS


class StrangenessCanonicalSampler(CascadeSampler):
    """Exact S conservation at the aggregate group level."""

    ensemble = Ensemble.SCE
    pairs = SCE_PAIRS


class LegacyStrangenessCanonicalSampler(EnsembleSampler):
    """
    Exact S conservation by per-particle rejection.

    Every accepted event is exact and has weight 1. There is no pair stage
    to skip, so weighted_events has no effect on this sampler.
    """

    ensemble = Ensemble.SCE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        check_conservation_feasibility(self.species, self.mean_counts, self.targets)

        strange = self.charges['S'] != 0
        self._strange = np.flatnonzero(strange)
        self._other = np.flatnonzero(~strange)
        self._strangeness = self.charges['S'][self._strange]

        if self.verbose:
            print("=== LegacyStrangenessCanonicalSampler Initialized ===")
            print(f"  Target S = {self.targets['S']}, {len(self._strange)} strange species")

    def sample(self) -> SampledTotals:
        """
        Sample one event with exact net strangeness.

        Raises:
            NonConvergentSamplingError: If max_trials trials were rejected.
        """
        target = self.targets['S']
        trials = 0
        while True:
            if self._budget_exhausted(trials):
                raise NonConvergentSamplingError(self.ensemble.value, trials)
            trials += 1
            self.counters.record_trial()

            counts = self.rng.poisson(self.mean_counts[self._strange])
            if int(np.dot(self._strangeness, counts)) != target:
                continue

            self.counters.record_acceptance()
            totals = np.zeros(len(self.species), dtype=np.int64)
            totals[self._strange] = counts
            totals[self._other] = self.rng.poisson(self.mean_counts[self._other])
            self.weights.update(1.0, 0.0)
            return SampledTotals(totals=totals, weight=1.0, log_weight=0.0, trials=trials)
