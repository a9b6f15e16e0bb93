"""
Grand-canonical sampler.

Every species is an independent Poisson variable with mean
density × volume. Charges are conserved only on average, so there is no
rejection and every event has weight 1.
"""

import numpy as np

from hrg_sampler.core.configuration import Ensemble
from hrg_sampler.ensembles.base import EnsembleSampler, SampledTotals


class GrandCanonicalSampler(EnsembleSampler):
    """Independent Poisson multiplicities."""

    ensemble = Ensemble.GCE

    def sample(self) -> SampledTotals:
        totals = self.rng.poisson(self.mean_counts).astype(np.int64)
        self.weights.update(1.0, 0.0)
        return SampledTotals(totals=totals, weight=1.0, log_weight=0.0, trials=1)
