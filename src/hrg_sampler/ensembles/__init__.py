"""
Ensemble samplers for multiplicity generation.

- GrandCanonicalSampler: independent Poisson multiplicities
- CanonicalSampler: exact B, S, Q, C
- StrangenessCanonicalSampler / LegacyStrangenessCanonicalSampler: exact S
- CharmCanonicalSampler: exact C

SAMPLERS maps each Ensemble to its default sampler class; create_sampler()
picks the class for a configuration and wires in the shared state.
"""

from typing import Dict, Optional, Sequence, Type

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.core.configuration import Ensemble, EventGeneratorConfiguration
from hrg_sampler.core.particle_configurations import Species
from hrg_sampler.ensembles.base import (
    AcceptanceCounters,
    EnsembleSampler,
    SampledTotals,
    WeightState,
    check_conservation_feasibility,
)
from hrg_sampler.ensembles.grand_canonical import GrandCanonicalSampler
from hrg_sampler.ensembles.canonical import CascadeSampler, CanonicalSampler
from hrg_sampler.ensembles.strangeness_canonical import (
    StrangenessCanonicalSampler,
    LegacyStrangenessCanonicalSampler,
)
from hrg_sampler.ensembles.charm_canonical import CharmCanonicalSampler
from hrg_sampler.multinomial.grouping import QuantumNumberGroup
from hrg_sampler.multinomial.tables import MultinomialTable


SAMPLERS: Dict[Ensemble, Type[EnsembleSampler]] = {
    Ensemble.GCE: GrandCanonicalSampler,
    Ensemble.CE: CanonicalSampler,
    Ensemble.SCE: StrangenessCanonicalSampler,
    Ensemble.CCE: CharmCanonicalSampler,
}


def create_sampler(
    configuration: EventGeneratorConfiguration,
    species: Sequence[Species],
    mean_counts: NDArray[np.floating],
    rng: np.random.Generator,
    weights: Optional[WeightState] = None,
    counters: Optional[AcceptanceCounters] = None,
    ensemble: Optional[Ensemble] = None,
    canonical_fraction: Optional[float] = None,
    legacy: Optional[bool] = None,
    groups: Optional[Dict[str, QuantumNumberGroup]] = None,
    tables: Optional[Dict[str, MultinomialTable]] = None,
    verbose: bool = False,
) -> EnsembleSampler:
    """
    Build the sampler for a configuration.

    Args:
        configuration: Generator configuration (targets, trial cap, flags).
        species: Ordered particle species.
        mean_counts: Clean mean count per species.
        rng: Random source.
        weights: Weight state to update.
        counters: Acceptance counters to update.
        ensemble: Override of configuration.ensemble.
        canonical_fraction: Sub-volume fraction for SCE/CCE; defaults to
            the configuration's canonical_volume / volume.
        legacy: Use the per-particle SCE sampler; defaults to
            configuration.sce_variant == 'legacy'.
        groups, tables: Prebuilt full-volume groups and tables handed to
            the canonical samplers.
        verbose: Print diagnostic information.
    """
    ensemble = ensemble if ensemble is not None else configuration.ensemble
    if legacy is None:
        legacy = configuration.sce_variant == 'legacy'
    if canonical_fraction is None:
        canonical_fraction = configuration.parameters.canonical_fraction

    cls = SAMPLERS[ensemble]
    kwargs = {}
    if ensemble is Ensemble.SCE and legacy and canonical_fraction >= 1.0:
        cls = LegacyStrangenessCanonicalSampler
    elif ensemble in (Ensemble.SCE, Ensemble.CCE):
        kwargs['canonical_fraction'] = canonical_fraction
    if issubclass(cls, CascadeSampler):
        kwargs['groups'] = groups
        kwargs['tables'] = tables

    return cls(
        species,
        mean_counts,
        rng,
        weights=weights,
        counters=counters,
        targets=configuration.targets,
        max_trials=configuration.max_trials,
        weighted_events=configuration.weighted_events,
        verbose=verbose,
        **kwargs,
    )


__all__ = [
    "SAMPLERS",
    "create_sampler",
    "AcceptanceCounters",
    "EnsembleSampler",
    "SampledTotals",
    "WeightState",
    "check_conservation_feasibility",
    "GrandCanonicalSampler",
    "CascadeSampler",
    "CanonicalSampler",
    "StrangenessCanonicalSampler",
    "LegacyStrangenessCanonicalSampler",
    "CharmCanonicalSampler",
]
