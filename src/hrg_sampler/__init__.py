"""
HRG Sampler - Multiplicity Sampling for Hadron Resonance Gas Event Generators

Samples per-species hadron multiplicities of a thermal fireball in the
grand-canonical ensemble or with exact conservation of conserved charges:

    GCE: independent Poisson multiplicities
    CE:  exact baryon number, electric charge, strangeness and charm
    SCE: exact strangeness only
    CCE: exact charm only

Main Interface:
    from hrg_sampler import EventGeneratorBase, EventGeneratorConfiguration, Ensemble

    generator = EventGeneratorBase(seed=42)
    generator.set_configuration(
        EventGeneratorConfiguration(ensemble=Ensemble.CE, B=2),
        model,
    )
    result = generator.generate_totals()
    print(result.totals, generator.last_weight)

Components:
- EventGeneratorBase: configuration, table preparation and dispatch
- Quantum-number grouping and multinomial tables (hrg_sampler.multinomial)
- Ensemble samplers (hrg_sampler.ensembles)
- Batch summaries (hrg_sampler.reporting)
"""

from hrg_sampler.core import (
    ConfigurationError,
    NonConvergentSamplingError,
    Species,
    ALL_HADRONS,
    ThermalModelBase,
    Ensemble,
    ModelType,
    ThermalParameters,
    EventGeneratorConfiguration,
    CollisionKinematics,
)
from hrg_sampler.ensembles import (
    SampledTotals,
    WeightState,
    AcceptanceCounters,
    SAMPLERS,
    create_sampler,
)
from hrg_sampler.generator import EventGeneratorBase, RawEvent

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ConfigurationError",
    "NonConvergentSamplingError",
    # Model and configuration
    "Species",
    "ALL_HADRONS",
    "ThermalModelBase",
    "Ensemble",
    "ModelType",
    "ThermalParameters",
    "EventGeneratorConfiguration",
    "CollisionKinematics",
    # Sampling
    "SampledTotals",
    "WeightState",
    "AcceptanceCounters",
    "SAMPLERS",
    "create_sampler",
    # Generator
    "EventGeneratorBase",
    "RawEvent",
]
