"""
Core module for the HRG multiplicity sampler.

Contains default settings, exceptions, species definitions, the thermal
model adapter, generator configuration and collision kinematics.
"""

from hrg_sampler.core.constants import (
    MAX_TRIALS,
    PAIR_TAIL_SIGMAS,
    PAIR_TAIL_PADDING,
    DEFAULT_SEED,
    NUCLEON_MASS_GEV,
    load_defaults_from_json,
    save_defaults_to_json,
    get_defaults_json_path,
)
from hrg_sampler.core.exceptions import ConfigurationError, NonConvergentSamplingError
from hrg_sampler.core.particle_configurations import (
    Species,
    CONSERVED_CHARGES,
    LIGHT_HADRONS,
    STRANGE_HADRONS,
    CHARM_HADRONS,
    LIGHT_NUCLEI,
    ALL_HADRONS,
    get_species_by_name,
)
from hrg_sampler.core.thermal_model import ThermalModelBase
from hrg_sampler.core.configuration import (
    Ensemble,
    ModelType,
    ThermalParameters,
    EventGeneratorConfiguration,
)
from hrg_sampler.core.kinematics import CollisionKinematics

__all__ = [
    # Defaults
    "MAX_TRIALS",
    "PAIR_TAIL_SIGMAS",
    "PAIR_TAIL_PADDING",
    "DEFAULT_SEED",
    "NUCLEON_MASS_GEV",
    "load_defaults_from_json",
    "save_defaults_to_json",
    "get_defaults_json_path",
    # Exceptions
    "ConfigurationError",
    "NonConvergentSamplingError",
    # Species
    "Species",
    "CONSERVED_CHARGES",
    "LIGHT_HADRONS",
    "STRANGE_HADRONS",
    "CHARM_HADRONS",
    "LIGHT_NUCLEI",
    "ALL_HADRONS",
    "get_species_by_name",
    # Model and configuration
    "ThermalModelBase",
    "Ensemble",
    "ModelType",
    "ThermalParameters",
    "EventGeneratorConfiguration",
    "CollisionKinematics",
]
