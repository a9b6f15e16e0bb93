"""
Event generator configuration.

EventGeneratorConfiguration fixes the statistical ensemble, the thermal
model kind, the thermal parameters and (for the canonical ensembles) the
conserved totals that every sampled event must reproduce. It is a frozen
value object: changing anything means building a new configuration and
handing it to the generator, which rebuilds its tables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from hrg_sampler.core.constants import MAX_TRIALS


class Ensemble(Enum):
    """Statistical ensemble used for multiplicity sampling."""
    GCE = "GCE"  # grand-canonical: nothing conserved exactly
    CE = "CE"    # canonical: B, Q, S, C exact
    SCE = "SCE"  # strangeness-canonical: S exact
    CCE = "CCE"  # charm-canonical: C exact

    @property
    def exact_charges(self) -> Tuple[str, ...]:
        """Conserved charges fixed event by event."""
        return _EXACT_CHARGES[self]


_EXACT_CHARGES: Dict[Ensemble, Tuple[str, ...]] = {
    Ensemble.GCE: (),
    Ensemble.CE: ('B', 'S', 'Q', 'C'),
    Ensemble.SCE: ('S',),
    Ensemble.CCE: ('C',),
}


class ModelType(Enum):
    """Thermal model flavour that supplied the densities."""
    POINT_PARTICLE = "PointParticle"
    DIAGONAL_EV = "DiagonalEV"
    CROSSTERMS_EV = "CrosstermsEV"
    MEAN_FIELD_EV = "MeanFieldEV"
    QVDW = "QvdW"

    @property
    def has_excluded_volume(self) -> bool:
        return self is not ModelType.POINT_PARTICLE


SCE_VARIANTS = ('refined', 'legacy')


@dataclass(frozen=True)
class ThermalParameters:
    """
    Thermal parameters of the fireball.

    Attributes:
        T: Temperature (GeV).
        muB, muS, muQ, muC: Chemical potentials (GeV).
        gammaq, gammaS, gammaC: Fugacity (non-equilibrium) factors.
        volume: Total system volume (fm^3).
        R: Hard-core radius for excluded-volume models (fm).
        canonical_volume: Volume in which the exactly conserved charge of
            an SCE/CCE run is conserved (fm^3). None means the whole volume.

    Only volume and canonical_volume are read by the samplers. The
    temperature, chemical potentials, fugacities and R are carried for the
    external thermal model that computes the densities.
    """
    T: float = 0.155
    muB: float = 0.0
    muS: float = 0.0
    muQ: float = 0.0
    muC: float = 0.0
    gammaq: float = 1.0
    gammaS: float = 1.0
    gammaC: float = 1.0
    volume: float = 4000.0
    R: float = 0.0
    canonical_volume: Optional[float] = None

    def __post_init__(self):
        """Validate parameter values."""
        if self.T <= 0:
            raise ValueError(f"T must be positive, got {self.T}")
        if self.volume <= 0:
            raise ValueError(f"volume must be positive, got {self.volume}")
        if self.R < 0:
            raise ValueError(f"R must be non-negative, got {self.R}")
        for name in ('gammaq', 'gammaS', 'gammaC'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.canonical_volume is not None:
            if not 0 < self.canonical_volume <= self.volume:
                raise ValueError(
                    f"canonical_volume must be in (0, volume={self.volume}], "
                    f"got {self.canonical_volume}"
                )

    @property
    def canonical_fraction(self) -> float:
        """Fraction of the volume with exact conservation."""
        if self.canonical_volume is None:
            return 1.0
        return self.canonical_volume / self.volume


@dataclass(frozen=True)
class EventGeneratorConfiguration:
    """
    Configuration of an event generator.

    Attributes:
        ensemble: Statistical ensemble.
        model_type: Thermal model flavour. Any kind other than
            POINT_PARTICLE takes densities from the excluded-volume model.
        parameters: Thermal parameters.
        B, Q, S, C: Conserved totals for the exactly conserved charges.
        max_trials: Trial cap for canonical rejection loops (None = no cap).
        only_stable: Sample stable species only.
        weighted_events: Return importance-weighted events instead of
            rejecting at the group-pair stage.
        sce_variant: 'refined' (aggregate pair draw) or 'legacy'
            (per-particle rejection) strangeness-canonical sampler.
    """
    ensemble: Ensemble = Ensemble.GCE
    model_type: ModelType = ModelType.POINT_PARTICLE
    parameters: ThermalParameters = field(default_factory=ThermalParameters)
    B: int = 0
    Q: int = 0
    S: int = 0
    C: int = 0
    max_trials: Optional[int] = MAX_TRIALS
    only_stable: bool = False
    weighted_events: bool = False
    sce_variant: str = 'refined'

    def __post_init__(self):
        """Validate configuration values."""
        if not isinstance(self.ensemble, Ensemble):
            raise ValueError(f"ensemble must be an Ensemble, got {self.ensemble!r}")
        if not isinstance(self.model_type, ModelType):
            raise ValueError(f"model_type must be a ModelType, got {self.model_type!r}")
        if self.max_trials is not None and self.max_trials < 1:
            raise ValueError(f"max_trials must be positive or None, got {self.max_trials}")
        if self.sce_variant not in SCE_VARIANTS:
            raise ValueError(f"sce_variant must be one of {SCE_VARIANTS}, got {self.sce_variant!r}")
        for name in ('B', 'Q', 'S', 'C'):
            if int(getattr(self, name)) != getattr(self, name):
                raise ValueError(f"{name} must be an integer, got {getattr(self, name)}")

    @property
    def targets(self) -> Dict[str, int]:
        """Conserved totals keyed by charge name."""
        return {'B': self.B, 'Q': self.Q, 'S': self.S, 'C': self.C}

    @property
    def exact_targets(self) -> Dict[str, int]:
        """Targets of the charges this ensemble conserves exactly."""
        return {q: self.targets[q] for q in self.ensemble.exact_charges}

    @property
    def volume(self) -> float:
        return self.parameters.volume

    def __repr__(self) -> str:
        return (
            f"EventGeneratorConfiguration(\n"
            f"  ensemble = {self.ensemble.value},\n"
            f"  model_type = {self.model_type.value},\n"
            f"  T = {self.parameters.T:.4f} GeV, V = {self.parameters.volume:.1f} fm^3,\n"
            f"  (B, Q, S, C) = ({self.B}, {self.Q}, {self.S}, {self.C}),\n"
            f"  max_trials = {self.max_trials}\n"
            f")"
        )
