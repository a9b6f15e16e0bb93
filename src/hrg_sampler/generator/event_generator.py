"""
Event generator base.

EventGeneratorBase ties a configuration and a thermal model to the
ensemble samplers:

    configuration + densities -> groups -> tables -> sampler -> totals

Usage:
    generator = EventGeneratorBase(seed=42)
    generator.set_configuration(configuration, model)
    result = generator.generate_totals()
    print(result.totals, generator.last_weight)

Each instance owns its random stream, its tables, its last-weight state
and its acceptance counters. For parallel generation give every worker
its own instance, e.g. from spawn().
"""

from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.core.configuration import Ensemble, EventGeneratorConfiguration
from hrg_sampler.core.constants import DEFAULT_SEED
from hrg_sampler.core.exceptions import ConfigurationError
from hrg_sampler.core.kinematics import CollisionKinematics
from hrg_sampler.core.particle_configurations import Species
from hrg_sampler.core.thermal_model import ThermalModelBase
from hrg_sampler.ensembles import (
    AcceptanceCounters,
    EnsembleSampler,
    SampledTotals,
    WeightState,
    create_sampler,
)
from hrg_sampler.multinomial.grouping import QuantumNumberGroup, group_species
from hrg_sampler.multinomial.tables import MultinomialTable, build_tables, sanitize_means


@dataclass
class RawEvent:
    """
    Sampled multiplicities of one event, before momenta and decays.

    Attributes:
        species: Ordered particle species.
        totals: Count of each species.
        weight: Event weight.
        log_weight: Natural log of the weight.
    """
    species: List[Species]
    totals: NDArray[np.int64]
    weight: float = 1.0
    log_weight: float = 0.0

    def multiplicity(self, name: str) -> int:
        """Count of the species called `name`."""
        for particle, count in zip(self.species, self.totals):
            if particle.name == name:
                return int(count)
        raise ValueError(f"Unknown species: {name}")

    def net_charge(self, charge: str) -> int:
        """Net value of 'B', 'Q', 'S' or 'C' carried by the event."""
        return int(sum(s.quantum_number(charge) * int(n) for s, n in zip(self.species, self.totals)))

    def particles(self) -> List[Species]:
        """One entry per produced particle, in species order."""
        return [s for s, n in zip(self.species, self.totals) for _ in range(int(n))]

    @property
    def total_multiplicity(self) -> int:
        return int(np.sum(self.totals))


class EventGeneratorBase:
    """
    Generates per-species multiplicities from a thermal model.

    Attributes:
        configuration: Current EventGeneratorConfiguration (None until set).
        species: Species list of the current configuration.
        rng: Random source of this instance.
        weights: Weight of the last generated event.
        counters: Canonical acceptance counters.
        kinematics: Collision kinematics, if set.
    """

    def __init__(
        self,
        configuration: Optional[EventGeneratorConfiguration] = None,
        model: Optional[ThermalModelBase] = None,
        ev_model: Optional[ThermalModelBase] = None,
        seed: Union[int, np.random.SeedSequence, None] = DEFAULT_SEED,
        verbose: bool = False,
    ):
        """
        Args:
            configuration: Optional configuration applied immediately
                           (requires `model`).
            model: Thermal model supplying point-particle densities.
            ev_model: Excluded-volume model supplying corrected densities.
            seed: Seed or SeedSequence of the random stream.
            verbose: Print diagnostic information.
        """
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)
        self.rng = np.random.default_rng(self._seed_sequence)
        self.verbose = verbose

        self.weights = WeightState()
        self.counters = AcceptanceCounters()
        self.kinematics: Optional[CollisionKinematics] = None

        self.configuration: Optional[EventGeneratorConfiguration] = None
        self.species: List[Species] = []
        self._model: Optional[ThermalModelBase] = None
        self._ev_model: Optional[ThermalModelBase] = None
        self._mean_counts: Optional[NDArray[np.floating]] = None
        self._groups: Dict[str, QuantumNumberGroup] = {}
        self._tables: Dict[str, MultinomialTable] = {}
        self._sampler: Optional[EnsembleSampler] = None
        self._samplers: Dict[Hashable, EnsembleSampler] = {}

        if configuration is not None:
            if model is None:
                raise ValueError("A thermal model is required together with a configuration")
            self.set_configuration(configuration, model, ev_model)

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_configuration(
        self,
        configuration: EventGeneratorConfiguration,
        model: ThermalModelBase,
        ev_model: Optional[ThermalModelBase] = None,
        species: Optional[Sequence[Species]] = None,
    ) -> None:
        """
        Apply a configuration and rebuild all groups, tables and samplers.

        Args:
            configuration: New configuration.
            model: Thermal model with point-particle densities.
            ev_model: Excluded-volume model; required when the model type
                      has an excluded volume, whose densities are then used.
            species: Species list; defaults to model.species.

        Raises:
            ConfigurationError: If the exact targets cannot be produced by
                the species or the excluded-volume model is missing.
        """
        species = list(species) if species is not None else list(model.species)
        if len(species) != len(model):
            raise ConfigurationError(
                f"Species list has {len(species)} entries but the model has {len(model)}"
            )

        if configuration.model_type.has_excluded_volume:
            if ev_model is None:
                raise ConfigurationError(
                    f"Model type {configuration.model_type.value} requires an excluded-volume model"
                )
            if len(ev_model) != len(species):
                raise ConfigurationError(
                    f"Excluded-volume model has {len(ev_model)} species, expected {len(species)}"
                )
            density_source = ev_model
        else:
            density_source = model

        mask = None
        if configuration.only_stable:
            mask = np.array([s.stable for s in species], dtype=bool)
        raw_means = density_source.mean_counts(configuration.volume, mask)
        mean_counts, _ = sanitize_means(
            raw_means, [s.name for s in species], context=density_source.name
        )

        if self.verbose:
            print("=== EventGeneratorBase configured ===")
            print(f"  {configuration!r}")
            print(f"  Density source: {density_source.name}, {len(species)} species")
            print(f"  Total mean multiplicity: {np.sum(mean_counts):.4f}")

        # Nothing is replaced until the new sampler has been built
        groups, tables, sampler = self._prepare(configuration, species, mean_counts)

        self.configuration = configuration
        self.species = species
        self._model = model
        self._ev_model = ev_model
        self._mean_counts = mean_counts
        self._groups = groups
        self._tables = tables
        self._samplers = {}
        self._sampler = sampler

    def prepare_multinomials(self) -> None:
        """Rebuild groups, multinomial tables and the configured sampler."""
        self._require_configuration()
        groups, tables, sampler = self._prepare(self.configuration, self.species, self._mean_counts)
        self._groups = groups
        self._tables = tables
        self._samplers = {}
        self._sampler = sampler

    def _prepare(
        self,
        configuration: EventGeneratorConfiguration,
        species: List[Species],
        mean_counts: NDArray[np.floating],
    ) -> Tuple[Dict[str, QuantumNumberGroup], Dict[str, MultinomialTable], EnsembleSampler]:
        """Build groups, tables and sampler without touching the current state."""
        groups = group_species(species, mean_counts)
        tables = build_tables(groups, [s.name for s in species], verbose=self.verbose)
        sampler = create_sampler(
            configuration,
            species,
            mean_counts,
            self.rng,
            weights=self.weights,
            counters=self.counters,
            groups=groups,
            tables=tables,
            verbose=self.verbose,
        )
        return groups, tables, sampler

    def _build_sampler(self, **overrides) -> EnsembleSampler:
        return create_sampler(
            self.configuration,
            self.species,
            self._mean_counts,
            self.rng,
            weights=self.weights,
            counters=self.counters,
            groups=self._groups,
            tables=self._tables,
            verbose=self.verbose,
            **overrides,
        )

    def _cached_sampler(self, key: Hashable, factory: Callable[[], EnsembleSampler]) -> EnsembleSampler:
        self._require_configuration()
        if key not in self._samplers:
            self._samplers[key] = factory()
        return self._samplers[key]

    def _require_configuration(self) -> None:
        if self.configuration is None:
            raise RuntimeError("No configuration set. Call set_configuration() first.")

    @property
    def mean_counts(self) -> NDArray[np.floating]:
        """Clean per-species mean multiplicities of the configuration."""
        self._require_configuration()
        return self._mean_counts.copy()

    @property
    def groups(self) -> Dict[str, QuantumNumberGroup]:
        """Groups of the configured sampler (see tables)."""
        return dict(getattr(self._sampler, 'groups', self._groups))

    @property
    def tables(self) -> Dict[str, MultinomialTable]:
        """
        Multinomial tables the configured sampler draws from.

        A sub-volume sampler draws from tables of its scaled means. GCE and
        legacy SCE samplers draw from none; the full-volume tables are
        returned for them.
        """
        return dict(getattr(self._sampler, 'tables', self._tables))

    # =========================================================================
    # Sampling
    # =========================================================================

    def generate_totals(self) -> SampledTotals:
        """Sample one event with the configured ensemble."""
        self._require_configuration()
        return self._sampler.sample()

    def generate_totals_gce(self) -> SampledTotals:
        """Sample one event grand-canonically."""
        return self._cached_sampler(
            ('GCE',), lambda: self._build_sampler(ensemble=Ensemble.GCE)
        ).sample()

    def generate_totals_ce(self) -> SampledTotals:
        """Sample one event with exact B, Q, S, C from the configuration."""
        return self._cached_sampler(
            ('CE',), lambda: self._build_sampler(ensemble=Ensemble.CE)
        ).sample()

    def generate_totals_sce(self) -> SampledTotals:
        """Sample one event with exact S (aggregate group-pair variant)."""
        return self._cached_sampler(
            ('SCE',), lambda: self._build_sampler(
                ensemble=Ensemble.SCE, legacy=False, canonical_fraction=1.0)
        ).sample()

    def generate_totals_sce_legacy(self) -> SampledTotals:
        """Sample one event with exact S (per-particle rejection variant)."""
        return self._cached_sampler(
            ('SCE', 'legacy'), lambda: self._build_sampler(
                ensemble=Ensemble.SCE, legacy=True, canonical_fraction=1.0)
        ).sample()

    def generate_totals_sce_subvolume(self, volume_sc: float) -> SampledTotals:
        """
        Sample one event with S conserved exactly inside `volume_sc`.

        Args:
            volume_sc: Strangeness-canonical volume (fm^3), at most the
                       total volume.
        """
        fraction = self._subvolume_fraction(volume_sc)
        return self._cached_sampler(
            ('SCE', 'subvolume', fraction), lambda: self._build_sampler(
                ensemble=Ensemble.SCE, legacy=False, canonical_fraction=fraction)
        ).sample()

    def generate_totals_cce(self) -> SampledTotals:
        """Sample one event with exact C."""
        return self._cached_sampler(
            ('CCE',), lambda: self._build_sampler(ensemble=Ensemble.CCE, canonical_fraction=1.0)
        ).sample()

    def generate_totals_cce_subvolume(self, volume_sc: float) -> SampledTotals:
        """
        Sample one event with C conserved exactly inside `volume_sc`.

        Args:
            volume_sc: Charm-canonical volume (fm^3), at most the total volume.
        """
        fraction = self._subvolume_fraction(volume_sc)
        return self._cached_sampler(
            ('CCE', 'subvolume', fraction), lambda: self._build_sampler(
                ensemble=Ensemble.CCE, canonical_fraction=fraction)
        ).sample()

    def _subvolume_fraction(self, volume_sc: float) -> float:
        self._require_configuration()
        volume = self.configuration.volume
        if not 0.0 < volume_sc <= volume:
            raise ConfigurationError(
                f"Canonical sub-volume must be in (0, {volume}], got {volume_sc}"
            )
        return float(volume_sc) / volume

    def get_event(self) -> RawEvent:
        """
        Sample one event and wrap it as a RawEvent.

        Momenta, resonance masses and decays are attached downstream.
        """
        result = self.generate_totals()
        return RawEvent(
            species=list(self.species),
            totals=result.totals,
            weight=result.weight,
            log_weight=result.log_weight,
        )

    # =========================================================================
    # Weights and acceptance
    # =========================================================================

    @property
    def last_weight(self) -> float:
        """Weight of the most recently generated event."""
        return self.weights.last_weight

    @property
    def last_log_weight(self) -> float:
        """Log-weight of the most recently generated event."""
        return self.weights.last_log_weight

    @property
    def ce_accepted(self) -> int:
        """Accepted canonical trials since creation (or the last reset)."""
        return self.counters.accepted

    @property
    def ce_total(self) -> int:
        """Canonical trials since creation (or the last reset)."""
        return self.counters.total

    @property
    def acceptance_rate(self) -> float:
        return self.counters.acceptance_rate

    def reset_counters(self) -> None:
        """Zero the canonical acceptance counters."""
        self.counters.reset()

    # =========================================================================
    # Collision kinematics
    # =========================================================================

    def set_collision_kinetic_energy(self, ekin: float) -> None:
        """Set the collision energy as lab kinetic energy per nucleon (GeV)."""
        self.kinematics = CollisionKinematics.from_kinetic_energy(ekin)

    def set_collision_lab_energy(self, elab: float) -> None:
        """Set the collision energy as lab total energy per nucleon (GeV)."""
        self.kinematics = CollisionKinematics.from_lab_energy(elab)

    def set_collision_cms_energy(self, ssqrt: float) -> None:
        """Set the collision energy as √s_NN (GeV)."""
        self.kinematics = CollisionKinematics.from_cms_energy(ssqrt)

    @property
    def ycm(self) -> float:
        """CMS rapidity in the lab frame (0 if no collision energy is set)."""
        return self.kinematics.ycm if self.kinematics is not None else 0.0

    # =========================================================================
    # Parallel workers
    # =========================================================================

    def spawn(self, n_workers: int) -> List["EventGeneratorBase"]:
        """
        Create independent generators for parallel workers.

        Each child gets its own random stream derived from this instance's
        seed sequence, its own tables and its own weight/counter state.
        """
        if n_workers < 1:
            raise ValueError(f"n_workers must be positive, got {n_workers}")

        children = []
        for child_seed in self._seed_sequence.spawn(n_workers):
            child = EventGeneratorBase(seed=child_seed, verbose=False)
            child.kinematics = self.kinematics
            if self.configuration is not None:
                child.set_configuration(self.configuration, self._model, self._ev_model, self.species)
            children.append(child)
        return children
