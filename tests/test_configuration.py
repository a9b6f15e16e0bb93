"""
Tests for species definitions, configuration objects, defaults and
collision kinematics.
"""

import json

import numpy as np
import pytest
from numpy.testing import assert_allclose

from hrg_sampler.core.constants import (
    load_defaults_from_json,
    save_defaults_to_json,
    get_defaults_json_path,
    MAX_TRIALS,
    NUCLEON_MASS_GEV,
)
from hrg_sampler.core.configuration import (
    Ensemble,
    ModelType,
    ThermalParameters,
    EventGeneratorConfiguration,
)
from hrg_sampler.core.kinematics import CollisionKinematics
from hrg_sampler.core.particle_configurations import (
    ALL_HADRONS,
    PROTON,
    KAON_PLUS,
    DS_PLUS,
    PION_ZERO,
    get_species_by_name,
)
from hrg_sampler.core.thermal_model import ThermalModelBase


@pytest.mark.unit
class TestSpecies:
    """Test the Species value type."""

    def test_antiparticle_flips_charges(self):
        anti = DS_PLUS.antiparticle("Ds-")
        assert anti.quantum_numbers == (0, -1, -1, -1)
        assert anti.pdg == -DS_PLUS.pdg
        assert anti.stable == DS_PLUS.stable

    def test_quantum_number_lookup(self):
        assert PROTON.quantum_number('B') == 1
        assert PROTON.quantum_number('Q') == 1
        assert KAON_PLUS.quantum_number('S') == 1
        assert DS_PLUS.quantum_number('C') == 1

    def test_neutral(self):
        assert PION_ZERO.is_neutral
        assert not PROTON.is_neutral

    def test_lookup_by_name(self):
        assert get_species_by_name("K+") is KAON_PLUS
        with pytest.raises(ValueError):
            get_species_by_name("tachyon")

    def test_builtin_list_is_charge_symmetric(self):
        """Every charged built-in species has its antiparticle in the list."""
        numbers = {s.quantum_numbers for s in ALL_HADRONS}
        for s in ALL_HADRONS:
            assert tuple(-q for q in s.quantum_numbers) in numbers


@pytest.mark.unit
class TestThermalModel:
    """Test the thermal model adapter."""

    def test_mean_counts(self):
        model = ThermalModelBase([PROTON, KAON_PLUS], [0.01, 0.02])
        assert_allclose(model.mean_counts(100.0), [1.0, 2.0])

    def test_mask_zeroes_species(self):
        model = ThermalModelBase([PROTON, KAON_PLUS], [0.01, 0.02])
        assert_allclose(model.mean_counts(100.0, np.array([True, False])), [1.0, 0.0])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            ThermalModelBase([PROTON, KAON_PLUS], [0.01])

    def test_densities_copy(self):
        model = ThermalModelBase([PROTON], [0.01])
        densities = model.densities
        densities[0] = 5.0
        assert model.density(0) == 0.01


@pytest.mark.unit
class TestConfiguration:
    """Test ThermalParameters and EventGeneratorConfiguration validation."""

    def test_defaults(self):
        configuration = EventGeneratorConfiguration()
        assert configuration.ensemble is Ensemble.GCE
        assert configuration.model_type is ModelType.POINT_PARTICLE
        assert configuration.max_trials == MAX_TRIALS
        assert configuration.volume == configuration.parameters.volume

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            ThermalParameters(T=0.0)
        with pytest.raises(ValueError):
            ThermalParameters(volume=-1.0)
        with pytest.raises(ValueError):
            ThermalParameters(R=-0.1)
        with pytest.raises(ValueError):
            ThermalParameters(gammaS=-1.0)
        with pytest.raises(ValueError):
            ThermalParameters(volume=100.0, canonical_volume=200.0)

    def test_canonical_fraction(self):
        assert ThermalParameters(volume=100.0).canonical_fraction == 1.0
        assert_allclose(ThermalParameters(volume=100.0, canonical_volume=25.0).canonical_fraction, 0.25)

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            EventGeneratorConfiguration(max_trials=0)
        with pytest.raises(ValueError):
            EventGeneratorConfiguration(sce_variant='fast')
        with pytest.raises(ValueError):
            EventGeneratorConfiguration(B=1.5)
        with pytest.raises(ValueError):
            EventGeneratorConfiguration(ensemble="CE")

    def test_exact_targets(self):
        configuration = EventGeneratorConfiguration(ensemble=Ensemble.SCE, B=2, S=-1)
        assert configuration.targets == {'B': 2, 'Q': 0, 'S': -1, 'C': 0}
        assert configuration.exact_targets == {'S': -1}
        assert EventGeneratorConfiguration(ensemble=Ensemble.GCE, B=2).exact_targets == {}

    def test_ensemble_charges(self):
        assert Ensemble.CE.exact_charges == ('B', 'S', 'Q', 'C')
        assert Ensemble.SCE.exact_charges == ('S',)
        assert Ensemble.CCE.exact_charges == ('C',)
        assert Ensemble.GCE.exact_charges == ()

    def test_model_types(self):
        assert not ModelType.POINT_PARTICLE.has_excluded_volume
        for model_type in (ModelType.DIAGONAL_EV, ModelType.CROSSTERMS_EV,
                           ModelType.MEAN_FIELD_EV, ModelType.QVDW):
            assert model_type.has_excluded_volume


@pytest.mark.unit
class TestDefaults:
    """Test the JSON defaults layer."""

    def test_packaged_defaults(self):
        settings = load_defaults_from_json()
        for key in ('max_trials', 'nucleon_mass_gev', 'pair_tail_sigmas', 'pair_tail_padding', 'seed'):
            assert key in settings
        assert get_defaults_json_path().name == "defaults.json"

    def test_save_defaults(self, tmp_path):
        target = tmp_path / "defaults.json"
        save_defaults_to_json({'max_trials': 10}, target)
        with open(target, encoding='utf-8') as f:
            assert json.load(f) == {'max_trials': 10}


@pytest.mark.unit
class TestCollisionKinematics:
    """Test the collision-energy conversions."""

    def test_threshold(self):
        kinematics = CollisionKinematics.from_cms_energy(2.0 * NUCLEON_MASS_GEV)
        assert_allclose(kinematics.ekin, 0.0, atol=1e-12)
        assert_allclose(kinematics.ycm, 0.0, atol=1e-12)

    def test_kinetic_energy_round_trip(self):
        kinematics = CollisionKinematics.from_kinetic_energy(10.0)
        assert_allclose(kinematics.ekin, 10.0, rtol=1e-12)
        assert_allclose(kinematics.elab, 10.0 + NUCLEON_MASS_GEV, rtol=1e-12)

    def test_lab_energy_round_trip(self):
        kinematics = CollisionKinematics.from_lab_energy(30.0)
        assert_allclose(kinematics.elab, 30.0, rtol=1e-12)

    def test_ycm_is_half_beam_rapidity(self):
        """For a fixed-target collision y_cm = y_beam / 2."""
        m = NUCLEON_MASS_GEV
        kinematics = CollisionKinematics.from_kinetic_energy(158.0)
        p = np.sqrt(kinematics.elab ** 2 - m ** 2)
        y_beam = 0.5 * np.log((kinematics.elab + p) / (kinematics.elab - p))
        assert_allclose(kinematics.ycm, 0.5 * y_beam, rtol=1e-10)

    def test_invalid_energies(self):
        with pytest.raises(ValueError):
            CollisionKinematics.from_cms_energy(1.0)
        with pytest.raises(ValueError):
            CollisionKinematics.from_kinetic_energy(-1.0)
        with pytest.raises(ValueError):
            CollisionKinematics.from_lab_energy(0.5)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
