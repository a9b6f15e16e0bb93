"""
Tests for the ensemble samplers.

Exact conservation is checked event by event. Distribution checks
compare sampled means with values computed by brute-force enumeration of
the conditioned Poisson distribution.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.special import gammaln

from hrg_sampler.core.configuration import Ensemble, EventGeneratorConfiguration, ThermalParameters
from hrg_sampler.core.exceptions import ConfigurationError, NonConvergentSamplingError
from hrg_sampler.core.particle_configurations import (
    CHARM_HADRONS,
    PROTON,
    ANTIPROTON,
    NEUTRON,
    PION_PLUS,
    PION_MINUS,
    KAON_PLUS,
    KAON_MINUS,
    DEUTERON,
    ANTIDEUTERON,
)
from hrg_sampler.ensembles import (
    AcceptanceCounters,
    WeightState,
    GrandCanonicalSampler,
    CanonicalSampler,
    StrangenessCanonicalSampler,
    LegacyStrangenessCanonicalSampler,
    CharmCanonicalSampler,
    check_conservation_feasibility,
    create_sampler,
)
from hrg_sampler.ensembles.base import charge_vectors


def net_charges(species, totals):
    vectors = charge_vectors(species)
    return {q: int(np.dot(v, totals)) for q, v in vectors.items()}


@pytest.mark.unit
class TestGrandCanonicalSampler:
    """Test independent Poisson sampling."""

    def test_means_converge(self, rng):
        species = [PION_PLUS, PION_MINUS, PROTON]
        means = np.array([5.0, 4.0, 1.0])
        sampler = GrandCanonicalSampler(species, means, rng)
        totals = np.array([sampler.sample().totals for _ in range(20000)])
        assert_allclose(totals.mean(axis=0), means, atol=0.08)

    def test_weight_is_one(self, rng):
        weights = WeightState(last_weight=0.3, last_log_weight=math.log(0.3))
        sampler = GrandCanonicalSampler([PROTON], [2.0], rng, weights=weights)
        result = sampler.sample()
        assert result.weight == 1.0
        assert result.log_weight == 0.0
        assert weights.last_weight == 1.0
        assert weights.last_log_weight == 0.0

    def test_zero_mean_gives_zero(self, rng):
        sampler = GrandCanonicalSampler([PROTON, ANTIPROTON], [0.0, 3.0], rng)
        for _ in range(100):
            assert sampler.sample().totals[0] == 0


@pytest.mark.unit
class TestCanonicalSampler:
    """Test exact B, Q, S, C conservation."""

    def test_conservation(self, toy_species, toy_means, rng):
        targets = {'B': 2, 'Q': 1, 'S': 0, 'C': 0}
        sampler = CanonicalSampler(toy_species, toy_means, rng, targets=targets)
        for _ in range(300):
            result = sampler.sample()
            assert np.all(result.totals >= 0)
            assert net_charges(toy_species, result.totals) == targets

    def test_baryon_antibaryon_pair(self, rng):
        """With B = 0 a proton/antiproton system has equal counts."""
        sampler = CanonicalSampler([PROTON, ANTIPROTON], [3.0, 3.0], rng)
        counts = []
        for _ in range(4000):
            n_p, n_pbar = sampler.sample().totals
            assert n_p == n_pbar
            counts.append(n_p)

        # P(n) ∝ 3^n 3^n / (n!)^2
        n = np.arange(0, 80)
        log_w = 2 * n * np.log(3.0) - 2 * gammaln(n + 1)
        w = np.exp(log_w - log_w.max())
        assert_allclose(np.mean(counts), np.sum(n * w) / np.sum(w), atol=0.1)

    def test_matches_conditioned_poisson(self, rng, conditioned_poisson_means):
        """Sampled means equal those of independent Poissons conditioned on B and Q."""
        species = [PROTON, NEUTRON, ANTIPROTON, PION_PLUS, PION_MINUS]
        means = np.array([0.6, 0.5, 0.4, 0.8, 0.7])
        targets = {'B': 1, 'Q': 0, 'S': 0, 'C': 0}
        expected = conditioned_poisson_means(species, means, targets, cutoff=12)

        sampler = CanonicalSampler(species, means, rng, targets=targets)
        totals = np.array([sampler.sample().totals for _ in range(20000)])
        assert_allclose(totals.mean(axis=0), expected, atol=0.03)

    def test_weighted_means_match_conditioned_poisson(self, rng, conditioned_poisson_means):
        """Weight-averaged means of weighted events equal the conditioned means."""
        species = [PROTON, NEUTRON, ANTIPROTON, PION_PLUS, PION_MINUS]
        means = np.array([0.6, 0.5, 0.4, 0.8, 0.7])
        targets = {'B': 1, 'Q': 0, 'S': 0, 'C': 0}
        expected = conditioned_poisson_means(species, means, targets, cutoff=12)

        sampler = CanonicalSampler(species, means, rng, targets=targets, weighted_events=True)
        results = [sampler.sample() for _ in range(20000)]
        totals = np.array([r.totals for r in results])
        weights = np.array([r.weight for r in results])
        assert np.any(weights < 1.0)
        assert_allclose(np.average(totals, axis=0, weights=weights), expected, atol=0.04)

    def test_weights(self, toy_species, toy_means, rng):
        weights = WeightState()
        sampler = CanonicalSampler(toy_species, toy_means, rng, weights=weights, targets={'B': 1})
        for _ in range(50):
            result = sampler.sample()
            assert result.weight == 1.0
            assert result.log_weight == 0.0
            assert 0.0 < result.acceptance <= 1.0
            assert_allclose(result.acceptance, math.exp(result.log_acceptance))
            assert weights.last_weight == result.weight
            assert weights.last_log_weight == result.log_weight

    def test_weighted_events_skip_rejection(self, rng):
        configuration = EventGeneratorConfiguration(ensemble=Ensemble.CE, weighted_events=True)
        sampler = create_sampler(configuration, [PROTON, ANTIPROTON], np.array([3.0, 2.0]), rng)
        for _ in range(200):
            result = sampler.sample()
            assert result.trials == 1
            assert result.totals[0] == result.totals[1]
            assert 0.0 < result.weight <= 1.0
            assert_allclose(result.weight, math.exp(result.log_weight))
            assert_allclose(result.log_weight, result.log_acceptance)

    def test_counters(self, toy_species, toy_means, rng):
        counters = AcceptanceCounters()
        sampler = CanonicalSampler(toy_species, toy_means, rng, counters=counters, targets={'B': 2})
        trials = sum(sampler.sample().trials for _ in range(100))
        assert counters.accepted == 100
        assert counters.total == trials
        assert 0.0 < counters.acceptance_rate <= 1.0

    def test_multi_unit_species(self, rng):
        """Deuterons are free species; the baryon pair balances them."""
        species = [PROTON, ANTIPROTON, DEUTERON, ANTIDEUTERON, PION_PLUS, PION_MINUS]
        means = np.array([4.0, 3.0, 0.5, 0.3, 5.0, 5.0])
        sampler = CanonicalSampler(species, means, rng, targets={'B': 3, 'Q': 3})
        for _ in range(200):
            totals = sampler.sample().totals
            assert net_charges(species, totals) == {'B': 3, 'Q': 3, 'S': 0, 'C': 0}

    def test_unreachable_target(self, rng):
        with pytest.raises(ConfigurationError):
            CanonicalSampler([PION_PLUS, PION_MINUS], [1.0, 1.0], rng, targets={'B': 1})

    def test_target_not_multiple_of_charge(self, rng):
        with pytest.raises(ConfigurationError):
            CanonicalSampler([DEUTERON, ANTIDEUTERON], [1.0, 1.0], rng, targets={'B': 1})

    def test_feasibility_ignores_zero_means(self):
        with pytest.raises(ConfigurationError):
            check_conservation_feasibility([PROTON, PION_PLUS], np.array([0.0, 1.0]), {'B': 1})
        check_conservation_feasibility([PROTON, PION_PLUS], np.array([0.0, 1.0]), {'B': 0})


@pytest.mark.unit
class TestStrangenessCanonicalSampler:
    """Test exact S conservation."""

    def test_conservation(self, toy_species, toy_means, rng):
        sampler = StrangenessCanonicalSampler(toy_species, toy_means, rng, targets={'S': 0, 'B': 5})
        assert sampler.targets == {'S': 0}
        for _ in range(300):
            totals = sampler.sample().totals
            assert np.all(totals >= 0)
            assert net_charges(toy_species, totals)['S'] == 0

    def test_legacy_conservation(self, toy_species, toy_means, rng):
        sampler = LegacyStrangenessCanonicalSampler(toy_species, toy_means, rng, targets={'S': 1})
        for _ in range(100):
            result = sampler.sample()
            assert net_charges(toy_species, result.totals)['S'] == 1
            assert result.weight == 1.0

    def test_variants_agree(self, toy_species, toy_means):
        refined = StrangenessCanonicalSampler(toy_species, toy_means, np.random.default_rng(1))
        legacy = LegacyStrangenessCanonicalSampler(toy_species, toy_means, np.random.default_rng(2))
        refined_totals = np.array([refined.sample().totals for _ in range(3000)])
        legacy_totals = np.array([legacy.sample().totals for _ in range(3000)])
        kaons = [toy_species.index(KAON_PLUS), toy_species.index(KAON_MINUS)]
        assert_allclose(
            refined_totals[:, kaons].mean(axis=0),
            legacy_totals[:, kaons].mean(axis=0),
            atol=0.15,
        )

    def test_no_strange_species(self, rng):
        """Without strange species S = 0 is accepted on the first trial."""
        species = [PION_PLUS, PION_MINUS, PROTON, ANTIPROTON]
        counters = AcceptanceCounters()
        sampler = StrangenessCanonicalSampler(species, [3.0, 3.0, 1.0, 0.5], rng, counters=counters)
        for _ in range(100):
            result = sampler.sample()
            assert result.trials == 1
            assert net_charges(species, result.totals)['S'] == 0
        assert counters.accepted == counters.total == 100

    def test_legacy_ignores_weighted_events(self, toy_species, toy_means, rng):
        sampler = LegacyStrangenessCanonicalSampler(toy_species, toy_means, rng, weighted_events=True)
        for _ in range(50):
            result = sampler.sample()
            assert result.weight == 1.0
            assert result.log_weight == 0.0

    def test_wrong_sign_target(self, rng):
        """S = -1 cannot be reached when only the S = +1 kaon has a mean."""
        for cls in (StrangenessCanonicalSampler, LegacyStrangenessCanonicalSampler):
            with pytest.raises(ConfigurationError):
                cls([KAON_PLUS, KAON_MINUS], [5.0, 0.0], rng, targets={'S': -1})

    def test_trial_cap(self, rng):
        """A reachable but very unlikely target exhausts the trial budget."""
        for cls in (StrangenessCanonicalSampler, LegacyStrangenessCanonicalSampler):
            sampler = cls([KAON_PLUS, KAON_MINUS], [50.0, 50.0], rng, targets={'S': 80}, max_trials=10)
            with pytest.raises(NonConvergentSamplingError) as excinfo:
                sampler.sample()
            assert excinfo.value.trials == 10
            assert excinfo.value.ensemble == "SCE"

    def test_subvolume(self, rng):
        species = [KAON_PLUS, KAON_MINUS]
        sampler = StrangenessCanonicalSampler(species, [20.0, 20.0], rng, canonical_fraction=0.5)
        nets = [net_charges(species, sampler.sample().totals)['S'] for _ in range(300)]
        assert np.std(nets) > 0
        assert abs(np.mean(nets)) < 1.0

    def test_subvolume_matches_brute_force(self, rng, conditioned_poisson_means):
        """Canonical part at f * mean plus a Poisson part at (1 - f) * mean."""
        species = [KAON_PLUS, KAON_MINUS]
        means = np.array([1.0, 0.8])
        fraction = 0.5
        inside = conditioned_poisson_means(species, fraction * means, {'S': 0}, cutoff=20)
        expected = inside + (1.0 - fraction) * means

        sampler = StrangenessCanonicalSampler(species, means, rng, canonical_fraction=fraction)
        totals = np.array([sampler.sample().totals for _ in range(20000)])
        assert_allclose(totals.mean(axis=0), expected, atol=0.03)

        # Only the outside Poissons move the net strangeness
        nets = totals[:, 0] - totals[:, 1]
        assert_allclose(np.mean(nets), (1.0 - fraction) * (means[0] - means[1]), atol=0.03)
        assert_allclose(np.var(nets), (1.0 - fraction) * means.sum(), atol=0.05)

    def test_invalid_fraction(self, rng):
        for fraction in (0.0, 1.5):
            with pytest.raises(ConfigurationError):
                StrangenessCanonicalSampler([KAON_PLUS, KAON_MINUS], [1.0, 1.0], rng,
                                            canonical_fraction=fraction)


@pytest.mark.unit
class TestCharmCanonicalSampler:
    """Test exact C conservation."""

    @pytest.mark.parametrize("target", [0, 1, -2])
    def test_conservation(self, rng, target):
        species = list(CHARM_HADRONS)
        means = np.full(len(species), 0.8)
        sampler = CharmCanonicalSampler(species, means, rng, targets={'C': target})
        for _ in range(200):
            totals = sampler.sample().totals
            assert np.all(totals >= 0)
            assert net_charges(species, totals)['C'] == target


@pytest.mark.unit
class TestCreateSampler:
    """Test sampler selection."""

    @pytest.mark.parametrize("configuration, expected", [
        (EventGeneratorConfiguration(ensemble=Ensemble.GCE), GrandCanonicalSampler),
        (EventGeneratorConfiguration(ensemble=Ensemble.CE), CanonicalSampler),
        (EventGeneratorConfiguration(ensemble=Ensemble.SCE), StrangenessCanonicalSampler),
        (EventGeneratorConfiguration(ensemble=Ensemble.SCE, sce_variant='legacy'),
         LegacyStrangenessCanonicalSampler),
        (EventGeneratorConfiguration(ensemble=Ensemble.CCE), CharmCanonicalSampler),
    ])
    def test_dispatch(self, configuration, expected, toy_species, toy_means, rng):
        sampler = create_sampler(configuration, toy_species, toy_means, rng)
        assert type(sampler) is expected

    def test_legacy_subvolume_uses_refined(self, toy_species, toy_means, rng):
        configuration = EventGeneratorConfiguration(
            ensemble=Ensemble.SCE,
            sce_variant='legacy',
            parameters=ThermalParameters(volume=300.0, canonical_volume=100.0),
        )
        sampler = create_sampler(configuration, toy_species, toy_means, rng)
        assert type(sampler) is StrangenessCanonicalSampler
        assert_allclose(sampler.canonical_fraction, 1.0 / 3.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
