"""
Pytest configuration for the HRG multiplicity sampler test suite.

Provides a toy hadron gas: the built-in species list with fixed
densities, so tests never depend on an external thermal model.
"""

import itertools
import pytest
import sys
from pathlib import Path

import numpy as np
from scipy.special import gammaln, xlogy

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from hrg_sampler.core.particle_configurations import ALL_HADRONS
from hrg_sampler.core.thermal_model import ThermalModelBase


def pytest_configure(config):
    """Called after command line options have been parsed."""
    # Add markers for test organization
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# Toy densities (fm^-3) for ALL_HADRONS, small muB > 0
TOY_DENSITIES = {
    "pi+": 0.0300, "pi-": 0.0300, "pi0": 0.0300, "eta": 0.0050,
    "rho+": 0.0060, "rho-": 0.0060, "rho0": 0.0060,
    "p": 0.0060, "anti-p": 0.0035, "n": 0.0060, "anti-n": 0.0035,
    "Delta++": 0.0025, "anti-Delta++": 0.0015,
    "K+": 0.0060, "K-": 0.0052, "K0": 0.0060, "anti-K0": 0.0052, "phi": 0.0020,
    "Lambda": 0.0020, "anti-Lambda": 0.0012,
    "Sigma+": 0.0007, "anti-Sigma+": 0.0004,
    "Xi-": 0.0004, "anti-Xi-": 0.0003,
    "Omega-": 0.00007, "anti-Omega-": 0.00005,
    "D0": 0.0010, "anti-D0": 0.0010, "D+": 0.0005, "D-": 0.0005,
    "Ds+": 0.0003, "Ds-": 0.0003,
    "Lambda_c+": 0.0003, "anti-Lambda_c-": 0.0002,
    "J/psi": 0.0001,
}

TOY_VOLUME = 300.0  # fm^3


@pytest.fixture
def rng():
    """Seeded random source."""
    return np.random.default_rng(12345)


@pytest.fixture
def toy_species():
    """Built-in hadron list."""
    return list(ALL_HADRONS)


@pytest.fixture
def toy_model(toy_species):
    """Thermal model adapter with toy densities."""
    return ThermalModelBase(
        toy_species,
        [TOY_DENSITIES[s.name] for s in toy_species],
        name="toy HRG",
    )


@pytest.fixture
def toy_means(toy_model):
    """Mean multiplicities of the toy model in TOY_VOLUME."""
    return toy_model.mean_counts(TOY_VOLUME)


@pytest.fixture
def conditioned_poisson_means():
    """
    Brute-force means of independent Poissons conditioned on exact charges.

    Returns a function (species, means, targets, cutoff) -> per-species
    means, enumerating every count below `cutoff`.
    """
    def compute(species, means, targets, cutoff):
        means = np.asarray(means, dtype=float)
        grid = np.array(list(itertools.product(range(cutoff), repeat=len(species))))
        log_p = np.sum(xlogy(grid, means) - means - gammaln(grid + 1), axis=1)
        allowed = np.ones(len(grid), dtype=bool)
        for charge, target in targets.items():
            vector = np.array([s.quantum_number(charge) for s in species])
            allowed &= (grid @ vector) == target
        log_p = log_p[allowed]
        p = np.exp(log_p - log_p.max())
        return (grid[allowed] * p[:, None]).sum(axis=0) / p.sum()

    return compute
