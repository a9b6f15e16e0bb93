"""
Particle species for the HRG multiplicity sampler.

A Species carries the additive quantum numbers (B, Q, S, C) and a
stability flag. A handful of light, strange and charm hadrons is
provided for scripts and tests; production runs take the species list
from the external thermal model.
"""

from dataclasses import dataclass
from typing import Tuple, Optional


# ============================================================================
# SPECIES
# ============================================================================

@dataclass(frozen=True)
class Species:
    """Immutable particle type with its conserved charges."""
    name: str
    pdg: int
    baryon: int = 0  # B
    charge: int = 0  # Q, in units of e
    strangeness: int = 0  # S
    charm: int = 0  # C
    stable: bool = True  # False for resonances that decay strongly

    def quantum_number(self, name: str) -> int:
        """
        Return the quantum number called `name`.

        Args:
            name: One of 'B', 'Q', 'S', 'C'.
        """
        return getattr(self, QUANTUM_NUMBER_ATTRIBUTES[name])

    @property
    def quantum_numbers(self) -> Tuple[int, int, int, int]:
        """(B, Q, S, C) tuple."""
        return (self.baryon, self.charge, self.strangeness, self.charm)

    @property
    def is_neutral(self) -> bool:
        """True if the species carries none of the conserved charges."""
        return not any(self.quantum_numbers)

    def antiparticle(self, name: str, stable: Optional[bool] = None) -> "Species":
        """Return the charge conjugate with a new name."""
        return Species(
            name=name,
            pdg=-self.pdg,
            baryon=-self.baryon,
            charge=-self.charge,
            strangeness=-self.strangeness,
            charm=-self.charm,
            stable=self.stable if stable is None else stable,
        )


# Conserved charges in cascade order: baryon number, strangeness,
# electric charge, charm.
QUANTUM_NUMBER_ATTRIBUTES = {
    'B': 'baryon',
    'S': 'strangeness',
    'Q': 'charge',
    'C': 'charm',
}

CONSERVED_CHARGES = ('B', 'S', 'Q', 'C')


# ============================================================================
# LIGHT MESONS
# ============================================================================

PION_PLUS = Species(name="pi+", pdg=211, charge=1)
PION_MINUS = PION_PLUS.antiparticle("pi-")
PION_ZERO = Species(name="pi0", pdg=111)
ETA = Species(name="eta", pdg=221, stable=False)
RHO_PLUS = Species(name="rho+", pdg=213, charge=1, stable=False)
RHO_MINUS = RHO_PLUS.antiparticle("rho-")
RHO_ZERO = Species(name="rho0", pdg=113, stable=False)

# ============================================================================
# STRANGE MESONS
# ============================================================================

KAON_PLUS = Species(name="K+", pdg=321, charge=1, strangeness=1)
KAON_MINUS = KAON_PLUS.antiparticle("K-")
KAON_ZERO = Species(name="K0", pdg=311, strangeness=1)
KAON_ZERO_BAR = KAON_ZERO.antiparticle("anti-K0")
PHI = Species(name="phi", pdg=333, stable=False)  # ss̄, net S = 0

# ============================================================================
# BARYONS
# ============================================================================

PROTON = Species(name="p", pdg=2212, baryon=1, charge=1)
ANTIPROTON = PROTON.antiparticle("anti-p")
NEUTRON = Species(name="n", pdg=2112, baryon=1)
ANTINEUTRON = NEUTRON.antiparticle("anti-n")
DELTA_PLUS_PLUS = Species(name="Delta++", pdg=2224, baryon=1, charge=2, stable=False)
ANTIDELTA_PLUS_PLUS = DELTA_PLUS_PLUS.antiparticle("anti-Delta++")
LAMBDA = Species(name="Lambda", pdg=3122, baryon=1, strangeness=-1)
ANTILAMBDA = LAMBDA.antiparticle("anti-Lambda")
SIGMA_PLUS = Species(name="Sigma+", pdg=3222, baryon=1, charge=1, strangeness=-1)
ANTISIGMA_PLUS = SIGMA_PLUS.antiparticle("anti-Sigma+")
XI_MINUS = Species(name="Xi-", pdg=3312, baryon=1, charge=-1, strangeness=-2)
ANTIXI_MINUS = XI_MINUS.antiparticle("anti-Xi-")
OMEGA_MINUS = Species(name="Omega-", pdg=3334, baryon=1, charge=-1, strangeness=-3)
ANTIOMEGA_MINUS = OMEGA_MINUS.antiparticle("anti-Omega-")

# ============================================================================
# LIGHT NUCLEI
# ============================================================================

DEUTERON = Species(name="d", pdg=1000010020, baryon=2, charge=1)
ANTIDEUTERON = DEUTERON.antiparticle("anti-d")

# ============================================================================
# CHARM HADRONS
# ============================================================================

D_ZERO = Species(name="D0", pdg=421, charm=1)
D_ZERO_BAR = D_ZERO.antiparticle("anti-D0")
D_PLUS = Species(name="D+", pdg=411, charge=1, charm=1)
D_MINUS = D_PLUS.antiparticle("D-")
DS_PLUS = Species(name="Ds+", pdg=431, charge=1, strangeness=1, charm=1)
DS_MINUS = DS_PLUS.antiparticle("Ds-")
LAMBDA_C = Species(name="Lambda_c+", pdg=4122, baryon=1, charge=1, charm=1)
ANTILAMBDA_C = LAMBDA_C.antiparticle("anti-Lambda_c-")
J_PSI = Species(name="J/psi", pdg=443, stable=False)  # cc̄, net C = 0

# ============================================================================
# PARTICLE LISTS
# ============================================================================

LIGHT_HADRONS = [
    PION_PLUS, PION_MINUS, PION_ZERO, ETA,
    RHO_PLUS, RHO_MINUS, RHO_ZERO,
    PROTON, ANTIPROTON, NEUTRON, ANTINEUTRON,
    DELTA_PLUS_PLUS, ANTIDELTA_PLUS_PLUS,
]

STRANGE_HADRONS = [
    KAON_PLUS, KAON_MINUS, KAON_ZERO, KAON_ZERO_BAR, PHI,
    LAMBDA, ANTILAMBDA, SIGMA_PLUS, ANTISIGMA_PLUS,
    XI_MINUS, ANTIXI_MINUS, OMEGA_MINUS, ANTIOMEGA_MINUS,
]

CHARM_HADRONS = [
    D_ZERO, D_ZERO_BAR, D_PLUS, D_MINUS, DS_PLUS, DS_MINUS,
    LAMBDA_C, ANTILAMBDA_C, J_PSI,
]

LIGHT_NUCLEI = [DEUTERON, ANTIDEUTERON]

ALL_HADRONS = LIGHT_HADRONS + STRANGE_HADRONS + CHARM_HADRONS


def get_species_by_name(name: str) -> Species:
    """Look up a built-in species by name."""
    for species in ALL_HADRONS + LIGHT_NUCLEI:
        if species.name == name:
            return species
    raise ValueError(f"Unknown species: {name}")
