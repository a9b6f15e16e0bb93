"""
Quantum-number grouping of particle species.

Species are partitioned into mutually exclusive groups by the sign and
type of their conserved charges:

    B = +1                     -> baryons
    B = -1                     -> antibaryons
    B = 0, S = +1 / -1         -> strange / antistrange mesons
    B = S = 0, Q = +1 / -1     -> charged / anticharged mesons
    B = S = Q = 0, C = +1 / -1 -> charm / anticharm mesons

Independently of that partition, every species with C = +1 / -1 belongs
to the aggregate charm / anticharm group used when charm is the only
exactly conserved charge.

Each group member carries exactly one unit of the group's defining
charge, so the net charge of a group pair equals the difference of the
two group counts. Multi-unit species (deuterons, Xi-like |S| = 2 mesons,
doubly charmed hadrons) are not grouped and are sampled as free Poisson
species instead.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.core.particle_configurations import Species


# ============================================================================
# GROUP NAMES
# ============================================================================

BARYONS = 'baryons'
ANTIBARYONS = 'antibaryons'
STRANGE_MESONS = 'strange_mesons'
ANTISTRANGE_MESONS = 'antistrange_mesons'
CHARGED_MESONS = 'charged_mesons'
ANTICHARGED_MESONS = 'anticharged_mesons'
CHARM_MESONS = 'charm_mesons'
ANTICHARM_MESONS = 'anticharm_mesons'
CHARM_ALL = 'charm_all'
ANTICHARM_ALL = 'anticharm_all'

EXCLUSIVE_GROUPS = (
    BARYONS, ANTIBARYONS,
    STRANGE_MESONS, ANTISTRANGE_MESONS,
    CHARGED_MESONS, ANTICHARGED_MESONS,
    CHARM_MESONS, ANTICHARM_MESONS,
)

AGGREGATE_GROUPS = (CHARM_ALL, ANTICHARM_ALL)

ALL_GROUPS = EXCLUSIVE_GROUPS + AGGREGATE_GROUPS


@dataclass(frozen=True)
class QuantumNumberGroup:
    """
    A named set of species sharing sign and conserved-charge category.

    Attributes:
        name: Group name, e.g. 'baryons'.
        members: (mean count, species index) pairs.
    """
    name: str
    members: Tuple[Tuple[float, int], ...] = ()

    @property
    def indices(self) -> NDArray[np.int64]:
        return np.array([index for _, index in self.members], dtype=np.int64)

    @property
    def weights(self) -> NDArray[np.floating]:
        return np.array([weight for weight, _ in self.members], dtype=float)

    def __len__(self) -> int:
        return len(self.members)


def _sign_group(value: int, positive: str, negative: str) -> Optional[str]:
    """Group for a unit charge, None for multi-unit charges."""
    if value == 1:
        return positive
    if value == -1:
        return negative
    return None


def classify_species(species: Species) -> Tuple[Optional[str], Optional[str]]:
    """
    Classify one species.

    Returns:
        (exclusive group or None, aggregate charm group or None)
    """
    if species.baryon != 0:
        exclusive = _sign_group(species.baryon, BARYONS, ANTIBARYONS)
    elif species.strangeness != 0:
        exclusive = _sign_group(species.strangeness, STRANGE_MESONS, ANTISTRANGE_MESONS)
    elif species.charge != 0:
        exclusive = _sign_group(species.charge, CHARGED_MESONS, ANTICHARGED_MESONS)
    elif species.charm != 0:
        exclusive = _sign_group(species.charm, CHARM_MESONS, ANTICHARM_MESONS)
    else:
        exclusive = None

    aggregate = _sign_group(species.charm, CHARM_ALL, ANTICHARM_ALL)
    return exclusive, aggregate


def group_species(
    species: Sequence[Species],
    mean_counts: Sequence[float],
) -> Dict[str, QuantumNumberGroup]:
    """
    Partition species into quantum-number groups.

    Args:
        species: Ordered particle species.
        mean_counts: Mean multiplicity (density × volume) of each species.

    Returns:
        Dictionary {group name: QuantumNumberGroup} containing every name in
        ALL_GROUPS; groups without members are empty.
    """
    if len(species) != len(mean_counts):
        raise ValueError(
            f"Got {len(species)} species but {len(mean_counts)} mean counts"
        )

    members: Dict[str, list] = {name: [] for name in ALL_GROUPS}
    for index, (particle, mean) in enumerate(zip(species, mean_counts)):
        exclusive, aggregate = classify_species(particle)
        if exclusive is not None:
            members[exclusive].append((float(mean), index))
        if aggregate is not None:
            members[aggregate].append((float(mean), index))

    return {name: QuantumNumberGroup(name, tuple(entries)) for name, entries in members.items()}


# ============================================================================
# GROUP PAIRS
# ============================================================================

@dataclass(frozen=True)
class GroupPair:
    """
    A particle group and its antiparticle group balancing one charge.

    The net charge carried by the pair equals
    count(positive) - count(negative).

    Attributes:
        charge: Conserved charge name ('B', 'S', 'Q' or 'C').
        positive: Name of the group carrying +1 unit.
        negative: Name of the group carrying -1 unit.
        projection: Maps a species to its value of `charge`.
    """
    charge: str
    positive: str
    negative: str
    projection: Callable[[Species], int] = field(default=None, compare=False)

    def __post_init__(self):
        if self.projection is None:
            charge = self.charge
            object.__setattr__(self, 'projection', lambda s: s.quantum_number(charge))

    def project(self, species: Sequence[Species]) -> NDArray[np.int64]:
        """Charge vector of `species` under this pair's quantum number."""
        return np.array([self.projection(s) for s in species], dtype=np.int64)

    def member_indices(self, groups: Dict[str, QuantumNumberGroup]) -> NDArray[np.int64]:
        return np.concatenate([groups[self.positive].indices, groups[self.negative].indices])


# Canonical cascade: each stage balances the residual charge left by the
# species drawn before it. Later groups never carry an earlier stage's charge.
CE_PAIRS = (
    GroupPair('B', BARYONS, ANTIBARYONS),
    GroupPair('S', STRANGE_MESONS, ANTISTRANGE_MESONS),
    GroupPair('Q', CHARGED_MESONS, ANTICHARGED_MESONS),
    GroupPair('C', CHARM_MESONS, ANTICHARM_MESONS),
)

SCE_PAIRS = (
    GroupPair('S', STRANGE_MESONS, ANTISTRANGE_MESONS),
)

CCE_PAIRS = (
    GroupPair('C', CHARM_ALL, ANTICHARM_ALL),
)
