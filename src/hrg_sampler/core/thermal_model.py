"""
Thermal-model adapter consumed by the event generator.

The equilibrium solver itself lives outside this package. ThermalModelBase
only carries what the sampler needs from it: the species list and the
per-species mean densities at the configured thermal parameters. An
excluded-volume or van der Waals model is represented by the same adapter
holding its corrected densities.
"""

import numpy as np
from numpy.typing import NDArray
from typing import Sequence, Optional

from hrg_sampler.core.particle_configurations import Species


class ThermalModelBase:
    """
    Species list plus mean densities supplied by an external thermal model.

    Attributes:
        species: Ordered particle species.
        name: Label used in diagnostics.
    """

    def __init__(
        self,
        species: Sequence[Species],
        densities: Sequence[float],
        name: str = "ideal HRG",
    ):
        """
        Args:
            species: Ordered particle species.
            densities: Mean number density of each species (fm^-3). May
                       contain negative or NaN entries from excluded-volume
                       corrections; the table builder clamps those.
            name: Label used in diagnostics.
        """
        self.species = list(species)
        self._densities = np.asarray(densities, dtype=float)
        self.name = name

        if self._densities.ndim != 1 or len(self._densities) != len(self.species):
            raise ValueError(
                f"Expected {len(self.species)} densities, got shape {self._densities.shape}"
            )

    @property
    def densities(self) -> NDArray[np.floating]:
        """Per-species mean densities (fm^-3), read-only copy."""
        return self._densities.copy()

    def density(self, index: int) -> float:
        """Mean density of species `index`."""
        return float(self._densities[index])

    def mean_counts(self, volume: float, mask: Optional[NDArray[np.bool_]] = None) -> NDArray[np.floating]:
        """
        Mean multiplicities density × volume.

        Args:
            volume: System volume (fm^3).
            mask: Optional boolean mask; species where it is False get zero.
        """
        means = self._densities * volume
        if mask is not None:
            means = np.where(mask, means, 0.0)
        return means

    def __len__(self) -> int:
        return len(self.species)

    def __repr__(self) -> str:
        return f"ThermalModelBase(name={self.name!r}, n_species={len(self.species)})"
