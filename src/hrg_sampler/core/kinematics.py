"""
Collision kinematics for a symmetric nucleus-nucleus collision.

The collision energy can be given per nucleon as kinetic energy in the
lab frame, total lab energy, or CMS energy √s_NN. All three are kept
consistent together with the CMS rapidity y_cm used to boost events.
"""

import numpy as np
from dataclasses import dataclass

from hrg_sampler.core.constants import NUCLEON_MASS_GEV


@dataclass(frozen=True)
class CollisionKinematics:
    """
    Energies per nucleon (GeV) and the CMS rapidity.

    Attributes:
        ssqrt: CMS energy √s_NN.
        ekin: Lab kinetic energy of the projectile nucleon.
        elab: Lab total energy of the projectile nucleon.
        ycm: Rapidity of the CMS in the lab frame.
    """
    ssqrt: float
    ekin: float
    elab: float
    ycm: float

    @classmethod
    def from_cms_energy(cls, ssqrt: float, m_nucleon: float = NUCLEON_MASS_GEV) -> "CollisionKinematics":
        """
        Build kinematics from √s_NN.

        E_kin = s / (2m) - 2m,  E_lab = m + E_kin,
        y_cm = ½ ln[(E_lab + m + p_lab) / (E_lab + m - p_lab)]
        """
        if ssqrt < 2 * m_nucleon:
            raise ValueError(f"ssqrt must be at least 2 m_N = {2 * m_nucleon}, got {ssqrt}")
        ekin = ssqrt * ssqrt / 2.0 / m_nucleon - 2.0 * m_nucleon
        elab = m_nucleon + ekin
        plab = np.sqrt(max(elab * elab - m_nucleon * m_nucleon, 0.0))
        ycm = 0.5 * np.log((elab + m_nucleon + plab) / (elab + m_nucleon - plab))
        return cls(ssqrt=float(ssqrt), ekin=float(ekin), elab=float(elab), ycm=float(ycm))

    @classmethod
    def from_kinetic_energy(cls, ekin: float, m_nucleon: float = NUCLEON_MASS_GEV) -> "CollisionKinematics":
        """Build kinematics from the lab kinetic energy per nucleon."""
        if ekin < 0:
            raise ValueError(f"ekin must be non-negative, got {ekin}")
        return cls.from_cms_energy(np.sqrt(2.0 * m_nucleon * (ekin + 2.0 * m_nucleon)), m_nucleon)

    @classmethod
    def from_lab_energy(cls, elab: float, m_nucleon: float = NUCLEON_MASS_GEV) -> "CollisionKinematics":
        """Build kinematics from the lab total energy per nucleon."""
        if elab < m_nucleon:
            raise ValueError(f"elab must be at least m_N = {m_nucleon}, got {elab}")
        return cls.from_cms_energy(np.sqrt(2.0 * m_nucleon * (elab + m_nucleon)), m_nucleon)
