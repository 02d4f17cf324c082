"""
CitZAF matrix correction.

The conventional ZAF configuration of Armstrong's CITZAF program:

- atomic number: Duncumb & Reed mean-energy stopping power with
  Berger & Seltzer (1964) J values and the Love & Scott (1978)
  backscatter factor;
- absorption: Philibert-Duncumb-Heinrich with Heinrich's modified Lenard
  coefficient and h = 1.2 A / Z^2.

The generated intensity F = R / S carries arbitrary (but consistent) units;
only its ratio between unknown and standard is meaningful.
"""

from typing import Union

import numpy as np

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.constants import BETHE_FACTOR, EV_PER_KEV, PDH_H_FACTOR
from epmaquant.core.exceptions import DomainError
from epmaquant.correction.base import MatrixCorrection
from epmaquant.correction.physics import (
    backscatter_factor_love_scott,
    chi,
    eta_love_scott,
    j_berger_seltzer,
    lenard_sigma,
)


class CitZAF(MatrixCorrection):
    """
    CITZAF-style ZAF model.

    Attributes
    ----------
    sigma : float
        Modified Lenard coefficient in cm^2/g
    h : float
        Philibert absorption parameter
    stopping_power : float
        Duncumb-Reed stopping power factor S
    backscatter_factor : float
        Love-Scott backscatter factor R
    """

    name = "CitZAF"

    def __init__(self, material: Material, subshell: AtomicSubShell, e0: float):
        super().__init__(material, subshell, e0)
        db = get_database()
        norm = material.normalized()
        elms = [elm for elm in norm.elements if norm[elm] > 0.0]
        c = np.array([norm[elm] for elm in elms])
        z = np.array([db.element(elm).z for elm in elms], dtype=float)
        a_w = np.array([db.element(elm).atomic_weight for elm in elms])

        u0 = self.overvoltage
        e_mean = 0.5 * (self.e0 + subshell.energy)
        j_i = np.array([j_berger_seltzer(zi) for zi in z])
        s = np.sum(c * z / a_w * np.log(BETHE_FACTOR * e_mean / j_i))
        if not s > 0.0:
            raise DomainError(
                f"CitZAF stopping power is not positive for {material.name} at "
                f"{self.e0 / EV_PER_KEV:.2f} keV"
            )

        eta = np.sum(c * np.array([eta_love_scott(zi, self.e0) for zi in z]))
        r = backscatter_factor_love_scott(eta, u0)

        self.sigma = float(lenard_sigma(self.e0, subshell.energy))
        self.h = float(PDH_H_FACTOR * np.sum(c * a_w / z**2))
        self.stopping_power = float(s)
        self.backscatter_factor = float(r)
        self.F_ = self.backscatter_factor / self.stopping_power

    def absorption(self, chi_value: float) -> float:
        """Philibert-Duncumb-Heinrich f(chi) in [0, 1]."""
        x = chi_value / self.sigma
        return 1.0 / ((1.0 + x) * (1.0 + self.h * x / (1.0 + self.h)))

    def phi(self, rho_z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        # Philibert's distribution, zero at the surface, normalized to F
        k = self.sigma * (1.0 + self.h) / self.h
        return (
            self.F_
            * self.sigma
            * (1.0 + self.h)
            * (np.exp(-self.sigma * rho_z) - np.exp(-k * rho_z))
        )

    def F(self) -> float:
        return self.F_

    def Fchi(self, xray: CharXRay, toa: float) -> float:
        self._check_xray(xray)
        return self.F_ * self.absorption(chi(self.material, xray, toa))
