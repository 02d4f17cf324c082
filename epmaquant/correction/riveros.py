"""
Riveros & Castellano (1993) phi(rho z) model.

    phi(rho z) = exp(-(alpha rho z)^2) (gamma - (gamma - phi0) exp(-beta rho z))

The Gaussian-times-exponential form integrates in closed form with the
complementary error function. Integrals are evaluated with the scaled
function erfcx(x) = exp(x^2) erfc(x), which stays finite where the
exp/erfc product would overflow or underflow.

The model has two mutually exclusive modes: characteristic (built for an
atomic subshell) and continuum (built for a photon energy).
"""

from typing import Optional, Union

import numpy as np
from scipy.special import erfcx

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.constants import BETHE_FACTOR, EV_PER_KEV
from epmaquant.core.exceptions import DomainError, ModelModeError
from epmaquant.core.logging_config import get_logger
from epmaquant.correction.base import MatrixCorrection
from epmaquant.correction.physics import chi, eta_love_scott, j_berger_1982
from epmaquant.correction.xpp import electron_range as xpp_electron_range

logger = get_logger("correction.riveros")

_SQRT_PI = np.sqrt(np.pi)


class Riveros1993(MatrixCorrection):
    """
    Riveros & Castellano (1993) model.

    The per-element alpha and beta are combined by mass-fraction weighted
    averaging; the backscatter coefficient is averaged over electron
    fractions.

    Parameters
    ----------
    material : Material
        Material in which the X-rays are generated
    subshell : AtomicSubShell or None
        Ionized subshell; None in continuum mode
    e0 : float
        Beam energy in eV
    energy : float, optional
        Photon energy in eV (continuum mode only)

    Raises
    ------
    DomainError
        If the overvoltage is not above one, or alpha or beta is not positive
    """

    name = "Riveros1993"

    def __init__(
        self,
        material: Material,
        subshell: Optional[AtomicSubShell],
        e0: float,
        energy: Optional[float] = None,
    ):
        if subshell is not None:
            super().__init__(material, subshell, e0)
            ec = subshell.energy
        else:
            if energy is None:
                raise ModelModeError("Riveros1993 needs a subshell or a continuum energy")
            if e0 <= energy:
                raise DomainError(
                    f"Riveros1993: beam energy {e0:.1f} eV does not exceed "
                    f"the continuum energy {energy:.1f} eV"
                )
            self.material = material
            self.subshell = None
            self.e0 = float(e0)
            ec = float(energy)
        self.ec = float(ec)

        db = get_database()
        norm = material.normalized()
        elms = [elm for elm in norm.elements if norm[elm] > 0.0]
        c = np.array([norm[elm] for elm in elms])
        z = np.array([db.element(elm).z for elm in elms], dtype=float)
        a_w = np.array([db.element(elm).atomic_weight for elm in elms])

        e0_kev = self.e0 / EV_PER_KEV
        ec_kev = self.ec / EV_PER_KEV
        j_i = np.array([j_berger_1982(int(zi)) for zi in z])
        alpha_z = (2.14e5 * z**1.16 / (a_w * e0_kev**1.25)) * np.sqrt(
            np.log(BETHE_FACTOR * self.e0 / j_i) / (e0_kev - ec_kev)
        )
        beta_z = 1.1e5 * z**1.5 / ((e0_kev - ec_kev) * a_w)
        alpha = float(np.sum(c * alpha_z))
        beta = float(np.sum(c * beta_z))
        if not (np.isfinite(alpha) and alpha > 0.0):
            raise DomainError(f"Riveros1993: alpha={alpha} is not positive for {material.name}")
        if not (np.isfinite(beta) and beta > 0.0):
            raise DomainError(f"Riveros1993: beta={beta} is not positive for {material.name}")

        # Backscatter coefficient averaged over electron fractions
        ef = c * z / a_w
        ef /= np.sum(ef)
        eta = float(np.sum(ef * np.array([eta_love_scott(zi, self.e0) for zi in z])))

        u0 = self.e0 / self.ec
        ulu = u0 * np.log(u0) / (u0 - 1.0)
        self.alpha = alpha
        self.beta = beta
        self.eta = eta
        self.phi0 = float(1.0 + eta * ulu)
        self.gamma = float((1.0 + eta) * ulu)
        logger.debug(
            f"{self!r}: alpha={self.alpha:.4g} beta={self.beta:.4g} "
            f"phi0={self.phi0:.4f} gamma={self.gamma:.4f}"
        )

    @classmethod
    def continuum(cls, material: Material, energy: float, e0: float) -> "Riveros1993":
        """Build the model for continuum generation at photon ``energy`` (eV)."""
        return cls(material, None, e0, energy=energy)

    @staticmethod
    def electron_range(material: Material, e0: float) -> float:
        """Total electron range in g/cm^2 (the XPP deceleration law)."""
        return xpp_electron_range(material, e0)

    @property
    def is_continuum(self) -> bool:
        return self.subshell is None

    @property
    def overvoltage(self) -> float:
        return self.e0 / self.ec

    def _chi(self, xray_or_energy: Union[CharXRay, float], toa: float) -> float:
        if isinstance(xray_or_energy, CharXRay):
            if self.is_continuum:
                raise ModelModeError(
                    "Riveros1993 built for the continuum needs a photon energy, not a line"
                )
            self._check_xray(xray_or_energy)
        elif not self.is_continuum:
            raise ModelModeError(
                f"Riveros1993 built for {self.subshell} needs a characteristic line"
            )
        return chi(self.material, xray_or_energy, toa)

    def phi(self, rho_z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.exp(-((self.alpha * rho_z) ** 2)) * (
            self.gamma - (self.gamma - self.phi0) * np.exp(-self.beta * rho_z)
        )

    def _integral(self, x: float) -> float:
        # Integral of phi(rho z) exp(-x rho z) from 0 to infinity
        two_a = 2.0 * self.alpha
        return float(
            (_SQRT_PI / two_a)
            * (
                self.gamma * erfcx(x / two_a)
                - (self.gamma - self.phi0) * erfcx((self.beta + x) / two_a)
            )
        )

    def _partial(self, s: float, tau: float) -> float:
        # Integral of exp(-(alpha t)^2 - s t) from 0 to tau, times 2 alpha / sqrt(pi)
        two_a = 2.0 * self.alpha
        return float(
            erfcx(s / two_a)
            - np.exp(-((self.alpha * tau) ** 2) - s * tau) * erfcx(self.alpha * tau + s / two_a)
        )

    def F(self) -> float:
        return self._integral(0.0)

    def Fchi(self, xray_or_energy: Union[CharXRay, float], toa: float) -> float:
        """
        Emitted intensity.

        Parameters
        ----------
        xray_or_energy : CharXRay or float
            The measured line (characteristic mode) or photon energy in eV
            (continuum mode)
        toa : float
            Take-off angle in radians
        """
        return self._integral(self._chi(xray_or_energy, toa))

    def Fchi_partial(
        self, xray_or_energy: Union[CharXRay, float], toa: float, tau: float
    ) -> float:
        """
        Emitted intensity generated between the surface and mass depth ``tau``.

        Parameters
        ----------
        xray_or_energy : CharXRay or float
            The measured line or photon energy, as for :meth:`Fchi`
        toa : float
            Take-off angle in radians
        tau : float
            Mass depth in g/cm^2
        """
        if tau < 0.0:
            raise ValueError(f"Mass depth must be non-negative, got {tau}")
        x = self._chi(xray_or_energy, toa)
        return (_SQRT_PI / (2.0 * self.alpha)) * (
            self.gamma * self._partial(x, tau)
            - (self.gamma - self.phi0) * self._partial(self.beta + x, tau)
        )

    def __repr__(self) -> str:
        origin = f"{self.ec:.1f} eV continuum" if self.is_continuum else str(self.subshell)
        return (
            f"Riveros1993[{self.material.name}, {origin}, {self.e0 / EV_PER_KEV:.1f} keV]"
        )
