"""
XPP matrix correction.

Pouchou & Pichoir's simplified PAP model (XPP), as published in
"Quantitative Analysis of Homogeneous or Stratified Microvolumes Applying
the Model PAP" (Electron Probe Quantitation, Plenum, 1991).

phi(rho z) is described by two exponentials,

    phi = A exp(-a rho z) + (B rho z + phi0 - A) exp(-b rho z)

whose parameters are chosen to reproduce the surface ionization phi0, the
area F (from the stopping power and the backscatter loss) and the mean depth
of ionization. F and Fchi then follow analytically.
"""

from typing import Union

import numpy as np

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.constants import EV_PER_KEV
from epmaquant.core.exceptions import DomainError
from epmaquant.core.logging_config import get_logger
from epmaquant.correction.base import MatrixCorrection
from epmaquant.correction.physics import chi, j_zeller

logger = get_logger("correction.xpp")


def _deceleration(material: Material):
    """
    Composition-dependent terms of the three-term deceleration law.

    Returns
    -------
    tuple
        (c, z, m_sum, j, d, p): normalized fractions and atomic numbers of the
        elements present, sum(C Z / A), mean ionization potential J in keV and
        the coefficients D_k, P_k
    """
    db = get_database()
    norm = material.normalized()
    elms = [elm for elm in norm.elements if norm[elm] > 0.0]
    c = np.array([norm[elm] for elm in elms])
    z = np.array([db.element(elm).z for elm in elms], dtype=float)
    a_w = np.array([db.element(elm).atomic_weight for elm in elms])

    m_sum = np.sum(c * z / a_w)
    j_i = np.array([j_zeller(zi) for zi in z]) / EV_PER_KEV
    j = np.exp(np.sum(c * z / a_w * np.log(j_i)) / m_sum)
    d = np.array([6.6e-6, 1.12e-5 * (1.35 - 0.45 * j**2), 2.2e-6 / j])
    p = np.array([0.78, 0.1, -(0.5 - 0.25 * j)])
    return c, z, m_sum, j, d, p


def electron_range(material: Material, e0: float, ec: float = 0.0) -> float:
    """
    Mass range of electrons slowing from ``e0`` to ``ec`` under the XPP
    deceleration law.

    Parameters
    ----------
    material : Material
        Target composition
    e0 : float
        Beam energy in eV
    ec : float
        Final energy in eV (default: 0, the total range)

    Returns
    -------
    float
        Range in g/cm^2

    Raises
    ------
    DomainError
        If ``e0`` does not exceed ``ec``
    """
    if e0 <= ec:
        raise DomainError(f"Beam energy {e0:.1f} eV does not exceed {ec:.1f} eV")
    _, _, m_sum, j, d, p = _deceleration(material)
    e0_kev = e0 / EV_PER_KEV
    ec_kev = ec / EV_PER_KEV
    r0 = np.sum(j ** (1.0 - p) * d * (e0_kev ** (1.0 + p) - ec_kev ** (1.0 + p)) / (1.0 + p))
    return float(r0 / m_sum)


class XPP(MatrixCorrection):
    """
    XPP phi(rho z) model.

    Attributes
    ----------
    phi0 : float
        Surface ionization
    F_ : float
        Area of phi(rho z) in g/cm^2
    a, b, A, B : float
        Shape parameters of the two-exponential distribution
    """

    name = "XPP"

    def __init__(self, material: Material, subshell: AtomicSubShell, e0: float):
        super().__init__(material, subshell, e0)
        c, z, m_sum, j, d, p = _deceleration(material)

        e0_kev = self.e0 / EV_PER_KEV
        ec_kev = subshell.energy / EV_PER_KEV
        u0 = e0_kev / ec_kev
        log_u0 = np.log(u0)

        # Deceleration law
        v0 = e0_kev / j
        m = self._ionization_exponent(subshell, get_database().element(subshell.element).z)
        t = 1.0 + p - m
        inv_s = (u0 / (v0 * m_sum)) * np.sum(
            d * (v0 / u0) ** p * (t * u0**t * log_u0 - u0**t + 1.0) / t**2
        )
        qla = log_u0 / (u0**m * ec_kev**2)

        # Backscatter loss
        zb = np.sum(c * np.sqrt(z)) ** 2
        eta = 1.75e-3 * zb + 0.37 * (1.0 - np.exp(-0.015 * zb**1.3))
        w = 0.595 + eta / 3.7 + eta**4.55
        q = (2.0 * w - 1.0) / (1.0 - w)
        ju0 = 1.0 + u0 * (log_u0 - 1.0)
        gu0 = (u0 - 1.0 - (1.0 - u0 ** -(1.0 + q)) / (1.0 + q)) / ((2.0 + q) * ju0)
        r = 1.0 - eta * w * (1.0 - gu0)

        f = r * inv_s / qla
        phi0 = 1.0 + 3.3 * (1.0 - u0 ** -(2.0 - 2.3 * eta)) * eta**1.2

        # Mean depth of ionization from F / R_bar
        x = 1.0 + 1.3 * np.log(zb)
        y = 0.2 + zb / 200.0
        f_over_rbar = 1.0 + x * np.log(1.0 + y * (1.0 - u0**-0.42)) / np.log(1.0 + y)
        if f_over_rbar < phi0:
            f_over_rbar = phi0
        r_bar = f / f_over_rbar

        # Initial slope
        g = 0.22 * np.log(4.0 * zb) * (1.0 - 2.0 * np.exp(-zb * (u0 - 1.0) / 15.0))
        h = 1.0 - 10.0 * (1.0 - 1.0 / (1.0 + u0 / 10.0)) / zb**2
        b = np.sqrt(2.0) * (1.0 + np.sqrt(1.0 - r_bar * phi0 / f)) / r_bar
        gh4 = min(g * h**4, 0.9 * b * r_bar**2 * (b - 2.0 * phi0 / f))
        p_slope = gh4 * f / r_bar**2

        a = (p_slope + b * (2.0 * phi0 - b * f)) / (b * f * (2.0 - b * r_bar) - phi0)
        eps = (a - b) / b
        if abs(eps) < 1.0e-6:
            eps = 1.0e-6
            a = b * (1.0 + eps)
        big_b = (b**2 * f * (1.0 + eps) - p_slope - phi0 * b * (2.0 + eps)) / eps
        big_a = (big_b / b + phi0 - b * f) * (1.0 + eps) / eps

        params = (f, phi0, a, b, big_a, big_b)
        if not all(np.isfinite(v) for v in params) or f <= 0.0 or a <= 0.0 or b <= 0.0:
            raise DomainError(
                f"XPP parameters are degenerate for {material.name}, {subshell} at "
                f"{e0_kev:.2f} keV: F={f}, a={a}, b={b}"
            )

        self.F_ = float(f)
        self.phi0 = float(phi0)
        self.a = float(a)
        self.b = float(b)
        self.A = float(big_a)
        self.B = float(big_b)
        self.mean_depth = float(r_bar)
        self.backscatter_factor = float(r)
        logger.debug(
            f"{self!r}: F={self.F_:.4g} phi0={self.phi0:.4f} a={self.a:.4g} b={self.b:.4g}"
        )

    @staticmethod
    def _ionization_exponent(subshell: AtomicSubShell, z: int) -> float:
        """Exponent m of the ionization cross-section energy dependence."""
        family = subshell.family
        if family == "K":
            return 0.86 + 0.12 * np.exp(-((z / 5.0) ** 2))
        elif family == "L":
            return 0.82
        return 0.78

    def phi(self, rho_z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return self.A * np.exp(-self.a * rho_z) + (self.B * rho_z + self.phi0 - self.A) * np.exp(
            -self.b * rho_z
        )

    def F(self) -> float:
        return self.F_

    def Fchi(self, xray: CharXRay, toa: float) -> float:
        self._check_xray(xray)
        x = chi(self.material, xray, toa)
        bx = self.b + x
        return float(self.A / (self.a + x) + (self.phi0 - self.A) / bx + self.B / bx**2)
