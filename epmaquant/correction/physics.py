"""
Primitive physics shared by the matrix-correction models.

Energies are in eV on input unless a name ends in ``_kev``; mass absorption
coefficients are in cm^2/g.
"""

from typing import Optional, Union

import numpy as np

from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import CharXRay
from epmaquant.core.abc import XrayDataSource
from epmaquant.core.constants import EV_PER_KEV, LENARD_COEFFICIENT, LENARD_EXPONENT
from epmaquant.core.exceptions import DomainError

# ============================================================================
# Mean Ionization Potential
# ============================================================================

# Berger (1982) / ICRU Report 37 mean excitation energies in eV, Z = 1..92
# fmt: off
BERGER_1982_J = (
    19.2, 41.8, 40.0, 63.7, 76.0, 78.0, 82.0, 95.0, 115.0, 137.0,
    149.0, 156.0, 166.0, 173.0, 173.0, 180.0, 174.0, 188.0, 190.0, 191.0,
    216.0, 233.0, 245.0, 257.0, 272.0, 286.0, 297.0, 311.0, 322.0, 330.0,
    334.0, 350.0, 347.0, 348.0, 357.0, 352.0, 363.0, 366.0, 379.0, 393.0,
    417.0, 424.0, 428.0, 441.0, 449.0, 470.0, 470.0, 469.0, 488.0, 488.0,
    487.0, 485.0, 491.0, 482.0, 488.0, 491.0, 501.0, 523.0, 535.0, 546.0,
    560.0, 574.0, 580.0, 591.0, 614.0, 628.0, 650.0, 658.0, 674.0, 684.0,
    694.0, 705.0, 718.0, 727.0, 736.0, 746.0, 757.0, 790.0, 790.0, 800.0,
    810.0, 823.0, 823.0, 830.0, 825.0, 794.0, 827.0, 826.0, 841.0, 847.0,
    878.0, 890.0,
)
# fmt: on


def j_zeller(z: float) -> float:
    """Zeller (1975) mean ionization potential in eV (used by XPP)."""
    return z * (10.04 + 8.25 * np.exp(-z / 11.22))


def j_berger_seltzer(z: float) -> float:
    """Berger & Seltzer (1964) mean ionization potential in eV."""
    return 9.76 * z + 58.5 * z**-0.19


def j_berger_1982(z: int) -> float:
    """
    Berger (1982) tabulated mean ionization potential in eV.

    Elements beyond uranium fall back to Berger & Seltzer (1964).
    """
    if 1 <= z <= len(BERGER_1982_J):
        return BERGER_1982_J[z - 1]
    return j_berger_seltzer(z)


# ============================================================================
# Electron Backscatter
# ============================================================================


def eta_love_scott(z: float, e0: float) -> float:
    """
    Love & Scott (1978) backscatter coefficient of a pure element.

    Parameters
    ----------
    z : float
        Atomic number
    e0 : float
        Beam energy in eV
    """
    eta20 = (-52.3791 + 150.48371 * z - 1.67373 * z**2 + 0.00716 * z**3) * 1.0e-4
    g_eta = (-1112.8 + 30.289 * z - 0.15498 * z**2) * 1.0e-4
    return eta20 * (1.0 + g_eta * np.log(e0 / (20.0 * EV_PER_KEV)))


def backscatter_factor_love_scott(eta: float, u0: float) -> float:
    """
    Love & Scott (1978) backscatter factor R for a mean backscatter
    coefficient ``eta`` and overvoltage ``u0``.
    """
    lu = np.log(u0)
    i_u = 0.33148 * lu + 0.05596 * lu**2 - 0.06339 * lu**3 + 0.00947 * lu**4
    g_u = (2.87898 * lu - 1.51307 * lu**2 + 0.81312 * lu**3 - 0.08241 * lu**4) / u0
    return 1.0 - eta * (i_u + eta * g_u) ** 1.67


# ============================================================================
# Absorption
# ============================================================================


def lenard_sigma(e0: float, ec: float) -> float:
    """
    Heinrich's modified Lenard coefficient in cm^2/g.

    Parameters
    ----------
    e0 : float
        Beam energy in eV
    ec : float
        Edge energy in eV
    """
    e0_kev = e0 / EV_PER_KEV
    ec_kev = ec / EV_PER_KEV
    return LENARD_COEFFICIENT / (e0_kev**LENARD_EXPONENT - ec_kev**LENARD_EXPONENT)


def mac(
    material: Material,
    xray_or_energy: Union[CharXRay, float],
    db: Optional[XrayDataSource] = None,
) -> float:
    """
    Mass absorption coefficient of a material.

    Computed from the normalized composition as the mass-fraction weighted
    sum of the elemental coefficients.

    Parameters
    ----------
    material : Material
        Absorbing material
    xray_or_energy : CharXRay or float
        Characteristic line, or photon energy in eV
    db : XrayDataSource, optional
        Data source (default: shared database)

    Returns
    -------
    float
        Mass absorption coefficient in cm^2/g
    """
    db = db or _default_db()
    energy = xray_or_energy.energy if isinstance(xray_or_energy, CharXRay) else xray_or_energy
    norm = material.normalized()
    return float(sum(c * db.mac(elm, energy) for elm, c in norm.mass_fractions.items() if c > 0))


def chi(
    material: Material,
    xray_or_energy: Union[CharXRay, float],
    toa: float,
    db: Optional[XrayDataSource] = None,
) -> float:
    """
    Absorption parameter chi = MAC * csc(toa) in cm^2/g.

    Parameters
    ----------
    material : Material
        Absorbing material
    xray_or_energy : CharXRay or float
        Characteristic line, or photon energy in eV
    toa : float
        Take-off angle in radians
    db : XrayDataSource, optional
        Data source (default: shared database)
    """
    if not 0.0 < toa <= np.pi / 2:
        raise DomainError(f"Take-off angle must lie in (0, pi/2] radians, got {toa}")
    return mac(material, xray_or_energy, db) / np.sin(toa)


def _default_db() -> XrayDataSource:
    from epmaquant.atomic.database import get_database

    return get_database()
