"""
Unit conversion utilities for EPMAQuant.

Provides functions to convert between the units used for beam energies,
coating thicknesses and take-off angles.
"""

import numpy as np
from typing import Union

from epmaquant.core.constants import EV_PER_KEV, CM_PER_NM, CM_PER_UM, CM_PER_M, RAD_PER_DEG

# ============================================================================
# Energy Conversions
# ============================================================================

_ENERGY_TO_EV = {"EV": 1.0, "KEV": EV_PER_KEV}


def convert_energy(
    value: Union[float, np.ndarray], from_unit: str, to_unit: str
) -> Union[float, np.ndarray]:
    """
    Convert an energy between eV and keV.

    Parameters
    ----------
    value : float or array
        Energy value(s) to convert
    from_unit : str
        Source unit: 'eV' or 'keV'
    to_unit : str
        Target unit: 'eV' or 'keV'

    Returns
    -------
    float or array
        Converted energy value(s)

    Examples
    --------
    >>> convert_energy(15.0, 'keV', 'eV')
    15000.0
    """
    try:
        ev = value * _ENERGY_TO_EV[from_unit.upper()]
    except KeyError:
        raise ValueError(f"Unknown source unit: {from_unit}") from None
    try:
        return ev / _ENERGY_TO_EV[to_unit.upper()]
    except KeyError:
        raise ValueError(f"Unknown target unit: {to_unit}") from None


# ============================================================================
# Length Conversions
# ============================================================================

_LENGTH_TO_CM = {"CM": 1.0, "NM": CM_PER_NM, "UM": CM_PER_UM, "M": CM_PER_M}


def convert_length(
    value: Union[float, np.ndarray], from_unit: str, to_unit: str
) -> Union[float, np.ndarray]:
    """
    Convert a length (e.g. a coating thickness).

    Parameters
    ----------
    value : float or array
        Length value(s) to convert
    from_unit : str
        Source unit: 'nm', 'um', 'cm' or 'm'
    to_unit : str
        Target unit: 'nm', 'um', 'cm' or 'm'

    Returns
    -------
    float or array
        Converted length value(s)
    """
    try:
        cm = value * _LENGTH_TO_CM[from_unit.upper()]
    except KeyError:
        raise ValueError(f"Unknown source unit: {from_unit}") from None
    try:
        return cm / _LENGTH_TO_CM[to_unit.upper()]
    except KeyError:
        raise ValueError(f"Unknown target unit: {to_unit}") from None


# ============================================================================
# Angle Conversions
# ============================================================================


def convert_angle(
    value: Union[float, np.ndarray], from_unit: str, to_unit: str
) -> Union[float, np.ndarray]:
    """Convert an angle between 'deg' and 'rad'."""
    if from_unit.lower() == "deg":
        rad = value * RAD_PER_DEG
    elif from_unit.lower() == "rad":
        rad = value
    else:
        raise ValueError(f"Unknown source unit: {from_unit}")

    if to_unit.lower() == "deg":
        return rad / RAD_PER_DEG
    elif to_unit.lower() == "rad":
        return rad
    else:
        raise ValueError(f"Unknown target unit: {to_unit}")


# ============================================================================
# Mass Thickness
# ============================================================================


def mass_thickness(thickness_cm: float, density_g_cm3: float) -> float:
    """Mass thickness rho*t in g/cm^2 of a layer of given thickness and density."""
    return thickness_cm * density_g_cm3
