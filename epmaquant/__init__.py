"""
EPMAQuant: matrix correction and quantification for electron-probe microanalysis

Converts measured k-ratios (unknown over standard X-ray intensity) into mass
fractions using phi(rho z) matrix corrections, secondary fluorescence and
coating corrections, and an accelerated fixed-point iteration.
"""

__version__ = "0.1.0"

# Core imports for convenience
from epmaquant.core import constants
from epmaquant.core import units
from epmaquant.atomic import Material, pure
from epmaquant.inversion import KRatio, MeasurementConditions, Iteration, quantify

__all__ = [
    "constants",
    "units",
    "Material",
    "pure",
    "KRatio",
    "MeasurementConditions",
    "Iteration",
    "quantify",
]
