"""
Conductive coating corrections.

A thin surface layer (typically evaporated carbon) absorbs part of the
emitted X-rays. The correction is the transmission of the layer along the
path to the detector.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from epmaquant.atomic.material import Material, pure
from epmaquant.atomic.structures import CharXRay
from epmaquant.core.units import convert_length, mass_thickness
from epmaquant.correction.physics import chi


class CoatingCorrection(ABC):
    """Abstract coating correction."""

    @abstractmethod
    def transmission(self, xray: CharXRay, toa: float) -> float:
        """Fraction of ``xray`` transmitted through the coating, in (0, 1]."""
        pass


class NullCoating(CoatingCorrection):
    """An uncoated surface; transmission is always 1."""

    def transmission(self, xray: CharXRay, toa: float) -> float:
        return 1.0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NullCoating)

    def __hash__(self) -> int:
        return hash(NullCoating)

    def __repr__(self) -> str:
        return "NullCoating()"


@dataclass(frozen=True)
class Layer:
    """
    A homogeneous layer of material.

    Attributes
    ----------
    material : Material
        Layer material
    thickness : float
        Thickness in cm
    density : float, optional
        Density in g/cm^3 (default: the material's density)
    """

    material: Material
    thickness: float
    density: Optional[float] = None

    def __post_init__(self):
        if self.thickness < 0.0:
            raise ValueError(f"Layer thickness must be non-negative, got {self.thickness}")
        if self.density is None and self.material.density is None:
            raise ValueError(f"Layer of {self.material.name} needs a density")

    @property
    def mass_thickness(self) -> float:
        """Mass thickness in g/cm^2."""
        rho = self.density if self.density is not None else self.material.density
        return mass_thickness(self.thickness, rho)


@dataclass(frozen=True)
class Coating(CoatingCorrection):
    """
    A single-layer coating.

    Attributes
    ----------
    layer : Layer
        Coating layer
    """

    layer: Layer

    def transmission(self, xray: CharXRay, toa: float) -> float:
        """
        Transmission exp(-MAC rho t csc(toa)) of the layer.

        Parameters
        ----------
        xray : CharXRay
            Emitted line
        toa : float
            Take-off angle in radians
        """
        return float(np.exp(-chi(self.layer.material, xray, toa) * self.layer.mass_thickness))

    def __repr__(self) -> str:
        nm = convert_length(self.layer.thickness, "cm", "nm")
        return f"Coating({nm:.1f} nm {self.layer.material.name})"


def carbon_coating(thickness_nm: float, density: Optional[float] = None) -> Coating:
    """
    A carbon coating.

    Parameters
    ----------
    thickness_nm : float
        Thickness in nm
    density : float, optional
        Density in g/cm^3 (default: tabulated density of carbon)
    """
    return Coating(Layer(pure("C"), convert_length(thickness_nm, "nm", "cm"), density))
