"""
Measured k-ratios and the conditions they were measured under.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import numpy as np

from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import CharXRay
from epmaquant.core.units import convert_angle
from epmaquant.correction.coating import CoatingCorrection, NullCoating


@dataclass(frozen=True)
class MeasurementConditions:
    """
    Beam and geometry for one measurement.

    Attributes
    ----------
    beam_energy : float
        Beam energy E0 in eV
    takeoff_angle : float
        Take-off angle in radians
    coating : CoatingCorrection
        Surface coating (default: none)
    """

    beam_energy: float
    takeoff_angle: float
    coating: CoatingCorrection = field(default_factory=NullCoating)

    def __post_init__(self):
        if not self.beam_energy > 0.0:
            raise ValueError(f"Beam energy must be positive, got {self.beam_energy}")
        if not 0.0 < self.takeoff_angle <= np.pi / 2:
            raise ValueError(
                f"Take-off angle must lie in (0, pi/2] radians, got {self.takeoff_angle}"
            )

    @classmethod
    def from_degrees(
        cls, beam_energy: float, takeoff_deg: float, coating: CoatingCorrection = None
    ) -> "MeasurementConditions":
        """Build conditions with the take-off angle given in degrees."""
        return cls(
            beam_energy,
            convert_angle(takeoff_deg, "deg", "rad"),
            coating if coating is not None else NullCoating(),
        )


@dataclass(frozen=True)
class KRatio:
    """
    A measured k-ratio: intensity in the unknown over intensity in a standard.

    Attributes
    ----------
    element : str
        Element symbol
    xrays : Tuple[CharXRay, ...]
        Lines measured together (all of ``element``)
    unk_conditions : MeasurementConditions
        Conditions for the unknown
    std_conditions : MeasurementConditions
        Conditions for the standard
    standard : Material
        Standard material
    k : float
        Measured k-ratio
    uncertainty : float
        One-sigma uncertainty of ``k``

    Raises
    ------
    ValueError
        If no lines are given, lines belong to another element, or the
        standard does not contain the element
    """

    element: str
    xrays: Tuple[CharXRay, ...]
    unk_conditions: MeasurementConditions
    std_conditions: MeasurementConditions
    standard: Material
    k: float
    uncertainty: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "xrays", tuple(self.xrays))
        if not self.xrays:
            raise ValueError(f"k-ratio for {self.element} has no lines")
        others = {x.element for x in self.xrays} - {self.element}
        if others:
            raise ValueError(f"k-ratio for {self.element} includes lines of {sorted(others)}")
        if self.element not in self.standard:
            raise ValueError(f"Standard {self.standard.name} does not contain {self.element}")
        if not np.isfinite(self.k):
            raise ValueError(f"k-ratio for {self.element} is not finite")

    @property
    def min_overvoltage(self) -> float:
        """Smallest overvoltage over the lines and both measurements."""
        e0 = min(self.unk_conditions.beam_energy, self.std_conditions.beam_energy)
        return min(e0 / x.inner.energy for x in self.xrays)

    @property
    def significance(self) -> float:
        """k / sigma; infinite when no positive uncertainty is known."""
        if self.uncertainty <= 0.0:
            return float("inf")
        return self.k / self.uncertainty

    def __str__(self) -> str:
        lines = "+".join(x.name for x in self.xrays)
        return f"k[{self.element} {lines}, {self.standard.name}] = {self.k:.5g}"


def elements(kratios: Iterable[KRatio]) -> List[str]:
    """Distinct elements of a collection of k-ratios, in first-seen order."""
    seen: List[str] = []
    for kr in kratios:
        if kr.element not in seen:
            seen.append(kr.element)
    return seen
