"""
Secondary fluorescence corrections.

Characteristic lines of one element that lie above the measured edge of
another are partly absorbed by it and re-emitted as the measured line,
adding to the primary intensity. The correction F is the ratio of total to
primary intensity, so F >= 1.
"""

from abc import ABC, abstractmethod
from typing import List, Type, TypeVar

import numpy as np

from epmaquant.atomic.database import get_database
from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.constants import REED_EXPONENT, REED_SHELL_FACTORS
from epmaquant.core.exceptions import DomainError, MismatchError
from epmaquant.core.logging_config import get_logger
from epmaquant.correction.physics import lenard_sigma, mac

logger = get_logger("correction.fluorescence")

FC = TypeVar("FC", bound="FluorescenceCorrection")


class FluorescenceCorrection(ABC):
    """
    Abstract fluorescence correction for one material, subshell and beam energy.

    Raises
    ------
    DomainError
        If the beam energy does not exceed the edge energy
    """

    name = "abstract"

    def __init__(self, material: Material, subshell: AtomicSubShell, e0: float):
        if e0 <= subshell.energy:
            raise DomainError(
                f"{self.name} fluorescence: beam energy {e0:.1f} eV does not exceed "
                f"the {subshell} edge at {subshell.energy:.1f} eV"
            )
        self.material = material
        self.subshell = subshell
        self.e0 = float(e0)

    @abstractmethod
    def F(self, xray: CharXRay, toa: float) -> float:
        """Ratio of total to primary emitted intensity of ``xray``."""
        pass

    def _check_xray(self, xray: CharXRay) -> None:
        if xray.inner != self.subshell:
            raise MismatchError(
                f"{xray} originates from {xray.inner}, "
                f"but this fluorescence model was built for {self.subshell}"
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}[{self.material.name}, {self.subshell}, "
            f"{self.e0 / 1000.0:.1f} keV]"
        )


class NullFluorescence(FluorescenceCorrection):
    """No fluorescence correction; F is always 1."""

    name = "Null"

    def F(self, xray: CharXRay, toa: float) -> float:
        return 1.0


class ReedFluorescence(FluorescenceCorrection):
    """
    Reed (1965) characteristic fluorescence correction.

    Only K and L lines exciting K or L subshells are considered; targets in
    the M shell and beyond get F = 1.

    Attributes
    ----------
    exciting_lines : List[CharXRay]
        Lines of the other elements able to excite the measured subshell
    """

    name = "Reed"

    def __init__(self, material: Material, subshell: AtomicSubShell, e0: float):
        super().__init__(material, subshell, e0)
        self.exciting_lines = self._exciting_lines()

    def _exciting_lines(self) -> List[CharXRay]:
        db = get_database()
        target = self.subshell.family
        if target not in ("K", "L"):
            return []
        lines = []
        for elm in self.material.elements:
            if elm == self.subshell.element or self.material[elm] <= 0.0:
                continue
            for xray in db.lines(elm, min_weight=1.0e-3):
                if (xray.inner.family, target) not in REED_SHELL_FACTORS:
                    continue
                if xray.energy <= self.subshell.energy or xray.inner.energy >= self.e0:
                    continue
                lines.append(xray)
        return lines

    def F(self, xray: CharXRay, toa: float) -> float:
        """
        Fluorescence correction for the measured line.

        Parameters
        ----------
        xray : CharXRay
            Measured line of the subshell this model was built for
        toa : float
            Take-off angle in radians

        Returns
        -------
        float
            1 + ratio of fluorescent to primary intensity
        """
        self._check_xray(xray)
        if not self.exciting_lines:
            return 1.0

        db = get_database()
        norm = self.material.normalized()
        sub_a = self.subshell
        elm_a = db.element(sub_a.element)
        u_a = self.e0 / sub_a.energy
        r = sub_a.jump_ratio
        jump = (r - 1.0) / r if r > 1.0 else 0.0
        sigma = lenard_sigma(self.e0, sub_a.energy)
        mu_a = mac(self.material, xray) / np.sin(toa)

        total = 0.0
        for line in self.exciting_lines:
            elm_b = db.element(line.element)
            u_b = self.e0 / line.inner.energy
            mu_b = mac(self.material, line)
            mu_b_by_a = db.mac(sub_a.element, line.energy)

            y0 = (
                0.5
                * jump
                * line.inner.fluorescence_yield
                * (elm_a.atomic_weight / elm_b.atomic_weight)
                * line.weight
            )
            y1 = ((u_b - 1.0) / (u_a - 1.0)) ** REED_EXPONENT
            y2 = mu_b_by_a / mu_b
            u = mu_a / mu_b
            v = sigma / mu_b
            y3 = np.log1p(u) / u + np.log1p(v) / v
            factor = REED_SHELL_FACTORS[(line.inner.family, sub_a.family)]
            total += norm[line.element] * y0 * y1 * y2 * y3 * factor

        logger.debug(f"{self!r}: fluorescence fraction {total:.4g} for {xray}")
        return 1.0 + float(total)


def fluorescence_correction(
    model: Type[FC], material: Material, subshell: AtomicSubShell, e0: float
) -> FC:
    """
    Construct a fluorescence-correction model.

    Raises
    ------
    DomainError
        If ``e0`` does not exceed the edge energy
    """
    return model(material, subshell, e0)
