"""
Base class for phi(rho z) matrix-correction models.

A model is built for one material, one ionized subshell and one beam energy
and answers two questions: the total generated intensity ``F()`` and the
intensity surviving absorption on the way out to the detector ``Fchi()``.
The Z and A factors are ratios of these between unknown and standard.
"""

from abc import ABC, abstractmethod
from typing import Optional, Type, TypeVar, Union

import numpy as np

from epmaquant.atomic.material import Material
from epmaquant.atomic.structures import AtomicSubShell, CharXRay
from epmaquant.core.exceptions import DomainError, MismatchError, ModelModeError
from epmaquant.correction.physics import chi

M = TypeVar("M", bound="MatrixCorrection")


class MatrixCorrection(ABC):
    """
    Abstract matrix-correction model.

    Instances are immutable: every parameter is computed at construction.

    Parameters
    ----------
    material : Material
        Material in which the X-rays are generated
    subshell : AtomicSubShell
        Ionized subshell
    e0 : float
        Beam energy in eV

    Raises
    ------
    DomainError
        If the beam energy does not exceed the edge energy
    """

    name = "abstract"

    def __init__(self, material: Material, subshell: AtomicSubShell, e0: float):
        if e0 <= subshell.energy:
            raise DomainError(
                f"{self.name}: beam energy {e0:.1f} eV does not exceed the "
                f"{subshell} edge at {subshell.energy:.1f} eV"
            )
        self.material = material
        self.subshell = subshell
        self.e0 = float(e0)

    @property
    def beam_energy(self) -> float:
        """Beam energy in eV."""
        return self.e0

    @property
    def overvoltage(self) -> float:
        """E0 / Ec."""
        return self.e0 / self.subshell.energy

    @abstractmethod
    def F(self) -> float:
        """Integral of phi(rho z) over mass depth (generated intensity)."""
        pass

    @abstractmethod
    def Fchi(self, xray: CharXRay, toa: float) -> float:
        """Integral of phi(rho z) exp(-chi rho z) (emitted intensity)."""
        pass

    def phi(self, rho_z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Depth distribution of ionizations at mass depth ``rho_z`` (g/cm^2)."""
        raise DomainError(f"{self.name} does not define a depth distribution")

    def phi_abs(
        self, rho_z: Union[float, np.ndarray], xray: CharXRay, toa: float
    ) -> Union[float, np.ndarray]:
        """Depth distribution of emitted intensity after absorption."""
        self._check_xray(xray)
        return self.phi(rho_z) * np.exp(-chi(self.material, xray, toa) * rho_z)

    def _check_xray(self, xray: CharXRay) -> None:
        if xray.inner != self.subshell:
            raise MismatchError(
                f"{xray} originates from {xray.inner}, "
                f"but this {self.name} model was built for {self.subshell}"
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}[{self.material.name}, {self.subshell}, "
            f"{self.e0 / 1000.0:.1f} keV]"
        )


def matrix_correction(
    model: Type[M], material: Material, subshell: AtomicSubShell, e0: float
) -> M:
    """
    Construct a matrix-correction model.

    Parameters
    ----------
    model : type
        A MatrixCorrection subclass (e.g. ``XPP``)
    material : Material
        Material in which the X-rays are generated
    subshell : AtomicSubShell
        Ionized subshell
    e0 : float
        Beam energy in eV

    Returns
    -------
    MatrixCorrection

    Raises
    ------
    DomainError
        If ``e0`` does not exceed the edge energy, or the model parameters are
        degenerate
    """
    return model(material, subshell, e0)


def continuum_correction(
    model: Type[M], material: Material, energy: float, e0: float
) -> M:
    """
    Construct a model of continuum (Bremsstrahlung) generation at a photon
    energy.

    Parameters
    ----------
    model : type
        A MatrixCorrection subclass providing a ``continuum`` constructor
    material : Material
        Material in which the X-rays are generated
    energy : float
        Photon energy in eV
    e0 : float
        Beam energy in eV

    Raises
    ------
    ModelModeError
        If the model has no continuum mode
    DomainError
        If ``e0`` does not exceed ``energy``
    """
    factory: Optional[object] = getattr(model, "continuum", None)
    if factory is None:
        raise ModelModeError(f"{model.__name__} has no continuum mode")
    return factory(material, energy, e0)
