"""
Abstract base classes for extensibility.

``XrayDataSource`` is the narrow interface through which the correction
models reach element, edge, line and absorption data, so that other tables
can be plugged in without touching the physics.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from epmaquant.atomic.structures import Element, AtomicSubShell, CharXRay


class XrayDataSource(ABC):
    """
    Abstract interface for X-ray data sources.

    All energies are in eV and mass absorption coefficients in cm^2/g.
    """

    @abstractmethod
    def element(self, symbol: str) -> Element:
        """Get the element with the given symbol."""
        pass

    @abstractmethod
    def subshell(self, symbol: str, shell: str) -> AtomicSubShell:
        """Get one subshell of an element."""
        pass

    @abstractmethod
    def subshells(self, symbol: str) -> List[AtomicSubShell]:
        """Get all tabulated subshells of an element."""
        pass

    @abstractmethod
    def characteristic(
        self,
        symbol: str,
        family: str,
        min_weight: float = 1.0e-3,
        max_energy: Optional[float] = None,
    ) -> List[CharXRay]:
        """Get the lines of one family ('Ka', 'L', ...) of an element."""
        pass

    @abstractmethod
    def mac(self, symbol: str, energy: float) -> float:
        """Get the mass absorption coefficient of an element at an energy."""
        pass

    @abstractmethod
    def density(self, symbol: str) -> float:
        """Get the density of the pure element in g/cm^3."""
        pass

    def preload(self, symbols: Iterable[str]) -> None:
        """Resolve any lazily loaded data for the given elements."""
        pass
