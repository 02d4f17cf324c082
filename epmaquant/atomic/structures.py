"""
Data structures for elements, atomic subshells and characteristic X-rays.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Element:
    """
    Represents a chemical element.

    Attributes
    ----------
    symbol : str
        Element symbol (e.g., 'Fe', 'Si')
    z : int
        Atomic number
    atomic_weight : float
        Standard atomic weight in g/mol
    """

    symbol: str
    z: int
    atomic_weight: float


@dataclass(frozen=True)
class AtomicSubShell:
    """
    An ionizable atomic subshell of an element.

    Two subshells are equal when they belong to the same element and carry
    the same shell name; the tabulated properties do not take part in
    comparisons.

    Attributes
    ----------
    element : str
        Element symbol
    shell : str
        IUPAC subshell name ('K', 'L1', 'L2', 'L3', 'M1', ... 'M5', ...)
    energy : float
        Edge (ionization) energy in eV
    fluorescence_yield : float
        Fluorescence yield of the subshell
    jump_ratio : float
        Absorption-edge jump ratio
    """

    element: str
    shell: str
    energy: float = field(compare=False)
    fluorescence_yield: float = field(default=0.0, compare=False)
    jump_ratio: float = field(default=1.0, compare=False)

    @property
    def family(self) -> str:
        """Principal shell letter ('K', 'L', 'M', ...)."""
        return self.shell[0]

    def __str__(self) -> str:
        return f"{self.element} {self.shell}"


@dataclass(frozen=True)
class CharXRay:
    """
    A characteristic X-ray line.

    Attributes
    ----------
    element : str
        Element symbol
    name : str
        Siegbahn line name ('Ka1', 'Lb2', ...)
    energy : float
        Line energy in eV
    weight : float
        Relative intensity within the lines of the initial subshell
    inner : AtomicSubShell
        Subshell ionized to produce the line
    outer : Optional[str]
        Subshell that fills the vacancy
    """

    element: str
    name: str
    energy: float = field(compare=False)
    weight: float = field(compare=False)
    inner: AtomicSubShell = field(compare=False)
    outer: Optional[str] = field(default=None, compare=False)

    @property
    def family(self) -> str:
        """Line family, e.g. 'Ka' for Ka1 and Ka2."""
        return self.name[:2]

    @property
    def edge_energy(self) -> float:
        """Edge energy of the inner subshell in eV."""
        return self.inner.energy

    def __str__(self) -> str:
        return f"{self.element} {self.name}"
