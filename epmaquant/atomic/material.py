"""
Materials: named, immutable mass-fraction compositions.
"""

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, TYPE_CHECKING

import numpy as np
import xraydb

from epmaquant.core.exceptions import DomainError

if TYPE_CHECKING:
    from epmaquant.core.abc import XrayDataSource


class Material:
    """
    A named composition expressed as mass fractions.

    Mass fractions need not sum to one; an unknown mid-quantification rarely
    does. Reading an element that is not present returns 0.0.

    Parameters
    ----------
    name : str
        Material name
    mass_fractions : Mapping[str, float]
        Element symbol -> mass fraction
    density : float, optional
        Density in g/cm^3

    Raises
    ------
    ValueError
        If a mass fraction is negative or not finite
    """

    __slots__ = ("_name", "_fractions", "_density")

    def __init__(
        self, name: str, mass_fractions: Mapping[str, float], density: Optional[float] = None
    ):
        fractions = {}
        for elm, value in mass_fractions.items():
            value = float(value)
            if not np.isfinite(value) or value < 0.0:
                raise ValueError(f"Invalid mass fraction for {elm} in {name}: {value}")
            fractions[elm] = value
        if density is not None and density <= 0.0:
            raise ValueError(f"Density of {name} must be positive")
        self._name = name
        self._fractions = MappingProxyType(fractions)
        self._density = density

    @property
    def name(self) -> str:
        return self._name

    @property
    def density(self) -> Optional[float]:
        return self._density

    @property
    def mass_fractions(self) -> Mapping[str, float]:
        """Read-only view of the mass fractions."""
        return self._fractions

    @property
    def elements(self) -> Tuple[str, ...]:
        return tuple(self._fractions.keys())

    def __getitem__(self, symbol: str) -> float:
        return self._fractions.get(symbol, 0.0)

    def __contains__(self, symbol: object) -> bool:
        """True if the element is present with a positive mass fraction."""
        return self._fractions.get(symbol, 0.0) > 0.0

    def __reduce__(self):
        return (Material, (self._name, dict(self._fractions), self._density))

    def __iter__(self) -> Iterator[str]:
        return iter(self._fractions)

    def __len__(self) -> int:
        return len(self._fractions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Material):
            return NotImplemented
        return (
            self._name == other._name
            and dict(self._fractions) == dict(other._fractions)
            and self._density == other._density
        )

    def __hash__(self) -> int:
        return hash((self._name, tuple(sorted(self._fractions.items())), self._density))

    def __repr__(self) -> str:
        comp = ", ".join(f"{elm}={c:.4f}" for elm, c in self._fractions.items())
        return f"Material({self._name!r}, {{{comp}}})"

    def total(self) -> float:
        """Sum of the mass fractions (the analytical total)."""
        return float(sum(self._fractions.values()))

    def normalized(self) -> "Material":
        """
        Copy whose mass fractions sum to one.

        Raises
        ------
        DomainError
            If all mass fractions are zero
        """
        total = self.total()
        if total <= 0.0:
            raise DomainError(f"Cannot normalize {self._name}: total mass fraction is zero")
        return Material(
            self._name, {elm: c / total for elm, c in self._fractions.items()}, self._density
        )

    def atomic_fractions(self, db: Optional["XrayDataSource"] = None) -> Dict[str, float]:
        """
        Atomic (number) fractions of the normalized composition.

        Parameters
        ----------
        db : XrayDataSource, optional
            Source of atomic weights (default: shared database)

        Returns
        -------
        dict
            Element symbol -> atomic fraction
        """
        db = db or _default_db()
        moles = {
            elm: c / db.element(elm).atomic_weight for elm, c in self._fractions.items() if c > 0
        }
        total = sum(moles.values())
        if total <= 0.0:
            raise ValueError(f"{self._name} has no elements with positive mass fraction")
        return {elm: n / total for elm, n in moles.items()}

    def with_name(self, name: str) -> "Material":
        return Material(name, self._fractions, self._density)

    @classmethod
    def from_formula(
        cls,
        formula: str,
        name: Optional[str] = None,
        density: Optional[float] = None,
        db: Optional["XrayDataSource"] = None,
    ) -> "Material":
        """
        Build a material from a chemical formula.

        Parameters
        ----------
        formula : str
            Chemical formula, e.g. 'SiO2' or 'Ca5(PO4)3F'
        name : str, optional
            Material name (default: the formula)
        density : float, optional
            Density in g/cm^3
        db : XrayDataSource, optional
            Source of atomic weights (default: shared database)

        Returns
        -------
        Material
        """
        db = db or _default_db()
        counts = xraydb.chemparse(formula)
        if not counts:
            raise ValueError(f"Cannot parse formula: {formula}")
        masses = {elm: n * db.element(elm).atomic_weight for elm, n in counts.items()}
        total = sum(masses.values())
        return cls(name or formula, {elm: m / total for elm, m in masses.items()}, density)


def pure(symbol: str, db: Optional["XrayDataSource"] = None) -> Material:
    """
    A pure element, with the element's tabulated density.

    Parameters
    ----------
    symbol : str
        Element symbol
    db : XrayDataSource, optional
        Source of densities (default: shared database)
    """
    db = db or _default_db()
    return Material(f"Pure {symbol}", {symbol: 1.0}, db.density(symbol))


def _default_db() -> "XrayDataSource":
    from epmaquant.atomic.database import get_database

    return get_database()
