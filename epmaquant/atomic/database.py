"""
X-ray data access backed by the ``xraydb`` tables.

Edges, fluorescence yields, jump ratios and emission lines come from the Elam
tables shipped with ``xraydb``; mass absorption coefficients are total
attenuation coefficients from the same source.
"""

import threading
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import xraydb

from epmaquant.atomic.structures import Element, AtomicSubShell, CharXRay
from epmaquant.core.abc import XrayDataSource
from epmaquant.core.cache import cached_edges, cached_lines, cached_mac
from epmaquant.core.logging_config import get_logger

logger = get_logger("atomic.database")

# Line families commonly used for quantification, brightest first
TRANSITION_FAMILIES = {
    "K": ("Ka", "Kb"),
    "L": ("La", "Lb", "Lg", "Ll", "Ln"),
    "M": ("Ma", "Mb", "Mg", "Mz"),
}


def _is_shell_selector(family: str) -> bool:
    """True for 'K', 'L', 'L3', 'M5'...; False for line families like 'Ka'."""
    return len(family) == 1 or family[1:].isdigit()


class XrayDatabase(XrayDataSource):
    """
    Read-only X-ray data source over ``xraydb``.

    Lookups are cached, so after :meth:`preload` no further table access is
    needed for the preloaded elements.
    """

    def element(self, symbol: str) -> Element:
        """
        Get an element.

        Parameters
        ----------
        symbol : str
            Element symbol

        Returns
        -------
        Element

        Raises
        ------
        ValueError
            If the symbol is unknown
        """
        return self._element(symbol)

    @cached_edges
    def _element(self, symbol: str) -> Element:
        try:
            z = int(xraydb.atomic_number(symbol))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise ValueError(f"Unknown element: {symbol}") from e
        if z < 1:
            raise ValueError(f"Unknown element: {symbol}")
        return Element(
            symbol=xraydb.atomic_symbol(z),
            z=z,
            atomic_weight=float(xraydb.atomic_mass(symbol)),
        )

    @cached_edges
    def _edges(self, symbol: str) -> Tuple[AtomicSubShell, ...]:
        symbol = self.element(symbol).symbol
        edges = xraydb.xray_edges(symbol)
        shells = [
            AtomicSubShell(
                element=symbol,
                shell=name,
                energy=float(edge.energy),
                fluorescence_yield=float(edge.fyield),
                jump_ratio=float(edge.jump_ratio),
            )
            for name, edge in edges.items()
        ]
        shells.sort(key=lambda s: -s.energy)
        return tuple(shells)

    def subshells(self, symbol: str) -> List[AtomicSubShell]:
        """Get all tabulated subshells of an element, deepest first."""
        return list(self._edges(symbol))

    def subshell(self, symbol: str, shell: str) -> AtomicSubShell:
        """
        Get one subshell of an element.

        Parameters
        ----------
        symbol : str
            Element symbol
        shell : str
            IUPAC subshell name, e.g. 'K' or 'L3'

        Returns
        -------
        AtomicSubShell

        Raises
        ------
        ValueError
            If the element has no such subshell
        """
        for sub in self._edges(symbol):
            if sub.shell == shell:
                return sub
        raise ValueError(f"No {shell} subshell tabulated for {symbol}")

    @cached_lines
    def _lines(self, symbol: str) -> Tuple[CharXRay, ...]:
        shells = {sub.shell: sub for sub in self._edges(symbol)}
        symbol = self.element(symbol).symbol
        lines = []
        for name, line in xraydb.xray_lines(symbol).items():
            inner = shells.get(line.initial_level)
            if inner is None:
                continue
            lines.append(
                CharXRay(
                    element=symbol,
                    name=name,
                    energy=float(line.energy),
                    weight=float(line.intensity),
                    inner=inner,
                    outer=line.final_level,
                )
            )
        lines.sort(key=lambda x: -x.energy)
        return tuple(lines)

    def lines(self, symbol: str, min_weight: float = 0.0) -> List[CharXRay]:
        """Get all characteristic lines of an element with at least ``min_weight``."""
        return [x for x in self._lines(symbol) if x.weight >= min_weight]

    def characteristic(
        self,
        symbol: str,
        family: str,
        min_weight: float = 1.0e-3,
        max_energy: Optional[float] = None,
    ) -> List[CharXRay]:
        """
        Get the characteristic lines of a family.

        Parameters
        ----------
        symbol : str
            Element symbol
        family : str
            Either a line family ('Ka', 'Lb', 'Ma', ...) or a shell selector
            ('K', 'L', 'M', or a subshell such as 'L3')
        min_weight : float
            Minimum relative weight of a line
        max_energy : float, optional
            Only lines whose inner edge lies below this energy (eV), i.e. lines
            that a beam of this energy can excite

        Returns
        -------
        List[CharXRay]
            Matching lines, highest energy first (possibly empty)
        """
        if _is_shell_selector(family):
            if len(family) == 1:
                match = lambda x: x.inner.family == family  # noqa: E731
            else:
                match = lambda x: x.inner.shell == family  # noqa: E731
        else:
            match = lambda x: x.family == family  # noqa: E731

        selected = []
        for x in self.lines(symbol, min_weight):
            if not match(x):
                continue
            if max_energy is not None and x.inner.energy >= max_energy:
                continue
            selected.append(x)
        return selected

    @staticmethod
    def brightest(lines: Sequence[CharXRay]) -> CharXRay:
        """
        Get the line with the largest weight.

        Raises
        ------
        ValueError
            If ``lines`` is empty
        """
        if not lines:
            raise ValueError("Cannot select the brightest of an empty set of lines")
        return max(lines, key=lambda x: x.weight)

    @cached_mac
    def mac(self, symbol: str, energy: float) -> float:
        """
        Mass absorption coefficient of an element.

        Parameters
        ----------
        symbol : str
            Absorbing element
        energy : float
            Photon energy in eV

        Returns
        -------
        float
            Mass absorption coefficient in cm^2/g
        """
        mu = xraydb.mu_elam(symbol, float(energy), kind="total")
        return float(np.atleast_1d(mu)[0])

    @cached_edges
    def density(self, symbol: str) -> float:
        """Density of the pure element in g/cm^3."""
        return float(xraydb.atomic_density(symbol))

    def preload(self, symbols: Iterable[str]) -> None:
        """
        Load edges, lines and the mutual absorption coefficients of a set of
        elements so that later lookups are served from the caches.
        """
        symbols = sorted(set(symbols))
        energies = set()
        for symbol in symbols:
            self.element(symbol)
            self._edges(symbol)
            energies.update(x.energy for x in self._lines(symbol))
        for symbol in symbols:
            for energy in energies:
                self.mac(symbol, energy)
        logger.debug(f"Preloaded X-ray data for {len(symbols)} elements")


_default_db: Optional[XrayDatabase] = None
_default_lock = threading.Lock()


def get_database() -> XrayDatabase:
    """Get the shared :class:`XrayDatabase` instance."""
    global _default_db
    with _default_lock:
        if _default_db is None:
            _default_db = XrayDatabase()
        return _default_db


def resolve_lines(
    symbol: str,
    transition: str,
    families: Mapping[str, Sequence[str]] = TRANSITION_FAMILIES,
    e0: Optional[float] = None,
    db: Optional[XrayDataSource] = None,
) -> List[CharXRay]:
    """
    Resolve a transition code into characteristic lines.

    Parameters
    ----------
    symbol : str
        Element symbol
    transition : str
        A key of ``families`` (expanded into all of its line families), or
        anything :meth:`XrayDatabase.characteristic` accepts
    families : Mapping[str, Sequence[str]]
        Transition code to line families
    e0 : float, optional
        Beam energy in eV; lines the beam cannot excite are dropped
    db : XrayDataSource, optional
        Data source (default: shared database)

    Returns
    -------
    List[CharXRay]

    Raises
    ------
    ValueError
        If no line matches
    """
    db = db or get_database()
    codes = families.get(transition, (transition,))
    lines: List[CharXRay] = []
    for code in codes:
        lines.extend(db.characteristic(symbol, code, max_energy=e0))
    if not lines:
        beam = f" below {e0:.0f} eV" if e0 is not None else ""
        raise ValueError(f"No {transition} lines of {symbol}{beam}")
    return lines
