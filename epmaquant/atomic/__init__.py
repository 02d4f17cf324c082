"""
Element, subshell, line and material data.

This module provides:
- Element, AtomicSubShell and CharXRay data structures
- Material compositions
- The X-ray database adapter (edges, lines, mass absorption coefficients)
"""

from epmaquant.atomic.structures import Element, AtomicSubShell, CharXRay
from epmaquant.atomic.material import Material, pure


# Lazy import to avoid circular dependency
def __getattr__(name):
    if name in ("XrayDatabase", "get_database", "resolve_lines", "TRANSITION_FAMILIES"):
        from epmaquant.atomic import database

        return getattr(database, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Element",
    "AtomicSubShell",
    "CharXRay",
    "Material",
    "pure",
    "XrayDatabase",
    "get_database",
    "resolve_lines",
    "TRANSITION_FAMILIES",
]
