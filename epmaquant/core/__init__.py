"""
Core utilities.

This module provides:
- Physical constants
- Units and unit conversion
- Configuration and logging
- Caching utilities
- The exception hierarchy

The data-source interface lives in ``epmaquant.core.abc`` and the model
registries in ``epmaquant.core.factory``; both depend on the atomic, correction
or inversion layers and are imported from their own modules.
"""

from epmaquant.core import constants
from epmaquant.core import units
from epmaquant.core import config
from epmaquant.core import logging_config
from epmaquant.core.cache import (
    LRUCache,
    cached_mac,
    cached_edges,
    cached_lines,
    get_cache_stats,
    clear_all_caches,
)
from epmaquant.core.exceptions import (
    EPMAQuantError,
    DomainError,
    ModelModeError,
    MismatchError,
    QuantificationError,
)

__all__ = [
    # Modules
    "constants",
    "units",
    "config",
    "logging_config",
    # Caching
    "LRUCache",
    "cached_mac",
    "cached_edges",
    "cached_lines",
    "get_cache_stats",
    "clear_all_caches",
    # Exceptions
    "EPMAQuantError",
    "DomainError",
    "ModelModeError",
    "MismatchError",
    "QuantificationError",
]
