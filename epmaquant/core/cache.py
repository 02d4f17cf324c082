"""
Caching utilities for database lookups.
"""

from functools import wraps
from typing import Callable, Any, Optional, Dict, Hashable, Tuple
import threading
import time
from collections import OrderedDict

from epmaquant.core.logging_config import get_logger

logger = get_logger("core.cache")

_MISSING = object()


class LRUCache:
    """
    Least Recently Used (LRU) cache with size limit and TTL support.

    This cache automatically evicts least recently used items when
    the cache exceeds max_size, and expires items older than ttl_seconds.
    Access is serialized with a lock so one cache can be shared by worker
    threads.
    """

    def __init__(self, max_size: int = 128, ttl_seconds: Optional[float] = None):
        """
        Initialize LRU cache.

        Parameters
        ----------
        max_size : int
            Maximum number of items to cache
        ttl_seconds : float, optional
            Time-to-live in seconds. If None, items never expire.
        """
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.cache: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(*args, **kwargs) -> Hashable:
        """Create cache key from (hashable) arguments."""
        return (args, tuple(sorted(kwargs.items())))

    def get(self, key: Hashable, default: Any = None) -> Any:
        """
        Get item from cache.

        Parameters
        ----------
        key : hashable
            Cache key
        default : Any
            Returned when the key is missing or expired

        Returns
        -------
        Any
            Cached value, or ``default``
        """
        with self._lock:
            if key not in self.cache:
                self.misses += 1
                return default

            value, timestamp = self.cache[key]

            # Check TTL
            if self.ttl_seconds is not None:
                age = time.time() - timestamp
                if age > self.ttl_seconds:
                    del self.cache[key]
                    self.misses += 1
                    logger.debug(f"Cache entry expired: {key!r}")
                    return default

            # Move to end (most recently used)
            self.cache.move_to_end(key)
            self.hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """
        Set item in cache.

        Parameters
        ----------
        key : hashable
            Cache key
        value : Any
            Value to cache
        """
        with self._lock:
            if key in self.cache:
                self.cache.move_to_end(key)
            self.cache[key] = (value, time.time())

            # Evict if over size limit
            if len(self.cache) > self.max_size:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self.cache.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns
        -------
        dict
            Cache statistics
        """
        total = self.hits + self.misses
        hit_rate = self.hits / total if total > 0 else 0.0

        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": hit_rate,
        }


# Global cache instances
_mac_cache = LRUCache(max_size=8192)
_edge_cache = LRUCache(max_size=1024)
_line_cache = LRUCache(max_size=1024)


def _cached(cache: LRUCache) -> Callable[[Callable], Callable]:
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            # Keyed on the data source class, not the instance
            owner = type(args[0]).__qualname__
            cache_key = (owner, func.__name__) + LRUCache.make_key(*args[1:], **kwargs)
            cached = cache.get(cache_key, _MISSING)
            if cached is not _MISSING:
                return cached

            result = func(*args, **kwargs)
            cache.set(cache_key, result)
            return result

        return wrapper

    return decorator


cached_mac = _cached(_mac_cache)
cached_mac.__doc__ = "Decorator to cache mass absorption coefficient lookups."

cached_edges = _cached(_edge_cache)
cached_edges.__doc__ = "Decorator to cache absorption-edge queries."

cached_lines = _cached(_line_cache)
cached_lines.__doc__ = "Decorator to cache characteristic-line queries."


def get_cache_stats() -> Dict[str, Dict[str, Any]]:
    """
    Get statistics for all caches.

    Returns
    -------
    dict
        Dictionary mapping cache name to statistics
    """
    return {
        "mac": _mac_cache.stats(),
        "edges": _edge_cache.stats(),
        "lines": _line_cache.stats(),
    }


def clear_all_caches() -> None:
    """Clear all caches."""
    _mac_cache.clear()
    _edge_cache.clear()
    _line_cache.clear()
    logger.info("All caches cleared")
