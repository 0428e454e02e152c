#!/usr/bin/env python3
"""Bounded LRU cache for Iconic.

This module provides the cache behind compiled regular expressions:
- LRU eviction with a fixed entry budget
- Thread-safe operations
- Hit/miss/eviction statistics
- Selective invalidation

Example:
    >>> cache = LRUCache(CacheConfig(max_entries=128))
    >>> cache.set("^draft-", re.compile("^draft-"))
    >>> cache.get("^draft-")
    re.compile('^draft-')
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Hashable


@dataclass
class CacheConfig:
    """Configuration for a cache."""

    max_entries: int

    def validate(self) -> None:
        """Validate cache configuration.

        Raises:
            ValueError: If the entry budget is not a positive integer
        """
        if isinstance(self.max_entries, bool) or not isinstance(self.max_entries, int):
            raise ValueError(f"max_entries must be an integer: {self.max_entries!r}")
        if self.max_entries <= 0:
            raise ValueError(f"max_entries must be positive: {self.max_entries}")


class LRUCache:
    """Thread-safe LRU cache with an entry budget."""

    def __init__(self, config: CacheConfig):
        """Initialize LRU cache.

        Args:
            config: Cache configuration

        Raises:
            ValueError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self._cache: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Get value from cache.

        Args:
            key: Cache key
            default: Returned when the key is absent

        Returns:
            Cached value or default
        """
        with self._lock:
            if key not in self._cache:
                self._misses += 1
                return default

            self._cache.move_to_end(key)
            self._hits += 1
            return self._cache[key]

    def set(self, key: Hashable, value: Any) -> None:
        """Store value, evicting least recently used entries over budget."""
        with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self.config.max_entries:
                self._cache.popitem(last=False)
                self._evictions += 1
            self._cache[key] = value

    def invalidate(self, key: Hashable) -> bool:
        """Remove entry from cache.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            if key not in self._cache:
                return False
            del self._cache[key]
            return True

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._cache),
                "max_entries": self.config.max_entries,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / lookups if lookups else 0.0,
                "evictions": self._evictions,
            }

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
