"""In-memory response cache for GraphQL queries.

Entries expire lazily: an expired entry is evicted the first time it is looked
up, there is no background sweeper. Any internal failure is logged and turned
into a cache miss so that caching can never break a request.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from hashnode_loader.core.digest import simple_hash, stable_dumps

DEFAULT_TTL_SECONDS = 300


def make_cache_key(namespace: str, query: str, variables: Optional[Dict[str, Any]] = None) -> str:
    """Build a namespaced cache key from query text and variables.

    Args:
        namespace: Publication host the client is bound to
        query: GraphQL query text
        variables: Query variables

    Returns:
        ``"<namespace>:<hash>"``
    """
    return f"{namespace}:{simple_hash(query + stable_dumps(variables or {}))}"


@dataclass
class CacheEntry:
    """A cached response and the moment it was stored."""

    data: Any
    timestamp: float
    ttl: int

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has outlived its TTL at ``now`` (seconds)."""
        return now - self.timestamp > self.ttl


class ResponseCache:
    """TTL cache mapping query keys to response payloads."""

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in seconds applied when ``set`` gets none
            clock: Source of the current time in seconds
        """
        self.default_ttl = default_ttl
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)
        self._entries: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached payload for ``key``, or None on a miss.

        Expired entries are removed as a side effect.
        """
        try:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if entry.is_expired(self.clock()):
                del self._entries[key]
                self.misses += 1
                self.logger.debug("Cache entry expired: %s", key)
                return None

            self.hits += 1
            return entry.data
        except Exception as e:
            self.logger.warning(f"Cache get failed for {key}: {e}")
            return None

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> bool:
        """
        Store ``data`` under ``key``, replacing any previous entry.

        Returns:
            True if stored, False if the cache failed internally
        """
        try:
            self._entries[key] = CacheEntry(
                data=data,
                timestamp=self.clock(),
                ttl=self.default_ttl if ttl is None else ttl,
            )
            return True
        except Exception as e:
            self.logger.warning(f"Cache set failed for {key}: {e}")
            return False

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        try:
            return self._entries.pop(key, None) is not None
        except Exception as e:
            self.logger.warning(f"Cache invalidate failed for {key}: {e}")
            return False

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed, 0 if the cache failed internally
        """
        try:
            count = len(self._entries)
            self._entries.clear()
        except Exception as e:
            self.logger.warning(f"Cache clear failed: {e}")
            return 0
        self.logger.debug("Cleared %d cache entries", count)
        return count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self.hits + self.misses
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total * 100, 2) if total else 0.0,
            "default_ttl": self.default_ttl,
        }

    def __len__(self) -> int:
        return len(self._entries)
