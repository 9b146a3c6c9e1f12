# core/cache.py

"""
Simple in-memory caching utilities.

Holds short-lived per-user lookups (resolved role sets, granted permissions)
so a burst of guarded requests does not re-query `user_roles` every time.
Entries are invalidated explicitly whenever the underlying rows change and on
sign-out.
"""

from typing import Optional, Any
from datetime import datetime, timedelta
from threading import Lock


class CacheEntry:
    """Represents a cached value with expiration time."""

    def __init__(self, value: Any, ttl_seconds: int):
        self.value = value
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        """Check if the cache entry has expired."""
        return datetime.now() >= self.expires_at


class SimpleCache:
    """
    Simple in-memory cache with TTL support.

    Thread-safe for concurrent access.
    """

    def __init__(self):
        self._cache: dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the cache.

        Returns:
            Cached value or None if not found or expired
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._cache[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int = 300):
        """Set a value in the cache with TTL."""
        with self._lock:
            self._cache[key] = CacheEntry(value, ttl_seconds)

    def delete(self, key: str):
        with self._lock:
            self._cache.pop(key, None)

    def delete_prefix(self, prefix: str):
        """Delete every key starting with `prefix`."""
        with self._lock:
            for key in [k for k in self._cache if k.startswith(prefix)]:
                del self._cache[key]

    def clear(self):
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._cache)


# Global cache instance
_cache = SimpleCache()


def cache_get(key: str) -> Optional[Any]:
    return _cache.get(key)


def cache_set(key: str, value: Any, ttl_seconds: int = 300):
    _cache.set(key, value, ttl_seconds)


def cache_delete(key: str):
    _cache.delete(key)


def cache_clear():
    """Clear all cache entries."""
    _cache.clear()


# -----------------------------------------------------
# Per-user access keys
# -----------------------------------------------------
def roles_cache_key(user_id: str) -> str:
    return f"user-roles:{user_id}"


def permissions_cache_key(user_id: str) -> str:
    return f"user-permissions:{user_id}"


def invalidate_user_access(user_id: str):
    """Drop cached role and permission sets for one user."""
    cache_delete(roles_cache_key(user_id))
    cache_delete(permissions_cache_key(user_id))
