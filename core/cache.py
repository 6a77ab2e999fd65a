# core/cache.py

"""
In-memory TTL cache for resolved sessions.

Two kinds of entries live here:
  • ``session:<token>``  → (user_id, email) once the bearer token is validated
  • ``identity:<user_id>`` → the resolved CurrentUser (profile + role)

Each API process keeps its own copy; a profile edit or sign-out
invalidates the entries so the next request re-resolves.
"""

from typing import Optional, Any
from datetime import datetime, timedelta
from threading import Lock

from core.config import settings
from core.logging_config import logger


class CacheEntry:
    """Represents a cached value with expiration time."""

    def __init__(self, value: Any, ttl_seconds: int):
        self.value = value
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        return datetime.now() >= self.expires_at


class SimpleCache:
    """
    Thread-safe TTL cache. Expired entries are dropped lazily on read.
    """

    def __init__(self, default_ttl: int = 300):
        self._cache: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._cache[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._cache[key] = CacheEntry(value, ttl)

    def delete(self, key: str):
        with self._lock:
            self._cache.pop(key, None)

    def clear(self):
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._cache)


# Global cache instance (lifetime = one signed-in session)
_cache = SimpleCache(default_ttl=settings.SESSION_CACHE_SECONDS)


# -----------------------------------------------------
# Session token → principal
# -----------------------------------------------------
def remember_session(token: str, user_id: str, email: Optional[str]):
    _cache.set(f"session:{token}", (user_id, email))


def lookup_session(token: str) -> Optional[tuple]:
    return _cache.get(f"session:{token}")


def forget_session(token: str):
    _cache.delete(f"session:{token}")


# -----------------------------------------------------
# Principal → resolved identity
# -----------------------------------------------------
def cache_identity(user_id: str, identity: Any):
    _cache.set(f"identity:{user_id}", identity)


def cached_identity(user_id: str) -> Optional[Any]:
    return _cache.get(f"identity:{user_id}")


def invalidate_identity(user_id: str):
    logger.debug(f"Identity cache invalidated for {user_id}")
    _cache.delete(f"identity:{user_id}")


def cache_clear():
    """Clear all cache entries."""
    _cache.clear()
