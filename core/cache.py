# core/cache.py

"""
Local response cache with TTL expiry and a bounded entry count.

Entries live in a KeyValueStore under a fixed key prefix, serialized as
{"data": <payload>, "timestamp": <epoch ms>}. Expiry is lazy (checked on
read) and eviction runs inline after every write, dropping the entries
with the oldest write timestamps once the count passes max_keys.

Caching is best effort: no operation here raises to the caller.
"""

import functools
import json
import time
from threading import RLock
from typing import Any, Callable, List, Optional

from core.cache_store import KeyValueStore, MemoryStore, build_store
from core.config import settings
from core.logging_config import logger


def _now_ms() -> int:
    return int(time.time() * 1000)


class ResponseCache:
    """
    Size- and time-bounded cache over a pluggable key-value store.

    Thread-safe for concurrent access from the FastAPI threadpool.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        prefix: str = "tsm_cache_",
        ttl_seconds: int = 300,
        max_keys: int = 50,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store if store is not None else MemoryStore()
        self.prefix = prefix
        self.ttl_ms = ttl_seconds * 1000
        self.max_keys = max_keys
        self._clock = clock
        self._lock = RLock()

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _namespaced_keys(self) -> List[str]:
        return [k for k in self.store.keys() if k.startswith(self.prefix)]

    def get_cached(self, key: str) -> Optional[Any]:
        """
        Get a payload from the cache.

        Args:
            key: Cache key (without prefix)

        Returns:
            Stored payload, or None if missing, expired or unreadable
        """
        full_key = self._key(key)
        with self._lock:
            try:
                raw = self.store.get_item(full_key)
                if not raw:
                    return None

                entry = json.loads(raw)
                timestamp = entry["timestamp"]
                if self._clock() - timestamp > self.ttl_ms:
                    self.store.remove_item(full_key)
                    return None

                return entry["data"]
            except Exception as e:
                logger.debug(f"Cache read failed for {full_key}: {e}")
                return None

    def set_cache(self, key: str, data: Any) -> None:
        """
        Store a payload stamped with the current time.

        Args:
            key: Cache key (without prefix)
            data: JSON-serializable payload
        """
        full_key = self._key(key)
        with self._lock:
            try:
                raw = json.dumps({"data": data, "timestamp": self._clock()})
                self.store.set_item(full_key, raw)
                self._evict_if_needed()
            except Exception as e:
                # Store full or payload not serializable
                logger.debug(f"Cache write skipped for {full_key}: {e}")

    def clear_cache(self, key: str) -> None:
        """
        Delete one entry from the cache.

        Args:
            key: Cache key (without prefix)
        """
        with self._lock:
            try:
                self.store.remove_item(self._key(key))
            except Exception as e:
                logger.debug(f"Cache delete failed for {key}: {e}")

    def clear_all_cache(self) -> None:
        """Remove every cache entry, leaving other keys in the store alone."""
        with self._lock:
            try:
                for k in self._namespaced_keys():
                    self.store.remove_item(k)
            except Exception as e:
                logger.debug(f"Cache clear failed: {e}")

    def size(self) -> int:
        """Get the number of cache entries in the store."""
        with self._lock:
            try:
                return len(self._namespaced_keys())
            except Exception:
                return 0

    def _read_timestamp(self, full_key: str) -> float:
        # Unreadable entries sort as oldest
        try:
            raw = self.store.get_item(full_key)
            if not raw:
                return 0
            timestamp = json.loads(raw).get("timestamp")
            return timestamp if isinstance(timestamp, (int, float)) else 0
        except Exception:
            return 0

    def _evict_if_needed(self) -> None:
        keys = self._namespaced_keys()
        if len(keys) <= self.max_keys:
            return

        entries = sorted(keys, key=self._read_timestamp)
        to_remove = entries[: len(entries) - self.max_keys]
        for k in to_remove:
            self.store.remove_item(k)

        logger.debug(f"Cache evicted {len(to_remove)} entries")


# Global cache instance
_cache = ResponseCache(
    store=build_store(settings),
    prefix=settings.CACHE_KEY_PREFIX,
    ttl_seconds=settings.CACHE_TTL_SECONDS,
    max_keys=settings.CACHE_MAX_KEYS,
)


def get_cache() -> ResponseCache:
    """Get the global cache instance."""
    return _cache


def cached(key_prefix: str = ""):
    """
    Decorator to cache function results in the response cache.

    Results must be JSON-serializable. A None result is never cached.

    Example:
        @cached(key_prefix="shows")
        def list_shows(organization_id: str):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            # Generate cache key from function name and arguments
            cache_key = f"{key_prefix}:{func.__name__}:{str(args)}:{str(sorted(kwargs.items()))}"

            cached_value = _cache.get_cached(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit: {cache_key}")
                return cached_value

            result = func(*args, **kwargs)
            if result is not None:
                _cache.set_cache(cache_key, result)
                logger.debug(f"Cache miss, stored: {cache_key}")

            return result

        return wrapper
    return decorator


def get_cached(key: str) -> Optional[Any]:
    """Read a payload from the global cache."""
    return _cache.get_cached(key)


def set_cache(key: str, data: Any) -> None:
    """Write a payload to the global cache."""
    _cache.set_cache(key, data)


def clear_cache(key: str) -> None:
    """Delete one entry from the global cache."""
    _cache.clear_cache(key)


def clear_all_cache() -> None:
    """Clear every entry from the global cache."""
    _cache.clear_all_cache()
