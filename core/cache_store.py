# core/cache_store.py

"""
Key-value stores that back the response cache.

The cache only needs string get/set/remove plus key listing, so any
backend implementing KeyValueStore can be swapped in (tests use
MemoryStore, deployments that want entries to survive restarts use
FileStore).
"""

import json
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Protocol

from core.logging_config import logger


class StorageQuotaExceeded(Exception):
    """A write would push the store past its size limit."""


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


def _usage(items: Dict[str, str]) -> int:
    return sum(len(k) + len(v) for k, v in items.items())


class MemoryStore:
    """
    Dict-backed store.

    max_bytes mimics a browser storage quota: the summed length of
    keys and values may not exceed it.
    """

    def __init__(self, max_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self._max_bytes = max_bytes
        self._lock = Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self._max_bytes is not None:
                candidate = dict(self._items)
                candidate[key] = value
                if _usage(candidate) > self._max_bytes:
                    raise StorageQuotaExceeded(f"Writing {key!r} exceeds {self._max_bytes} bytes")
            # Re-insert so key order follows write order
            self._items.pop(key, None)
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())


class FileStore:
    """
    Persistent store kept as a single JSON object on disk.

    The file is rewritten atomically on every change. A corrupt file
    is logged and treated as empty rather than blocking startup.
    """

    def __init__(self, path, max_bytes: Optional[int] = None):
        self.path = Path(path)
        self._max_bytes = max_bytes
        self._lock = Lock()
        self._items = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring cache file {self.path}: expected a JSON object")
            return {}

        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".booth-cache-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            candidate = dict(self._items)
            candidate.pop(key, None)
            candidate[key] = value
            if self._max_bytes is not None and _usage(candidate) > self._max_bytes:
                raise StorageQuotaExceeded(f"Writing {key!r} exceeds {self._max_bytes} bytes")
            self._flush(candidate)
            self._items = candidate

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key not in self._items:
                return
            candidate = dict(self._items)
            del candidate[key]
            self._flush(candidate)
            self._items = candidate

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())


def build_store(settings) -> KeyValueStore:
    """Pick the cache backend named by CACHE_STORE."""
    if settings.CACHE_STORE == "file":
        return FileStore(settings.CACHE_FILE_PATH, max_bytes=settings.CACHE_MAX_BYTES)
    if settings.CACHE_STORE != "memory":
        logger.warning(f"Unknown CACHE_STORE {settings.CACHE_STORE!r}, using memory")
    return MemoryStore(max_bytes=settings.CACHE_MAX_BYTES)
