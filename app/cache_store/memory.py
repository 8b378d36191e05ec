"""In-memory TTL cache store, used when no Redis URL is configured and in tests."""

import copy
import threading
import time
from typing import Any, Callable, Optional

from app.cache_store.base import CacheEntry, CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_cache_store")


class InMemoryCacheStore(CacheStore):
    """Thread-safe, TTL-aware in-memory store with logical expiry on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store; `clock` is injectable for tests."""
        logger.debug("Initializing InMemoryCacheStore")
        self._clock = clock
        self._entries: dict[str, tuple[CacheEntry, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return a copy of the entry, or None if missing/expired."""
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            entry, ttl = item
            if entry.is_expired(self._clock(), ttl):
                self._entries.pop(key, None)
                return None
            return CacheEntry(value=copy.deepcopy(entry.value), stored_at=entry.stored_at)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a private copy of `value` under `key`."""
        with self._lock:
            entry = CacheEntry(value=copy.deepcopy(value), stored_at=self._clock())
            self._entries[key] = (entry, float(ttl_seconds))

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
