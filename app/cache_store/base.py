"""Shared protocol and types for cache storage backends."""

from dataclasses import dataclass
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class CacheEntry:
    """A stored value with the time it was written (store clock, seconds)."""
    value: Any
    stored_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """Entries are visible only while `now - stored_at < ttl`."""
        return now - self.stored_at >= ttl_seconds


class CacheStore(Protocol):
    """Protocol for TTL key/value backends used by TieredCache."""

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for `key`, or None if missing or expired."""

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a JSON-safe value under `key` for `ttl_seconds`."""

    def delete(self, key: str) -> None:
        """Delete an entry without raising if it is absent."""

    def clear(self) -> None:
        """Clear all stored entries."""
