"""Redis-backed cache store with TTL, matching the shared cache used in production."""

import json
import time
from typing import Any, Callable, Optional

from redis.exceptions import RedisError

from app.cache_store.base import CacheEntry, CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/redis_cache_store")


class RedisCacheStore(CacheStore):
    """Redis-backed entries stored as JSON via SETEX.

    Read and delete failures degrade to cache misses so an unreachable Redis
    never turns a healthy provider call into an error.
    """

    def __init__(self, client, prefix: str = "travel:", clock: Callable[[], float] = time.time) -> None:
        """Initialize with a Redis client and a key prefix."""
        logger.debug("Initializing RedisCacheStore")
        self.client = client
        self.prefix = prefix
        self._clock = clock

    def _key(self, key: str) -> str:
        """Return the Redis key for a cache key."""
        return f"{self.prefix}{key}"

    def _dump(self, value: Any, *, stored_at: float) -> bytes:
        return json.dumps({"value": value, "stored_at": stored_at}, ensure_ascii=False).encode("utf-8")

    @staticmethod
    def _load(raw: bytes | str) -> Optional[CacheEntry]:
        try:
            text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            data = json.loads(text)
            return CacheEntry(value=data["value"], stored_at=float(data.get("stored_at") or 0.0))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Failed to deserialize cache entry: %s", exc)
            return None

    def get(self, key: str) -> Optional[CacheEntry]:
        """Fetch an entry, or None if missing, expired (Redis TTL) or unreadable."""
        try:
            raw = self.client.get(self._key(key))
        except RedisError as exc:
            logger.warning("Failed to read cache entry from Redis", extra={"key": key, "error": str(exc)})
            return None
        if not raw:
            return None
        return self._load(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Write an entry with SETEX; failures are logged, not raised."""
        payload = self._dump(value, stored_at=self._clock())
        try:
            self.client.setex(self._key(key), int(ttl_seconds), payload)
        except RedisError as exc:
            logger.error("Failed to write cache entry to Redis", extra={"key": key, "error": str(exc)})

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as exc:
            logger.error("Failed to delete cache entry from Redis", extra={"key": key, "error": str(exc)})

    def clear(self) -> None:
        """Best-effort clear for all entries under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except RedisError as exc:
            logger.error("Failed to clear cache entries from Redis: %s", exc)
