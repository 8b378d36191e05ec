"""Two-tier (live/backup) cache over a single TTL store.

Each data domain gets a short-lived live tier and, optionally, a longer-lived
backup tier holding the last known-good value. Values are serialised through
a pydantic TypeAdapter on write and rebuilt on read, so the two tiers never
share an object and either store backend can hold them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from app.cache_store.base import CacheStore
from app.errors import InvalidInput
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/tiered_cache")

EXCHANGE_RATES = "exchange-rates"
WEATHER = "weather"
WEATHER_FORECAST = "weather-forecast"
SPOTS = "spots"
SPOT_DETAILS = "spot-details"


class CacheTier(str, Enum):
    """Which copy of a value to read or write."""
    LIVE = "live"
    BACKUP = "backup"


@dataclass(frozen=True)
class CacheDomain:
    """TTL policy and value type for one family of cache keys."""
    name: str
    value_type: Any
    live_ttl_seconds: int
    backup_ttl_seconds: Optional[int] = None

    @property
    def has_backup(self) -> bool:
        return bool(self.backup_ttl_seconds)

    def ttl_for(self, tier: CacheTier) -> Optional[int]:
        return self.live_ttl_seconds if tier is CacheTier.LIVE else self.backup_ttl_seconds


class TieredCache:
    """Live/backup cache keyed by (domain, key, tier)."""

    def __init__(self, store: CacheStore, domains: Iterable[CacheDomain]) -> None:
        self._store = store
        self._domains = {d.name: d for d in domains}
        self._adapters = {name: TypeAdapter(d.value_type) for name, d in self._domains.items()}

    @property
    def domain_names(self) -> list[str]:
        return sorted(self._domains)

    def domain(self, name: str) -> CacheDomain:
        """Return the registered domain, raising InvalidInput for unknown names."""
        try:
            return self._domains[name]
        except KeyError:
            raise InvalidInput(f"Unknown cache domain: {name!r}", details={"domain": name}) from None

    @staticmethod
    def _store_key(domain: str, key: str, tier: CacheTier) -> str:
        return f"{domain}:{tier.value}:{key}"

    def get(self, domain: str, key: str, tier: CacheTier = CacheTier.LIVE) -> Optional[Any]:
        """Return the cached value, or None when absent, expired or undecodable."""
        policy = self.domain(domain)
        if policy.ttl_for(tier) is None:
            return None
        store_key = self._store_key(domain, key, tier)
        entry = self._store.get(store_key)
        if entry is None:
            logger.debug("Cache miss", extra={"domain": domain, "key": key, "tier": tier.value})
            return None
        try:
            value = self._adapters[domain].validate_python(entry.value)
        except ValidationError as exc:
            logger.warning(
                "Discarding undecodable cache entry",
                extra={"domain": domain, "key": key, "tier": tier.value, "error": str(exc)},
            )
            self._store.delete(store_key)
            return None
        logger.debug("Cache hit", extra={"domain": domain, "key": key, "tier": tier.value})
        return value

    def put(self, domain: str, key: str, value: Any, tier: CacheTier = CacheTier.LIVE) -> None:
        """Write one tier. Writes to a tier the domain does not have are ignored."""
        policy = self.domain(domain)
        ttl = policy.ttl_for(tier)
        if ttl is None:
            return
        payload = self._adapters[domain].dump_python(value, mode="json")
        self._store.set(self._store_key(domain, key, tier), payload, ttl)

    def put_through(self, domain: str, key: str, value: Any) -> None:
        """Write the live tier and, independently, the backup tier if the domain has one."""
        self.put(domain, key, value, CacheTier.LIVE)
        if self.domain(domain).has_backup:
            self.put(domain, key, value, CacheTier.BACKUP)

    def evict(self, domain: str, key: str, tier: CacheTier = CacheTier.LIVE) -> None:
        """Remove one tier's entry for `key`."""
        self.domain(domain)
        self._store.delete(self._store_key(domain, key, tier))
