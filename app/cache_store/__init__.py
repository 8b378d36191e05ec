"""Cache storage backends and the live/backup tiered cache."""

from .base import CacheEntry, CacheStore
from .memory import InMemoryCacheStore
from .redis import RedisCacheStore
from .tiered import (
    EXCHANGE_RATES,
    SPOT_DETAILS,
    SPOTS,
    WEATHER,
    WEATHER_FORECAST,
    CacheDomain,
    CacheTier,
    TieredCache,
)

__all__ = [
    "CacheEntry",
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "CacheDomain",
    "CacheTier",
    "TieredCache",
    "EXCHANGE_RATES",
    "WEATHER",
    "WEATHER_FORECAST",
    "SPOTS",
    "SPOT_DETAILS",
]
