"""Caller-facing facade over the travel data resolvers.

A REST layer (or a scheduled cache-warm job) talks only to this module:

    from app import travel_data

    rate = travel_data.get_exchange_rate("TWD")
    spots = travel_data.search_spots("cafe", lat=25.04, lng=121.56, min_rating=4.0)
    travel_data.evict_and_refresh("exchange-rates", "TWD")

Every failure surfaces as an `app.errors.TravelDataError` subclass.
"""
from __future__ import annotations

import threading
from typing import Any, List, Optional

import redis
import requests
from redis.exceptions import RedisError

from app import config
from app.cache_store import (
    EXCHANGE_RATES,
    SPOT_DETAILS,
    SPOTS,
    WEATHER,
    WEATHER_FORECAST,
    CacheDomain,
    CacheStore,
    InMemoryCacheStore,
    RedisCacheStore,
    TieredCache,
)
from app.data_sources import Providers, build_providers
from app.errors import InvalidInput
from app.exchange_service import ExchangeRateResolver, today_in
from app.forecast_service import ForecastAggregator
from app.models import (
    ExchangeRate,
    ForecastDay,
    Spot,
    SpotCategory,
    SpotDetail,
    SpotSearchCriteria,
    WeatherSnapshot,
)
from app.spot_service import SpotSearchResolver
from app.weather_service import WeatherResolver
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="travel_data")


def build_cache_store(settings: config.Settings) -> CacheStore:
    """Use Redis when configured and reachable, otherwise an in-process store."""
    if settings.cache_redis_url:
        try:
            client = redis.Redis.from_url(settings.cache_redis_url)
            client.ping()
            logger.info("Using RedisCacheStore", extra={"redis_url": mask_url(settings.cache_redis_url)})
            return RedisCacheStore(client, prefix=settings.cache_key_prefix)
        except RedisError as exc:
            logger.warning("Falling back to InMemoryCacheStore (Redis unavailable)", extra={"error": str(exc)})
    return InMemoryCacheStore()


def build_cache_domains(settings: config.Settings) -> List[CacheDomain]:
    """TTL policy per data domain; only exchange rates and weather keep a backup tier."""
    return [
        CacheDomain(EXCHANGE_RATES, ExchangeRate, settings.exchange_live_ttl_seconds,
                    settings.exchange_backup_ttl_seconds),
        CacheDomain(WEATHER, WeatherSnapshot, settings.weather_live_ttl_seconds,
                    settings.weather_backup_ttl_seconds),
        CacheDomain(WEATHER_FORECAST, List[ForecastDay], settings.forecast_ttl_seconds),
        CacheDomain(SPOTS, List[Spot], settings.spots_ttl_seconds),
        CacheDomain(SPOT_DETAILS, SpotDetail, settings.spot_details_ttl_seconds),
    ]


class TravelDataService:
    """Wires the resolvers to one tiered cache and one set of providers."""

    def __init__(self, cache: TieredCache, providers: Providers, settings: config.Settings) -> None:
        self.cache = cache
        self.settings = settings
        self.exchange = ExchangeRateResolver(
            cache,
            providers.exchange,
            providers.cross_rate,
            home_currency=settings.home_currency,
            lookback_days=settings.exchange_lookback_days,
            today=today_in(settings.home_timezone),
        )
        self.weather = WeatherResolver(
            cache,
            providers.weather,
            location_key=settings.location_name,
            latitude=settings.location_latitude,
            longitude=settings.location_longitude,
            icon_url_template=settings.weather_icon_url_template,
        )
        self.forecast = ForecastAggregator(
            cache,
            providers.weather,
            location_key=settings.location_name,
            latitude=settings.location_latitude,
            longitude=settings.location_longitude,
            timezone=settings.location_timezone,
            icon_url_template=settings.weather_icon_url_template,
        )
        self.spots = SpotSearchResolver(cache, providers.places)

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings | None = None,
        *,
        session: Optional[requests.Session] = None,
        store: Optional[CacheStore] = None,
    ) -> "TravelDataService":
        settings = settings or config.settings
        cache = TieredCache(store or build_cache_store(settings), build_cache_domains(settings))
        return cls(cache, build_providers(settings, session=session), settings)

    def get_exchange_rate(self, currency: Optional[str] = None) -> ExchangeRate:
        return self.exchange.resolve(currency or self.settings.target_currency)

    def get_weather(self) -> WeatherSnapshot:
        return self.weather.resolve()

    def get_forecast(self) -> List[ForecastDay]:
        return self.forecast.resolve()

    def search_spots(
        self,
        category: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius: Optional[int] = None,
        open_now: bool = False,
        min_rating: Optional[float] = None,
    ) -> List[Spot]:
        """Validate category then criteria, both before any provider call."""
        spot_category = SpotCategory.from_raw(category)
        criteria = SpotSearchCriteria.from_params(
            lat,
            lng,
            radius,
            open_now,
            min_rating,
            default_lat=self.settings.location_latitude,
            default_lng=self.settings.location_longitude,
            default_radius=self.settings.spot_default_radius_m,
        )
        return self.spots.search(spot_category, criteria)

    def get_spot_detail(self, place_id: str, category: str) -> SpotDetail:
        return self.spots.detail(place_id, category)

    def evict_and_refresh(self, domain: str, key: Optional[str] = None) -> Any:
        """Drop the live entry for (domain, key) and refetch where the key is refetchable.

        Exchange keys are currency codes; weather and forecast keys are the
        location name. Spot entries are only evicted, since their keys are
        derived from caller criteria. Returns the refreshed value or None.
        """
        self.cache.domain(domain)
        if domain == EXCHANGE_RATES:
            currency = key or self.settings.target_currency
            logger.info("Refreshing exchange rate", extra={"currency": currency})
            return self.exchange.refresh(currency)
        if domain in (WEATHER, WEATHER_FORECAST):
            if key is not None and key != self.settings.location_name:
                raise InvalidInput(f"Unknown location key {key!r} for {domain}.")
            logger.info("Refreshing weather data", extra={"domain": domain})
            return self.weather.refresh() if domain == WEATHER else self.forecast.refresh()
        if key is None:
            raise InvalidInput(f"A key is required to evict from {domain}.")
        self.cache.evict(domain, key)
        logger.info("Evicted cache entry", extra={"domain": domain, "key": key})
        return None


_service: Optional[TravelDataService] = None
_service_lock = threading.Lock()


def get_service() -> TravelDataService:
    """Return the process-wide service, building it from settings on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = TravelDataService.from_settings()
        return _service


def use_service(service: Optional[TravelDataService]) -> None:
    """Override the process-wide service (tests, alternate wiring). None resets it."""
    global _service
    with _service_lock:
        _service = service


def get_exchange_rate(currency: Optional[str] = None) -> ExchangeRate:
    """Exchange rate for `currency` (default: configured target currency)."""
    return get_service().get_exchange_rate(currency)


def get_weather() -> WeatherSnapshot:
    """Current weather for the configured location."""
    return get_service().get_weather()


def get_forecast() -> List[ForecastDay]:
    """Daily forecast for the configured location, ascending by date."""
    return get_service().get_forecast()


def search_spots(category: str, lat: Optional[float] = None, lng: Optional[float] = None,
                 radius: Optional[int] = None, open_now: bool = False,
                 min_rating: Optional[float] = None) -> List[Spot]:
    """Nearby spots of `category`, nearest first."""
    return get_service().search_spots(category, lat, lng, radius, open_now, min_rating)


def get_spot_detail(place_id: str, category: str) -> SpotDetail:
    """Details for one place."""
    return get_service().get_spot_detail(place_id, category)


def evict_and_refresh(domain: str, key: Optional[str] = None) -> Any:
    """Administrative hook for scheduled refreshes."""
    return get_service().evict_and_refresh(domain, key)


def main():
    """Manual check helper: print each data domain once."""
    from utils.logging_utils import setup_logging

    setup_logging(level="DEBUG", job_name="travel_data_check")
    service = get_service()
    print(f"exchange: {service.get_exchange_rate()}")
    print(f"weather: {service.get_weather()}")
    for day in service.get_forecast():
        print(f"forecast {day.date}: {day.min_temp}~{day.max_temp} {day.condition_text}")
    for spot in service.search_spots("cafe", min_rating=4.0)[:5]:
        print(f"spot: {spot.name} ({spot.distance_km} km) {spot.recommendation_reason.value}")


if __name__ == "__main__":
    main()
