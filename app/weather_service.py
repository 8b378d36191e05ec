"""Current weather for the configured location, with live/backup cache fallback."""
from __future__ import annotations

from app.cache_store import WEATHER, CacheTier, TieredCache
from app.condition_codes import DEFAULT_ICON_URL_TEMPLATE, build_icon_url, describe_condition
from app.data_sources.base import WeatherSource
from app.data_sources.openweather_client import CurrentObservation
from app.errors import DataUnavailable, UpstreamError
from app.models import WeatherSnapshot
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_service")


def to_snapshot(observation: CurrentObservation, *, icon_url_template: str = DEFAULT_ICON_URL_TEMPLATE,
                location: str | None = None) -> WeatherSnapshot:
    """Map a provider observation into the public snapshot shape."""
    condition = observation.condition
    return WeatherSnapshot(
        location=observation.city or location or "",
        temperature=observation.temperature,
        feels_like=observation.feels_like,
        humidity_pct=observation.humidity,
        condition_text=describe_condition(condition.id, condition.description) if condition else "",
        icon_url=build_icon_url(condition.icon, icon_url_template) if condition else "",
        wind_speed=observation.wind_speed,
    )


class WeatherResolver:
    """Single-provider resolver: live tier, fetch, then backup tier."""

    def __init__(
        self,
        cache: TieredCache,
        source: WeatherSource,
        *,
        location_key: str,
        latitude: float,
        longitude: float,
        icon_url_template: str = DEFAULT_ICON_URL_TEMPLATE,
    ) -> None:
        self.cache = cache
        self.source = source
        self.location_key = location_key
        self.latitude = latitude
        self.longitude = longitude
        self.icon_url_template = icon_url_template

    def resolve(self) -> WeatherSnapshot:
        cached = self.cache.get(WEATHER, self.location_key)
        if cached is not None:
            return cached

        try:
            observation = self.source.fetch_current(self.latitude, self.longitude)
        except UpstreamError as exc:
            backup = self.cache.get(WEATHER, self.location_key, CacheTier.BACKUP)
            if backup is not None:
                logger.warning("Serving weather from backup cache",
                               extra={"location": self.location_key, "error": str(exc)})
                return backup
            raise DataUnavailable(f"Weather for {self.location_key} is unavailable.") from exc

        snapshot = to_snapshot(observation, icon_url_template=self.icon_url_template, location=self.location_key)
        self.cache.put_through(WEATHER, self.location_key, snapshot)
        return snapshot

    def refresh(self) -> WeatherSnapshot:
        self.cache.evict(WEATHER, self.location_key)
        return self.resolve()
