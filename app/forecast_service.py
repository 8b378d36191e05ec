"""Collapse 3-hourly forecast samples into one entry per local calendar day."""
from __future__ import annotations

import datetime as dt
from typing import Dict, List
from zoneinfo import ZoneInfo

from app.cache_store import WEATHER_FORECAST, TieredCache
from app.condition_codes import DEFAULT_ICON_URL_TEMPLATE, build_icon_url, describe_condition
from app.data_sources.base import WeatherSource
from app.data_sources.openweather_client import ForecastSample
from app.errors import DataUnavailable, UpstreamError
from app.models import ForecastDay
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/forecast_service")

NOON = 12


def _bucket_by_local_date(samples: List[ForecastSample], tz: ZoneInfo) -> Dict[dt.date, List[ForecastSample]]:
    """Group samples by the calendar date of their local time, keeping input order."""
    buckets: Dict[dt.date, List[ForecastSample]] = {}
    for sample in samples:
        local_date = sample.time.astimezone(tz).date()
        buckets.setdefault(local_date, []).append(sample)
    return buckets


def representative_sample(samples: List[ForecastSample], tz: ZoneInfo) -> ForecastSample:
    """Sample whose local hour is closest to noon; the earliest in input order wins ties."""
    return min(samples, key=lambda s: abs(s.time.astimezone(tz).hour - NOON))


def aggregate_forecast(
    samples: List[ForecastSample],
    tz: ZoneInfo,
    *,
    icon_url_template: str = DEFAULT_ICON_URL_TEMPLATE,
) -> List[ForecastDay]:
    """Build ascending ForecastDay entries from raw samples."""
    days: List[ForecastDay] = []
    for local_date, bucket in sorted(_bucket_by_local_date(samples, tz).items()):
        repr_sample = representative_sample(bucket, tz)
        condition = repr_sample.condition
        days.append(
            ForecastDay(
                date=local_date,
                min_temp=min(s.temp_min for s in bucket),
                max_temp=max(s.temp_max for s in bucket),
                condition_text=describe_condition(condition.id, condition.description) if condition else "",
                icon_url=build_icon_url(condition.icon, icon_url_template) if condition else "",
            )
        )
    return days


class ForecastAggregator:
    """Cached multi-day forecast for one location.

    The forecast is one cache entry ("the forecast as of now") and has no
    backup tier, so a failed fetch with an empty live tier is DataUnavailable.
    """

    def __init__(
        self,
        cache: TieredCache,
        source: WeatherSource,
        *,
        location_key: str,
        latitude: float,
        longitude: float,
        timezone: str = "Asia/Taipei",
        icon_url_template: str = DEFAULT_ICON_URL_TEMPLATE,
    ) -> None:
        self.cache = cache
        self.source = source
        self.location_key = location_key
        self.latitude = latitude
        self.longitude = longitude
        self.tz = ZoneInfo(timezone)
        self.icon_url_template = icon_url_template

    def resolve(self) -> List[ForecastDay]:
        cached = self.cache.get(WEATHER_FORECAST, self.location_key)
        if cached is not None:
            return cached

        try:
            samples = self.source.fetch_forecast(self.latitude, self.longitude)
        except UpstreamError as exc:
            raise DataUnavailable(f"Forecast for {self.location_key} is unavailable.") from exc

        days = aggregate_forecast(samples, self.tz, icon_url_template=self.icon_url_template)
        logger.info(
            "Computed forecast days",
            extra={"location": self.location_key, "samples": len(samples), "days": len(days)},
        )
        self.cache.put_through(WEATHER_FORECAST, self.location_key, days)
        return days

    def refresh(self) -> List[ForecastDay]:
        self.cache.evict(WEATHER_FORECAST, self.location_key)
        return self.resolve()
