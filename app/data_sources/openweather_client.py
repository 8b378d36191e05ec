"""Helpers for fetching current weather and the 3-hourly forecast from OpenWeather."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional

from app.data_sources.resilient_fetcher import ResilientFetcher
from app.errors import UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="openweather_client")

PROVIDER = "openweather"
DT_TXT_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class WeatherCondition:
    """First entry of OpenWeather's `weather` array."""
    id: Optional[int]
    description: str
    icon: str


@dataclass
class CurrentObservation:
    """Normalized current-weather reading."""
    city: str
    temperature: float
    feels_like: float
    humidity: int
    wind_speed: float
    condition: Optional[WeatherCondition]


@dataclass
class ForecastSample:
    """One 3-hour forecast slot."""
    time: dt.datetime  # timezone-aware, UTC
    temp_min: float
    temp_max: float
    condition: Optional[WeatherCondition]


def _parse_condition(entries) -> Optional[WeatherCondition]:
    """Return the first condition, or None when the array is missing/empty."""
    if not entries:
        return None
    first = entries[0] or {}
    raw_id = first.get("id")
    return WeatherCondition(
        id=int(raw_id) if raw_id is not None else None,
        description=first.get("description") or "",
        icon=first.get("icon") or "",
    )


def _utc_from_dt_txt(s: str) -> dt.datetime:
    """Interpret OpenWeather's `dt_txt` as a UTC wall-clock time."""
    return dt.datetime.strptime(s, DT_TXT_FORMAT).replace(tzinfo=dt.timezone.utc)


class OpenWeatherClient:
    """Current conditions and forecast for a coordinate pair."""

    def __init__(
        self,
        fetcher: ResilientFetcher,
        *,
        current_url: str,
        forecast_url: str,
        api_key: Optional[str],
        language: str = "ko",
    ) -> None:
        self.fetcher = fetcher
        self.current_url = current_url
        self.forecast_url = forecast_url
        self.api_key = api_key
        self.language = language

    def _params(self, latitude: float, longitude: float) -> dict:
        return {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key or "",
            "units": "metric",
            "lang": self.language,
        }

    def fetch_current(self, latitude: float, longitude: float) -> CurrentObservation:
        """Fetch the latest observation for the given coordinates."""
        data = self.fetcher.get_json(self.current_url, self._params(latitude, longitude), provider=PROVIDER)
        try:
            main = data["main"]
            wind = data.get("wind") or {}
            observation = CurrentObservation(
                city=data.get("name") or "",
                temperature=float(main["temp"]),
                feels_like=float(main["feels_like"]),
                humidity=int(main["humidity"]),
                wind_speed=float(wind.get("speed") or 0.0),
                condition=_parse_condition(data.get("weather")),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Malformed OpenWeather current payload", extra={"error": str(exc)})
            raise UpstreamError("Malformed current weather payload", provider=PROVIDER) from exc
        logger.info("Fetched current weather", extra={"city": observation.city})
        return observation

    def fetch_forecast(self, latitude: float, longitude: float) -> List[ForecastSample]:
        """Fetch the 5 day / 3 hour forecast as UTC-stamped samples, in provider order."""
        data = self.fetcher.get_json(self.forecast_url, self._params(latitude, longitude), provider=PROVIDER)
        try:
            slots = data["list"]
            if slots is None:
                raise KeyError("list")
            out: List[ForecastSample] = []
            for slot in slots:
                main = slot["main"]
                out.append(
                    ForecastSample(
                        time=_utc_from_dt_txt(slot["dt_txt"]),
                        temp_min=float(main["temp_min"]),
                        temp_max=float(main["temp_max"]),
                        condition=_parse_condition(slot.get("weather")),
                    )
                )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Malformed OpenWeather forecast payload", extra={"error": str(exc)})
            raise UpstreamError("Malformed forecast payload", provider=PROVIDER) from exc
        logger.info("Fetched forecast samples", extra={"samples": len(out)})
        return out
