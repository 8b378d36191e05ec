"""Factory helpers for wiring provider clients at startup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from app import config
from app.data_sources.koreaexim_client import KoreaEximClient
from app.data_sources.open_er_client import OpenErClient
from app.data_sources.openweather_client import OpenWeatherClient
from app.data_sources.places_client import PlacesClient
from app.data_sources.resilient_fetcher import ResilientFetcher
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


@dataclass
class Providers:
    """The set of provider clients, sharing one fetcher and HTTP session."""
    exchange: KoreaEximClient
    cross_rate: OpenErClient
    weather: OpenWeatherClient
    places: PlacesClient


def build_providers(
    settings: config.Settings | None = None,
    session: Optional[requests.Session] = None,
) -> Providers:
    """Instantiate every provider client from settings."""
    settings = settings or config.settings
    fetcher = ResilientFetcher.from_settings(settings, session=session)

    for name, key in (
        ("exchange", settings.exchange_api_key),
        ("weather", settings.weather_api_key),
        ("places", settings.places_api_key),
    ):
        if not key:
            logger.warning("No API key configured for provider; calls will likely be rejected",
                           extra={"provider": name})

    logger.info(
        "Built provider clients",
        extra={
            "connect_timeout_s": fetcher.timeout[0],
            "read_timeout_s": fetcher.timeout[1],
            "max_retries": fetcher.retry_policy.max_retries,
        },
    )
    return Providers(
        exchange=KoreaEximClient(fetcher, api_url=settings.exchange_api_url, api_key=settings.exchange_api_key),
        cross_rate=OpenErClient(fetcher, api_url=settings.exchange_fallback_url),
        weather=OpenWeatherClient(
            fetcher,
            current_url=settings.weather_api_url,
            forecast_url=settings.weather_forecast_url,
            api_key=settings.weather_api_key,
            language=settings.provider_language,
        ),
        places=PlacesClient(
            fetcher,
            base_url=settings.places_api_url,
            api_key=settings.places_api_key,
            language=settings.provider_language,
        ),
    )
