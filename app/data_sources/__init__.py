"""Upstream provider clients and the shared resilient fetcher."""

from .base import CrossRateSource, ExchangeQuoteSource, PlacesSource, WeatherSource
from .factory import Providers, build_providers
from .koreaexim_client import KoreaEximClient, RateQuote
from .open_er_client import OpenErClient
from .openweather_client import CurrentObservation, ForecastSample, OpenWeatherClient, WeatherCondition
from .places_client import PlaceDetailResult, PlaceResult, PlacesClient
from .resilient_fetcher import ResilientFetcher, RetryPolicy, is_retryable_error

__all__ = [
    "build_providers",
    "Providers",
    "ExchangeQuoteSource",
    "CrossRateSource",
    "WeatherSource",
    "PlacesSource",
    "KoreaEximClient",
    "RateQuote",
    "OpenErClient",
    "OpenWeatherClient",
    "CurrentObservation",
    "ForecastSample",
    "WeatherCondition",
    "PlacesClient",
    "PlaceResult",
    "PlaceDetailResult",
    "ResilientFetcher",
    "RetryPolicy",
    "is_retryable_error",
]
