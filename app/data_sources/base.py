"""Interfaces for the upstream providers the resolvers depend on."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Protocol

from app.data_sources.koreaexim_client import RateQuote
from app.data_sources.openweather_client import CurrentObservation, ForecastSample
from app.data_sources.places_client import PlaceDetailResult, PlaceResult


class ExchangeQuoteSource(Protocol):
    """Daily quotes for every currency published on a date."""

    def fetch_quotes(self, search_date: dt.date) -> List[RateQuote]:
        """Return all quotes for `search_date` (possibly empty)."""
        ...


class CrossRateSource(Protocol):
    """Rates relative to a base currency."""

    def fetch_rate(self, base_currency: str, target_currency: str) -> float:
        """Return target units per one base unit."""
        ...


class WeatherSource(Protocol):
    """Anything that can provide current weather and forecast samples."""

    def fetch_current(self, latitude: float, longitude: float) -> CurrentObservation:
        """Return the current observation."""
        ...

    def fetch_forecast(self, latitude: float, longitude: float) -> List[ForecastSample]:
        """Return sub-day forecast samples in UTC."""
        ...


class PlacesSource(Protocol):
    """Nearby search and details for points of interest."""

    def nearby_search(self, place_type: str, latitude: float, longitude: float, radius_m: int,
                      *, open_now: bool = False) -> List[PlaceResult]:
        """Return raw nearby results."""
        ...

    def place_details(self, place_id: str) -> Optional[PlaceDetailResult]:
        """Return details, or None when the place is unknown."""
        ...

    def photo_url(self, photo_reference: Optional[str]) -> Optional[str]:
        """Return a public photo URL for a reference."""
        ...
