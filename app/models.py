"""Immutable value objects returned by the travel data resolvers.

All models are frozen and JSON-serialisable so the cache stores can hold
independent copies of them; equality is field equality.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.errors import InvalidCategory, InvalidInput

DEFAULT_SEARCH_LAT = 25.0330
DEFAULT_SEARCH_LNG = 121.5654
DEFAULT_SEARCH_RADIUS_M = 5000
MIN_SEARCH_RADIUS_M = 1
MAX_SEARCH_RADIUS_M = 50000


class _FrozenModel(BaseModel):
    """Base model: immutable, strict about unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ExchangeRate(_FrozenModel):
    """Home-currency price of one unit of `currency`, as quoted on `as_of_date`."""
    currency: str
    base_rate: float
    buy_rate: float
    sell_rate: float
    as_of_date: dt.date


class WeatherSnapshot(_FrozenModel):
    """Current conditions for the configured location."""
    location: str
    temperature: float
    feels_like: float
    humidity_pct: int
    condition_text: str = ""
    icon_url: str = ""
    wind_speed: float = 0.0


class ForecastDay(_FrozenModel):
    """One local calendar day of the forecast window."""
    date: dt.date
    min_temp: float
    max_temp: float
    condition_text: str = ""
    icon_url: str = ""


class SpotCategory(str, Enum):
    """Closed set of spot categories served to callers."""
    RESTAURANT = "restaurant"
    CAFE = "cafe"
    ATTRACTION = "attraction"

    @property
    def provider_type(self) -> str:
        """Places API `type` vocabulary for this category."""
        return _PROVIDER_TYPES[self]

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "SpotCategory":
        """Parse a caller-supplied category, case-insensitively."""
        if raw is None or not str(raw).strip():
            raise InvalidCategory("Spot category is required.")
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidCategory(f"Unsupported spot category: {raw!r}", details={"category": raw}) from None


_PROVIDER_TYPES = {
    SpotCategory.RESTAURANT: "restaurant",
    SpotCategory.CAFE: "cafe",
    SpotCategory.ATTRACTION: "tourist_attraction",
}


class RecommendationReason(str, Enum):
    """Why a spot is suggested, in priority order."""
    CLOSE_AND_HIGHLY_RATED = "가깝고 평점이 높아 추천해요."
    HIGHLY_RATED = "평점이 높아 추천해요."
    NEARBY = "현재 위치에서 가까워 추천해요."
    CURRENTLY_OPEN = "현재 영업 중인 장소예요."
    PROXIMITY_AND_RATING = "접근성과 평점을 기준으로 추천해요."


class SpotSearchCriteria(_FrozenModel):
    """Validated geo-radius query. Out-of-range fields fail on construction."""
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    radius_m: int = Field(ge=MIN_SEARCH_RADIUS_M, le=MAX_SEARCH_RADIUS_M)
    open_now: bool = False
    min_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)

    @classmethod
    def from_params(
        cls,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius: Optional[int] = None,
        open_now: bool = False,
        min_rating: Optional[float] = None,
        *,
        default_lat: float = DEFAULT_SEARCH_LAT,
        default_lng: float = DEFAULT_SEARCH_LNG,
        default_radius: int = DEFAULT_SEARCH_RADIUS_M,
    ) -> "SpotSearchCriteria":
        """Apply defaults for omitted fields and raise InvalidInput on bad values."""
        try:
            return cls(
                lat=default_lat if lat is None else lat,
                lng=default_lng if lng is None else lng,
                radius_m=default_radius if radius is None else radius,
                open_now=open_now,
                min_rating=min_rating,
            )
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            raise InvalidInput(
                f"Invalid spot search criteria: {', '.join(fields)}",
                details={"fields": fields},
            ) from exc

    def cache_key(self) -> str:
        """Deterministic key covering every field that changes the result set."""
        rating_key = repr(float(self.min_rating)) if self.min_rating is not None else "all"
        return f"{float(self.lat)!r}:{float(self.lng)!r}:{self.radius_m}:{str(self.open_now).lower()}:{rating_key}"


class Spot(_FrozenModel):
    """A nearby place, with its distance from the search origin."""
    id: str
    name: str
    category: SpotCategory
    rating: Optional[float] = None
    address: str = ""
    photo_url: Optional[str] = None
    lat: float
    lng: float
    distance_km: float
    recommendation_reason: RecommendationReason


class SpotDetail(_FrozenModel):
    """Full description of a single place."""
    id: str
    name: str
    category: SpotCategory
    rating: Optional[float] = None
    address: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Tuple[str, ...] = ()
    photo_urls: Tuple[str, ...] = ()
    lat: float
    lng: float
