"""Nearby points of interest: validation, distance, filtering, ordering and reasons."""
from __future__ import annotations

import math
from typing import List, Optional

from app.cache_store import SPOT_DETAILS, SPOTS, TieredCache
from app.data_sources.base import PlacesSource
from app.data_sources.places_client import PlaceDetailResult, PlaceResult
from app.errors import InvalidInput, SpotNotFound
from app.models import (
    RecommendationReason,
    Spot,
    SpotCategory,
    SpotDetail,
    SpotSearchCriteria,
)
from utils.logging_utils import get_tagged_logger
from utils.number_utils import round_half_up

logger = get_tagged_logger(__name__, tag="spot_service")

EARTH_RADIUS_KM = 6371.0
HIGH_RATING = 4.5
NEARBY_KM = 1.5
MAX_DETAIL_PHOTOS = 5


def haversine_km(from_lat: float, from_lng: float, to_lat: float, to_lng: float) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(to_lat - from_lat)
    d_lng = math.radians(to_lng - from_lng)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(from_lat)) * math.cos(math.radians(to_lat)) * math.sin(d_lng / 2) ** 2)
    # rounding can push `a` just past 1 near antipodal points
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(1.0, a)))


def recommendation_reason(rating: Optional[float], distance_km: float, open_now: bool) -> RecommendationReason:
    """Pick the highest-priority reason that applies."""
    highly_rated = rating is not None and rating >= HIGH_RATING
    nearby = distance_km <= NEARBY_KM
    if highly_rated and nearby:
        return RecommendationReason.CLOSE_AND_HIGHLY_RATED
    if highly_rated:
        return RecommendationReason.HIGHLY_RATED
    if nearby:
        return RecommendationReason.NEARBY
    if open_now:
        return RecommendationReason.CURRENTLY_OPEN
    return RecommendationReason.PROXIMITY_AND_RATING


def matches_min_rating(rating: Optional[float], min_rating: Optional[float]) -> bool:
    """Unrated spots never pass an active rating filter."""
    if min_rating is None:
        return True
    return rating is not None and rating >= min_rating


def spot_sort_key(spot: Spot):
    """Distance ascending, then rating descending with unrated spots last."""
    return (spot.distance_km, spot.rating is None, -(spot.rating or 0.0))


def search_cache_key(category: SpotCategory, criteria: SpotSearchCriteria) -> str:
    return f"{category.value}:{criteria.cache_key()}"


class SpotSearchResolver:
    """Cached nearby search and place details."""

    def __init__(self, cache: TieredCache, places: PlacesSource) -> None:
        self.cache = cache
        self.places = places

    def search(self, category: SpotCategory | str, criteria: SpotSearchCriteria) -> List[Spot]:
        """Spots of `category` around the criteria origin, nearest first."""
        if not isinstance(category, SpotCategory):
            category = SpotCategory.from_raw(category)

        key = search_cache_key(category, criteria)
        cached = self.cache.get(SPOTS, key)
        if cached is not None:
            return cached

        results = self.places.nearby_search(
            category.provider_type,
            criteria.lat,
            criteria.lng,
            criteria.radius_m,
            open_now=criteria.open_now,
        )
        spots = [
            spot for spot in (self._to_spot(r, category, criteria) for r in results)
            if matches_min_rating(spot.rating, criteria.min_rating)
        ]
        spots.sort(key=spot_sort_key)
        logger.info(
            "Resolved nearby spots",
            extra={"category": category.value, "raw": len(results), "returned": len(spots)},
        )
        self.cache.put_through(SPOTS, key, spots)
        return spots

    def detail(self, place_id: str, category: SpotCategory | str) -> SpotDetail:
        """Full details of one place, or SpotNotFound."""
        if not place_id or not str(place_id).strip():
            raise InvalidInput("Spot id is required.")
        if not isinstance(category, SpotCategory):
            category = SpotCategory.from_raw(category)
        place_id = str(place_id).strip()

        key = f"{place_id}:{category.value}"
        cached = self.cache.get(SPOT_DETAILS, key)
        if cached is not None:
            return cached

        result = self.places.place_details(place_id)
        if result is None:
            raise SpotNotFound(f"Spot {place_id!r} was not found.", details={"id": place_id})

        detail = self._to_detail(result, category)
        self.cache.put_through(SPOT_DETAILS, key, detail)
        return detail

    def _to_spot(self, result: PlaceResult, category: SpotCategory, criteria: SpotSearchCriteria) -> Spot:
        distance_km = round_half_up(haversine_km(criteria.lat, criteria.lng, result.lat, result.lng), 2)
        first_photo = result.photo_references[0] if result.photo_references else None
        return Spot(
            id=result.place_id,
            name=result.name,
            category=category,
            rating=result.rating,
            address=result.vicinity,
            photo_url=self.places.photo_url(first_photo),
            lat=result.lat,
            lng=result.lng,
            distance_km=distance_km,
            recommendation_reason=recommendation_reason(result.rating, distance_km, criteria.open_now),
        )

    def _to_detail(self, result: PlaceDetailResult, category: SpotCategory) -> SpotDetail:
        photo_urls = [self.places.photo_url(ref) for ref in result.photo_references[:MAX_DETAIL_PHOTOS]]
        return SpotDetail(
            id=result.place_id,
            name=result.name,
            category=category,
            rating=result.rating,
            address=result.formatted_address,
            phone=result.phone,
            website=result.website,
            opening_hours=tuple(result.weekday_text),
            photo_urls=tuple(url for url in photo_urls if url),
            lat=result.lat,
            lng=result.lng,
        )
