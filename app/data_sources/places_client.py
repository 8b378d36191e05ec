"""Helpers for Google Places nearby search and place details."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlencode

from app.data_sources.resilient_fetcher import ResilientFetcher
from app.errors import UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="places_client")

PROVIDER = "google_places"
PHOTO_MAX_WIDTH = 800
DETAIL_FIELDS = (
    "place_id,name,rating,formatted_address,formatted_phone_number,"
    "website,opening_hours,photos,geometry"
)
# Statuses that mean the request itself was rejected, not that nothing matched.
FAILED_SEARCH_STATUSES = {"REQUEST_DENIED", "INVALID_REQUEST", "OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}
NOT_FOUND_DETAIL_STATUSES = {"NOT_FOUND", "INVALID_REQUEST"}


@dataclass
class PlaceResult:
    """Normalized nearby-search result."""
    place_id: str
    name: str
    rating: Optional[float]
    vicinity: str
    lat: float
    lng: float
    photo_references: List[str] = field(default_factory=list)


@dataclass
class PlaceDetailResult:
    """Normalized place-details result."""
    place_id: str
    name: str
    rating: Optional[float]
    formatted_address: str
    phone: Optional[str]
    website: Optional[str]
    weekday_text: List[str]
    lat: float
    lng: float
    photo_references: List[str] = field(default_factory=list)


def _location(item: dict) -> tuple[float, float]:
    """Return (lat, lng); results without geometry sit at (0.0, 0.0)."""
    loc = (item.get("geometry") or {}).get("location") or {}
    return float(loc.get("lat") or 0.0), float(loc.get("lng") or 0.0)


def _rating(item: dict) -> Optional[float]:
    raw = item.get("rating")
    return float(raw) if raw is not None else None


def _photo_refs(item: dict) -> List[str]:
    return [p["photo_reference"] for p in (item.get("photos") or []) if p and p.get("photo_reference")]


class PlacesClient:
    """Nearby search, details and photo URLs against the Places web service."""

    def __init__(self, fetcher: ResilientFetcher, *, base_url: str, api_key: Optional[str],
                 language: str = "ko") -> None:
        self.fetcher = fetcher
        self.base_url = base_url
        self.api_key = api_key
        self.language = language

    def photo_url(self, photo_reference: Optional[str]) -> Optional[str]:
        """Public photo URL for a reference, or None."""
        if not photo_reference:
            return None
        query = urlencode({
            "maxwidth": PHOTO_MAX_WIDTH,
            "photo_reference": photo_reference,
            "key": self.api_key or "",
        })
        return f"{self.base_url}/photo?{query}"

    def nearby_search(self, place_type: str, latitude: float, longitude: float, radius_m: int,
                      *, open_now: bool = False) -> List[PlaceResult]:
        """Return raw results for a type within `radius_m` of the origin."""
        params = {
            "location": f"{latitude},{longitude}",
            "radius": radius_m,
            "type": place_type,
            "key": self.api_key or "",
            "language": self.language,
        }
        if open_now:
            params["opennow"] = "true"

        data = self.fetcher.get_json(f"{self.base_url}/nearbysearch/json", params, provider=PROVIDER)
        if not isinstance(data, dict):
            raise UpstreamError("Malformed nearby search payload", provider=PROVIDER)
        status = data.get("status")
        if status in FAILED_SEARCH_STATUSES:
            logger.error("Nearby search rejected", extra={"status": status, "type": place_type})
            raise UpstreamError(f"Nearby search rejected: {status}", provider=PROVIDER)

        out: List[PlaceResult] = []
        for item in data.get("results") or []:
            try:
                lat, lng = _location(item)
                out.append(
                    PlaceResult(
                        place_id=item.get("place_id") or "",
                        name=item.get("name") or "",
                        rating=_rating(item),
                        vicinity=item.get("vicinity") or "",
                        lat=lat,
                        lng=lng,
                        photo_references=_photo_refs(item),
                    )
                )
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed place result", extra={"error": str(exc)})
        logger.info("Nearby search returned results", extra={"type": place_type, "count": len(out)})
        return out

    def place_details(self, place_id: str) -> Optional[PlaceDetailResult]:
        """Return details, or None when the provider does not know the place."""
        params = {
            "place_id": place_id,
            "key": self.api_key or "",
            "language": self.language,
            "fields": DETAIL_FIELDS,
        }
        data = self.fetcher.get_json(f"{self.base_url}/details/json", params, provider=PROVIDER)
        if not isinstance(data, dict):
            return None
        status = data.get("status")
        result = data.get("result")
        if status in NOT_FOUND_DETAIL_STATUSES or not result:
            logger.info("Place not found", extra={"place_id": place_id, "status": status})
            return None

        try:
            lat, lng = _location(result)
            return PlaceDetailResult(
                place_id=result.get("place_id") or place_id,
                name=result.get("name") or "",
                rating=_rating(result),
                formatted_address=result.get("formatted_address") or "",
                phone=result.get("formatted_phone_number"),
                website=result.get("website"),
                weekday_text=list((result.get("opening_hours") or {}).get("weekday_text") or []),
                lat=lat,
                lng=lng,
                photo_references=_photo_refs(result),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise UpstreamError("Malformed place details payload", provider=PROVIDER) from exc
