"""
Google Places geocoder restricted to Malaysia.

search_location(query):
1. text search biased to the Malaysian bounding box -> first place_id
2. place details for that id
3. reject anything outside Malaysia (country code and coordinates)
4. malls and landmarks get extra address components from a reverse geocode
5. flatten into a LocationResolution
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..config import Settings
from ..domains import LocationType
from ..models import Coordinates, LocationResolution
from .errors import ConfigurationError, GeocoderError

logger = logging.getLogger(__name__)

MALAYSIA_BOUNDS = {
    "north": 7.363417,
    "south": 0.855222,
    "east": 119.267502,
    "west": 99.643448,
}

DETAIL_FIELDS = "name,formatted_address,geometry,address_components,types"

MALL_KEYWORDS = ("mall", "plaza", "megamall", "centre", "center", "shopping", "complex", "retail", "square")
SPECIFIC_MALLS = (
    "midvalley",
    "mid valley",
    "pavilion",
    "sunway pyramid",
    "suria klcc",
    "the gardens",
    "ioi city",
    "one utama",
    "1 utama",
    "paradigm",
    "tropicana gardens",
)

AddressComponent = Dict[str, Any]
PlaceDetails = Dict[str, Any]


def is_in_malaysia(lat: float, lng: float) -> bool:
    return (
        MALAYSIA_BOUNDS["south"] <= lat <= MALAYSIA_BOUNDS["north"]
        and MALAYSIA_BOUNDS["west"] <= lng <= MALAYSIA_BOUNDS["east"]
    )


def _find_component(components: Iterable[AddressComponent], *types: str) -> Optional[AddressComponent]:
    for component in components:
        component_types = component.get("types") or []
        if any(t in component_types for t in types):
            return component
    return None


def _long_name(component: Optional[AddressComponent]) -> Optional[str]:
    return component.get("long_name") if component else None


def determine_location_type(details: PlaceDetails) -> LocationType:
    types = details.get("types") or []
    name = (details.get("name") or "").lower()

    if "shopping_mall" in types:
        return LocationType.MALL
    if any(keyword in name for keyword in MALL_KEYWORDS):
        return LocationType.MALL
    if any(mall in name for mall in SPECIFIC_MALLS):
        return LocationType.MALL
    if "route" in types or any(word in name for word in ("jalan", "lorong", "persiaran")):
        return LocationType.STREET
    if (
        "sublocality" in types
        or "neighborhood" in types
        or "taman" in name
        or name.startswith(("ss", "usj"))
        or "heights" in name
        or "garden" in name
    ):
        return LocationType.DISTRICT
    if any(t in types for t in ("point_of_interest", "establishment", "premise")):
        return LocationType.LANDMARK
    if "locality" in types and "political" in types:
        return LocationType.CITY
    return LocationType.AREA


def build_full_address(details: PlaceDetails) -> str:
    components: List[AddressComponent] = details.get("address_components") or []
    parts: List[str] = []

    premise = _find_component(components, "premise", "establishment")
    parts.append(_long_name(premise) or details.get("name") or "")
    for types in (
        ("street_number",),
        ("route",),
        ("sublocality", "neighborhood"),
        ("postal_code",),
        ("locality",),
        ("administrative_area_level_1",),
    ):
        value = _long_name(_find_component(components, *types))
        if value:
            parts.append(value)

    country = _find_component(components, "country")
    if country and country.get("short_name") == "MY":
        parts.append("Malaysia")
    return ", ".join(part for part in parts if part)


def is_valid_malaysian_place(details: PlaceDetails) -> bool:
    country = _find_component(details.get("address_components") or [], "country")
    if not country or country.get("short_name") != "MY":
        return False
    location = (details.get("geometry") or {}).get("location") or {}
    lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return False
    return is_in_malaysia(float(lat), float(lng))


def merge_reverse_geocode(details: PlaceDetails, geocode_result: Dict[str, Any]) -> PlaceDetails:
    """Add reverse-geocode components whose types the place details do not cover yet."""
    existing: List[AddressComponent] = list(details.get("address_components") or [])
    covered = {t for component in existing for t in component.get("types") or []}
    additions = [
        component
        for component in geocode_result.get("address_components") or []
        if not covered.intersection(component.get("types") or [])
    ]
    merged = dict(details)
    merged["address_components"] = existing + additions

    formatted = geocode_result.get("formatted_address")
    if formatted and len(formatted) > len(details.get("formatted_address") or ""):
        merged["formatted_address"] = formatted
    return merged


def to_location_resolution(details: PlaceDetails) -> LocationResolution:
    components = details.get("address_components") or []
    city = _long_name(_find_component(components, "locality", "administrative_area_level_2")) or "Unknown City"
    state = _long_name(_find_component(components, "administrative_area_level_1")) or "Unknown State"
    location = (details.get("geometry") or {}).get("location") or {}
    coordinates = None
    if location.get("lat") is not None and location.get("lng") is not None:
        coordinates = Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))

    return LocationResolution(
        location=f"{city}, {state}",
        location_type=determine_location_type(details),
        state=state,
        district=_long_name(_find_component(components, "sublocality_level_1", "neighborhood")),
        area=_long_name(_find_component(components, "sublocality_level_2", "route")),
        address=details.get("formatted_address"),
        full_address=build_full_address(details),
        coordinates=coordinates,
    )


def _http_error_reason(exc: httpx.HTTPError) -> str:
    """Describe an httpx failure without the request URL."""
    if isinstance(exc, httpx.HTTPStatusError):
        return f"http_{exc.response.status_code}"
    return exc.__class__.__name__


class PlacesGeocoder:
    """HTTP client for the Google Places text search, details and geocoding APIs."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not settings.google_places_api_key:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY is required for geocoding", reason="missing_api_key")
        self._settings = settings
        self._api_key = settings.google_places_api_key
        self._base_url = settings.places_base_url.rstrip("/")
        self._transport = transport

    async def search_location(self, query: str) -> Optional[LocationResolution]:
        if not query or not query.strip():
            return None
        timeout = httpx.Timeout(self._settings.http_timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            place_id = await self._search_place_id(client, query.strip())
            if not place_id:
                logger.info("places.text_search no result query=%r", query)
                return None

            details = await self._place_details(client, place_id)
            if not details:
                return None
            if not is_valid_malaysian_place(details):
                logger.info("places.details rejected non-Malaysian place_id=%s name=%r", place_id, details.get("name"))
                return None

            if determine_location_type(details) in (LocationType.MALL, LocationType.LANDMARK):
                details = await self._enrich_with_reverse_geocode(client, details)

        return to_location_resolution(details)

    async def _search_place_id(self, client: httpx.AsyncClient, query: str) -> Optional[str]:
        bounds = MALAYSIA_BOUNDS
        params = {
            "query": f"{query} malaysia",
            "key": self._api_key,
            "region": "my",
            "locationbias": f"rectangle:{bounds['south']},{bounds['west']}|{bounds['north']},{bounds['east']}",
        }
        data = await self._get_json(client, "place/textsearch/json", params, operation="text_search")
        results = data.get("results") or []
        if not results:
            return None
        return results[0].get("place_id")

    async def _place_details(self, client: httpx.AsyncClient, place_id: str) -> Optional[PlaceDetails]:
        params = {"place_id": place_id, "key": self._api_key, "fields": DETAIL_FIELDS}
        data = await self._get_json(client, "place/details/json", params, operation="details")
        return data.get("result") or None

    async def _enrich_with_reverse_geocode(self, client: httpx.AsyncClient, details: PlaceDetails) -> PlaceDetails:
        location = details["geometry"]["location"]
        params = {
            "latlng": f"{location['lat']},{location['lng']}",
            "key": self._api_key,
            "result_type": "street_address|premise",
            "location_type": "ROOFTOP|GEOMETRIC_CENTER",
            "language": "en",
        }
        try:
            data = await self._get_json(client, "geocode/json", params, operation="reverse_geocode")
        except GeocoderError as exc:
            # The place details alone are still a usable answer.
            logger.warning("places.reverse_geocode skipped: %s", exc.reason)
            return details
        results = data.get("results") or []
        if not results:
            return details
        return merge_reverse_geocode(details, results[0])

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        params: Dict[str, str],
        *,
        operation: str,
    ) -> Dict[str, Any]:
        url = f"{self._base_url}/{path}"
        start = time.perf_counter()
        try:
            response = await client.get(url, params=params)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "places.%s status=%s latency_ms=%.1f",
                operation,
                response.status_code,
                elapsed_ms,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            # httpx messages embed the request URL, which carries the API key
            reason = _http_error_reason(exc)
            logger.error("places.%s error path=%s error=%s", operation, path, reason)
            raise GeocoderError(f"places {operation} failed", reason=reason) from None
        except ValueError as exc:
            raise GeocoderError(f"places {operation} returned invalid JSON", reason="invalid_json") from exc

        status = data.get("status", "OK")
        if status not in ("OK", "ZERO_RESULTS"):
            raise GeocoderError(
                f"places {operation} returned status {status}",
                reason=status,
                debug={"error_message": data.get("error_message")},
            )
        return data
