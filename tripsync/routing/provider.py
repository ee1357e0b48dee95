"""Point-to-point travel time providers.

Providers raise on failure. Callers that must not fail (the recalculation
engine) decide how to degrade.
"""

import logging
import math
import re
from datetime import timedelta
from typing import Protocol

import httpx

from tripsync.config import Settings
from tripsync.models.common import Geo, TravelMode

logger = logging.getLogger(__name__)

ROUTES_PATH = "/directions/v2:computeRoutes"
ROUTES_FIELD_MASK = "routes.duration,routes.distanceMeters"

_SECONDS_RE = re.compile(r"^(\d+(?:\.\d+)?)s$")
_ISO_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?$")

# Average speeds (km/h) for straight-line estimates
_EARTH_RADIUS_KM = 6371.0
_SPEED_KMH = {
    TravelMode.DRIVE: 40.0,
    TravelMode.TWO_WHEELER: 35.0,
    TravelMode.TRANSIT: 25.0,
    TravelMode.BICYCLE: 15.0,
    TravelMode.WALK: 4.5,
}


class RouteLookupError(Exception):
    """Route provider returned no usable duration."""

    pass


class RouteTimeProvider(Protocol):
    """Protocol for travel time lookups."""

    def travel_minutes(self, origin: Geo, destination: Geo, mode: TravelMode) -> int:
        """Travel duration between two points.

        Args:
            origin: Start coordinates
            destination: End coordinates
            mode: Travel mode

        Returns:
            Duration in whole minutes

        Raises:
            RouteLookupError: If no duration could be determined
            httpx.HTTPError: On network or HTTP errors
        """
        ...


def parse_route_duration(value: str | None) -> int:
    """Parse a Routes API duration into whole minutes.

    Accepts the protobuf form ("1234s") and ISO-8601 ("PT1H30M").

    Raises:
        RouteLookupError: If the value is empty or malformed
    """
    if not value:
        raise RouteLookupError("empty duration")

    match = _SECONDS_RE.match(value)
    if match:
        return int(float(match.group(1)) // 60)

    match = _ISO_RE.match(value)
    if match and any(match.groups()):
        hours, minutes, seconds = match.groups()
        total = timedelta(
            hours=int(hours or 0), minutes=int(minutes or 0), seconds=float(seconds or 0)
        )
        return int(total.total_seconds() // 60)

    raise RouteLookupError(f"unrecognized duration: {value!r}")


class GoogleRoutesProvider:
    """Google Routes API (computeRoutes) backed provider."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://routes.googleapis.com",
        language_code: str = "en",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            api_key: Google Maps Platform API key
            base_url: Routes API base URL
            language_code: Language for localized fields
            timeout: Request timeout in seconds
            client: Optional httpx client (for testing with mocks)
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._language_code = language_code
        self._client = client or httpx.Client(timeout=timeout)

    def travel_minutes(self, origin: Geo, destination: Geo, mode: TravelMode) -> int:
        """Query computeRoutes and return the first route's duration."""
        body = {
            "origin": {"location": {"latLng": {"latitude": origin.lat, "longitude": origin.lon}}},
            "destination": {
                "location": {"latLng": {"latitude": destination.lat, "longitude": destination.lon}}
            },
            "travelMode": mode.value,
            "languageCode": self._language_code,
        }
        headers = {
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": ROUTES_FIELD_MASK,
        }

        response = self._client.post(f"{self._base_url}{ROUTES_PATH}", json=body, headers=headers)
        response.raise_for_status()

        routes = response.json().get("routes") or []
        if not routes:
            raise RouteLookupError("no routes returned")
        return parse_route_duration(routes[0].get("duration"))

    def close(self) -> None:
        self._client.close()


def haversine_km(a: Geo, b: Geo) -> float:
    """Great-circle distance between two points in km."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lam = math.radians(b.lon - a.lon)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    return 2 * _EARTH_RADIUS_KM * math.asin(math.sqrt(h))


class StraightLineRouteProvider:
    """Offline estimate from great-circle distance and a per-mode speed."""

    def travel_minutes(self, origin: Geo, destination: Geo, mode: TravelMode) -> int:
        """Estimate travel minutes without any network call."""
        km = haversine_km(origin, destination)
        return round(km / _SPEED_KMH[mode] * 60)


def get_route_provider(settings: Settings) -> RouteTimeProvider:
    """Get route provider based on configuration.

    Returns GoogleRoutesProvider if an API key is configured, otherwise the
    straight-line estimator.
    """
    if settings.routes_api_key:
        logger.info("Using Google Routes provider")
        return GoogleRoutesProvider(
            api_key=settings.routes_api_key,
            base_url=settings.routes_api_url,
            language_code=settings.routes_language_code,
            timeout=settings.routes_timeout_seconds,
        )

    logger.info("No ROUTES_API_KEY configured, using straight-line route estimates")
    return StraightLineRouteProvider()
