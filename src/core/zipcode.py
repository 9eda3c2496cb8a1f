"""Zip code parsing and verification - Pure functions.

This module normalizes US zip codes, parses geocoder payloads into typed
ZipLookupResult objects and evaluates them against the service area.
All functions are pure with no side effects.
"""

import re
from dataclasses import dataclass
from typing import Any

from src.core.geo import Coordinate, ServiceAreaConfig, DEFAULT_SERVICE_AREA, distance_from_center
from src.core.formatter import round_distance


ZIP_CODE_LENGTH = 5

INVALID_ZIP_ERROR = "Invalid zip code or unable to verify location"

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class ZipLookupResult:
    """Geocoded zip code.

    Attributes:
        coordinate: Center of the zip code area
        state: State name or abbreviation, if the geocoder returned one
        city: Place name, if the geocoder returned one
    """
    coordinate: Coordinate
    state: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class ZipVerification:
    """Result of checking a zip code against the service area.

    Attributes:
        allowed: Whether the zip code lies within the service radius
        distance: Miles from the service area center (one decimal)
        error: Set when the zip could not be geocoded
    """
    allowed: bool
    distance: float | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON response shape."""
        data: dict[str, Any] = {"allowed": self.allowed}
        if self.distance is not None:
            data["distance"] = self.distance
        if self.error is not None:
            data["error"] = self.error
        return data


def normalize_zip_code(raw: str | None) -> str | None:
    """Strip everything but digits and require a 5-digit result.

    Pure function.

    Args:
        raw: User-entered zip code (e.g. " 67401 ", "67401-1234" is rejected)

    Returns:
        The 5-digit zip code, or None if invalid
    """
    if not raw:
        return None

    digits = _NON_DIGITS.sub("", raw.strip())
    if len(digits) != ZIP_CODE_LENGTH:
        return None
    return digits


def parse_zippopotam_response(data: dict[str, Any]) -> ZipLookupResult | None:
    """Parse a zippopotam.us response.

    Pure function.

    Expected shape:
        {"places": [{"latitude": "38.8", "longitude": "-97.6",
                     "place name": "Salina", "state abbreviation": "KS"}]}
    """
    try:
        places = data.get("places") or []
        if not places:
            return None

        place = places[0]
        return ZipLookupResult(
            coordinate=Coordinate(
                latitude=float(place["latitude"]),
                longitude=float(place["longitude"]),
            ),
            state=place.get("state abbreviation") or place.get("state"),
            city=place.get("place name"),
        )
    except (AttributeError, KeyError, TypeError, ValueError):
        return None


def parse_nominatim_response(data: list[dict[str, Any]]) -> ZipLookupResult | None:
    """Parse an OpenStreetMap Nominatim search response.

    Pure function.

    Expected shape:
        [{"lat": "38.8", "lon": "-97.6", "display_name": "..."}]
    """
    try:
        if not data:
            return None

        result = data[0]
        address = result.get("address") or {}
        return ZipLookupResult(
            coordinate=Coordinate(
                latitude=float(result["lat"]),
                longitude=float(result["lon"]),
            ),
            state=address.get("state"),
            city=address.get("city") or address.get("town"),
        )
    except (AttributeError, IndexError, KeyError, TypeError, ValueError):
        return None


def evaluate_zip(
    lookup: ZipLookupResult | None,
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> ZipVerification:
    """Check a geocoded zip code against the service radius.

    Pure function. An unresolved zip is rejected (zip entry is not
    fail-open, unlike IP-based checks).

    Args:
        lookup: Geocoded zip, or None if it could not be resolved
        config: Service area to check against

    Returns:
        ZipVerification with the rounded distance for display
    """
    if lookup is None:
        return ZipVerification(allowed=False, error=INVALID_ZIP_ERROR)

    distance = distance_from_center(
        lookup.coordinate.latitude,
        lookup.coordinate.longitude,
        config,
    )

    return ZipVerification(
        allowed=distance <= config.radius_miles,
        distance=round_distance(distance),
    )
