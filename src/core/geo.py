"""Geographic calculations - Pure functions.

This module provides distance and service-area checks for registrant
locations. All functions are pure with no side effects.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field


# Earth's radius in miles
EARTH_RADIUS_MILES = 3959.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees.

    Attributes:
        latitude: Latitude in [-90, 90]
        longitude: Longitude in [-180, 180]
    """
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ServiceAreaConfig:
    """The area the league serves.

    Attributes:
        center: Reference point of the service area
        radius_miles: Radius around the center, in miles (must be > 0)
        name: Human-readable name of the center (used in messages)
        allowed_regions: Accepted spellings of the home state/region
    """
    center: Coordinate = field(default_factory=lambda: Coordinate(38.8403, -97.6114))
    radius_miles: float = 50.0
    name: str = "Salina, Kansas"
    allowed_regions: tuple[str, ...] = ("KS", "Kansas")


DEFAULT_SERVICE_AREA = ServiceAreaConfig()


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function. Inputs are not range-checked; out-of-range degrees give
    a defined but meaningless result.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in miles
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MILES * c


def distance_from_center(
    latitude: float,
    longitude: float,
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> float:
    """Distance in miles from the service area center to a point.

    Pure function.
    """
    return calculate_distance(
        config.center.latitude,
        config.center.longitude,
        latitude,
        longitude,
    )


def is_within_radius(
    latitude: float,
    longitude: float,
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> bool:
    """Check if a point is within the service radius.

    Pure function. A point exactly on the radius is inside.

    Args:
        latitude: Latitude to check
        longitude: Longitude to check
        config: Service area to check against

    Returns:
        True if the point is within radius_miles of the center
    """
    return distance_from_center(latitude, longitude, config) <= config.radius_miles


def is_in_region(
    region_code: str | None,
    allowed_region_codes: str | Iterable[str],
) -> bool:
    """Check if a self-reported region matches an allowed region.

    Pure function. Comparison is trimmed and case-insensitive.

    Args:
        region_code: Region reported for the location (e.g. "KS", " kansas ")
        allowed_region_codes: One accepted spelling, or several

    Returns:
        True if region_code matches any accepted spelling
    """
    if not region_code or not region_code.strip():
        return False

    if isinstance(allowed_region_codes, str):
        allowed_region_codes = (allowed_region_codes,)

    normalized = region_code.strip().upper()
    return any(
        normalized == allowed.strip().upper()
        for allowed in allowed_region_codes
        if allowed
    )


def is_location_allowed(
    latitude: float,
    longitude: float,
    region_code: str | None,
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> bool:
    """Apply the service area access rule.

    Pure function.

    Access is granted when the point is within the radius OR the reported
    region is an allowed one. IP geolocation on mobile networks often
    places users outside the radius, so the region match still grants
    access.
    """
    return (
        is_within_radius(latitude, longitude, config)
        or is_in_region(region_code, config.allowed_regions)
    )
