"""Location access policy - Pure functions.

This module decides whether a visitor's location grants access to
registration. The decision combines the radius check and the region check
from src.core.geo. All functions are pure with no side effects.

Fail-open policy: when the location itself cannot be determined (no IP,
local network, lookup failure) access is granted. The caller in
src/orchestrator.py applies it through fail_open().
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.core.geo import Coordinate, ServiceAreaConfig, DEFAULT_SERVICE_AREA, is_location_allowed
from src.core.formatter import format_denial_reason, format_location


# Reasons returned when the location is unavailable and access is granted anyway
REASON_NO_IP = "Unable to determine location, allowing access"
REASON_LOCAL_NETWORK = "Development/local network detected"
REASON_LOOKUP_FAILED = "Unable to verify location, allowing access"
REASON_ERROR = "Error verifying location, allowing access"

LOCAL_ADDRESSES = ("127.0.0.1", "::1")
LOCAL_PREFIXES = ("192.168.", "10.")


@dataclass(frozen=True)
class IPLocation:
    """Location resolved from a client IP address.

    Attributes:
        coordinate: Approximate position of the client
        city: City name, if known
        state: Region/state as reported by the geolocation service
        zip_code: Postal code, if known
    """
    coordinate: Coordinate
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a location access check.

    Attributes:
        allowed: Whether access is granted
        reason: Explanation (set on denial and on fail-open)
        location: Location details echoed back to the client
    """
    allowed: bool
    reason: str | None = None
    location: dict[str, str | None] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON response shape."""
        data: dict[str, Any] = {"allowed": self.allowed}
        if self.reason is not None:
            data["reason"] = self.reason
        if self.location is not None:
            data["location"] = dict(self.location)
        return data


def get_client_ip(
    headers: Mapping[str, str],
    remote_addr: str | None = None,
) -> str | None:
    """Determine the client IP from proxy headers.

    Pure function.

    Order: first X-Forwarded-For entry, then X-Real-IP, then the socket
    address.
    """
    forwarded = headers.get("x-forwarded-for") or headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip") or headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return remote_addr or None


def is_local_address(ip: str) -> bool:
    """Check if an IP belongs to localhost or a private LAN range.

    Pure function.
    """
    return ip in LOCAL_ADDRESSES or ip.startswith(LOCAL_PREFIXES)


def fail_open(reason: str) -> AccessDecision:
    """Grant access because the location could not be checked.

    Pure function.
    """
    return AccessDecision(allowed=True, reason=reason)


def decide_access(
    location: IPLocation,
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> AccessDecision:
    """Decide access for a resolved location.

    Pure function.

    Args:
        location: Location resolved from the client IP
        config: Service area to check against

    Returns:
        AccessDecision; denials carry a human-readable reason
    """
    allowed = is_location_allowed(
        location.coordinate.latitude,
        location.coordinate.longitude,
        location.state,
        config,
    )

    if allowed:
        return AccessDecision(allowed=True, location=format_location(location))

    return AccessDecision(
        allowed=False,
        reason=format_denial_reason(location, config),
        location=format_location(location),
    )
