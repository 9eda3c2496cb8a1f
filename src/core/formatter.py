"""Message formatting - Pure functions.

This module formats verification results and notification summaries
into user-facing text and response payloads.
All functions are pure with no side effects.
"""

from typing import TYPE_CHECKING

from src.core.geo import ServiceAreaConfig, DEFAULT_SERVICE_AREA

if TYPE_CHECKING:
    from src.core.access import IPLocation
    from src.core.mentions import NotificationRecord


def round_distance(miles: float) -> float:
    """Round a distance to one decimal place.

    Pure function.
    """
    return round(miles * 10) / 10


def format_radius(radius_miles: float) -> str:
    """Format a radius without a trailing '.0' (50.0 -> '50').

    Pure function.
    """
    if float(radius_miles).is_integer():
        return str(int(radius_miles))
    return f"{radius_miles:g}"


def format_location(location: "IPLocation") -> dict[str, str | None]:
    """Format a resolved location for the response body.

    Pure function.
    """
    return {
        "city": location.city,
        "state": location.state,
        "zip": location.zip_code,
    }


def format_denial_reason(
    location: "IPLocation",
    config: ServiceAreaConfig = DEFAULT_SERVICE_AREA,
) -> str:
    """Explain why a location was denied access.

    Pure function.

    Args:
        location: The location that was denied
        config: Service area the location was checked against

    Returns:
        Sentence naming the service area and where the visitor appears to be
    """
    city_part = f"in {location.city}, " if location.city else ""
    state_part = location.state or "outside the service area"

    return (
        f"Access is limited to residents within {format_radius(config.radius_miles)} "
        f"miles of {config.name}. "
        f"Your location appears to be {city_part}{state_part}."
    )


def format_notification_summary(records: list["NotificationRecord"]) -> str:
    """One-line summary of created mention notifications, for logs.

    Pure function.
    """
    if not records:
        return "No mention notifications"

    users = ", ".join(r.mentioned_user_id for r in records)
    noun = "notification" if len(records) == 1 else "notifications"
    return f"{len(records)} mention {noun} for users: {users}"
