"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Geo/distance calculations and the service area rule
- Location access decisions
- Zip code parsing and verification
- Mention extraction and notification fan-out
- Deduplication logic

All functions are deterministic and have no I/O.
"""

from src.core.geo import (
    Coordinate,
    ServiceAreaConfig,
    calculate_distance,
    is_within_radius,
    is_in_region,
    is_location_allowed,
)
from src.core.access import AccessDecision, decide_access
from src.core.zipcode import ZipLookupResult, ZipVerification, evaluate_zip
from src.core.mentions import (
    DirectoryUser,
    NotificationRecord,
    extract_mentions,
    resolve_mentions_to_users,
    build_notification_records,
)
from src.core.dedup import unique_users, count_unread_threads

__all__ = [
    # Geo
    "Coordinate",
    "ServiceAreaConfig",
    "calculate_distance",
    "is_within_radius",
    "is_in_region",
    "is_location_allowed",
    # Access
    "AccessDecision",
    "decide_access",
    # Zip
    "ZipLookupResult",
    "ZipVerification",
    "evaluate_zip",
    # Mentions
    "DirectoryUser",
    "NotificationRecord",
    "extract_mentions",
    "resolve_mentions_to_users",
    "build_notification_records",
    # Dedup
    "unique_users",
    "count_unread_threads",
]
