"""Deduplication logic - Pure functions.

This module handles collapsing repeated mentions so that each user is
notified once per message, and counting unread mention threads.
All functions are pure with no side effects.

Note: The actual persistence of notifications is handled by the imperative
shell (Firestore client). This module only contains the pure logic.
"""

from collections.abc import Iterable, Mapping
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.mentions import DirectoryUser


def unique_users(users: Iterable["DirectoryUser"]) -> list["DirectoryUser"]:
    """Remove repeated users, keeping the first occurrence of each id.

    Pure function.

    Args:
        users: Users, possibly with repeats

    Returns:
        Users with distinct ids, in first-seen order
    """
    seen: set[str] = set()
    result = []
    for user in users:
        if user.id in seen:
            continue
        seen.add(user.id)
        result.append(user)
    return result


def exclude_author(
    users: Iterable["DirectoryUser"],
    author_id: str,
) -> list["DirectoryUser"]:
    """Drop the author from a list of users.

    Pure function.
    """
    return [u for u in users if u.id != author_id]


def count_unread_threads(notifications: Iterable[Mapping[str, Any]]) -> int:
    """Count distinct messages/replies with unread mentions.

    Pure function.

    A reply mention is keyed by its reply_id, a top-level mention by its
    message_id, so several mentions in the same post count once.

    Args:
        notifications: Rows with message_id and reply_id keys

    Returns:
        Number of distinct threads
    """
    keys = {
        n.get("reply_id") or n.get("message_id")
        for n in notifications
    }
    keys.discard(None)
    return len(keys)
