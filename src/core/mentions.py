"""Mention extraction and notification fan-out - Pure functions.

This module parses @handle mentions out of message-board posts, resolves
them against the directory of coaches and admins, and builds the
notification records to insert. All functions are pure with no side effects.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from src.core.dedup import unique_users, exclude_author


MENTION_PATTERN = re.compile(r"@([A-Za-z0-9._-]+)")


@dataclass(frozen=True)
class DirectoryUser:
    """A user who can be mentioned.

    Attributes:
        id: Opaque user identifier
        email: Login email; its local part doubles as the mention handle
    """
    id: str
    email: str


@dataclass(frozen=True)
class NotificationRecord:
    """A mention notification to persist.

    Attributes:
        message_id: Message the mention appeared in (or the reply's parent)
        reply_id: Reply the mention appeared in, None for top-level posts
        mentioned_user_id: User being notified
        mentioned_by_user_id: Author of the post
    """
    message_id: str
    reply_id: str | None
    mentioned_user_id: str
    mentioned_by_user_id: str

    def to_payload(self) -> dict[str, Any]:
        """Convert to the insert payload shape."""
        return {
            "message_id": self.message_id,
            "reply_id": self.reply_id,
            "mentioned_user_id": self.mentioned_user_id,
            "mentioned_by_user_id": self.mentioned_by_user_id,
        }


def extract_mentions(text: str | None) -> set[str]:
    """Extract lower-cased mention handles from text.

    Pure function.

    Args:
        text: Message or reply content

    Returns:
        Distinct handles without the leading '@'
    """
    if not text:
        return set()
    return {match.lower() for match in MENTION_PATTERN.findall(text)}


def matches_mention(user: DirectoryUser, token: str) -> bool:
    """Check if a mention handle refers to a user.

    Pure function.

    Matches when the email's local part equals the handle, or when the
    whole email contains it.
    """
    email = user.email.lower()
    local_part = email.split("@")[0]
    return local_part == token or token in email


def resolve_mentions_to_users(
    mention_tokens: Iterable[str],
    directory: Iterable[DirectoryUser],
) -> list[DirectoryUser]:
    """Resolve mention handles to directory users.

    Pure function.

    The directory must already be restricted to mentionable roles. Each
    handle resolves to the first matching user in directory order, so
    overlapping emails ("jdoe", "jdoe2") go to whichever comes first.
    Unmatched handles are dropped.

    Args:
        mention_tokens: Handles from extract_mentions()
        directory: Mentionable users

    Returns:
        Matched users, one per resolved handle (may repeat)
    """
    users = list(directory)
    matched = []

    for token in mention_tokens:
        user = next((u for u in users if matches_mention(u, token)), None)
        if user is not None:
            matched.append(user)

    return matched


def build_notification_records(
    message_id: str,
    reply_id: str | None,
    resolved_users: Iterable[DirectoryUser],
    author_id: str,
) -> list[NotificationRecord]:
    """Build one notification per distinct mentioned user.

    Pure function. The author is never notified about their own post.

    Args:
        message_id: Message the mentions belong to
        reply_id: Reply the mentions belong to, None for top-level posts
        resolved_users: Output of resolve_mentions_to_users()
        author_id: Author of the post

    Returns:
        Notification records to insert
    """
    recipients = exclude_author(unique_users(resolved_users), author_id)

    return [
        NotificationRecord(
            message_id=message_id,
            reply_id=reply_id,
            mentioned_user_id=user.id,
            mentioned_by_user_id=author_id,
        )
        for user in recipients
    ]


def plan_mention_notifications(
    message_id: str,
    reply_id: str | None,
    text: str | None,
    author_id: str,
    directory: Iterable[DirectoryUser],
) -> list[NotificationRecord]:
    """Extract, resolve and build notifications for a post in one step.

    Pure function.
    """
    tokens = extract_mentions(text)
    if not tokens:
        return []

    users = resolve_mentions_to_users(tokens, directory)
    return build_notification_records(message_id, reply_id, users, author_id)
