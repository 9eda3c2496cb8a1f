"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components:

- LocationVerifier: IP and zip code service-area checks
- MessageBoard: posts, replies and mention notifications

Policies owned here:
- IP location checks fail open. When the location cannot be determined,
  access is granted with an explanatory reason.
- Mention processing fails silent. A post that was saved stays saved even
  if the directory lookup or notification insert fails.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.core.access import (
    AccessDecision,
    REASON_ERROR,
    REASON_LOCAL_NETWORK,
    REASON_LOOKUP_FAILED,
    REASON_NO_IP,
    decide_access,
    fail_open,
    get_client_ip,
    is_local_address,
)
from src.core.config import Config
from src.core.dedup import count_unread_threads
from src.core.formatter import format_notification_summary
from src.core.mentions import NotificationRecord, extract_mentions, plan_mention_notifications
from src.core.sanitize import (
    DISALLOWED_CONTENT_ERROR,
    contains_malicious_content,
    sanitize_input,
    validate_reply_content,
)
from src.core.zipcode import ZipVerification, evaluate_zip
from src.shell.firestore_client import FirestoreClient, FirestoreConfig
from src.shell.geocoding_client import IPGeolocationClient, ZipGeocoder


logger = logging.getLogger(__name__)


class LocationVerifier:
    """Checks whether visitors are inside the league's service area."""

    def __init__(
        self,
        config: Config,
        zip_geocoder: ZipGeocoder | None = None,
        ip_client: IPGeolocationClient | None = None,
    ) -> None:
        """Initialize verifier with configuration.

        Args:
            config: Application configuration
            zip_geocoder: Zip geocoder (created if not provided)
            ip_client: IP geolocation client (created if not provided)
        """
        self.config = config
        self.zip_geocoder = zip_geocoder or ZipGeocoder(config.geocoding)
        self.ip_client = ip_client or IPGeolocationClient(config.geocoding)

    def verify_ip(self, ip: str | None) -> AccessDecision:
        """Decide access for a client IP.

        Never raises; every failure path grants access.
        """
        if not ip:
            logger.info("No client IP, allowing access")
            return fail_open(REASON_NO_IP)

        if is_local_address(ip):
            return fail_open(REASON_LOCAL_NETWORK)

        try:
            location = self.ip_client.lookup(ip)

            if location is None:
                logger.info("IP location unavailable, allowing access")
                return fail_open(REASON_LOOKUP_FAILED)

            decision = decide_access(location, self.config.service_area)

            logger.info(
                "Location check for %s, %s: %s",
                location.city,
                location.state,
                "allowed" if decision.allowed else "denied",
            )
            return decision

        except Exception:
            logger.exception("Location verification error")
            return fail_open(REASON_ERROR)

    def verify_request(
        self,
        headers: Mapping[str, str],
        remote_addr: str | None = None,
    ) -> AccessDecision:
        """Decide access for an incoming HTTP request."""
        return self.verify_ip(get_client_ip(headers, remote_addr))

    def verify_zip(self, raw_zip: str) -> ZipVerification:
        """Check a user-entered zip code against the service radius.

        Geocoder failures yield a not-allowed result with an error message.
        """
        lookup = self.zip_geocoder.lookup(raw_zip)
        result = evaluate_zip(lookup, self.config.service_area)

        logger.info(
            "Zip verification: allowed=%s distance=%s",
            result.allowed,
            result.distance,
        )
        return result


@dataclass
class PostResult:
    """Result of creating a post or reply.

    Attributes:
        post: The stored message or reply
        notifications: Mention notifications that were created
    """
    post: dict[str, Any]
    notifications: list[NotificationRecord] = field(default_factory=list)


class MessageBoard:
    """Coach message board: posts, replies and mention notifications."""

    def __init__(
        self,
        config: Config,
        firestore_client: FirestoreClient | None = None,
    ) -> None:
        """Initialize message board with configuration.

        Args:
            config: Application configuration
            firestore_client: Firestore client (created if not provided)
        """
        self.config = config
        self.firestore_client = firestore_client or FirestoreClient(
            FirestoreConfig(settings=config.firestore)
        )

    def process_mentions(
        self,
        message_id: str,
        reply_id: str | None,
        content: str,
        author_id: str,
    ) -> list[NotificationRecord]:
        """Create notifications for users mentioned in a post.

        Best-effort: returns an empty list on any failure.

        Returns:
            Notifications that were stored
        """
        try:
            if not extract_mentions(content):
                return []

            directory = self.firestore_client.get_mention_directory(
                self.config.mention_roles
            )
            records = plan_mention_notifications(
                message_id,
                reply_id,
                content,
                author_id,
                directory,
            )

            if not records:
                return []

            if not self.firestore_client.add_notifications(records):
                return []

            logger.info("Created %s", format_notification_summary(records))
            return records

        except Exception:
            logger.exception("Mention processing failed for message %s", message_id)
            return []

    def post_message(
        self,
        content: str,
        author_id: str,
        author_name: str,
    ) -> PostResult:
        """Create a top-level post and notify mentioned users.

        Raises:
            ValueError: If the content carries script-injection markup
            Exception: If the post cannot be stored
        """
        if contains_malicious_content(content):
            raise ValueError(DISALLOWED_CONTENT_ERROR)

        sanitized_content = sanitize_input(str(content).strip())
        sanitized_author = sanitize_input(str(author_name))

        logger.info(
            "Creating message by %s: %s",
            author_id,
            sanitized_content[:50],
        )

        post = self.firestore_client.create_message(
            author_id,
            sanitized_author,
            sanitized_content,
        )

        notifications = self.process_mentions(post["id"], None, sanitized_content, author_id)
        return PostResult(post=post, notifications=notifications)

    def post_reply(
        self,
        message_id: str,
        content: str,
        author_id: str,
        author_name: str,
    ) -> PostResult:
        """Create a reply and notify mentioned users.

        Raises:
            ValueError: If the reply is empty, too long or carries
                script-injection markup
            Exception: If the reply cannot be stored
        """
        if contains_malicious_content(content):
            raise ValueError(DISALLOWED_CONTENT_ERROR)

        sanitized_content = sanitize_input(str(content).strip())
        error = validate_reply_content(sanitized_content)
        if error:
            raise ValueError(error)

        reply = self.firestore_client.create_reply(
            message_id,
            author_id,
            sanitize_input(str(author_name)),
            sanitized_content,
        )

        notifications = self.process_mentions(
            message_id,
            reply["id"],
            sanitized_content,
            author_id,
        )
        return PostResult(post=reply, notifications=notifications)

    def unread_mention_count(self, user_id: str) -> int:
        """Count distinct posts with unread mentions of a user."""
        rows = self.firestore_client.get_unread_notifications(user_id)
        return count_unread_threads(rows)

    def mark_mention_read(self, notification_id: str) -> bool:
        """Acknowledge a mention notification."""
        return self.firestore_client.mark_notification_read(notification_id)
