"""Firestore Client - Imperative Shell.

This module handles persistence for the coach message board: posts,
replies, the directory of mentionable users, and mention notifications.
Uses Google Cloud Firestore.

All I/O is contained here; mention parsing and fan-out logic is in the
core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore

from src.core.config import FirestoreSettings
from src.core.mentions import DirectoryUser, NotificationRecord


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        settings: Database and collection names
    """
    project_id: str | None = None
    settings: FirestoreSettings | None = None


class FirestoreClient:
    """Client for message-board persistence in Firestore.

    This is part of the imperative shell - it handles database I/O.

    Collections:
        users:                 {email, role, ...}
        coach_messages:        {author_id, author_name, content, created_at}
        coach_message_replies: {message_id, author_id, author_name, content, created_at}
        message_notifications: {message_id, reply_id, mentioned_user_id,
                                mentioned_by_user_id, mentioned_at,
                                is_read, read_at, acknowledged_at}
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self.settings = self.config.settings or FirestoreSettings()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.settings.database:
                kwargs['database'] = self.settings.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self, name: str) -> Any:
        return self.client.collection(name)

    def get_mention_directory(self, roles: tuple[str, ...]) -> list[DirectoryUser]:
        """Fetch the users who can be mentioned.

        This method performs database I/O.

        Args:
            roles: Roles to include (e.g. coach, admin)

        Returns:
            Users with an email, in query order; empty list on error
        """
        logger.info("Fetching mention directory for roles %s", ", ".join(roles))

        try:
            docs = (
                self._collection(self.settings.users_collection)
                .where(filter=firestore.FieldFilter("role", "in", list(roles)))
                .stream()
            )

            users = []
            for doc in docs:
                data = doc.to_dict() or {}
                email = data.get("email")
                if email:
                    users.append(DirectoryUser(id=doc.id, email=email))

            logger.info("Fetched %d mentionable users", len(users))
            return users

        except Exception as e:
            logger.error("Failed to fetch mention directory: %s", str(e))
            # Mentions are best-effort; an empty directory means no notifications
            return []

    def _insert(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        doc_ref = self._collection(collection).document()
        doc_ref.set(data)
        return {"id": doc_ref.id, **data}

    def create_message(
        self,
        author_id: str,
        author_name: str,
        content: str,
    ) -> dict[str, Any]:
        """Insert a message-board post.

        This method performs database I/O.

        Returns:
            The stored post including its generated id

        Raises:
            Exception: If the insert fails
        """
        logger.info("Creating message for author %s", author_id)

        return self._insert(self.settings.messages_collection, {
            "author_id": author_id,
            "author_name": author_name,
            "content": content,
            "created_at": datetime.now(timezone.utc),
        })

    def create_reply(
        self,
        message_id: str,
        author_id: str,
        author_name: str,
        content: str,
    ) -> dict[str, Any]:
        """Insert a reply to a message-board post.

        This method performs database I/O.

        Returns:
            The stored reply including its generated id

        Raises:
            Exception: If the insert fails
        """
        logger.info("Creating reply to message %s for author %s", message_id, author_id)

        return self._insert(self.settings.replies_collection, {
            "message_id": message_id,
            "author_id": author_id,
            "author_name": author_name,
            "content": content,
            "created_at": datetime.now(timezone.utc),
        })

    def add_notifications(self, records: list[NotificationRecord]) -> bool:
        """Insert mention notifications in one batch.

        Args:
            records: Notifications to insert

        Returns:
            True if the write was successful
        """
        if not records:
            return True

        logger.info("Adding %d mention notifications", len(records))

        try:
            batch = self.client.batch()
            collection = self._collection(self.settings.notifications_collection)
            now = datetime.now(timezone.utc)

            for record in records:
                batch.set(collection.document(), {
                    **record.to_payload(),
                    "mentioned_at": now,
                    "is_read": False,
                    "read_at": None,
                    "acknowledged_at": None,
                })

            batch.commit()
            logger.info("Successfully added mention notifications")
            return True

        except Exception as e:
            logger.error("Failed to add mention notifications: %s", str(e))
            return False

    def get_unread_notifications(self, user_id: str) -> list[dict[str, Any]]:
        """Fetch unacknowledged mention notifications for a user.

        Returns:
            Notification rows (with id), newest first; empty list on error
        """
        try:
            docs = (
                self._collection(self.settings.notifications_collection)
                .where(filter=firestore.FieldFilter("mentioned_user_id", "==", user_id))
                .where(filter=firestore.FieldFilter("acknowledged_at", "==", None))
                .stream()
            )

            rows = [{"id": doc.id, **(doc.to_dict() or {})} for doc in docs]
            # Guard against rows for other users slipping through
            rows = [r for r in rows if r.get("mentioned_user_id") == user_id]
            rows.sort(key=lambda r: r.get("mentioned_at") or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
            return rows

        except Exception as e:
            logger.error("Failed to fetch unread notifications for %s: %s", user_id, str(e))
            return []

    def mark_notification_read(self, notification_id: str) -> bool:
        """Mark a single mention notification as read and acknowledged.

        Returns:
            True if the update was successful
        """
        try:
            now = datetime.now(timezone.utc)
            (
                self._collection(self.settings.notifications_collection)
                .document(notification_id)
                .update({
                    "is_read": True,
                    "read_at": now,
                    "acknowledged_at": now,
                })
            )
            logger.info("Marked notification %s as read", notification_id)
            return True

        except Exception as e:
            logger.error("Failed to mark notification %s as read: %s", notification_id, str(e))
            return False
