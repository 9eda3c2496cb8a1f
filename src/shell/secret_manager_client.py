"""Secret Manager Client - Imperative Shell.

This module reads secrets from Google Cloud Secret Manager and resolves
the ${...} placeholders used in config files:

    ${secret:name}   -> latest version of secret "name"
    ${ENV_VAR}       -> value of environment variable ENV_VAR

All I/O is contained here.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from google.cloud import secretmanager


logger = logging.getLogger(__name__)


SECRET_PREFIX = "secret:"


@dataclass
class SecretManagerConfig:
    """Configuration for Secret Manager client.

    Attributes:
        project_id: GCP project that owns the secrets
    """
    project_id: Optional[str] = None


class SecretManagerClient:
    """Client for reading secrets from Google Cloud Secret Manager.

    This is part of the imperative shell - it handles secret I/O.
    """

    def __init__(self, config: Optional[SecretManagerConfig] = None) -> None:
        self.config = config or SecretManagerConfig()
        self._client: Optional[secretmanager.SecretManagerServiceClient] = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy initialization of Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_secret(self, secret_name: str, version: str = "latest") -> Optional[str]:
        """Fetch a secret value.

        This method performs I/O.

        Args:
            secret_name: Short secret name (not the full resource path)
            version: Secret version

        Returns:
            Secret value, or None if unavailable
        """
        if not self.config.project_id:
            logger.error("No project ID configured for Secret Manager")
            return None

        name = f"projects/{self.config.project_id}/secrets/{secret_name}/versions/{version}"

        try:
            response = self.client.access_secret_version(request={"name": name})
            logger.info("Fetched secret: %s", secret_name)
            return response.payload.data.decode("UTF-8")

        except Exception as e:
            logger.error("Failed to fetch secret %s: %s", secret_name, str(e))
            return None

    def resolve(self, value: str) -> str:
        """Resolve a ${secret:name} or ${ENV_VAR} placeholder.

        Values that are not placeholders, or that cannot be resolved, are
        returned unchanged.
        """
        if not (value.startswith("${") and value.endswith("}")):
            return value

        name = value[2:-1]

        if name.startswith(SECRET_PREFIX):
            secret = self.get_secret(name[len(SECRET_PREFIX):])
            if secret is not None:
                return secret
            logger.warning("Secret placeholder %s left unresolved", value)
            return value

        env_value = os.environ.get(name)
        if env_value:
            return env_value

        logger.warning("Environment variable %s not set", name)
        return value
