"""Cloud Function Entry Point.

This module provides the entry points for Google Cloud Functions.
It's a thin wrapper that loads configuration and invokes the handlers.
"""

import logging
import os
from typing import Any

import functions_framework
from flask import Request, Response

from src import api_handler
from src.core.access import REASON_ERROR
from src.core.config import Config
from src.orchestrator import LocationVerifier
from src.shell.config_loader import load_config, load_config_from_env
from src.shell.firestore_client import FirestoreClient, FirestoreConfig
from src.shell.rate_limiter import RequestRateLimiter
from src.shell.token_store import FirestoreTokenStore


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reused across invocations on a warm instance
_config: Config | None = None
_verifier: LocationVerifier | None = None
_rate_limiter: RequestRateLimiter | None = None


def _get_config() -> Config:
    """Load configuration from file or environment."""
    global _config
    if _config is None:
        if os.environ.get("CONFIG_PATH"):
            _config = load_config(os.environ["CONFIG_PATH"])
        elif os.environ.get("SERVICE_CENTER_LAT"):
            _config = load_config_from_env()
        else:
            _config = load_config()
    return _config


def _get_verifier() -> LocationVerifier:
    global _verifier
    if _verifier is None:
        _verifier = LocationVerifier(_get_config())
    return _verifier


def _get_rate_limiter() -> RequestRateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RequestRateLimiter(_get_config().rate_limit)
    return _rate_limiter


@functions_framework.http
def verify_location(request: Request) -> Response:
    """HTTP Cloud Function: IP-based service area check."""
    try:
        return api_handler.verify_location(request, _get_verifier(), _get_rate_limiter())
    except Exception:
        # Fail open - allow access if there's an error
        logger.exception("Unexpected error in verify_location")
        return api_handler.json_response(
            {"allowed": True, "reason": REASON_ERROR},
        )


@functions_framework.http
def verify_zip(request: Request) -> Response:
    """HTTP Cloud Function: zip code service area check."""
    try:
        return api_handler.verify_zip(request, _get_verifier(), _get_rate_limiter())
    except Exception:
        logger.exception("Unexpected error in verify_zip")
        return api_handler.json_response(
            {"allowed": False, "error": "Unable to verify location. Please try again."},
            status=500,
        )


@functions_framework.cloud_event
def sweep_expired_tokens_pubsub(cloud_event: Any) -> None:
    """Pub/Sub Cloud Function: evict expired password reset tokens.

    Triggered by Cloud Scheduler.
    """
    logger.info("Starting expired token sweep (Pub/Sub trigger)")

    config = _get_config()
    firestore_client = FirestoreClient(FirestoreConfig(settings=config.firestore))
    store = FirestoreTokenStore(
        firestore_client.client,
        collection=config.firestore.reset_tokens_collection,
    )

    removed = store.sweep()
    logger.info("Completed: removed %d expired tokens", removed)
