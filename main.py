"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the src package.
"""

from src.main import (
    verify_location,
    verify_zip,
    sweep_expired_tokens_pubsub,
)

__all__ = [
    "verify_location",
    "verify_zip",
    "sweep_expired_tokens_pubsub",
]
