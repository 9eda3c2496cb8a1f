"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Zip and IP geocoding clients (HTTP)
- Firestore client (database)
- Expiring token stores
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.geocoding_client import ZipGeocoder, IPGeolocationClient
from src.shell.firestore_client import FirestoreClient
from src.shell.token_store import InMemoryTokenStore, TokenSweeper
from src.shell.config_loader import load_config, Config

__all__ = [
    "ZipGeocoder",
    "IPGeolocationClient",
    "FirestoreClient",
    "InMemoryTokenStore",
    "TokenSweeper",
    "load_config",
    "Config",
]
