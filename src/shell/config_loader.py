"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, GeocodingConfig, ...) are defined in src/core/config.py
to avoid information leakage between layers.

Example config.yaml:

    service_area:
      name: "Salina, Kansas"
      center: {latitude: 38.8403, longitude: -97.6114}
      radius_miles: 50
      allowed_regions: [KS, Kansas]
    geocoding:
      timeout_seconds: 10
      user_agent: "WCS Basketball App"
    firestore:
      database: ${FIRESTORE_DATABASE}
    mention_roles: [coach, admin]
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from src.core.config import (
    Config,
    FirestoreSettings,
    GeocodingConfig,
    RateLimitConfig,
    TokenConfig,
    validate_config,
)
from src.core.geo import Coordinate, ServiceAreaConfig
from src.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Create a Secret Manager client if a project is configured.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_service_area(data: dict[str, Any]) -> ServiceAreaConfig:
    """Parse the service area from config data."""
    defaults = ServiceAreaConfig()
    center_data = data.get("center") or {}

    center = Coordinate(
        latitude=float(center_data.get("latitude", defaults.center.latitude)),
        longitude=float(center_data.get("longitude", defaults.center.longitude)),
    )

    regions = data.get("allowed_regions", defaults.allowed_regions)
    if isinstance(regions, str):
        regions = [regions]

    return ServiceAreaConfig(
        center=center,
        radius_miles=float(data.get("radius_miles", defaults.radius_miles)),
        name=data.get("name", defaults.name),
        allowed_regions=tuple(str(r) for r in regions),
    )


def _parse_geocoding(data: dict[str, Any]) -> GeocodingConfig:
    """Parse geocoder settings from config data."""
    defaults = GeocodingConfig()
    return GeocodingConfig(
        zip_primary_url=data.get("zip_primary_url", defaults.zip_primary_url),
        zip_fallback_url=data.get("zip_fallback_url", defaults.zip_fallback_url),
        ip_lookup_url=data.get("ip_lookup_url", defaults.ip_lookup_url),
        user_agent=data.get("user_agent", defaults.user_agent),
        timeout_seconds=int(data.get("timeout_seconds", defaults.timeout_seconds)),
        zip_cache_ttl_seconds=int(
            data.get("zip_cache_ttl_seconds", defaults.zip_cache_ttl_seconds)
        ),
    )


def _parse_firestore(
    data: dict[str, Any],
    secret_client: Optional[SecretManagerClient] = None,
) -> FirestoreSettings:
    """Parse Firestore names from config data."""
    defaults = FirestoreSettings()

    database = _resolve_value(data.get("database"), secret_client)
    if isinstance(database, str) and database.startswith("${"):
        database = None

    return FirestoreSettings(
        database=database or None,
        users_collection=data.get("users_collection", defaults.users_collection),
        messages_collection=data.get("messages_collection", defaults.messages_collection),
        replies_collection=data.get("replies_collection", defaults.replies_collection),
        notifications_collection=data.get(
            "notifications_collection", defaults.notifications_collection
        ),
        reset_tokens_collection=data.get(
            "reset_tokens_collection", defaults.reset_tokens_collection
        ),
    )


def _parse_tokens(data: dict[str, Any]) -> TokenConfig:
    """Parse token store settings from config data."""
    defaults = TokenConfig()
    return TokenConfig(
        sweep_interval_seconds=int(
            data.get("sweep_interval_seconds", defaults.sweep_interval_seconds)
        ),
    )


def _parse_rate_limit(data: dict[str, Any]) -> RateLimitConfig:
    """Parse rate limit settings from config data."""
    defaults = RateLimitConfig()
    return RateLimitConfig(
        max_requests=int(data.get("max_requests", defaults.max_requests)),
        window_seconds=int(data.get("window_seconds", defaults.window_seconds)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()
    defaults = Config()

    return Config(
        service_area=_parse_service_area(data.get("service_area") or {}),
        geocoding=_parse_geocoding(data.get("geocoding") or {}),
        firestore=_parse_firestore(data.get("firestore") or {}, secret_client),
        tokens=_parse_tokens(data.get("tokens") or {}),
        rate_limit=_parse_rate_limit(data.get("rate_limit") or {}),
        mention_roles=tuple(data.get("mention_roles", defaults.mention_roles)),
        allowed_origins=tuple(data.get("allowed_origins", defaults.allowed_origins)),
    )


def _check_config(config: Config) -> None:
    """Log validation warnings and raise on critical errors.

    Raises:
        ValueError: If the config fails validation
    """
    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not result.valid:
        messages = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ValueError(f"Invalid configuration: {messages}")


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If the config fails validation
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)
    _check_config(config)

    logger.info(
        "Loaded config: %s miles around %s, %d mention roles",
        config.service_area.radius_miles,
        config.service_area.name,
        len(config.mention_roles),
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        SERVICE_CENTER_LAT: Service area center latitude
        SERVICE_CENTER_LON: Service area center longitude
        SERVICE_RADIUS_MILES: Service radius in miles
        SERVICE_AREA_NAME: Name used in denial messages
        ALLOWED_REGIONS: Comma-separated accepted region spellings
        FIRESTORE_DATABASE: Firestore database name
        ALLOWED_ORIGINS: Comma-separated CORS origins

    Returns:
        Config object from environment

    Raises:
        ValueError: If the config fails validation
    """
    defaults = ServiceAreaConfig()

    center = Coordinate(
        latitude=float(os.environ.get("SERVICE_CENTER_LAT", defaults.center.latitude)),
        longitude=float(os.environ.get("SERVICE_CENTER_LON", defaults.center.longitude)),
    )

    regions_str = os.environ.get("ALLOWED_REGIONS")
    regions = (
        tuple(r.strip() for r in regions_str.split(",") if r.strip())
        if regions_str
        else defaults.allowed_regions
    )

    service_area = ServiceAreaConfig(
        center=center,
        radius_miles=float(os.environ.get("SERVICE_RADIUS_MILES", defaults.radius_miles)),
        name=os.environ.get("SERVICE_AREA_NAME", defaults.name),
        allowed_regions=regions,
    )

    config = Config(
        service_area=service_area,
        firestore=FirestoreSettings(database=os.environ.get("FIRESTORE_DATABASE")),
    )

    origins_str = os.environ.get("ALLOWED_ORIGINS")
    if origins_str:
        config.allowed_origins = tuple(o.strip() for o in origins_str.split(",") if o.strip())

    _check_config(config)
    return config
