"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from src.core.geo import ServiceAreaConfig


ZIPPOPOTAM_URL = "https://api.zippopotam.us/us"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
IP_API_URL = "http://ip-api.com/json"


@dataclass
class GeocodingConfig:
    """External geocoding services.

    Attributes:
        zip_primary_url: zippopotam.us base URL (zip is appended)
        zip_fallback_url: Nominatim search URL
        ip_lookup_url: ip-api.com base URL (IP is appended)
        user_agent: User-Agent sent to Nominatim (required by its policy)
        timeout_seconds: HTTP timeout per request
        zip_cache_ttl_seconds: How long a geocoded zip is cached
    """
    zip_primary_url: str = ZIPPOPOTAM_URL
    zip_fallback_url: str = NOMINATIM_URL
    ip_lookup_url: str = IP_API_URL
    user_agent: str = "WCS Basketball App"
    timeout_seconds: int = 10
    zip_cache_ttl_seconds: int = 24 * 60 * 60


@dataclass
class FirestoreSettings:
    """Firestore database and collection names.

    Attributes:
        database: Firestore database name (None for default)
        users_collection: Users with email and role fields
        messages_collection: Coach message-board posts
        replies_collection: Replies to message-board posts
        notifications_collection: Mention notifications
        reset_tokens_collection: Password reset tokens
    """
    database: str | None = None
    users_collection: str = "users"
    messages_collection: str = "coach_messages"
    replies_collection: str = "coach_message_replies"
    notifications_collection: str = "message_notifications"
    reset_tokens_collection: str = "password_reset_tokens"


@dataclass
class TokenConfig:
    """Expiring token store settings.

    Attributes:
        sweep_interval_seconds: How often stale entries are evicted
    """
    sweep_interval_seconds: int = 5 * 60


@dataclass
class RateLimitConfig:
    """Per-client request rate limit.

    Attributes:
        max_requests: Requests allowed per window
        window_seconds: Window length in seconds
    """
    max_requests: int = 1000
    window_seconds: int = 60


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        service_area: Center, radius and allowed regions
        geocoding: External geocoder settings
        firestore: Firestore database/collection names
        tokens: Expiring token store settings
        rate_limit: Request rate limit
        mention_roles: Roles whose users can be mentioned
        allowed_origins: CORS origins for the HTTP handlers
    """
    service_area: ServiceAreaConfig = field(default_factory=ServiceAreaConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    firestore: FirestoreSettings = field(default_factory=FirestoreSettings)
    tokens: TokenConfig = field(default_factory=TokenConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    mention_roles: tuple[str, ...] = ("coach", "admin")
    allowed_origins: tuple[str, ...] = ("http://localhost:3000",)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_service_area(area: ServiceAreaConfig, field_name: str) -> list[ValidationError]:
    """Validate a service area.

    Pure function.
    """
    errors = validate_coordinates(
        area.center.latitude,
        area.center.longitude,
        f"{field_name}.center",
    )

    if area.radius_miles <= 0:
        errors.append(ValidationError(
            field=f"{field_name}.radius_miles",
            message=f"Radius must be positive, got {area.radius_miles}",
        ))

    if not area.allowed_regions:
        errors.append(ValidationError(
            field=f"{field_name}.allowed_regions",
            message="No allowed regions; only the radius check will grant access",
            severity="warning",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors = validate_service_area(config.service_area, "service_area")

    if config.geocoding.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="geocoding.timeout_seconds",
            message=f"Timeout must be positive, got {config.geocoding.timeout_seconds}",
        ))

    if config.tokens.sweep_interval_seconds <= 0:
        errors.append(ValidationError(
            field="tokens.sweep_interval_seconds",
            message=f"Sweep interval must be positive, got {config.tokens.sweep_interval_seconds}",
        ))

    if config.rate_limit.max_requests <= 0 or config.rate_limit.window_seconds <= 0:
        errors.append(ValidationError(
            field="rate_limit",
            message="max_requests and window_seconds must be positive",
        ))

    if not config.mention_roles:
        errors.append(ValidationError(
            field="mention_roles",
            message="No mention roles configured; mentions will never resolve",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
