"""Unit tests for configuration models and validation."""

from src.core.config import (
    Config,
    GeocodingConfig,
    RateLimitConfig,
    TokenConfig,
    validate_config,
    validate_coordinates,
)
from src.core.geo import Coordinate, ServiceAreaConfig


class TestDefaults:
    """Tests for default configuration values."""

    def test_service_area(self):
        """Defaults to 50 miles around Salina, Kansas."""
        config = Config()
        assert config.service_area.center == Coordinate(38.8403, -97.6114)
        assert config.service_area.radius_miles == 50.0
        assert config.service_area.allowed_regions == ("KS", "Kansas")

    def test_geocoding(self):
        """Zip lookups are cached for a day."""
        assert GeocodingConfig().zip_cache_ttl_seconds == 86400

    def test_mention_roles(self):
        """Coaches and admins can be mentioned."""
        assert Config().mention_roles == ("coach", "admin")


class TestValidateCoordinates:
    """Tests for validate_coordinates()."""

    def test_valid(self):
        """In-range coordinates produce no errors."""
        assert validate_coordinates(38.8, -97.6, "center") == []

    def test_out_of_range(self):
        """Both axes are checked."""
        errors = validate_coordinates(91, -181, "center")
        assert len(errors) == 2
        assert all(e.field == "center" for e in errors)


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_default_config_valid(self):
        """The default config has no errors or warnings."""
        result = validate_config(Config())
        assert result.valid is True
        assert result.errors == []

    def test_non_positive_radius(self):
        """A zero radius is a critical error."""
        config = Config(service_area=ServiceAreaConfig(radius_miles=0))
        result = validate_config(config)

        assert result.valid is False
        assert result.critical_errors[0].field == "service_area.radius_miles"

    def test_no_regions_is_warning(self):
        """Missing regions only warn."""
        config = Config(service_area=ServiceAreaConfig(allowed_regions=()))
        result = validate_config(config)

        assert result.valid is True
        assert [w.field for w in result.warnings] == ["service_area.allowed_regions"]

    def test_bad_token_settings(self):
        """The token sweep interval must be positive."""
        config = Config(tokens=TokenConfig(sweep_interval_seconds=-1))
        fields = {e.field for e in validate_config(config).critical_errors}
        assert fields == {"tokens.sweep_interval_seconds"}

    def test_bad_rate_limit(self):
        """Rate limit values must be positive."""
        config = Config(rate_limit=RateLimitConfig(max_requests=0))
        assert validate_config(config).valid is False

    def test_no_mention_roles_is_warning(self):
        """Empty mention roles only warn."""
        result = validate_config(Config(mention_roles=()))
        assert result.valid is True
        assert [w.field for w in result.warnings] == ["mention_roles"]
