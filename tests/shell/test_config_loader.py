"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
import tempfile
from unittest.mock import Mock, patch

import pytest

from src.shell.config_loader import (
    load_config,
    load_config_from_dict,
    load_config_from_env,
    _resolve_value,
    _parse_service_area,
    _parse_geocoding,
    _parse_firestore,
    _get_secret_manager_client,
)
from src.core.config import Config
from src.core.geo import Coordinate


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        """Plain strings without placeholders are returned unchanged."""
        assert _resolve_value("league") == "league"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TEST_DB": "league-db"}):
            assert _resolve_value("${TEST_DB}") == "league-db"

    def test_returns_placeholder_if_env_var_not_set(self):
        """Returns original placeholder if env var not set."""
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"

    def test_uses_secret_client_when_provided(self):
        """Uses secret client for resolution when provided."""
        mock_client = Mock()
        mock_client.resolve.return_value = "secret_value"

        assert _resolve_value("${secret:db-name}", mock_client) == "secret_value"
        mock_client.resolve.assert_called_once_with("${secret:db-name}")

    def test_ignores_secret_placeholder_without_client(self):
        """Secret placeholders are left alone without a client."""
        assert _resolve_value("${secret:db-name}") == "${secret:db-name}"


class TestGetSecretManagerClient:
    """Tests for _get_secret_manager_client function."""

    def test_none_without_project(self):
        """No project means no client (local development)."""
        with patch.dict(os.environ, {}, clear=True):
            assert _get_secret_manager_client() is None

    def test_created_with_project(self):
        """GCP_PROJECT enables Secret Manager."""
        with patch.dict(os.environ, {"GCP_PROJECT": "league-prod"}, clear=True):
            client = _get_secret_manager_client()

        assert client is not None
        assert client.config.project_id == "league-prod"


class TestParseServiceArea:
    """Tests for _parse_service_area function."""

    def test_defaults(self):
        """Empty data gives the Salina defaults."""
        result = _parse_service_area({})

        assert result.center == Coordinate(38.8403, -97.6114)
        assert result.radius_miles == 50.0
        assert result.allowed_regions == ("KS", "Kansas")

    def test_custom_values(self):
        """Values are converted to the right types."""
        result = _parse_service_area({
            "name": "Topeka, Kansas",
            "center": {"latitude": "39.0473", "longitude": "-95.6752"},
            "radius_miles": "30",
            "allowed_regions": "KS",
        })

        assert result.name == "Topeka, Kansas"
        assert result.center == Coordinate(39.0473, -95.6752)
        assert result.radius_miles == 30.0
        assert result.allowed_regions == ("KS",)


class TestParseGeocoding:
    """Tests for _parse_geocoding function."""

    def test_overrides(self):
        """Timeout and user agent can be overridden."""
        result = _parse_geocoding({"timeout_seconds": "5", "user_agent": "Test"})

        assert result.timeout_seconds == 5
        assert result.user_agent == "Test"
        assert result.zip_cache_ttl_seconds == 86400


class TestParseFirestore:
    """Tests for _parse_firestore function."""

    def test_unresolved_database_placeholder_becomes_default(self):
        """An unset ${VAR} database falls back to the default database."""
        with patch.dict(os.environ, {}, clear=True):
            result = _parse_firestore({"database": "${FIRESTORE_DATABASE}"})

        assert result.database is None

    def test_resolves_database_from_env(self):
        """Database placeholders are expanded."""
        with patch.dict(os.environ, {"FIRESTORE_DATABASE": "league"}):
            result = _parse_firestore({"database": "${FIRESTORE_DATABASE}"})

        assert result.database == "league"

    def test_collection_names(self):
        """Collection names can be overridden."""
        result = _parse_firestore({"messages_collection": "posts"})

        assert result.messages_collection == "posts"
        assert result.replies_collection == "coach_message_replies"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_loads_minimal_config(self):
        """Loads config with minimal data."""
        with patch('src.shell.config_loader._get_secret_manager_client', return_value=None):
            result = load_config_from_dict({})

        assert isinstance(result, Config)
        assert result.service_area.radius_miles == 50.0
        assert result.mention_roles == ("coach", "admin")

    def test_loads_full_config(self):
        """Loads complete configuration."""
        data = {
            "service_area": {"radius_miles": 75, "allowed_regions": ["KS"]},
            "geocoding": {"timeout_seconds": 3},
            "firestore": {"database": "league"},
            "tokens": {"sweep_interval_seconds": 60},
            "rate_limit": {"max_requests": 100, "window_seconds": 30},
            "mention_roles": ["coach"],
            "allowed_origins": ["https://example.org"],
        }

        with patch('src.shell.config_loader._get_secret_manager_client', return_value=None):
            result = load_config_from_dict(data)

        assert result.service_area.radius_miles == 75.0
        assert result.geocoding.timeout_seconds == 3
        assert result.firestore.database == "league"
        assert result.tokens.sweep_interval_seconds == 60
        assert result.rate_limit.max_requests == 100
        assert result.mention_roles == ("coach",)
        assert result.allowed_origins == ("https://example.org",)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_from_yaml_file(self):
        """Loads configuration from YAML file."""
        yaml_content = """
service_area:
  name: Salina, Kansas
  center:
    latitude: 38.8403
    longitude: -97.6114
  radius_miles: 60
mention_roles: [coach, admin, director]
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            with patch('src.shell.config_loader._get_secret_manager_client', return_value=None):
                result = load_config(temp_path)

            assert result.service_area.radius_miles == 60.0
            assert result.mention_roles == ("coach", "admin", "director")
        finally:
            os.unlink(temp_path)

    def test_returns_default_config_when_file_not_found(self):
        """Missing files give the default config."""
        result = load_config("/nonexistent/config.yaml")

        assert result == Config()

    def test_returns_default_config_for_empty_file(self):
        """Empty files give the default config."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            temp_path = f.name

        try:
            assert load_config(temp_path) == Config()
        finally:
            os.unlink(temp_path)

    def test_invalid_config_raises(self):
        """Critical validation errors raise ValueError."""
        yaml_content = "service_area:\n  radius_miles: -5\n"
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            with patch('src.shell.config_loader._get_secret_manager_client', return_value=None):
                with pytest.raises(ValueError, match="radius_miles"):
                    load_config(temp_path)
        finally:
            os.unlink(temp_path)


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_reads_environment(self):
        """Service area and origins come from the environment."""
        env = {
            "SERVICE_CENTER_LAT": "39.0",
            "SERVICE_CENTER_LON": "-96.0",
            "SERVICE_RADIUS_MILES": "25",
            "SERVICE_AREA_NAME": "Manhattan, Kansas",
            "ALLOWED_REGIONS": "KS, Kansas",
            "ALLOWED_ORIGINS": "https://a.example, https://b.example",
        }
        with patch.dict(os.environ, env, clear=True):
            result = load_config_from_env()

        assert result.service_area.center == Coordinate(39.0, -96.0)
        assert result.service_area.radius_miles == 25.0
        assert result.service_area.name == "Manhattan, Kansas"
        assert result.service_area.allowed_regions == ("KS", "Kansas")
        assert result.allowed_origins == ("https://a.example", "https://b.example")

    def test_defaults_without_environment(self):
        """Unset variables fall back to defaults."""
        with patch.dict(os.environ, {}, clear=True):
            result = load_config_from_env()

        assert result.service_area.radius_miles == 50.0
        assert result.firestore.database is None

    def test_non_positive_radius_raises(self):
        """A negative radius from the environment is rejected."""
        env = {"SERVICE_CENTER_LAT": "38.8403", "SERVICE_RADIUS_MILES": "-5"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValueError, match="radius_miles"):
                load_config_from_env()

    def test_out_of_range_center_raises(self):
        """Center coordinates from the environment are range-checked."""
        with patch.dict(os.environ, {"SERVICE_CENTER_LAT": "95"}, clear=True):
            with pytest.raises(ValueError, match="Latitude"):
                load_config_from_env()
