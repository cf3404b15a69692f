"""Tests for the pydantic-settings configuration layer."""

import logging

import pytest
from pydantic import ValidationError

from shared.config import Environment, SensitivityConfig, get_config, reset_config


class TestSensitivityConfig:
    """Test cases for SensitivityConfig."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = SensitivityConfig()

        assert config.default_q == 1.0
        assert config.default_alpha == 0.05
        assert config.default_reduce is True
        assert config.report_digits == 3
        assert config.contour_grid_points == 401
        assert config.contour_limit == 0.4
        assert config.data_dir is None
        assert config.log_level is None
        assert config.environment == Environment.DEVELOPMENT

    def test_environment_overrides(self, monkeypatch):
        """Test that OVB_ prefixed variables override defaults."""
        monkeypatch.setenv("OVB_DEFAULT_ALPHA", "0.1")
        monkeypatch.setenv("OVB_DEFAULT_REDUCE", "false")
        monkeypatch.setenv("OVB_REPORT_DIGITS", "5")
        monkeypatch.setenv("OVB_ENVIRONMENT", "production")
        monkeypatch.setenv("OVB_LOG_LEVEL", "warning")

        config = SensitivityConfig()

        assert config.default_alpha == 0.1
        assert config.default_reduce is False
        assert config.report_digits == 5
        assert config.environment == Environment.PRODUCTION
        assert config.log_level == "WARNING"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("default_q", -0.5),
            ("default_alpha", 0.0),
            ("default_alpha", 1.5),
            ("report_digits", -1),
            ("contour_grid_points", 1),
            ("contour_limit", 1.0),
            ("log_level", "VERBOSE"),
        ],
    )
    def test_validators(self, field, value):
        """Test that invalid values are rejected."""
        with pytest.raises(ValidationError):
            SensitivityConfig(**{field: value})

    def test_validate_configuration(self):
        """Test the human-readable configuration checks."""
        assert SensitivityConfig().validate_configuration() == []

        config = SensitivityConfig(
            default_alpha=0.5,
            contour_grid_points=5000,
            environment=Environment.PRODUCTION,
            log_level="DEBUG",
        )
        issues = config.validate_configuration()

        assert len(issues) == 3
        assert any("default_alpha" in issue for issue in issues)
        assert any("DEBUG" in issue for issue in issues)

    def test_to_dict(self):
        """Test the dictionary export."""
        data = SensitivityConfig(data_dir="/tmp/data").to_dict()

        assert data["default_q"] == 1.0
        assert data["data_dir"] == "/tmp/data"
        assert data["environment"] == "development"


class TestGlobalConfig:
    """Test cases for the cached process-wide configuration."""

    def test_get_config_is_cached(self):
        """Test that repeated calls share one instance."""
        assert get_config() is get_config()

    def test_reset_config_rereads_environment(self, monkeypatch):
        """Test that reset_config picks up new environment variables."""
        assert get_config().default_q == 1.0

        monkeypatch.setenv("OVB_DEFAULT_Q", "0.25")
        assert get_config().default_q == 1.0

        reset_config()
        assert get_config().default_q == 0.25

    def test_configuration_issues_logged_on_load(self, monkeypatch, caplog):
        """Test that validate_configuration issues are logged when loading."""
        caplog.set_level(logging.WARNING, logger="shared.config.sensitivity_config")
        monkeypatch.setenv("OVB_DEFAULT_ALPHA", "0.5")

        get_config()

        assert "Configuration issue: default_alpha=0.5" in caplog.text

    def test_valid_configuration_loads_quietly(self, caplog):
        """Test that default settings log no issues."""
        caplog.set_level(logging.WARNING, logger="shared.config.sensitivity_config")
        get_config()
        assert "Configuration issue" not in caplog.text
