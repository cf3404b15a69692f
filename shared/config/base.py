"""Base settings class shared by the sensitivity analysis configuration."""

from enum import Enum
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class BaseConfiguration(BaseSettings):
    """Base configuration class read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current deployment environment",
    )
    version: str = Field(default="1.0.0", description="Configuration version")

    def to_dict(self, exclude_sensitive: bool = True) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        data = self.model_dump(mode="json")

        if exclude_sensitive:
            sensitive_patterns = ["password", "token", "key", "secret"]
            return {
                k: "***REDACTED***"
                if any(pattern in k.lower() for pattern in sensitive_patterns)
                else v
                for k, v in data.items()
            }

        return data

    def validate_configuration(self) -> list[str]:
        """Validate the current configuration and return any issues.

        Subclasses extend this with their own checks.
        """
        return []

