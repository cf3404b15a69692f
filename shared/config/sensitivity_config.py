"""Sensitivity analysis specific configuration."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import BaseConfiguration, Environment

logger = logging.getLogger(__name__)


class SensitivityConfig(BaseConfiguration):
    """Defaults for omitted variable bias sensitivity analyses.

    Every field can be overridden with an ``OVB_``-prefixed environment
    variable, e.g. ``OVB_DEFAULT_ALPHA=0.1``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OVB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Null hypothesis defaults
    default_q: float = Field(
        default=1.0,
        description="Fraction of the estimate to be explained away (q)",
    )
    default_alpha: float = Field(
        default=0.05,
        description="Significance level used for RV_qa and confidence intervals",
    )
    default_reduce: bool = Field(
        default=True,
        description="Whether confounding is assumed to reduce the absolute estimate",
    )

    # Presentation
    report_digits: int = Field(
        default=3, description="Digits used when rounding report output"
    )
    contour_grid_points: int = Field(
        default=401, description="Grid points per axis for contour plots"
    )
    contour_limit: float = Field(
        default=0.4, description="Default upper partial R2 limit of contour plots"
    )

    # Data and logging
    data_dir: str | None = Field(
        default=None, description="Directory searched for example datasets"
    )
    log_level: str | None = Field(
        default=None,
        description="Explicit log level; derived from environment when unset",
    )

    @field_validator("default_q")
    @classmethod
    def validate_q(cls, v: float) -> float:
        if v < 0:
            raise ValueError("default_q must be greater than or equal to 0")
        return v

    @field_validator("default_alpha")
    @classmethod
    def validate_alpha(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("default_alpha must be in (0, 1]")
        return v

    @field_validator("report_digits")
    @classmethod
    def validate_digits(cls, v: int) -> int:
        if v < 0:
            raise ValueError("report_digits must be non-negative")
        return v

    @field_validator("contour_grid_points")
    @classmethod
    def validate_grid_points(cls, v: int) -> int:
        if v < 2:
            raise ValueError("contour_grid_points must be at least 2")
        return v

    @field_validator("contour_limit")
    @classmethod
    def validate_contour_limit(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError("contour_limit must be in (0, 1)")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str | None:
        if v is None:
            return v
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    def validate_configuration(self) -> list[str]:
        """Validate sensitivity specific configuration."""
        issues = super().validate_configuration()

        if self.default_alpha > 0.2:
            issues.append(
                f"default_alpha={self.default_alpha} is unusually permissive"
            )
        if self.contour_grid_points > 2001:
            issues.append("Very dense contour grids may be slow to render")
        if self.environment == Environment.PRODUCTION and self.log_level == "DEBUG":
            issues.append("DEBUG logging not recommended in production")

        return issues


_config: SensitivityConfig | None = None


def get_config() -> SensitivityConfig:
    """Return the process-wide sensitivity configuration.

    The environment is read on first use; issues found by
    ``validate_configuration`` are logged as warnings at that point.
    """
    global _config
    if _config is None:
        _config = SensitivityConfig()
        for issue in _config.validate_configuration():
            logger.warning(f"Configuration issue: {issue}")
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
