"""Configuration management for the sensitivity analysis library."""

from .base import BaseConfiguration, Environment
from .sensitivity_config import SensitivityConfig, get_config, reset_config

__all__ = [
    "BaseConfiguration",
    "Environment",
    "SensitivityConfig",
    "get_config",
    "reset_config",
]
