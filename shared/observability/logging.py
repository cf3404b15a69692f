"""Logging setup for the sensitivity analysis library."""

import logging
import sys

from shared.config import Environment, SensitivityConfig, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_log_level(config: SensitivityConfig) -> int:
    """Pick the log level from an explicit setting or the environment."""
    if config.log_level is not None:
        return logging.getLevelName(config.log_level)

    if config.environment == Environment.DEVELOPMENT:
        return logging.DEBUG
    return logging.INFO


def setup_logging(config: SensitivityConfig | None = None) -> None:
    """Set up logging configuration."""
    if config is None:
        config = get_config()

    log_level = resolve_log_level(config)

    logging.basicConfig(
        level=log_level, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Third-party libraries are noisy at DEBUG
    logging.getLogger("matplotlib").setLevel(
        logging.INFO if log_level <= logging.INFO else log_level
    )
    logging.getLogger("ovb_sensitivity").setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
