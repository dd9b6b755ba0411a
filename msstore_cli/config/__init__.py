"""Configuration management for the Microsoft Store CLI."""

from msstore_cli.config.loader import (
    default_config_path,
    load_config,
    reset_credentials,
    save_config,
)
from msstore_cli.config.models import (
    CLIConfig,
    EndpointsConfig,
    StoreCredentials,
    TimeoutsConfig,
)

__all__ = [
    "CLIConfig",
    "StoreCredentials",
    "EndpointsConfig",
    "TimeoutsConfig",
    "default_config_path",
    "load_config",
    "save_config",
    "reset_credentials",
]
