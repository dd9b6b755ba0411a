"""Settings file loading utilities.

The settings file lives at ~/.msstore/settings.yml unless the
MSSTORE_CONFIG_FILE environment variable points elsewhere. A missing file
is not an error: the CLI starts from defaults and `reconfigure` writes it.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from msstore_cli.config.models import CLIConfig, StoreCredentials
from msstore_cli.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "MSSTORE_CONFIG_FILE"


def default_config_path() -> Path:
    """Return the settings file path, honouring MSSTORE_CONFIG_FILE."""
    override = os.environ.get(CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".msstore" / "settings.yml"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML settings file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as dictionary (empty for a missing or empty file)

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}", details=str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}",
            details=str(e),
            fix_hint="Check YAML syntax at the indicated line, or run 'msstore reconfigure'",
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid settings in {path}",
            details="Expected a mapping at the top level",
        )
    return data


def load_config(path: Path | None = None) -> CLIConfig:
    """Load CLI settings.

    Args:
        path: Explicit settings file (defaults to default_config_path())

    Returns:
        Validated CLIConfig instance

    Raises:
        ConfigurationError: If the file is invalid
    """
    config_path = path or default_config_path()
    data = load_yaml(config_path)

    try:
        return CLIConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {config_path}",
            details=str(e),
            fix_hint="Run 'msstore reconfigure' to write valid settings",
        ) from e


def environment_values() -> dict[tuple[str, ...], str]:
    """Settings supplied through MSSTORE_* variables, keyed by field path.

    Example: MSSTORE_CREDENTIALS__CLIENT_SECRET -> ("credentials", "client_secret")
    """
    prefix = str(CLIConfig.model_config.get("env_prefix", "")).upper()
    delimiter = str(CLIConfig.model_config.get("env_nested_delimiter", "__")).upper()
    values: dict[tuple[str, ...], str] = {}
    for name, value in os.environ.items():
        upper = name.upper()
        if not upper.startswith(prefix) or upper == CONFIG_FILE_ENV:
            continue
        values[tuple(upper[len(prefix):].lower().split(delimiter))] = value
    return values


def _drop_environment_values(data: dict[str, Any], file_data: dict[str, Any]) -> None:
    """Keep values that came from the environment out of the settings file.

    A value equal to its MSSTORE_* variable is replaced by what the file
    already holds, or removed when the file has nothing for it.
    """
    for keys, env_value in environment_values().items():
        parent: Any = data
        stored: Any = file_data
        for key in keys[:-1]:
            parent = parent.get(key) if isinstance(parent, dict) else None
            stored = stored.get(key) if isinstance(stored, dict) else None
        if not isinstance(parent, dict) or keys[-1] not in parent:
            continue
        # GUIDs are normalised to lower case on load
        if str(parent[keys[-1]]).lower() != env_value.lower():
            continue
        if isinstance(stored, dict) and keys[-1] in stored:
            parent[keys[-1]] = stored[keys[-1]]
        else:
            del parent[keys[-1]]


def _stored_settings(path: Path) -> dict[str, Any]:
    try:
        return load_yaml(path)
    except ConfigurationError as e:
        # The broken file is about to be replaced
        logger.debug("Ignoring unreadable settings in %s: %s", path, e)
        return {}


def save_config(config: CLIConfig, path: Path | None = None) -> Path:
    """Write CLI settings to disk, readable by the current user only.

    Returns:
        Path the settings were written to

    Raises:
        ConfigurationError: If the file cannot be written
    """
    config_path = path or default_config_path()
    data = config.model_dump(mode="json", exclude_none=True)
    if environment_values():
        _drop_environment_values(data, _stored_settings(config_path))

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
        os.chmod(config_path, 0o600)
    except OSError as e:
        raise ConfigurationError(f"Failed to write {config_path}", details=str(e)) from e

    return config_path


def reset_credentials(path: Path | None = None) -> CLIConfig:
    """Clear stored Store credentials, keeping the other settings."""
    config = load_config(path)
    config.credentials = StoreCredentials()
    save_config(config, path)
    return config
