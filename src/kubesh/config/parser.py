"""Settings file parsing for kubesh."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from kubesh.config.detector import default_config_path
from kubesh.config.models import NODE_PLACEHOLDER, Settings
from kubesh.exceptions import ConfigParseError, ConfigValidationError


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from a YAML file.

    When no path is given, ~/.config/kubesh.yaml is used and a missing file
    means "all defaults". An explicitly given path must exist.

    Args:
        config_path: Path to the settings file, or None for the default.

    Returns:
        Validated Settings with empty fields defaulted.

    Raises:
        ConfigParseError: If the file cannot be read or is not valid YAML.
        ConfigValidationError: If a field has the wrong type or the pod name
            template lacks the {node} placeholder.
    """
    explicit = config_path is not None
    path = config_path if config_path is not None else default_config_path()

    try:
        text = path.read_text()
    except FileNotFoundError:
        if explicit:
            raise ConfigParseError(f"read config file {path}: not found") from None
        return Settings()
    except OSError as e:
        raise ConfigParseError(f"read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"parse config file {path}: {e}") from e

    return parse_settings(data)


def parse_settings(data: Any) -> Settings:
    """Build Settings from a decoded YAML document.

    Args:
        data: Decoded document. None (an empty file) yields all defaults.

    Returns:
        Validated Settings with empty fields defaulted.

    Raises:
        ConfigValidationError: If the document does not hold valid settings.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            "validate config: top level must be a mapping, "
            f"got {type(data).__name__}"
        )

    settings = Settings(
        image=_get_string(data, "image"),
        pause_command=_get_command(data, "pauseCommand"),
        shell_command=_get_command(data, "shellCommand"),
        pod_namespace=_get_string(data, "podNamespace"),
        pod_name=_get_string(data, "podName"),
    ).apply_defaults()

    if NODE_PLACEHOLDER not in settings.pod_name:
        raise ConfigValidationError(
            f"validate config: podName {settings.pod_name!r} must contain "
            f"the {NODE_PLACEHOLDER} placeholder"
        )

    return settings


def _get_string(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigValidationError(
            f"validate config: {key} must be a string, "
            f"got {type(value).__name__}"
        )
    return value.strip()


def _get_command(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigValidationError(
            f"validate config: {key} must be a list of strings, "
            f"got {type(value).__name__}"
        )

    command: list[str] = []
    for item in value:
        # [sleep, 3600] decodes the duration as an int
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ConfigValidationError(
                f"validate config: {key} items must be strings, "
                f"got {item!r}"
            )
        command.append(str(item))
    return command
