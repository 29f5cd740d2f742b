"""Settings loading for kubesh."""

from kubesh.config.detector import default_config_path
from kubesh.config.models import (
    DEFAULT_IMAGE,
    DEFAULT_PAUSE_COMMAND,
    DEFAULT_POD_NAME,
    DEFAULT_POD_NAMESPACE,
    DEFAULT_SHELL_COMMAND,
    Settings,
)
from kubesh.config.parser import load_settings, parse_settings
from kubesh.exceptions import ConfigError, ConfigParseError, ConfigValidationError

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    "DEFAULT_IMAGE",
    "DEFAULT_PAUSE_COMMAND",
    "DEFAULT_POD_NAME",
    "DEFAULT_POD_NAMESPACE",
    "DEFAULT_SHELL_COMMAND",
    "Settings",
    "default_config_path",
    "load_settings",
    "parse_settings",
]
