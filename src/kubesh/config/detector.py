"""Settings file detection for kubesh."""

from __future__ import annotations

from pathlib import Path


def default_config_path(home: Path | None = None) -> Path:
    """Return the settings path used when none is given.

    Args:
        home: Home directory. Defaults to the current user's home.

    Returns:
        Path to ~/.config/kubesh.yaml.
    """
    home = home if home is not None else Path.home()
    return home / ".config" / "kubesh.yaml"
