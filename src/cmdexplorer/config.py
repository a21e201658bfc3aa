"""Configuration management with XDG paths and precedence resolution.

This module handles all persistent configuration for cmdexplorer:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.cmdexplorer/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- A single :class:`~cmdexplorer.models.ExplorerConfig`
  JSON file in the config directory.
* **Project config** -- ``./cmdexplorer.json`` in the working directory.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  overrides, environment variables, project config and user config into the
  effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from cmdexplorer.exceptions import ConfigError
from cmdexplorer.models import ExplorerConfig

_APP_NAME = "cmdexplorer"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "cmdexplorer.json"

_ENV_OVERRIDES: dict[str, str] = {
    "CMDEXPLORER_PROG_NAME": "prog_name",
    "CMDEXPLORER_DUPLICATE_INDEX": "duplicate_index",
    "CMDEXPLORER_ENTRY_POINT_GROUP": "entry_point_group",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/cmdexplorer/`` (default
    ``~/.config/cmdexplorer/``). On macOS/Windows: ``~/.cmdexplorer/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/cmdexplorer/`` (default
    ``~/.local/share/cmdexplorer/``). On macOS/Windows:
    ``~/.cmdexplorer/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_user_config() -> dict[str, Any]:
    """Load the raw user configuration from the config directory.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json(get_config_dir() / _CONFIG_FILENAME, "user config") or {}


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./cmdexplorer.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


# --- Precedence resolution ---


def resolve_config(**overrides: Any) -> ExplorerConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Keyword *overrides* whose value is not ``None``
        2. Environment variables (``CMDEXPLORER_PROG_NAME``,
           ``CMDEXPLORER_DUPLICATE_INDEX``, ``CMDEXPLORER_ENTRY_POINT_GROUP``)
        3. Project config (``./cmdexplorer.json``)
        4. User config (``~/.config/cmdexplorer/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is malformed or the merged values fail
            validation (for example an unknown ``duplicate_index`` policy).
    """
    merged: dict[str, Any] = {}
    merged.update(load_user_config())
    merged.update(load_project_config() or {})

    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[field_name] = value

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ExplorerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
