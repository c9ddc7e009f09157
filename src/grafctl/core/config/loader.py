"""
Configuration loading with multi-layer merging.

Settings are read from, lowest precedence first:

    defaults < ~/.config/grafctl/config.json < ./.grafctl.json < GRAFCTL_* env

``--url`` and ``--key`` are applied on top by the command layer.

Example ``.grafctl.json`` kept next to a query tree::

    {
      "url": "https://grafana.example.com",
      "queries_dir": "dashboards",
      "backup": {"provider": "gcs", "out": "my-grafana-backups"}
    }
"""

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import GrafctlConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "grafctl"
USER_CONFIG_FILE = "config.json"
PROJECT_CONFIG_FILE = ".grafctl.json"

_TRUE_VALUES = ("1", "true", "yes", "on")

# Loaded once per process unless use_cache=False
_config_cache: GrafctlConfig | None = None


def get_xdg_config_home() -> Path:
    """Return ``$XDG_CONFIG_HOME``, or ``~/.config`` when unset."""
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Get path to ~/.config/grafctl/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / CONFIG_DIR_NAME / USER_CONFIG_FILE


def get_project_config_path(cwd: Path | None = None) -> Path:
    """Path of ``.grafctl.json`` in ``cwd`` (defaults to the working directory)."""
    return (cwd if cwd is not None else Path.cwd()) / PROJECT_CONFIG_FILE


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``; nested dicts merge key by key.

    Example:
        >>> deep_merge({"url": "a", "backup": {"out": "x"}}, {"backup": {"provider": "gcs"}})
        {'url': 'a', 'backup': {'out': 'x', 'provider': 'gcs'}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read a JSON config file.

    Returns:
        The parsed object, or None if the file is missing, unreadable, not
        valid JSON or not a JSON object
    """
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: expected a JSON object", path)
        return None
    return data


def _parse_flag(value: str) -> bool:
    return value.lower() in _TRUE_VALUES


def _parse_timeout(value: str) -> float:
    timeout = float(value)
    if timeout <= 0:
        raise ValueError("must be > 0")
    return timeout


# Environment variable -> (config field, parser)
ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "GRAFCTL_URL": ("url", str),
    "GRAFCTL_API_KEY": ("api_key", str),
    "GRAFCTL_VERBOSE": ("verbose", _parse_flag),
    "GRAFCTL_TIMEOUT": ("timeout", _parse_timeout),
    "GRAFCTL_QUERIES_DIR": ("queries_dir", str),
}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of ``config_dict`` with ``GRAFCTL_*`` variables applied.

    Empty variables are ignored, and so are values that do not parse
    (a warning is logged for those).
    """
    result = dict(config_dict)
    for name, (field, parse) in ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if not raw:
            continue
        try:
            result[field] = parse(raw)
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", name, raw, e)
    return result


def get_default_config() -> dict[str, Any]:
    """Get hardcoded default configuration."""
    return {
        "timeout": 120.0,
        "max_retries": 3,
        "verify_tls": False,
        "backup": {"provider": "local"},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> GrafctlConfig:
    """
    Load and validate the merged configuration.

    Args:
        project_dir: Directory to load .grafctl.json from (defaults to cwd)
        use_cache: Return the configuration loaded earlier in this process

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        layer = load_json_file(path)
        if layer:
            logger.debug("merging config from %s", path)
            merged = deep_merge(merged, layer)

    config = GrafctlConfig(**apply_env_overrides(merged))
    _config_cache = config
    return config


def clear_cache() -> None:
    """Forget the cached configuration."""
    global _config_cache
    _config_cache = None
