"""
grafctl settings: server connection, query root and backup destination.

Merged from defaults, user and project JSON files, ``.env`` files and
``GRAFCTL_*`` variables; see `load_config`.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import BackupConfig, GrafctlConfig

__all__ = [
    "BackupConfig",
    "GrafctlConfig",
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
