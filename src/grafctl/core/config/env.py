"""
``.env`` file support.

grafctl settings such as ``GRAFCTL_URL`` and ``GRAFCTL_API_KEY`` can live
in ``.env`` files instead of the shell:

- ``$XDG_CONFIG_HOME/grafctl/.env`` for credentials shared by every project
- ``./.env`` and ``./.env.local`` next to a query tree

Project files win over the user file. Variables already exported in the
shell are never replaced.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

PROJECT_ENV_FILES = (".env", ".env.local")


def user_env_file() -> Path:
    """Path of the per-user ``.env`` file."""
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_home) / "grafctl" / ".env"


def read_env_files(paths: Iterable[Path]) -> dict[str, str]:
    """
    Merge the variables of several ``.env`` files, later files winning.

    Missing files are skipped; keys without a value are ignored.
    """
    merged: dict[str, str] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            continue
        values = {key: value for key, value in dotenv_values(path).items() if value is not None}
        logger.debug("read %d variables from %s", len(values), path)
        merged.update(values)
    return merged


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export variables from the user and project ``.env`` files.

    Args:
        project_dir: Directory holding the project files (defaults to cwd)
        user_env_paths: Override the user file location
        project_env_paths: Override the project file locations

    Returns:
        The variables that were set in ``os.environ``
    """
    if user_env_paths is None:
        user_env_paths = [user_env_file()]
    if project_env_paths is None:
        base = project_dir if project_dir is not None else Path.cwd()
        project_env_paths = [base / name for name in PROJECT_ENV_FILES]

    layered = read_env_files([*user_env_paths, *project_env_paths])
    applied = {key: value for key, value in layered.items() if key not in os.environ}
    os.environ.update(applied)
    return applied
