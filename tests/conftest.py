"""
Pytest configuration and shared fixtures.

Provides an isolated environment (no user config, no GRAFCTL_* variables),
sample dashboard documents, a mock Grafana client and helpers for building
query trees on disk.
"""

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from grafctl.core.config import clear_cache
from grafctl.core.grafana import DashboardWithMeta, GrafanaClient

GRAFCTL_ENV_VARS = (
    "GRAFCTL_URL",
    "GRAFCTL_API_KEY",
    "GRAFCTL_VERBOSE",
    "GRAFCTL_TIMEOUT",
    "GRAFCTL_QUERIES_DIR",
)


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """
    Keep every test away from the real user config and environment.

    XDG_CONFIG_HOME points into tmp_path, GRAFCTL_* variables are removed,
    the working directory is tmp_path and the config cache is cleared.
    The level the CLI sets on the grafctl logger is reset afterwards.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in GRAFCTL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_cache()
    package_logger = logging.getLogger("grafctl")
    level = package_logger.level
    yield
    package_logger.setLevel(level)
    clear_cache()


# ==============================================================================
# Query Tree Fixtures
# ==============================================================================


def write_query(root: Path, name: str, content: str) -> Path:
    """Write a query file under root, creating parent directories."""
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def queries_root(tmp_path):
    """Provide an empty query root directory."""
    root = tmp_path / "dashboards"
    root.mkdir()
    return root


# ==============================================================================
# Dashboard Fixtures
# ==============================================================================


def make_panel(
    title: str,
    panel_type: str = "table",
    description: str = "",
    datasource: str = "postgres",
    targets: list[dict[str, Any]] | None = None,
    y: int = 0,
    **extra: Any,
) -> dict[str, Any]:
    """Build a panel document."""
    panel: dict[str, Any] = {
        "type": panel_type,
        "title": title,
        "description": description,
        "datasource": {"type": datasource},
        "gridPos": {"x": 0, "y": y, "w": 12, "h": 8},
        "targets": targets if targets is not None else [],
    }
    panel.update(extra)
    return panel


def make_row(title: str, y: int = 0, panels: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Build a row panel, collapsed if it carries nested panels."""
    row: dict[str, Any] = {
        "type": "row",
        "title": title,
        "gridPos": {"x": 0, "y": y, "w": 24, "h": 1},
        "panels": panels if panels is not None else [],
    }
    if panels:
        row["collapsed"] = True
    return row


def make_dashboard(
    panels: list[dict[str, Any]],
    title: str = "My Dashboard",
    folder_title: str = "Business Metrics",
    folder_id: int = 7,
    uid: str = "abc123",
) -> DashboardWithMeta:
    """Build a fetched dashboard with metadata."""
    return DashboardWithMeta(
        meta={"folderTitle": folder_title, "folderId": folder_id, "folderUid": "fld1"},
        dashboard={"id": 42, "uid": uid, "title": title, "panels": panels},
    )


@pytest.fixture
def mock_client():
    """Provide a mock GrafanaClient with the real client's interface."""
    client = MagicMock(spec=GrafanaClient)
    client.url = "https://grafana.example.com"
    return client
