"""
Access to the state the root callback stores on the Typer context.
"""

from __future__ import annotations

import typer

from grafctl.core.config import GrafctlConfig
from grafctl.core.grafana import GrafanaClient


def get_config(ctx: typer.Context) -> GrafctlConfig:
    """Configuration resolved by the root callback (defaults if absent)."""
    obj = ctx.obj or {}
    config = obj.get("config")
    return config if config is not None else GrafctlConfig()


def is_debug(ctx: typer.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("debug", False))


def open_client(ctx: typer.Context) -> GrafanaClient:
    """
    Create a Grafana client from the resolved configuration.

    Raises:
        ConfigError: If the url or api key is missing
    """
    return GrafanaClient.from_config(get_config(ctx))
