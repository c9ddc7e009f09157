"""
grafctl CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from pydantic import ValidationError
from rich.console import Console

from grafctl import __version__
from grafctl.cli import backup, dashboard
from grafctl.cli.errors import ExitCode, print_error
from grafctl.core.config import GrafctlConfig, load_config, load_layered_env

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Create the main Typer app
app = typer.Typer(
    name="grafctl",
    help="Keep Grafana dashboards and their query files in step",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(verbose: bool, debug: bool) -> None:
    """Log to stderr: WARNING by default, INFO when verbose, DEBUG when debugging."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("grafctl").setLevel(level)


def resolve_config(
    url: str | None,
    key: str | None,
    verbose: bool,
) -> GrafctlConfig:
    """
    Load layered configuration and apply command line flags on top.

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid
    """
    config = load_config(use_cache=False)
    overrides: dict[str, object] = {}
    if url is not None:
        overrides["url"] = url
    if key is not None:
        overrides["api_key"] = key
    if verbose:
        overrides["verbose"] = True
    if not overrides:
        return config
    return GrafctlConfig.model_validate({**config.model_dump(), **overrides})


@app.callback()
def main(
    ctx: typer.Context,
    url: str | None = typer.Option(
        None,
        "--url",
        help="Grafana server URL (env: GRAFCTL_URL)",
    ),
    key: str | None = typer.Option(
        None,
        "--key",
        help="Grafana API key or service account token (env: GRAFCTL_API_KEY)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every update and skip decision",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging and tracebacks",
    ),
) -> None:
    """
    grafctl - Grafana dashboards as code.

    Panel descriptions point at query files (query=<path>). grafctl keeps
    the two in step in both directions.

    Common Workflows:
        # First export of an existing dashboard
        grafctl dash update-descriptions --uid abc123
        grafctl dash export --uid abc123 --out dashboards

        # After editing query files
        grafctl dash sync --uid abc123 --queries dashboards

        # Whole-instance backup
        grafctl backup --out backups
        grafctl import --src backups/<archive>.json.gz
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()

    try:
        config = resolve_config(url, key, verbose)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    setup_logging(config.verbose, debug)

    # Store resolved config in context for subcommands
    ctx.obj = {"debug": debug, "config": config}


app.add_typer(dashboard.app, name="dash")
app.command(name="backup")(backup.backup)
app.command(name="import")(backup.import_backup)


@app.command()
def version() -> None:
    """Show grafctl version and exit."""
    console.print(f"grafctl version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
