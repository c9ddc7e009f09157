"""
Standardized error handling and exit codes for the grafctl CLI.

Commands run their work inside `handle_errors`, which turns grafctl
exceptions into a readable message and an exit code.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum

import typer
from rich.console import Console

from grafctl.core.errors import (
    ConfigError,
    DuplicateQueryPathError,
    GrafanaAPIError,
    GrafctlError,
    QueryDirectoryError,
)

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for grafctl operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Server, filesystem or archive failure."""

    USER_ERROR = 2
    """Configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "missing url",
        ...     reason="grafctl needs a Grafana server to talk to",
        ...     solution="export GRAFCTL_URL=https://grafana.example.com",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(f"[dim]{reason}[/dim]", highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_config_error(error: ConfigError) -> None:
    """Print error when server settings are missing."""
    print_error(
        str(error),
        reason="grafctl needs a Grafana url and an API key for this command",
        solution="grafctl --url https://grafana.example.com --key <api key> ...",
    )


def print_query_directory_error(error: QueryDirectoryError) -> None:
    """Print error when the query root does not exist."""
    print_error(
        str(error),
        solution="grafctl dash sync --uid <uid> --queries <existing directory>",
    )


def print_duplicate_query_paths_error(error: DuplicateQueryPathError) -> None:
    """Print error when export found panels sharing a query path."""
    print_error(
        f"{len(error.duplicates)} query paths are used by more than one panel, nothing exported",
        reason=str(error),
        solution="grafctl dash update-descriptions --uid <uid> --overwrite",
    )


def print_api_error(error: GrafanaAPIError) -> None:
    """Print error when the Grafana API call failed."""
    reason = None
    if error.status_code in (401, 403):
        reason = "The API key was rejected or lacks permission"
    elif error.status_code == 404:
        reason = "The requested object does not exist on the server"
    print_error(str(error), reason=reason)


@contextmanager
def handle_errors(debug: bool = False) -> Iterator[None]:
    """
    Map exceptions raised by a command body to messages and exit codes.

    Unexpected exceptions are re-raised with their traceback under
    ``--debug``; otherwise they are reported like any other error.

    Example:
        >>> with handle_errors(debug):
        ...     service.sync_dashboard(uid, queries)
    """
    try:
        yield
    except typer.Exit:
        raise
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(ExitCode.SIGINT)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)
    except QueryDirectoryError as e:
        print_query_directory_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)
    except DuplicateQueryPathError as e:
        print_duplicate_query_paths_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except GrafanaAPIError as e:
        print_api_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except GrafctlError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except OSError as e:
        print_error(str(e), reason="A file or directory could not be read or written")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        if debug:
            raise
        print_error(f"Unexpected error: {e}", solution="rerun with --debug for a traceback")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
