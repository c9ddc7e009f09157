"""
grafctl CLI - backup and import commands.
"""

import typer
from rich.console import Console

from grafctl.cli.context import get_config, is_debug, open_client
from grafctl.cli.errors import handle_errors
from grafctl.core.backup import SUPPORTED_PROVIDERS, BackupService

console = Console()


def backup(
    ctx: typer.Context,
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help=f"Where to store the archive: {' or '.join(SUPPORTED_PROVIDERS)} (default: local)",
    ),
    out: str | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Directory (local) or bucket name (gcs)",
    ),
) -> None:
    """
    Back up all datasources, folders and dashboards to a .json.gz archive.

    Examples:
        grafctl backup --out backups
        grafctl backup --provider gcs --out my-grafana-backups
    """
    with handle_errors(is_debug(ctx)):
        settings = get_config(ctx).backup
        with open_client(ctx) as client:
            location = BackupService(client).backup(
                provider or settings.provider,
                out if out is not None else settings.out,
            )
        console.print(f"[green]Backup written to {location}[/green]", highlight=False)


def import_backup(
    ctx: typer.Context,
    src: str = typer.Option(
        ...,
        "--src",
        "-s",
        help="Archive path or gs://bucket/object",
    ),
) -> None:
    """
    Restore folders, datasources and dashboards from a backup archive.

    Examples:
        grafctl import --src backups/grafana_example_com-2024-05-01-1714521600000000000.json.gz
        grafctl import --src gs://my-grafana-backups/<archive>.json.gz
    """
    with handle_errors(is_debug(ctx)):
        with open_client(ctx) as client:
            result = BackupService(client).restore(src)
        console.print(f"[green]{result.summary()}[/green]", highlight=False)
