"""
grafctl CLI - dashboard commands.

Keep dashboards and the query files they use in step:

    grafctl dash ls
    grafctl dash inspect --uid abc123
    grafctl dash export --uid abc123 --out dashboards
    grafctl dash sync --uid abc123 --queries dashboards
    grafctl dash update-descriptions --uid abc123 --dry-run
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from grafctl.cli.context import get_config, is_debug, open_client
from grafctl.cli.errors import ExitCode, handle_errors, print_error
from grafctl.core.grafana import SearchType
from grafctl.core.reconcile import ReconcileService

console = Console()
app = typer.Typer(
    name="dash",
    help="Sync, export and inspect dashboards",
    no_args_is_help=True,
)

DEFAULT_EXPORT_DIR = "./queries"


def _dashboard_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


@app.command("ls")
def list_dashboards(ctx: typer.Context) -> None:
    """
    List every dashboard on the server.

    Examples:
        grafctl dash ls
    """
    with handle_errors(is_debug(ctx)):
        config = get_config(ctx)
        with open_client(ctx) as client:
            hits = client.search(type=SearchType.DASH_DB)

        table = Table(title=f"Dashboards ({len(hits)})")
        table.add_column("UID", style="cyan", no_wrap=True)
        table.add_column("Folder")
        table.add_column("Title", style="bold")
        table.add_column("URL", style="dim")
        for hit in hits:
            table.add_row(
                hit.uid,
                hit.folder_title or "",
                hit.title,
                _dashboard_url(config.url, hit.url),
            )
        console.print(table)


@app.command("inspect")
def inspect(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Dashboard uid"),
) -> None:
    """
    Print a dashboard document as JSON.

    Examples:
        grafctl dash inspect --uid abc123 > dashboard.json
    """
    with handle_errors(is_debug(ctx)):
        with open_client(ctx) as client:
            fetched = client.get_dashboard(uid)
        console.print(
            json.dumps(fetched.dashboard, indent=2),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )


@app.command("sync")
def sync(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Dashboard uid"),
    queries: str | None = typer.Option(
        None,
        "--queries",
        "-q",
        help="Query root directory (default: queries_dir from config)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would change without saving the dashboard",
    ),
) -> None:
    """
    Update a dashboard's targets from query files and save it.

    Each panel's description names its query file (query=<path>); the
    file's content replaces the target's SQL or PromQL.

    Examples:
        grafctl dash sync --uid abc123 --queries dashboards
        grafctl dash sync --uid abc123 --queries dashboards --dry-run
    """
    with handle_errors(is_debug(ctx)):
        queries_dir = queries or get_config(ctx).queries_dir
        if not queries_dir:
            print_error(
                "No query directory given",
                solution="grafctl dash sync --uid <uid> --queries <dir>",
            )
            raise typer.Exit(ExitCode.USER_ERROR)

        with open_client(ctx) as client:
            result = ReconcileService(client).sync_dashboard(uid, queries_dir, dry_run=dry_run)

        color = "yellow" if dry_run else "green"
        console.print(f"[{color}]{result.summary()}[/{color}]")


def export_queries(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Dashboard uid"),
    out: str | None = typer.Option(
        None,
        "--out",
        "-o",
        help=f"Directory to create the queries/ tree in (default: {DEFAULT_EXPORT_DIR})",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace query files that already exist",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would be written without touching the filesystem",
    ),
) -> None:
    """
    Write each dashboard target's query to a file.

    Files are laid out as <out>/queries/<description path>[_<refid>].sql|.promql.
    The export is refused if two panels share a query path.

    Examples:
        grafctl dash export --uid abc123 --out dashboards
        grafctl dash export --uid abc123 --out dashboards --overwrite
    """
    with handle_errors(is_debug(ctx)):
        out_dir = out or get_config(ctx).queries_dir or DEFAULT_EXPORT_DIR
        with open_client(ctx) as client:
            result = ReconcileService(client).export_dashboard_queries(
                uid, out_dir, overwrite=overwrite, dry_run=dry_run
            )

        for path in result.files_written:
            console.print(f"  [dim]{path}[/dim]", highlight=False)
        color = "yellow" if dry_run else "green"
        console.print(f"[{color}]{result.summary()}[/{color}]", highlight=False)


def update_descriptions(
    ctx: typer.Context,
    uid: str = typer.Option(..., "--uid", "-u", help="Dashboard uid"),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Regenerate descriptions that already reference a query",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show the new descriptions without saving the dashboard",
    ),
) -> None:
    """
    Give panels a query=<folder>/<dashboard>[/<row>]/<type>-<title> description.

    Panels that already reference a query are kept unless --overwrite is
    given. Row and text panels are never changed.

    Examples:
        grafctl dash update-descriptions --uid abc123 --dry-run
        grafctl dash update-descriptions --uid abc123 --overwrite
    """
    with handle_errors(is_debug(ctx)):
        with open_client(ctx) as client:
            result = ReconcileService(client).update_descriptions(
                uid, overwrite=overwrite, dry_run=dry_run
            )

        if result.changes:
            title = "Dry run: descriptions to update" if dry_run else "Descriptions updated"
            table = Table(title=title)
            table.add_column("Panel", style="bold")
            table.add_column("Row")
            table.add_column("Description", style="cyan")
            for change in result.changes:
                panel = f"{change.panel_type}:{change.panel_title}"
                table.add_row(panel, change.row_title, change.new)
            console.print(table)

        color = "yellow" if dry_run else "green"
        console.print(f"[{color}]{result.summary()}[/{color}]", highlight=False)


app.command("export")(export_queries)
app.command("export-queries", hidden=True)(export_queries)
app.command("update-descriptions")(update_descriptions)
app.command("update-panels-descriptions", hidden=True)(update_descriptions)
