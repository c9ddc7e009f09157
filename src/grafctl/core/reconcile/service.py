"""
Reconciliation between dashboards and query files.

Three operations, each fetching one dashboard and working on its panel
tree in memory:

- `sync_dashboard`: query files -> panel targets, then one save
- `export_dashboard_queries`: panel targets -> query files
- `update_descriptions`: (re)generate ``query=`` descriptions, then one save

Nothing is saved until every panel has been visited, so an error part
way through leaves the server copy untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path

from grafctl.core.document import JsonDict, as_int, as_list, as_str, get_path
from grafctl.core.errors import DashboardError, DuplicateQueryPathError
from grafctl.core.grafana.client import GrafanaClient
from grafctl.core.grafana.models import DashboardSavePayload, DashboardWithMeta
from grafctl.core.panels.descriptions import (
    derive_base_path,
    is_invalid_description,
    parse_references,
    resolve_target_base,
)
from grafctl.core.panels.paths import generate_description, target_query_path
from grafctl.core.panels.targets import export_target, rewrite_target
from grafctl.core.panels.walker import (
    STRUCTURAL_PANEL_TYPES,
    flatten_panels,
    walk_panels,
)
from grafctl.core.queries.catalog import QueryCatalog
from grafctl.core.reconcile.models import (
    DescriptionChange,
    DescriptionUpdateResult,
    ExportResult,
    SyncResult,
)

QUERIES_SUBDIR = "queries"


class ReconcileService:
    """
    Keep dashboard targets and query files in step.

    Per-decision audit lines (what was updated, skipped or written, and
    why) go to the injected logger at INFO level.

    Example:
        >>> with GrafanaClient(url, key) as client:
        ...     service = ReconcileService(client)
        ...     result = service.sync_dashboard("abc123", Path("dashboards"))
        ...     print(result.summary())
    """

    def __init__(self, client: GrafanaClient, logger: logging.Logger | None = None) -> None:
        """
        Initialize the service.

        Args:
            client: Grafana API client used to fetch and save dashboards
            logger: Logger for audit lines (defaults to this module's logger)
        """
        self.client = client
        self.log = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _save(self, fetched: DashboardWithMeta) -> None:
        payload = DashboardSavePayload(
            dashboard=fetched.dashboard,
            overwrite=True,
            folder_id=as_int(fetched.meta.get("folderId")),
            folder_uid=as_str(fetched.meta.get("folderUid")),
        )
        self.client.save_dashboard(payload)

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync_dashboard(
        self,
        uid: str,
        queries_dir: str | Path,
        dry_run: bool = False,
    ) -> SyncResult:
        """
        Push query file contents into a dashboard's targets and save it.

        Args:
            uid: Dashboard uid
            queries_dir: Query root to load the catalog from
            dry_run: Log and count as usual but do not save

        Returns:
            SyncResult with per-panel and per-target counts

        Raises:
            QueryDirectoryError: If queries_dir is not a directory
            GrafanaAPIError: If the dashboard cannot be fetched or saved
        """
        catalog = QueryCatalog(queries_dir)
        loaded = catalog.load()
        self.log.info("loaded %d queries from %s", loaded, catalog.root)

        fetched = self.client.get_dashboard(uid)
        dashboard = fetched.dashboard
        result = SyncResult(
            uid=uid,
            title=as_str(dashboard.get("title")),
            queries_loaded=loaded,
            dry_run=dry_run,
        )

        for panel in flatten_panels(as_list(dashboard.get("panels"))):
            self.sync_panel(panel, catalog, result)

        if dry_run:
            self.log.info("dry run: dashboard %s not saved", uid)
            return result

        self._save(fetched)
        result.saved = True
        self.log.info("dashboard %s saved", uid)
        return result

    def sync_panel(self, panel: JsonDict, catalog: QueryCatalog, result: SyncResult) -> None:
        """Rewrite one panel's targets from the catalog, updating ``result`` counts."""
        panel_type = as_str(panel.get("type"))
        title = as_str(panel.get("title"))
        description = as_str(panel.get("description"))
        datasource = as_str(get_path(panel, "datasource", "type"))

        if not description:
            self.log.info("%s panel '%s': no description, skipping", panel_type, title)
            result.panels_skipped += 1
            return

        targets = as_list(panel.get("targets"))
        if not targets:
            self.log.info("%s panel '%s': no targets found, skipping", panel_type, title)
            result.panels_skipped += 1
            return

        references = parse_references(description)
        base_path = derive_base_path(description)
        if not base_path:
            self.log.info("%s panel '%s': no valid query path found, skipping", panel_type, title)
            result.panels_skipped += 1
            return
        updated = 0

        for index, target in enumerate(targets):
            if not isinstance(target, dict):
                continue
            ref_id = as_str(target.get("refId"))
            base = resolve_target_base(references, base_path, index)

            query = catalog.get_by_base_and_ref_id(base, ref_id)
            if query is None:
                self.log.info(
                    "%s panel '%s' target %d (refId %s): query %s not found",
                    panel_type, title, index, ref_id, base,
                )
                result.targets_missing += 1
                continue

            if not rewrite_target(target, query, datasource):
                self.log.info(
                    "%s panel '%s' target %d (refId %s): no mapping for %s query on %s datasource",
                    panel_type, title, index, ref_id, query.kind.value, datasource,
                )
                result.targets_unmapped += 1
                continue

            self.log.info(
                "%s panel '%s' target %d (refId %s): updated from %s",
                panel_type, title, index, ref_id, query.name,
            )
            updated += 1

        result.targets_updated += updated
        if updated:
            result.panels_updated += 1
        else:
            result.panels_skipped += 1

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def find_duplicate_query_paths(self, panels: list[JsonDict]) -> dict[str, list[str]]:
        """
        Return the query paths an export would write more than once.

        Each panel claims its base query path and the path of every target
        with an exportable query, so two panels sharing any ``query=``
        reference collide. Targets of one panel that resolve to the same
        path (a repeated or missing refId) collide with each other. Paths
        are compared without the file extension. Row and text panels, and
        panels without a usable description, are ignored.

        Returns:
            Mapping of query path to its claimants (``type:title``, with the
            refId added for colliding targets of one panel), only for paths
            with more than one claimant
        """
        claims: dict[str, list[str]] = {}
        for panel in panels:
            panel_type = as_str(panel.get("type"))
            if panel_type in STRUCTURAL_PANEL_TYPES:
                continue
            description = as_str(panel.get("description"))
            base_path = derive_base_path(description) if description else ""
            if not base_path:
                continue
            owner = f"{panel_type}:{as_str(panel.get('title'))}"
            references = parse_references(description)
            datasource = as_str(get_path(panel, "datasource", "type"))
            targets = as_list(panel.get("targets"))

            ref_ids_by_path: dict[str, list[str]] = {}
            for index, target in enumerate(targets):
                if not isinstance(target, dict):
                    continue
                content, _ = export_target(target, datasource)
                if not content:
                    continue
                ref_id = as_str(target.get("refId"))
                name = target_query_path(references, base_path, index, ref_id, len(targets))
                ref_ids_by_path.setdefault(name, []).append(ref_id)

            for path in dict.fromkeys([base_path, *ref_ids_by_path]):
                ref_ids = ref_ids_by_path.get(path, [])
                if len(ref_ids) > 1:
                    claims.setdefault(path, []).extend(
                        f"{owner} refId {ref_id or '(none)'}" for ref_id in ref_ids
                    )
                else:
                    claims.setdefault(path, []).append(owner)
        return {path: owners for path, owners in claims.items() if len(owners) > 1}

    def export_dashboard_queries(
        self,
        uid: str,
        out_dir: str | Path,
        overwrite: bool = False,
        dry_run: bool = False,
    ) -> ExportResult:
        """
        Write every target's query text to ``<out_dir>/queries/<path><ext>``.

        All panels are checked for clashing query paths before anything is
        written; a clash aborts the export with no files written.

        Args:
            uid: Dashboard uid
            out_dir: Directory under which the ``queries`` tree is created
            overwrite: Replace files that already exist
            dry_run: Log and count as usual but do not touch the filesystem

        Returns:
            ExportResult listing written paths

        Raises:
            DuplicateQueryPathError: If two panels or targets resolve to the same path
            GrafanaAPIError: If the dashboard cannot be fetched
            OSError: If a directory or file cannot be written
        """
        fetched = self.client.get_dashboard(uid)
        dashboard = fetched.dashboard
        panels = flatten_panels(as_list(dashboard.get("panels")))

        duplicates = self.find_duplicate_query_paths(panels)
        if duplicates:
            raise DuplicateQueryPathError(duplicates)

        queries_root = Path(out_dir) / QUERIES_SUBDIR
        if not dry_run:
            queries_root.mkdir(parents=True, exist_ok=True)

        result = ExportResult(
            uid=uid,
            title=as_str(dashboard.get("title")),
            output_dir=str(queries_root),
            dry_run=dry_run,
        )
        for panel in panels:
            self.export_panel(panel, queries_root, result, overwrite=overwrite, dry_run=dry_run)
        return result

    def export_panel(
        self,
        panel: JsonDict,
        queries_root: Path,
        result: ExportResult,
        overwrite: bool = False,
        dry_run: bool = False,
    ) -> None:
        """Write one panel's targets under ``queries_root``, updating ``result``."""
        panel_type = as_str(panel.get("type"))
        title = as_str(panel.get("title"))
        if panel_type in STRUCTURAL_PANEL_TYPES:
            return

        description = as_str(panel.get("description"))
        base_path = derive_base_path(description) if description else ""
        if not base_path:
            self.log.info("%s panel '%s': no description, skipping", panel_type, title)
            result.panels_skipped += 1
            return

        targets = as_list(panel.get("targets"))
        if not targets:
            self.log.info("%s panel '%s': no targets found, skipping", panel_type, title)
            result.panels_skipped += 1
            return

        references = parse_references(description)
        datasource = as_str(get_path(panel, "datasource", "type"))

        for index, target in enumerate(targets):
            if not isinstance(target, dict):
                continue
            ref_id = as_str(target.get("refId"))
            content, kind = export_target(target, datasource)
            if not content:
                self.log.info(
                    "%s panel '%s' target %d (refId %s): empty query, skipping",
                    panel_type, title, index, ref_id,
                )
                result.targets_empty += 1
                continue

            name = target_query_path(references, base_path, index, ref_id, len(targets))
            path = queries_root / f"{name}{kind.extension}"

            if not overwrite and path.exists():
                self.log.info(
                    "%s panel '%s' target %d (refId %s): %s exists, skipping",
                    panel_type, title, index, ref_id, path,
                )
                result.files_existing += 1
                continue

            if not dry_run:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
            self.log.info(
                "%s panel '%s' target %d (refId %s): wrote %s",
                panel_type, title, index, ref_id, path,
            )
            result.files_written.append(str(path))

    # ------------------------------------------------------------------
    # Descriptions
    # ------------------------------------------------------------------

    def update_descriptions(
        self,
        uid: str,
        overwrite: bool = False,
        dry_run: bool = False,
    ) -> DescriptionUpdateResult:
        """
        Give every query panel a canonical ``query=`` description.

        Panels whose description already references a query are left alone
        unless ``overwrite`` is set. The dashboard is saved only if a
        description changed.

        Raises:
            DashboardError: If the dashboard has no title
            GrafanaAPIError: If the dashboard cannot be fetched or saved
        """
        fetched = self.client.get_dashboard(uid)
        dashboard = fetched.dashboard
        dashboard_title = as_str(dashboard.get("title"))
        if not dashboard_title:
            raise DashboardError(f"dashboard {uid} has no title")
        folder_title = as_str(fetched.meta.get("folderTitle"))

        result = DescriptionUpdateResult(uid=uid, title=dashboard_title, dry_run=dry_run)

        for entry in walk_panels(as_list(dashboard.get("panels"))):
            if entry.is_structural:
                result.skipped += 1
                continue

            current = as_str(entry.panel.get("description"))
            if not overwrite and not is_invalid_description(current):
                self.log.info(
                    "%s panel '%s': description is valid, skipping", entry.type, entry.title
                )
                result.skipped += 1
                continue

            generated = generate_description(
                folder_title, dashboard_title, entry.row_title, entry.type, entry.title
            )
            if generated == current:
                self.log.info("%s panel '%s': description unchanged", entry.type, entry.title)
                result.skipped += 1
                continue

            self.log.info(
                "%s panel '%s': description '%s' -> '%s'",
                entry.type, entry.title, current, generated,
            )
            result.changes.append(
                DescriptionChange(
                    panel_type=entry.type,
                    panel_title=entry.title,
                    row_title=entry.row_title,
                    old=current,
                    new=generated,
                )
            )
            if not dry_run:
                entry.panel["description"] = generated
            result.updated += 1

        if dry_run or result.updated == 0:
            return result

        self._save(fetched)
        result.saved = True
        self.log.info("dashboard %s saved with %d new descriptions", uid, result.updated)
        return result
