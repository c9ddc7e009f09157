"""
Full backup and restore of a Grafana instance.

A backup is one gzipped JSON document holding every datasource, folder
and dashboard. Restore writes them back in dependency order: folders
first (dashboards reference them by id), then datasources, then
dashboards.
"""

from __future__ import annotations

import gzip
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import ValidationError

from grafctl.core.backup.models import GrafanaBackup, RestoreResult
from grafctl.core.backup.storage import (
    GCS_SCHEME,
    BackupStore,
    GCSBackupStore,
    LocalBackupStore,
    open_backup_store,
    parse_gcs_url,
)
from grafctl.core.document import as_str, set_path
from grafctl.core.errors import BackupError, GrafanaAPIError
from grafctl.core.grafana.client import GrafanaClient
from grafctl.core.grafana.models import DashboardSavePayload, Datasource, Folder, SearchType

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".json.gz"
GENERAL_FOLDER_ID = 0


class BackupService:
    """
    Back up and restore datasources, folders and dashboards.

    Example:
        >>> with GrafanaClient(url, key) as client:
        ...     location = BackupService(client).backup("local", "backups")
    """

    def __init__(
        self,
        client: GrafanaClient,
        clock: Callable[[], int] = time.time_ns,
        store_factory: Callable[[str, str | None], BackupStore] = open_backup_store,
    ) -> None:
        """
        Initialize the service.

        Args:
            client: Grafana API client
            clock: Returns the current time in nanoseconds since the epoch
            store_factory: Builds the archive store from provider and
                destination
        """
        self.client = client
        self.clock = clock
        self.store_factory = store_factory

    def archive_name(self) -> str:
        """
        Name for a new archive: ``<host>-<YYYY-MM-DD>-<unix nanos>.json.gz``.

        Dots in the host are replaced by underscores; the date is UTC.
        """
        nanos = self.clock()
        day = datetime.fromtimestamp(nanos / 1e9, tz=timezone.utc).strftime("%Y-%m-%d")
        host = urlsplit(self.client.url).netloc.replace(".", "_")
        return f"{host}-{day}-{nanos}{ARCHIVE_SUFFIX}"

    def collect(self) -> GrafanaBackup:
        """Fetch every datasource, folder and dashboard from the server."""
        datasources = self.client.list_datasources()
        logger.info("backing up %d datasources", len(datasources))
        folders = self.client.list_folders()
        logger.info("backing up %d folders", len(folders))

        dashboards = []
        for hit in self.client.search(type=SearchType.DASH_DB):
            logger.info("backing up dashboard %s (%s)", hit.title, hit.uid)
            dashboards.append(self.client.get_dashboard(hit.uid))

        return GrafanaBackup(datasources=datasources, folders=folders, dashboards=dashboards)

    def backup(self, provider: str, destination: str | None = None) -> str:
        """
        Write a full backup archive.

        Args:
            provider: ``local`` or ``gcs``
            destination: Directory (local) or bucket name (gcs)

        Returns:
            Location of the archive: a file path or ``gs://bucket/name``

        Raises:
            BackupError: For an unsupported provider or an unusable
                destination, raised before anything is fetched; or if the
                archive cannot be written
            GrafanaAPIError: If the server cannot be read
        """
        store = self.store_factory(provider, destination)
        store.check()
        snapshot = self.collect()
        payload = snapshot.model_dump_json(by_alias=True).encode("utf-8")
        data = gzip.compress(payload, compresslevel=9)
        location = store.write(self.archive_name(), data)
        logger.info("backup written to %s (%d bytes)", location, len(data))
        return location

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def read_archive(self, source: str) -> GrafanaBackup:
        """
        Load an archive from a local path or a ``gs://bucket/object`` url.

        Raises:
            BackupError: If the url is malformed or the archive is unreadable
        """
        if source.startswith(GCS_SCHEME):
            bucket, name = parse_gcs_url(source)
            data = GCSBackupStore(bucket).read(name)
        else:
            path = Path(source)
            data = LocalBackupStore(path.parent).read(path.name)

        try:
            payload = gzip.decompress(data)
            return GrafanaBackup.model_validate_json(payload)
        except (OSError, EOFError) as e:
            raise BackupError(f"{source} is not a gzip archive: {e}") from e
        except ValidationError as e:
            raise BackupError(f"{source} is not a valid backup: {e}") from e

    def restore_folder(self, folder: Folder) -> Folder:
        """Update the folder with the same uid, or create it."""
        try:
            self.client.get_folder(folder.uid)
        except GrafanaAPIError as e:
            if e.status_code != 404:
                raise
            logger.info("creating folder %s", folder.title)
            return self.client.create_folder(folder)
        logger.info("updating folder %s", folder.title)
        return self.client.update_folder(folder)

    def restore_datasource(self, datasource: Datasource) -> Datasource:
        """Update the datasource with the same id, or create it."""
        try:
            self.client.get_datasource(datasource.id)
        except GrafanaAPIError as e:
            if e.status_code != 404:
                raise
            logger.info("creating datasource %s", datasource.name)
            return self.client.create_datasource(datasource)
        logger.info("updating datasource %s", datasource.name)
        return self.client.update_datasource(datasource)

    def restore(self, source: str) -> RestoreResult:
        """
        Write an archive's folders, datasources and dashboards to the server.

        Dashboards are saved with overwrite, without their numeric id (the
        server assigns one), with annotations cleared, and into the folder
        with the same title as when they were backed up.

        Raises:
            BackupError: If the archive cannot be read
            GrafanaAPIError: If the server rejects a write
        """
        snapshot = self.read_archive(source)
        result = RestoreResult(source=source)

        folder_ids: dict[str, int] = {}
        for folder in snapshot.folders:
            restored = self.restore_folder(folder)
            folder_ids[folder.title] = restored.id
            result.folders += 1

        for datasource in snapshot.datasources:
            self.restore_datasource(datasource)
            result.datasources += 1

        for item in snapshot.dashboards:
            dashboard = dict(item.dashboard)
            dashboard["id"] = None
            set_path(dashboard, "annotations", "list", value=[])
            folder_title = as_str(item.meta.get("folderTitle"))
            payload = DashboardSavePayload(
                dashboard=dashboard,
                overwrite=True,
                folder_id=folder_ids.get(folder_title, GENERAL_FOLDER_ID),
            )
            logger.info("restoring dashboard %s", as_str(dashboard.get("title")))
            self.client.save_dashboard(payload)
            result.dashboards += 1

        return result
