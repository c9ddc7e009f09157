"""
Full backup and restore of datasources, folders and dashboards.
"""

from grafctl.core.backup.models import GrafanaBackup, RestoreResult
from grafctl.core.backup.service import BackupService
from grafctl.core.backup.storage import (
    SUPPORTED_PROVIDERS,
    BackupStore,
    GCSBackupStore,
    LocalBackupStore,
    open_backup_store,
    parse_gcs_url,
)

__all__ = [
    "BackupService",
    "BackupStore",
    "GCSBackupStore",
    "GrafanaBackup",
    "LocalBackupStore",
    "RestoreResult",
    "SUPPORTED_PROVIDERS",
    "open_backup_store",
    "parse_gcs_url",
]
