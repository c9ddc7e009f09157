"""
Dashboard/query-file reconciliation.
"""

from grafctl.core.reconcile.models import (
    DescriptionChange,
    DescriptionUpdateResult,
    ExportResult,
    SyncResult,
)
from grafctl.core.reconcile.service import ReconcileService

__all__ = [
    "DescriptionChange",
    "DescriptionUpdateResult",
    "ExportResult",
    "ReconcileService",
    "SyncResult",
]
