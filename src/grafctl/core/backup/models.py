"""
Data models for full backups.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from grafctl.core.grafana.models import DashboardWithMeta, Datasource, Folder


class GrafanaBackup(BaseModel):
    """
    Everything needed to rebuild a Grafana instance's dashboards.

    Serialized as JSON with Grafana's own field names so that archives are
    readable without grafctl.
    """

    datasources: list[Datasource] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)
    dashboards: list[DashboardWithMeta] = Field(default_factory=list)


class RestoreResult(BaseModel):
    """Counts of objects written back to the server by a restore."""

    source: str = Field(description="Archive that was restored")
    folders: int = Field(default=0, description="Folders created or updated")
    datasources: int = Field(default=0, description="Datasources created or updated")
    dashboards: int = Field(default=0, description="Dashboards saved")

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        return (
            f"restored {self.source}: {self.folders} folders, "
            f"{self.datasources} datasources, {self.dashboards} dashboards"
        )
