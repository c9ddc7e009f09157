"""
Data models for reconciliation results.

Each driver operation returns one of these so that the CLI can print a
summary and tests can assert on counts without scraping logs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SyncResult(BaseModel):
    """
    Result of pushing query files into a dashboard.

    Example:
        >>> result = SyncResult(uid="abc", targets_updated=3, saved=True)
        >>> result.summary()
        'abc: 3 targets updated, 0 panels skipped, saved'
    """

    uid: str = Field(description="Dashboard uid")

    title: str = Field(default="", description="Dashboard title")

    queries_loaded: int = Field(
        default=0,
        description="Number of query files in the catalog",
    )

    panels_updated: int = Field(
        default=0,
        description="Panels with at least one target rewritten",
    )

    panels_skipped: int = Field(
        default=0,
        description="Panels without description, targets or matching query",
    )

    targets_updated: int = Field(default=0, description="Targets rewritten")

    targets_missing: int = Field(
        default=0,
        description="Targets whose query file was not found",
    )

    targets_unmapped: int = Field(
        default=0,
        description="Targets with no field mapping for their datasource",
    )

    dry_run: bool = Field(default=False)

    saved: bool = Field(default=False, description="Whether the dashboard was saved")

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        parts = [
            f"{self.targets_updated} targets updated",
            f"{self.panels_skipped} panels skipped",
        ]
        if self.targets_missing:
            parts.append(f"{self.targets_missing} queries not found")
        if self.targets_unmapped:
            parts.append(f"{self.targets_unmapped} targets unmapped")
        if self.dry_run:
            parts.append("dry run, not saved")
        elif self.saved:
            parts.append("saved")
        return f"{self.uid}: " + ", ".join(parts)


class ExportResult(BaseModel):
    """Result of exporting dashboard targets to query files."""

    uid: str = Field(description="Dashboard uid")

    title: str = Field(default="", description="Dashboard title")

    output_dir: str = Field(
        default="",
        description="Directory the query files were written under",
    )

    files_written: list[str] = Field(
        default_factory=list,
        description="Paths written (or that would be written in a dry run)",
    )

    files_existing: int = Field(
        default=0,
        description="Targets skipped because the file exists and overwrite is off",
    )

    targets_empty: int = Field(
        default=0,
        description="Targets with no query text",
    )

    panels_skipped: int = Field(
        default=0,
        description="Panels without description or targets",
    )

    dry_run: bool = Field(default=False)

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        verb = "would write" if self.dry_run else "wrote"
        parts = [f"{verb} {len(self.files_written)} files to {self.output_dir}"]
        if self.files_existing:
            parts.append(f"{self.files_existing} existing files kept")
        if self.targets_empty:
            parts.append(f"{self.targets_empty} empty targets")
        return f"{self.uid}: " + ", ".join(parts)


class DescriptionChange(BaseModel):
    """One panel description rewritten (or to be rewritten) by update_descriptions."""

    panel_type: str
    panel_title: str
    row_title: str = ""
    old: str = ""
    new: str


class DescriptionUpdateResult(BaseModel):
    """Result of normalizing panel descriptions."""

    uid: str = Field(description="Dashboard uid")

    title: str = Field(default="", description="Dashboard title")

    updated: int = Field(default=0, description="Panels given a new description")

    skipped: int = Field(
        default=0,
        description="Structural panels, valid descriptions and unchanged ones",
    )

    changes: list[DescriptionChange] = Field(default_factory=list)

    dry_run: bool = Field(default=False)

    saved: bool = Field(default=False, description="Whether the dashboard was saved")

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        parts = [f"{self.updated} updated", f"{self.skipped} skipped"]
        if self.dry_run:
            parts.append("dry run, not saved")
        elif self.saved:
            parts.append("saved")
        elif self.updated == 0:
            parts.append("nothing to save")
        return f"{self.uid}: " + ", ".join(parts)
