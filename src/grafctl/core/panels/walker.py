"""
Traversal of a dashboard's panel tree.

Dashboards come in two shapes. Collapsed rows carry their panels in a
nested ``panels`` array; expanded rows are siblings of the panels below
them, and membership is only implied by vertical position (``gridPos.y``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from grafctl.core.document import JsonDict, as_int, as_list, as_str, get_path

ROW_PANEL = "row"
TEXT_PANEL = "text"

# Panels that never carry queries
STRUCTURAL_PANEL_TYPES = frozenset({ROW_PANEL, TEXT_PANEL})


@dataclass(frozen=True)
class RowInfo:
    """A top-level row panel and its vertical position."""

    title: str
    y: int


@dataclass
class PanelEntry:
    """
    A panel visited by `walk_panels`.

    Attributes:
        panel: The panel document (mutations are visible in the dashboard)
        row_title: Title of the row the panel belongs to, "" if ungrouped
        nested: True if the panel sits in a row's nested ``panels`` array
    """

    panel: JsonDict
    row_title: str = ""
    nested: bool = False

    @property
    def type(self) -> str:
        return as_str(self.panel.get("type"))

    @property
    def title(self) -> str:
        return as_str(self.panel.get("title"))

    @property
    def is_structural(self) -> bool:
        return self.type in STRUCTURAL_PANEL_TYPES


def _nested_panels(panel: JsonDict) -> list[JsonDict]:
    return [child for child in as_list(panel.get("panels")) if isinstance(child, dict)]


def flatten_panels(panels: list[Any]) -> list[JsonDict]:
    """
    Flatten the panel tree, one level deep.

    A panel with nested panels is emitted after its children. Non-dict
    entries are dropped.
    """
    flat: list[JsonDict] = []
    for panel in panels:
        if not isinstance(panel, dict):
            continue
        flat.extend(_nested_panels(panel))
        flat.append(panel)
    return flat


def collect_rows(panels: list[Any]) -> list[RowInfo]:
    """Top-level row panels, in document order."""
    return [
        RowInfo(title=as_str(panel.get("title")), y=as_int(get_path(panel, "gridPos", "y")))
        for panel in panels
        if isinstance(panel, dict) and panel.get("type") == ROW_PANEL
    ]


def row_for_panel(panel: JsonDict, rows: list[RowInfo]) -> str:
    """
    Title of the nearest row above the panel, by ``gridPos.y``.

    A row only counts if its y is strictly less than the panel's. Among
    rows with the same y the first one wins. Returns "" if no row precedes
    the panel.
    """
    panel_y = as_int(get_path(panel, "gridPos", "y"))
    best: RowInfo | None = None
    for row in rows:
        if row.y >= panel_y:
            continue
        if best is None or row.y > best.y:
            best = row
    return best.title if best is not None else ""


def walk_panels(panels: list[Any]) -> list[PanelEntry]:
    """
    Visit every panel in `flatten_panels` order with its row association.

    Children of a row use that row's title directly; top-level panels use
    `row_for_panel` against the top-level rows. Row panels themselves have
    no row.
    """
    rows = collect_rows(panels)
    entries: list[PanelEntry] = []
    for panel in panels:
        if not isinstance(panel, dict):
            continue
        is_row = panel.get("type") == ROW_PANEL
        for child in _nested_panels(panel):
            row_title = as_str(panel.get("title")) if is_row else row_for_panel(child, rows)
            entries.append(PanelEntry(panel=child, row_title=row_title, nested=True))
        if is_row:
            entries.append(PanelEntry(panel=panel))
        else:
            entries.append(PanelEntry(panel=panel, row_title=row_for_panel(panel, rows)))
    return entries
