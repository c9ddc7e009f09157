"""
Canonical query paths derived from dashboard structure.

A panel's query file lives at

    <folder>/<dashboard>[/<row>]/<type prefix>-<panel title>[_<refid>]

with every component slugified. The path is stored in the panel
description as ``query=<path>`` and the extension comes from the
datasource when exporting.
"""

from __future__ import annotations

import logging
import re

from grafctl.core.panels.descriptions import QUERY_PREFIX

logger = logging.getLogger(__name__)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")

SLUG_SEPARATOR = "-"
UNTITLED = "untitled"
UNKNOWN_PANEL_PREFIX = "panel"

KNOWN_PANEL_TYPES = frozenset(
    {
        "table",
        "graph",
        "stat",
        "heatmap",
        "barchart",
        "piechart",
        "gauge",
        "singlestat",
        "text",
        "row",
        "alertlist",
        "dashlist",
        "logs",
        "news",
        "pluginlist",
    }
)

# timeseries panels replaced graph panels; existing files keep the graph- prefix
_PANEL_TYPE_ALIASES = {"timeseries": "graph"}


def sanitize(title: str) -> str:
    """
    Slugify a title: lowercase, runs of non-alphanumerics become ``-``.

    Example:
        >>> sanitize("API Requests/Second!")
        'api-requests-second'
        >>> sanitize("!@#$%")
        'untitled'
    """
    slug = _NON_SLUG_RE.sub(SLUG_SEPARATOR, title.lower()).strip(SLUG_SEPARATOR)
    return slug or UNTITLED


def panel_type_prefix(panel_type: str) -> str:
    """File name prefix for a panel type; unknown types map to ``panel``."""
    panel_type = _PANEL_TYPE_ALIASES.get(panel_type, panel_type)
    if panel_type in KNOWN_PANEL_TYPES:
        return panel_type
    return UNKNOWN_PANEL_PREFIX


def generate_query_path(
    folder_title: str,
    dashboard_title: str,
    row_title: str,
    panel_type: str,
    panel_title: str,
) -> str:
    """Build the canonical base query path for a panel."""
    segments = [sanitize(folder_title), sanitize(dashboard_title)]
    if row_title:
        segments.append(sanitize(row_title))
    segments.append(f"{panel_type_prefix(panel_type)}-{sanitize(panel_title)}")
    return "/".join(segments)


def generate_description(
    folder_title: str,
    dashboard_title: str,
    row_title: str,
    panel_type: str,
    panel_title: str,
) -> str:
    """
    Build the ``query=`` description line for a panel.

    Example:
        >>> generate_description("Business Metrics", "My Dashboard", "", "table", "CPU Usage")
        'query=business-metrics/my-dashboard/table-cpu-usage'
    """
    path = generate_query_path(folder_title, dashboard_title, row_title, panel_type, panel_title)
    return f"{QUERY_PREFIX}{path}"


def target_query_path(
    references: list[str],
    base_path: str,
    index: int,
    ref_id: str,
    target_count: int,
) -> str:
    """
    Path (without extension) that the target at ``index`` is exported to.

    An explicit per-target reference is used as is. Otherwise a panel with
    a single target uses the bare base path, and a panel with several
    targets appends ``_<lowercased refId>`` so that each target gets its
    own file. Adding a second target later leaves the first file name
    alone only if it is renamed by hand; the lookup side tries both forms.
    """
    if len(references) > 1 and index < len(references):
        return references[index]
    if target_count <= 1:
        return base_path
    if not ref_id:
        logger.warning("target %d of %s has no refId, file name is not unique", index, base_path)
    return f"{base_path}_{ref_id.lower()}"
