"""
Panel-level building blocks: description references, canonical query
paths, target field mapping and panel tree traversal.
"""

from grafctl.core.panels.descriptions import (
    QUERY_PREFIX,
    derive_base_path,
    is_invalid_description,
    is_valid_description,
    parse_references,
    resolve_target_base,
)
from grafctl.core.panels.paths import (
    generate_description,
    generate_query_path,
    panel_type_prefix,
    sanitize,
    target_query_path,
)
from grafctl.core.panels.targets import (
    DATASOURCE_PROMETHEUS,
    DATASOURCE_STACKDRIVER,
    DEFAULT_MIN_STEP,
    export_target,
    rewrite_target,
)
from grafctl.core.panels.walker import (
    PanelEntry,
    RowInfo,
    collect_rows,
    flatten_panels,
    row_for_panel,
    walk_panels,
)

__all__ = [
    "QUERY_PREFIX",
    "derive_base_path",
    "is_invalid_description",
    "is_valid_description",
    "parse_references",
    "resolve_target_base",
    "generate_description",
    "generate_query_path",
    "panel_type_prefix",
    "sanitize",
    "target_query_path",
    "DATASOURCE_PROMETHEUS",
    "DATASOURCE_STACKDRIVER",
    "DEFAULT_MIN_STEP",
    "export_target",
    "rewrite_target",
    "PanelEntry",
    "RowInfo",
    "collect_rows",
    "flatten_panels",
    "row_for_panel",
    "walk_panels",
]
