"""
Mapping between query files and panel target fields.

Which target field holds the query text depends on the datasource kind:

    SQL datasources      target["rawSql"]
    prometheus           target["expr"]
    stackdriver          target["promQLQuery"]["expr"]
"""

from __future__ import annotations

import logging

from grafctl.core.document import JsonDict, as_str, get_path
from grafctl.core.grafana.models import PromQLQuery
from grafctl.core.queries.models import Query, QueryKind

logger = logging.getLogger(__name__)

DATASOURCE_PROMETHEUS = "prometheus"
DATASOURCE_STACKDRIVER = "stackdriver"

PROMQL_DATASOURCES = frozenset({DATASOURCE_PROMETHEUS, DATASOURCE_STACKDRIVER})

DEFAULT_MIN_STEP = "10s"


def rewrite_target(target: JsonDict, query: Query, datasource_kind: str) -> bool:
    """
    Write query text into the target field its datasource reads.

    Stackdriver targets keep their ``projectName`` and ``step``, which
    only exist in the dashboard; the nested query object is rebuilt
    around the new expression.

    Args:
        target: Panel target, modified in place
        query: Query file bound to the target
        datasource_kind: Panel ``datasource.type``

    Returns:
        True if the target was modified, False if no field mapping exists
        for this query kind and datasource kind
    """
    if query.kind is QueryKind.SQL:
        target["rawSql"] = query.raw
        return True

    if datasource_kind == DATASOURCE_PROMETHEUS:
        target["expr"] = query.raw
        return True

    if datasource_kind == DATASOURCE_STACKDRIVER:
        step = as_str(get_path(target, "promQLQuery", "step")) or DEFAULT_MIN_STEP
        promql = PromQLQuery(
            expr=query.raw,
            project_name=as_str(get_path(target, "promQLQuery", "projectName")),
            step=step,
        )
        target["promQLQuery"] = promql.to_api()
        return True

    return False


def export_target(target: JsonDict, datasource_kind: str) -> tuple[str, QueryKind]:
    """
    Read the query text out of a target.

    Unknown datasource kinds are treated as SQL. Empty content means there
    is nothing to export.

    Returns:
        Tuple of (content, kind); the kind decides the file extension
    """
    if datasource_kind == DATASOURCE_STACKDRIVER:
        content = as_str(get_path(target, "promQLQuery", "expr")) or as_str(target.get("expr"))
        return content, QueryKind.PROMQL

    if datasource_kind in PROMQL_DATASOURCES:
        return as_str(target.get("expr")), QueryKind.PROMQL

    return as_str(target.get("rawSql")), QueryKind.SQL
