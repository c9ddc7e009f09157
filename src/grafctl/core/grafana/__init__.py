"""
Grafana HTTP API access.

Example:
    >>> from grafctl.core.grafana import GrafanaClient, SearchType
    >>> client = GrafanaClient("https://grafana.example.com", "api-key")
    >>> dashboards = client.search(type=SearchType.DASH_DB)
"""

from grafctl.core.grafana.client import GrafanaClient
from grafctl.core.grafana.models import (
    DashboardSavePayload,
    DashboardWithMeta,
    Datasource,
    Folder,
    PromQLQuery,
    SearchResult,
    SearchType,
)

__all__ = [
    "GrafanaClient",
    "DashboardSavePayload",
    "DashboardWithMeta",
    "Datasource",
    "Folder",
    "PromQLQuery",
    "SearchResult",
    "SearchType",
]
