"""
Query files and the catalog that indexes them.
"""

from grafctl.core.queries.catalog import QueryCatalog
from grafctl.core.queries.models import Query, QueryKind

__all__ = ["Query", "QueryCatalog", "QueryKind"]
