"""
Data models for query files.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class QueryKind(str, Enum):
    """Query language of a query file, derived from its extension."""

    SQL = "sql"
    PROMQL = "promql"

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.value}"

    @classmethod
    def from_path(cls, path: str) -> QueryKind | None:
        """Return the kind for a file path, or None if the extension is unsupported."""
        for kind in cls:
            if path.endswith(kind.extension):
                return kind
        return None


@dataclass(frozen=True)
class Query:
    """
    A query read from disk.

    Attributes:
        name: Catalog key (root-relative path, extension included)
        raw: File content, verbatim
        kind: Query language
    """

    name: str
    raw: str
    kind: QueryKind
