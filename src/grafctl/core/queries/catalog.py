"""
In-memory catalog of query files.

Query files live in a directory tree next to the dashboards that use
them. The catalog maps each file's root-relative path to its content so
that panel descriptions (``query=folder/dashboard/table-cpu``) can be
resolved without touching the filesystem again.

Keys keep their extension; lookups may omit it:

    >>> catalog = QueryCatalog("dashboards")
    >>> catalog.load()
    >>> catalog.get("folder/dashboard/table-cpu")      # finds table-cpu.sql
    >>> catalog.get_by_base_and_ref_id("folder/dashboard/graph-cpu", "B")
    ...                                                 # finds graph-cpu_b.promql
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from grafctl.core.errors import QueryDirectoryError, UnsupportedQueryKindError
from grafctl.core.queries.models import Query, QueryKind

logger = logging.getLogger(__name__)

# Keys written by older exports were rooted above a queries/ directory
_BEFORE_QUERIES_RE = re.compile(r"(?:^|.*/)queries/(.+)")


class QueryCatalog:
    """
    Query files under a root directory, keyed by normalized relative path.

    When two files normalize to the same key the last one put wins.
    """

    def __init__(self, root: str | Path) -> None:
        """
        Initialize an empty catalog.

        Args:
            root: Query root directory; relative paths are resolved against cwd
        """
        self.root = Path(root).absolute()
        self._queries: dict[str, Query] = {}

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, name: object) -> bool:
        return name in self._queries

    def names(self) -> list[str]:
        """All catalog keys, sorted."""
        return sorted(self._queries)

    @staticmethod
    def is_supported_file(path: str | Path) -> bool:
        """True if the file extension is a supported query kind."""
        return QueryKind.from_path(str(path)) is not None

    def key_for(self, path: str | Path) -> str:
        """
        Compute the catalog key for a file path.

        The root directory prefix and leading separators are removed, and
        so is everything up to and including the last ``queries/``
        segment.
        """
        file_path = Path(path).absolute()
        try:
            name = file_path.relative_to(self.root).as_posix()
        except ValueError:
            name = file_path.as_posix()
        name = name.lstrip("/")

        match = _BEFORE_QUERIES_RE.match(name)
        if match:
            name = match.group(1)
        return name

    def put(self, path: str | Path) -> Query:
        """
        Read a query file and store it under its catalog key.

        Raises:
            UnsupportedQueryKindError: If the extension is not .sql or .promql
            OSError: If the file cannot be read
        """
        kind = QueryKind.from_path(str(path))
        if kind is None:
            raise UnsupportedQueryKindError(str(path))

        raw = Path(path).read_text(encoding="utf-8")
        name = self.key_for(path)
        query = Query(name=name, raw=raw, kind=kind)

        if name in self._queries:
            logger.debug("query %s replaced by %s", name, path)
        self._queries[name] = query
        return query

    def load(self) -> int:
        """
        Put every supported file found under the root.

        Directories and unsupported files are skipped. Files are visited
        in sorted order so that key collisions resolve the same way on
        every run.

        Returns:
            Number of files loaded

        Raises:
            QueryDirectoryError: If the root is missing or not a directory
        """
        if not self.root.is_dir():
            raise QueryDirectoryError(str(self.root))

        loaded = 0
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for filename in sorted(filenames):
                if not self.is_supported_file(filename):
                    continue
                self.put(Path(dirpath) / filename)
                loaded += 1

        logger.debug("loaded %d query files from %s", loaded, self.root)
        return loaded

    def get(self, name: str) -> Query | None:
        """
        Look up a query by key, trying ``name``, ``name.sql`` then ``name.promql``.

        A catalog holding both ``x.sql`` and ``x.promql`` always answers
        ``get("x")`` with the .sql file.
        """
        candidates = (
            name,
            f"{name}{QueryKind.SQL.extension}",
            f"{name}{QueryKind.PROMQL.extension}",
        )
        for candidate in candidates:
            query = self._queries.get(candidate)
            if query is not None:
                return query
        return None

    def get_by_base_and_ref_id(self, base_name: str, ref_id: str) -> Query | None:
        """
        Look up the query for one target of a panel.

        Single-target panels are exported without a suffix, so the bare
        base name is tried first. Otherwise ``<base>_<refid>`` (lowercased
        refId) is tried as .sql then .promql.
        """
        query = self.get(base_name)
        if query is not None:
            return query

        if not ref_id:
            return None

        suffixed = f"{base_name}_{ref_id.lower()}"
        candidates = (
            f"{suffixed}{QueryKind.SQL.extension}",
            f"{suffixed}{QueryKind.PROMQL.extension}",
        )
        for candidate in candidates:
            query = self._queries.get(candidate)
            if query is not None:
                return query
        return None
