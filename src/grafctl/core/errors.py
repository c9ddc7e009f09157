"""
Exceptions raised by grafctl core services.

The CLI layer catches ``GrafctlError`` and maps it to an exit code;
anything else is a bug and propagates with a traceback.
"""

from __future__ import annotations


class GrafctlError(Exception):
    """Base exception for grafctl."""

    pass


class ConfigError(GrafctlError):
    """Raised when required configuration is missing or inconsistent."""

    pass


class GrafanaAPIError(GrafctlError):
    """Raised when the Grafana API returns an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class UnsupportedQueryKindError(GrafctlError):
    """Raised when a query file has neither a .sql nor a .promql extension."""

    def __init__(self, path: str) -> None:
        super().__init__(f"query file {path} is not supported")
        self.path = path


class QueryDirectoryError(GrafctlError):
    """Raised when the query root is missing or is not a directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"queries directory {path} does not exist or is not a directory")
        self.path = path


class DuplicateQueryPathError(GrafctlError):
    """
    Raised when an export would write the same query path twice.

    Attributes:
        duplicates: Mapping of query path to every panel (or panel
            target) claiming it
    """

    def __init__(self, duplicates: dict[str, list[str]]) -> None:
        self.duplicates = duplicates
        parts = [
            f"found {len(panels)} panels with same description '{path}': {panels}"
            for path, panels in duplicates.items()
        ]
        super().__init__("; ".join(parts))


class DashboardError(GrafctlError):
    """Raised when a dashboard document cannot be processed."""

    pass


class BackupError(GrafctlError):
    """Raised when a backup cannot be written or restored."""

    pass
