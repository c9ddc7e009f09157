"""
Backup archive storage.

Two providers: a local directory and a Google Cloud Storage bucket. The
GCS client library is an optional extra (``pip install grafctl[gcs]``)
and is only imported when a gcs store is used.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from grafctl.core.errors import BackupError

logger = logging.getLogger(__name__)

PROVIDER_LOCAL = "local"
PROVIDER_GCS = "gcs"
SUPPORTED_PROVIDERS = (PROVIDER_LOCAL, PROVIDER_GCS)

GCS_SCHEME = "gs://"
ARCHIVE_CONTENT_TYPE = "application/gzip"


class BackupStore(Protocol):
    """Somewhere a backup archive can be written to and read back from."""

    def write(self, name: str, data: bytes) -> str:
        """Store ``data`` under ``name`` and return its location."""
        ...

    def read(self, name: str) -> bytes:
        """Return the archive stored under ``name``."""
        ...

    def check(self) -> None:
        """Fail early if archives cannot be written here."""
        ...


class LocalBackupStore:
    """Archives stored as files in a local directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def check(self) -> None:
        if self.directory.exists() and not self.directory.is_dir():
            raise BackupError(f"backup destination {self.directory} is not a directory")

    def write(self, name: str, data: bytes) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_bytes(data)
        logger.debug("wrote %d bytes to %s", len(data), path)
        return str(path)

    def read(self, name: str) -> bytes:
        path = self.directory / name
        try:
            return path.read_bytes()
        except OSError as e:
            raise BackupError(f"cannot read backup {path}: {e}") from e


class GCSBackupStore:
    """Archives stored as objects in a Google Cloud Storage bucket."""

    def __init__(self, bucket: str, client: Any = None) -> None:
        """
        Initialize the store.

        Args:
            bucket: Bucket name (without gs://)
            client: Optional ``google.cloud.storage.Client`` (used by tests);
                by default one is created from application default credentials

        Raises:
            BackupError: If the bucket name is empty
        """
        if not bucket:
            raise BackupError("gcs backup requires a bucket name (--out)")
        self.bucket_name = bucket
        self._client = client

    def _bucket(self) -> Any:
        if self._client is None:
            try:
                from google.cloud import storage
            except ImportError as e:
                raise BackupError(
                    "google-cloud-storage is required for gcs backups "
                    "(pip install 'grafctl[gcs]')"
                ) from e
            try:
                self._client = storage.Client()
            except Exception as e:
                raise BackupError(f"cannot create gcs client: {e}") from e
        return self._client.bucket(self.bucket_name)

    def check(self) -> None:
        """
        Make sure the client library, credentials and bucket are usable.

        Raises:
            BackupError: If any of them is not
        """
        bucket = self._bucket()
        try:
            exists = bucket.exists()
        except Exception as e:
            raise BackupError(f"error getting bucket {self.bucket_name!r} attributes: {e}") from e
        if not exists:
            raise BackupError(f"gcs bucket {self.bucket_name!r} does not exist")

    def write(self, name: str, data: bytes) -> str:
        location = f"{GCS_SCHEME}{self.bucket_name}/{name}"
        blob = self._bucket().blob(name)
        try:
            blob.upload_from_string(data, content_type=ARCHIVE_CONTENT_TYPE)
        except Exception as e:
            raise BackupError(f"cannot upload {location}: {e}") from e
        logger.debug("uploaded %d bytes to %s", len(data), location)
        return location

    def read(self, name: str) -> bytes:
        location = f"{GCS_SCHEME}{self.bucket_name}/{name}"
        blob = self._bucket().blob(name)
        try:
            return blob.download_as_bytes()
        except Exception as e:
            raise BackupError(f"cannot download {location}: {e}") from e


def parse_gcs_url(url: str) -> tuple[str, str]:
    """
    Split ``gs://bucket/object`` into bucket and object name.

    Object names containing further slashes are rejected.

    Raises:
        BackupError: If the url is not of that form
    """
    if not url.startswith(GCS_SCHEME):
        raise BackupError(f"invalid gcs url {url}")
    parts = url[len(GCS_SCHEME):].split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise BackupError(f"invalid gcs url {url}")
    return parts[0], parts[1]


def open_backup_store(provider: str, destination: str | None) -> BackupStore:
    """
    Build the store for a provider name.

    Args:
        provider: ``local`` or ``gcs``
        destination: Directory for local (defaults to cwd), bucket for gcs

    Raises:
        BackupError: For an unsupported provider or a missing bucket
    """
    if provider == PROVIDER_LOCAL:
        return LocalBackupStore(destination or ".")
    if provider == PROVIDER_GCS:
        return GCSBackupStore(destination or "")
    raise BackupError(
        f"provider {provider} not supported (choose one of {', '.join(SUPPORTED_PROVIDERS)})"
    )
