"""
Configuration data models for grafctl.

These models define the structure of .grafctl.json and
~/.config/grafctl/config.json files, with validation via Pydantic.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from grafctl.core.errors import ConfigError


class BackupConfig(BaseModel):
    """
    Where full backups are written.

    `out` is a local directory for the local provider and a bucket name
    for the gcs provider.
    """
    provider: Literal["local", "gcs"] = Field(
        default="local",
        description="Object storage provider for backups: 'local' or 'gcs'"
    )
    out: Optional[str] = Field(
        default=None,
        description="Backup destination (local directory or bucket name)"
    )


class GrafctlConfig(BaseModel):
    """
    Main grafctl configuration.

    Merged from defaults, user config, project config and environment
    variables. See `grafctl.core.config.loader.load_config`.

    Example:
        >>> config = GrafctlConfig(url="https://grafana.example.com/", api_key="k")
        >>> config.url
        'https://grafana.example.com'
    """
    url: str = Field(
        default="",
        description="Grafana server API URL"
    )
    api_key: str = Field(
        default="",
        description="Grafana API key or service account token"
    )
    verbose: bool = Field(
        default=False,
        description="Log one line per skip/update decision"
    )
    timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="HTTP request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries for transient HTTP failures (5xx, timeouts)"
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify the server TLS certificate"
    )
    queries_dir: Optional[str] = Field(
        default=None,
        description="Default query root for sync and export"
    )
    backup: BackupConfig = Field(default_factory=BackupConfig)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """API paths are joined with a leading slash."""
        return v.rstrip("/")

    def require_server(self) -> None:
        """
        Ensure the server connection settings are present.

        Raises:
            ConfigError: If url or api_key is empty
        """
        missing = []
        if not self.url:
            missing.append("url (--url or GRAFCTL_URL)")
        if not self.api_key:
            missing.append("api key (--key or GRAFCTL_API_KEY)")
        if missing:
            raise ConfigError(f"missing {', '.join(missing)}")
