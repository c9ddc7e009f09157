"""
Pydantic models for Grafana HTTP API payloads.

Field names follow Python conventions with camelCase aliases matching the
wire format. Unknown fields are kept (``extra="allow"``) so that objects
fetched for a backup are written back unchanged on restore.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchType(str, Enum):
    """Hit types accepted by the `type` filter of /api/search."""

    DASH_DB = "dash-db"
    DASH_HOME = "dash-home"
    DASH_FOLDER = "dash-folder"


class GrafanaModel(BaseModel):
    """Base for API models: camelCase aliases, unknown fields preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_api(self) -> dict[str, Any]:
        """Serialize with wire-format keys."""
        return self.model_dump(by_alias=True, mode="json")


class SearchResult(GrafanaModel):
    """One hit from /api/search."""

    id: int = 0
    uid: str = ""
    title: str = ""
    uri: str = ""
    url: str = ""
    slug: str = ""
    type: str = ""
    tags: list[str] = Field(default_factory=list)
    is_starred: bool = Field(default=False, alias="isStarred")
    folder_id: int | None = Field(default=None, alias="folderId")
    folder_uid: str | None = Field(default=None, alias="folderUid")
    folder_title: str | None = Field(default=None, alias="folderTitle")
    folder_url: str | None = Field(default=None, alias="folderUrl")


class Folder(GrafanaModel):
    """A dashboard folder."""

    id: int = 0
    uid: str = ""
    title: str = ""
    url: str = ""
    has_acl: bool = Field(default=False, alias="hasAcl")
    can_save: bool = Field(default=False, alias="canSave")
    can_edit: bool = Field(default=False, alias="canEdit")
    can_admin: bool = Field(default=False, alias="canAdmin")
    version: int = 0


class Datasource(GrafanaModel):
    """
    A datasource definition.

    `json_data` and `secure_json_fields` are free-form and vary by
    datasource plugin.
    """

    id: int = 0
    uid: str = ""
    org_id: int = Field(default=0, alias="orgId")
    name: str = ""
    type: str = ""
    type_logo_url: str = Field(default="", alias="typeLogoUrl")
    access: str = ""
    url: str = ""
    password: str = ""
    user: str = ""
    database: str = ""
    basic_auth: bool = Field(default=False, alias="basicAuth")
    basic_auth_user: str = Field(default="", alias="basicAuthUser")
    basic_auth_password: str = Field(default="", alias="basicAuthPassword")
    with_credentials: bool = Field(default=False, alias="withCredentials")
    is_default: bool = Field(default=False, alias="isDefault")
    json_data: dict[str, Any] | None = Field(default=None, alias="jsonData")
    secure_json_fields: dict[str, bool] = Field(default_factory=dict, alias="secureJsonFields")
    version: int = 0
    read_only: bool = Field(default=False, alias="readOnly")


class DashboardWithMeta(GrafanaModel):
    """
    Response of /api/dashboards/uid/<uid>.

    Both halves stay untyped JSON; the dashboard document is mutated in
    place by the reconciliation code and saved back whole.
    """

    meta: dict[str, Any] = Field(default_factory=dict)
    dashboard: dict[str, Any] = Field(default_factory=dict)


class DashboardSavePayload(GrafanaModel):
    """Request body of POST /api/dashboards/db."""

    dashboard: dict[str, Any]
    overwrite: bool = False
    folder_id: int = Field(default=0, alias="folderId")
    folder_uid: str = Field(default="", alias="folderUid")


class PromQLQuery(GrafanaModel):
    """Nested PromQL query object used by Cloud Monitoring (stackdriver) targets."""

    expr: str = ""
    project_name: str = Field(default="", alias="projectName")
    step: str = ""
