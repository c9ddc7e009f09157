"""
Grafana HTTP API client.

A thin synchronous wrapper over the handful of Grafana REST endpoints
grafctl needs: search, dashboards, folders and datasources. Requests are
retried on transient failures; every other failure surfaces as a
`GrafanaAPIError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from grafctl.core.config.models import GrafctlConfig
from grafctl.core.errors import GrafanaAPIError
from grafctl.core.grafana.http import RetryPolicy, with_retry
from grafctl.core.grafana.models import (
    DashboardSavePayload,
    DashboardWithMeta,
    Datasource,
    Folder,
    SearchResult,
    SearchType,
)

logger = logging.getLogger(__name__)


class GrafanaClient:
    """
    Client for the Grafana HTTP API.

    Example:
        >>> with GrafanaClient("https://grafana.example.com", "api-key") as client:
        ...     for hit in client.search(type=SearchType.DASH_DB):
        ...         print(hit.uid, hit.title)
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout: float = 120.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        verify: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize GrafanaClient.

        Args:
            url: Grafana server URL (e.g. https://grafana.example.com)
            api_key: API key or service account token, sent as a bearer token
            timeout: Request timeout in seconds
            max_retries: Retries for transient failures (0 disables retrying)
            retry_base_delay: Initial backoff delay in seconds
            verify: Verify the server TLS certificate
            transport: Optional httpx transport (used by tests)
        """
        self.url = url.rstrip("/")
        self.retry_policy = RetryPolicy(max_retries=max_retries, base_delay=retry_base_delay)
        self._http = httpx.Client(
            base_url=self.url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: GrafctlConfig) -> GrafanaClient:
        """
        Create a client from loaded configuration.

        Raises:
            ConfigError: If the server url or api key is missing
        """
        config.require_server()
        return cls(
            config.url,
            config.api_key,
            timeout=config.timeout,
            max_retries=config.max_retries,
            verify=config.verify_tls,
        )

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> GrafanaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        """
        Send a request and decode its JSON body.

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            GrafanaAPIError: On non-2xx status, transport failure or
                undecodable body
        """

        @with_retry(self.retry_policy)
        def _send() -> httpx.Response:
            response = self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
            return response

        logger.debug("%s %s%s", method, self.url, path)
        try:
            response = _send()
        except httpx.HTTPStatusError as e:
            raise GrafanaAPIError(
                f"{method} {path}: status code: {e.response.status_code}",
                status_code=e.response.status_code,
                url=str(e.request.url),
            ) from e
        except httpx.RequestError as e:
            raise GrafanaAPIError(f"{method} {path}: {e}", url=f"{self.url}{path}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GrafanaAPIError(
                f"{method} {path}: invalid JSON response: {e}",
                status_code=response.status_code,
                url=str(response.request.url),
            ) from e

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        *,
        type: SearchType | None = None,
        query: str | None = None,
        folder_ids: list[int] | None = None,
    ) -> list[SearchResult]:
        """
        Search dashboards and folders.

        Args:
            type: Restrict hits to one type (dash-db, dash-folder, dash-home)
            query: Title search string
            folder_ids: Restrict hits to these folder ids
        """
        params: dict[str, str] = {}
        if type is not None:
            params["type"] = type.value
        if query:
            params["query"] = query
        if folder_ids:
            params["folderIds"] = ",".join(str(folder_id) for folder_id in folder_ids)

        data = self._request("GET", "/api/search", params=params)
        return [SearchResult.model_validate(hit) for hit in data or []]

    # ------------------------------------------------------------------
    # Dashboards
    # ------------------------------------------------------------------

    def get_dashboard(self, uid: str) -> DashboardWithMeta:
        """Fetch a dashboard document and its metadata by uid."""
        data = self._request("GET", f"/api/dashboards/uid/{uid}")
        return DashboardWithMeta.model_validate(data or {})

    def save_dashboard(self, payload: DashboardSavePayload) -> dict[str, Any]:
        """Create or overwrite a dashboard. Returns Grafana's save summary."""
        data = self._request("POST", "/api/dashboards/db", json=payload.to_api())
        return data or {}

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def list_folders(self) -> list[Folder]:
        data = self._request("GET", "/api/folders")
        return [Folder.model_validate(folder) for folder in data or []]

    def get_folder(self, uid: str) -> Folder:
        data = self._request("GET", f"/api/folders/{uid}")
        return Folder.model_validate(data or {})

    def create_folder(self, folder: Folder) -> Folder:
        body: dict[str, Any] = {"title": folder.title}
        if folder.uid:
            body["uid"] = folder.uid
        data = self._request("POST", "/api/folders", json=body)
        return Folder.model_validate(data or {})

    def update_folder(self, folder: Folder) -> Folder:
        """Update a folder by uid, overwriting any newer version on the server."""
        body = {"title": folder.title, "version": folder.version, "overwrite": True}
        data = self._request("PUT", f"/api/folders/{folder.uid}", json=body)
        return Folder.model_validate(data or {})

    # ------------------------------------------------------------------
    # Datasources
    # ------------------------------------------------------------------

    def list_datasources(self) -> list[Datasource]:
        data = self._request("GET", "/api/datasources")
        return [Datasource.model_validate(ds) for ds in data or []]

    def get_datasource(self, datasource_id: int) -> Datasource:
        data = self._request("GET", f"/api/datasources/{datasource_id}")
        return Datasource.model_validate(data or {})

    def create_datasource(self, datasource: Datasource) -> Datasource:
        data = self._request("POST", "/api/datasources", json=datasource.to_api())
        # Grafana wraps the created object: {"datasource": {...}, "id": ..., "message": ...}
        data = data or {}
        return Datasource.model_validate(data.get("datasource", data))

    def update_datasource(self, datasource: Datasource) -> Datasource:
        data = self._request(
            "PUT", f"/api/datasources/{datasource.id}", json=datasource.to_api()
        )
        data = data or {}
        return Datasource.model_validate(data.get("datasource", data))
