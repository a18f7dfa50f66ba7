# tagger/clients/storage_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from tagger.clients.http_utils import _json_or_raise, _raise_for_status, get_http_client, retryable_get
from tagger.config import Settings, settings as default_settings
from tagger.exceptions import ServiceClientError

logger = logging.getLogger("tagger.clients.storage")


class StorageServiceClient:
    """
    Thin async client for the Storage API.
    Returns plain dicts/lists; records are built by tagger.core.context_graph.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        provider: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        cfg = settings or default_settings
        self.base_url = base_url or cfg.storage_api_url
        self.token = token or cfg.storage_api_token
        self.provider = provider or cfg.metadata_provider
        self._get = retryable_get(cfg.http_get_attempts)(self._get_once)
        self.service_name = "storage-api"
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client(self.base_url)

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        client = await self._client()
        headers = {"x-storageapi-token": self.token}
        try:
            resp = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise ServiceClientError(service=self.service_name, status=None, url=url, body=str(e)) from e
        _raise_for_status(self.service_name, resp)
        return _json_or_raise(self.service_name, resp)

    async def _get_once(self, url: str, **kwargs: Any) -> Any:
        return await self._send("GET", url, **kwargs)

    # --------- Components & configurations --------- #

    async def list_configurations(self) -> List[Dict[str, Any]]:
        """
        GET /v2/storage/branch/default/components?include=configuration
        """
        return await self._get(
            "/v2/storage/branch/default/components",
            params={"include": "configuration"},
        )

    # --------- Tables --------- #

    async def list_tables(self) -> List[Dict[str, Any]]:
        """
        GET /v2/storage/tables?include=metadata,columns,columnMetadata
        """
        return await self._get(
            "/v2/storage/tables",
            params={"include": "metadata,columns,columnMetadata"},
        )

    async def data_preview(self, table_id: str, *, limit: int = 100) -> Dict[str, Any]:
        """
        GET /v2/storage/tables/{table_id}/data-preview/?limit=...&format=json
        """
        return await self._get(
            f"/v2/storage/tables/{table_id}/data-preview/",
            params={"limit": limit, "format": "json"},
        )

    async def set_table_metadata(
        self,
        table_id: str,
        table_metadata: List[Dict[str, str]],
        columns_metadata: Dict[str, List[Dict[str, str]]],
    ) -> Any:
        """
        POST /v2/storage/tables/{table_id}/metadata
        """
        payload = {
            "provider": self.provider,
            "metadata": table_metadata,
            "columnsMetadata": columns_metadata,
        }
        return await self._send("POST", f"/v2/storage/tables/{table_id}/metadata", json=payload)
