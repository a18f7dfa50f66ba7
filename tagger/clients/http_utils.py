# tagger/clients/http_utils.py
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential, wait_random

from tagger.config import settings
from tagger.exceptions import ServiceClientError

logger = logging.getLogger("tagger.clients.http")


# One shared AsyncClient per base_url (connection pooling + timeouts)
_clients: dict[str, httpx.AsyncClient] = {}
_clients_lock = asyncio.Lock()


async def get_http_client(base_url: str) -> httpx.AsyncClient:
    async with _clients_lock:
        client = _clients.get(base_url)
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=settings.http_client_timeout_seconds,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"{settings.service_name}/0.1.0",
                },
            )
            _clients[base_url] = client
            logger.info("HTTP client created for %s", base_url)
        return client


async def close_http_clients() -> None:
    async with _clients_lock:
        for base_url, client in list(_clients.items()):
            await client.aclose()
            logger.debug("HTTP client closed for %s", base_url)
        _clients.clear()


def _raise_for_status(service: str, resp: httpx.Response) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        # keep body for debugging (limited)
        raise ServiceClientError(
            service=service, status=resp.status_code, url=str(resp.request.url), body=resp.text
        ) from e


def _json_or_raise(service: str, resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise ServiceClientError(
            service=service, status=resp.status_code, url=str(resp.request.url), body=resp.text
        ) from e


# Retry policy for idempotent GETs only; 1 attempt means no retry
def retryable_get(attempts: int):
    return retry(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=0.2, max=2.0) + wait_random(0, 0.2),
        retry=retry_if_exception_type(ServiceClientError),
        reraise=True,
    )
