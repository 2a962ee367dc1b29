"""Asynchronous HTTP transport using httpx."""

import logging
from contextlib import asynccontextmanager
from typing import Mapping, Optional

import httpx

from ..core.model import TransportError
from .base import DEFAULT_TIMEOUT
from .http_sync import resolve_url

logger = logging.getLogger(__name__)

# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


class HTTPXAsyncTransport:
    """Asyncio transport bound to one resource URL."""

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._client = client

    async def _request(self, method: str, path: str, headers: Optional[Mapping[str, str]] = None) -> httpx.Response:
        url = resolve_url(self.url, path)
        self.requests_made += 1
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=dict(headers or {}),
                                                      timeout=self.timeout)
            else:
                async with _get_client() as client:
                    response = await client.request(method, url, headers=dict(headers or {}),
                                                    timeout=self.timeout)
        except httpx.RequestError as e:
            logger.error(f"{method} request failed for {url}: {e}")
            raise TransportError(f"{method} request failed: {e}") from e

        self.bytes_fetched += len(response.content)
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    async def head(self, path: str = "") -> httpx.Response:
        return await self._request("HEAD", path)

    async def get(self, path: str = "", headers: Optional[Mapping[str, str]] = None) -> httpx.Response:
        return await self._request("GET", path, headers)

    async def aclose(self):
        """Injected and shared clients belong to someone else; leave them open."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


async def open_http_transport_async(url: str, **kwargs) -> HTTPXAsyncTransport:
    """Create an asynchronous HTTP transport."""
    return HTTPXAsyncTransport(url, **kwargs)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
