"""I/O layer for resumabledownload - carries range requests to the server."""

# Re-export these for import convenience
from .base import HTTPTransport, AsyncHTTPTransport, HTTPResponse, DEFAULT_TIMEOUT
from .http_sync import RequestsTransport, open_http_transport, close_global_session
from .http_async import HTTPXAsyncTransport, open_http_transport_async, close_global_client


def _check_url(url) -> str:
    url = str(url)
    if not url.startswith(('http://', 'https://')):
        raise ValueError(f"Only http:// and https:// URLs are supported, got {url!r}")
    return url


def open_transport(url, **kwargs) -> RequestsTransport:
    """Factory function to create a blocking transport for a resource URL."""
    return open_http_transport(_check_url(url), **kwargs)


async def open_transport_async(url, **kwargs) -> HTTPXAsyncTransport:
    """Factory function to create an asyncio transport for a resource URL."""
    return await open_http_transport_async(_check_url(url), **kwargs)
