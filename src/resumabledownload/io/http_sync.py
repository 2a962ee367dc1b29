"""Synchronous HTTP transport using requests."""

import logging
from typing import Mapping, Optional
from urllib.parse import urljoin

import requests

from ..core.model import TransportError
from .base import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def resolve_url(base_url: str, path: str) -> str:
    """Resolve ``path`` against the resource URL; ``""`` is the resource itself."""
    return urljoin(base_url, path) if path else base_url


class RequestsTransport:
    """Blocking transport bound to one resource URL."""

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = session or _get_session()

    def _request(self, method: str, path: str, headers: Optional[Mapping[str, str]] = None) -> requests.Response:
        url = resolve_url(self.url, path)
        self.requests_made += 1
        try:
            response = self._session.request(method, url, headers=dict(headers or {}), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} request failed for {url}: {e}")
            raise TransportError(f"{method} request failed: {e}") from e

        self.bytes_fetched += len(response.content)
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def head(self, path: str = "") -> requests.Response:
        return self._request("HEAD", path)

    def get(self, path: str = "", headers: Optional[Mapping[str, str]] = None) -> requests.Response:
        return self._request("GET", path, headers)

    def close(self):
        """Injected and shared sessions belong to someone else; leave them open."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_http_transport(url: str, **kwargs) -> RequestsTransport:
    """Create a synchronous HTTP transport."""
    return RequestsTransport(url, **kwargs)


def close_global_session():
    """Close the global requests session. Call this at application shutdown."""
    global _session
    if _session is not None:
        _session.close()
        _session = None
