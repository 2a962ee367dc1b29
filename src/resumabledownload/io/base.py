"""Transport protocols consumed by the download steppers."""

from typing import Mapping, Optional, Protocol, runtime_checkable


DEFAULT_TIMEOUT = 30.0  # seconds, per request


@runtime_checkable
class HTTPResponse(Protocol):
    """The parts of a response the steppers and the CLI look at."""

    status_code: int
    headers: Mapping[str, str]  # case-insensitive
    content: bytes


@runtime_checkable
class HTTPTransport(Protocol):
    """Protocol for blocking HTTP transports."""

    requests_made: int
    bytes_fetched: int  # running total of body bytes

    def head(self, path: str = "") -> HTTPResponse:
        """Issue a HEAD request. ``""`` addresses the resource itself.
        Any network failure → raise TransportError.
        """
        ...

    def get(self, path: str = "", headers: Optional[Mapping[str, str]] = None) -> HTTPResponse:
        """Issue a GET request with extra ``headers``.
        Any network failure → raise TransportError.
        """
        ...


@runtime_checkable
class AsyncHTTPTransport(Protocol):
    """Protocol for asyncio HTTP transports."""

    requests_made: int
    bytes_fetched: int

    async def head(self, path: str = "") -> HTTPResponse:
        ...

    async def get(self, path: str = "", headers: Optional[Mapping[str, str]] = None) -> HTTPResponse:
        ...
