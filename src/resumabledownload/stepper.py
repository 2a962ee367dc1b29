"""Download steppers: drive a RangeCursor through a transport.

Every advancing operation issues exactly one GET carrying the computed
``Range`` header. The cursor is committed and the response stored only once
that GET returns, so a failed step leaves both untouched.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional, Sequence

from .core.cursor import CHUNK_SIZE, DEFAULT_ACCEPT_RANGES, RangeCursor, format_range_header, parse_content_length
from .core.model import ByteRange, InvalidRangeError, TransportError
from .io.base import AsyncHTTPTransport, HTTPResponse, HTTPTransport


class _BaseStepper:
    """State and bookkeeping shared by the sync and async steppers."""

    def __init__(self, *, chunk_size: int = CHUNK_SIZE,
                 accept_ranges: Sequence[str] = DEFAULT_ACCEPT_RANGES,
                 head_path: str = "",
                 logger: Optional[logging.Logger] = None):
        self._cursor = RangeCursor(chunk_size, accept_ranges)
        self._head_path = head_path
        self._pending: Optional[HTTPResponse] = None
        self._log = logger if logger is not None else logging.getLogger(__name__)

    # --- read-only views ---
    @property
    def cursor(self) -> ByteRange:
        return self._cursor.position

    @property
    def chunk_size(self) -> int:
        return self._cursor.chunk_size

    @property
    def content_length(self) -> int | None:
        return self._cursor.content_length

    @property
    def range_header(self) -> str:
        return self._cursor.header()

    def current(self) -> Optional[HTTPResponse]:
        """Hand over the most recent response and clear the slot."""
        response, self._pending = self._pending, None
        return response

    def is_last_partial_request(self) -> bool:
        return self._cursor.is_last()

    # --- helpers ---
    def _evaluate_probe(self, response: HTTPResponse) -> bool:
        headers = response.headers
        if "Accept-Ranges" not in headers:
            self._log.warning("Server doesn't support partial requests")
            self._log.debug("Header 'Accept-Ranges' is missing from the response")
            return False

        accept_ranges = headers["Accept-Ranges"]
        if not self._cursor.accepts(accept_ranges):
            self._log.warning("Server doesn't support partial requests")
            self._log.debug(f"Header 'Accept-Ranges' returned {accept_ranges!r}")
            return False

        # optional header
        raw_length = headers.get("Content-Length")
        if raw_length is not None:
            content_length = parse_content_length(raw_length)
            if content_length is None:
                self._log.debug(f"Ignoring unusable 'Content-Length' value {raw_length!r}")
            else:
                self._cursor.content_length = content_length
                self._log.debug(f"Header 'Content-Length' returned {content_length}")
        return True

    def _range_headers(self, candidate: ByteRange) -> dict[str, str]:
        header = self._cursor.header(candidate)
        self._log.debug(f"Header 'Range' was filled with {header} value")
        return {"Range": header}

    def _reject(self, err: InvalidRangeError) -> None:
        rejected = format_range_header(ByteRange(err.start, err.end), self._cursor.accept_ranges)
        self._log.error(f"Rejected range {rejected}: {err}")
        self._log.info(f"Keeping valid range {self.range_header}")

    def _commit(self, candidate: ByteRange, response: HTTPResponse) -> None:
        self._cursor.move_to(candidate)
        self._pending = response


class DownloadStepper(_BaseStepper):
    """Steps through a remote resource one chunk-sized range request at a time."""

    def __init__(self, transport: HTTPTransport, **kwargs):
        super().__init__(**kwargs)
        self.transport = transport

    def server_supports_partial_requests(self) -> bool:
        """HEAD the resource and check ``Accept-Ranges`` (learns ``Content-Length`` too).

        The HEAD targets the resource URL itself, so the length learned is the
        length of the resource being stepped through. Pass ``head_path="/"``
        for servers that only advertise ``Accept-Ranges`` at the site root.
        """
        self._log.info("Checking whether the server supports partial requests")
        try:
            response = self.transport.head(self._head_path)
        except TransportError as e:
            self._log.error(f"Capability probe failed: {e}")
            raise
        return self._evaluate_probe(response)

    def start(self) -> None:
        self._log.info("Preparing the first partial request")
        self._request(self._cursor.position)

    def next(self) -> None:
        self._log.info("Preparing the next partial request")
        self._request(self._cursor.following())

    def prev(self) -> None:
        self._log.info("Preparing to repeat the previous partial request")
        try:
            candidate = self._cursor.preceding()
        except InvalidRangeError as e:
            self._reject(e)
            raise
        self._request(candidate)

    def resume(self, range_start: int, range_end: int) -> None:
        self._log.info(f"Preparing request to resume download at {range_start}-{range_end}")
        try:
            candidate = self._cursor.resumed(range_start, range_end)
        except InvalidRangeError as e:
            self._reject(e)
            raise
        self._request(candidate)

    def _request(self, candidate: ByteRange) -> None:
        headers = self._range_headers(candidate)
        try:
            response = self.transport.get("", headers=headers)
        except TransportError as e:
            self._log.error(f"Partial request {headers['Range']} failed: {e}")
            raise
        self._commit(candidate, response)


class AsyncDownloadStepper(_BaseStepper):
    """Asyncio flavour of DownloadStepper.

    Advancing operations hold a lock for their whole duration, so steps
    scheduled concurrently still run, commit and fill the response slot in
    the order they were called.
    """

    def __init__(self, transport: AsyncHTTPTransport, **kwargs):
        super().__init__(**kwargs)
        self.transport = transport
        self._lock = asyncio.Lock()

    async def server_supports_partial_requests(self) -> bool:
        self._log.info("Checking whether the server supports partial requests")
        try:
            response = await self.transport.head(self._head_path)
        except TransportError as e:
            self._log.error(f"Capability probe failed: {e}")
            raise
        return self._evaluate_probe(response)

    async def start(self) -> None:
        async with self._lock:
            self._log.info("Preparing the first partial request")
            await self._request(self._cursor.position)

    async def next(self) -> None:
        async with self._lock:
            self._log.info("Preparing the next partial request")
            await self._request(self._cursor.following())

    async def prev(self) -> None:
        async with self._lock:
            self._log.info("Preparing to repeat the previous partial request")
            try:
                candidate = self._cursor.preceding()
            except InvalidRangeError as e:
                self._reject(e)
                raise
            await self._request(candidate)

    async def resume(self, range_start: int, range_end: int) -> None:
        async with self._lock:
            self._log.info(f"Preparing request to resume download at {range_start}-{range_end}")
            try:
                candidate = self._cursor.resumed(range_start, range_end)
            except InvalidRangeError as e:
                self._reject(e)
                raise
            await self._request(candidate)

    async def _request(self, candidate: ByteRange) -> None:
        headers = self._range_headers(candidate)
        try:
            response = await self.transport.get("", headers=headers)
        except TransportError as e:
            self._log.error(f"Partial request {headers['Range']} failed: {e}")
            raise
        self._commit(candidate, response)
