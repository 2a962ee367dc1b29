"""Tests for the asyncio download stepper."""

import asyncio
from dataclasses import dataclass, field

import pytest
from requests.structures import CaseInsensitiveDict

from resumabledownload import AsyncDownloadStepper
from resumabledownload.core.model import ByteRange, InvalidRangeError, RangeOrderError, TransportError
from resumabledownload.io.base import AsyncHTTPTransport


@dataclass
class FakeResponse:
    status_code: int
    headers: CaseInsensitiveDict
    content: bytes = b""


@dataclass
class AsyncRecordingTransport:
    """In-memory async transport; yields to the loop before answering."""
    data: bytes = b""
    head_headers: dict = field(default_factory=dict)
    fail_with: Exception | None = None
    calls: list = field(default_factory=list)
    requests_made: int = 0
    bytes_fetched: int = 0

    async def head(self, path=""):
        self.calls.append(("HEAD", path, None))
        await asyncio.sleep(0)
        return FakeResponse(200, CaseInsensitiveDict(self.head_headers))

    async def get(self, path="", headers=None):
        self.calls.append(("GET", path, dict(headers or {})))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        start, end = map(int, headers["Range"].split("=", 1)[1].split("-"))
        return FakeResponse(206, CaseInsensitiveDict(), self.data[start:end + 1])

    @property
    def ranges(self):
        return [h["Range"] for method, _, h in self.calls if method == "GET"]


DATA = bytes(range(256)) * 8  # 2048 bytes


class TestAsyncDownloadStepper:
    """Test AsyncDownloadStepper against an in-memory transport."""

    def setup_method(self):
        self.transport = AsyncRecordingTransport(
            data=DATA[:2000],
            head_headers={"Accept-Ranges": "bytes", "Content-Length": "2000"},
        )
        self.stepper = AsyncDownloadStepper(self.transport, chunk_size=1024)

    def test_fake_satisfies_protocol(self):
        assert isinstance(self.transport, AsyncHTTPTransport)

    @pytest.mark.asyncio
    async def test_probe(self):
        assert await self.stepper.server_supports_partial_requests()
        assert self.stepper.content_length == 2000

    @pytest.mark.asyncio
    async def test_probe_unsupported(self):
        self.transport.head_headers = {"Accept-Ranges": "None"}
        assert not await self.stepper.server_supports_partial_requests()

    @pytest.mark.asyncio
    async def test_walk(self):
        await self.stepper.server_supports_partial_requests()
        await self.stepper.start()
        first = self.stepper.current()
        assert first.content == DATA[:1024]
        assert not self.stepper.is_last_partial_request()

        await self.stepper.next()
        assert self.stepper.cursor == ByteRange(1024, 2047)
        assert self.stepper.is_last_partial_request()
        assert self.stepper.current().content == DATA[1024:2000]

        await self.stepper.prev()
        assert self.stepper.cursor == ByteRange(0, 1023)
        assert not self.stepper.is_last_partial_request()
        assert self.stepper.current().content == first.content
        assert self.stepper.current() is None

    @pytest.mark.asyncio
    async def test_prev_at_first_chunk(self):
        with pytest.raises(InvalidRangeError):
            await self.stepper.prev()
        assert self.stepper.cursor == ByteRange(0, 1023)
        assert self.transport.ranges == []

    @pytest.mark.asyncio
    async def test_resume_invalid(self):
        with pytest.raises(RangeOrderError):
            await self.stepper.resume(10, 5)
        assert self.stepper.cursor == ByteRange(0, 1023)

    @pytest.mark.asyncio
    async def test_resume(self):
        await self.stepper.resume(5, 9)
        assert self.transport.ranges == ["bytes=5-9"]
        assert self.stepper.current().content == DATA[5:10]

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_state(self):
        await self.stepper.start()
        error = TransportError("GET request failed: timeout")
        self.transport.fail_with = error
        with pytest.raises(TransportError) as exc_info:
            await self.stepper.next()
        assert exc_info.value is error
        assert self.stepper.cursor == ByteRange(0, 1023)
        assert self.stepper.current().content == DATA[:1024]

    @pytest.mark.asyncio
    async def test_concurrent_steps_keep_call_order(self):
        """Steps scheduled together are issued and committed in call order."""
        await asyncio.gather(self.stepper.start(), self.stepper.next(), self.stepper.next())
        assert self.transport.ranges == ["bytes=0-1023", "bytes=1024-2047", "bytes=2048-3071"]
        assert self.stepper.cursor == ByteRange(2048, 3071)
        assert self.stepper.current().content == b""
        assert self.stepper.current() is None

    @pytest.mark.asyncio
    async def test_concurrent_failure_does_not_block_later_steps(self):
        results = await asyncio.gather(
            self.stepper.prev(), self.stepper.next(), return_exceptions=True,
        )
        assert isinstance(results[0], InvalidRangeError)
        assert results[1] is None
        assert self.stepper.cursor == ByteRange(1024, 2047)
