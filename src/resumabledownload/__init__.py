"""resumabledownload - step through a remote file with HTTP range requests."""

import logging

from .core.model import (                                             # re-export
    ByteRange, StepReport, ResumableDownloadError, InvalidRangeError,
    RangeOrderError, RangeBoundsError, TransportError,
)
from .core.cursor import CHUNK_SIZE, RangeCursor, format_range_header
from .io import open_transport, open_transport_async
from .stepper import DownloadStepper, AsyncDownloadStepper

logging.getLogger(__name__).addHandler(logging.NullHandler())


def open_stepper(url, *, chunk_size: int = CHUNK_SIZE, timeout: float | None = None, **stepper_options) -> DownloadStepper:
    """Create a blocking stepper for ``url`` backed by a requests transport."""
    transport_options = {} if timeout is None else {"timeout": timeout}
    transport = open_transport(url, **transport_options)
    return DownloadStepper(transport, chunk_size=chunk_size, **stepper_options)


async def open_stepper_async(url, *, chunk_size: int = CHUNK_SIZE, timeout: float | None = None,
                             **stepper_options) -> AsyncDownloadStepper:
    """Create an asyncio stepper for ``url`` backed by an httpx transport."""
    transport_options = {} if timeout is None else {"timeout": timeout}
    transport = await open_transport_async(url, **transport_options)
    return AsyncDownloadStepper(transport, chunk_size=chunk_size, **stepper_options)


__all__ = [
    "open_stepper", "open_stepper_async",
    "DownloadStepper", "AsyncDownloadStepper", "RangeCursor",
    "ByteRange", "StepReport", "CHUNK_SIZE", "format_range_header",
    "ResumableDownloadError", "InvalidRangeError", "RangeOrderError",
    "RangeBoundsError", "TransportError",
]
