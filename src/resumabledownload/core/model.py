from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte window ``[start, end]`` addressed by one range request."""
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(slots=True)
class StepReport:
    step: str
    success: bool
    data: Dict[str, Any] | None
    error: str | None
    bytes_fetched: int         # body length of the stored response


class ResumableDownloadError(RuntimeError):
    """Base class for every error raised by resumabledownload."""
    pass


class InvalidRangeError(ResumableDownloadError, ValueError):
    """Raised when a range violates ordering or non-negativity."""

    def __init__(self, message: str, start: int, end: int):
        super().__init__(f"{message} (start={start}, end={end})")
        self.start = start
        self.end = end


class RangeOrderError(InvalidRangeError):
    """Raised when a range starts after it ends."""

    def __init__(self, start: int, end: int):
        super().__init__("Range start must be less than or equal to range end", start, end)


class RangeBoundsError(InvalidRangeError):
    """Raised when a range has a negative start or end."""

    def __init__(self, start: int, end: int):
        super().__init__("Range start and end must be greater than or equal to 0", start, end)


class TransportError(ResumableDownloadError, IOError):
    """Raised when the underlying HTTP transport fails."""
    pass
