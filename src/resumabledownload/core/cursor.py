"""Range cursor state machine.

The cursor knows nothing about HTTP: it computes candidate ranges, validates
them and commits them once the caller has performed the matching request.
"""

from __future__ import annotations
from typing import Iterable, Optional, Sequence

from .model import ByteRange, RangeBoundsError, RangeOrderError

CHUNK_SIZE = 1024
DEFAULT_ACCEPT_RANGES: tuple[str, ...] = ("bytes",)


def check_order(byte_range: ByteRange) -> ByteRange:
    if byte_range.start > byte_range.end:
        raise RangeOrderError(byte_range.start, byte_range.end)
    return byte_range


def check_bounds(byte_range: ByteRange) -> ByteRange:
    if byte_range.start < 0 or byte_range.end < 0:
        raise RangeBoundsError(byte_range.start, byte_range.end)
    return byte_range


def format_range_header(byte_range: ByteRange, units: Iterable[str] = DEFAULT_ACCEPT_RANGES) -> str:
    """Build the ``Range`` header value, e.g. ``bytes=0-1023``.

    One ``<unit>=<start>-<end>`` spec is emitted per unit, joined by commas.
    """
    return ",".join(f"{unit}={byte_range}" for unit in units)


def parse_content_length(value: str | None) -> int | None:
    """Return the header value as a non-negative int, or None if unusable."""
    if value is None:
        return None
    # Content-Length = 1*DIGIT
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class RangeCursor:
    """Tracks the currently addressed byte range and the known content length."""

    def __init__(self, chunk_size: int = CHUNK_SIZE, accept_ranges: Sequence[str] = DEFAULT_ACCEPT_RANGES):
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
        if not accept_ranges:
            raise ValueError("accept_ranges must name at least one range unit")

        self._chunk_size = chunk_size
        self._accept_ranges = tuple(accept_ranges)
        self.content_length: Optional[int] = None   # None = unknown
        self.position = ByteRange(0, chunk_size - 1)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def accept_ranges(self) -> tuple[str, ...]:
        return self._accept_ranges

    # --- candidates (never mutate) ---
    def following(self) -> ByteRange:
        # no clamping: the server truncates ranges past the end of the resource
        end = self.position.end
        return ByteRange(end + 1, end + self._chunk_size)

    def preceding(self) -> ByteRange:
        candidate = ByteRange(self.position.start - self._chunk_size,
                              self.position.end - self._chunk_size)
        check_order(candidate)
        return check_bounds(candidate)

    @staticmethod
    def resumed(range_start: int, range_end: int) -> ByteRange:
        for bound in (range_start, range_end):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise TypeError(f"range bounds must be integers, got {bound!r}")
        candidate = ByteRange(range_start, range_end)
        check_bounds(candidate)
        return check_order(candidate)

    # --- state ---
    def move_to(self, byte_range: ByteRange) -> None:
        self.position = byte_range

    def accepts(self, unit: str) -> bool:
        """True if the ``Accept-Ranges`` value names one of the configured units."""
        return unit in self._accept_ranges and unit.lower() != "none"

    def header(self, byte_range: ByteRange | None = None) -> str:
        return format_range_header(byte_range or self.position, self._accept_ranges)

    def is_last(self) -> bool:
        if self.content_length is None:
            return False
        return self.position.end >= self.content_length - 1

    def __repr__(self) -> str:
        return (f"RangeCursor(position={self.position}, chunk_size={self._chunk_size}, "
                f"content_length={self.content_length})")
