"""
Sequential, bounds-checked reader over an immutable byte buffer.
"""

from typing import Union

from .errors import TruncatedInput

BytesLike = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """Reads bytes from the front of a buffer, tracking the current position.

    Every read that asks for more bytes than remain raises ``TruncatedInput``
    and leaves the position where it was.
    """

    def __init__(self, data: BytesLike, position: int = 0):
        self._view = memoryview(data).cast("B")
        if not 0 <= position <= len(self._view):
            raise ValueError(f"Start position {position} is outside the buffer.")
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def remaining(self) -> int:
        return len(self._view) - self._position

    def _require(self, count: int, what: str) -> None:
        if count < 0:
            raise ValueError(f"Cannot read a negative number of bytes ({count}).")
        if count > self.remaining():
            raise TruncatedInput(
                f"Unexpected end of data reading {what} at offset {self._position}: "
                f"needed {count} byte(s), {self.remaining()} left."
            )

    def peek_byte(self) -> int:
        self._require(1, "byte")
        return self._view[self._position]

    def read_byte(self) -> int:
        value = self.peek_byte()
        self._position += 1
        return value

    def read_uint16_le(self) -> int:
        self._require(2, "uint16")
        low = self._view[self._position]
        high = self._view[self._position + 1]
        self._position += 2
        return low | (high << 8)

    def read_bytes(self, count: int) -> bytes:
        self._require(count, f"{count} bytes")
        chunk = self._view[self._position:self._position + count].tobytes()
        self._position += count
        return chunk

    def skip(self, count: int) -> None:
        self._require(count, f"{count} skipped bytes")
        self._position += count

    def release(self) -> None:
        """Drop the reference to the underlying buffer."""
        self._view.release()
