"""
Variable-width LZW decompression for GIF image data.

The code table is an arena: a list of byte strings indexed by code, rebuilt by
``CodeTable.reset`` whenever the stream sends a clear code.
"""

import logging
from typing import Iterator

from .errors import MalformedBlock, UnsupportedColorDepth

logger = logging.getLogger(__name__)

MAX_CODE_BITS = 12
MAX_TABLE_SIZE = 1 << MAX_CODE_BITS


class CodeTable:
    """The LZW string table for one image block."""

    def __init__(self, min_code_size: int):
        check_min_code_size(min_code_size)
        self.min_code_size = min_code_size
        self.clear_code = 1 << min_code_size
        self.end_code = self.clear_code + 1
        self._roots = [bytes((i,)) for i in range(self.clear_code)] + [b"", b""]
        self.entries = []
        self.code_size = 0
        self.reset()

    def reset(self) -> None:
        self.entries = list(self._roots)
        self.code_size = self.min_code_size + 1

    def add(self, entry: bytes) -> None:
        # A full table is frozen until the encoder sends a clear code.
        if len(self.entries) >= MAX_TABLE_SIZE:
            return
        self.entries.append(entry)
        if len(self.entries) >= 1 << self.code_size and self.code_size < MAX_CODE_BITS:
            self.code_size += 1


def check_min_code_size(min_code_size: int) -> None:
    if not 1 <= min_code_size <= 8:
        raise UnsupportedColorDepth(
            f"LZW minimum code size must be between 1 and 8, got {min_code_size}."
        )


def iter_lzw(data: bytes, min_code_size: int) -> Iterator[bytes]:
    """Yield the decoded string for each code in GIF image data.

    Stops at the end code or when the data runs out. Callers that need only
    part of the image can stop iterating early.

    Raises:
        UnsupportedColorDepth: ``min_code_size`` is outside 1..8.
        MalformedBlock: The stream references a code that does not exist yet.
    """
    table = CodeTable(min_code_size)
    previous = None
    bit_buffer = 0
    bit_count = 0
    position = 0
    total = len(data)

    while True:
        code_size = table.code_size
        while bit_count < code_size and position < total:
            bit_buffer |= data[position] << bit_count
            bit_count += 8
            position += 1
        if bit_count < code_size:
            logger.debug("LZW data ran out before an end code")
            return
        code = bit_buffer & ((1 << code_size) - 1)
        bit_buffer >>= code_size
        bit_count -= code_size

        if code == table.clear_code:
            table.reset()
            previous = None
            continue
        if code == table.end_code:
            return

        entries = table.entries
        if code < len(entries):
            entry = entries[code]
            if previous is not None:
                table.add(previous + entry[:1])
        elif code == len(entries) and previous is not None:
            entry = previous + previous[:1]
            table.add(entry)
        else:
            raise MalformedBlock(
                f"LZW code {code} is not in the table ({len(entries)} entries)."
            )
        previous = entry
        yield entry
