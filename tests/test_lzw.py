"""Unit tests for LZW decompression."""

from itertools import islice

import pytest

from animated_gif import MalformedBlock, UnsupportedColorDepth
from animated_gif.lzw import CodeTable, check_min_code_size, iter_lzw

from gif_builder import lzw_encode, pack_codes


class TestCodeTable:
    """Tests for the code table arena."""

    def test_initial_state(self) -> None:
        table = CodeTable(2)
        assert table.clear_code == 4
        assert table.end_code == 5
        assert table.code_size == 3
        assert len(table.entries) == 6

    def test_grows_code_size(self) -> None:
        table = CodeTable(2)
        table.add(b"\x01\x01")
        assert table.code_size == 3
        table.add(b"\x01\x01\x01")
        assert table.code_size == 4

    def test_reset(self) -> None:
        table = CodeTable(2)
        for _ in range(10):
            table.add(b"\x00\x00")
        table.reset()
        assert len(table.entries) == 6
        assert table.code_size == 3

    def test_stops_growing_at_4096_entries(self) -> None:
        table = CodeTable(8)
        while len(table.entries) < 4096:
            table.add(b"\x00")
        table.add(b"\x01")
        assert len(table.entries) == 4096
        assert table.code_size == 12

    @pytest.mark.parametrize("size", [0, 9, 12])
    def test_rejects_bad_min_code_size(self, size: int) -> None:
        with pytest.raises(UnsupportedColorDepth):
            CodeTable(size)


class TestIterLzw:
    """Tests for iter_lzw."""

    @staticmethod
    def decode_all(data: bytes, min_code_size: int = 2) -> bytes:
        return b"".join(iter_lzw(data, min_code_size))

    def test_literals(self) -> None:
        indices = [0, 1, 2, 3, 3, 2, 1]
        assert self.decode_all(lzw_encode(indices)) == bytes(indices)

    def test_code_not_yet_in_table(self) -> None:
        # clear, 1, 6 (= previous + its first index), end
        data = pack_codes([(4, 3), (1, 3), (6, 3), (5, 3)])
        assert self.decode_all(data) == b"\x01\x01\x01"

    def test_code_width_increases(self) -> None:
        data = pack_codes([(4, 3), (1, 3), (1, 3), (6, 3), (5, 4)])
        assert self.decode_all(data) == b"\x01\x01\x01\x01"

    def test_caller_can_stop_early(self) -> None:
        entries = iter_lzw(lzw_encode([1] * 10), 2)
        assert list(islice(entries, 4)) == [b"\x01"] * 4

    def test_short_stream_returns_partial(self) -> None:
        # no end code; the codes fill exactly three bytes
        data = pack_codes([(4, 3), (2, 3), (3, 3), (4, 3), (1, 3), (2, 3), (4, 3), (3, 3)])
        assert self.decode_all(data) == b"\x02\x03\x01\x02\x03"

    def test_empty_data(self) -> None:
        assert self.decode_all(b"") == b""

    def test_bad_min_code_size_raises_on_first_step(self) -> None:
        with pytest.raises(UnsupportedColorDepth):
            next(iter_lzw(b"", 9))

    def test_unknown_code_raises(self) -> None:
        data = pack_codes([(4, 3), (7, 3), (5, 3)])
        with pytest.raises(MalformedBlock):
            self.decode_all(data)

    def test_first_code_after_clear_must_be_literal(self) -> None:
        data = pack_codes([(4, 3), (6, 3), (5, 3)])
        with pytest.raises(MalformedBlock):
            self.decode_all(data)

    def test_check_min_code_size(self) -> None:
        check_min_code_size(8)
        with pytest.raises(UnsupportedColorDepth):
            check_min_code_size(0)
