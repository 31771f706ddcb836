"""Tests for cell and range address parsing."""

import pytest

from sheetsync.excel.address import (
    CellAddress,
    CellRange,
    column_index,
    column_label,
    format_address,
    format_range,
    in_grid,
    parse_address,
    parse_range,
)


class TestParseAddress:
    """Test parse_address."""

    def test_single_letter(self):
        assert parse_address("B3") == CellAddress(column="B", row=3)

    def test_multi_letter_column(self):
        address = parse_address("AB120")
        assert address.column == "AB"
        assert address.row == 120

    def test_lowercase_is_normalised(self):
        assert parse_address("aa7") == CellAddress(column="AA", row=7)

    @pytest.mark.parametrize("text", ["", None, "A", "12", "1A", "A0", "A-1", "A1B", "A 1", "$A$1", "A1:B2"])
    def test_invalid_returns_none(self, text):
        assert parse_address(text) is None

    def test_cell_address_rejects_bad_values(self):
        with pytest.raises(ValueError):
            CellAddress(column="A", row=0)
        with pytest.raises(ValueError):
            CellAddress(column="a", row=1)


class TestFormatAddress:
    """Test format_address and the round trip."""

    def test_canonical_form(self):
        assert format_address(CellAddress(column="C", row=42)) == "C42"
        assert str(CellAddress()) == "A1"

    def test_round_trip_every_column_up_to_zzz(self):
        for index in range(1, column_index("ZZZ") + 1):
            for row in (1, 9, 1048576):
                text = f"{column_label(index)}{row}"
                assert format_address(parse_address(text)) == text

    def test_column_conversions(self):
        assert column_index("A") == 1
        assert column_index("Z") == 26
        assert column_index("AA") == 27
        assert column_label(28) == "AB"
        assert column_label(18278) == "ZZZ"


class TestInGrid:
    """Test in_grid."""

    @pytest.mark.parametrize("text", ["A1", "XFD1", "A1048576", "XFD1048576"])
    def test_inside(self, text):
        assert in_grid(parse_address(text))

    @pytest.mark.parametrize("text", ["XFE1", "ZZZ1", "AAAA1", "A1048577"])
    def test_outside(self, text):
        address = parse_address(text)
        assert address is not None
        assert not in_grid(address)


class TestRanges:
    """Test parse_range and format_range."""

    def test_pair(self):
        cell_range = parse_range("A1:C3")
        assert cell_range.start == CellAddress("A", 1)
        assert cell_range.end == CellAddress("C", 3)
        assert format_range(cell_range) == "A1:C3"

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_is_whole_region(self, text):
        cell_range = parse_range(text)
        assert cell_range == CellRange()
        assert cell_range.is_whole
        assert format_range(cell_range) == ""

    def test_single_cell_range(self):
        cell_range = parse_range("D4")
        assert cell_range.start == cell_range.end == CellAddress("D", 4)

    @pytest.mark.parametrize("text", ["A1:", ":B2", "A1:B2:C3", "A1-B2", "sheet!A1:B2"])
    def test_invalid_range(self, text):
        assert parse_range(text) is None
