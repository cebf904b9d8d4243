"""Tests for palette_types module."""

import pytest

from palette_types import (
    PAGE_MAX,
    Address,
    All,
    Color,
    EmptyAddress,
    InvalidAddress,
    Line,
    Page,
    PaletteError,
    lerp_channel,
    line_of,
    page_of,
)


class TestAddress:
    """Tests for address ordering, formatting and wrapping."""

    def test_lexicographic_order(self) -> None:
        """Addresses sort by page, then line, then column."""
        addresses = [Address(1, 0, 0), Address(0, 2, 0), Address(0, 1, 5), Address(0, 1, 2)]
        assert sorted(addresses) == [
            Address(0, 1, 2),
            Address(0, 1, 5),
            Address(0, 2, 0),
            Address(1, 0, 0),
        ]

    def test_str_is_hex(self) -> None:
        """Addresses render as PPPP:LL:CC in hex."""
        assert str(Address(1, 2, 3)) == "0001:02:03"
        assert str(Address(0x203, 0xF, 0xA)) == "0203:0F:0A"

    def test_wrapped_next_advances_column(self) -> None:
        """The column advances first."""
        assert Address(0, 0, 3).wrapped_next(10, 10, 10) == Address(0, 0, 4)

    def test_wrapped_next_carries_into_line(self) -> None:
        """Reaching the column count carries into the line."""
        assert Address(0, 3, 9).wrapped_next(10, 10, 10) == Address(0, 4, 0)

    def test_wrapped_next_carries_into_page(self) -> None:
        """Reaching the line count carries into the page."""
        assert Address(0, 9, 9).wrapped_next(10, 10, 10) == Address(1, 0, 0)

    def test_wrapped_next_wraps_to_start(self) -> None:
        """The last address wraps back to the first page."""
        assert Address(9, 9, 9).wrapped_next(10, 10, 10) == Address(0, 0, 0)

    def test_wrapped_next_single_cell_space(self) -> None:
        """In a 1x1x1 space the next address is the same address."""
        assert Address(0, 0, 0).wrapped_next(1, 1, 1) == Address(0, 0, 0)

    def test_wrapped_next_at_theoretical_maximum(self) -> None:
        """Wrapping at the maximum never fails."""
        last = Address(PAGE_MAX, 0xFF, 0xFF)
        assert last.wrapped_next(PAGE_MAX + 1, 0x100, 0x100) == Address(0, 0, 0)

    def test_wrapped_next_full_cycle(self) -> None:
        """Stepping through every address visits each once and returns to the start."""
        for pages, lines, columns in [(1, 1, 1), (2, 3, 4), (3, 1, 5)]:
            address = Address()
            seen = []
            for _ in range(pages * lines * columns):
                seen.append(address)
                address = address.wrapped_next(pages, lines, columns)

            assert address == Address()
            assert len(set(seen)) == pages * lines * columns


class TestReferences:
    """Tests for Line, Page and All selectors."""

    def test_base_addresses(self) -> None:
        """Each reference starts at its first column."""
        assert Line(2, 3).base_address() == Address(2, 3, 0)
        assert Page(2).base_address() == Address(2, 0, 0)
        assert All().base_address() == Address(0, 0, 0)

    def test_contains(self) -> None:
        """Containment follows the group's fixed coordinates."""
        assert Line(1, 2).contains(Address(1, 2, 7))
        assert not Line(1, 2).contains(Address(1, 3, 7))
        assert Page(1).contains(Address(1, 9, 9))
        assert not Page(1).contains(Address(2, 0, 0))
        assert All().contains(Address(PAGE_MAX, 0, 0))

    def test_interval_spans_group(self) -> None:
        """Interval covers the whole line."""
        low, high = Line(1, 2).interval()
        assert low == Address(1, 2, 0)
        assert high == Address(1, 2, 0xFF)

    def test_page_of_and_line_of(self) -> None:
        """Helpers extract the enclosing groups."""
        assert page_of(Address(4, 5, 6)) == Page(4)
        assert line_of(Address(4, 5, 6)) == Line(4, 5)

    def test_str(self) -> None:
        """References render with wildcards."""
        assert str(Line(1, 2)) == "0001:02:*"
        assert str(Page(1)) == "0001:*:*"
        assert str(All()) == "*:*:*"


class TestColor:
    """Tests for color parsing and interpolation."""

    def test_from_hex(self) -> None:
        """Parse with and without the leading '#'."""
        assert Color.from_hex("#404088") == Color(0x40, 0x40, 0x88)
        assert Color.from_hex("00CC00") == Color(0, 0xCC, 0)

    def test_hex_round_trip(self) -> None:
        """The hex property uses upper case."""
        assert Color.from_hex("#ffcc00").hex == "#FFCC00"

    def test_from_hex_wrong_length(self) -> None:
        """Too few digits is rejected."""
        with pytest.raises(ValueError, match="Expected 6 hex digits"):
            Color.from_hex("#12345")

    def test_from_hex_bad_digits(self) -> None:
        """Non-hex characters are rejected."""
        with pytest.raises(ValueError, match="non-hex"):
            Color.from_hex("#GGGGGG")
        with pytest.raises(ValueError, match="non-hex"):
            Color.from_hex("0x1234")

    def test_lerp_midpoint(self) -> None:
        """Half way between black and a color."""
        assert Color.lerp(Color(0, 0, 0), Color(150, 100, 50), 0.5) == Color(75, 50, 25)

    def test_lerp_clamps_ratio(self) -> None:
        """Ratios outside [0, 1] are clamped."""
        start, end = Color(10, 20, 30), Color(200, 100, 0)
        assert Color.lerp(start, end, 2.0) == end
        assert Color.lerp(start, end, -1.0) == start

    def test_lerp_channel_descending(self) -> None:
        """Swapping the endpoints inverts the ratio."""
        assert lerp_channel(15, 5, 0.2) == lerp_channel(5, 15, 0.8) == 13

    def test_lerp_channel_truncates(self) -> None:
        """Channel interpolation truncates toward the low end."""
        assert lerp_channel(0, 64, 6 / 7) == 54
        assert lerp_channel(136, 0, 1 / 7) == 116


class TestErrors:
    """Tests for the error taxonomy."""

    def test_address_is_kept(self) -> None:
        """Address-carrying errors expose the address."""
        error = InvalidAddress(Address(1, 2, 3))
        assert error.address == Address(1, 2, 3)
        assert "0001:02:03" in str(error)

    def test_common_base(self) -> None:
        """Every error derives from PaletteError."""
        assert isinstance(EmptyAddress(Address()), PaletteError)

    def test_without_address(self) -> None:
        """Errors may omit the address."""
        error = InvalidAddress()
        assert error.address is None
        assert str(error) == InvalidAddress.description
