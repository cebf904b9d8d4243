"""
Shared type definitions for the palette engine.

Addresses, the group selectors used to scope metadata, colors and the
error taxonomy raised by the data store and the operations.
"""

from __future__ import annotations

import string
from dataclasses import dataclass

PAGE_MAX = 0xFFFF
LINE_MAX = 0xFF
COLUMN_MAX = 0xFF


# =============================================================================
# Addressing
# =============================================================================


@dataclass(frozen=True, order=True)
class Address:
    """A (page, line, column) location, ordered lexicographically."""

    page: int = 0
    line: int = 0
    column: int = 0

    def wrapped_next(self, pages: int, lines: int, columns: int) -> Address:
        """
        Return the next address in the cycle bounded by the given counts.

        The column advances first, carrying into the line and then the page.
        Pages wrap to 0 once they reach `pages`. Never fails, even at the
        theoretical maximum; callers detect a full cycle themselves.

        Example:
            >>> Address(0, 9, 9).wrapped_next(10, 10, 10)
            Address(page=1, line=0, column=0)
        """
        page = self.page
        line = self.line
        column = (self.column + 1) % (COLUMN_MAX + 1)

        if column % columns == 0:
            column = 0
            line = (line + 1) % (LINE_MAX + 1)
            if line % lines == 0:
                line = 0
                page = (page + 1) % (PAGE_MAX + 1)
                if page >= pages:
                    page = 0

        return Address(page, line, column)

    def base_address(self) -> Address:
        return self

    def contains(self, address: Address) -> bool:
        return address == self

    def interval(self) -> tuple[Address, Address]:
        return (self, self)

    def __str__(self) -> str:
        return f"{self.page:04X}:{self.line:02X}:{self.column:02X}"


@dataclass(frozen=True)
class Line:
    """All addresses sharing a page and line."""

    page: int
    line: int

    def base_address(self) -> Address:
        return Address(self.page, self.line, 0)

    def contains(self, address: Address) -> bool:
        return address.page == self.page and address.line == self.line

    def interval(self) -> tuple[Address, Address]:
        return (Address(self.page, self.line, 0), Address(self.page, self.line, COLUMN_MAX))

    def __str__(self) -> str:
        return f"{self.page:04X}:{self.line:02X}:*"


@dataclass(frozen=True)
class Page:
    """All addresses on a page."""

    page: int

    def base_address(self) -> Address:
        return Address(self.page, 0, 0)

    def contains(self, address: Address) -> bool:
        return address.page == self.page

    def interval(self) -> tuple[Address, Address]:
        return (Address(self.page, 0, 0), Address(self.page, LINE_MAX, COLUMN_MAX))

    def __str__(self) -> str:
        return f"{self.page:04X}:*:*"


@dataclass(frozen=True)
class All:
    """Every address in the palette."""

    def base_address(self) -> Address:
        return Address(0, 0, 0)

    def contains(self, address: Address) -> bool:
        return True

    def interval(self) -> tuple[Address, Address]:
        return (Address(0, 0, 0), Address(PAGE_MAX, LINE_MAX, COLUMN_MAX))

    def __str__(self) -> str:
        return "*:*:*"


Reference = Line | Page | All

# Anything metadata may be attached to
Selector = Address | Line | Page | All


def page_of(address: Address) -> Page:
    return Page(address.page)


def line_of(address: Address) -> Line:
    return Line(address.page, address.line)


# =============================================================================
# Color
# =============================================================================


def lerp_channel(start: int, end: int, amount: float) -> int:
    """
    Interpolate between two 8-bit channel values, truncating toward `start`.

    The ratio is clamped to [0, 1]. Reversing the arguments inverts the ratio,
    so lerp_channel(15, 5, 0.2) == lerp_channel(5, 15, 0.8).
    """
    a = min(max(amount, 0.0), 1.0)
    if start > end:
        a = 1.0 - a
        low, high = end, start
    else:
        low, high = start, end
    return low + int((high - low) * a)


@dataclass(frozen=True)
class Color:
    """An RGB color with 8-bit channels."""

    red: int
    green: int
    blue: int

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """
        Parse a color from '#RRGGBB' or 'RRGGBB' form.

        Raises:
            ValueError: If the text is not six hex digits
        """
        digits = text[1:] if text.startswith("#") else text
        if len(digits) != 6:
            raise ValueError(
                f"Invalid color string: '{text}'\n"
                f"  Expected 6 hex digits, got {len(digits)}\n"
                f"  Valid formats: '#RRGGBB' or 'RRGGBB'"
            )
        if any(char not in string.hexdigits for char in digits):
            raise ValueError(
                f"Invalid color string: '{text}'\n"
                f"  Contains non-hex characters"
            )
        value = int(digits, 16)
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    @staticmethod
    def lerp(start: Color, end: Color, amount: float) -> Color:
        """Linearly interpolate each channel between two colors."""
        return Color(
            lerp_channel(start.red, end.red, amount),
            lerp_channel(start.green, end.green, amount),
            lerp_channel(start.blue, end.blue, amount),
        )

    @property
    def hex(self) -> str:
        return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"

    def __str__(self) -> str:
        return self.hex


# =============================================================================
# Errors
# =============================================================================


class PaletteError(Exception):
    """Base class for errors raised by palette data and operations."""

    description = "palette error"

    def __init__(self, address: Address | None = None) -> None:
        self.address = address
        if address is None:
            super().__init__(self.description)
        else:
            super().__init__(f"{self.description}: {address}")


class AddressInUse(PaletteError):
    description = "cannot create a cell at an occupied address"


class EmptyAddress(PaletteError):
    description = "empty address provided to an operation requiring a color"


class InvalidAddress(PaletteError):
    description = "address provided is outside allowed range for palette"


class MaxCellLimitExceeded(PaletteError):
    description = "maximum number of cells for palette exceeded"


class CannotSetDerivedColor(PaletteError):
    description = "cannot assign color to a location containing a derived color value"


class DependencyOverwrite(PaletteError):
    description = "overwriting operation would overwrite one of its dependencies"
