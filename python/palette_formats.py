"""
Palette formats.

A format configures a fresh Data store (labels, bounds) and may install
hooks that label pages and lines the first time they are touched. Reading
and writing palette files is part of the format contract; only ZPL
writing is implemented, and it emits the fixed file framing only.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO

from palette_data import Data, no_op
from palette_types import All, Line, Page, Reference

if TYPE_CHECKING:
    from rampgrid import Palette

logger = logging.getLogger(__name__)


# =============================================================================
# ZPL (Zelda Classic palette) layout
# =============================================================================

ZPL_LABEL = "ZplPalette 1.0.0"
ZPL_PAGE_LIMIT = 0x203
ZPL_DEFAULT_LINE_LIMIT = 16
ZPL_DEFAULT_COLUMN_LIMIT = 16
ZPL_MAIN_LINE_COUNT = 14

MAIN_PAGE_LIMIT = 0
LEVEL_PAGE_LIMIT = 512

# Fixed byte blocks framing a ZPL file
ZPL_HEADER = bytes([0x43, 0x53, 0x45, 0x54, 0x04, 0x00, 0x01, 0x00, 0x9C, 0x0D, 0x05, 0x00])
ZPL_FOOTER_A = bytes([0x5A, 0x00, 0x00, 0x00])
ZPL_FOOTER_B = bytes(4)
ZPL_FOOTER_B_REPEAT = 108
ZPL_FOOTER_C = bytes([
    0x00, 0x00, 0x00, 0x36, 0x00, 0x00, 0x4E, 0x00, 0x00, 0x14,
    0x00, 0x00, 0x36, 0x00, 0x00, 0x4E, 0x00, 0x00, 0x14, 0x00,
])
ZPL_FOOTER_D = bytes(4)
ZPL_FOOTER_D_REPEAT = 78
ZPL_FOOTER_E = bytes([
    0x22, 0x00, 0x00, 0x66, 0x00, 0x00, 0x5A, 0x00, 0x00, 0x22, 0x00, 0x00,
    0x86, 0x00, 0x00, 0x3C, 0x00, 0x00, 0x22, 0x00, 0x00, 0x86, 0x00, 0x00,
    0x3C, 0x00, 0x00, 0x20, 0x30, 0x40, 0x3F, 0x3F, 0x3F, 0x07, 0x07, 0x07,
])

# Level page line -> CSET bank shown in the line label
_LEVEL_CSET_BANKS = {
    0: 2, 4: 2, 7: 2, 10: 2,
    1: 3, 5: 3, 8: 3, 11: 3,
    2: 4, 6: 4, 9: 4, 12: 4,
}


def level_line_label(line: int) -> str:
    """Label for a line on a level page, e.g. 'CSET 5 (3)'."""
    return f"CSET {line} ({_LEVEL_CSET_BANKS.get(line, 9)})"


def zpl_prepare_new_page(data: Data, group: Reference) -> None:
    match group:
        case Page(page=page) if page <= MAIN_PAGE_LIMIT:
            data.set_name(group, "Main")
            data.set_label(group, "Level 0")
            data.set_line_count(group, ZPL_MAIN_LINE_COUNT)
        case Page(page=page) if page <= LEVEL_PAGE_LIMIT:
            data.set_label(group, f"Level {page}")
        case Page(page=page):
            data.set_label(group, f"Sprite Page {page}")


def zpl_prepare_new_line(data: Data, group: Reference) -> None:
    match group:
        case Line(page=page, line=line) if page <= MAIN_PAGE_LIMIT:
            data.set_label(group, f"Main CSET {line}")
        case Line(page=page, line=line) if page <= LEVEL_PAGE_LIMIT:
            data.set_label(group, level_line_label(line))
        case Line(page=page, line=line):
            data.set_label(group, f"Sprite CSET {page - LEVEL_PAGE_LIMIT + line}")


# =============================================================================
# Small
# =============================================================================

SMALL_PAGE_LIMIT = 8
SMALL_LINE_LIMIT = 16
SMALL_COLUMN_LIMIT = 16


# =============================================================================
# Format
# =============================================================================


class Format(Enum):
    """Supported palette formats."""

    DEFAULT = "default"  # Theoretical maximum bounds, no hooks
    SMALL = "small"  # 8 pages of 16x16
    ZPL = "zpl"  # Zelda Classic palette layout

    @property
    def version(self) -> str:
        return "1.0.0"

    def initialize(self, data: Data, name: str | None = None) -> None:
        """Configure a fresh Data store for this format."""
        match self:
            case Format.DEFAULT:
                data.prepare_new_page = no_op
                data.prepare_new_line = no_op
            case Format.SMALL:
                data.maximum_page_count = SMALL_PAGE_LIMIT
                data.default_line_count = SMALL_LINE_LIMIT
                data.default_column_count = SMALL_COLUMN_LIMIT
            case Format.ZPL:
                data.set_label(All(), ZPL_LABEL)
                data.maximum_page_count = ZPL_PAGE_LIMIT
                data.default_line_count = ZPL_DEFAULT_LINE_LIMIT
                data.default_column_count = ZPL_DEFAULT_COLUMN_LIMIT
                data.prepare_new_page = zpl_prepare_new_page
                data.prepare_new_line = zpl_prepare_new_line

        if name is not None:
            data.set_name(All(), name)
        logger.debug("Initialized %s palette (name=%r)", self.name, name)

    def write_palette(self, palette: Palette, buffer: BinaryIO) -> None:
        """
        Serialize a palette to a binary buffer.

        Only ZPL is supported, and it writes the fixed header and footer
        blocks. Level colors and names are not written yet.

        Raises:
            NotImplementedError: For formats without a writer
        """
        if self is not Format.ZPL:
            raise NotImplementedError(f"writing {self.value} palettes is not supported")

        buffer.write(ZPL_HEADER)
        buffer.write(ZPL_FOOTER_A)
        buffer.write(ZPL_FOOTER_B * ZPL_FOOTER_B_REPEAT)
        buffer.write(ZPL_FOOTER_C)
        buffer.write(ZPL_FOOTER_D * ZPL_FOOTER_D_REPEAT)
        buffer.write(ZPL_FOOTER_E)
        logger.debug("Wrote %s palette with %d cells", self.name, len(palette))

    def read_palette(self, buffer: BinaryIO) -> Palette:
        raise NotImplementedError(f"reading {self.value} palettes is not supported")
