"""
The palette data store.

Owns every Cell (keyed by Address), the per-region metadata table, the
allocation cursor and the palette bounds. Regions (pages and lines) are
initialized lazily: the first time an address inside one is prepared, the
default counts are installed and the format hooks get a chance to customize
the region.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Callable

from palette_cell import Cell, Expression
from palette_types import (
    COLUMN_MAX,
    LINE_MAX,
    PAGE_MAX,
    Address,
    AddressInUse,
    All,
    Color,
    EmptyAddress,
    InvalidAddress,
    Line,
    MaxCellLimitExceeded,
    Page,
    Reference,
    Selector,
    line_of,
    page_of,
)

logger = logging.getLogger(__name__)

# Called the first time a page or line region is prepared
PrepareHook = Callable[["Data", Reference], None]


def no_op(data: Data, group: Reference) -> None:
    """Default prepare hook."""


@dataclass
class MetaData:
    """Optional overrides and labels attached to an address, line, page or the palette."""

    format_label: str | None = None  # Generated by the palette format
    name: str | None = None  # Provided by the user
    line_count: int | None = None  # Only meaningful on Page selectors
    column_count: int | None = None  # Only meaningful on Line selectors
    initialized: bool = False  # Format hooks already ran for this region

    def title(self) -> str:
        """Name and label, e.g. '"Main" (Level 0)'. Empty if neither is set."""
        match (self.name, self.format_label):
            case (str() as name, str() as label):
                return f'"{name}" ({label})'
            case (None, str() as label):
                return f"({label})"
            case (str() as name, None):
                return f'"{name}"'
            case _:
                return ""

    def __str__(self) -> str:
        parts = [self.title()] if self.title() else []
        if self.line_count is not None:
            parts.append(f"[Lines: {self.line_count}]")
        if self.column_count is not None:
            parts.append(f"[Columns: {self.column_count}]")
        return " ".join(parts)


class Data:
    """
    Address-to-Cell map plus the metadata and bounds governing allocation.

    Attributes:
        cells: The only strong owner of every Cell
        metadata: Overrides and labels keyed by selector
        cursor: Where location-less allocation starts scanning
        maximum_page_count: Number of valid pages
        default_line_count: Lines per page unless a page overrides it
        default_column_count: Columns per line unless a line overrides it
        prepare_new_page: Hook run on first touch of a page
        prepare_new_line: Hook run on first touch of a line
    """

    def __init__(self) -> None:
        self.cells: dict[Address, Cell] = {}
        self.metadata: dict[Selector, MetaData] = {}
        self.cursor: Reference = All()
        self.maximum_page_count = PAGE_MAX
        self.default_line_count = LINE_MAX
        self.default_column_count = COLUMN_MAX
        self.prepare_new_page: PrepareHook = no_op
        self.prepare_new_line: PrepareHook = no_op

    def __len__(self) -> int:
        return len(self.cells)

    def is_empty(self) -> bool:
        return not self.cells

    # =========================================================================
    # Cells
    # =========================================================================

    def get_cell(self, address: Address) -> Cell | None:
        return self.cells.get(address)

    def color(self, address: Address) -> Color | None:
        cell = self.cells.get(address)
        return cell.color() if cell is not None else None

    def create_cell(self, address: Address) -> Cell:
        """
        Create an empty cell at the given address.

        Raises:
            AddressInUse: If a cell already exists there
            InvalidAddress: If the address is outside the palette bounds
        """
        if address in self.cells:
            raise AddressInUse(address)
        self.prepare_address(address)
        cell = Cell()
        self.cells[address] = cell
        return cell

    def remove_cell(self, address: Address) -> Expression:
        """
        Remove the cell at the given address and return its expression.

        The removed Cell is left holding an Empty placeholder, so anything
        still pointing at it resolves to no color.

        Raises:
            EmptyAddress: If there is no cell at the address
        """
        cell = self.cells.pop(address, None)
        if cell is None:
            raise EmptyAddress(address)
        return cell.detach()

    def addresses(self) -> list[Address]:
        """All occupied addresses in address order."""
        return sorted(self.cells)

    def addresses_in(self, selector: Selector) -> list[Address]:
        """Occupied addresses inside the selector, in address order."""
        ordered = self.addresses()
        low, high = selector.interval()
        return ordered[bisect_left(ordered, low) : bisect_right(ordered, high)]

    def _has_color(self, address: Address) -> bool:
        cell = self.cells.get(address)
        return cell is not None and cell.color() is not None

    # =========================================================================
    # Metadata
    # =========================================================================

    def meta(self, selector: Selector) -> MetaData:
        """Return the metadata for a selector, creating it on demand."""
        if selector not in self.metadata:
            self.metadata[selector] = MetaData()
        return self.metadata[selector]

    def get_label(self, selector: Selector) -> str | None:
        meta = self.metadata.get(selector)
        return meta.format_label if meta else None

    def set_label(self, selector: Selector, label: str) -> None:
        self.meta(selector).format_label = label

    def get_name(self, selector: Selector) -> str | None:
        meta = self.metadata.get(selector)
        return meta.name if meta else None

    def set_name(self, selector: Selector, name: str) -> None:
        self.meta(selector).name = name

    def get_line_count(self, page: Page) -> int:
        meta = self.metadata.get(page)
        if meta is None or meta.line_count is None:
            return self.default_line_count
        return meta.line_count

    def set_line_count(self, page: Page, line_count: int) -> None:
        self.meta(page).line_count = line_count

    def get_column_count(self, line: Line) -> int:
        meta = self.metadata.get(line)
        if meta is None or meta.column_count is None:
            return self.default_column_count
        return meta.column_count

    def set_column_count(self, line: Line, column_count: int) -> None:
        self.meta(line).column_count = column_count

    def set_cursor(self, reference: Reference) -> None:
        """
        Move the allocation cursor.

        Raises:
            InvalidAddress: If the reference's base address is out of bounds
        """
        self.prepare_address(reference.base_address())
        self.cursor = reference

    # =========================================================================
    # Regions and allocation
    # =========================================================================

    def prepare_address(self, address: Address) -> None:
        """
        Initialize the page and line containing the address, then bounds-check it.

        The page is prepared before the line, since line preparation may
        depend on the page's (possibly overridden) line count.

        Raises:
            InvalidAddress: If the address lies outside the palette bounds
        """
        if address.page >= self.maximum_page_count:
            raise InvalidAddress(address)

        page = page_of(address)
        page_meta = self.meta(page)
        if not page_meta.initialized:
            page_meta.initialized = True
            if page_meta.line_count is None:
                page_meta.line_count = self.default_line_count
            logger.debug("prepare_new_page: %s", page)
            self.prepare_new_page(self, page)

        if address.line >= self.get_line_count(page):
            raise InvalidAddress(address)

        line = line_of(address)
        line_meta = self.meta(line)
        if not line_meta.initialized:
            line_meta.initialized = True
            if line_meta.column_count is None:
                line_meta.column_count = self.default_column_count
            logger.debug("prepare_new_line: %s", line)
            self.prepare_new_line(self, line)

        if address.column >= self.get_column_count(line):
            raise InvalidAddress(address)

    def _step(self, address: Address) -> Address:
        """Advance one address using the counts of the region being left."""
        next_address = address.wrapped_next(
            self.maximum_page_count,
            self.get_line_count(page_of(address)),
            self.get_column_count(line_of(address)),
        )
        self.prepare_address(next_address)
        return next_address

    def first_free_address_after(self, start: Address) -> Address:
        """
        Return the first address at or after `start` that has no color.

        Raises:
            InvalidAddress: If `start` is out of bounds
            MaxCellLimitExceeded: If every address has a color
        """
        address = start
        self.prepare_address(address)

        while self._has_color(address):
            address = self._step(address)
            if address == start:
                raise MaxCellLimitExceeded()
        return address

    def find_targets(
        self,
        n: int,
        start: Address,
        overwrite: bool,
        exclude: list[Address] | None = None,
    ) -> list[Address]:
        """
        Choose n target addresses scanning forward from `start`.

        When overwriting, every non-excluded address is accepted whether or
        not it is occupied. Otherwise only addresses with no color qualify.
        Excluded addresses are never chosen.

        Args:
            n: Number of targets required
            start: First candidate address
            overwrite: Whether occupied addresses may be chosen
            exclude: Addresses that must never be chosen

        Returns:
            The targets in address order

        Raises:
            InvalidAddress: If `start` is out of bounds
            MaxCellLimitExceeded: If the scan wraps around before n are found
        """
        excluded = set(exclude or ())
        targets: set[Address] = set()
        address = start
        self.prepare_address(address)

        while len(targets) < n:
            if address not in excluded and (overwrite or not self._has_color(address)):
                targets.add(address)
                if len(targets) == n:
                    break
            address = self._step(address)
            if address == start:
                raise MaxCellLimitExceeded()

        logger.debug("find_targets: n=%d start=%s overwrite=%s -> %s", n, start, overwrite, sorted(targets))
        return sorted(targets)

    # =========================================================================
    # Display
    # =========================================================================

    def display_name(self, address: Address) -> str:
        meta = self.metadata.get(address)
        if meta is None:
            return "-"
        return meta.name or meta.format_label or "-"

    def dump(self) -> str:
        """
        Render the palette contents as text, grouped by page then line.

        Each occupied address is written as
        '<address>  <color>  order=<N>  <name-or-label-or-dash>', preceded
        by the page and line titles where they have a name or label.
        """
        out: list[str] = []
        header = self.metadata.get(All())
        title = header.title() if header else ""
        out.append(
            (f"{title} " if title else "")
            + f"[{len(self)} cells] [{self.maximum_page_count} pages] "
            + f"[default wrap {self.default_line_count}:{self.default_column_count}]"
        )

        current_page: Page | None = None
        current_line: Line | None = None
        for address in self.addresses():
            page = page_of(address)
            if page != current_page:
                current_page = page
                meta = self.metadata.get(page)
                if meta is not None and meta.title():
                    out.append(f"Page {page} {meta.title()}")
                else:
                    out.append(f"Page {page}")

            line = line_of(address)
            if line != current_line:
                current_line = line
                meta = self.metadata.get(line)
                if meta is not None and meta.title():
                    out.append(f"  Line {line} {meta.title()}")

            cell = self.cells[address]
            color = cell.color()
            out.append(
                f"    {address}  {color.hex if color else '-------'}  "
                f"order={cell.order}  {self.display_name(address)}"
            )

        return "\n".join(out)

    def __str__(self) -> str:
        return self.dump()
