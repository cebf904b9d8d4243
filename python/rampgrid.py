"""
Palette with live derived colors and undoable operations.

The Palette wraps a Data store configured by a Format and keeps an optional
undo/redo history of applied operations. Most callers only need this module:

    palette = Palette("Example", Format.SMALL)
    palette.apply(InsertColor(Color(0, 0, 0)))
    palette.apply(InsertColor(Color(150, 100, 50)))
    palette.apply(InsertRamp(Address(0, 0, 0), Address(0, 0, 1), 5))
    palette.undo()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from palette_cell import Cell, Derived, Empty, Expression, Literal
from palette_data import Data, MetaData
from palette_formats import Format
from palette_ops import (
    CopyColor,
    CreateRamp,
    DeleteCell,
    HistoryEntry,
    InsertCell,
    InsertColor,
    InsertRamp,
    InsertWatcher,
    Operation,
    OperationHistory,
    OperationInfo,
    Repeat,
    Sequence,
    Undo,
)
from palette_types import (
    COLUMN_MAX,
    LINE_MAX,
    PAGE_MAX,
    Address,
    AddressInUse,
    All,
    CannotSetDerivedColor,
    Color,
    DependencyOverwrite,
    EmptyAddress,
    InvalidAddress,
    Line,
    MaxCellLimitExceeded,
    Page,
    PaletteError,
    Reference,
    Selector,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Address", "All", "Line", "Page", "Reference", "Selector",
    "PAGE_MAX", "LINE_MAX", "COLUMN_MAX",
    "Color", "Cell", "Expression", "Empty", "Literal", "Derived",
    "Data", "MetaData", "Format", "Bounds", "Palette",
    "Operation", "OperationInfo", "HistoryEntry", "OperationHistory", "Undo",
    "InsertCell", "InsertColor", "DeleteCell", "CopyColor",
    "InsertWatcher", "InsertRamp", "CreateRamp", "Sequence", "Repeat",
    "PaletteError", "AddressInUse", "EmptyAddress", "InvalidAddress",
    "MaxCellLimitExceeded", "CannotSetDerivedColor", "DependencyOverwrite",
]


@dataclass(frozen=True)
class Bounds:
    """Overrides for the format's palette bounds. None keeps the format's value."""

    page_count: int | None = None
    line_count: int | None = None
    column_count: int | None = None

    def apply_to(self, data: Data) -> None:
        if self.page_count is not None:
            data.maximum_page_count = self.page_count
        if self.line_count is not None:
            data.default_line_count = self.line_count
        if self.column_count is not None:
            data.default_column_count = self.column_count


class Palette:
    """
    A palette of colors addressed by (page, line, column).

    Args:
        name: Stored as the palette-wide name
        format: Format used to initialize labels, bounds and hooks
        history: Whether to keep an undo/redo history
        bounds: Optional bound overrides applied after the format
    """

    def __init__(
        self,
        name: str | None = None,
        format: Format = Format.DEFAULT,
        history: bool = True,
        bounds: Bounds | None = None,
    ) -> None:
        self.format = format
        self.data = Data()
        format.initialize(self.data, name)
        if bounds is not None:
            bounds.apply_to(self.data)
        self.history: OperationHistory | None = OperationHistory() if history else None

    # =========================================================================
    # Operations and history
    # =========================================================================

    def apply(self, operation: Operation) -> None:
        """
        Apply an operation, recording it for undo and clearing the redo stack.

        If the operation raises, nothing is recorded. Any writes it completed
        before failing remain in the palette.
        """
        entry = operation.apply(self.data)
        logger.info("apply: %s", entry.info.name)
        if self.history is not None:
            self.history.undo_entries.append(entry)
            self.history.redo_entries.clear()

    def undo(self) -> None:
        """
        Reverse the most recently applied operation. No-op if there is none.

        Raises:
            RuntimeError: If the palette keeps no history
        """
        if self.history is None:
            raise RuntimeError("undo not supported: palette has no history")
        if not self.history.undo_entries:
            return
        entry = self.history.undo_entries.pop()
        redo = entry.undo.apply(self.data)
        logger.info("undo: %s", entry.info.name)
        self.history.redo_entries.append(redo)

    def redo(self) -> None:
        """
        Re-apply the most recently undone operation. No-op if there is none.

        Raises:
            RuntimeError: If the palette keeps no history
        """
        if self.history is None:
            raise RuntimeError("redo not supported: palette has no history")
        if not self.history.redo_entries:
            return
        entry = self.history.redo_entries.pop()
        undo = entry.undo.apply(self.data)
        logger.info("redo: %s", entry.info.name)
        self.history.undo_entries.append(undo)

    def can_undo(self) -> bool:
        return self.history is not None and bool(self.history.undo_entries)

    def can_redo(self) -> bool:
        return self.history is not None and bool(self.history.redo_entries)

    # =========================================================================
    # Queries
    # =========================================================================

    def color(self, address: Address) -> Color | None:
        return self.data.color(address)

    def __len__(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        return self.data.is_empty()

    def addresses(self) -> list[Address]:
        return self.data.addresses()

    @property
    def cursor(self) -> Reference:
        return self.data.cursor

    @cursor.setter
    def cursor(self, reference: Reference) -> None:
        self.data.set_cursor(reference)

    def get_label(self, selector: Selector) -> str | None:
        return self.data.get_label(selector)

    def set_label(self, selector: Selector, label: str) -> None:
        self.data.set_label(selector, label)

    def get_name(self, selector: Selector) -> str | None:
        return self.data.get_name(selector)

    def set_name(self, selector: Selector, name: str) -> None:
        self.data.set_name(selector, name)

    def dump(self) -> str:
        return self.data.dump()

    def __str__(self) -> str:
        return self.data.dump()
