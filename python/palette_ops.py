"""
Reversible palette operations.

Every operation's `apply(data)` mutates the Data store and returns a
HistoryEntry whose `undo` is itself an operation restoring every address the
operation touched. Composite operations (Sequence, Repeat, and the multi-cell
writes of InsertRamp) stop at the first failing step and leave the steps
already completed in place; there is no automatic rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from palette_cell import Cell, Derived, Empty, Expression, Literal
from palette_data import Data
from palette_types import (
    Address,
    CannotSetDerivedColor,
    Color,
    DependencyOverwrite,
    EmptyAddress,
    InvalidAddress,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationInfo:
    """Describes an applied operation."""

    name: str
    details: str | None = None


@dataclass
class HistoryEntry:
    """The record of one applied operation and the operation that reverses it."""

    info: OperationInfo
    undo: Operation


@dataclass
class OperationHistory:
    """Undo and redo stacks of history entries."""

    undo_entries: list[HistoryEntry] = field(default_factory=list)
    redo_entries: list[HistoryEntry] = field(default_factory=list)


# =============================================================================
# Target and source resolution
# =============================================================================


def starting_address(data: Data, location: Address | None) -> Address:
    """Explicit location, or the first free address after the cursor."""
    if location is not None:
        return location
    return data.first_free_address_after(data.cursor.base_address())


def check_dependencies(location: Address | None, overwrite: bool, sources: list[Address]) -> None:
    """Refuse an explicit overwrite aimed at one of the operation's own sources."""
    if overwrite and location is not None and location in sources:
        raise DependencyOverwrite(location)


def check_derived(data: Data, target: Address, overwrite: bool) -> None:
    """Refuse to put a color over a derived cell unless overwriting."""
    cell = data.get_cell(target)
    if not overwrite and cell is not None and cell.order != 0:
        raise CannotSetDerivedColor(target)


def get_source(data: Data, address: Address, make_sources: bool, undo: Undo) -> Cell:
    """
    Return the cell a derived expression will depend on.

    If the address is empty and `make_sources` is set, an empty placeholder
    cell is created and its creation recorded in the undo.

    Raises:
        InvalidAddress: If the address is empty and `make_sources` is off
    """
    cell = data.get_cell(address)
    if cell is not None:
        return cell
    if not make_sources:
        raise InvalidAddress(address)
    cell = data.create_cell(address)
    undo.record(address, None)
    return cell


def get_target(data: Data, address: Address, undo: Undo) -> Cell:
    """Return the cell at the address, creating (and recording) it if absent."""
    cell = data.get_cell(address)
    if cell is not None:
        return cell
    cell = data.create_cell(address)
    undo.record(address, None)
    return cell


def set_target(data: Data, address: Address, expr: Expression, undo: Undo) -> None:
    """Store an expression at the address, recording what it replaced."""
    cell = get_target(data, address, undo)
    previous = cell.replace(expr)
    undo.record(address, previous)


# =============================================================================
# Undo
# =============================================================================


@dataclass
class Undo:
    """
    Restores a saved set of addresses.

    Holds at most one record per address: the first one wins. An address
    first recorded as absent (None) is therefore removed again on replay,
    no matter what later steps of the same operation wrote there.
    """

    undoing: OperationInfo | None = None
    saved: dict[Address, Expression | None] = field(default_factory=dict)

    def record(self, address: Address, expr: Expression | None) -> None:
        if address not in self.saved:
            self.saved[address] = expr

    def info(self) -> OperationInfo:
        return OperationInfo("Undo", self.undoing.name if self.undoing else None)

    def apply(self, data: Data) -> HistoryEntry:
        redo = Undo(self.undoing)

        for address, saved in self.saved.items():
            cell = data.get_cell(address)
            match (saved, cell):
                case (None, None):
                    raise AssertionError(f"null record in Undo for {address}")
                case (None, Cell()):
                    # The cell was added
                    redo.record(address, data.remove_cell(address))
                case (_, None):
                    # The cell was deleted
                    cell = data.create_cell(address)
                    cell.replace(saved)
                    redo.record(address, None)
                case _:
                    # The cell was modified
                    redo.record(address, cell.replace(saved))

        logger.debug("Undo.apply: restored %d addresses", len(self.saved))
        return HistoryEntry(self.undoing or self.info(), redo)


# =============================================================================
# Simple operations
# =============================================================================


@dataclass(frozen=True)
class InsertCell:
    """Inserts an empty cell."""

    location: Address | None = None
    overwrite: bool = False

    def info(self) -> OperationInfo:
        return OperationInfo("Insert Cell", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        start = starting_address(data, self.location)
        target = data.find_targets(1, start, self.overwrite)[0]

        undo = Undo(self.info())
        set_target(data, target, Empty(), undo)
        return HistoryEntry(self.info(), undo)


@dataclass(frozen=True)
class InsertColor:
    """
    Inserts a literal color.

    Example:
        palette.apply(InsertColor(Color(12, 50, 78)))
        palette.color(Address(0, 0, 0))  # Color(12, 50, 78)
    """

    color: Color
    location: Address | None = None
    overwrite: bool = False

    def info(self) -> OperationInfo:
        return OperationInfo("Insert Color", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        start = starting_address(data, self.location)
        target = data.find_targets(1, start, self.overwrite)[0]
        check_derived(data, target, self.overwrite)

        undo = Undo(self.info())
        set_target(data, target, Literal(self.color), undo)
        return HistoryEntry(self.info(), undo)


@dataclass(frozen=True)
class DeleteCell:
    """Removes the cell at an address."""

    address: Address

    def info(self) -> OperationInfo:
        return OperationInfo("Delete Cell", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        undo = Undo(self.info())
        undo.record(self.address, data.remove_cell(self.address))
        return HistoryEntry(self.info(), undo)


@dataclass(frozen=True)
class CopyColor:
    """Copies the current color of one cell into a new literal cell."""

    source: Address
    location: Address | None = None
    overwrite: bool = False

    def info(self) -> OperationInfo:
        return OperationInfo("Copy Color", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        check_dependencies(self.location, self.overwrite, [self.source])
        start = starting_address(data, self.location)
        target = data.find_targets(1, start, self.overwrite, [self.source])[0]

        color = data.color(self.source)
        if color is None:
            raise EmptyAddress(self.source)
        check_derived(data, target, self.overwrite)

        undo = Undo(self.info())
        set_target(data, target, Literal(color), undo)
        return HistoryEntry(self.info(), undo)


# =============================================================================
# Derived operations
# =============================================================================


def _first(colors: list[Color]) -> Color:
    return colors[0]


def _ramp_step(amount: float):
    def combine(colors: list[Color]) -> Color:
        return Color.lerp(colors[0], colors[1], amount)

    return combine


@dataclass(frozen=True)
class InsertWatcher:
    """Inserts a first-order cell that always shows another cell's color."""

    watching: Address
    location: Address | None = None
    overwrite: bool = False
    make_sources: bool = False

    def info(self) -> OperationInfo:
        return OperationInfo("Insert Watcher", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        check_dependencies(self.location, self.overwrite, [self.watching])
        start = starting_address(data, self.location)
        target = data.find_targets(1, start, self.overwrite, [self.watching])[0]

        undo = Undo(self.info())
        source = get_source(data, self.watching, self.make_sources, undo)
        set_target(data, target, Derived.over([source], _first, "watch"), undo)
        return HistoryEntry(self.info(), undo)


@dataclass(frozen=True)
class InsertRamp:
    """
    Creates a linear RGB ramp of derived cells between two source cells.

    The i-th of `count` generated cells (i = 1..count) sits at ratio
    i / (count + 1) between `start` and `end`. The ramp stays live: changing
    either source changes the ramp on the next read.

    Example:
        palette.apply(InsertColor(Color(0, 0, 0)))
        palette.apply(InsertColor(Color(150, 100, 50)))
        palette.apply(InsertRamp(Address(0, 0, 0), Address(0, 0, 1), 5))
        palette.color(Address(0, 0, 4))  # Color(75, 50, 25)
    """

    start: Address
    end: Address
    count: int
    location: Address | None = None
    overwrite: bool = False
    make_sources: bool = False

    def info(self) -> OperationInfo:
        return OperationInfo("Insert Ramp", repr(self))

    def apply(self, data: Data) -> HistoryEntry:
        sources = [self.start, self.end]
        check_dependencies(self.location, self.overwrite, sources)
        first = starting_address(data, self.location)
        targets = data.find_targets(self.count, first, self.overwrite, sources)

        undo = Undo(self.info())
        src_start = get_source(data, self.start, self.make_sources, undo)
        src_end = get_source(data, self.end, self.make_sources, undo)

        for i, address in enumerate(targets):
            amount = (i + 1) / (self.count + 1)
            expr = Derived.over([src_start, src_end], _ramp_step(amount), "ramp")
            set_target(data, address, expr, undo)

        return HistoryEntry(self.info(), undo)


CreateRamp = InsertRamp


# =============================================================================
# Combining operations
# =============================================================================


@dataclass
class Sequence:
    """
    Applies operations in order.

    The undo is a Sequence of the sub-operations' undos in the same order.
    Undos that touch the same address therefore replay earliest first.
    A failing step aborts the rest; earlier steps are not rolled back.
    """

    operations: list[Operation]

    def info(self) -> OperationInfo:
        return OperationInfo("Sequence", ", ".join(op.info().name for op in self.operations))

    def apply(self, data: Data) -> HistoryEntry:
        undos: list[Operation] = []
        for operation in self.operations:
            entry = operation.apply(data)
            undos.append(entry.undo)
        return HistoryEntry(self.info(), Sequence(undos))


@dataclass
class Repeat:
    """Applies one operation `count` times."""

    operation: Operation
    count: int = 2

    def info(self) -> OperationInfo:
        return OperationInfo("Repeat", f"{self.operation.info().name} x{self.count}")

    def apply(self, data: Data) -> HistoryEntry:
        undos: list[Operation] = []
        for _ in range(self.count):
            entry = self.operation.apply(data)
            undos.append(entry.undo)
        return HistoryEntry(self.info(), Sequence(undos))


Operation = (
    InsertCell
    | InsertColor
    | DeleteCell
    | CopyColor
    | InsertWatcher
    | InsertRamp
    | Sequence
    | Repeat
    | Undo
)
