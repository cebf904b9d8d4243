"""
Cells and the expressions they hold.

A Cell is the single owned storage unit at an address. Its Expression is
either empty, a literal color, or derived from other cells' colors. Derived
expressions hold weak references to their dependencies, so deleting a
dependency never keeps it alive; it just makes the dependent resolve to None.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import Callable

from palette_types import Color

# Maps the dependencies' colors (in dependency order) to a result color
Combinator = Callable[[list[Color]], Color]


@dataclass(frozen=True)
class Empty:
    """A placeholder expression with no color."""

    @property
    def order(self) -> int:
        return 0

    def color(self) -> Color | None:
        return None


@dataclass(frozen=True)
class Literal:
    """A zeroth-order expression holding a color directly."""

    value: Color

    @property
    def order(self) -> int:
        return 0

    def color(self) -> Color | None:
        return self.value


@dataclass(frozen=True, eq=False)
class Derived:
    """
    An Nth-order expression computed from other cells.

    Attributes:
        sources: Weak references to the dependency cells
        combine: Function from the resolved dependency colors to the result
        kind: Short description used for display ("watch", "ramp", ...)
    """

    sources: tuple[weakref.ref[Cell], ...]
    combine: Combinator
    kind: str = "derived"

    @classmethod
    def over(cls, cells: list[Cell], combine: Combinator, kind: str = "derived") -> Derived:
        return cls(tuple(weakref.ref(cell) for cell in cells), combine, kind)

    def dependencies(self) -> list[Cell] | None:
        """Resolve every source, or return None if any is gone."""
        cells: list[Cell] = []
        for ref in self.sources:
            cell = ref()
            if cell is None or cell.detached:
                return None
            cells.append(cell)
        return cells

    @property
    def order(self) -> int:
        cells = self.dependencies()
        if not cells:
            return 1
        return 1 + max(cell.order for cell in cells)

    def color(self) -> Color | None:
        cells = self.dependencies()
        if cells is None:
            return None

        colors: list[Color] = []
        for cell in cells:
            color = cell.color()
            if color is None:
                return None
            colors.append(color)
        return self.combine(colors)


Expression = Empty | Literal | Derived


class BorrowError(RuntimeError):
    """Raised when a cell's expression is replaced during its own evaluation."""


class Cell:
    """
    Wrapper around an Expression that allows it to be swapped in place.

    Only the data store holds a strong reference to a Cell. Anything else
    refers to it through `weakref.ref`, so identity is stable across
    overwrites but not across deletion.
    """

    __slots__ = ("_expr", "_reading", "detached", "__weakref__")

    def __init__(self, expr: Expression | None = None) -> None:
        self._expr: Expression = expr if expr is not None else Empty()
        self._reading = 0
        self.detached = False

    @property
    def expr(self) -> Expression:
        return self._expr

    def replace(self, expr: Expression) -> Expression:
        """Swap in a new expression and return the previous one."""
        if self._reading:
            raise BorrowError("cell expression replaced while it is being evaluated")
        previous = self._expr
        self._expr = expr
        return previous

    def detach(self) -> Expression:
        """Extract the expression, leaving an Empty placeholder behind."""
        self.detached = True
        return self.replace(Empty())

    @property
    def order(self) -> int:
        if self._reading:
            return 0
        self._reading += 1
        try:
            return self._expr.order
        finally:
            self._reading -= 1

    def color(self) -> Color | None:
        """Return the resolved color, or None if the expression has none."""
        if self._reading:
            # Re-entered through a dependency cycle
            return None
        self._reading += 1
        try:
            return self._expr.color()
        finally:
            self._reading -= 1

    def __repr__(self) -> str:
        return f"Cell({self._expr!r})"
