"""Tests for palette_cell module."""

import gc

import pytest

from palette_cell import BorrowError, Cell, Derived, Empty, Literal
from palette_types import Color

RED = Color(255, 0, 0)
BLUE = Color(0, 0, 255)


def first(colors: list[Color]) -> Color:
    return colors[0]


class TestExpressions:
    """Tests for Empty, Literal and Derived expressions."""

    def test_empty(self) -> None:
        """Empty has no color and order 0."""
        assert Empty().color() is None
        assert Empty().order == 0

    def test_literal(self) -> None:
        """Literal returns its color."""
        assert Literal(RED).color() == RED
        assert Literal(RED).order == 0

    def test_derived_follows_source(self) -> None:
        """A derived expression reads its source's current color."""
        source = Cell(Literal(RED))
        derived = Derived.over([source], first, "watch")
        assert derived.color() == RED

        source.replace(Literal(BLUE))
        assert derived.color() == BLUE

    def test_derived_order(self) -> None:
        """Order is one more than the deepest dependency."""
        source = Cell(Literal(RED))
        watcher = Cell(Derived.over([source], first))
        assert watcher.order == 1
        assert Derived.over([watcher, source], first).order == 2

    def test_derived_with_no_sources(self) -> None:
        """A derived expression over nothing is still first order."""
        assert Derived.over([], lambda colors: RED).order == 1

    def test_derived_of_empty_source(self) -> None:
        """A colorless dependency gives no color."""
        derived = Derived.over([Cell()], first)
        assert derived.color() is None

    def test_dropped_source_gives_no_color(self) -> None:
        """A dependency that no longer exists resolves to None."""
        source = Cell(Literal(RED))
        derived = Derived.over([source], first)
        del source
        gc.collect()
        assert derived.color() is None

    def test_detached_source_gives_no_color(self) -> None:
        """A detached dependency resolves to None even while referenced."""
        source = Cell(Literal(RED))
        derived = Derived.over([source], first)
        source.detach()
        assert derived.color() is None
        assert derived.dependencies() is None


class TestCell:
    """Tests for Cell storage."""

    def test_default_is_empty(self) -> None:
        """A new cell holds Empty."""
        cell = Cell()
        assert isinstance(cell.expr, Empty)
        assert cell.color() is None

    def test_replace_returns_previous(self) -> None:
        """replace hands back the old expression."""
        cell = Cell(Literal(RED))
        previous = cell.replace(Literal(BLUE))
        assert previous == Literal(RED)
        assert cell.color() == BLUE

    def test_detach(self) -> None:
        """detach leaves an Empty behind and returns the expression."""
        cell = Cell(Literal(RED))
        assert cell.detach() == Literal(RED)
        assert cell.detached
        assert cell.color() is None

    def test_cycle_resolves_to_none(self) -> None:
        """Cells depending on each other terminate with no color."""
        a = Cell()
        b = Cell(Derived.over([a], first))
        a.replace(Derived.over([b], first))

        assert a.color() is None
        assert b.color() is None
        assert a.order >= 1

    def test_replace_during_evaluation(self) -> None:
        """Writing a cell while it is being read is an error."""
        source = Cell(Literal(RED))
        cell = Cell()

        def clobber(colors: list[Color]) -> Color:
            cell.replace(Empty())
            return colors[0]

        cell.replace(Derived.over([source], clobber))
        with pytest.raises(BorrowError):
            cell.color()

        # The guard is released after the failure
        cell.replace(Literal(BLUE))
        assert cell.color() == BLUE
