"""
Demonstration scripts for the palette engine.
"""

from rampgrid import (
    Address,
    Bounds,
    Color,
    CopyColor,
    DeleteCell,
    Format,
    InsertColor,
    InsertRamp,
    InsertWatcher,
    Palette,
    PaletteError,
)
from swatch_render import render_text


def demo() -> None:
    """Demonstrate a live ramp between two colors."""
    palette = Palette("Demo", bounds=Bounds(page_count=1, line_count=16, column_count=16))

    palette.apply(InsertColor(Color.from_hex("#404088"), location=Address(0, 0, 0)))
    palette.apply(InsertColor(Color.from_hex("#00CC00"), location=Address(0, 0, 1)))
    palette.apply(InsertRamp(Address(0, 0, 0), Address(0, 0, 1), 6, location=Address(0, 1, 0)))

    print("=" * 40)
    print("Ramp between #404088 and #00CC00:")
    print("=" * 40)
    print(render_text(palette))
    print(palette.dump())
    print()

    palette.apply(InsertColor(Color.from_hex("#FFFFFF"), location=Address(0, 0, 1), overwrite=True))

    print("=" * 40)
    print("After changing the end color to #FFFFFF:")
    print("=" * 40)
    print(render_text(palette))
    print(palette.dump())


def history_demo() -> None:
    """Demonstrate undo and redo."""
    palette = Palette("History")
    palette.apply(InsertColor(Color(200, 40, 40)))
    palette.apply(InsertWatcher(Address(0, 0, 0)))
    palette.apply(CopyColor(Address(0, 0, 1)))

    print("=" * 40)
    print("Watcher and copy of a red cell:")
    print("=" * 40)
    print(palette.dump())
    print()

    palette.apply(DeleteCell(Address(0, 0, 0)))
    print("After deleting the source (watcher loses its color):")
    print(palette.dump())
    print()

    palette.undo()
    print("After undo (the restored source is a new cell):")
    print(palette.dump())
    print()

    palette.redo()
    print("After redo:")
    print(palette.dump())


def zpl_demo() -> None:
    """Demonstrate ZPL page and line labels."""
    palette = Palette("Zelda", Format.ZPL)
    palette.apply(InsertColor(Color(0, 0, 0), location=Address(0, 0, 0)))
    palette.apply(InsertColor(Color(255, 255, 255), location=Address(1, 4, 0)))
    palette.apply(InsertColor(Color(255, 0, 255), location=Address(513, 0, 0)))

    print("=" * 40)
    print("ZPL palette labels:")
    print("=" * 40)
    print(palette.dump())
    print()

    try:
        palette.apply(InsertColor(Color(0, 0, 0), location=Address(0, 14, 0)))
    except PaletteError as error:
        print(f"✗ Main page has 14 lines: {error}")


if __name__ == "__main__":
    demo()
    print()
    history_demo()
    print()
    zpl_demo()
