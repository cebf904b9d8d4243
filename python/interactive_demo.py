"""
Interactive palette editor.
Display a palette and edit it with keyboard commands.
"""

import logging
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from rampgrid import (
    Address,
    Color,
    DeleteCell,
    Format,
    InsertColor,
    InsertRamp,
    InsertWatcher,
    Line,
    Operation,
    Page,
    Palette,
    PaletteError,
)
from swatch_render import describe_address, render_palette, render_text

logger = logging.getLogger(__name__)

SAMPLE_COLORS = ["#404088", "#00CC00", "#FFFFFF", "#CC3333", "#000000", "#FFCC00"]
RAMP_COUNT = 4


class PaletteEditor:
    """Keyboard-driven editor over a Palette."""

    def __init__(self, palette: Palette, samples: list[str] | None = None) -> None:
        self.palette = palette
        self.samples = [Color.from_hex(text) for text in (samples or SAMPLE_COLORS)]
        self.sample_index = 0
        self.selected = Address(0, 0, 0)
        self.marked: Address | None = None
        self.console = Console()
        self.status_message = "Ready"

    @property
    def next_sample(self) -> Color:
        return self.samples[self.sample_index % len(self.samples)]

    def generate_display(self) -> Panel:
        """Generate the current display with palette and status."""
        status = Text()
        status.append("Selected: ", style="bold")
        status.append(describe_address(self.palette, self.selected) + "\n")
        status.append("Marked: ", style="bold")
        status.append(f"{self.marked if self.marked is not None else '-'}\n")
        status.append("Next color: ", style="bold")
        status.append(f"{self.next_sample.hex}  ", style=f"on {self.next_sample.hex}")
        status.append("\n\n")

        status.append(render_palette(self.palette, self.selected, self.marked))
        status.append("\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  Arrows - Move selection    [ ] - Previous/next page\n")
        status.append("  I - Insert color    W - Insert watcher    R - Ramp from mark\n")
        status.append("  M - Mark    X - Delete    U - Undo    Y - Redo    Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="Palette Editor", border_style="green", width=100)

    # =========================================================================
    # Actions
    # =========================================================================

    def move(self, lines: int, columns: int) -> None:
        """Move the selection within the current page, clamped to its bounds."""
        data = self.palette.data
        page = self.selected.page
        line = min(max(self.selected.line + lines, 0), data.get_line_count(Page(page)) - 1)
        column_count = data.get_column_count(Line(page, line))
        column = min(max(self.selected.column + columns, 0), column_count - 1)
        self.selected = Address(page, line, column)
        self.status_message = f"Selected {self.selected}"

    def change_page(self, step: int) -> None:
        page = self.selected.page + step
        if not 0 <= page < self.palette.data.maximum_page_count:
            self.status_message = f"✗ No page {page}"
            return
        self.selected = Address(page, 0, 0)
        self.status_message = f"Page {Page(page)}"

    def attempt(self, operation: Operation) -> bool:
        """Apply an operation, reporting failures in the status line."""
        try:
            self.palette.apply(operation)
        except PaletteError as error:
            self.status_message = f"✗ {operation.info().name} failed: {error}"
            return False
        self.status_message = f"✓ {operation.info().name}"
        return True

    def insert_color(self) -> None:
        if self.attempt(InsertColor(self.next_sample, location=self.selected, overwrite=True)):
            self.sample_index += 1

    def insert_watcher(self) -> None:
        self.attempt(InsertWatcher(self.selected))

    def insert_ramp(self) -> None:
        if self.marked is None:
            self.status_message = "✗ Mark a cell with M before building a ramp"
            return
        self.attempt(InsertRamp(self.marked, self.selected, RAMP_COUNT))

    def mark(self) -> None:
        self.marked = self.selected
        self.status_message = f"Marked {self.marked}"

    def delete(self) -> None:
        self.attempt(DeleteCell(self.selected))

    def undo(self) -> None:
        if not self.palette.can_undo():
            self.status_message = "Nothing to undo"
            return
        self.palette.undo()
        self.status_message = "✓ Undo"

    def redo(self) -> None:
        if not self.palette.can_redo():
            self.status_message = "Nothing to redo"
            return
        self.palette.redo()
        self.status_message = "✓ Redo"

    def handle_key(self, key: str) -> bool:
        """Handle one key press. Returns False when the editor should quit."""
        if key == readchar.key.UP:
            self.move(-1, 0)
        elif key == readchar.key.DOWN:
            self.move(1, 0)
        elif key == readchar.key.LEFT:
            self.move(0, -1)
        elif key == readchar.key.RIGHT:
            self.move(0, 1)
        elif key == '[':
            self.change_page(-1)
        elif key == ']':
            self.change_page(1)
        elif key.lower() == 'q':
            self.status_message = "Quitting..."
            return False
        elif key.lower() == 'i':
            self.insert_color()
        elif key.lower() == 'w':
            self.insert_watcher()
        elif key.lower() == 'r':
            self.insert_ramp()
        elif key.lower() == 'm':
            self.mark()
        elif key.lower() == 'x':
            self.delete()
        elif key.lower() == 'u':
            self.undo()
        elif key.lower() == 'y':
            self.redo()
        else:
            self.status_message = f"Unknown key: {repr(key)}"
        return True

    def run(self) -> None:
        """Run the editor until Q is pressed."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())
                    key = readchar.readkey()
                    if not self.handle_key(key):
                        live.update(self.generate_display())
                        break

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


LAYOUTS = dict(
    blank = dict(format=Format.SMALL, colors=[]),
    ramp = dict(format=Format.SMALL, colors=["#404088", "#00CC00"], ramp=6),
    zpl = dict(format=Format.ZPL, colors=["#000000", "#FFFFFF"], ramp=14),
)


def build_palette(layout: str) -> Palette:
    """Build a palette from one of the named sample layouts."""
    settings = LAYOUTS[layout]
    palette = Palette(layout, settings["format"])
    for text in settings["colors"]:
        palette.apply(InsertColor(Color.from_hex(text)))
    if "ramp" in settings:
        palette.apply(InsertRamp(Address(0, 0, 0), Address(0, 0, 1), settings["ramp"]))
    return palette


def main(palette: Palette) -> None:
    """Run the interactive editor on a palette."""
    editor = PaletteEditor(palette)
    editor.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == 'sublime':
        # Running from IDE - just render the initial state
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

        print('Running from IDE - rendering initial state')
        print()

        palette = build_palette('ramp')
        print(render_text(palette))
        print(palette.dump())
    else:
        main(build_palette(sys.argv[1] if len(sys.argv) > 1 else 'ramp'))
