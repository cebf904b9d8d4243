"""
Terminal rendering of palettes as rows of colored swatches.

Each occupied page is drawn as a block of lines, one swatch per column.
Swatches use rich background styles; page and line titles are colored with
simple_chalk and converted with Text.from_ansi.
"""

from __future__ import annotations

import io
import logging

import simple_chalk as chalk  # type: ignore[import-untyped]
from rich.console import Console
from rich.text import Text

from palette_types import Address, All, Line, Page, line_of
from rampgrid import Palette

logger = logging.getLogger(__name__)

SWATCH_WIDTH = 2
EMPTY_SWATCH = "· "  # No cell at the address
BLANK_SWATCH = "??"  # A cell with no color (placeholder or broken dependency)
SELECTED_SWATCH = "[]"
MARKED_SWATCH = "<>"


def _visible_pages(palette: Palette, selected: Address | None) -> list[int]:
    pages = {address.page for address in palette.addresses()}
    if selected is not None:
        pages.add(selected.page)
    return sorted(pages)


def _visible_extent(palette: Palette, page: int, selected: Address | None) -> tuple[int, int]:
    """Number of lines and columns worth drawing for a page."""
    occupied = palette.data.addresses_in(Page(page))
    if selected is not None and selected.page == page:
        occupied.append(selected)

    line_count = palette.data.get_line_count(Page(page))
    lines = max((address.line for address in occupied), default=0) + 1
    columns = max((address.column for address in occupied), default=0) + 1
    widest = max(palette.data.get_column_count(line_of(address)) for address in occupied) if occupied else 1

    # Fill out small pages so the grid shape is visible
    if line_count <= 16:
        lines = line_count
    if widest <= 16:
        columns = widest
    return min(lines, line_count), columns


def render_swatch(palette: Palette, address: Address, selected: Address | None, marked: Address | None) -> Text:
    """Render a single address as a two-character swatch."""
    cell = palette.data.get_cell(address)
    color = cell.color() if cell is not None else None

    if address == selected or address == marked:
        marker = SELECTED_SWATCH if address == selected else MARKED_SWATCH
        background = color.hex if color is not None else "grey23"
        return Text(marker, style=f"bold white on {background}")

    if cell is None:
        return Text(EMPTY_SWATCH, style="dim")
    if color is None:
        return Text(BLANK_SWATCH, style="red")
    return Text(" " * SWATCH_WIDTH, style=f"on {color.hex}")


def render_palette(
    palette: Palette,
    selected: Address | None = None,
    marked: Address | None = None,
) -> Text:
    """
    Render every occupied page of a palette.

    Args:
        palette: The palette to draw
        selected: Address drawn with the selection marker
        marked: Address drawn with the mark marker

    Returns:
        Rich Text with one row per line and one swatch per column
    """
    out = Text()
    header = palette.data.metadata.get(All())
    if header is not None and header.title():
        out.append(Text.from_ansi(chalk.bold(header.title())))
        out.append("\n")

    pages = _visible_pages(palette, selected)
    logger.debug("render_palette: %d pages", len(pages))

    for page in pages:
        meta = palette.data.metadata.get(Page(page))
        page_title = meta.title() if meta is not None else ""
        out.append(Text.from_ansi(chalk.cyan(f"Page {Page(page)} {page_title}".rstrip())))
        out.append("\n")

        lines, columns = _visible_extent(palette, page, selected)
        for line in range(lines):
            column_count = palette.data.get_column_count(Line(page, line))
            out.append(f"  {line:02X} ", style="dim")
            for column in range(min(columns, column_count)):
                out.append(render_swatch(palette, Address(page, line, column), selected, marked))

            label = palette.data.get_label(Line(page, line))
            if label:
                out.append(" ")
                out.append(Text.from_ansi(chalk.yellow(label)))
            out.append("\n")

    if not pages:
        out.append(Text.from_ansi(chalk.white("(empty palette)")))
        out.append("\n")
    return out


def describe_address(palette: Palette, address: Address) -> str:
    """One-line description of what is stored at an address."""
    cell = palette.data.get_cell(address)
    if cell is None:
        return f"{address}  (no cell)"
    color = cell.color()
    return f"{address}  {color.hex if color else '-------'}  order={cell.order}  {palette.data.display_name(address)}"


def render_text(palette: Palette, selected: Address | None = None, marked: Address | None = None) -> str:
    """Render a palette to an ANSI string."""
    console = Console(record=True, file=io.StringIO(), force_terminal=True, color_system="truecolor", width=120)
    console.print(render_palette(palette, selected, marked), end="")
    return console.export_text(styles=True)
