"""Pipe table recognition and rendering."""

from __future__ import annotations

from collections.abc import Callable

from .constants import TABLE_SEPARATOR_PATTERN
from .models import Alignment, TableContext

TABLE_CLOSE = "</tbody>\n</table>\n"


def is_separator_row(line: str) -> bool:
    """Check whether a line is a table header separator such as ``|---|:-:|``.

    Examples:
        is_separator_row("| --- | :---: |")  # True
        is_separator_row("| a | b |")  # False
    """
    trimmed = line.strip()
    return bool(TABLE_SEPARATOR_PATTERN.match(trimmed)) and "-" in trimmed


def is_table_start(line: str, next_line: str | None) -> bool:
    """Check whether `line` is a table header followed by a separator row.

    Args:
        line: Candidate header line.
        next_line: The following line, or None at end of input.

    Returns:
        bool: True when `line` contains a pipe and `next_line` is a separator.
    """
    if "|" not in line or next_line is None:
        return False
    return is_separator_row(next_line)


def parse_row(line: str) -> list[str]:
    """Split a table row into trimmed cells.

    Empty cells are dropped, which removes the empty strings produced by
    leading and trailing pipes.

    Examples:
        parse_row("| a | b |")  # ["a", "b"]
    """
    return [cell.strip() for cell in line.split("|") if cell.strip() != ""]


def parse_alignment(separator: str) -> list[Alignment]:
    """Read per-column alignment from a separator row.

    Examples:
        parse_alignment("|:--|:-:|--:|")  # [LEFT, CENTER, RIGHT]
    """
    alignments = []
    for cell in parse_row(separator):
        if cell.startswith(":") and cell.endswith(":"):
            alignments.append(Alignment.CENTER)
        elif cell.endswith(":"):
            alignments.append(Alignment.RIGHT)
        else:
            alignments.append(Alignment.LEFT)
    return alignments


def normalize_row(cells: list[str], width: int) -> list[str]:
    """Fit a body row to the header width.

    Missing cells become empty strings and extra cells are dropped.
    """
    if len(cells) >= width:
        return cells[:width]
    return cells + [""] * (width - len(cells))


def _cell(tag: str, content: str, alignment: Alignment) -> str:
    style = "" if alignment is Alignment.LEFT else f' style="text-align: {alignment.value}"'
    return f"  <{tag}{style}>{content}</{tag}>\n"


def render_table_head(table: TableContext, format_cell: Callable[[str], str]) -> str:
    parts = ["<table>\n<thead>\n<tr>\n"]
    for index, header in enumerate(table.headers):
        parts.append(_cell("th", format_cell(header), table.alignment(index)))
    parts.append("</tr>\n</thead>\n<tbody>\n")
    return "".join(parts)


def render_table_row(
    cells: list[str], table: TableContext, format_cell: Callable[[str], str]
) -> str:
    parts = ["<tr>\n"]
    for index, cell in enumerate(normalize_row(cells, table.width)):
        parts.append(_cell("td", format_cell(cell), table.alignment(index)))
    parts.append("</tr>\n")
    return "".join(parts)
