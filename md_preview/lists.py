"""Bullet, numbered, and task list recognition."""

from __future__ import annotations

from collections.abc import Callable

from .constants import BULLET_PATTERN, NUMBERED_PATTERN, TASK_PATTERN
from .models import ListItem, ListKind


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def match_list_item(line: str) -> ListItem | None:
    """Recognize a bullet, task, or numbered list item.

    Markers are matched on the stripped line; the indentation of the raw line
    decides whether the item is nested.

    Args:
        line: Raw line, including any leading whitespace.

    Returns:
        ListItem | None: The recognized item, or None for other lines.

    Examples:
        match_list_item("- [x] done")  # task item, checked
        match_list_item("  2. second")  # nested numbered item
    """
    trimmed = line.strip()
    indent = _indent(line)

    if BULLET_PATTERN.match(trimmed):
        task_match = TASK_PATTERN.match(trimmed)
        if task_match:
            check_state, task_text = task_match.groups()
            return ListItem(
                kind=ListKind.BULLET,
                text=task_text,
                indent=indent,
                is_task=True,
                is_checked=check_state.lower() == "x",
            )
        return ListItem(kind=ListKind.BULLET, text=trimmed[2:], indent=indent)

    if NUMBERED_PATTERN.match(trimmed):
        return ListItem(
            kind=ListKind.NUMBERED, text=NUMBERED_PATTERN.sub("", trimmed, count=1), indent=indent
        )

    return None


def continues_list(kind: ListKind, next_line: str | None) -> bool:
    """Check whether `next_line` is an item (top-level or nested) of `kind`.

    Used after a blank line to decide whether the open list stays open.
    """
    if next_line is None:
        return False
    item = match_list_item(next_line)
    return item is not None and item.kind is kind


def list_open_tag(item: ListItem) -> str:
    if item.kind is ListKind.NUMBERED:
        return "<ol>\n"
    if item.is_task:
        return '<ul class="task-list">\n'
    return "<ul>\n"


def list_close_tag(kind: ListKind) -> str:
    return "</ol>\n" if kind is ListKind.NUMBERED else "</ul>\n"


def render_list_item(item: ListItem, format_text: Callable[[str], str]) -> str:
    """Render one ``<li>`` line, with a disabled checkbox for task items."""
    content = format_text(item.text)
    if not item.is_task:
        return f"  <li>{content}</li>\n"

    checked_attr = " checked" if item.is_checked else ""
    checked_class = " task-list-item-checked" if item.is_checked else ""
    return (
        f'  <li class="task-list-item{checked_class}">'
        f'<input type="checkbox"{checked_attr} disabled> '
        f'<span class="task-text">{content}</span></li>\n'
    )
