from __future__ import annotations

import pytest

from md_preview.inline import format_inline
from md_preview.lists import (
    continues_list,
    list_close_tag,
    list_open_tag,
    match_list_item,
    render_list_item,
)
from md_preview.models import ListItem, ListKind


@pytest.mark.parametrize("marker", ["-", "*", "+"])
def test_bullet_markers(marker: str):
    assert match_list_item(f"{marker} item") == ListItem(kind=ListKind.BULLET, text="item")


def test_numbered_items():
    assert match_list_item("1. first") == ListItem(kind=ListKind.NUMBERED, text="first")
    assert match_list_item("10. tenth").text == "tenth"


def test_nesting_comes_from_indentation():
    top = match_list_item(" - one space")
    nested = match_list_item("  - two spaces")
    nested_number = match_list_item("    3. deep")

    assert top.indent == 1 and not top.nested
    assert nested.indent == 2 and nested.nested
    assert nested_number.kind is ListKind.NUMBERED and nested_number.nested


@pytest.mark.parametrize(
    ("line", "checked"),
    [("- [x] done", True), ("* [X] Done", True), ("+ [ ] todo", False)],
)
def test_task_items(line: str, checked: bool):
    item = match_list_item(line)

    assert item.is_task
    assert item.is_checked is checked
    assert item.kind is ListKind.BULLET


def test_task_box_needs_text_after_it():
    item = match_list_item("- [x]")

    assert item is not None
    assert not item.is_task
    assert item.text == "[x]"


@pytest.mark.parametrize("line", ["-no space", "1.no space", "plain text", "", "#- heading"])
def test_non_items(line: str):
    assert match_list_item(line) is None


def test_continues_list():
    assert continues_list(ListKind.BULLET, "- next")
    assert continues_list(ListKind.BULLET, "  - nested next")
    assert continues_list(ListKind.NUMBERED, "  2. nested next")
    assert not continues_list(ListKind.BULLET, "1. other kind")
    assert not continues_list(ListKind.NUMBERED, "text")
    assert not continues_list(ListKind.NUMBERED, None)


def test_open_and_close_tags():
    assert list_open_tag(ListItem(kind=ListKind.BULLET, text="a")) == "<ul>\n"
    assert list_open_tag(ListItem(kind=ListKind.BULLET, text="a", is_task=True)) == (
        '<ul class="task-list">\n'
    )
    assert list_open_tag(ListItem(kind=ListKind.NUMBERED, text="a")) == "<ol>\n"
    assert list_close_tag(ListKind.BULLET) == "</ul>\n"
    assert list_close_tag(ListKind.NUMBERED) == "</ol>\n"


def test_render_plain_item_formats_inline():
    item = ListItem(kind=ListKind.BULLET, text="**bold**")

    assert render_list_item(item, format_inline) == "  <li><strong>bold</strong></li>\n"


def test_render_task_items():
    checked = ListItem(kind=ListKind.BULLET, text="done", is_task=True, is_checked=True)
    unchecked = ListItem(kind=ListKind.BULLET, text="todo", is_task=True)

    assert render_list_item(checked, format_inline) == (
        '  <li class="task-list-item task-list-item-checked">'
        '<input type="checkbox" checked disabled> <span class="task-text">done</span></li>\n'
    )
    assert render_list_item(unchecked, format_inline) == (
        '  <li class="task-list-item">'
        '<input type="checkbox" disabled> <span class="task-text">todo</span></li>\n'
    )
