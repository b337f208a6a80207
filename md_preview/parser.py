"""Line-oriented Markdown block parser."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial

from .constants import (
    BLOCKQUOTE_PREFIX,
    CODE_FENCE,
    HEADER_PATTERN,
    HORIZONTAL_RULE_PATTERN,
)
from .footnotes import match_definition, render_footnotes
from .inline import escape_html, format_inline
from .lists import (
    continues_list,
    list_close_tag,
    list_open_tag,
    match_list_item,
    render_list_item,
)
from .models import BlockState, LineCursor, ListKind, ParserContext, TableContext
from .tables import (
    TABLE_CLOSE,
    is_table_start,
    parse_alignment,
    parse_row,
    render_table_head,
    render_table_row,
)

logger = logging.getLogger(__name__)

Formatter = Callable[[str], str]

LIST_STATES = {
    BlockState.BULLET_LIST: ListKind.BULLET,
    BlockState.NUMBERED_LIST: ListKind.NUMBERED,
}


def is_horizontal_rule(line: str) -> bool:
    return bool(HORIZONTAL_RULE_PATTERN.match(line.strip()))


def is_paragraph_continuation(line: str | None) -> bool:
    """Check whether `line` would render as another plain paragraph line.

    A paragraph followed by such a line keeps its soft line break as ``<br>``.

    Args:
        line: The next raw line, or None at end of input.

    Returns:
        bool: False for blank lines and for lines that start a header,
            blockquote, list item, code fence, footnote definition, table row,
            or horizontal rule.

    Examples:
        is_paragraph_continuation("more text")  # True
        is_paragraph_continuation("## Title")  # False
    """
    if line is None:
        return False
    trimmed = line.strip()
    if trimmed == "":
        return False
    return not (
        HEADER_PATTERN.match(trimmed)
        or trimmed.startswith(BLOCKQUOTE_PREFIX)
        or match_list_item(line) is not None
        or trimmed.startswith(CODE_FENCE)
        or match_definition(trimmed) is not None
        or "|" in trimmed
        or is_horizontal_rule(trimmed)
    )


def _close_open_block(ctx: ParserContext) -> None:
    """Close an open list or table; code blocks only close on a fence."""
    if ctx.state in LIST_STATES:
        ctx.emit(list_close_tag(LIST_STATES[ctx.state]))
    elif ctx.state is BlockState.TABLE:
        ctx.emit(TABLE_CLOSE)
        ctx.table = None
    else:
        return
    logger.debug("Closed %s", ctx.state.name)
    ctx.state = BlockState.NONE


def close_open_blocks(ctx: ParserContext) -> None:
    """Force-close whatever block is still open at end of input.

    Examples:
        ctx = ParserContext(state=BlockState.CODE_BLOCK)
        close_open_blocks(ctx)  # emits "</code></pre>\\n"
    """
    if ctx.state is BlockState.CODE_BLOCK:
        ctx.emit("</code></pre>\n")
        ctx.state = BlockState.NONE
        return
    _close_open_block(ctx)


def _try_code_fence(ctx: ParserContext, line: str) -> bool:
    """Open or close a fenced code block.

    Args:
        ctx: Parser context to update.
        line: Current raw line.

    Returns:
        bool: True when the line is a fence and has been consumed.

    Examples:
        _try_code_fence(ParserContext(), "```python")  # True, opens a block
    """
    trimmed = line.strip()
    if not trimmed.startswith(CODE_FENCE):
        return False

    if ctx.state is BlockState.CODE_BLOCK:
        ctx.emit("</code></pre>\n")
        ctx.state = BlockState.NONE
        return True

    _close_open_block(ctx)
    language = trimmed[len(CODE_FENCE) :].strip()
    class_attr = f' class="language-{escape_html(language)}"' if language else ""
    ctx.emit(f"<pre><code{class_attr}>")
    ctx.state = BlockState.CODE_BLOCK
    return True


def _try_code_line(ctx: ParserContext, line: str) -> bool:
    if ctx.state is not BlockState.CODE_BLOCK:
        return False
    ctx.emit(escape_html(line) + "\n")
    return True


def _try_table(ctx: ParserContext, cursor: LineCursor, format_text: Formatter) -> bool:
    """Start, continue, or end a pipe table.

    A non-pipe, non-blank line closes the open table but is not consumed, so
    the remaining rules still apply to it. Blank lines are left to
    `_try_blank_line`.

    Args:
        ctx: Parser context to update.
        cursor: Line cursor; advanced past the separator row on table start.
        format_text: Inline formatter for cell contents.

    Returns:
        bool: True when the line was consumed as a header or body row.
    """
    trimmed = cursor.current.strip()

    if ctx.state is not BlockState.TABLE:
        next_line = cursor.peek_next_line()
        if not is_table_start(trimmed, next_line):
            return False
        _close_open_block(ctx)
        ctx.table = TableContext(headers=parse_row(trimmed), alignments=parse_alignment(next_line))
        ctx.emit(render_table_head(ctx.table, format_text))
        ctx.state = BlockState.TABLE
        logger.debug("Opened table with %d columns", ctx.table.width)
        cursor.advance()
        return True

    if "|" in trimmed:
        ctx.emit(render_table_row(parse_row(trimmed), ctx.table, format_text))
        return True

    if trimmed != "":
        _close_open_block(ctx)
    return False


def _try_header(ctx: ParserContext, line: str, format_text: Formatter) -> bool:
    trimmed = line.strip()
    match = HEADER_PATTERN.match(trimmed)
    if not match:
        return False

    level = len(match.group(1))
    _close_open_block(ctx)
    ctx.emit(f"<h{level}>{format_text(trimmed[level + 1 :].strip())}</h{level}>\n")
    return True


def _try_horizontal_rule(ctx: ParserContext, line: str) -> bool:
    if not is_horizontal_rule(line):
        return False
    _close_open_block(ctx)
    ctx.emit("<hr>\n")
    return True


def _try_blockquote(ctx: ParserContext, line: str, format_text: Formatter) -> bool:
    trimmed = line.strip()
    if not trimmed.startswith(BLOCKQUOTE_PREFIX):
        return False
    _close_open_block(ctx)
    content = format_text(trimmed[len(BLOCKQUOTE_PREFIX) :])
    ctx.emit(f"<blockquote><p>{content}</p></blockquote>\n")
    return True


def _try_list_item(ctx: ParserContext, line: str, format_text: Formatter) -> bool:
    """Emit a list item, opening or switching lists as needed.

    An item of the other list kind closes the open list and starts a new one,
    unless it is nested; nested items are flattened into the open list.

    Args:
        ctx: Parser context to update.
        line: Current raw line.
        format_text: Inline formatter for the item text.

    Returns:
        bool: True when the line is a list item.

    Examples:
        ctx = ParserContext()
        _try_list_item(ctx, "- [ ] todo", format_inline)  # opens <ul class="task-list">
    """
    item = match_list_item(line)
    if item is None:
        return False

    if ctx.state is not item.kind.state:
        if ctx.state in LIST_STATES and item.nested:
            logger.debug("Flattening nested %s item into %s", item.kind.name, ctx.state.name)
        else:
            _close_open_block(ctx)
            ctx.emit(list_open_tag(item))
            ctx.state = item.kind.state
            logger.debug("Opened %s", ctx.state.name)

    ctx.emit(render_list_item(item, format_text))
    return True


def _try_footnote_definition(ctx: ParserContext, line: str) -> bool:
    definition = match_definition(line)
    if definition is None:
        return False
    label, text = definition
    ctx.footnotes.define(label, text)
    logger.debug("Recorded footnote definition %r", label)
    return True


def _try_blank_line(ctx: ParserContext, cursor: LineCursor) -> bool:
    """Handle a blank line.

    Closes an open table. Closes an open list unless the next line continues
    the same kind of list. Emits a newline only when no list remains open.
    """
    if cursor.current.strip() != "":
        return False

    if ctx.state is BlockState.TABLE:
        _close_open_block(ctx)

    if ctx.state in LIST_STATES:
        if not continues_list(LIST_STATES[ctx.state], cursor.peek_next_line()):
            _close_open_block(ctx)

    if ctx.state not in LIST_STATES:
        ctx.emit("\n")
    return True


def _emit_paragraph(ctx: ParserContext, cursor: LineCursor, format_text: Formatter) -> None:
    _close_open_block(ctx)
    content = format_text(cursor.current.strip())
    if is_paragraph_continuation(cursor.peek_next_line()):
        ctx.emit(f"<p>{content}<br></p>\n")
    else:
        ctx.emit(f"<p>{content}</p>\n")


def _process_line(ctx: ParserContext, cursor: LineCursor, format_text: Formatter) -> None:
    line = cursor.current

    if _try_code_fence(ctx, line):
        return
    if _try_code_line(ctx, line):
        return
    if _try_table(ctx, cursor, format_text):
        return
    if _try_header(ctx, line, format_text):
        return
    if _try_horizontal_rule(ctx, line):
        return
    if _try_blockquote(ctx, line, format_text):
        return
    if _try_list_item(ctx, line, format_text):
        return
    if _try_footnote_definition(ctx, line):
        return
    if _try_blank_line(ctx, cursor):
        return
    _emit_paragraph(ctx, cursor, format_text)


def render_markdown(content: str) -> str:
    """Convert Markdown to an HTML fragment with the built-in block parser.

    Scans the document once, line by line, with one line of lookahead for
    tables, list continuation, and soft line breaks. Every block opened is
    closed, including constructs left open at end of input. Referenced
    footnotes are appended in a trailing ``<div class="footnotes">`` section.

    Args:
        content: Markdown source. Any string is accepted.

    Returns:
        str: HTML fragment. Never raises for malformed Markdown.

    Examples:
        render_markdown("# Title\\n\\nSome *text*.")
        render_markdown("| A | B |\\n|---|---|\\n| 1 | 2 |")
    """
    ctx = ParserContext()
    format_text = partial(format_inline, footnotes=ctx.footnotes)
    cursor = LineCursor(content.replace("\r\n", "\n").split("\n"))

    while cursor.has_line():
        _process_line(ctx, cursor, format_text)
        cursor.advance()

    close_open_blocks(ctx)
    ctx.emit(render_footnotes(ctx.footnotes, format_text))

    html = ctx.render()
    logger.debug("Block parser rendered %d lines into %d characters", cursor.index, len(html))
    return html
