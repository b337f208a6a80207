"""Footnote definitions and the trailing footnote section."""

from __future__ import annotations

from collections.abc import Callable

from .constants import FOOTNOTE_BACKREF, FOOTNOTE_DEFINITION_PATTERN
from .inline import escape_html
from .models import FootnoteTable


def match_definition(line: str) -> tuple[str, str] | None:
    """Parse a ``[^label]: text`` definition line.

    Returns:
        tuple[str, str] | None: The label and definition text, or None.

    Examples:
        match_definition("[^note]: See the appendix.")  # ("note", "See the appendix.")
    """
    match = FOOTNOTE_DEFINITION_PATTERN.match(line.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def render_footnotes(footnotes: FootnoteTable, format_text: Callable[[str], str]) -> str:
    """Render referenced footnotes in first-reference order.

    Definitions that were never referenced, and references without a
    (non-empty) definition, are skipped. Returns an empty string when nothing
    would be listed.

    Args:
        footnotes: Collected definitions and references.
        format_text: Inline formatter applied to each definition.

    Returns:
        str: A ``<div class="footnotes">`` section, or ``""``.
    """
    # Snapshot: formatting a definition may record further references
    entries = []
    for label in footnotes.referenced():
        text = footnotes.definitions.get(label)
        # A reference alone is not enough; it needs a non-empty definition
        if not text:
            continue
        anchor = escape_html(label)
        entries.append(
            f'<li id="footnote-{anchor}">{format_text(text)} '
            f'<a href="#footnote-ref-{anchor}" class="footnote-backref">{FOOTNOTE_BACKREF}</a></li>\n'
        )

    if not entries:
        return ""
    return '<div class="footnotes">\n<hr>\n<ol>\n' + "".join(entries) + "</ol>\n</div>\n"
