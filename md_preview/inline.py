"""Inline formatting for a single line of Markdown text."""

from __future__ import annotations

import re

from .constants import (
    BADGE_PATTERN,
    BOLD_ASTERISK_PATTERN,
    BOLD_UNDERSCORE_PATTERN,
    FOOTNOTE_REFERENCE_PATTERN,
    HTML_ESCAPES,
    IMAGE_PATTERN,
    INLINE_CODE_PATTERN,
    ITALIC_ASTERISK_PATTERN,
    ITALIC_UNDERSCORE_PATTERN,
    LINK_ATTRIBUTES,
    LINK_PATTERN,
)
from .models import FootnoteTable


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters.

    Examples:
        escape_html("<a href='x'>")  # "&lt;a href=&#039;x&#039;&gt;"
    """
    for character, entity in HTML_ESCAPES:
        text = text.replace(character, entity)
    return text


def unescape_url(url: str) -> str:
    """Reverse `escape_html` for text placed in a URL attribute.

    Entities are restored in reverse order so ``&amp;lt;`` decodes to ``&lt;``
    rather than ``<``.
    """
    for character, entity in reversed(HTML_ESCAPES):
        url = url.replace(entity, character)
    return url


def footnote_reference_html(label: str) -> str:
    return (
        f'<sup><a href="#footnote-{label}" id="footnote-ref-{label}" '
        f'class="footnote-ref">{label}</a></sup>'
    )


def format_inline(text: str, footnotes: FootnoteTable | None = None) -> str:
    """Convert inline Markdown in `text` to an HTML fragment.

    Steps run in a fixed order: escaping, bold, italic, footnote references,
    badge images, images, links, and inline code. Each step only sees the
    output of the previous ones, so markup produced earlier is never escaped
    again. Unmatched markers stay in the output as escaped literal text.

    Args:
        text: Raw text from one logical line.
        footnotes: Table that records referenced footnote labels. References
            are still rendered when omitted, just not recorded.

    Returns:
        str: HTML fragment safe to concatenate into a block element.

    Examples:
        format_inline("**bold** and [link](https://example.com?a=1&b=2)")
        format_inline("see[^1]", FootnoteTable())
    """
    processed = escape_html(text)

    processed = BOLD_ASTERISK_PATTERN.sub(r"<strong>\1</strong>", processed)
    processed = BOLD_UNDERSCORE_PATTERN.sub(r"<strong>\1</strong>", processed)

    processed = ITALIC_ASTERISK_PATTERN.sub(r"<em>\1</em>", processed)
    processed = ITALIC_UNDERSCORE_PATTERN.sub(r"<em>\1</em>", processed)

    def _footnote(match: re.Match[str]) -> str:
        label = match.group(1)
        if footnotes is not None:
            footnotes.reference(unescape_url(label))
        return footnote_reference_html(label)

    processed = FOOTNOTE_REFERENCE_PATTERN.sub(_footnote, processed)

    def _badge(match: re.Match[str]) -> str:
        alt_text, image_url, link_url = match.groups()
        return (
            f'<a href="{unescape_url(link_url)}" {LINK_ATTRIBUTES}>'
            f'<img src="{unescape_url(image_url)}" alt="{alt_text}" /></a>'
        )

    processed = BADGE_PATTERN.sub(_badge, processed)

    def _image(match: re.Match[str]) -> str:
        alt_text, url = match.groups()
        return f'<img src="{unescape_url(url)}" alt="{alt_text}" />'

    processed = IMAGE_PATTERN.sub(_image, processed)

    def _link(match: re.Match[str]) -> str:
        label, url = match.groups()
        return f'<a href="{unescape_url(url)}" {LINK_ATTRIBUTES}>{label}</a>'

    processed = LINK_PATTERN.sub(_link, processed)

    # Code spans last; their contents were escaped in the first step
    processed = INLINE_CODE_PATTERN.sub(r"<code>\1</code>", processed)

    return processed
