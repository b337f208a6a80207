"""Constants used across the md-preview package."""

from __future__ import annotations

import re

# Block patterns (matched against stripped lines unless noted)
CODE_FENCE = "```"
HEADER_PATTERN = re.compile(r"^(#{1,6})\s+")
HORIZONTAL_RULE_PATTERN = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
BLOCKQUOTE_PREFIX = "> "
FOOTNOTE_DEFINITION_PATTERN = re.compile(r"^\[\^([^\]]+)\]:\s*(.*)$")

# Lists
BULLET_PATTERN = re.compile(r"^[-*+]\s")
NUMBERED_PATTERN = re.compile(r"^\d+\.\s")
TASK_PATTERN = re.compile(r"^[-*+]\s+\[([ xX])\]\s+(.*)$")
NESTED_INDENT = 2

# Tables
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|?[\s\-|:]+\|?$")

# Inline patterns, applied in this order after escaping
BOLD_ASTERISK_PATTERN = re.compile(r"\*\*(.*?)\*\*")
BOLD_UNDERSCORE_PATTERN = re.compile(r"__(.+?)__")
ITALIC_ASTERISK_PATTERN = re.compile(r"\*([^*\s][^*]*[^*\s]|\S)\*")
ITALIC_UNDERSCORE_PATTERN = re.compile(r"_([^_\s][^_]*[^_\s]|\S)_")
FOOTNOTE_REFERENCE_PATTERN = re.compile(r"\[\^([^\]]+)\]")
BADGE_PATTERN = re.compile(r"\[!\[([^\]]*)\]\(([^)]+)\)\]\(([^)]+)\)")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")

# HTML escaping; order matters so `&` is escaped first and unescaped last
HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)

LINK_ATTRIBUTES = 'target="_blank" rel="noopener noreferrer"'
FOOTNOTE_BACKREF = "↩"

# Configuration defaults
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".txt")
