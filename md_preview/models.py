"""Data models for md-preview."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Generic, TypeVar

from .constants import NESTED_INDENT

T = TypeVar("T")


class BlockState(Enum):
    """Block context the parser is currently inside.

    Paragraphs and blockquotes are emitted in full on their own line, so they
    never remain open across lines.

    Attributes:
        NONE: No multi-line construct is open.
        CODE_BLOCK: Inside a fenced code block.
        BULLET_LIST: Inside a ``<ul>`` (plain or task list).
        NUMBERED_LIST: Inside an ``<ol>``.
        TABLE: Inside a table body.
    """

    NONE = auto()
    CODE_BLOCK = auto()
    BULLET_LIST = auto()
    NUMBERED_LIST = auto()
    TABLE = auto()


class Alignment(Enum):
    """Horizontal alignment of a table column."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ListKind(Enum):
    """Kind of list marker."""

    BULLET = auto()
    NUMBERED = auto()

    @property
    def state(self) -> BlockState:
        return BlockState.BULLET_LIST if self is ListKind.BULLET else BlockState.NUMBERED_LIST


class OrderedSet(Generic[T]):
    """Append-only set that iterates in insertion order."""

    def __init__(self):
        self._items: list[T] = []
        self._seen: set[T] = set()

    def add(self, item: T) -> bool:
        """Add `item`; return True when it was not present before."""
        if item in self._seen:
            return False
        self._seen.add(item)
        self._items.append(item)
        return True

    def __contains__(self, item: object) -> bool:
        return item in self._seen

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({self._items!r})"


@dataclass
class FootnoteTable:
    """Footnote definitions plus the labels referenced from body text.

    Attributes:
        definitions: Definition text keyed by label; the last definition wins.
        references: Referenced labels in first-reference order.
    """

    definitions: dict[str, str] = field(default_factory=dict)
    references: OrderedSet[str] = field(default_factory=OrderedSet)

    def define(self, label: str, text: str) -> None:
        self.definitions[label] = text

    def reference(self, label: str) -> None:
        self.references.add(label)

    def referenced(self) -> list[str]:
        """Snapshot of referenced labels in first-reference order."""
        return list(self.references)


@dataclass
class TableContext:
    """Header cells and column alignments of the open table.

    Attributes:
        headers: Header cells in column order.
        alignments: Alignment per column, parsed from the separator row.
    """

    headers: list[str] = field(default_factory=list)
    alignments: list[Alignment] = field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.headers)

    def alignment(self, index: int) -> Alignment:
        if index < len(self.alignments):
            return self.alignments[index]
        return Alignment.LEFT


@dataclass(frozen=True)
class ListItem:
    """A single recognized list item.

    Attributes:
        kind: Bullet or numbered marker.
        text: Item text with the marker (and task box) removed.
        indent: Number of leading whitespace characters on the raw line.
        is_task: Whether the item carries a ``[ ]``/``[x]`` task box.
        is_checked: Whether the task box is ticked.
    """

    kind: ListKind
    text: str
    indent: int = 0
    is_task: bool = False
    is_checked: bool = False

    @property
    def nested(self) -> bool:
        return self.indent >= NESTED_INDENT


class LineCursor:
    """Index over document lines with one line of lookahead.

    Examples:
        cursor = LineCursor("a\\nb".split("\\n"))
        cursor.current  # "a"
        cursor.peek_next_line()  # "b"
    """

    def __init__(self, lines: list[str]):
        self._lines = lines
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> str:
        return self._lines[self._index]

    def has_line(self) -> bool:
        return self._index < len(self._lines)

    def peek_next_line(self) -> str | None:
        """Return the line after the current one, or None at end of input."""
        next_index = self._index + 1
        if next_index < len(self._lines):
            return self._lines[next_index]
        return None

    def advance(self) -> None:
        self._index += 1


@dataclass
class ParserContext:
    """Mutable state threaded through one `render_markdown` call.

    Attributes:
        state: The single open block context.
        html: Emitted HTML fragments, in order.
        table: Header and alignment data while `state` is `TABLE`.
        footnotes: Footnote definitions and references seen so far.
    """

    state: BlockState = BlockState.NONE
    html: list[str] = field(default_factory=list)
    table: TableContext | None = None
    footnotes: FootnoteTable = field(default_factory=FootnoteTable)

    def emit(self, fragment: str) -> None:
        self.html.append(fragment)

    def render(self) -> str:
        return "".join(self.html)

