"""Choose between the CommonMark pipeline and the built-in block parser.

The CommonMark pipeline (markdown-it-py) renders standard Markdown, but has
no support for footnotes, badge images, pipe tables, task lists, or single
newline soft breaks in the configuration used here. Documents using any of
those features are routed straight to `render_markdown`. The feature checks
are heuristics: a pipe in prose also counts as a table, which only means the
document is rendered by the block parser.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from typing import NamedTuple, Protocol

from markdown_it import MarkdownIt

from .constants import (
    BADGE_PATTERN,
    BLOCKQUOTE_PREFIX,
    BULLET_PATTERN,
    FOOTNOTE_REFERENCE_PATTERN,
    HEADER_PATTERN,
    NUMBERED_PATTERN,
)
from .exceptions import EngineNotLoadedError, PipelineError
from .parser import render_markdown

logger = logging.getLogger(__name__)

COMPLEX_IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\([^)]*[&?][^)]*\)")
TABLE_PATTERN = re.compile(r"\|.*\|")
TASK_LIST_PATTERN = re.compile(r"^[ \t]*[-*+]\s+\[[ xX]\]\s+", re.MULTILINE)
HORIZONTAL_RULE_LINE_PATTERN = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$", re.MULTILINE)


def has_footnotes(markdown: str) -> bool:
    return "[^" in markdown and bool(FOOTNOTE_REFERENCE_PATTERN.search(markdown))


def has_complex_images(markdown: str) -> bool:
    """Images with query strings, or images wrapped in links (badges)."""
    if "![" not in markdown:
        return False
    return bool(COMPLEX_IMAGE_PATTERN.search(markdown) or BADGE_PATTERN.search(markdown))


def has_tables(markdown: str) -> bool:
    return "|" in markdown and bool(TABLE_PATTERN.search(markdown))


def has_task_lists(markdown: str) -> bool:
    return bool(TASK_LIST_PATTERN.search(markdown)) or "- [" in markdown


def has_horizontal_rules(markdown: str) -> bool:
    return bool(HORIZONTAL_RULE_LINE_PATTERN.search(markdown))


def _is_structural(line: str) -> bool:
    return bool(
        HEADER_PATTERN.match(line)
        or line.startswith(BLOCKQUOTE_PREFIX)
        or BULLET_PATTERN.match(line)
        or NUMBERED_PATTERN.match(line)
    )


def has_consecutive_lines(markdown: str) -> bool:
    """Two adjacent non-blank lines, neither a header, quote, or list item.

    CommonMark joins such lines into one paragraph; the block parser keeps
    the line break.
    """
    lines = [line.strip() for line in markdown.split("\n")]
    for current, following in zip(lines, lines[1:]):
        if not current or not following:
            continue
        if _is_structural(current) or _is_structural(following):
            continue
        return True
    return False


class FeatureDetector(NamedTuple):
    name: str
    predicate: Callable[[str], bool]


FEATURE_DETECTORS: tuple[FeatureDetector, ...] = (
    FeatureDetector("footnotes", has_footnotes),
    FeatureDetector("complex_images", has_complex_images),
    FeatureDetector("tables", has_tables),
    FeatureDetector("task_lists", has_task_lists),
    FeatureDetector("horizontal_rules", has_horizontal_rules),
    FeatureDetector("consecutive_lines", has_consecutive_lines),
)


def detect_fallback_features(markdown: str) -> list[str]:
    """Names of every detector that matches `markdown`, in detector order."""
    return [detector.name for detector in FEATURE_DETECTORS if detector.predicate(markdown)]


def requires_fallback(markdown: str) -> str | None:
    """Return the first matching detector name, or None when CommonMark suffices.

    Examples:
        requires_fallback("text[^1]")  # "footnotes"
        requires_fallback("# Title")  # None
    """
    for detector in FEATURE_DETECTORS:
        if detector.predicate(markdown):
            return detector.name
    return None


class MarkdownPipeline(Protocol):
    """External Markdown to HTML converter."""

    async def process(self, markdown: str) -> str: ...


class CommonMarkPipeline:
    """markdown-it-py in CommonMark mode with raw HTML disabled.

    Raw HTML in the source is escaped and links with unsafe schemes are left
    unlinked by markdown-it's link validation.
    """

    def __init__(self, options: dict | None = None):
        self._md = MarkdownIt("commonmark", {"html": False, **(options or {})})

    async def process(self, markdown: str) -> str:
        try:
            return self._md.render(markdown)
        except Exception as error:
            raise PipelineError(error) from error


async def select_and_parse(markdown: str, pipeline: MarkdownPipeline | None = None) -> str:
    """Render `markdown` with the pipeline suited to its features.

    Args:
        markdown: Markdown source.
        pipeline: External pipeline to try for standard Markdown. When None,
            the block parser is always used.

    Returns:
        str: Rendered HTML. Pipeline failures are logged and the block
            parser's output is returned instead; nothing is raised.

    Examples:
        html = await select_and_parse(text, CommonMarkPipeline())
    """
    feature = requires_fallback(markdown)
    if feature is not None:
        logger.debug("Detected %s, using block parser", feature)
        return render_markdown(markdown)

    if pipeline is None:
        logger.debug("No external pipeline, using block parser")
        return render_markdown(markdown)

    try:
        html = str(await pipeline.process(markdown))
    except Exception as error:
        logger.warning("External pipeline failed, using block parser: %s", error)
        return render_markdown(markdown)

    logger.debug("External pipeline rendered %d characters", len(html))
    return html


class MarkdownEngine:
    """Loads the external pipeline once and renders documents with it.

    `load()` must be called before rendering. If the pipeline cannot be
    built, the engine still loads and renders everything with the block
    parser.

    Args:
        pipeline_factory: Builds the external pipeline; None disables it.

    Examples:
        engine = MarkdownEngine().load()
        html = asyncio.run(engine.parse_markdown("# Title"))
    """

    def __init__(
        self, pipeline_factory: Callable[[], MarkdownPipeline] | None = CommonMarkPipeline
    ):
        self._pipeline_factory = pipeline_factory
        self._pipeline: MarkdownPipeline | None = None
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def uses_external_pipeline(self) -> bool:
        return self._pipeline is not None

    def load(self) -> MarkdownEngine:
        if self._loaded:
            return self

        if self._pipeline_factory is not None:
            try:
                self._pipeline = self._pipeline_factory()
            except Exception as error:
                logger.warning("Failed to load external pipeline, using block parser: %s", error)
                self._pipeline = None
            else:
                logger.debug("Loaded external pipeline %s", type(self._pipeline).__name__)

        self._loaded = True
        return self

    async def parse_markdown(self, markdown: str) -> str:
        """Render `markdown`.

        Raises:
            EngineNotLoadedError: If `load()` has not been called.
        """
        if not self._loaded:
            raise EngineNotLoadedError()
        return await select_and_parse(markdown, self._pipeline)

    def render(self, markdown: str) -> str:
        """Synchronous `parse_markdown` for callers without an event loop."""
        return asyncio.run(self.parse_markdown(markdown))


def convert(markdown: str, use_external_pipeline: bool = True) -> str:
    """Render `markdown` to HTML from synchronous code.

    Examples:
        convert("Some **bold** text")
        convert("| A | B |\\n|---|---|", use_external_pipeline=False)
    """
    pipeline = CommonMarkPipeline() if use_external_pipeline else None
    return asyncio.run(select_and_parse(markdown, pipeline))
