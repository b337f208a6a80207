"""
md-preview: Markdown to HTML rendering for live previews.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    md-preview README.md -o README.html

Library Usage:
    from md_preview import MarkdownEngine, render_markdown

    html = render_markdown("# Title\\n\\n| A | B |\\n|---|---|\\n| 1 | 2 |")

    engine = MarkdownEngine().load()
    html = engine.render("Some *standard* Markdown.")
"""

from .exceptions import EngineNotLoadedError, MarkdownPreviewError, PipelineError
from .inline import escape_html, format_inline
from .models import BlockState, FootnoteTable, ParserContext
from .parser import render_markdown
from .selector import (
    FEATURE_DETECTORS,
    CommonMarkPipeline,
    MarkdownEngine,
    convert,
    detect_fallback_features,
    select_and_parse,
)

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "render_markdown",
    "format_inline",
    "select_and_parse",
    "convert",
    "MarkdownEngine",
    "CommonMarkPipeline",
    # Feature detection
    "FEATURE_DETECTORS",
    "detect_fallback_features",
    # Data models
    "BlockState",
    "FootnoteTable",
    "ParserContext",
    # Utilities
    "escape_html",
    # Exceptions
    "EngineNotLoadedError",
    "MarkdownPreviewError",
    "PipelineError",
    # Version
    "__version__",
]
