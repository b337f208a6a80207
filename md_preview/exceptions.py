"""Package-specific exception types."""

from __future__ import annotations


class MarkdownPreviewError(Exception):
    """Base class for md-preview errors."""


class EngineNotLoadedError(MarkdownPreviewError, RuntimeError):
    """Raised when a `MarkdownEngine` is used before `load()` was called."""

    def __init__(self):
        super().__init__("Markdown engine not loaded yet")


class PipelineError(MarkdownPreviewError):
    """Raised when the external Markdown pipeline fails to render a document.

    Args:
        cause: Exception raised by the pipeline.
    """

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"External pipeline failed: {cause!r}")
