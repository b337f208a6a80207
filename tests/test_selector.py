from __future__ import annotations

import asyncio
import logging

import pytest

from md_preview.exceptions import EngineNotLoadedError, PipelineError
from md_preview.parser import render_markdown
from md_preview.selector import (
    FEATURE_DETECTORS,
    CommonMarkPipeline,
    MarkdownEngine,
    convert,
    detect_fallback_features,
    has_complex_images,
    has_consecutive_lines,
    has_footnotes,
    has_horizontal_rules,
    has_tables,
    has_task_lists,
    requires_fallback,
    select_and_parse,
)

STANDARD_MARKDOWN = "# Title\n\nSome *text* and a [link](https://example.com).\n"


class RecordingPipeline:
    def __init__(self, result: str = "<p>external</p>\n"):
        self.result = result
        self.calls: list[str] = []

    async def process(self, markdown: str) -> str:
        self.calls.append(markdown)
        return self.result


class FailingPipeline:
    async def process(self, markdown: str) -> str:
        raise RuntimeError("pipeline exploded")


def test_detector_names_and_order():
    assert [detector.name for detector in FEATURE_DETECTORS] == [
        "footnotes",
        "complex_images",
        "tables",
        "task_lists",
        "horizontal_rules",
        "consecutive_lines",
    ]


def test_has_footnotes():
    assert has_footnotes("text[^1]")
    assert not has_footnotes("text [^] and [1]")


def test_has_complex_images():
    assert has_complex_images("![badge](https://img.shields.io/x.svg?style=flat)")
    assert has_complex_images("[![b](x.png)](https://example.com)")
    assert not has_complex_images("![cat](cat.png)")
    assert not has_complex_images("[link](https://example.com/?a=1)")


def test_has_tables():
    assert has_tables("| A | B |")
    assert has_tables("prose with a | pipe | in it")
    assert not has_tables("a | b")
    assert not has_tables("a |\n| b")


def test_has_task_lists():
    assert has_task_lists("- [ ] todo")
    assert has_task_lists("intro\n\n- [x] done")
    assert has_task_lists("intro\n\n* [x] done")
    assert has_task_lists("intro\n  + [ ] nested")
    assert not has_task_lists("- plain item")


def test_has_horizontal_rules():
    assert has_horizontal_rules("a\n\n---\n\nb")
    assert has_horizontal_rules("***")
    assert not has_horizontal_rules("--")
    assert not has_horizontal_rules("a --- b")


def test_has_consecutive_lines():
    assert has_consecutive_lines("line one\nline two")
    assert not has_consecutive_lines("# Title\ntext")
    assert not has_consecutive_lines("- a\n- b")
    assert not has_consecutive_lines("1. a\ntext")
    assert not has_consecutive_lines("> quote\ntext")
    assert not has_consecutive_lines("one\n\ntwo")


def test_requires_fallback_reports_first_match():
    assert requires_fallback(STANDARD_MARKDOWN) is None
    assert requires_fallback("| A |\n|---|\ntext[^1]") == "footnotes"
    assert detect_fallback_features("| A | B |\n|---|---|\ntext[^1]") == [
        "footnotes",
        "tables",
        "consecutive_lines",
    ]


def test_standard_markdown_uses_external_pipeline():
    pipeline = RecordingPipeline()

    html = asyncio.run(select_and_parse(STANDARD_MARKDOWN, pipeline))

    assert html == "<p>external</p>\n"
    assert pipeline.calls == [STANDARD_MARKDOWN]


def test_table_and_footnote_route_to_block_parser():
    pipeline = RecordingPipeline()
    markdown = "| A | B |\n|---|---|\n| 1 | 2[^n] |\n\n[^n]: note"

    html = asyncio.run(select_and_parse(markdown, pipeline))

    assert pipeline.calls == []
    assert html == render_markdown(markdown)
    assert html.index("</table>") < html.index('<div class="footnotes">')


def test_star_task_list_after_first_line_routes_to_block_parser():
    markdown = "Intro\n\n* [x] done\n* [ ] todo"

    html = asyncio.run(select_and_parse(markdown, CommonMarkPipeline()))

    assert requires_fallback(markdown) == "task_lists"
    assert html == render_markdown(markdown)
    assert '<ul class="task-list">' in html


def test_pipeline_failure_falls_back_to_block_parser(caplog):
    with caplog.at_level(logging.WARNING, logger="md_preview.selector"):
        html = asyncio.run(select_and_parse(STANDARD_MARKDOWN, FailingPipeline()))

    assert html == render_markdown(STANDARD_MARKDOWN)
    assert "pipeline exploded" in caplog.text


def test_without_pipeline_block_parser_is_used():
    assert asyncio.run(select_and_parse(STANDARD_MARKDOWN)) == render_markdown(STANDARD_MARKDOWN)


def test_commonmark_pipeline_renders_markdown():
    html = asyncio.run(CommonMarkPipeline().process("# Title\n\n*text*"))

    assert html == "<h1>Title</h1>\n<p><em>text</em></p>\n"


def test_commonmark_pipeline_escapes_raw_html():
    html = asyncio.run(CommonMarkPipeline().process("<script>alert(1)</script>"))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_commonmark_pipeline_wraps_errors():
    pipeline = CommonMarkPipeline()

    with pytest.raises(PipelineError):
        asyncio.run(pipeline.process(None))


def test_engine_requires_load():
    engine = MarkdownEngine()

    assert not engine.is_loaded
    with pytest.raises(EngineNotLoadedError):
        asyncio.run(engine.parse_markdown("# Title"))


def test_engine_renders_after_load():
    engine = MarkdownEngine().load()

    assert engine.is_loaded
    assert engine.uses_external_pipeline
    assert engine.render("# Title") == "<h1>Title</h1>\n"


def test_engine_load_is_idempotent():
    calls = []

    def factory():
        calls.append(1)
        return RecordingPipeline()

    engine = MarkdownEngine(factory)
    engine.load()
    engine.load()

    assert calls == [1]


def test_engine_falls_back_when_pipeline_cannot_load(caplog):
    def broken_factory():
        raise ImportError("markdown_it missing")

    with caplog.at_level(logging.WARNING, logger="md_preview.selector"):
        engine = MarkdownEngine(broken_factory).load()

    assert engine.is_loaded
    assert not engine.uses_external_pipeline
    assert engine.render(STANDARD_MARKDOWN) == render_markdown(STANDARD_MARKDOWN)
    assert "markdown_it missing" in caplog.text


def test_engine_without_pipeline():
    engine = MarkdownEngine(pipeline_factory=None).load()

    assert not engine.uses_external_pipeline
    assert engine.render("- [x] done").startswith('<ul class="task-list">')


def test_convert():
    assert convert("# Title") == "<h1>Title</h1>\n"
    assert convert("line one\nline two", use_external_pipeline=False) == (
        "<p>line one<br></p>\n<p>line two</p>\n"
    )
