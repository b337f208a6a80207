from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from md_preview.filesystem import (
    check_file_size,
    collect_file_stat,
    contains_symlink,
    get_max_file_size,
    normalize_filepath,
    normalize_output_path,
    read_markdown,
    write_html,
)


def test_get_max_file_size_uses_default(monkeypatch):
    monkeypatch.delenv("MD_PREVIEW_MAX_FILE_SIZE", raising=False)
    assert get_max_file_size(default=123) == 123


def test_get_max_file_size_reads_env(monkeypatch):
    monkeypatch.setenv("MD_PREVIEW_MAX_FILE_SIZE", "2048")
    assert get_max_file_size(default=1) == 2048


def test_get_max_file_size_rejects_non_integer(monkeypatch):
    monkeypatch.setenv("MD_PREVIEW_MAX_FILE_SIZE", "invalid")
    with pytest.raises(ValueError, match="Invalid value"):
        get_max_file_size()


def test_get_max_file_size_rejects_non_positive(monkeypatch):
    monkeypatch.setenv("MD_PREVIEW_MAX_FILE_SIZE", "0")
    with pytest.raises(ValueError, match="positive integer"):
        get_max_file_size()


def test_normalize_filepath_missing_file(tmp_path: Path):
    with pytest.raises(ValueError, match="does not exist"):
        normalize_filepath(str(tmp_path / "missing.md"), tmp_path)


def test_normalize_filepath_rejects_directory(tmp_path: Path):
    directory = tmp_path / "docs.md"
    directory.mkdir()

    with pytest.raises(ValueError, match="not a regular file"):
        normalize_filepath(str(directory), tmp_path)


def test_normalize_filepath_accepts_markdown_extensions(tmp_path: Path):
    target = tmp_path / "README.MD"
    target.write_text("# Title\n", encoding="utf-8")

    assert normalize_filepath(str(target), tmp_path) == target.resolve()


def test_normalize_output_path_allows_new_file(tmp_path: Path):
    assert normalize_output_path(str(tmp_path / "out.html"), tmp_path) == (
        tmp_path / "out.html"
    ).resolve()


def test_normalize_output_path_requires_existing_directory(tmp_path: Path):
    with pytest.raises(ValueError, match="not a directory"):
        normalize_output_path(str(tmp_path / "missing" / "out.html"), tmp_path)


def test_normalize_output_path_rejects_outside_base(tmp_path: Path):
    base = tmp_path / "base"
    base.mkdir()

    with pytest.raises(ValueError, match="outside of the working directory"):
        normalize_output_path(str(tmp_path / "out.html"), base)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_contains_symlink_detects_parent_links(tmp_path: Path):
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    try:
        os.symlink(real, link, target_is_directory=True)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    assert contains_symlink(link / "child.md")
    assert not contains_symlink(real / "child.md")


def test_collect_file_stat_rejects_directory(tmp_path: Path):
    with pytest.raises(IOError, match="not a regular file"):
        collect_file_stat(tmp_path)


def test_check_file_size(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("12345", encoding="utf-8")

    assert check_file_size(target, 5) == 5
    with pytest.raises(IOError, match="maximum allowed size"):
        check_file_size(target, 4)


def test_read_markdown_rejects_invalid_utf8(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_bytes(b"\xff\xfe")

    with pytest.raises(IOError, match="Invalid UTF-8"):
        read_markdown(target)


def test_write_html_preserves_permissions(tmp_path: Path):
    target = tmp_path / "doc.html"
    target.write_text("old", encoding="utf-8")
    os.chmod(target, 0o640)

    write_html(target, "<p>new</p>\n")

    assert target.read_text(encoding="utf-8") == "<p>new</p>\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert [path.name for path in tmp_path.iterdir()] == ["doc.html"]
