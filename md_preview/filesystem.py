"""Filesystem helpers for md-preview."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MD_PREVIEW_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum size of a Markdown file that will be rendered.

    Args:
        default: Size in bytes used when `MD_PREVIEW_MAX_FILE_SIZE` is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MD_PREVIEW_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {raw_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}.")
    return limit


def contains_symlink(path: Path) -> bool:
    """True if `path` or any of its parents is a symlink."""
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def _reject_symlinks(path: Path) -> None:
    if contains_symlink(path):
        raise ValueError(f"Symlinks are not supported for security reasons: {path}")


def _require_inside(resolved: Path, base_dir: Path) -> None:
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")


def normalize_filepath(raw_path: str, base_dir: Path) -> Path:
    """Resolve the Markdown file to render.

    Args:
        raw_path: Path given on the command line, absolute or relative.
        base_dir: Directory the file must live under.

    Returns:
        Path: Absolute path to an existing regular Markdown file.

    Raises:
        ValueError: If the path goes through a symlink, does not exist, is not
            a regular file, lies outside `base_dir`, or has an extension not in
            `MARKDOWN_EXTENSIONS`.

    Examples:
        normalize_filepath("docs/README.md", Path.cwd())
    """
    path = Path(raw_path).expanduser()
    _reject_symlinks(path)

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Error resolving {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")
    _require_inside(resolved, base_dir)

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved} is not a Markdown file.\n"
            f"Supported extensions are: {', '.join(MARKDOWN_EXTENSIONS)}"
        )
    return resolved


def normalize_output_path(raw_path: str, base_dir: Path) -> Path:
    """Resolve the path the rendered HTML is written to.

    The file may not exist yet, but its directory must.

    Raises:
        ValueError: If the path goes through a symlink, its directory is
            missing, it names something other than a regular file, or it lies
            outside `base_dir`.
    """
    path = Path(raw_path).expanduser()
    _reject_symlinks(path)

    resolved = path.resolve()
    if not resolved.parent.is_dir():
        raise ValueError(f"{resolved.parent} is not a directory.")
    if resolved.exists() and not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")
    _require_inside(resolved, base_dir)
    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Stat `filepath` without following symlinks.

    Raises:
        IOError: If the path cannot be accessed or is not a regular file.
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error

    if stat.S_ISLNK(stat_result.st_mode):
        raise IOError(f"Symlinks are not supported: {filepath}.")
    if not stat.S_ISREG(stat_result.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    return stat_result


def check_file_size(filepath: Path, max_size: int) -> int:
    """Return the size of `filepath` in bytes.

    Raises:
        IOError: If the file cannot be inspected or is larger than `max_size`.

    Examples:
        check_file_size(Path("README.md"), get_max_file_size())
    """
    size = collect_file_stat(filepath).st_size
    if size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")
    return size


def read_markdown(filepath: Path) -> str:
    """Read a Markdown file as UTF-8 text.

    Raises:
        IOError: If the file cannot be opened or is not valid UTF-8.
    """
    try:
        with open(filepath, "r", encoding="UTF-8") as file:
            return file.read()
    except UnicodeDecodeError as error:
        raise IOError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error


def write_html(filepath: Path, html: str):
    """Write rendered HTML atomically.

    The content goes to a temporary file in the target directory, which then
    replaces `filepath`. Permissions of an existing target are kept.

    Raises:
        IOError: If the file cannot be written.

    Examples:
        write_html(Path("README.html"), "<h1>Title</h1>\\n")
    """
    permissions = None
    if filepath.exists():
        permissions = stat.S_IMODE(collect_file_stat(filepath).st_mode)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent, suffix=".tmp"
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(html)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        if permissions is not None:
            os.chmod(temp_path, permissions)
        os.replace(temp_path, filepath)
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
