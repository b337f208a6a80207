"""Configuration loading and management."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class PreviewConfig:
    """Configuration for rendering Markdown previews.

    Attributes:
        use_external_pipeline: Whether standard Markdown is rendered with the
            CommonMark pipeline before falling back to the block parser.
        max_file_size: Maximum file size in bytes that will be rendered.
        log_level: Name of the logging level used by the CLI.

    Examples:
        PreviewConfig(use_external_pipeline=False, log_level="DEBUG")
    """

    use_external_pipeline: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    log_level: str = "WARNING"


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_file_size` must be a positive integer")
    """


# File name and the tables read from it, in lookup order
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "md-preview"),)),
    (".md-preview.toml", (("md-preview",), ("tool", "md-preview"))),
)

_MISSING = object()


def load_config(search_path: Path) -> PreviewConfig:
    """Load configuration from the nearest config file.

    Starting at `search_path` and moving up to the filesystem root, each
    directory is checked for the files in `CONFIG_SOURCES`. The first file
    holding a matching table wins. Files that cannot be read or parsed are
    ignored.

    Args:
        search_path: Directory where the lookup starts.

    Returns:
        PreviewConfig: The loaded configuration, or defaults when nothing is
            found.

    Raises:
        ConfigError: If a matching table is not a mapping or has unknown keys.

    Examples:
        load_config(Path("docs"))
    """
    directory = search_path.resolve()
    for candidate in (directory, *directory.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config_file = candidate / filename
            found = _read_table(config_file, table_paths)
            if found is _MISSING:
                continue
            table_path, raw_config = found
            return _build_config_from_raw(raw_config, config_file, table_path)
    return PreviewConfig()


def _read_table(config_file: Path, table_paths: tuple[tuple[str, ...], ...]) -> object:
    if not config_file.is_file():
        return _MISSING
    try:
        data = tomllib.loads(config_file.read_text(encoding="UTF-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return _MISSING

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is not _MISSING:
            return table_path, raw_config
    return _MISSING


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> PreviewConfig:
    if raw_config is None or raw_config == {}:
        return PreviewConfig()

    error_message = f"Invalid `[{'.'.join(table_path)}]` settings in {config_file}"
    if not isinstance(raw_config, dict):
        raise ConfigError(error_message)

    # TOML keys use dashes; dataclass fields use underscores
    settings = {key.replace("-", "_"): value for key, value in raw_config.items()}
    unknown = sorted(set(settings) - {field.name for field in fields(PreviewConfig)})
    if unknown:
        raise ConfigError(f"{error_message}: unknown keys {', '.join(unknown)}")
    return PreviewConfig(**settings)


def validate_config(config: PreviewConfig) -> None:
    """Validate a `PreviewConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If a flag is not a boolean, the size limit is not a
            positive integer, or the log level is unknown.

    Examples:
        validate_config(PreviewConfig(max_file_size=1024))
    """
    if not isinstance(config.use_external_pipeline, bool):
        raise ConfigError("`use_external_pipeline` must be a boolean")

    value = config.max_file_size
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("`max_file_size` must be an integer")
    if value <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")

    if not isinstance(config.log_level, str) or config.log_level.upper() not in LOG_LEVELS:
        raise ConfigError(f"`log_level` must be one of: {', '.join(LOG_LEVELS)}")


def apply_overrides(config: PreviewConfig, **overrides: object) -> PreviewConfig:
    """Apply override values to a `PreviewConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        PreviewConfig: New configuration with the provided overrides applied.

    Raises:
        TypeError: If an override name is not defined on `PreviewConfig`.

    Examples:
        updated = apply_overrides(config, use_external_pipeline=False)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> PreviewConfig:
    """Load, override, and validate configuration.

    Examples:
        config = build_config(Path.cwd(), log_level="DEBUG")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def configure_logging(config: PreviewConfig) -> None:
    """Send package log records to stderr at the configured level."""
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )
