"""
Renders a Markdown file to HTML.
The HTML is printed to stdout, or written to a file with `--output`.
"""

from __future__ import annotations

from pathlib import Path

import click
from .config import ConfigError, build_config, configure_logging
from .filesystem import (
    check_file_size,
    get_max_file_size,
    normalize_filepath,
    normalize_output_path,
    read_markdown,
    write_html,
)
from .selector import CommonMarkPipeline, MarkdownEngine

__all__ = ["cli"]


@click.command()
@click.version_option(package_name="md-preview")
@click.option("-o", "--output", help="Write the HTML to this file instead of stdout")
@click.option(
    "--fallback-only",
    is_flag=True,
    help="Always use the built-in block parser",
)
@click.option("-v", "--verbose", is_flag=True, help="Log parser decisions to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    output: str | None = None,
    fallback_only: bool | None = None,
    verbose: bool = False,
):
    """
    Entry point for rendering a Markdown file to HTML.

    Args:
        filepath: Path to the Markdown file to render.
        output: Optional path of the HTML file to write.
        fallback_only: Skip the CommonMark pipeline entirely.
        verbose: Log at DEBUG level.

    Returns:
        None.

    Raises:
        click.BadParameter: If paths are invalid or the configuration is
            invalid.
        click.ClickException: If the file is too large or cannot be read or
            written.

    Examples:
        md-preview README.md -o README.html
    """
    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(filepath, base_dir)
        output_path = normalize_output_path(output, base_dir) if output else None
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(
            filepath.parent,
            use_external_pipeline=False if fallback_only else None,
            log_level="DEBUG" if verbose else None,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    configure_logging(config)

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        check_file_size(filepath, max_file_size)
        content = read_markdown(filepath)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    pipeline_factory = CommonMarkPipeline if config.use_external_pipeline else None
    engine = MarkdownEngine(pipeline_factory).load()
    html = engine.render(content)

    if output_path is None:
        click.echo(html, nl=False)
        return

    try:
        write_html(output_path, html)
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
