"""
Renders a styled preview of a Markdown file through an external renderer.
The renderer's ANSI output is normalized and printed, or dumped as JSON with
byte-offset style ranges.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Hashable
from dataclasses import asdict
from pathlib import Path

import click

from .config import ConfigError, build_config
from .filesystem import is_markdown_file, normalize_filepath, safe_read
from .models import DocumentInfo, PreviewContent
from .projection import project_ansi
from .session import PreviewManager

__all__ = ["cli"]

logger = logging.getLogger(__name__)


class ConsoleHost:
    """`PreviewHost` that keeps the rendered content for printing."""

    def __init__(self, path: Path):
        self.path = path
        self.content: PreviewContent | None = None
        self.status: str | None = None

    def get_document(self, document: Hashable) -> DocumentInfo | None:
        return DocumentInfo(path=self.path) if document == self.path else None

    def open_preview(self, title: str, placeholder: str) -> Hashable:
        logger.debug("Opening %s", title)
        return title

    def replace_content(self, target: Hashable, content: PreviewContent) -> None:
        self.content = content

    def close_preview(self, target: Hashable) -> None:
        logger.debug("Closing %s", target)

    def set_status(self, message: str) -> None:
        logger.info(message)
        self.status = message


def style_content(content: PreviewContent) -> str:
    """Re-apply the byte-offset style ranges as terminal styling.

    Args:
        content: Projected preview.

    Returns:
        str: Text with click styles around every range.
    """
    data = content.plain_text.encode("utf-8", "surrogatepass")
    pieces: list[str] = []
    cursor = 0
    for style_range in sorted(content.ranges, key=lambda item: item.start):
        if style_range.start < cursor:
            continue
        pieces.append(data[cursor : style_range.start].decode("utf-8", "surrogatepass"))
        pieces.append(
            click.style(
                data[style_range.start : style_range.end].decode("utf-8", "surrogatepass"),
                fg=style_range.foreground,
                bold=style_range.bold or None,
                italic=style_range.italic or None,
                underline=style_range.underline or None,
            )
        )
        cursor = style_range.end
    pieces.append(data[cursor:].decode("utf-8", "surrogatepass"))
    return "".join(pieces)


def content_to_json(content: PreviewContent) -> str:
    payload = {
        "text": content.plain_text,
        "ranges": [asdict(style_range) for style_range in content.ranges],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


async def _render_preview(
    host: ConsoleHost, manager: PreviewManager
) -> tuple[PreviewContent | None, str | None]:
    """Open, render and close one preview; return the content or the failure status."""
    try:
        rendered = await manager.open(host.path)
        failure = None if rendered else host.status
    finally:
        await manager.close_all()
    return (host.content if rendered else None), failure


@click.command()
@click.version_option()
@click.option("--renderer", help="Renderer command (default: glow)")
@click.option("--style", help="Renderer style name")
@click.option("--width", type=int, help="Renderer word-wrap width (0 disables wrapping)")
@click.option("--timeout", type=float, help="Seconds before the renderer is killed")
@click.option(
    "--ansi",
    "from_ansi",
    is_flag=True,
    help="Treat FILEPATH as captured renderer output instead of Markdown",
)
@click.option("--json", "as_json", is_flag=True, help="Print text and byte ranges as JSON")
@click.option("--color/--no-color", default=None, help="Force or disable styled output")
@click.option("-v", "--verbose", is_flag=True, help="Log render progress to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    renderer: str | None = None,
    style: str | None = None,
    width: int | None = None,
    timeout: float | None = None,
    from_ansi: bool = False,
    as_json: bool = False,
    color: bool | None = None,
    verbose: bool = False,
):
    """
    Entry point for previewing a Markdown file in the terminal.

    Args:
        filepath: Markdown file to render, or captured output with ``--ansi``.
        renderer: Override for the renderer command.
        style: Override for the renderer style.
        width: Override for the renderer word-wrap width.
        timeout: Override for the render timeout in seconds.
        from_ansi: Skip the renderer and project FILEPATH directly.
        as_json: Emit JSON instead of styled text.
        color: Force (True) or suppress (False) terminal styling.
        verbose: Enable debug logging.

    Returns:
        None.

    Raises:
        click.BadParameter: If the path is invalid or not Markdown, or the
            configuration is invalid.
        click.ClickException: If the file cannot be read or the render fails.

    Examples:
        md-preview README.md --style light
        glow -s dark README.md | md-preview --ansi /dev/stdin --json
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    base_dir = Path.cwd().resolve()
    try:
        path = normalize_filepath(filepath, base_dir, extensions=None)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(
            path.parent, renderer=renderer, style=style, width=width, timeout=timeout
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    if from_ansi:
        try:
            content = project_ansi(safe_read(path))
        except IOError as error:
            raise click.ClickException(str(error)) from error
    else:
        if not is_markdown_file(path, config.extensions):
            error_message = f"{path} is not a Markdown file.\n"
            error_message += f"Supported extensions are: {', '.join(config.extensions)}"
            raise click.BadParameter(error_message)

        host = ConsoleHost(path)
        content, failure = asyncio.run(_render_preview(host, PreviewManager(host, config=config)))
        if content is None:
            raise click.ClickException(failure or "Preview failed")

    if as_json:
        click.echo(content_to_json(content))
    else:
        click.echo(style_content(content), nl=False, color=color)


if __name__ == "__main__":
    cli()
