"""Async invocation of the external Markdown renderer."""

from __future__ import annotations

import asyncio
import logging
import shlex
from contextlib import ExitStack
from pathlib import Path
from typing import Protocol

from .config import PreviewConfig
from .exceptions import (
    PreviewError,
    RendererError,
    RendererExitError,
    RendererNotFoundError,
    RendererTimeoutError,
)
from .filesystem import collect_file_stat, enforce_file_size, temporary_document
from .models import DocumentInfo, ProcessResult

logger = logging.getLogger(__name__)


def build_renderer_command(config: PreviewConfig, path: Path) -> list[str]:
    """Build the renderer argument vector for a document.

    Word wrap is disabled by default (``-w 0``) so the renderer never breaks
    a styled span across lines; the display wraps instead.

    Args:
        config: Renderer settings.
        path: Document to render.

    Returns:
        list[str]: Program and arguments.

    Examples:
        build_renderer_command(PreviewConfig(), Path("README.md"))
        # ["glow", "-s", "dark", "-w", "0", "README.md"]
    """
    return [*shlex.split(config.renderer), "-s", config.style, "-w", str(config.width), str(path)]


class ProcessRunner(Protocol):
    """Runs a program to completion and captures its output.

    Cancelling the awaiting task must terminate the program.
    """

    async def run(self, argv: list[str], timeout: float | None = None) -> ProcessResult: ...


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


class AsyncProcessRunner:
    """`ProcessRunner` backed by `asyncio.create_subprocess_exec`."""

    async def run(self, argv: list[str], timeout: float | None = None) -> ProcessResult:
        """Run `argv`, killing the child on timeout or cancellation.

        Raises:
            RendererNotFoundError: If the program does not exist.
            RendererTimeoutError: If the program outlives `timeout`.
            RendererError: If the program cannot be started.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise RendererNotFoundError(argv[0]) from error
        except OSError as error:
            raise RendererError(f"Cannot run renderer '{argv[0]}': {error}") from error

        logger.debug("Started renderer pid=%s: %s", proc.pid, shlex.join(argv))
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as error:
            await _kill(proc)
            raise RendererTimeoutError(timeout) from error
        except asyncio.CancelledError:
            logger.debug("Killing renderer pid=%s", proc.pid)
            await _kill(proc)
            raise

        return ProcessResult(
            exit_code=proc.returncode,
            stdout=stdout.decode("utf-8", "replace"),
            stderr=stderr.decode("utf-8", "replace"),
        )


def _check_size(document: DocumentInfo, config: PreviewConfig) -> None:
    try:
        if document.text is not None:
            size = len(document.text.encode("utf-8", "surrogatepass"))
            if size > config.max_file_size:
                raise IOError(
                    f"{document.path} exceeds the maximum allowed size of "
                    f"{config.max_file_size} bytes."
                )
        else:
            enforce_file_size(collect_file_stat(document.path), config.max_file_size, document.path)
    except IOError as error:
        raise PreviewError(str(error)) from error


async def render_document(
    document: DocumentInfo, config: PreviewConfig, runner: ProcessRunner
) -> str:
    """Run the renderer on a document and return its ANSI output.

    Unsaved text is written to a temporary file beside the document, which
    is removed once the renderer has exited, on success and failure alike.

    Args:
        document: Document to render.
        config: Renderer settings.
        runner: Process runner.

    Returns:
        str: Captured standard output.

    Raises:
        PreviewError: If the document exceeds the size limit or its unsaved
            text cannot be written to a temporary file.
        RendererError: If the renderer is missing, times out, or exits
            with a non-zero status.
    """
    _check_size(document, config)

    if document.text is None:
        result = await runner.run(build_renderer_command(config, document.path), config.timeout)
    else:
        directory = document.path.parent if document.path.parent.is_dir() else None
        suffix = document.path.suffix or ".md"
        with ExitStack() as stack:
            try:
                temp_path = stack.enter_context(temporary_document(document.text, directory, suffix))
            except IOError as error:
                raise PreviewError(str(error)) from error
            result = await runner.run(build_renderer_command(config, temp_path), config.timeout)

    if result.exit_code != 0:
        logger.warning("Renderer exited with status %s for %s", result.exit_code, document.path)
        raise RendererExitError(result.exit_code, result.stderr)
    return result.stdout
