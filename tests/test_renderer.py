from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

from md_preview.config import PreviewConfig
from md_preview.exceptions import (
    PreviewError,
    RendererExitError,
    RendererNotFoundError,
    RendererTimeoutError,
)
from md_preview.models import DocumentInfo
from md_preview.renderer import AsyncProcessRunner, build_renderer_command, render_document


def test_build_renderer_command_defaults():
    assert build_renderer_command(PreviewConfig(), Path("README.md")) == [
        "glow",
        "-s",
        "dark",
        "-w",
        "0",
        "README.md",
    ]


def test_build_renderer_command_splits_renderer():
    config = PreviewConfig(renderer="'/opt/my tools/glow' --pager=false", style="light", width=72)

    assert build_renderer_command(config, Path("a.md")) == [
        "/opt/my tools/glow",
        "--pager=false",
        "-s",
        "light",
        "-w",
        "72",
        "a.md",
    ]


def test_runner_captures_output():
    script = "import sys; sys.stdout.write('\\x1b[1mhi\\x1b[0m'); sys.stderr.write('warn')"

    result = asyncio.run(AsyncProcessRunner().run([sys.executable, "-c", script], timeout=30))

    assert result.exit_code == 0
    assert result.stdout == "\x1b[1mhi\x1b[0m"
    assert result.stderr == "warn"


def test_runner_reports_exit_status():
    script = "import sys; sys.exit(3)"

    result = asyncio.run(AsyncProcessRunner().run([sys.executable, "-c", script], timeout=30))

    assert result.exit_code == 3


def test_runner_missing_program():
    with pytest.raises(RendererNotFoundError, match="definitely-not-a-renderer"):
        asyncio.run(AsyncProcessRunner().run(["definitely-not-a-renderer-7f3a"]))


def test_runner_kills_on_timeout():
    script = "import time; time.sleep(60)"
    started = time.monotonic()

    with pytest.raises(RendererTimeoutError):
        asyncio.run(AsyncProcessRunner().run([sys.executable, "-c", script], timeout=0.5))

    assert time.monotonic() - started < 30


def test_runner_kills_on_cancellation():
    script = "import time; time.sleep(60)"

    async def scenario():
        task = asyncio.ensure_future(AsyncProcessRunner().run([sys.executable, "-c", script]))
        await asyncio.sleep(0.5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    started = time.monotonic()
    asyncio.run(scenario())
    assert time.monotonic() - started < 30


def test_render_document_returns_stdout(markdown_doc: Path, fake_runner):
    output = asyncio.run(render_document(DocumentInfo(markdown_doc), PreviewConfig(), fake_runner))

    assert output == fake_runner.stdout
    assert fake_runner.calls == [["glow", "-s", "dark", "-w", "0", str(markdown_doc)]]


def test_render_document_raises_on_failure(markdown_doc: Path, fake_runner):
    fake_runner.exit_code = 3

    with pytest.raises(RendererExitError, match="renderer exited with status 3"):
        asyncio.run(render_document(DocumentInfo(markdown_doc), PreviewConfig(), fake_runner))


def test_render_document_uses_stderr_as_message(markdown_doc: Path, fake_runner):
    fake_runner.exit_code = 1
    fake_runner.stderr = "Error: unknown style\n"

    with pytest.raises(RendererExitError) as excinfo:
        asyncio.run(render_document(DocumentInfo(markdown_doc), PreviewConfig(), fake_runner))

    assert str(excinfo.value) == "Error: unknown style"
    assert excinfo.value.exit_code == 1


def test_render_document_writes_unsaved_text_to_temporary_file(markdown_doc: Path, fake_runner):
    document = DocumentInfo(markdown_doc, text="## Draft\n")

    asyncio.run(render_document(document, PreviewConfig(), fake_runner))

    ((rendered_path, existed),) = fake_runner.seen_paths
    assert existed
    assert rendered_path != markdown_doc
    assert rendered_path.parent == markdown_doc.parent
    assert rendered_path.suffix == ".md"
    assert not rendered_path.exists()


def test_render_document_removes_temporary_file_on_failure(markdown_doc: Path, fake_runner):
    fake_runner.exit_code = 1
    document = DocumentInfo(markdown_doc, text="## Draft\n")

    with pytest.raises(RendererExitError):
        asyncio.run(render_document(document, PreviewConfig(), fake_runner))

    ((rendered_path, _),) = fake_runner.seen_paths
    assert not rendered_path.exists()


def test_render_document_reports_unwritable_text(markdown_doc: Path, fake_runner):
    document = DocumentInfo(markdown_doc, text="# T\ud800\n")

    with pytest.raises(PreviewError, match="Error writing temporary document"):
        asyncio.run(render_document(document, PreviewConfig(), fake_runner))

    assert fake_runner.calls == []
    assert sorted(path.name for path in markdown_doc.parent.iterdir()) == ["doc.md"]


def test_render_document_enforces_size_limit(markdown_doc: Path, fake_runner):
    config = PreviewConfig(max_file_size=4)

    with pytest.raises(PreviewError, match="exceeds the maximum allowed size"):
        asyncio.run(render_document(DocumentInfo(markdown_doc), config, fake_runner))
    with pytest.raises(PreviewError, match="exceeds the maximum allowed size"):
        asyncio.run(render_document(DocumentInfo(markdown_doc, text="x" * 5), config, fake_runner))

    assert fake_runner.calls == []


def test_render_document_with_real_process(markdown_doc: Path, fake_glow: str):
    config = PreviewConfig(renderer=fake_glow)

    output = asyncio.run(render_document(DocumentInfo(markdown_doc), config, AsyncProcessRunner()))

    assert output == "  \x1b[1;36m## Heading\x1b[0m  \n    \n  Body text.  \n"
