from __future__ import annotations

import asyncio
import shlex
import sys
import textwrap
from collections.abc import Hashable
from pathlib import Path

import pytest
from click.testing import CliRunner

from md_preview.config import RENDERER_ENV_VAR, TIMEOUT_ENV_VAR
from md_preview.models import DocumentInfo, PreviewContent, ProcessResult

FAKE_GLOW = textwrap.dedent(
    """
    import sys
    from pathlib import Path

    source = Path(sys.argv[-1]).read_text(encoding="utf-8")
    if "FAIL" in source:
        sys.stderr.write("cannot render\\n")
        sys.exit(1)
    for line in source.splitlines():
        if line.startswith("## "):
            sys.stdout.write("  \\x1b[1;36m" + line + "\\x1b[0m  \\n")
        else:
            sys.stdout.write("  " + line + "  \\n")
    """
).lstrip()


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    monkeypatch.delenv(RENDERER_ENV_VAR, raising=False)
    monkeypatch.delenv(TIMEOUT_ENV_VAR, raising=False)


@pytest.fixture()
def fake_glow(tmp_path: Path) -> str:
    """Renderer command for a script that mimics glow's output layout."""
    script = tmp_path / "fake_glow.py"
    script.write_text(FAKE_GLOW, encoding="utf-8")
    return shlex.join([sys.executable, str(script)])


class FakeRunner:
    """In-memory `ProcessRunner`; with `hold` set, runs wait until released."""

    def __init__(self, stdout: str = "\x1b[1mHello\x1b[0m\n", exit_code: int = 0, stderr: str = ""):
        self.stdout = stdout
        self.exit_code = exit_code
        self.stderr = stderr
        self.hold = False
        self.calls: list[list[str]] = []
        self.seen_paths: list[tuple[Path, bool]] = []
        self.waiting: list[asyncio.Event] = []
        self.cancelled = 0

    async def run(self, argv: list[str], timeout: float | None = None) -> ProcessResult:
        self.calls.append(list(argv))
        path = Path(argv[-1])
        self.seen_paths.append((path, path.exists()))
        if self.hold:
            event = asyncio.Event()
            self.waiting.append(event)
            try:
                await event.wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        return ProcessResult(self.exit_code, self.stdout, self.stderr)


class FakeHost:
    """`PreviewHost` recording every call."""

    def __init__(self, documents: dict[Hashable, DocumentInfo]):
        self.documents = documents
        self.contents: dict[Hashable, PreviewContent | str] = {}
        self.opened: list[tuple[str, str]] = []
        self.closed: list[Hashable] = []
        self.statuses: list[str] = []
        self.fail_open: str | None = None

    def get_document(self, document: Hashable) -> DocumentInfo | None:
        return self.documents.get(document)

    def open_preview(self, title: str, placeholder: str) -> Hashable:
        if self.fail_open is not None:
            raise RuntimeError(self.fail_open)
        target = f"preview-{len(self.opened)}"
        self.opened.append((title, placeholder))
        self.contents[target] = placeholder
        return target

    def replace_content(self, target: Hashable, content: PreviewContent) -> None:
        self.contents[target] = content

    def close_preview(self, target: Hashable) -> None:
        self.closed.append(target)
        self.contents.pop(target, None)

    def set_status(self, message: str) -> None:
        self.statuses.append(message)


@pytest.fixture()
def markdown_doc(tmp_path: Path) -> Path:
    path = tmp_path / "doc.md"
    path.write_text("## Heading\n\nBody text.\n", encoding="utf-8")
    return path


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def fake_host(markdown_doc: Path, tmp_path: Path) -> FakeHost:
    notes = tmp_path / "notes.txt"
    notes.write_text("plain\n", encoding="utf-8")
    return FakeHost(
        {
            "doc": DocumentInfo(path=markdown_doc),
            "notes": DocumentInfo(path=notes),
        }
    )
