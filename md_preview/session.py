"""Preview sessions: one live preview per source document."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Hashable
from typing import Protocol

from .config import PreviewConfig
from .constants import PREVIEW_PLACEHOLDER
from .exceptions import PreviewError, SessionStateError
from .filesystem import is_markdown_file
from .models import DocumentInfo, PreviewContent, SessionState
from .projection import project_ansi
from .renderer import AsyncProcessRunner, ProcessRunner, render_document

logger = logging.getLogger(__name__)


class PreviewHost(Protocol):
    """Editor primitives a preview session relies on."""

    def get_document(self, document: Hashable) -> DocumentInfo | None:
        """Return the current state of a source document, or None if it is gone."""

    def open_preview(self, title: str, placeholder: str) -> Hashable:
        """Create a read-only display target and return its handle."""

    def replace_content(self, target: Hashable, content: PreviewContent) -> None:
        """Replace the target's text and styling in one step.

        Styling from the previous content must be cleared before the new
        ranges are applied.
        """

    def close_preview(self, target: Hashable) -> None:
        """Close a display target created by `open_preview`."""

    def set_status(self, message: str) -> None:
        """Show a one-line status message to the user."""


class PreviewSession:
    """Live preview of one document.

    Moves through ``CLOSED -> OPENING -> ACTIVE -> CLOSING -> CLOSED``.
    Renders are only accepted while ``ACTIVE`` and at most one render cycle
    is in flight: starting a new cycle cancels the previous one, killing its
    renderer process before the new process is spawned.
    """

    def __init__(
        self,
        document: Hashable,
        host: PreviewHost,
        config: PreviewConfig | None = None,
        runner: ProcessRunner | None = None,
    ):
        self.document = document
        self.state = SessionState.CLOSED
        self.target: Hashable | None = None
        self._host = host
        self._config = config or PreviewConfig()
        self._runner = runner or AsyncProcessRunner()
        self._inflight: asyncio.Task[bool] | None = None

    async def open(self) -> bool:
        """Create the preview target and render it for the first time.

        Returns:
            bool: True when the first render succeeded.

        Raises:
            SessionStateError: If the session is not closed.
        """
        if self.state is not SessionState.CLOSED:
            raise SessionStateError(f"Cannot open preview in state {self.state.name}")

        info = self._host.get_document(self.document)
        if info is None:
            self._host.set_status("Failed to open preview: document is not available")
            return False

        self.state = SessionState.OPENING
        try:
            self.target = self._host.open_preview(f"*Preview: {info.path.name}*", PREVIEW_PLACEHOLDER)
        except Exception as error:
            logger.warning("Host refused to open preview for %s: %s", info.path, error)
            self.state = SessionState.CLOSED
            self._host.set_status(f"Failed to open preview: {error}")
            return False
        self.state = SessionState.ACTIVE

        rendered = await self.render()
        if rendered and self.state is SessionState.ACTIVE:
            self._host.set_status("Markdown preview opened")
        return rendered

    async def render(self) -> bool:
        """Run one render cycle, superseding any cycle still in flight.

        Returns:
            bool: True when new content reached the display; False when the
                renderer failed or a newer cycle or a close superseded this one.

        Raises:
            SessionStateError: If the session is not active.
        """
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError(f"Cannot render preview in state {self.state.name}")

        previous = self._inflight
        if previous is not None and not previous.done():
            logger.debug("Cancelling in-flight render of %r", self.document)
            previous.cancel()
        task = asyncio.ensure_future(self._render_cycle(previous))
        self._inflight = task

        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Render of %r superseded", self.document)
            return False
        finally:
            if self._inflight is task:
                self._inflight = None

    async def _render_cycle(self, previous: asyncio.Task[bool] | None) -> bool:
        if previous is not None:
            await asyncio.wait({previous})

        info = self._host.get_document(self.document)
        if info is None:
            self._host.set_status("Preview error: document is not available")
            return False

        logger.debug("Rendering %s", info.path)
        try:
            output = await render_document(info, self._config, self._runner)
        except PreviewError as error:
            logger.warning("Render of %s failed: %s", info.path, error)
            self._host.set_status(f"Preview error: {error}")
            return False

        if self.state is not SessionState.ACTIVE:
            return False
        self._host.replace_content(self.target, project_ansi(output))
        return True

    async def _cancel_inflight(self) -> None:
        task = self._inflight
        self._inflight = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})

    async def close(self, close_target: bool = True) -> None:
        """Tear the session down, killing any render in flight.

        Closing a session that is not active does nothing, so teardown runs
        exactly once.

        Args:
            close_target: Whether to close the display target; False when
                the host already closed it.
        """
        if self.state is not SessionState.ACTIVE:
            return

        self.state = SessionState.CLOSING
        try:
            await self._cancel_inflight()
            if close_target and self.target is not None:
                self._host.close_preview(self.target)
        finally:
            self.target = None
            self.state = SessionState.CLOSED
        self._host.set_status("Markdown preview closed")


class PreviewManager:
    """Sessions keyed by opaque document handles.

    Entry points mirror editor events: toggling the preview command, saving
    a document and closing a buffer.
    """

    def __init__(
        self,
        host: PreviewHost,
        config: PreviewConfig | None = None,
        runner: ProcessRunner | None = None,
    ):
        self._host = host
        self._config = config or PreviewConfig()
        self._runner = runner or AsyncProcessRunner()
        self._sessions: dict[Hashable, PreviewSession] = {}

    def is_open(self, document: Hashable) -> bool:
        return document in self._sessions

    def session_for(self, document: Hashable) -> PreviewSession | None:
        return self._sessions.get(document)

    async def open(self, document: Hashable) -> bool:
        """Open a preview for `document`.

        Returns:
            bool: True when the preview opened and rendered.
        """
        if document in self._sessions:
            return await self._sessions[document].render()

        info = self._host.get_document(document)
        if info is None or not is_markdown_file(info.path, self._config.extensions):
            self._host.set_status("Not a markdown file")
            return False

        session = PreviewSession(document, self._host, self._config, self._runner)
        self._sessions[document] = session
        rendered = await session.open()
        if session.state is SessionState.CLOSED and self._sessions.get(document) is session:
            del self._sessions[document]
        return rendered

    async def close(self, document: Hashable, close_target: bool = True) -> None:
        session = self._sessions.pop(document, None)
        if session is not None:
            await session.close(close_target=close_target)

    async def toggle(self, document: Hashable) -> bool:
        """Open the preview if it is closed, close it otherwise.

        Returns:
            bool: True when a preview was opened and rendered.
        """
        if document in self._sessions:
            await self.close(document)
            return False
        return await self.open(document)

    async def on_document_saved(self, document: Hashable) -> bool:
        """Re-render the preview of a saved document, if one is open."""
        session = self._sessions.get(document)
        if session is None or session.state is not SessionState.ACTIVE:
            return False
        return await session.render()

    async def on_buffer_closed(self, handle: Hashable) -> None:
        """Tear down the session owning `handle`.

        `handle` may be a source document or a preview target the user
        closed directly; in the latter case the target is already gone.
        """
        if handle in self._sessions:
            await self.close(handle)
            return

        for document, session in list(self._sessions.items()):
            if session.target == handle:
                await self.close(document, close_target=False)
                break

    async def close_all(self) -> None:
        for document in list(self._sessions):
            await self.close(document)
