"""Package-specific exception types."""

from __future__ import annotations


class PreviewError(Exception):
    """Base class for preview errors surfaced to the user."""


class RendererError(PreviewError):
    """Base class for failures of the external renderer.

    Represents errors encountered while invoking the renderer process.
    """


class RendererNotFoundError(RendererError):
    """Raised when the renderer executable cannot be found.

    Args:
        command: Executable that was looked up.
    """

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Renderer '{command}' not found")


class RendererExitError(RendererError):
    """Raised when the renderer exits with a non-zero status.

    Args:
        exit_code: Process exit status.
        stderr: Captured standard error.
    """

    def __init__(self, exit_code: int, stderr: str):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = self.stderr.strip()
        return message or f"renderer exited with status {self.exit_code}"


class RendererTimeoutError(RendererError):
    """Raised when the renderer does not finish in time.

    Args:
        timeout: Limit in seconds that was exceeded.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Renderer timed out after {self.timeout:g} seconds")


class SessionStateError(PreviewError):
    """Raised when a session operation is invalid for the current state."""
