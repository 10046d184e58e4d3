"""Data models for md-preview."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path

RGB = tuple[int, int, int]


class SessionState(Enum):
    """Lifecycle states of a preview session.

    Attributes:
        CLOSED: No preview target exists.
        OPENING: The preview target is being created.
        ACTIVE: The preview is displayed; renders may be triggered.
        CLOSING: The preview is being torn down.
    """

    CLOSED = auto()
    OPENING = auto()
    ACTIVE = auto()
    CLOSING = auto()


@dataclass(frozen=True)
class Span:
    """A run of text sharing one style state, as emitted by the SGR parser."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    foreground: RGB | None = None


@dataclass(frozen=True)
class StyleState:
    """Style accumulator threaded through the SGR token stream.

    Attributes:
        bold: Whether bold weight is active.
        italic: Whether italic is active.
        underline: Whether underline is active.
        foreground: Active foreground color, or None for the host default.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False
    foreground: RGB | None = None

    @property
    def is_default(self) -> bool:
        return self == StyleState()

    def reset(self) -> StyleState:
        return StyleState()

    def to_span(self, text: str) -> Span:
        return Span(
            text=text,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            foreground=self.foreground,
        )


@dataclass(frozen=True)
class StyleRange:
    """Styled interval over flattened plain text, in character offsets.

    Attributes:
        start: Inclusive start offset.
        end: Exclusive end offset.
        bold: Whether the range is bold.
        italic: Whether the range is italic.
        underline: Whether the range is underlined.
        foreground: Foreground color, or None for the host default.
    """

    start: int
    end: int
    bold: bool = False
    italic: bool = False
    underline: bool = False
    foreground: RGB | None = None

    def shifted(self, start: int, end: int) -> StyleRange:
        return replace(self, start=start, end=end)


@dataclass(frozen=True)
class ByteStyleRange:
    """Styled interval over UTF-8 encoded plain text, in byte offsets."""

    start: int
    end: int
    bold: bool = False
    italic: bool = False
    underline: bool = False
    foreground: RGB | None = None


@dataclass(frozen=True)
class Adjustment:
    """Characters removed from the text during normalization.

    Attributes:
        original_offset: Offset of the first removed character in the pre-edit text.
        removed_count: Number of characters removed.
    """

    original_offset: int
    removed_count: int


@dataclass
class RenderResult:
    """Normalized plain text plus the style ranges that describe it.

    Attributes:
        plain_text: Text after normalization.
        ranges: Style ranges in character offsets over `plain_text`.
    """

    plain_text: str
    ranges: list[StyleRange] = field(default_factory=list)


@dataclass
class PreviewContent:
    """Display payload handed to the host.

    Attributes:
        plain_text: Text to display.
        ranges: Style ranges in byte offsets over the UTF-8 encoding of `plain_text`.
    """

    plain_text: str
    ranges: list[ByteStyleRange] = field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        """Display lines, each terminated with a newline."""
        return [f"{line}\n" for line in self.plain_text.split("\n")]


@dataclass(frozen=True)
class DocumentInfo:
    """Source document as exposed by the host.

    Attributes:
        path: Location of the document on disk.
        text: Unsaved buffer content to render instead of the file, if any.
    """

    path: Path
    text: str | None = None


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of an external process run."""

    exit_code: int
    stdout: str
    stderr: str
