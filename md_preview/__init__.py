"""
md-preview: styled terminal previews of Markdown rendered by an external tool.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    md-preview README.md

Library Usage:
    from md_preview import project_ansi

    content = project_ansi(captured_glow_output)
    for style_range in content.ranges:
        print(style_range.start, style_range.end, style_range.foreground)
"""

from .ansi import apply_sgr, parse_ansi
from .colors import resolve_color
from .config import ConfigError, PreviewConfig
from .exceptions import (
    PreviewError,
    RendererError,
    RendererExitError,
    RendererNotFoundError,
    RendererTimeoutError,
    SessionStateError,
)
from .flatten import flatten_spans
from .models import (
    Adjustment,
    ByteStyleRange,
    DocumentInfo,
    PreviewContent,
    RenderResult,
    SessionState,
    Span,
    StyleRange,
    StyleState,
)
from .normalizer import normalize, remap_offset
from .offsets import char_to_byte_offset, to_byte_ranges
from .projection import project_ansi
from .session import PreviewHost, PreviewManager, PreviewSession

__version__ = "0.1.0"

__all__ = [
    # Projection pipeline
    "parse_ansi",
    "apply_sgr",
    "resolve_color",
    "flatten_spans",
    "normalize",
    "remap_offset",
    "char_to_byte_offset",
    "to_byte_ranges",
    "project_ansi",
    # Sessions
    "PreviewHost",
    "PreviewManager",
    "PreviewSession",
    # Data models
    "Adjustment",
    "ByteStyleRange",
    "DocumentInfo",
    "PreviewContent",
    "RenderResult",
    "SessionState",
    "Span",
    "StyleRange",
    "StyleState",
    # Configuration
    "PreviewConfig",
    # Exceptions
    "ConfigError",
    "PreviewError",
    "RendererError",
    "RendererExitError",
    "RendererNotFoundError",
    "RendererTimeoutError",
    "SessionStateError",
    # Version
    "__version__",
]
