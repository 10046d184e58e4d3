"""Projection of renderer output into displayable text and byte ranges."""

from __future__ import annotations

from .ansi import parse_ansi
from .flatten import flatten_spans
from .models import PreviewContent
from .normalizer import normalize
from .offsets import to_byte_ranges


def project_ansi(raw: str) -> PreviewContent:
    """Turn captured ANSI output into plain text plus byte-offset style ranges.

    Runs the SGR parser, the flattener, the normalizer and finally the byte
    offset conversion. Holds no state and never raises for malformed input.

    Args:
        raw: Captured renderer output.

    Returns:
        PreviewContent: Normalized text and its style ranges in byte offsets.

    Examples:
        project_ansi("\\x1b[1;31mError\\x1b[0m: bad\\n")
        # PreviewContent("Error: bad\\n", [ByteStyleRange(0, 5, bold=True, ...)])
    """
    plain_text, ranges = flatten_spans(parse_ansi(raw))
    result = normalize(plain_text, ranges)
    return PreviewContent(
        plain_text=result.plain_text,
        ranges=to_byte_ranges(result.plain_text, result.ranges),
    )
