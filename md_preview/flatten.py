"""Flatten styled spans into plain text plus style ranges."""

from __future__ import annotations

from .models import Span, StyleRange


def needs_range(span: Span) -> bool:
    """Return True when a span carries styling that the host must draw.

    Underline is secondary: an underline-only span gets no range.
    """
    return span.bold or span.italic or span.foreground is not None


def flatten_spans(spans: list[Span]) -> tuple[str, list[StyleRange]]:
    """Concatenate span text and record the offsets of styled spans.

    Args:
        spans: Spans produced by `parse_ansi`.

    Returns:
        tuple[str, list[StyleRange]]: The plain text and, for every styled
            span, a range in character offsets over that text. Unstyled
            text produces no range.

    Examples:
        text, ranges = flatten_spans(parse_ansi("\\x1b[1mHi\\x1b[0m there"))
        # text == "Hi there", ranges == [StyleRange(0, 2, bold=True)]
    """
    parts: list[str] = []
    ranges: list[StyleRange] = []
    offset = 0

    for span in spans:
        start = offset
        offset += len(span.text)
        parts.append(span.text)

        if offset > start and needs_range(span):
            ranges.append(
                StyleRange(
                    start=start,
                    end=offset,
                    bold=span.bold,
                    italic=span.italic,
                    underline=span.underline,
                    foreground=span.foreground,
                )
            )

    return "".join(parts), ranges
