"""Character to byte offset conversion at the display boundary."""

from __future__ import annotations

from itertools import accumulate

from .models import ByteStyleRange, StyleRange


def _utf8_width(character: str) -> int:
    # Lone surrogates cannot be encoded strictly; count them as 3 bytes.
    return len(character.encode("utf-8", "surrogatepass"))


def char_to_byte_offset(text: str, char_offset: int) -> int:
    """Convert a character offset into a UTF-8 byte offset.

    Args:
        text: Text the offset refers to.
        char_offset: Offset in characters; clamped to ``0..len(text)``.

    Returns:
        int: Number of UTF-8 bytes encoding ``text[:char_offset]``.

    Examples:
        char_to_byte_offset("日x", 1)  # 3
        char_to_byte_offset("abc", 2)  # 2
    """
    limit = max(0, min(char_offset, len(text)))
    return len(text[:limit].encode("utf-8", "surrogatepass"))


def to_byte_ranges(text: str, ranges: list[StyleRange]) -> list[ByteStyleRange]:
    """Convert character-offset ranges over `text` into byte-offset ranges.

    Start and end are converted independently through one table of
    cumulative byte widths.

    Args:
        text: Text the ranges refer to.
        ranges: Ranges in character offsets.

    Returns:
        list[ByteStyleRange]: The same ranges in byte offsets.
    """
    if not ranges:
        return []

    byte_offsets = [0, *accumulate(_utf8_width(character) for character in text)]
    last = len(text)

    def convert(offset: int) -> int:
        return byte_offsets[max(0, min(offset, last))]

    return [
        ByteStyleRange(
            start=convert(style_range.start),
            end=convert(style_range.end),
            bold=style_range.bold,
            italic=style_range.italic,
            underline=style_range.underline,
            foreground=style_range.foreground,
        )
        for style_range in ranges
    ]
