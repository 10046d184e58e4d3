"""Palette lookups for ANSI color codes."""

from __future__ import annotations

from .constants import BRIGHT_COLORS, STANDARD_COLORS
from .models import RGB


def standard_color(index: int) -> RGB:
    """Return the standard palette entry used by SGR 30-37."""
    return STANDARD_COLORS[index]


def bright_color(index: int) -> RGB:
    """Return the bright palette entry used by SGR 90-97."""
    return BRIGHT_COLORS[index]


def _cube_channel(index: int) -> int:
    return 0 if index == 0 else index * 40 + 55


def resolve_color(code: int) -> RGB | None:
    """Map a 256-color palette index to an RGB triple.

    Indices 0-15 use the standard and bright palettes, 16-231 the 6x6x6
    color cube with the conventional terminal channel scaling (0, 95, 135,
    175, 215, 255) and 232-255 the grayscale ramp.

    Args:
        code: Palette index.

    Returns:
        RGB | None: The color, or None when `code` is outside 0-255.

    Examples:
        resolve_color(1)  # (205, 49, 49)
        resolve_color(196)  # (255, 0, 0)
        resolve_color(232)  # (8, 8, 8)
    """
    if code < 0 or code > 255:
        return None
    if code < 8:
        return standard_color(code)
    if code < 16:
        return bright_color(code - 8)
    if code < 232:
        index = code - 16
        return (
            _cube_channel(index // 36),
            _cube_channel((index % 36) // 6),
            _cube_channel(index % 6),
        )
    gray = (code - 232) * 10 + 8
    return (gray, gray, gray)
