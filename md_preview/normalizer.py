"""Line normalization of renderer output with style-range remapping."""

from __future__ import annotations

from bisect import bisect_left
from itertools import accumulate

from .constants import HEADING_MARKER_PATTERN, TRAILING_WHITESPACE
from .models import Adjustment, RenderResult, StyleRange


def _strip_heading_marker(line: str) -> tuple[str, int, int] | None:
    """Remove a ``##`` to ``######`` marker following two leading spaces.

    Returns the edited line, the in-line offset of the removal and the
    number of characters removed, or None when the line has no marker.
    """
    match = HEADING_MARKER_PATTERN.match(line)
    if match is None:
        return None
    indent, marker = match.groups()
    return indent + line[match.end() :], len(indent), len(marker)


def _fix_indent(line: str) -> tuple[str, int, int] | None:
    """Collapse exactly three leading spaces to two.

    glow pads top-level headings with a decorative space.
    """
    if not line.startswith("   ") or line.startswith("    "):
        return None
    return "  " + line[3:], 2, 1


def _normalize_line(line: str, line_start: int) -> tuple[str, list[Adjustment]]:
    """Normalize one line and report its removals in document offsets."""
    adjustments: list[Adjustment] = []
    edit = _strip_heading_marker(line) or _fix_indent(line)

    # Position and size of the leading-edge removal, in line-local offsets
    removed_at, removed = 0, 0
    if edit is not None:
        line, removed_at, removed = edit
        adjustments.append(Adjustment(line_start + removed_at, removed))

    trimmed = line.rstrip(TRAILING_WHITESPACE)
    trailing = len(line) - len(trimmed)
    if trailing:
        trail_start = len(trimmed)
        if removed and trail_start <= removed_at:
            # Trailing run reaches back over the earlier removal; merge them.
            adjustments = [Adjustment(line_start + trail_start, trailing + removed)]
        else:
            adjustments.append(Adjustment(line_start + trail_start + removed, trailing))

    return trimmed, adjustments


def normalize_text(plain_text: str) -> tuple[str, list[Adjustment]]:
    """Apply the line edits and collect every removal.

    Lines are split on line feeds. On each line a heading marker after two
    leading spaces is stripped; otherwise exactly three leading spaces are
    reduced to two. Trailing spaces and tabs are then removed.

    Args:
        plain_text: Flattened renderer output.

    Returns:
        tuple[str, list[Adjustment]]: The edited text and the removals in
            strictly increasing, non-overlapping original-offset order.

    Examples:
        normalize_text("  ## Title  \\n")
        # ("  Title\\n", [Adjustment(2, 3), Adjustment(10, 2)])
    """
    lines: list[str] = []
    adjustments: list[Adjustment] = []
    line_start = 0

    for raw_line in plain_text.split("\n"):
        line, line_adjustments = _normalize_line(raw_line, line_start)
        lines.append(line)
        adjustments.extend(line_adjustments)
        line_start += len(raw_line) + 1

    return "\n".join(lines), adjustments


def remap_offset(offset: int, adjustments: list[Adjustment]) -> int:
    """Translate an original offset into the edited text.

    Every removal that lies wholly before `offset` shifts it left by its full
    size; an offset inside a removed run is clamped to the start of that run.

    Args:
        offset: Character offset in the pre-edit text.
        adjustments: Removals in increasing original-offset order.

    Returns:
        int: Character offset in the edited text.

    Examples:
        remap_offset(5, [Adjustment(2, 3)])  # 2
        remap_offset(3, [Adjustment(2, 3)])  # 2
    """
    return _Remapper(adjustments)(offset)


class _Remapper:
    """Offset translation backed by prefix sums over the removals."""

    def __init__(self, adjustments: list[Adjustment]):
        self._origins = [adjustment.original_offset for adjustment in adjustments]
        self._counts = [adjustment.removed_count for adjustment in adjustments]
        self._removed_before = [0, *accumulate(self._counts)]

    def __call__(self, offset: int) -> int:
        # Removals starting before `offset`; only the last of them can contain it.
        index = bisect_left(self._origins, offset)
        if index == 0:
            return offset
        last = index - 1
        partial = min(self._counts[last], offset - self._origins[last])
        return offset - self._removed_before[last] - partial


def remap_ranges(
    ranges: list[StyleRange], adjustments: list[Adjustment], text_length: int
) -> list[StyleRange]:
    """Remap style ranges through the removals, dropping broken ones.

    Args:
        ranges: Ranges over the pre-edit text.
        adjustments: Removals in increasing original-offset order.
        text_length: Length of the edited text.

    Returns:
        list[StyleRange]: Ranges over the edited text. Ranges that collapse to
            ``start >= end`` or fall outside the text are dropped.
    """
    remap = _Remapper(adjustments)
    remapped: list[StyleRange] = []
    for style_range in ranges:
        start = remap(style_range.start)
        end = remap(style_range.end)
        if start < 0 or start >= end or end > text_length:
            continue
        remapped.append(style_range.shifted(start, end))
    return remapped


def normalize(plain_text: str, ranges: list[StyleRange]) -> RenderResult:
    """Normalize flattened text and keep its style ranges aligned.

    Args:
        plain_text: Flattened renderer output.
        ranges: Style ranges over `plain_text`.

    Returns:
        RenderResult: Edited text with ranges in character offsets over it.

    Examples:
        normalize("  ## Title\\n", [StyleRange(5, 10, bold=True)])
        # RenderResult("  Title\\n", [StyleRange(2, 7, bold=True)])
    """
    text, adjustments = normalize_text(plain_text)
    return RenderResult(plain_text=text, ranges=remap_ranges(ranges, adjustments, len(text)))
