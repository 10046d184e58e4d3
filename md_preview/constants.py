"""Constants used across the md-preview package."""

from __future__ import annotations

import re

# SGR escape sequences; anything else that looks like an escape is literal text.
SGR_PATTERN = re.compile(r"(\x1b\[[0-9;]*m)")
SGR_BODY_PATTERN = re.compile(r"^\x1b\[([0-9;]*)m$")

# Normalizer patterns
HEADING_MARKER_PATTERN = re.compile(r"^(  )(#{2,6} )")
TRAILING_WHITESPACE = " \t"

# Palette used for SGR 30-37 (standard) and 90-97 (bright)
STANDARD_COLORS: tuple[tuple[int, int, int], ...] = (
    (0, 0, 0),  # black
    (205, 49, 49),  # red
    (13, 188, 121),  # green
    (229, 229, 16),  # yellow
    (36, 114, 200),  # blue
    (188, 63, 188),  # magenta
    (17, 168, 205),  # cyan
    (229, 229, 229),  # white
)
BRIGHT_COLORS: tuple[tuple[int, int, int], ...] = (
    (102, 102, 102),
    (241, 76, 76),
    (35, 209, 139),
    (245, 245, 67),
    (59, 142, 234),
    (214, 112, 214),
    (41, 184, 219),
    (229, 229, 229),
)

# Renderer defaults
DEFAULT_RENDERER = "glow"
DEFAULT_STYLE = "dark"
DEFAULT_WIDTH = 0
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mkd", ".mdx")

# Preview presentation
PREVIEW_PLACEHOLDER = "Rendering preview..."
