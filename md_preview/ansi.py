"""ANSI SGR escape sequence parsing."""

from __future__ import annotations

from dataclasses import replace
from functools import reduce

from .colors import bright_color, resolve_color, standard_color
from .constants import SGR_BODY_PATTERN, SGR_PATTERN
from .models import Span, StyleState

# Number of parameters following 38/48 for each extended color sub-form
_EXTENDED_ARGUMENTS = {5: 1, 2: 3}

# Longer parameters cannot name a code; they parse as an unrecognized one
_MAX_PARAM_DIGITS = 9
_UNRECOGNIZED = -1


def _param_code(part: str) -> int:
    if not part:
        return 0
    if len(part) > _MAX_PARAM_DIGITS:
        return _UNRECOGNIZED
    return int(part)


def parse_sgr_params(body: str) -> list[int]:
    """Split the parameter section of an SGR sequence into integers.

    Empty parameters default to 0, so ``ESC[m`` and ``ESC[;1m`` behave like
    ``ESC[0m`` and ``ESC[0;1m``. Parameters too long to be a code become
    -1, which every consumer ignores.

    Args:
        body: Text between ``ESC[`` and the final ``m``.

    Returns:
        list[int]: Parameter codes in order.

    Examples:
        parse_sgr_params("1;31")  # [1, 31]
        parse_sgr_params("")  # [0]
    """
    return [_param_code(part) for part in body.split(";")]


def _extended_color(state: StyleState, params: list[int], index: int) -> tuple[StyleState, int]:
    """Apply a 38/48 extended color starting at `index`.

    Returns the new state and how many following parameters were consumed.
    Truncated sequences consume what is left without changing the state.
    """
    if index + 1 >= len(params):
        return state, 0

    code = params[index]
    mode = params[index + 1]
    wanted = _EXTENDED_ARGUMENTS.get(mode)
    if wanted is None:
        return state, 0

    arguments = params[index + 2 : index + 2 + wanted]
    consumed = 1 + len(arguments)
    if len(arguments) < wanted or code == 48:
        return state, consumed

    if mode == 5:
        color = resolve_color(arguments[0])
    elif all(0 <= channel <= 255 for channel in arguments):
        color = (arguments[0], arguments[1], arguments[2])
    else:
        color = None

    if color is None:
        return state, consumed
    return replace(state, foreground=color), consumed


def apply_sgr(state: StyleState, params: list[int]) -> StyleState:
    """Apply SGR parameter codes to a style state.

    Parameters are applied in order; later codes override earlier ones.
    Background colors (40-47, 100-107, 48) are not represented, but the
    arguments of ``48;5;N`` and ``48;2;R;G;B`` are skipped so they are not
    misread as other codes. Unrecognized codes are ignored.

    Args:
        state: Style state before the sequence.
        params: Parameter codes of one sequence.

    Returns:
        StyleState: Style state after the sequence.

    Examples:
        apply_sgr(StyleState(), [1, 31])
        apply_sgr(StyleState(bold=True), [0])  # StyleState()
    """
    i = 0
    while i < len(params):
        p = params[i]
        if p == 0:
            state = state.reset()
        elif p == 1:
            state = replace(state, bold=True)
        elif p == 3:
            state = replace(state, italic=True)
        elif p == 4:
            state = replace(state, underline=True)
        elif p == 22:
            state = replace(state, bold=False)
        elif p == 23:
            state = replace(state, italic=False)
        elif p == 24:
            state = replace(state, underline=False)
        elif 30 <= p <= 37:
            state = replace(state, foreground=standard_color(p - 30))
        elif 90 <= p <= 97:
            state = replace(state, foreground=bright_color(p - 90))
        elif p == 39:
            state = replace(state, foreground=None)
        elif p in (38, 48):
            state, consumed = _extended_color(state, params, i)
            i += consumed
        i += 1
    return state


def _fold_token(acc: tuple[StyleState, list[Span]], token: str) -> tuple[StyleState, list[Span]]:
    state, spans = acc
    if not token:
        return acc

    match = SGR_BODY_PATTERN.match(token)
    if match:
        return apply_sgr(state, parse_sgr_params(match.group(1))), spans

    spans.append(state.to_span(token))
    return state, spans


def parse_ansi(raw: str) -> list[Span]:
    """Parse renderer output containing SGR sequences into styled spans.

    Splits the input on ``ESC [ params m`` sequences, keeping the delimiters,
    and folds a style state over the resulting tokens. Each text token becomes
    a span carrying the state in effect when the text appears. Escape
    sequences that are not SGR (cursor movement, malformed input) stay in the
    text verbatim. Never raises.

    Args:
        raw: Captured renderer output.

    Returns:
        list[Span]: Non-empty spans in input order.

    Examples:
        parse_ansi("\\x1b[1mbold\\x1b[0m plain")
    """
    _, spans = reduce(_fold_token, SGR_PATTERN.split(raw), (StyleState(), []))
    return spans


def strip_sgr(raw: str) -> str:
    """Remove SGR sequences, leaving every other character in place."""
    return SGR_PATTERN.sub("", raw)
