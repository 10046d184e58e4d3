import pytest

from md_preview.colors import bright_color, resolve_color, standard_color


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        (16, (0, 0, 0)),
        (21, (0, 0, 255)),
        (196, (255, 0, 0)),
        (231, (255, 255, 255)),
        (232, (8, 8, 8)),
        (255, (238, 238, 238)),
    ],
)
def test_cube_and_grayscale_boundaries(code, expected):
    assert resolve_color(code) == expected


def test_cube_uses_terminal_channel_steps():
    # r=1, g=2, b=3
    assert resolve_color(16 + 36 + 12 + 3) == (95, 135, 175)


def test_low_indices_use_palettes():
    assert resolve_color(1) == (205, 49, 49)
    assert resolve_color(1) == standard_color(1)
    assert resolve_color(9) == (241, 76, 76)
    assert resolve_color(9) == bright_color(1)


@pytest.mark.parametrize("code", [-1, 256, 10_000])
def test_out_of_range_codes_resolve_to_none(code):
    assert resolve_color(code) is None
