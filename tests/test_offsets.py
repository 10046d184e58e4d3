import pytest

from md_preview.models import ByteStyleRange, StyleRange
from md_preview.offsets import char_to_byte_offset, to_byte_ranges


@pytest.mark.parametrize(
    ("text", "offset", "expected"),
    [
        ("日x", 1, 3),
        ("日x", 2, 4),
        ("éa", 1, 2),
        ("😀a", 1, 4),
        ("😀a", 2, 5),
        ("abc", 2, 2),
        ("abc", 0, 0),
    ],
)
def test_char_to_byte_offset(text, offset, expected):
    assert char_to_byte_offset(text, offset) == expected


def test_offsets_are_clamped_to_text():
    assert char_to_byte_offset("ab", 10) == 2
    assert char_to_byte_offset("ab", -1) == 0


def test_lone_surrogate_counts_three_bytes():
    assert char_to_byte_offset("\ud800a", 1) == 3


def test_to_byte_ranges_converts_start_and_end_independently():
    ranges = [StyleRange(1, 3, bold=True), StyleRange(0, 1, foreground=(1, 2, 3))]

    assert to_byte_ranges("é😀x", ranges) == [
        ByteStyleRange(2, 7, bold=True),
        ByteStyleRange(0, 2, foreground=(1, 2, 3)),
    ]


def test_to_byte_ranges_matches_char_to_byte_offset():
    text = "  Überblick — 日本\n"
    ranges = [StyleRange(2, 11, bold=True), StyleRange(14, 16, italic=True)]

    converted = to_byte_ranges(text, ranges)

    for char_range, byte_range in zip(ranges, converted):
        assert byte_range.start == char_to_byte_offset(text, char_range.start)
        assert byte_range.end == char_to_byte_offset(text, char_range.end)


def test_to_byte_ranges_without_ranges():
    assert to_byte_ranges("abc", []) == []
