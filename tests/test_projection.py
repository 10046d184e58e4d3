from md_preview.models import ByteStyleRange
from md_preview.projection import project_ansi


def test_error_line_projection():
    content = project_ansi("\x1b[1;31mError\x1b[0m: bad\n")

    assert content.plain_text == "Error: bad\n"
    assert content.ranges == [ByteStyleRange(0, 5, bold=True, foreground=(205, 49, 49))]


def test_heading_with_multibyte_title():
    content = project_ansi("\x1b[1m  ## Überblick\x1b[0m   \n")

    assert content.plain_text == "  Überblick\n"
    assert content.ranges == [ByteStyleRange(0, 12, bold=True)]
    assert content.lines == ["  Überblick\n", "\n"]


def test_glow_like_document():
    raw = (
        "\n"
        "  \x1b[1;38;5;228;48;5;63m Title \x1b[0m  \n"
        "\n"
        "  \x1b[1;38;5;39m## Section\x1b[0m  \n"
        "\n"
        "  Some \x1b[3mitalic\x1b[23m text.  \n"
    )

    content = project_ansi(raw)

    assert content.plain_text == "\n  Title\n\n  Section\n\n  Some italic text.\n"
    encoded = content.plain_text.encode("utf-8")
    styled = [encoded[r.start : r.end].decode("utf-8") for r in content.ranges]
    assert styled == ["Title", "Section", "italic"]
    assert content.ranges[0].foreground == (255, 255, 135)
    assert content.ranges[1].foreground == (0, 175, 255)
    assert content.ranges[2].italic and not content.ranges[2].bold


def test_unstyled_output_has_no_ranges():
    content = project_ansi("plain text\n")

    assert content.plain_text == "plain text\n"
    assert content.ranges == []


def test_underline_only_text_has_no_range():
    assert project_ansi("\x1b[4mlink\x1b[24m\n").ranges == []
