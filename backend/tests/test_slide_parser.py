import pytest

from slide_studio.services.slide_parser import FALLBACK_TITLE, Slide, parse_slides, render_slides


def test_parses_headings_into_slides():
    slides = parse_slides("# A\nfoo\n# B\nbar\nbaz")
    assert slides == [Slide("A", "foo"), Slide("B", "bar\nbaz")]


def test_level_two_headings_start_slides():
    slides = parse_slides("## Intro\nhello\n## Details\nworld")
    assert [s.title for s in slides] == ["Intro", "Details"]


def test_level_three_heading_is_body_text():
    slides = parse_slides("# Topic\n### sub point\ntext")
    assert slides == [Slide("Topic", "### sub point\ntext")]


def test_blank_lines_are_dropped():
    slides = parse_slides("\n\n# A\n\nfoo\n\n   \nbar\n\n")
    assert slides == [Slide("A", "foo\nbar")]


def test_consecutive_headings_each_become_a_slide():
    slides = parse_slides("# A\n# B\n# C\nbody")
    assert slides == [Slide("A", ""), Slide("B", ""), Slide("C", "body")]


def test_text_before_first_heading_is_kept():
    slides = parse_slides("preamble\n# A\nfoo")
    assert slides == [Slide("", "preamble"), Slide("A", "foo")]


def test_no_headings_is_one_untitled_slide():
    slides = parse_slides("just some text\nmore")
    assert slides == [Slide("", "just some text\nmore")]


@pytest.mark.parametrize("text", ["", "   ", "\n\n  \n"])
def test_empty_input_yields_single_fallback_slide(text):
    slides = parse_slides(text)
    assert slides == [Slide(FALLBACK_TITLE, "")]


def test_heading_marker_requires_space():
    slides = parse_slides("#hashtag\n# Real\nbody")
    assert slides == [Slide("", "#hashtag"), Slide("Real", "body")]


@pytest.mark.parametrize(
    "text",
    [
        "# A\nfoo\n# B\nbar\nbaz",
        "preamble\n## A\n- one\n- two\n# B",
        "# A\n# B\n\n# C\nx",
        "",
        "no headings at all\nsecond line",
        "#  Spaced title  \n  indented body  \n",
    ],
)
def test_parse_render_parse_is_stable(text):
    first = parse_slides(text)
    assert parse_slides(render_slides(first)) == first
