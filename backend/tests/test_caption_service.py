import pytest

from clips.exceptions import InvalidCaptionStyle, UnknownStylePreset
from clips.services.caption_service import (
    CAPTION_STYLES,
    format_ass_time,
    format_srt_time,
    group_words,
    parse_ass_time,
    parse_srt_time,
    render_ass,
    render_srt,
    resolve_caption_style,
)


def make_words(count, start=0.0, step=0.5, length=0.5):
    return [
        {"start": start + i * step, "end": start + i * step + length, "word": f"w{i}"}
        for i in range(count)
    ]


def test_group_words_chunks_and_offsets():
    words = make_words(10, start=10.0)

    events = group_words(words, words_per_line=4, offset=10.0)

    assert [e["text"] for e in events] == ["w0 w1 w2 w3", "w4 w5 w6 w7", "w8 w9"]
    assert events[0]["start"] == 0.0
    assert events[0]["end"] == pytest.approx(2.0)
    assert events[-1]["end"] == pytest.approx(5.0)


def test_group_words_is_idempotent():
    words = make_words(9)
    snapshot = [dict(w) for w in words]

    first = group_words(words, 4)
    second = group_words(words, 4)

    assert first == second
    assert words == snapshot


def test_group_words_never_negative():
    events = group_words(make_words(2, start=1.0), 4, offset=5.0)

    assert events[0]["start"] == 0.0
    assert events[0]["end"] == 0.0


def test_time_formats_floor():
    assert format_ass_time(3661.239) == "1:01:01.23"
    assert format_srt_time(3661.239) == "01:01:01,239"
    assert format_ass_time(0.999) == "0:00:00.99"
    assert format_srt_time(0) == "00:00:00,000"


@pytest.mark.parametrize("seconds", [0.0, 1.5, 59.999, 75.2, 3599.01, 7322.456])
def test_time_formats_round_trip(seconds):
    assert abs(parse_ass_time(format_ass_time(seconds)) - seconds) < 0.01
    assert abs(parse_srt_time(format_srt_time(seconds)) - seconds) < 0.001


def test_render_ass_header_uses_target_resolution():
    content = render_ass(make_words(4), style="bold", resolution=(1080, 1350))

    assert "PlayResX: 1080" in content
    assert "PlayResY: 1350" in content
    assert "Style: Default,Impact,24,&H00FFFF00," in content
    assert "Dialogue: 0,0:00:00.00,0:00:02.00,Default,,0,0,0,,w0 w1 w2 w3" in content


def test_render_ass_karaoke_adds_word_timing():
    content = render_ass(make_words(2), style="karaoke")

    assert "{\\k50}w0 {\\k50}w1" in content
    assert ",&H0000FFFF,&H00FFFFFF," in content


def test_render_srt_numbered_cues():
    content = render_srt(make_words(6), words_per_line=5)

    assert content.startswith("1\n00:00:00,000 --> 00:00:02,500\nw0 w1 w2 w3 w4\n")
    assert "2\n00:00:02,500 --> 00:00:03,000\nw5\n" in content


def test_resolve_preset_by_name():
    style = resolve_caption_style("minimal")

    assert style["preset"] == "minimal"
    assert style["font_name"] == CAPTION_STYLES["minimal"]["font_name"]


def test_unknown_preset_is_rejected():
    with pytest.raises(UnknownStylePreset):
        resolve_caption_style("comic-sans")


def test_custom_style_merges_over_bold():
    style = resolve_caption_style({"fontSize": 32, "primary_color": "&H00FF00FF"})

    assert style["preset"] == "custom"
    assert style["font_size"] == 32
    assert style["primary_color"] == "&H00FF00FF"
    assert style["font_name"] == "Impact"


def test_preset_override_keeps_preset():
    style = resolve_caption_style({"preset": "karaoke", "font_size": 40})

    assert style["preset"] == "karaoke"
    assert style["font_size"] == 40
    assert style["secondary_color"] == CAPTION_STYLES["karaoke"]["secondary_color"]
    assert resolve_caption_style(style) == style

    content = render_ass(make_words(2), style=style)
    assert "{\\k50}w0" in content


@pytest.mark.parametrize(
    "overrides",
    [
        {"blink": True},
        {"font_size": "big"},
        {"primary_color": "red"},
        {"bold": "yes"},
        {"alignment": 12},
    ],
)
def test_invalid_custom_style(overrides):
    with pytest.raises(InvalidCaptionStyle):
        resolve_caption_style(overrides)
