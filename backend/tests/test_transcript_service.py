import pytest
from django.core.cache import cache

from clips.models import Transcript
from clips.services import clip_editor_service
from clips.services.transcript_service import (
    covered_range,
    get_clip_sub_transcript,
    get_sub_range,
    normalize_segments,
    save_transcript,
)


def test_normalize_segments_sorts_drops_and_clamps():
    raw = [
        {"start": 12.0, "end": 20.0, "text": " second ", "words": []},
        {"start": 9.0, "end": 5.0, "text": "inverted"},
        {
            "start": 0.0,
            "end": 10.0,
            "text": "first",
            "words": [
                {"start": 2.0, "end": 3.0, "word": "b"},
                {"start": 0.0, "end": 2.5, "word": "a"},
                {"start": 4.0, "end": 3.5, "word": "bad"},
                {"start": 5.0, "end": 6.0, "word": "  "},
            ],
        },
    ]

    segments = normalize_segments(raw)

    assert [s["text"] for s in segments] == ["first", "second"]
    assert segments[0]["words"] == [
        {"start": 0.0, "end": 2.5, "word": "a"},
        {"start": 2.5, "end": 3.0, "word": "b"},
    ]
    for seg in segments:
        assert seg["start"] <= seg["end"]
        for prev, cur in zip(seg["words"], seg["words"][1:]):
            assert prev["end"] <= cur["start"]


def test_normalize_segments_drops_non_finite_times():
    raw = [
        {"start": "nan", "end": 5.0, "text": "bad"},
        {
            "start": 0.0,
            "end": 4.0,
            "text": "ok",
            "words": [{"start": 0.0, "end": "inf", "word": "bad"}, {"start": 1.0, "end": 2.0, "word": "ok"}],
        },
    ]

    segments = normalize_segments(raw)

    assert [s["text"] for s in segments] == ["ok"]
    assert [w["word"] for w in segments[0]["words"]] == ["ok"]

@pytest.mark.django_db
def test_save_transcript_replaces_previous(video, transcript):
    replacement = save_transcript(
        video,
        {"segments": [{"start": 0, "end": 5, "text": "new", "words": [{"start": 0, "end": 1, "word": "new"}]}]},
        provider="whisper",
    )

    assert Transcript.objects.filter(video=video).count() == 1
    assert replacement.full_text == "new"
    assert replacement.duration == 5.0


@pytest.mark.django_db
def test_covered_range(transcript):
    assert covered_range(transcript) == (0.0, 180.0)
    assert covered_range(None) is None


@pytest.mark.django_db
def test_sub_range_is_relative_to_window(video, transcript):
    sub = get_sub_range(video.video_id, 45.5, 75.2)

    assert sub["duration"] == 29.7
    assert sub["words"][0] == {"word": "word24", "start": 0.5, "end": 2.0}
    assert all(0 <= w["start"] <= w["end"] <= 29.7 for w in sub["words"])
    assert sub["segments"][0]["start"] == 0.0
    assert sub["segments"][-1]["end"] == 29.7
    assert sub["text"].split()[0] == "word24"


@pytest.mark.django_db
def test_sub_range_without_transcript(video):
    assert get_sub_range(video.video_id, 0, 10) is None


@pytest.mark.django_db
def test_clip_sub_transcript_cache_follows_timeline(clip, transcript):
    first = get_clip_sub_transcript(clip)
    assert cache.get(f"clip_transcript:{clip.clip_id}") is not None

    updated = clip_editor_service.update_timeline(clip.clip_id, 0.0, 10.0)
    second = get_clip_sub_transcript(updated)

    assert first["words"][0]["word"] == "word24"
    assert [w["word"] for w in second["words"]] == ["word1", "word2", "word3", "word4", "word5"]
