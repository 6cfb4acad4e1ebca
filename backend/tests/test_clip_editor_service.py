import uuid

import pytest

from clips.exceptions import (
    ClipNotFound,
    InvalidRange,
    InvalidReviewStatus,
    UnknownStylePreset,
    UnsupportedAspectRatio,
    VideoDurationUnknown,
)
from clips.models import Clip, Video
from clips.services import clip_editor_service as editor

FILLER_TEXT = "So, um, I think, you know, this works."


@pytest.mark.django_db
def test_update_timeline_recomputes_duration(approved_clip):
    clip = editor.update_timeline(approved_clip.clip_id, 45.5, 75.2)

    assert clip.start_time == 45.5
    assert clip.end_time == 75.2
    assert clip.duration == 29.7
    assert clip.status == "pending"
    assert clip.approved_at is None


@pytest.mark.django_db
@pytest.mark.parametrize(
    "start,end",
    [(10, 5), (10, 10), (-1, 20), (100, 181), ("nan", 50), (10, "nan"), (10, "inf"), ("-inf", 20)],
)
def test_update_timeline_rejects_invalid_ranges(clip, start, end):
    with pytest.raises(InvalidRange):
        editor.update_timeline(clip.clip_id, start, end)

    clip.refresh_from_db()
    assert (clip.start_time, clip.end_time) == (45.5, 75.2)


@pytest.mark.django_db
def test_update_timeline_requires_video_duration(clip):
    Video.objects.filter(pk=clip.video.pk).update(duration=None)

    with pytest.raises(VideoDurationUnknown):
        editor.update_timeline(clip.clip_id, 10, 20)

    clip.refresh_from_db()
    assert (clip.start_time, clip.end_time) == (45.5, 75.2)


@pytest.mark.django_db
def test_update_timeline_rederives_transcript(clip, transcript):
    updated = editor.update_timeline(clip.clip_id, 0.0, 10.0)

    assert updated.transcript == "word1 word2 word3 word4 word5"
    assert updated.transcript_segments == [{"text": "word1 word2 word3 word4 word5", "start": 0.0, "end": 10.0}]


@pytest.mark.django_db
def test_update_timeline_unknown_clip():
    with pytest.raises(ClipNotFound):
        editor.update_timeline(uuid.uuid4(), 0, 10)


@pytest.mark.django_db
def test_update_transcript_slices_when_segments_missing(clip, transcript):
    updated = editor.update_transcript(clip.clip_id, "  edited text  ")

    assert updated.transcript == "edited text"
    assert updated.transcript_segments
    assert all(s["start"] >= 0 for s in updated.transcript_segments)


def test_detect_filler_words():
    fillers = editor.detect_filler_words(FILLER_TEXT)

    assert fillers == [
        {"word": "so", "position": 0, "length": 2},
        {"word": "um", "position": 4, "length": 2},
        {"word": "you know", "position": 17, "length": 8},
    ]


def test_detect_filler_words_whole_words_only():
    assert editor.detect_filler_words("Umbrellas are alright, literally.") == [
        {"word": "literally", "position": 23, "length": 9},
    ]


def test_remove_filler_words():
    assert editor.remove_filler_words(FILLER_TEXT) == "I think, this works."


def test_remove_filler_words_keeps_clean_text():
    assert editor.remove_filler_words("Nothing to remove here!") == "Nothing to remove here!"


@pytest.mark.django_db
def test_set_caption_style_preset_and_custom(clip):
    updated = editor.set_caption_style(clip.clip_id, "news")
    assert updated.caption_style["preset"] == "news"

    updated = editor.set_caption_style(clip.clip_id, {"font_size": 40})
    assert updated.caption_style["preset"] == "custom"
    assert updated.caption_style["font_size"] == 40

    with pytest.raises(UnknownStylePreset):
        editor.set_caption_style(clip.clip_id, "neon")


@pytest.mark.django_db
def test_set_aspect_ratio(approved_clip):
    updated = editor.set_aspect_ratio(approved_clip.clip_id, "1:1")

    assert updated.aspect_ratio == "1:1"
    assert updated.status == "pending"

    with pytest.raises(UnsupportedAspectRatio):
        editor.set_aspect_ratio(approved_clip.clip_id, "21:9")


@pytest.mark.django_db
def test_duplicate_clip_is_independent(clip):
    clip.export_status = "export_error"
    clip.thumbnail_path = "/thumbs/clips/old.jpg"
    clip.metadata = {"emotional_content": "humor", "export_error": {"message": "boom"}, "last_export": {"captions": True}}
    clip.save()

    duplicate = editor.duplicate_clip(clip.clip_id)

    assert duplicate.clip_id != clip.clip_id
    assert duplicate.title == "Great moment (copy)"
    assert duplicate.status == "pending"
    assert duplicate.export_status is None
    assert duplicate.metadata["duplicated_from"] == str(clip.clip_id)
    assert "export_error" not in duplicate.metadata
    assert "last_export" not in duplicate.metadata
    assert duplicate.thumbnail_path is None
    assert duplicate.source == clip.source
    assert set(dict(Clip.SOURCE_CHOICES)) == {"ai_transcript", "ai_video", "fallback"}

    editor.set_caption_style(duplicate.clip_id, "minimal")
    clip.refresh_from_db()
    assert clip.caption_style["preset"] == "bold"
    assert Clip.objects.filter(video=clip.video).count() == 2


@pytest.mark.django_db
def test_review_status(clip):
    approved = editor.set_review_status(clip.clip_id, "approved")
    assert approved.status == "approved"
    assert approved.approved_at is not None

    rejected = editor.set_review_status(clip.clip_id, "rejected")
    assert rejected.approved_at is None

    with pytest.raises(InvalidReviewStatus):
        editor.set_review_status(clip.clip_id, "published")


@pytest.mark.django_db
def test_bulk_approve_skips_invalid_ids(clip):
    other = editor.duplicate_clip(clip.clip_id)

    updated = editor.bulk_approve([str(clip.clip_id), str(other.clip_id), "not-a-uuid"])

    assert updated == 2
    assert set(Clip.objects.values_list("status", flat=True)) == {"approved"}


def test_list_caption_presets():
    assert set(editor.list_caption_presets()) == {"animated", "bold", "minimal", "karaoke", "news"}
