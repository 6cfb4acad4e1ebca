import pytest
from django.core.cache import cache

from clips.models import Clip, Video
from clips.services.caption_service import default_caption_style
from clips.services.transcript_service import save_transcript

from .factories import build_transcript_payload


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "source.mp4"
    path.write_bytes(b"\x00" * 32)
    return str(path)


@pytest.fixture
def video(db, video_file):
    return Video.objects.create(
        title="Podcast episode",
        file_path=video_file,
        duration=180.0,
        resolution="1920x1080",
        status="ready",
    )


@pytest.fixture
def transcript(video):
    return save_transcript(video, build_transcript_payload(180.0), provider="whisper")


@pytest.fixture
def clip(video):
    return Clip.objects.create(
        video=video,
        title="Great moment",
        description="Key insight",
        start_time=45.5,
        end_time=75.2,
        duration=29.7,
        source="fallback",
        virality_score=72,
        transcript="So, um, I think, you know, this works.",
        caption_style=default_caption_style(),
        metadata={"emotional_content": "humor"},
    )


@pytest.fixture
def approved_clip(clip):
    clip.status = "approved"
    clip.save(update_fields=["status"])
    return clip
