from datetime import timedelta

import pytest
from django.utils import timezone

from clips.exceptions import StageConflict, ValidationError, VideoNotFound
from clips.models import Video
from clips.services import repository


@pytest.mark.django_db
def test_claim_moves_video_into_stage(video):
    repository.claim_video_stage(video.video_id, "transcribing")

    video.refresh_from_db()
    assert video.status == "transcribing"
    assert video.stage_started_at is not None


@pytest.mark.django_db
def test_second_claim_conflicts(video):
    repository.claim_video_stage(video.video_id, "transcribing")

    with pytest.raises(StageConflict) as exc:
        repository.claim_video_stage(video.video_id, "analyzing")

    assert exc.value.details["status"] == "transcribing"
    video.refresh_from_db()
    assert video.status == "transcribing"


@pytest.mark.django_db
def test_stale_claim_can_be_reclaimed(video, settings):
    settings.STAGE_STALE_AFTER_MINUTES = 30
    Video.objects.filter(pk=video.pk).update(
        status="analyzing",
        stage_started_at=timezone.now() - timedelta(minutes=31),
    )

    repository.claim_video_stage(video.video_id, "transcribing")

    video.refresh_from_db()
    assert video.status == "transcribing"


@pytest.mark.django_db
def test_claim_unknown_video():
    with pytest.raises(VideoNotFound):
        repository.claim_video_stage("7b0f5c1e-0000-4000-8000-000000000000", "transcribing")


@pytest.mark.django_db
def test_update_status_merges_metadata_and_clears_stage(video):
    Video.objects.filter(pk=video.pk).update(metadata={"original_filename": "a.mp4"})
    repository.claim_video_stage(video.video_id, "transcribing")

    repository.update_video_status(video.video_id, "transcription_error", metadata={"transcription_error": "boom"})

    video.refresh_from_db()
    assert video.status == "transcription_error"
    assert video.stage_started_at is None
    assert video.metadata == {"original_filename": "a.mp4", "transcription_error": "boom"}


@pytest.mark.django_db
def test_merge_video_metadata_keeps_status(video):
    repository.merge_video_metadata(video.video_id, {"probe": {"duration": 180.0}})

    video.refresh_from_db()
    assert video.status == "ready"
    assert video.metadata["probe"] == {"duration": 180.0}


@pytest.mark.django_db
def test_export_claim_conflicts_until_stale(clip):
    repository.claim_clip_export(clip.clip_id)

    with pytest.raises(StageConflict):
        repository.claim_clip_export(clip.clip_id)

    clip.export_started_at = timezone.now() - timedelta(hours=2)
    clip.save(update_fields=["export_started_at"])
    repository.claim_clip_export(clip.clip_id)


@pytest.mark.django_db
def test_list_videos_filters_by_organization(video):
    org = "0b6b5b1a-1111-4222-8333-444455556666"
    Video.objects.create(title="Other", organization_id=org)

    assert [v.title for v in repository.list_videos(org)] == ["Other"]
    assert len(repository.list_videos()) == 2

    with pytest.raises(ValidationError):
        repository.list_videos("not-a-uuid")
