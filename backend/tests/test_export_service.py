import os
import subprocess
from unittest.mock import patch

import pytest

from clips.exceptions import (
    ClipNotApproved,
    EncoderFailed,
    EncoderUnavailable,
    MediaProbeError,
    NoTranscriptAvailable,
    StageConflict,
    UnsupportedAspectRatio,
    ValidationError,
    VideoFileMissing,
)
from clips.models import Video
from clips.services import export_service


@pytest.fixture(autouse=True)
def export_dirs(settings, tmp_path):
    settings.CLIP_EXPORTS_DIR = str(tmp_path / "exports")
    settings.CLIP_SUBTITLES_DIR = str(tmp_path / "subtitles")
    settings.THUMBNAILS_DIR = str(tmp_path / "thumbnails")


@pytest.fixture(autouse=True)
def clip_thumbnail():
    with patch("clips.services.export_service.extract_thumbnail", side_effect=lambda src, dst, **kwargs: dst) as mocked:
        yield mocked


@pytest.fixture
def encoder_available():
    with patch("clips.services.export_service.is_encoder_available", return_value=True) as mocked:
        yield mocked


@pytest.fixture
def queued_task():
    with patch("clips.tasks.export_clip_task.export_clip_task.apply_async") as mocked:
        mocked.return_value.id = "task-1"
        yield mocked


def test_filter_graph_portrait_crops():
    graph = export_service.build_filter_graph(45.5, 75.2, "9:16", "/tmp/subs.ass")

    assert graph.startswith("[0:v]trim=start=45.500:end=75.200,setpts=PTS-STARTPTS,")
    assert "scale=1080:1920:force_original_aspect_ratio=increase,crop=1080:1920" in graph
    assert "ass='/tmp/subs.ass'[v]" in graph
    assert graph.endswith("[0:a]atrim=start=45.500:end=75.200,asetpts=PTS-STARTPTS[a]")


def test_filter_graph_landscape_pads():
    graph = export_service.build_filter_graph(0, 10, "16:9", None)

    assert "pad=1920:1080:(ow-iw)/2:(oh-ih)/2:color=black" in graph
    assert "ass=" not in graph


def test_resolutions():
    assert export_service.resolution_for("4:5") == (1080, 1350)
    assert export_service.resolution_for("1:1") == (1080, 1080)
    with pytest.raises(UnsupportedAspectRatio):
        export_service.resolution_for("3:2")


def test_escape_filter_path():
    assert export_service.escape_filter_path("C:\\subs\\a,b.ass") == "C\\:/subs/a\\,b.ass"


@pytest.mark.django_db
def test_export_without_transcript_fails_before_subprocess(approved_clip, encoder_available, queued_task):
    with patch("clips.services.export_service.subprocess.run") as run:
        with pytest.raises(NoTranscriptAvailable):
            export_service.request_export(approved_clip.clip_id)

    run.assert_not_called()
    queued_task.assert_not_called()
    approved_clip.refresh_from_db()
    assert approved_clip.export_status is None


@pytest.mark.django_db
def test_export_requires_encoder(approved_clip, transcript):
    with patch("clips.services.export_service.is_encoder_available", return_value=False):
        with pytest.raises(EncoderUnavailable):
            export_service.request_export(approved_clip.clip_id)


@pytest.mark.django_db
def test_export_requires_approval(clip, transcript, encoder_available):
    with pytest.raises(ClipNotApproved):
        export_service.request_export(clip.clip_id)


@pytest.mark.django_db
def test_export_requires_video_file(approved_clip, transcript, encoder_available):
    Video.objects.filter(pk=approved_clip.video.pk).update(file_path="/nonexistent/video.mp4")

    with pytest.raises(VideoFileMissing):
        export_service.request_export(approved_clip.clip_id)


@pytest.mark.django_db
def test_export_rejects_bad_words_per_line(approved_clip, transcript, encoder_available, queued_task):
    with pytest.raises(ValidationError):
        export_service.request_export(approved_clip.clip_id, {"words_per_line": "zero"})


@pytest.mark.django_db
def test_request_export_claims_and_queues(approved_clip, transcript, encoder_available, queued_task):
    result = export_service.request_export(approved_clip.clip_id, {"caption_style": "karaoke", "aspect_ratio": "1:1"})

    assert result["status"] == "exporting"
    args = queued_task.call_args.kwargs["args"]
    assert args[0] == str(approved_clip.clip_id)
    assert args[1]["caption_style"]["preset"] == "karaoke"
    assert queued_task.call_args.kwargs["queue"] == "clip.export"

    with pytest.raises(StageConflict):
        export_service.request_export(approved_clip.clip_id)


@pytest.mark.django_db
def test_run_export_success(approved_clip, transcript, encoder_available, settings, clip_thumbnail):
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("clips.services.export_service.subprocess.run", return_value=completed) as run:
        result = export_service.run_export(approved_clip.clip_id, {"aspect_ratio": "4:5"})

    cmd = run.call_args.args[0]
    assert cmd[cmd.index("-filter_complex") + 1].startswith("[0:v]trim=start=45.500")
    assert cmd[-1] == result["export_path"]
    assert result["resolution"] == "1080x1350"
    assert result["duration"] == 29.7
    assert os.listdir(settings.CLIP_SUBTITLES_DIR) == []
    assert result["thumbnail_path"] == os.path.join(settings.THUMBNAILS_DIR, "clips", f"{approved_clip.clip_id}.jpg")
    assert clip_thumbnail.call_args.args[0] == result["export_path"]
    assert clip_thumbnail.call_args.kwargs == {"at_seconds": 0.0, "size": "360x450"}

    approved_clip.refresh_from_db()
    assert approved_clip.export_status == "exported"
    assert approved_clip.exported_path == result["export_path"]
    assert approved_clip.status == "approved"
    assert approved_clip.thumbnail_path == result["thumbnail_path"]
    assert approved_clip.metadata["last_export"]["captions"] is True


@pytest.mark.django_db
def test_run_export_failure_records_stderr_tail(approved_clip, transcript, encoder_available, settings):
    failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="x" * 3000 + "END")

    with patch("clips.services.export_service.subprocess.run", return_value=failed):
        with pytest.raises(EncoderFailed):
            export_service.run_export(approved_clip.clip_id)

    approved_clip.refresh_from_db()
    error = approved_clip.metadata["export_error"]
    assert approved_clip.export_status == "export_error"
    assert approved_clip.exported_path is None
    assert error["returncode"] == 1
    assert len(error["stderr"]) == 2000
    assert error["stderr"].endswith("END")
    assert os.listdir(settings.CLIP_SUBTITLES_DIR) == []


@pytest.mark.django_db
def test_run_export_timeout(approved_clip, transcript, encoder_available):
    timeout = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=1, stderr=b"stuck")

    with patch("clips.services.export_service.subprocess.run", side_effect=timeout):
        with pytest.raises(EncoderFailed):
            export_service.run_export(approved_clip.clip_id)

    approved_clip.refresh_from_db()
    assert approved_clip.export_status == "export_error"
    assert approved_clip.metadata["export_error"]["stderr"] == "stuck"


@pytest.mark.django_db
def test_run_export_survives_subtitle_cleanup_failure(approved_clip, transcript, encoder_available):
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("clips.services.export_service.subprocess.run", return_value=completed), patch(
        "clips.services.export_service.os.remove", side_effect=OSError("busy")
    ):
        result = export_service.run_export(approved_clip.clip_id)

    assert result["aspect_ratio"] == "9:16"


@pytest.mark.django_db
def test_export_paths_are_unique(approved_clip, transcript, encoder_available):
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("clips.services.export_service.subprocess.run", return_value=completed):
        first = export_service.run_export(approved_clip.clip_id)
        second = export_service.run_export(approved_clip.clip_id)

    assert first["export_path"] != second["export_path"]


@pytest.mark.django_db
def test_render_clip_srt(clip, transcript):
    content = export_service.render_clip_srt(clip.clip_id, words_per_line=5)

    assert content.startswith("1\n00:00:00,500 --> ")
    assert "word24 word25" in content


@pytest.mark.parametrize(
    "value,expected",
    [(None, True), (True, True), (False, False), ("false", False), ("0", False), ("yes", True), ("On", True)],
)
def test_parse_captions_option(value, expected):
    assert export_service.parse_captions_option(value) is expected


@pytest.mark.parametrize("value", ["maybe", 2, [], {"on": True}])
def test_parse_captions_option_rejects_garbage(value):
    with pytest.raises(ValidationError):
        export_service.parse_captions_option(value)


@pytest.mark.django_db
def test_uncaptioned_export_does_not_need_transcript(approved_clip, encoder_available, queued_task):
    result = export_service.request_export(approved_clip.clip_id, {"captions": "false"})

    assert result["status"] == "exporting"
    assert queued_task.call_args.kwargs["args"][1]["captions"] is False


@pytest.mark.django_db
def test_run_uncaptioned_export(approved_clip, encoder_available, settings):
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("clips.services.export_service.subprocess.run", return_value=completed) as run:
        result = export_service.run_export(approved_clip.clip_id, {"captions": False, "aspect_ratio": "1:1"})

    cmd = run.call_args.args[0]
    graph = cmd[cmd.index("-filter_complex") + 1]
    assert "crop=1080:1080" in graph
    assert "ass=" not in graph
    assert result["captions"] is False
    assert not os.path.exists(settings.CLIP_SUBTITLES_DIR) or os.listdir(settings.CLIP_SUBTITLES_DIR) == []

    approved_clip.refresh_from_db()
    assert approved_clip.export_status == "exported"
    assert approved_clip.metadata["last_export"]["captions"] is False


@pytest.mark.django_db
def test_thumbnail_failure_keeps_export(approved_clip, transcript, encoder_available, clip_thumbnail):
    clip_thumbnail.side_effect = MediaProbeError("ffmpeg não encontrado")
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("clips.services.export_service.subprocess.run", return_value=completed):
        result = export_service.run_export(approved_clip.clip_id)

    assert result["thumbnail_path"] is None
    approved_clip.refresh_from_db()
    assert approved_clip.export_status == "exported"
    assert approved_clip.thumbnail_path is None
