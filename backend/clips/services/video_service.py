"""
Entrada de vídeos (upload e YouTube) e disparo das etapas do pipeline.

Cada disparo reivindica o estado "em andamento" de forma atômica antes de
enfileirar a task; a resposta ao cliente é imediata (202) e o progresso
é acompanhado pelo status do vídeo.
"""

import logging
import os
import uuid

from django.conf import settings
from django.utils import timezone

from ..exceptions import NoTranscriptAvailable, VideoFileMissing
from ..models import Video
from ..validators import MediaValidator, URLValidator, parse_organization_id
from . import repository
from .transcript_service import get_transcript

logger = logging.getLogger(__name__)

YOUTUBE_PLACEHOLDER_TITLE = "Downloading..."


def _video_dir(video_id) -> str:
    path = os.path.join(getattr(settings, "VIDEO_UPLOADS_DIR", "/tmp"), str(video_id))
    os.makedirs(path, exist_ok=True)
    return path


def _save_uploaded_file(video_id, uploaded_file) -> str:
    ext = uploaded_file.name.rsplit(".", 1)[-1].lower() if "." in uploaded_file.name else "mp4"
    path = os.path.join(_video_dir(video_id), f"original.{ext}")
    with open(path, "wb") as f:
        for chunk in uploaded_file.chunks():
            f.write(chunk)
    return path


def create_uploaded_video(uploaded_file, title: str = None, organization_id=None) -> Video:
    """Grava o upload, cria o vídeo em 'processing' e dispara o processamento."""
    MediaValidator.validate_upload(uploaded_file)
    organization_id = parse_organization_id(organization_id)

    video_id = uuid.uuid4()
    file_path = _save_uploaded_file(video_id, uploaded_file)

    video = Video.objects.create(
        video_id=video_id,
        organization_id=organization_id,
        title=(title or uploaded_file.name or "Untitled")[:255],
        source_type="upload",
        file_path=file_path,
        status="processing",
        stage_started_at=timezone.now(),
        metadata={
            "original_filename": uploaded_file.name,
            "mime_type": getattr(uploaded_file, "content_type", None),
            "size": uploaded_file.size,
        },
    )
    logger.info(f"[video] Upload recebido: video_id={video.video_id} ({uploaded_file.size} bytes)")

    from ..tasks.process_video_task import process_video_task

    process_video_task.apply_async(args=[str(video.video_id)], queue="video.probe")
    return video


def create_youtube_video(url: str, title: str = None, organization_id=None) -> Video:
    """Cria o vídeo em 'downloading' e dispara o download com yt-dlp."""
    url = URLValidator.validate_youtube_url(url)
    organization_id = parse_organization_id(organization_id)

    video = Video.objects.create(
        organization_id=organization_id,
        title=(title or YOUTUBE_PLACEHOLDER_TITLE)[:255],
        source_type="youtube",
        source_url=url,
        status="downloading",
        stage_started_at=timezone.now(),
    )
    logger.info(f"[video] Importação do YouTube iniciada: video_id={video.video_id} url={url}")

    from ..tasks.import_youtube_task import import_youtube_task

    import_youtube_task.apply_async(args=[str(video.video_id)], queue="video.probe")
    return video


def download_from_youtube(source_url: str, video_id) -> dict:
    """
    Baixa o vídeo com yt-dlp.

    Returns:
        {"file_path", "title"}
    """
    try:
        import yt_dlp
    except ImportError:
        raise RuntimeError("yt-dlp não está instalado")

    output_dir = _video_dir(video_id)
    output_template = os.path.join(output_dir, "video_download")

    ydl_opts = {
        "format": "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best",
        "merge_output_format": "mp4",
        "outtmpl": f"{output_template}.%(ext)s",
        "quiet": True,
        "no_warnings": True,
        "socket_timeout": 30,
        "noplaylist": True,
    }

    with yt_dlp.YoutubeDL(ydl_opts) as ydl:
        info = ydl.extract_info(source_url, download=True) or {}

    expected_file = f"{output_template}.mp4"
    if not os.path.exists(expected_file):
        files = [f for f in os.listdir(output_dir) if f.startswith("video_download")]
        if not files:
            raise RuntimeError("Arquivo de vídeo não encontrado após download")
        expected_file = os.path.join(output_dir, files[0])

    final_path = os.path.join(output_dir, "original.mp4")
    if expected_file != final_path:
        os.replace(expected_file, final_path)

    return {"file_path": final_path, "title": info.get("title")}


def request_transcription(video_id, force: bool = False) -> dict:
    """
    Dispara a transcrição. Sem `force`, um vídeo já transcrito não é refeito.

    Raises:
        VideoNotFound, VideoFileMissing, StageConflict
    """
    video = repository.get_video(video_id)

    if not video.file_path or not os.path.exists(video.file_path):
        raise VideoFileMissing("Video file not found", video_id=str(video.video_id))

    transcript = get_transcript(video.video_id)
    if transcript is not None and not force:
        return {
            "video_id": str(video.video_id),
            "status": "already_transcribed",
            "transcript_id": str(transcript.transcript_id),
        }

    repository.claim_video_stage(video.video_id, "transcribing")

    from ..tasks.transcribe_video_task import transcribe_video_task

    task = transcribe_video_task.apply_async(args=[str(video.video_id)], queue="video.transcribe")
    return {"video_id": str(video.video_id), "status": "transcribing", "task_id": task.id}


def request_analysis(video_id, replace: bool = False) -> dict:
    """
    Dispara detecção + scoring sobre a transcrição.

    Args:
        replace: True para "regenerar" (apaga todos os clips anteriores)

    Raises:
        VideoNotFound, NoTranscriptAvailable, StageConflict
    """
    video = repository.get_video(video_id)

    if get_transcript(video.video_id) is None:
        raise NoTranscriptAvailable("No transcript available. Transcribe the video first.")

    repository.claim_video_stage(video.video_id, "analyzing")

    from ..tasks.analyze_video_task import analyze_video_task

    task = analyze_video_task.apply_async(args=[str(video.video_id), replace], queue="video.analyze")
    return {"video_id": str(video.video_id), "status": "analyzing", "task_id": task.id, "replace": replace}
