import logging
import os

from celery import shared_task
from django.db import OperationalError

from ..exceptions import VideoNotFound
from ..services import repository
from ..services.transcript_service import save_transcript
from ..services.transcription_service import get_transcription_provider

logger = logging.getLogger(__name__)


def _fail(video_id, message: str) -> dict:
    repository.update_video_status(video_id, "transcription_error", metadata={"transcription_error": message})
    return {"video_id": str(video_id), "status": "transcription_error", "error": message}


@shared_task(bind=True, max_retries=3, name="clips.tasks.transcribe_video_task")
def transcribe_video_task(self, video_id: str) -> dict:
    try:
        video = repository.get_video(video_id)
    except VideoNotFound:
        return {"error": "Video not found", "status": "failed"}

    if video.status != "transcribing":
        logger.warning(f"[transcribe] video_id={video_id} está em '{video.status}', ignorando")
        return {"video_id": video_id, "status": video.status, "skipped": True}

    if not video.file_path or not os.path.exists(video.file_path):
        return _fail(video.video_id, "Video file not found")

    try:
        logger.info(f"[transcribe] Iniciando transcrição para video_id={video_id}")
        provider = get_transcription_provider()
        payload = provider.transcribe(video.file_path)
        transcript = save_transcript(video, payload, provider=provider.name)
    except OperationalError as e:
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=2 ** self.request.retries)
        return _fail(video.video_id, str(e))
    except Exception as e:
        logger.error(f"[transcribe] Falha na transcrição de video_id={video_id}: {e}", exc_info=True)
        return _fail(video.video_id, str(e))

    repository.update_video_status(
        video.video_id,
        "transcribed",
        metadata={"transcription_error": None, "language": transcript.language},
    )
    logger.info(f"[transcribe] video_id={video_id} transcrito ({len(transcript.segments)} segmentos)")

    return {
        "video_id": video_id,
        "status": "transcribed",
        "transcript_id": str(transcript.transcript_id),
        "language": transcript.language,
    }
