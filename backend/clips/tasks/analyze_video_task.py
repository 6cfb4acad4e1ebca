import logging

from celery import shared_task
from django.conf import settings

from ..exceptions import VideoNotFound
from ..services import repository
from ..services.analysis_service import generate_clips
from ..services.clip_detection_service import get_detector
from ..services.transcript_service import get_transcript

logger = logging.getLogger(__name__)


def _transcript_detector():
    backend = (getattr(settings, "CLIP_DETECTION_BACKEND", "transcript") or "").lower()
    return get_detector("fallback" if backend == "fallback" else "transcript")


@shared_task(bind=True, max_retries=3, name="clips.tasks.analyze_video_task")
def analyze_video_task(self, video_id: str, replace: bool = False) -> dict:
    """
    Detecta clips a partir da transcrição, pontua e persiste.

    Args:
        replace: True apaga os clips anteriores do vídeo (regenerar)
    """
    try:
        video = repository.get_video(video_id)
    except VideoNotFound:
        return {"error": "Video not found", "status": "failed"}

    if video.status != "analyzing":
        logger.warning(f"[analysis] video_id={video_id} está em '{video.status}', ignorando")
        return {"video_id": video_id, "status": video.status, "skipped": True}

    try:
        transcript = get_transcript(video.video_id)
        if transcript is None:
            raise RuntimeError("No transcript available")

        clips = generate_clips(video, transcript=transcript, detector=_transcript_detector(), replace=replace)
    except Exception as e:
        logger.error(f"[analysis] Falha na análise de video_id={video_id}: {e}", exc_info=True)
        repository.update_video_status(video.video_id, "analysis_error", metadata={"analysis_error": str(e)})
        return {"video_id": video_id, "status": "analysis_error", "error": str(e)}

    repository.update_video_status(
        video.video_id,
        "analyzed",
        metadata={"analysis_error": None, "clip_count": len(clips)},
    )

    return {
        "video_id": video_id,
        "status": "analyzed",
        "clip_count": len(clips),
        "clip_ids": [str(c.clip_id) for c in clips],
    }
