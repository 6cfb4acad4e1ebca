import logging
import os

from celery import shared_task
from django.conf import settings
from django.db import OperationalError
from django.utils import timezone

from ..exceptions import MediaProbeError, VideoNotFound
from ..services import repository
from ..services.analysis_service import generate_clips
from ..services.clip_detection_service import FallbackClipDetector, VideoClipDetector, get_detector
from ..services.media_probe_service import extract_thumbnail, probe, thumbnail_offset

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, name="clips.tasks.process_video_task")
def process_video_task(self, video_id: str) -> dict:
    """
    Etapa de upload: extrai metadados e thumbnail, detecta clips
    (detector de vídeo quando configurado, senão particionador) e
    deixa o vídeo em 'ready'.
    """
    try:
        video = repository.get_video(video_id)
    except VideoNotFound:
        return {"error": "Video not found", "status": "failed"}

    if video.status != "processing":
        logger.warning(f"[probe] video_id={video_id} está em '{video.status}', ignorando")
        return {"video_id": video_id, "status": video.status, "skipped": True}

    try:
        logger.info(f"[probe] Extraindo metadados de video_id={video_id}")
        try:
            media = probe(video.file_path)
        except MediaProbeError as e:
            logger.error(f"[probe] Falha no probe de video_id={video_id}: {e.message}", exc_info=True)
            repository.update_video_status(video.video_id, "error", metadata={"error": e.message})
            return {"video_id": video_id, "status": "error", "error": e.message}

        thumbnail_path = None
        thumbnails_dir = getattr(settings, "THUMBNAILS_DIR", "/tmp")
        try:
            thumbnail_path = extract_thumbnail(
                video.file_path,
                os.path.join(thumbnails_dir, f"{video.video_id}.jpg"),
                at_seconds=thumbnail_offset(media.get("duration")),
            )
        except MediaProbeError as e:
            # Sem thumbnail o vídeo continua utilizável
            logger.warning(f"[probe] Thumbnail falhou para video_id={video_id}: {e.message}")

        fields = {
            "duration": media.get("duration"),
            "resolution": media.get("resolution"),
            "thumbnail_path": thumbnail_path,
        }

        detector = get_detector()
        if isinstance(detector, VideoClipDetector):
            repository.update_video_status(
                video.video_id,
                "analyzing",
                metadata={"probe": media},
                stage_started_at=timezone.now(),
                **fields,
            )
        else:
            detector = FallbackClipDetector()
            repository.update_video_status(video.video_id, "processing", metadata={"probe": media}, **fields)

        video.refresh_from_db()
        clips = generate_clips(video, transcript=None, detector=detector)

        repository.update_video_status(video.video_id, "ready", metadata={"clip_count": len(clips), "error": None})
        logger.info(f"[probe] video_id={video_id} pronto com {len(clips)} clips")

        return {
            "video_id": video_id,
            "status": "ready",
            "duration": media.get("duration"),
            "clip_count": len(clips),
        }

    except OperationalError as e:
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=2 ** self.request.retries)
        repository.update_video_status(video.video_id, "error", metadata={"error": str(e)})
        return {"error": str(e), "status": "error"}
    except Exception as e:
        logger.error(f"[probe] Erro inesperado processando video_id={video_id}: {e}", exc_info=True)
        repository.update_video_status(video.video_id, "error", metadata={"error": str(e)})
        return {"error": str(e), "status": "error"}
