import logging

from celery import shared_task
from django.utils import timezone

from ..exceptions import VideoNotFound
from ..services import repository
from ..services.video_service import YOUTUBE_PLACEHOLDER_TITLE, download_from_youtube

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, name="clips.tasks.import_youtube_task")
def import_youtube_task(self, video_id: str) -> dict:
    """
    Baixa o vídeo do YouTube e segue para o fluxo de upload (process_video_task).
    """
    try:
        video = repository.get_video(video_id)
    except VideoNotFound:
        return {"error": "Video not found", "status": "failed"}

    if video.status != "downloading":
        logger.warning(f"[youtube] video_id={video_id} está em '{video.status}', ignorando")
        return {"video_id": video_id, "status": video.status, "skipped": True}

    try:
        logger.info(f"[youtube] Baixando {video.source_url} para video_id={video_id}")
        result = download_from_youtube(video.source_url, video.video_id)
    except Exception as e:
        logger.error(f"[youtube] Falha no download de video_id={video_id}: {e}", exc_info=True)
        repository.update_video_status(video.video_id, "error", metadata={"error": str(e)})
        return {"video_id": video_id, "status": "error", "error": str(e)}

    fields = {"file_path": result["file_path"], "stage_started_at": timezone.now()}
    if result.get("title") and video.title == YOUTUBE_PLACEHOLDER_TITLE:
        fields["title"] = result["title"][:255]

    repository.update_video_status(video.video_id, "processing", **fields)

    from .process_video_task import process_video_task

    task_result = process_video_task.apply_async(args=[str(video.video_id)], queue="video.probe")
    logger.info(f"[youtube] process_video_task disparada com task_id={task_result.id}")

    return {"video_id": video_id, "status": "processing", "file_path": result["file_path"]}
