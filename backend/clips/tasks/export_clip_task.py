import logging

from celery import shared_task

from ..exceptions import ClipNotFound, ClipPipelineError
from ..services import repository
from ..services.export_service import run_export

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="clips.tasks.export_clip_task")
def export_clip_task(self, clip_id: str, options: dict = None) -> dict:
    """Renderiza o clip com legendas queimadas (a reivindicação já foi feita pela view)."""
    try:
        clip = repository.get_clip(clip_id)
    except ClipNotFound:
        return {"error": "Clip not found", "status": "failed"}

    if clip.export_status != "exporting":
        logger.warning(f"[export] clip_id={clip_id} está em '{clip.export_status}', ignorando")
        return {"clip_id": clip_id, "status": clip.export_status, "skipped": True}

    try:
        result = run_export(clip.clip_id, options or {})
    except ClipPipelineError as e:
        # run_export já registrou export_error no clip
        return {"clip_id": clip_id, "status": "export_error", "error": e.message}
    except Exception as e:
        logger.error(f"[export] Erro inesperado exportando clip_id={clip_id}: {e}", exc_info=True)
        repository.update_clip_fields(
            clip.clip_id,
            export_status="export_error",
            export_started_at=None,
            metadata={"export_error": {"message": str(e)}},
        )
        return {"clip_id": clip_id, "status": "export_error", "error": str(e)}

    return {"clip_id": clip_id, "status": "exported", **result}
