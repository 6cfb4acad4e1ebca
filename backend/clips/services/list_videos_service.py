from typing import Any, Dict, List, Optional

from ..models import Video
from . import repository


def video_to_dict(video: Video, include_metadata: bool = True) -> Dict[str, Any]:
    data = {
        "video_id": str(video.video_id),
        "organization_id": str(video.organization_id) if video.organization_id else None,
        "title": video.title,
        "source_type": video.source_type,
        "source_url": video.source_url,
        "status": video.status,
        "duration": video.duration,
        "resolution": video.resolution,
        "thumbnail_path": video.thumbnail_path,
        "stage_started_at": video.stage_started_at.isoformat() if video.stage_started_at else None,
        "created_at": video.created_at.isoformat() if video.created_at else None,
        "updated_at": video.updated_at.isoformat() if video.updated_at else None,
    }
    if include_metadata:
        data["metadata"] = video.metadata or {}
    return data


def video_status_to_dict(video: Video) -> Dict[str, Any]:
    """Resumo para polling: status e o último erro registrado por etapa."""
    metadata = video.metadata or {}
    return {
        "video_id": str(video.video_id),
        "status": video.status,
        "in_progress": video.is_in_progress,
        "stage_started_at": video.stage_started_at.isoformat() if video.stage_started_at else None,
        "error": metadata.get("error"),
        "transcription_error": metadata.get("transcription_error"),
        "analysis_error": metadata.get("analysis_error"),
        "clip_count": video.clips.count(),
        "has_transcript": hasattr(video, "transcript"),
    }


def list_videos(organization_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Lista vídeos ordenados por data de criação (mais recentes primeiro).

    Returns:
        Lista de dicts sem o metadata completo
    """
    return [video_to_dict(v, include_metadata=False) for v in repository.list_videos(organization_id)]
