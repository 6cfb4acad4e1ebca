from typing import Any, Dict, List

from ..models import Clip
from . import repository


def clip_to_dict(clip: Clip) -> Dict[str, Any]:
    return {
        "clip_id": str(clip.clip_id),
        "video_id": str(clip.video.video_id),
        "title": clip.title,
        "description": clip.description,
        "start_time": clip.start_time,
        "end_time": clip.end_time,
        "duration": clip.duration,
        "source": clip.source,
        "detection_rank": clip.detection_rank,
        "virality_score": clip.virality_score,
        "scores": {
            "hook": clip.score_hook,
            "emotion": clip.score_emotion,
            "insight": clip.score_insight,
            "cta": clip.score_cta,
            "quality": clip.score_quality,
        },
        "transcript": clip.transcript,
        "transcript_segments": clip.transcript_segments,
        "suggested_caption": clip.suggested_caption,
        "caption_style": clip.caption_style,
        "aspect_ratio": clip.aspect_ratio,
        "status": clip.status,
        "approved_at": clip.approved_at.isoformat() if clip.approved_at else None,
        "export_status": clip.export_status,
        "exported_path": clip.exported_path,
        "thumbnail_path": clip.thumbnail_path,
        "metadata": clip.metadata or {},
        "created_at": clip.created_at.isoformat() if clip.created_at else None,
        "updated_at": clip.updated_at.isoformat() if clip.updated_at else None,
    }


def list_video_clips(video_id: str) -> List[Dict[str, Any]]:
    """
    Lista os clips de um vídeo, melhor score primeiro.

    Raises:
        VideoNotFound: vídeo inexistente
    """
    video = repository.get_video(video_id)
    return [clip_to_dict(c) for c in repository.list_clips(video.video_id)]
