"""
Detecta, pontua, ordena e persiste os clips de um vídeo.
"""

import logging
from typing import List

from django.conf import settings

from ..models import Clip, Video
from . import repository
from .ai_content_service import generate_ai_content
from .candidate import ClipCandidate
from .caption_service import default_caption_style
from .clip_detection_service import detect_candidates, get_detector
from .gemini_utils import is_gemini_available
from .transcript_service import slice_transcript
from .virality_service import rank_candidates

logger = logging.getLogger(__name__)


def build_clip(candidate: ClipCandidate, scores: dict, rank: int, transcript=None) -> Clip:
    """Monta um Clip (não salvo) a partir do candidato pontuado."""
    text = candidate.transcript
    segments = []
    if transcript is not None:
        sub = slice_transcript(transcript, candidate.start_time, candidate.end_time)
        segments = sub["segments"]
        text = text or sub["text"]

    metadata = {
        "emotional_content": candidate.emotional_content,
        "hook_strength": candidate.hook_strength,
        "reason": candidate.description,
    }
    metadata.update(candidate.extra or {})
    if is_gemini_available():
        metadata.update(generate_ai_content(candidate))

    return Clip(
        title=(candidate.title or "Untitled Clip")[:255],
        description=candidate.description,
        start_time=candidate.start_time,
        end_time=candidate.end_time,
        duration=round(candidate.end_time - candidate.start_time, 3),
        source=candidate.source,
        detection_rank=rank,
        virality_score=scores["total"],
        score_hook=scores["hook"],
        score_emotion=scores["emotion"],
        score_insight=scores["insight"],
        score_cta=scores["cta"],
        score_quality=scores["quality"],
        transcript=text,
        transcript_segments=segments,
        suggested_caption=candidate.suggested_caption,
        caption_style=default_caption_style(),
        metadata=metadata,
    )


def generate_clips(video: Video, transcript=None, detector=None, replace: bool = False) -> List[Clip]:
    """
    Roda a detecção (com fallback), pontua e persiste no máximo
    MAX_CLIPS_PER_VIDEO clips.

    Args:
        video: Vídeo já com duração
        transcript: Transcrição do vídeo (opcional para o detector de vídeo/fallback)
        detector: Estratégia de detecção; usa a configurada se None
        replace: Apaga todos os clips anteriores do vídeo na mesma transação
    """
    detector = detector or get_detector()
    candidates = detect_candidates(detector, transcript, video)

    limit = int(getattr(settings, "MAX_CLIPS_PER_VIDEO", 10))
    ranked = rank_candidates(candidates, limit=limit)

    clips = [
        build_clip(candidate, scores, rank, transcript)
        for rank, (candidate, scores) in enumerate(ranked)
    ]

    if replace:
        created = repository.replace_clips(video, clips)
    else:
        created = repository.insert_clips(video, clips)

    logger.info(
        f"[analysis] video_id={video.video_id}: {len(candidates)} candidatos, "
        f"{len(created)} clips persistidos (replace={replace})"
    )
    return created
