"""
Edição de clips: janela de tempo, transcrição, estilo de legenda,
proporção, palavras de preenchimento, duplicação e revisão.

Cada mutação é uma única escrita atômica no clip.
"""

import copy
import logging
import math
import re
import uuid
from typing import Iterable, List, Optional

from django.utils import timezone

from ..exceptions import InvalidRange, InvalidReviewStatus, UnsupportedAspectRatio, VideoDurationUnknown
from ..models import Clip
from . import repository
from .caption_service import list_presets, resolve_caption_style
from .transcript_service import get_clip_sub_transcript, invalidate_clip_transcript

logger = logging.getLogger(__name__)

SUPPORTED_ASPECT_RATIOS = ("9:16", "1:1", "4:5", "16:9")
REVIEW_STATUSES = ("pending", "approved", "rejected")

FILLER_WORDS = (
    "um", "uh", "like", "you know", "basically", "actually", "literally",
    "so", "right", "okay", "well", "i mean", "kind of", "sort of",
)

_BOUNDARY = re.compile(r"[\s,.]")


def get_clip_for_editing(clip_id) -> dict:
    clip = repository.get_clip(clip_id)
    video = clip.video
    return {
        "clip_id": str(clip.clip_id),
        "video_id": str(video.video_id),
        "video_path": video.file_path,
        "video_duration": video.duration,
        "title": clip.title,
        "description": clip.description,
        "start_time": clip.start_time,
        "end_time": clip.end_time,
        "duration": clip.duration,
        "transcript": clip.transcript,
        "transcript_segments": clip.transcript_segments,
        "caption_style": clip.caption_style or resolve_caption_style(None),
        "suggested_caption": clip.suggested_caption,
        "aspect_ratio": clip.aspect_ratio,
        "status": clip.status,
        "export_status": clip.export_status,
        "virality_score": clip.virality_score,
    }


def update_timeline(clip_id, start_time, end_time) -> Clip:
    """
    Altera [start, end] do clip e volta a revisão para 'pending'.

    Raises:
        InvalidRange: start >= end ou fora de [0, duração do vídeo]
        VideoDurationUnknown: vídeo ainda sem duração
    """
    clip = repository.get_clip(clip_id)

    try:
        start = float(start_time)
        end = float(end_time)
    except (TypeError, ValueError):
        raise InvalidRange("start_time and end_time must be numbers")
    if not (math.isfinite(start) and math.isfinite(end)):
        raise InvalidRange("start_time and end_time must be finite numbers")

    if start >= end:
        raise InvalidRange("End time must be greater than start time", start_time=start, end_time=end)

    video_duration = clip.video.duration
    if video_duration is None:
        raise VideoDurationUnknown("Video duration is unknown. Wait for processing to finish.")
    if start < 0 or end > video_duration:
        raise InvalidRange(
            "Clip must be within the video duration",
            start_time=start,
            end_time=end,
            video_duration=video_duration,
        )

    invalidate_clip_transcript(clip.clip_id)

    clip.start_time = start
    clip.end_time = end
    sub = get_clip_sub_transcript(clip)

    fields = {
        "start_time": start,
        "end_time": end,
        "duration": round(end - start, 3),
        "status": "pending",
        "approved_at": None,
    }
    if sub is not None:
        fields["transcript"] = sub["text"]
        fields["transcript_segments"] = sub["segments"]

    repository.update_clip_fields(clip.clip_id, **fields)
    logger.info(f"[editor] Timeline do clip {clip.clip_id} atualizada: {start:.2f}-{end:.2f}")
    return repository.get_clip(clip.clip_id)


def update_transcript(clip_id, text: str, segments: Optional[list] = None) -> Clip:
    """Substitui a transcrição local; sem segments, recorta a transcrição do vídeo."""
    clip = repository.get_clip(clip_id)

    if segments is None:
        sub = get_clip_sub_transcript(clip)
        segments = sub["segments"] if sub else []

    repository.update_clip_fields(clip.clip_id, transcript=(text or "").strip(), transcript_segments=segments)
    return repository.get_clip(clip.clip_id)


def set_caption_style(clip_id, style_or_name) -> Clip:
    clip = repository.get_clip(clip_id)
    style = resolve_caption_style(style_or_name)
    repository.update_clip_fields(clip.clip_id, caption_style=style)
    return repository.get_clip(clip.clip_id)


def set_aspect_ratio(clip_id, aspect_ratio: str) -> Clip:
    if aspect_ratio not in SUPPORTED_ASPECT_RATIOS:
        raise UnsupportedAspectRatio(
            f"Invalid aspect ratio. Valid options: {', '.join(SUPPORTED_ASPECT_RATIOS)}",
            valid=list(SUPPORTED_ASPECT_RATIOS),
        )
    clip = repository.get_clip(clip_id)
    repository.update_clip_fields(clip.clip_id, aspect_ratio=aspect_ratio, status="pending", approved_at=None)
    return repository.get_clip(clip.clip_id)


def detect_filler_words(text: str) -> List[dict]:
    """
    Encontra palavras de preenchimento (palavra inteira, sem diferenciar caixa).

    Returns:
        [{"word", "position", "length"}] ordenado por posição
    """
    lower = (text or "").lower()
    results = []

    for filler in FILLER_WORDS:
        index = lower.find(filler)
        while index != -1:
            before = lower[index - 1] if index > 0 else " "
            after_index = index + len(filler)
            after = lower[after_index] if after_index < len(lower) else " "
            if _BOUNDARY.match(before) and _BOUNDARY.match(after):
                results.append({"word": filler, "position": index, "length": len(filler)})
            index = lower.find(filler, index + len(filler))

    results.sort(key=lambda r: r["position"])

    # Descarta matches sobrepostos para não cortar o mesmo trecho duas vezes
    non_overlapping = []
    last_end = -1
    for item in results:
        if item["position"] >= last_end:
            non_overlapping.append(item)
            last_end = item["position"] + item["length"]
    return non_overlapping


def remove_filler_words(text: str, fillers: Optional[Iterable[dict]] = None) -> str:
    """
    Remove as palavras de preenchimento e a vírgula que as acompanhava,
    preservando a pontuação final da frase.
    """
    text = text or ""
    if fillers is None:
        fillers = detect_filler_words(text)

    result = text
    for filler in sorted(fillers, key=lambda f: f["position"], reverse=True):
        start = filler["position"]
        end = start + filler["length"]
        # Leva junto a vírgula logo após o filler ("um, " -> "")
        if end < len(result) and result[end] == ",":
            end += 1
        result = result[:start] + result[end:]

    result = re.sub(r"\s+", " ", result)
    result = re.sub(r"\s+([,.!?;:])", r"\1", result)
    result = re.sub(r",(\s*,)+", ",", result)
    result = re.sub(r",\s*([.!?])", r"\1", result)
    result = re.sub(r"^[\s,;:]+", "", result)
    result = result.strip()

    if result and text[:1].isupper():
        result = result[0].upper() + result[1:]
    return result


def duplicate_clip(clip_id, new_title: Optional[str] = None) -> Clip:
    """Cópia profunda do clip (novo id, revisão pendente, sem exportação)."""
    source = repository.get_clip(clip_id)

    metadata = copy.deepcopy(source.metadata or {})
    metadata.pop("export_error", None)
    metadata.pop("last_export", None)
    metadata["duplicated_from"] = str(source.clip_id)

    duplicate = Clip.objects.create(
        video=source.video,
        title=(new_title or f"{source.title} (copy)")[:255],
        description=source.description,
        start_time=source.start_time,
        end_time=source.end_time,
        duration=source.duration,
        source=source.source,
        detection_rank=source.detection_rank,
        virality_score=source.virality_score,
        score_hook=source.score_hook,
        score_emotion=source.score_emotion,
        score_insight=source.score_insight,
        score_cta=source.score_cta,
        score_quality=source.score_quality,
        transcript=source.transcript,
        transcript_segments=copy.deepcopy(source.transcript_segments),
        suggested_caption=source.suggested_caption,
        caption_style=copy.deepcopy(source.caption_style),
        aspect_ratio=source.aspect_ratio,
        status="pending",
        metadata=metadata,
    )

    logger.info(f"[editor] Clip {source.clip_id} duplicado como {duplicate.clip_id}")
    return duplicate


def set_review_status(clip_id, status: str) -> Clip:
    if status not in REVIEW_STATUSES:
        raise InvalidReviewStatus(
            f"Invalid status. Valid options: {', '.join(REVIEW_STATUSES)}",
            valid=list(REVIEW_STATUSES),
        )
    clip = repository.get_clip(clip_id)
    approved_at = timezone.now() if status == "approved" else None
    repository.update_clip_fields(clip.clip_id, status=status, approved_at=approved_at)
    return repository.get_clip(clip.clip_id)


def bulk_approve(clip_ids: Iterable) -> int:
    """Aprova vários clips de uma vez; retorna quantos foram atualizados."""
    ids = []
    for raw in clip_ids or []:
        try:
            ids.append(uuid.UUID(str(raw)))
        except ValueError:
            logger.warning(f"[editor] clip_id inválido ignorado no bulk approve: {raw}")
    if not ids:
        return 0
    now = timezone.now()
    return Clip.objects.filter(clip_id__in=ids).update(status="approved", approved_at=now, updated_at=now)


def list_caption_presets() -> dict:
    return list_presets()
