"""
Acesso a Video e Clip usado pelas etapas do pipeline.

Toda atualização de múltiplos campos é feita em uma única query
(QuerySet.update) para que nenhum estado intermediário seja observável.
Merges de metadata JSON usam select_for_update dentro de uma transação.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..exceptions import ClipNotFound, StageConflict, VideoNotFound
from ..models import Clip, Video
from ..validators import parse_organization_id

logger = logging.getLogger(__name__)


def get_video(video_id) -> Video:
    try:
        return Video.objects.get(video_id=video_id)
    except (Video.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise VideoNotFound("Video not found", video_id=str(video_id))


def get_clip(clip_id) -> Clip:
    try:
        return Clip.objects.select_related("video").get(clip_id=clip_id)
    except (Clip.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise ClipNotFound("Clip not found", clip_id=str(clip_id))


def list_videos(organization_id: Optional[str] = None) -> List[Video]:
    qs = Video.objects.all().order_by("-created_at")
    organization_id = parse_organization_id(organization_id)
    if organization_id:
        qs = qs.filter(organization_id=organization_id)
    return list(qs)


def list_clips(video_id) -> List[Clip]:
    """Clips do vídeo, melhor score primeiro (empates na ordem de detecção)."""
    return list(
        Clip.objects.select_related("video")
        .filter(video__video_id=video_id)
        .order_by("-virality_score", "detection_rank", "created_at")
    )


def update_video_status(video_id, status: str, metadata: Optional[dict] = None, **fields) -> bool:
    """
    Atualiza status + campos do vídeo de forma atômica.

    Args:
        video_id: UUID do vídeo
        status: Novo status
        metadata: Chaves mescladas em Video.metadata (opcional)
        **fields: Demais colunas a atualizar

    Returns:
        bool: True se o vídeo foi atualizado
    """
    fields["status"] = status
    fields["updated_at"] = timezone.now()
    if status not in Video.IN_PROGRESS_STATUSES:
        fields.setdefault("stage_started_at", None)

    if metadata:
        with transaction.atomic():
            video = Video.objects.select_for_update().filter(video_id=video_id).first()
            if video is None:
                logger.warning(f"[repository] Vídeo não encontrado para video_id={video_id}")
                return False
            merged = dict(video.metadata or {})
            merged.update(metadata)
            fields["metadata"] = merged
            Video.objects.filter(pk=video.pk).update(**fields)
    else:
        affected = Video.objects.filter(video_id=video_id).update(**fields)
        if affected == 0:
            logger.warning(f"[repository] Vídeo não encontrado para video_id={video_id}")
            return False

    logger.debug(f"[repository] Vídeo atualizado: video_id={video_id}, status={status}")
    return True


def merge_video_metadata(video_id, metadata: dict) -> bool:
    """Mescla chaves em Video.metadata sem alterar o status."""
    with transaction.atomic():
        video = Video.objects.select_for_update().filter(video_id=video_id).first()
        if video is None:
            return False
        merged = dict(video.metadata or {})
        merged.update(metadata)
        return bool(
            Video.objects.filter(pk=video.pk).update(metadata=merged, updated_at=timezone.now())
        )


def _stale_cutoff():
    minutes = int(getattr(settings, "STAGE_STALE_AFTER_MINUTES", 30))
    return timezone.now() - timedelta(minutes=minutes)


def claim_video_stage(video_id, in_progress_status: str) -> None:
    """
    Move o vídeo para um estado "em andamento" se nenhuma etapa estiver rodando.

    Uma etapa em andamento há mais de STAGE_STALE_AFTER_MINUTES é considerada
    travada e pode ser reivindicada de novo.

    Raises:
        VideoNotFound: vídeo inexistente
        StageConflict: outra etapa ainda está em andamento
    """
    now = timezone.now()
    claimable = ~Q(status__in=Video.IN_PROGRESS_STATUSES) | Q(stage_started_at__lt=_stale_cutoff())
    affected = (
        Video.objects.filter(video_id=video_id)
        .filter(claimable)
        .update(status=in_progress_status, stage_started_at=now, updated_at=now)
    )
    if affected:
        logger.info(f"[repository] Etapa '{in_progress_status}' reivindicada para video_id={video_id}")
        return

    video = get_video(video_id)
    raise StageConflict(
        f"Video is already {video.status}",
        video_id=str(video_id),
        status=video.status,
    )


def claim_clip_export(clip_id) -> None:
    """Marca o clip como 'exporting' se não houver outra exportação viva."""
    now = timezone.now()
    claimable = ~Q(export_status="exporting") | Q(export_started_at__lt=_stale_cutoff())
    affected = (
        Clip.objects.filter(clip_id=clip_id)
        .filter(claimable)
        .update(export_status="exporting", export_started_at=now, updated_at=now)
    )
    if not affected:
        get_clip(clip_id)
        raise StageConflict("Clip export already in progress", clip_id=str(clip_id))


def update_clip_fields(clip_id, metadata: Optional[dict] = None, **fields) -> bool:
    """Atualiza campos do clip em uma query; metadata é mesclada sob lock."""
    fields["updated_at"] = timezone.now()
    if metadata:
        with transaction.atomic():
            clip = Clip.objects.select_for_update().filter(clip_id=clip_id).first()
            if clip is None:
                return False
            merged = dict(clip.metadata or {})
            merged.update(metadata)
            fields["metadata"] = merged
            return bool(Clip.objects.filter(pk=clip.pk).update(**fields))
    return bool(Clip.objects.filter(clip_id=clip_id).update(**fields))


def insert_clips(video: Video, clips: Iterable[Clip]) -> List[Clip]:
    """Insere clips em lote para o vídeo."""
    clips = list(clips)
    for clip in clips:
        clip.video = video
    created = Clip.objects.bulk_create(clips)
    logger.info(f"[repository] {len(created)} clips inseridos para video_id={video.video_id}")
    return created


def replace_clips(video: Video, clips: Iterable[Clip]) -> List[Clip]:
    """Apaga todos os clips do vídeo e insere o novo conjunto na mesma transação."""
    with transaction.atomic():
        deleted, _ = Clip.objects.filter(video=video).delete()
        logger.info(f"[repository] {deleted} clips antigos removidos para video_id={video.video_id}")
        return insert_clips(video, clips)
