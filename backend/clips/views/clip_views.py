from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..decorators import handle_pipeline_errors
from ..exceptions import ValidationError
from ..services import repository
from ..services.clip_editor_service import (
    bulk_approve,
    duplicate_clip,
    list_caption_presets,
    set_review_status,
)
from ..services.list_video_clips_service import clip_to_dict


@api_view(["GET", "PATCH"])
@handle_pipeline_errors
def clip_detail(request, clip_id):
    """GET: Detalhes do clip | PATCH: status de revisão e/ou legenda sugerida"""
    if request.method == "GET":
        return Response(clip_to_dict(repository.get_clip(clip_id)), status=status.HTTP_200_OK)

    clip = repository.get_clip(clip_id)
    if "status" in request.data:
        clip = set_review_status(clip.clip_id, request.data.get("status"))
    if "suggested_caption" in request.data:
        repository.update_clip_fields(clip.clip_id, suggested_caption=request.data.get("suggested_caption") or "")
        clip = repository.get_clip(clip.clip_id)

    return Response(clip_to_dict(clip), status=status.HTTP_200_OK)


@api_view(["POST"])
@handle_pipeline_errors
def clips_bulk_approve(request):
    clip_ids = request.data.get("clip_ids")
    if not isinstance(clip_ids, list) or not clip_ids:
        raise ValidationError("clip_ids must be a non-empty list")

    updated = bulk_approve(clip_ids)
    return Response({"updated": updated}, status=status.HTTP_200_OK)


@api_view(["POST"])
@handle_pipeline_errors
def clip_duplicate(request, clip_id):
    clip = duplicate_clip(clip_id, new_title=request.data.get("title"))
    return Response(clip_to_dict(clip), status=status.HTTP_201_CREATED)


@api_view(["GET"])
@handle_pipeline_errors
def caption_styles(request):
    return Response({"styles": list_caption_presets()}, status=status.HTTP_200_OK)
