from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..decorators import handle_pipeline_errors
from ..exceptions import ValidationError
from ..services import repository
from ..services.clip_editor_service import (
    detect_filler_words,
    get_clip_for_editing,
    remove_filler_words,
    set_aspect_ratio,
    set_caption_style,
    update_timeline,
    update_transcript,
)
from ..services.list_video_clips_service import clip_to_dict


@api_view(["GET", "PATCH"])
@handle_pipeline_errors
def clip_timeline(request, clip_id):
    """GET: Contexto do editor | PATCH: Novo intervalo [start_time, end_time]"""
    if request.method == "GET":
        return Response(get_clip_for_editing(clip_id), status=status.HTTP_200_OK)

    clip = update_timeline(clip_id, request.data.get("start_time"), request.data.get("end_time"))
    return Response(clip_to_dict(clip), status=status.HTTP_200_OK)


@api_view(["PATCH"])
@handle_pipeline_errors
def clip_transcript(request, clip_id):
    text = request.data.get("text")
    if not isinstance(text, str):
        raise ValidationError("'text' is required")

    segments = request.data.get("segments")
    if segments is not None and not isinstance(segments, list):
        raise ValidationError("'segments' must be a list")

    clip = update_transcript(clip_id, text, segments=segments)
    return Response(clip_to_dict(clip), status=status.HTTP_200_OK)


@api_view(["PATCH"])
@handle_pipeline_errors
def clip_captions(request, clip_id):
    """Aceita um nome de preset ou um objeto de estilo customizado."""
    style = request.data.get("caption_style", request.data.get("style"))
    if style is None:
        raise ValidationError("'caption_style' is required")

    clip = set_caption_style(clip_id, style)
    return Response(clip_to_dict(clip), status=status.HTTP_200_OK)


@api_view(["PATCH"])
@handle_pipeline_errors
def clip_aspect_ratio(request, clip_id):
    clip = set_aspect_ratio(clip_id, request.data.get("aspect_ratio"))
    return Response(clip_to_dict(clip), status=status.HTTP_200_OK)


@api_view(["GET"])
@handle_pipeline_errors
def clip_filler_words(request, clip_id):
    clip = repository.get_clip(clip_id)
    fillers = detect_filler_words(clip.transcript)
    return Response({"clip_id": str(clip.clip_id), "count": len(fillers), "filler_words": fillers}, status=status.HTTP_200_OK)


@api_view(["POST"])
@handle_pipeline_errors
def clip_remove_fillers(request, clip_id):
    """Remove as palavras de preenchimento do texto do clip (os segments são mantidos)."""
    clip = repository.get_clip(clip_id)
    fillers = detect_filler_words(clip.transcript)
    if not fillers:
        return Response({"clip_id": str(clip.clip_id), "removed": 0, "transcript": clip.transcript}, status=status.HTTP_200_OK)

    cleaned = remove_filler_words(clip.transcript, fillers)
    clip = update_transcript(clip.clip_id, cleaned, segments=clip.transcript_segments or [])
    return Response({"clip_id": str(clip.clip_id), "removed": len(fillers), "transcript": clip.transcript}, status=status.HTTP_200_OK)
