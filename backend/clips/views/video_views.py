from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..decorators import handle_pipeline_errors
from ..services import repository
from ..services.list_video_clips_service import list_video_clips
from ..services.list_videos_service import list_videos, video_status_to_dict, video_to_dict
from ..services.video_service import (
    create_uploaded_video,
    create_youtube_video,
    request_analysis,
    request_transcription,
)


def _organization_id(request):
    """organization_id do corpo, da query string ou do header X-Organization-ID."""
    return (
        request.data.get("organization_id")
        or request.query_params.get("organization_id")
        or request.headers.get("X-Organization-ID")
    )


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


@api_view(["GET", "POST"])
@handle_pipeline_errors
def videos_list_create(request):
    """GET: Lista vídeos | POST: Upload multipart e dispara o processamento"""
    if request.method == "GET":
        return Response({"results": list_videos(_organization_id(request))}, status=status.HTTP_200_OK)

    video = create_uploaded_video(
        request.FILES.get("file"),
        title=request.data.get("title"),
        organization_id=_organization_id(request),
    )
    return Response(video_to_dict(video), status=status.HTTP_202_ACCEPTED)


@api_view(["POST"])
@handle_pipeline_errors
def youtube_import(request):
    """Importa um vídeo do YouTube (download em background)."""
    video = create_youtube_video(
        request.data.get("url"),
        title=request.data.get("title"),
        organization_id=_organization_id(request),
    )
    return Response(video_to_dict(video), status=status.HTTP_202_ACCEPTED)


@api_view(["GET"])
@handle_pipeline_errors
def video_detail(request, video_id):
    video = repository.get_video(video_id)
    return Response(video_to_dict(video), status=status.HTTP_200_OK)


@api_view(["GET"])
@handle_pipeline_errors
def video_status(request, video_id):
    """Polling do progresso do pipeline."""
    video = repository.get_video(video_id)
    return Response(video_status_to_dict(video), status=status.HTTP_200_OK)


@api_view(["POST"])
@handle_pipeline_errors
def transcribe_video(request, video_id):
    result = request_transcription(video_id, force=_as_bool(request.data.get("force")))
    if result["status"] == "already_transcribed":
        return Response(result, status=status.HTTP_200_OK)
    return Response(result, status=status.HTTP_202_ACCEPTED)


@api_view(["POST"])
@handle_pipeline_errors
def analyze_video(request, video_id):
    """Detecta clips sobre a transcrição, somando aos clips existentes."""
    result = request_analysis(video_id, replace=False)
    return Response(result, status=status.HTTP_202_ACCEPTED)


@api_view(["POST"])
@handle_pipeline_errors
def regenerate_clips(request, video_id):
    """Apaga todos os clips do vídeo e roda a análise de novo."""
    result = request_analysis(video_id, replace=True)
    return Response(result, status=status.HTTP_202_ACCEPTED)


@api_view(["GET"])
@handle_pipeline_errors
def video_clips_list(request, video_id):
    return Response({"results": list_video_clips(video_id)}, status=status.HTTP_200_OK)
