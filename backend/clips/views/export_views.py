from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..decorators import handle_pipeline_errors
from ..exceptions import ValidationError
from ..services.export_service import render_clip_srt, request_export


@api_view(["POST"])
@handle_pipeline_errors
def clip_export(request, clip_id):
    """Valida pré-condições e enfileira a exportação (202)."""
    options = {
        key: request.data.get(key)
        for key in ("caption_style", "aspect_ratio", "words_per_line", "captions")
        if request.data.get(key) is not None
    }
    result = request_export(clip_id, options)
    return Response(result, status=status.HTTP_202_ACCEPTED)


@api_view(["GET"])
@handle_pipeline_errors
def clip_subtitles_srt(request, clip_id):
    words_per_line = request.query_params.get("words_per_line")
    if words_per_line is not None:
        try:
            words_per_line = int(words_per_line)
        except ValueError:
            raise ValidationError("words_per_line must be a positive integer")
        if words_per_line < 1:
            raise ValidationError("words_per_line must be a positive integer")

    content = render_clip_srt(clip_id, words_per_line=words_per_line)
    response = HttpResponse(content, content_type="application/x-subrip; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{clip_id}.srt"'
    return response
