import math

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..decorators import handle_pipeline_errors
from ..exceptions import InvalidRange, NotFound
from ..services import repository
from ..services.transcript_service import get_sub_range, get_transcript


@api_view(["GET"])
@handle_pipeline_errors
def video_transcript(request, video_id):
    video = repository.get_video(video_id)
    transcript = get_transcript(video.video_id)
    if transcript is None:
        raise NotFound("Transcript not found", video_id=str(video.video_id))

    return Response(
        {
            "transcript_id": str(transcript.transcript_id),
            "video_id": str(video.video_id),
            "language": transcript.language,
            "duration": transcript.duration,
            "provider": transcript.provider,
            "full_text": transcript.full_text,
            "segments": transcript.segments,
        },
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@handle_pipeline_errors
def video_transcript_clip(request, video_id):
    """Trecho da transcrição em [start_time, end_time], com tempos relativos ao início."""
    video = repository.get_video(video_id)

    try:
        start = float(request.query_params.get("start_time"))
        end = float(request.query_params.get("end_time"))
    except (TypeError, ValueError):
        raise InvalidRange("start_time and end_time query params are required numbers")
    if not (math.isfinite(start) and math.isfinite(end)):
        raise InvalidRange("start_time and end_time must be finite numbers")
    if start < 0 or start >= end:
        raise InvalidRange("End time must be greater than start time", start_time=start, end_time=end)

    sub = get_sub_range(video.video_id, start, end)
    if sub is None:
        raise NotFound("Transcript not found", video_id=str(video.video_id))

    return Response({"start_time": start, "end_time": end, **sub}, status=status.HTTP_200_OK)
