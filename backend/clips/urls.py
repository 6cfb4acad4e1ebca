from django.urls import path

from .views.clip_editor_views import (
    clip_aspect_ratio,
    clip_captions,
    clip_filler_words,
    clip_remove_fillers,
    clip_timeline,
    clip_transcript,
)
from .views.clip_views import caption_styles, clip_detail, clip_duplicate, clips_bulk_approve
from .views.export_views import clip_export, clip_subtitles_srt
from .views.transcript_views import video_transcript, video_transcript_clip
from .views.video_views import (
    analyze_video,
    regenerate_clips,
    transcribe_video,
    video_clips_list,
    video_detail,
    video_status,
    videos_list_create,
    youtube_import,
)


urlpatterns = [
    # Videos
    path("videos/", videos_list_create, name="videos-list-create"),
    path("videos/youtube/", youtube_import, name="videos-youtube-import"),
    path("videos/<uuid:video_id>/", video_detail, name="video-detail"),
    path("videos/<uuid:video_id>/status/", video_status, name="video-status"),

    # Transcrição
    path("videos/<uuid:video_id>/transcribe/", transcribe_video, name="video-transcribe"),
    path("videos/<uuid:video_id>/transcript/", video_transcript, name="video-transcript"),
    path("videos/<uuid:video_id>/transcript/clip/", video_transcript_clip, name="video-transcript-clip"),

    # Análise
    path("videos/<uuid:video_id>/analyze/", analyze_video, name="video-analyze"),
    path("videos/<uuid:video_id>/regenerate-clips/", regenerate_clips, name="video-regenerate-clips"),
    path("videos/<uuid:video_id>/clips/", video_clips_list, name="video-clips-list"),

    # Clips
    path("clips/bulk-approve/", clips_bulk_approve, name="clips-bulk-approve"),
    path("clips/<uuid:clip_id>/", clip_detail, name="clip-detail"),
    path("clips/<uuid:clip_id>/duplicate/", clip_duplicate, name="clip-duplicate"),

    # Editor
    path("clips/<uuid:clip_id>/timeline/", clip_timeline, name="clip-timeline"),
    path("clips/<uuid:clip_id>/transcript/", clip_transcript, name="clip-transcript"),
    path("clips/<uuid:clip_id>/captions/", clip_captions, name="clip-captions"),
    path("clips/<uuid:clip_id>/aspect-ratio/", clip_aspect_ratio, name="clip-aspect-ratio"),
    path("clips/<uuid:clip_id>/filler-words/", clip_filler_words, name="clip-filler-words"),
    path("clips/<uuid:clip_id>/remove-fillers/", clip_remove_fillers, name="clip-remove-fillers"),

    # Exportação
    path("clips/<uuid:clip_id>/export/", clip_export, name="clip-export"),
    path("clips/<uuid:clip_id>/subtitles.srt", clip_subtitles_srt, name="clip-subtitles-srt"),

    path("caption-styles/", caption_styles, name="caption-styles"),
]
