from django.contrib import admin

from .models import Clip, Transcript, Video


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ("video_id", "title", "source_type", "status", "duration", "created_at")
    list_filter = ("status", "source_type")
    search_fields = ("title", "video_id")
    ordering = ("-created_at",)


@admin.register(Transcript)
class TranscriptAdmin(admin.ModelAdmin):
    list_display = ("transcript_id", "video", "language", "provider", "created_at")
    ordering = ("-created_at",)


@admin.register(Clip)
class ClipAdmin(admin.ModelAdmin):
    list_display = ("clip_id", "title", "video", "virality_score", "status", "export_status", "created_at")
    list_filter = ("status", "export_status", "source", "aspect_ratio")
    search_fields = ("title", "clip_id")
    ordering = ("-virality_score", "detection_rank")
