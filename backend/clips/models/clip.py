from django.db import models
import uuid
from .video import Video


class Clip(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    EXPORT_STATUS_CHOICES = [
        ("exporting", "Exporting"),
        ("exported", "Exported"),
        ("export_error", "Export error"),
    ]

    SOURCE_CHOICES = [
        ("ai_transcript", "AI (transcript)"),
        ("ai_video", "AI (video)"),
        ("fallback", "Fallback"),
    ]

    ASPECT_RATIO_CHOICES = [
        ("9:16", "9:16"),
        ("1:1", "1:1"),
        ("4:5", "4:5"),
        ("16:9", "16:9"),
    ]

    # Identificadores
    clip_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    video = models.ForeignKey(Video, related_name="clips", on_delete=models.CASCADE)

    # Metadados
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_time = models.FloatField(default=0)  # Em segundos
    end_time = models.FloatField(default=0)  # Em segundos
    duration = models.FloatField(default=0)  # end_time - start_time
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default="fallback")
    detection_rank = models.IntegerField(default=0)

    # Scoring
    virality_score = models.IntegerField(default=0)  # 0-100
    score_hook = models.IntegerField(default=0)
    score_emotion = models.IntegerField(default=0)
    score_insight = models.IntegerField(default=0)
    score_cta = models.IntegerField(default=0)
    score_quality = models.IntegerField(default=0)

    # Edição
    transcript = models.TextField(blank=True, default="")
    transcript_segments = models.JSONField(default=list, blank=True)  # Relativos ao início do clip
    suggested_caption = models.TextField(blank=True, default="")
    caption_style = models.JSONField(default=dict, blank=True)  # {"preset": nome, ...atributos}
    aspect_ratio = models.CharField(max_length=10, choices=ASPECT_RATIO_CHOICES, default="9:16")

    # Revisão e exportação
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    approved_at = models.DateTimeField(null=True, blank=True)
    export_status = models.CharField(max_length=20, choices=EXPORT_STATUS_CHOICES, null=True, blank=True)
    export_started_at = models.DateTimeField(null=True, blank=True)
    exported_path = models.CharField(max_length=500, null=True, blank=True)
    thumbnail_path = models.CharField(max_length=500, null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-virality_score", "detection_rank"]
        indexes = [
            models.Index(fields=["video", "-virality_score"], name="clips_clip_video_i_3b7e91_idx"),
            models.Index(fields=["status"], name="clips_clip_status_c4d2a0_idx"),
        ]

    def __str__(self) -> str:  # type: ignore[override]
        return self.title
