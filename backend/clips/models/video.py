from django.db import models
import uuid


class Video(models.Model):
    STATUS_CHOICES = [
        ("downloading", "Downloading"),
        ("processing", "Processing"),
        ("analyzing", "Analyzing"),
        ("ready", "Ready"),
        ("analyzed", "Analyzed"),
        ("analysis_error", "Analysis error"),
        ("transcribing", "Transcribing"),
        ("transcribed", "Transcribed"),
        ("transcription_error", "Transcription error"),
        ("error", "Error"),
    ]

    # Estados que indicam uma etapa rodando em background
    IN_PROGRESS_STATUSES = ("downloading", "processing", "transcribing", "analyzing")

    SOURCE_TYPE_CHOICES = [
        ("upload", "Upload"),
        ("youtube", "YouTube"),
    ]

    # Identificadores
    video_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    organization_id = models.UUIDField(null=True, blank=True)

    # Metadados
    title = models.CharField(max_length=255)
    source_type = models.CharField(max_length=20, choices=SOURCE_TYPE_CHOICES, default="upload")
    source_url = models.URLField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)  # Nome original, mime, probe, últimos erros

    # Armazenamento
    file_path = models.CharField(max_length=500, null=True, blank=True)
    thumbnail_path = models.CharField(max_length=500, null=True, blank=True)

    # Processamento
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="processing")
    duration = models.FloatField(null=True, blank=True)  # Duração em segundos
    resolution = models.CharField(max_length=20, null=True, blank=True)  # Ex: 1920x1080
    stage_started_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization_id", "-created_at"], name="clips_video_organiz_5d1f0c_idx"),
            models.Index(fields=["status"], name="clips_video_status_8a2c3e_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_in_progress(self) -> bool:
        return self.status in self.IN_PROGRESS_STATUSES
