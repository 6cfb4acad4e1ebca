"""
Model para transcrições de vídeo.
"""

import uuid
from django.db import models
from .video import Video


class Transcript(models.Model):
    # Identificadores
    transcript_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    video = models.OneToOneField(Video, on_delete=models.CASCADE, related_name="transcript")

    # Conteúdo
    full_text = models.TextField(blank=True, default="")
    # [{start, end, text, words: [{start, end, word}]}] ordenados e sem sobreposição
    segments = models.JSONField(default=list)

    # Metadados
    language = models.CharField(max_length=10, default="en")
    duration = models.FloatField(null=True, blank=True)
    provider = models.CharField(max_length=50, default="whisper")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Transcript for {self.video.title}"

    @property
    def words(self) -> list:
        return [w for seg in (self.segments or []) for w in (seg.get("words") or [])]
