"""
Validadores para uploads de vídeo e URLs externas.
"""

import re
import uuid
from typing import Optional
from urllib.parse import urlparse

from .exceptions import ValidationError


class MediaValidator:
    """Valida o arquivo enviado antes de gravá-lo em disco."""

    ALLOWED_FORMATS = ["mp4", "webm", "mov", "mkv", "avi", "m4v"]

    # Limite de tamanho (em MB)
    MAX_SIZE_MB = 5000

    @classmethod
    def validate_upload(cls, file) -> None:
        """
        Args:
            file: UploadedFile do Django

        Raises:
            ValidationError: formato ou tamanho inválido
        """
        if file is None:
            raise ValidationError("'file' is required")

        filename = (file.name or "").lower()
        ext = filename.rsplit(".", 1)[-1] if "." in filename else ""
        if ext not in cls.ALLOWED_FORMATS:
            raise ValidationError(
                f"Unsupported format (.{ext}). Allowed: {', '.join(cls.ALLOWED_FORMATS)}",
                allowed=cls.ALLOWED_FORMATS,
            )

        size_mb = (file.size or 0) / (1024 * 1024)
        if size_mb > cls.MAX_SIZE_MB:
            raise ValidationError(f"File too large ({size_mb:.1f}MB). Limit: {cls.MAX_SIZE_MB}MB")
        if not file.size:
            raise ValidationError("Empty file")


class URLValidator:
    """Valida URLs do YouTube para importação."""

    YOUTUBE_REGEX = re.compile(r"^(https?://)?(www\.|m\.)?(youtube\.com|youtu\.be)/.+", re.IGNORECASE)

    ALLOWED_DOMAINS = {
        "youtube.com",
        "m.youtube.com",
        "youtu.be",
    }

    @classmethod
    def validate_youtube_url(cls, url: str) -> str:
        """
        Returns:
            URL normalizada com esquema https

        Raises:
            ValidationError: URL ausente ou fora dos domínios do YouTube
        """
        url = (url or "").strip()
        if not url:
            raise ValidationError("YouTube URL is required")
        if not cls.YOUTUBE_REGEX.match(url):
            raise ValidationError("Invalid YouTube URL")

        if not url.lower().startswith(("http://", "https://")):
            url = f"https://{url}"

        domain = urlparse(url).netloc.lower()
        if domain.startswith("www."):
            domain = domain[4:]
        if domain not in cls.ALLOWED_DOMAINS:
            raise ValidationError("Invalid YouTube URL")
        return url


def parse_organization_id(value) -> Optional[uuid.UUID]:
    """organization_id é opcional, mas quando enviado precisa ser um UUID."""
    if value in (None, ""):
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError("organization_id must be a valid UUID")
