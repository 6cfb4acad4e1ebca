"""
Exceções do pipeline de clips.

Cada erro carrega um error_code estável e o status HTTP usado quando ele
chega a uma view. Falhas em background nunca sobem para o Celery: ficam
registradas no status/metadata da entidade dona.
"""

from rest_framework import status


class ClipPipelineError(Exception):
    """Base de todas as exceções do pipeline."""

    error_code = "PIPELINE_ERROR"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", **details):
        self.message = message or self.__class__.__doc__ or self.error_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"error_code": self.error_code, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFound(ClipPipelineError):
    """Entidade não encontrada."""

    error_code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class VideoNotFound(NotFound):
    error_code = "VIDEO_NOT_FOUND"


class ClipNotFound(NotFound):
    error_code = "CLIP_NOT_FOUND"


# Entrada inválida, corrigível pelo usuário
class ValidationError(ClipPipelineError):
    error_code = "VALIDATION_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class InvalidRange(ValidationError):
    error_code = "INVALID_RANGE"


class UnknownStylePreset(ValidationError):
    error_code = "UNKNOWN_STYLE_PRESET"


class InvalidCaptionStyle(ValidationError):
    error_code = "INVALID_CAPTION_STYLE"


class UnsupportedAspectRatio(ValidationError):
    error_code = "UNSUPPORTED_ASPECT_RATIO"


class InvalidReviewStatus(ValidationError):
    error_code = "INVALID_REVIEW_STATUS"


# Pré-condições verificadas antes de qualquer trabalho em background
class PreconditionError(ClipPipelineError):
    error_code = "PRECONDITION_FAILED"
    http_status = status.HTTP_400_BAD_REQUEST


class NoTranscriptAvailable(PreconditionError):
    error_code = "NO_TRANSCRIPT_AVAILABLE"


class VideoFileMissing(PreconditionError):
    error_code = "VIDEO_FILE_MISSING"


class VideoDurationUnknown(PreconditionError):
    """Duração do vídeo ainda desconhecida."""

    error_code = "VIDEO_DURATION_UNKNOWN"


class ClipNotApproved(PreconditionError):
    error_code = "CLIP_NOT_APPROVED"
    http_status = status.HTTP_412_PRECONDITION_FAILED


class EncoderUnavailable(PreconditionError):
    error_code = "ENCODER_UNAVAILABLE"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE


class StageConflict(ClipPipelineError):
    """Etapa já em andamento para esta entidade."""

    error_code = "STAGE_IN_PROGRESS"
    http_status = status.HTTP_409_CONFLICT


class ProviderError(ClipPipelineError):
    """Falha de um backend de IA (detecção ou transcrição)."""

    error_code = "PROVIDER_ERROR"
    http_status = status.HTTP_502_BAD_GATEWAY


class MediaProbeError(ClipPipelineError):
    error_code = "MEDIA_PROBE_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class SubprocessError(ClipPipelineError):
    """Processo externo (ffmpeg) terminou com erro."""

    error_code = "SUBPROCESS_ERROR"

    def __init__(self, message: str = "", returncode=None, stderr: str = "", **details):
        self.returncode = returncode
        self.stderr = stderr or ""
        super().__init__(message, **details)


class EncoderFailed(SubprocessError):
    error_code = "ENCODER_FAILED"


class DataInvariantError(ClipPipelineError):
    """Dado de provider que viola uma invariante (ex: candidato fora da transcrição)."""

    error_code = "DATA_INVARIANT"
