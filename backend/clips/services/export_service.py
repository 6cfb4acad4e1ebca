"""
Exportação de clips com legendas queimadas via ffmpeg.

Pré-condições são verificadas de forma síncrona (antes de enfileirar):
encoder disponível, clip aprovado, arquivo do vídeo presente e
transcrição cobrindo a janela do clip. Com `captions=False` o clip sai
apenas cortado e reenquadrado, sem legenda, e a transcrição não é exigida.

Toda exportação bem-sucedida gera também um thumbnail do próprio clip.
"""

import logging
import os
import subprocess
import uuid
from typing import Optional

from django.conf import settings

from ..exceptions import (
    ClipPipelineError,
    ClipNotApproved,
    EncoderFailed,
    EncoderUnavailable,
    MediaProbeError,
    NoTranscriptAvailable,
    UnsupportedAspectRatio,
    ValidationError,
    VideoFileMissing,
)
from . import repository
from .caption_service import (
    ASS_WORDS_PER_LINE,
    SRT_WORDS_PER_LINE,
    render_ass,
    render_srt,
    resolve_caption_style,
    write_subtitle_file,
)
from .media_probe_service import extract_thumbnail, is_encoder_available
from .transcript_service import get_clip_sub_transcript

logger = logging.getLogger(__name__)

RESOLUTIONS = {
    "9:16": (1080, 1920),
    "16:9": (1920, 1080),
    "1:1": (1080, 1080),
    "4:5": (1080, 1350),
}

STDERR_TAIL_CHARS = 2000


def resolution_for(aspect_ratio: str) -> tuple:
    try:
        return RESOLUTIONS[aspect_ratio]
    except KeyError:
        raise UnsupportedAspectRatio(
            f"Invalid aspect ratio. Valid options: {', '.join(RESOLUTIONS)}",
            valid=list(RESOLUTIONS),
        )


def escape_filter_path(path: str) -> str:
    """Escapa um caminho para uso dentro do filtro ass= do ffmpeg."""
    return path.replace("\\", "/").replace(":", "\\:").replace("'", "\\'").replace(",", "\\,")


def build_filter_graph(start: float, end: float, aspect_ratio: str, subtitle_path: Optional[str]) -> str:
    """
    Monta o filter_complex: corta vídeo e áudio em [start, end] zerando o PTS,
    ajusta para a resolução alvo (scale+crop em retrato/quadrado, scale+pad em
    paisagem) e aplica a legenda.
    """
    width, height = resolution_for(aspect_ratio)

    if aspect_ratio == "16:9":
        reframe = (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2:color=black"
        )
    else:
        reframe = (
            f"scale={width}:{height}:force_original_aspect_ratio=increase,"
            f"crop={width}:{height}"
        )

    video_chain = f"[0:v]trim=start={start:.3f}:end={end:.3f},setpts=PTS-STARTPTS,{reframe},setsar=1"
    if subtitle_path:
        video_chain += f",ass='{escape_filter_path(subtitle_path)}'"
    video_chain += "[v]"

    audio_chain = f"[0:a]atrim=start={start:.3f}:end={end:.3f},asetpts=PTS-STARTPTS[a]"
    return f"{video_chain};{audio_chain}"


def build_ffmpeg_command(video_path: str, filter_graph: str, output_path: str) -> list:
    return [
        getattr(settings, "FFMPEG_PATH", "ffmpeg"), "-y",
        "-i", video_path,
        "-filter_complex", filter_graph,
        "-map", "[v]",
        "-map", "[a]",
        "-c:v", "libx264",
        "-preset", "medium",
        "-crf", "23",
        "-c:a", "aac",
        "-b:a", "128k",
        "-movflags", "+faststart",
        output_path,
    ]


def parse_captions_option(value) -> bool:
    """Flag `captions` do pedido de exportação (padrão: legendas queimadas)."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
    raise ValidationError("captions must be a boolean")


def check_export_preconditions(clip, captions: bool = True) -> Optional[dict]:
    """
    Valida tudo que pode falhar antes do trabalho em background.

    Returns:
        Recorte da transcrição do clip (palavras relativas ao início),
        ou None quando a exportação é sem legenda

    Raises:
        EncoderUnavailable, ClipNotApproved, VideoFileMissing, NoTranscriptAvailable
    """
    if not is_encoder_available():
        raise EncoderUnavailable("FFmpeg is not available on this server")

    if clip.status != "approved":
        raise ClipNotApproved("Clip must be approved before export", status=clip.status)

    video = clip.video
    if not video.file_path or not os.path.exists(video.file_path):
        raise VideoFileMissing("Video file not found", video_id=str(video.video_id))

    if not captions:
        return None

    sub = get_clip_sub_transcript(clip)
    if not sub or not sub["words"]:
        raise NoTranscriptAvailable(
            "No transcript covering this clip. Transcribe the video first.",
            start_time=clip.start_time,
            end_time=clip.end_time,
        )
    return sub


def request_export(clip_id, options: Optional[dict] = None) -> dict:
    """
    Verifica pré-condições, reivindica a exportação e enfileira a task.

    Raises:
        ClipPipelineError: qualquer pré-condição ou StageConflict
    """
    options = dict(options or {})
    clip = repository.get_clip(clip_id)

    if options.get("aspect_ratio"):
        resolution_for(options["aspect_ratio"])
    if options.get("caption_style") is not None:
        options["caption_style"] = resolve_caption_style(options["caption_style"])
    if options.get("words_per_line") is not None:
        try:
            options["words_per_line"] = int(options["words_per_line"])
        except (TypeError, ValueError):
            options["words_per_line"] = 0
        if options["words_per_line"] < 1:
            raise ValidationError("words_per_line must be a positive integer")

    options["captions"] = parse_captions_option(options.get("captions"))

    check_export_preconditions(clip, captions=options["captions"])
    repository.claim_clip_export(clip.clip_id)

    from ..tasks.export_clip_task import export_clip_task

    task = export_clip_task.apply_async(args=[str(clip.clip_id), options], queue="clip.export")
    logger.info(f"[export] Exportação enfileirada para clip_id={clip.clip_id} (task_id={task.id})")
    return {"clip_id": str(clip.clip_id), "status": "exporting", "task_id": task.id}


def extract_clip_thumbnail(clip_id, export_path: str, resolution: tuple) -> Optional[str]:
    """
    Primeiro frame do arquivo exportado, na proporção do clip.

    Falha aqui não invalida a exportação: o clip fica sem thumbnail.
    """
    width, height = resolution
    output_path = os.path.join(getattr(settings, "THUMBNAILS_DIR", "/tmp"), "clips", f"{clip_id}.jpg")
    try:
        return extract_thumbnail(export_path, output_path, at_seconds=0.0, size=f"{width // 3}x{height // 3}")
    except MediaProbeError as e:
        logger.warning(f"[export] Thumbnail falhou para clip_id={clip_id}: {e.message}")
        return None


def run_export(clip_id, options: Optional[dict] = None) -> dict:
    """
    Renderiza a legenda, executa o ffmpeg e registra o resultado no clip.

    Returns:
        {"export_path", "thumbnail_path", "duration", "resolution", "aspect_ratio", "captions"}

    Raises:
        EncoderFailed: ffmpeg terminou com erro ou estourou o timeout
        PreconditionError: se algo mudou desde o pedido
    """
    options = options or {}
    clip = repository.get_clip(clip_id)

    try:
        captions = parse_captions_option(options.get("captions"))
        sub = check_export_preconditions(clip, captions=captions)
        aspect_ratio = options.get("aspect_ratio") or clip.aspect_ratio or "9:16"
        width, height = resolution_for(aspect_ratio)
        style = resolve_caption_style(options.get("caption_style") or clip.caption_style or None)
        words_per_line = int(options.get("words_per_line") or ASS_WORDS_PER_LINE)
    except ClipPipelineError as e:
        repository.update_clip_fields(
            clip.clip_id,
            export_status="export_error",
            export_started_at=None,
            metadata={"export_error": {"message": str(e)}},
        )
        raise

    exports_dir = getattr(settings, "CLIP_EXPORTS_DIR", "/tmp")
    os.makedirs(exports_dir, exist_ok=True)
    output_path = os.path.join(exports_dir, f"{clip.clip_id}_{uuid.uuid4().hex[:8]}.mp4")

    subtitle_path = None
    try:
        if captions:
            ass_content = render_ass(sub["words"], style=style, resolution=(width, height), words_per_line=words_per_line)
            subtitle_path = write_subtitle_file(ass_content, "ass")

        filter_graph = build_filter_graph(clip.start_time, clip.end_time, aspect_ratio, subtitle_path)
        cmd = build_ffmpeg_command(clip.video.file_path, filter_graph, output_path)
        timeout = int(getattr(settings, "FFMPEG_TIMEOUT", 900))

        logger.info(f"[export] Iniciando ffmpeg para clip_id={clip.clip_id} -> {output_path}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            raise EncoderFailed(f"FFmpeg excedeu {timeout}s", returncode=None, stderr=stderr)
        except OSError as e:
            raise EncoderFailed(f"Não foi possível executar o FFmpeg: {e}", returncode=None)

        if result.returncode != 0:
            raise EncoderFailed(
                f"FFmpeg terminou com código {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr or "",
            )
    except EncoderFailed as e:
        logger.error(f"[export] Falha ao exportar clip_id={clip.clip_id}: {e.message}")
        repository.update_clip_fields(
            clip.clip_id,
            export_status="export_error",
            export_started_at=None,
            metadata={
                "export_error": {
                    "message": e.message,
                    "returncode": e.returncode,
                    "stderr": e.stderr[-STDERR_TAIL_CHARS:],
                    "output_path": output_path,
                }
            },
        )
        raise
    finally:
        if subtitle_path:
            try:
                os.remove(subtitle_path)
            except OSError as e:
                logger.warning(f"[export] Falha ao remover legenda temporária {subtitle_path}: {e}")

    duration = round(clip.end_time - clip.start_time, 3)
    thumbnail_path = extract_clip_thumbnail(clip.clip_id, output_path, (width, height))
    repository.update_clip_fields(
        clip.clip_id,
        export_status="exported",
        exported_path=output_path,
        thumbnail_path=thumbnail_path,
        export_started_at=None,
        metadata={
            "export_error": None,
            "last_export": {"resolution": f"{width}x{height}", "duration": duration, "captions": captions},
        },
    )
    logger.info(f"[export] Clip {clip.clip_id} exportado em {output_path}")

    return {
        "export_path": output_path,
        "thumbnail_path": thumbnail_path,
        "duration": duration,
        "resolution": f"{width}x{height}",
        "aspect_ratio": aspect_ratio,
        "captions": captions,
    }


def render_clip_srt(clip_id, words_per_line: Optional[int] = None) -> str:
    """Legenda SRT do clip (texto + tempo), para download."""
    clip = repository.get_clip(clip_id)
    sub = get_clip_sub_transcript(clip)
    if not sub or not sub["words"]:
        raise NoTranscriptAvailable("No transcript covering this clip. Transcribe the video first.")
    return render_srt(sub["words"], words_per_line=words_per_line or SRT_WORDS_PER_LINE)
