"""
Extração de metadados e thumbnail via ffprobe/ffmpeg.
"""

import json
import logging
import os
import subprocess
from typing import Optional

from django.conf import settings

from ..exceptions import MediaProbeError

logger = logging.getLogger(__name__)


def _ffmpeg_path() -> str:
    return getattr(settings, "FFMPEG_PATH", "ffmpeg")


def _ffprobe_path() -> str:
    return getattr(settings, "FFPROBE_PATH", None) or _ffmpeg_path().replace("ffmpeg", "ffprobe")


def is_encoder_available() -> bool:
    """Verifica se o ffmpeg pode ser executado."""
    try:
        subprocess.run(
            [_ffmpeg_path(), "-version"],
            capture_output=True,
            check=True,
            timeout=10,
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired, PermissionError):
        return False


def _parse_fps(rate: Optional[str]) -> Optional[float]:
    if not rate or rate in ("0/0", "0"):
        return None
    try:
        if "/" in rate:
            num, den = rate.split("/", 1)
            return round(float(num) / float(den), 3) if float(den) else None
        return float(rate)
    except ValueError:
        return None


def probe(video_path: str) -> dict:
    """
    Extrai metadados técnicos do vídeo.

    Returns:
        Dict com duration, size, bitrate, format, video {codec, width, height, fps}
        e audio {codec, sample_rate, channels} (ou None)

    Raises:
        MediaProbeError: se o ffprobe falhar ou o arquivo não tiver stream de vídeo
    """
    if not video_path or not os.path.exists(video_path):
        raise MediaProbeError("Arquivo de vídeo não encontrado", path=video_path)

    timeout = int(getattr(settings, "FFPROBE_TIMEOUT", 30))
    cmd = [
        _ffprobe_path(),
        "-v", "error",
        "-show_format",
        "-show_streams",
        "-of", "json",
        video_path,
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=timeout)
        data = json.loads(result.stdout or "{}")
    except subprocess.TimeoutExpired:
        raise MediaProbeError(f"ffprobe demorou mais de {timeout}s")
    except subprocess.CalledProcessError as e:
        raise MediaProbeError(f"Erro ao analisar vídeo: {(e.stderr or str(e)).strip()}")
    except FileNotFoundError:
        raise MediaProbeError("ffprobe não encontrado")
    except json.JSONDecodeError as e:
        raise MediaProbeError(f"Saída inválida do ffprobe: {e}")

    format_info = data.get("format", {}) or {}
    streams = data.get("streams", []) or []

    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio_stream = next((s for s in streams if s.get("codec_type") == "audio"), None)

    if not video_stream:
        raise MediaProbeError("Arquivo não possui stream de vídeo válido")

    if not audio_stream:
        logger.warning(f"[probe] Vídeo {video_path} não possui áudio")

    try:
        duration = float(format_info.get("duration") or video_stream.get("duration") or 0)
    except (TypeError, ValueError):
        duration = 0.0

    width = int(video_stream.get("width") or 0)
    height = int(video_stream.get("height") or 0)

    metadata = {
        "duration": duration,
        "size": int(format_info.get("size") or 0),
        "bitrate": int(format_info.get("bit_rate") or 0),
        "format": format_info.get("format_name"),
        "video": {
            "codec": video_stream.get("codec_name"),
            "width": width,
            "height": height,
            "fps": _parse_fps(video_stream.get("r_frame_rate")),
        },
        "audio": None,
        "resolution": f"{width}x{height}" if width and height else None,
    }

    if audio_stream:
        metadata["audio"] = {
            "codec": audio_stream.get("codec_name"),
            "sample_rate": int(audio_stream.get("sample_rate") or 0),
            "channels": int(audio_stream.get("channels") or 0),
        }

    return metadata


def extract_thumbnail(video_path: str, output_path: str, at_seconds: float = 5.0, size: str = "640x360") -> str:
    """Extrai um único frame do vídeo como JPEG."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    timeout = int(getattr(settings, "FFPROBE_TIMEOUT", 30)) * 2

    cmd = [
        _ffmpeg_path(), "-y",
        "-ss", f"{max(0.0, at_seconds):.3f}",
        "-i", video_path,
        "-frames:v", "1",
        "-s", size,
        "-q:v", "2",
        output_path,
    ]

    try:
        subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, timeout=timeout)
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
        raise MediaProbeError(f"Erro FFmpeg thumbnail: {stderr.strip() or e}")
    except subprocess.TimeoutExpired:
        raise MediaProbeError("Timeout ao extrair thumbnail")
    except FileNotFoundError:
        raise MediaProbeError("ffmpeg não encontrado")

    return output_path


def thumbnail_offset(duration: Optional[float]) -> float:
    """Ponto do thumbnail: 5s, ou 10% da duração em vídeos curtos."""
    if not duration:
        return 0.0
    return 5.0 if duration > 10 else duration * 0.1
