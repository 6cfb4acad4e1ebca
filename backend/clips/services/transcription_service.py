"""
Provider de transcrição: extrai áudio com ffmpeg e roda Whisper local.
"""

import logging
import os
import subprocess
import uuid

from django.conf import settings

from ..exceptions import ProviderError

logger = logging.getLogger(__name__)


class WhisperTranscriptionProvider:
    name = "whisper"

    def __init__(self, model_size: str = None, device: str = None):
        self.model_size = model_size or getattr(settings, "WHISPER_MODEL", None) or "small"
        self.device = device or getattr(settings, "WHISPER_DEVICE", None)

    def transcribe(self, video_path: str) -> dict:
        """
        Transcreve o vídeo com timestamps por palavra.

        Returns:
            {"full_text", "language", "segments": [{start, end, text, words: [{start, end, word}]}]}

        Raises:
            ProviderError: falha no ffmpeg ou no Whisper
        """
        audio_path = _extract_audio_with_ffmpeg(video_path)
        try:
            return self._transcribe_with_whisper(audio_path)
        finally:
            if os.path.exists(audio_path):
                try:
                    os.remove(audio_path)
                except OSError as e:
                    logger.warning(f"[whisper] Falha ao remover áudio temporário {audio_path}: {e}")

    def _transcribe_with_whisper(self, audio_path: str) -> dict:
        try:
            import whisper
            import torch
        except ImportError:
            raise ProviderError("Instale: pip install openai-whisper torch")

        device = self.device or ("cuda" if torch.cuda.is_available() else "cpu")

        logger.info(f"[whisper] Carregando modelo '{self.model_size}' em '{device}'...")

        try:
            model = whisper.load_model(self.model_size, device=device)
            result = model.transcribe(audio_path, word_timestamps=True)
        except Exception as e:
            if device == "cuda":
                torch.cuda.empty_cache()
            raise ProviderError(f"Falha interna Whisper: {e}")

        structured_segments = []
        for seg in result.get("segments", []):
            words = [
                {"word": w["word"].strip(), "start": w["start"], "end": w["end"]}
                for w in seg.get("words", [])
            ]
            structured_segments.append({
                "start": seg["start"],
                "end": seg["end"],
                "text": seg["text"].strip(),
                "words": words,
            })

        if device == "cuda":
            del model
            torch.cuda.empty_cache()

        return {
            "full_text": result.get("text", "").strip(),
            "segments": structured_segments,
            "language": result.get("language", "en"),
        }


def _extract_audio_with_ffmpeg(video_path: str) -> str:
    output_dir = getattr(settings, "AUDIO_TMP_DIR", "/tmp")
    os.makedirs(output_dir, exist_ok=True)
    audio_path = os.path.join(output_dir, f"{uuid.uuid4().hex}.wav")

    cmd = [
        getattr(settings, "FFMPEG_PATH", "ffmpeg"), "-y",
        "-i", video_path,
        "-vn",
        "-acodec", "pcm_s16le",
        "-ar", "16000",
        "-ac", "1",
        audio_path,
    ]

    try:
        subprocess.run(
            cmd,
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=int(getattr(settings, "FFMPEG_TIMEOUT", 900)),
        )
        return audio_path
    except subprocess.CalledProcessError as e:
        raise ProviderError(f"Erro FFmpeg áudio: {e.stderr.decode(errors='replace') if e.stderr else str(e)}")
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise ProviderError(f"Erro FFmpeg áudio: {e}")


def get_transcription_provider():
    return WhisperTranscriptionProvider()
