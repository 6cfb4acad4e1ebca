"""
Armazenamento e recorte de transcrições.

A transcrição de um clip nunca é fonte de verdade: é sempre derivada da
transcrição do vídeo restrita a [start, end] e pode ser recalculada.
"""

import logging
import math
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from ..models import Transcript, Video

logger = logging.getLogger(__name__)

_TIME_PRECISION = 3


def _as_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _normalize_words(raw_words: list) -> list:
    words = []
    for w in raw_words or []:
        if not isinstance(w, dict):
            continue
        start = _as_float(w.get("start"))
        end = _as_float(w.get("end"))
        token = str(w.get("word") or w.get("text") or "").strip()
        if start is None or end is None or not token or start > end or start < 0:
            continue
        words.append({"start": start, "end": end, "word": token})

    words.sort(key=lambda w: (w["start"], w["end"]))

    # Palavras sobrepostas: início da próxima é empurrado para o fim da anterior
    for prev, cur in zip(words, words[1:]):
        if cur["start"] < prev["end"]:
            cur["start"] = prev["end"]
            if cur["end"] < cur["start"]:
                cur["end"] = cur["start"]
    return words


def normalize_segments(raw_segments: list) -> list:
    """
    Ordena segmentos/palavras e descarta itens com start > end.

    Garante: start <= end em tudo e, dentro de um segmento,
    fim da palavra i <= início da palavra i+1.
    """
    segments = []
    for seg in raw_segments or []:
        if not isinstance(seg, dict):
            continue
        start = _as_float(seg.get("start"))
        end = _as_float(seg.get("end"))
        if start is None or end is None or start > end or start < 0:
            continue
        segments.append(
            {
                "start": start,
                "end": end,
                "text": str(seg.get("text") or "").strip(),
                "words": _normalize_words(seg.get("words")),
            }
        )

    segments.sort(key=lambda s: (s["start"], s["end"]))
    return segments


def save_transcript(video: Video, payload: dict, provider: str = "whisper") -> Transcript:
    """Substitui por completo a transcrição do vídeo."""
    segments = normalize_segments(payload.get("segments", []))
    full_text = (payload.get("full_text") or "").strip() or " ".join(s["text"] for s in segments).strip()
    duration = segments[-1]["end"] if segments else None

    with transaction.atomic():
        Transcript.objects.filter(video=video).delete()
        transcript = Transcript.objects.create(
            video=video,
            full_text=full_text,
            segments=segments,
            language=payload.get("language") or "en",
            duration=duration,
            provider=provider,
        )

    # Qualquer recorte cacheado dos clips deste vídeo ficou obsoleto
    for clip_id in video.clips.values_list("clip_id", flat=True):
        invalidate_clip_transcript(clip_id)

    logger.info(
        f"[transcript] Transcrição salva para video_id={video.video_id}: "
        f"{len(segments)} segmentos, {len(transcript.words)} palavras"
    )
    return transcript


def get_transcript(video_id) -> Optional[Transcript]:
    return Transcript.objects.filter(video__video_id=video_id).first()


def covered_range(transcript: Optional[Transcript]) -> Optional[tuple]:
    """(início do primeiro segmento, fim do último) ou None."""
    if not transcript or not transcript.segments:
        return None
    return transcript.segments[0]["start"], transcript.segments[-1]["end"]


def format_with_timestamps(segments: list) -> str:
    if not segments:
        return ""

    buffer = []
    for seg in segments:
        start = seg.get("start", 0)
        end = seg.get("end", 0)
        text = seg.get("text", "").strip()
        buffer.append(f"[{start:.1f}-{end:.1f}] {text}")

    return "\n".join(buffer)


def slice_transcript(transcript: Transcript, start: float, end: float) -> dict:
    """
    Recorta a transcrição para [start, end] com tempos relativos a start.

    Palavras entram se estiverem inteiramente na janela; segmentos entram
    se sobrepuserem a janela e são limitados a ela.
    """
    window = end - start

    words = [
        {
            "word": w["word"],
            "start": round(w["start"] - start, _TIME_PRECISION),
            "end": round(w["end"] - start, _TIME_PRECISION),
        }
        for w in transcript.words
        if w["start"] >= start and w["end"] <= end
    ]

    segments = [
        {
            "text": s["text"],
            "start": round(max(0.0, s["start"] - start), _TIME_PRECISION),
            "end": round(min(window, s["end"] - start), _TIME_PRECISION),
        }
        for s in transcript.segments
        if s["start"] < end and s["end"] > start
    ]

    return {
        "text": " ".join(w["word"] for w in words),
        "words": words,
        "segments": segments,
        "duration": round(window, _TIME_PRECISION),
    }


def get_sub_range(video_id, start: float, end: float) -> Optional[dict]:
    """Recorte {text, words, segments, duration} ou None se não há transcrição."""
    transcript = get_transcript(video_id)
    if transcript is None:
        return None
    return slice_transcript(transcript, start, end)


def _clip_cache_key(clip_id) -> str:
    return f"clip_transcript:{clip_id}"


def get_clip_sub_transcript(clip) -> Optional[dict]:
    """Recorte da transcrição para a janela atual do clip, com cache."""
    key = _clip_cache_key(clip.clip_id)
    cached = cache.get(key)
    if cached and cached.get("start") == clip.start_time and cached.get("end") == clip.end_time:
        return cached["data"]

    data = get_sub_range(clip.video.video_id, clip.start_time, clip.end_time)
    if data is not None:
        timeout = int(getattr(settings, "CLIP_TRANSCRIPT_CACHE_TIMEOUT", 86400))
        cache.set(key, {"start": clip.start_time, "end": clip.end_time, "data": data}, timeout=timeout)
    return data


def invalidate_clip_transcript(clip_id) -> None:
    cache.delete(_clip_cache_key(clip_id))
