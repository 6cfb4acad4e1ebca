"""
Detecção de candidatos a clip.

Três estratégias com o mesmo contrato detect(transcript, video) -> [ClipCandidate]:
- TranscriptClipDetector: Gemini lê a transcrição com timestamps
- VideoClipDetector: Gemini assiste o arquivo de vídeo (Files API)
- FallbackClipDetector: particiona o vídeo em janelas iguais, sem IA
"""

import logging
import math
import random
import time
from typing import List, Optional

from django.conf import settings

from ..exceptions import DataInvariantError, ProviderError
from .candidate import ClipCandidate
from .gemini_utils import get_gemini_client, is_gemini_available, log_gemini_usage, parse_json_response
from .transcript_service import covered_range, format_with_timestamps

logger = logging.getLogger(__name__)

HOOK_STRENGTHS = ("very_weak", "weak", "medium", "strong", "very_strong")
EMOTIONS = ("humor", "surprise", "inspiration", "controversy", "motivation", "story", "education", "fear")

# hookType do modelo de vídeo -> vocabulário de emoções do scorer
HOOK_TYPE_TO_EMOTION = {
    "humor": "humor",
    "surprise": "surprise",
    "story": "story",
    "insight": "education",
    "emotion": "inspiration",
    "cta": "motivation",
}

TRANSCRIPT_PROMPT = """You are an expert viral video editor. Analyze this transcript and identify the best moments to extract as short-form video clips (15-60 seconds each).

VIDEO TITLE: {title}
DURATION: {duration:.1f}s

TRANSCRIPT (each line is [start-end] in seconds):
{transcript}

For each clip candidate, identify:
1. The EXACT start and end timestamps (must match transcript timestamps)
2. Why this segment would perform well on TikTok/Reels/Shorts
3. A catchy hook or title for the clip
4. The emotional content (humor, inspiration, surprise, education, controversy, story, motivation, fear)
5. The hook strength (very_weak, weak, medium, strong, very_strong)

Find 5-10 of the BEST moments. Prioritize:
- Strong opening hooks (first 3 seconds grab attention)
- Complete thoughts (don't cut mid-sentence)
- Emotional peaks (laughter, revelation, surprise)
- Actionable insights (tips viewers can use)
- Controversial or debate-worthy statements
- Story arcs with beginning/middle/end"""

VIDEO_PROMPT = """You are an expert video editor and social media strategist. Watch this video carefully and identify 3-8 moments that would make excellent short-form clips for TikTok, Instagram Reels, or YouTube Shorts.

For each viral moment you detect, analyze BOTH the visual and audio elements:
- Visual: facial expressions, gestures, scene changes, product shots, b-roll
- Audio: tone, emphasis, pauses, emotional delivery, key phrases

Return JSON with this exact structure:
{
  "clips": [
    {
      "startTime": <seconds as number>,
      "endTime": <seconds as number>,
      "viralityScore": <0-100 rating>,
      "hookType": "insight" | "emotion" | "surprise" | "humor" | "cta" | "story",
      "title": "<short catchy title>",
      "reason": "<why this moment is compelling, mentioning both visual and audio elements>",
      "suggestedCaption": "<viral-worthy caption with emoji for social media>",
      "transcript": "<what is said during this segment>",
      "visualHighlight": "<what makes this visually compelling>"
    }
  ]
}

SCORING CRITERIA:
- 90-100: Exceptional hook + high emotional impact + shareable insight
- 80-89: Strong hook with good engagement potential
- 70-79: Solid content, decent viral potential
- 60-69: Average content, moderate potential
- Below 60: Weak viral potential

IMPORTANT: Return ONLY valid JSON, no markdown formatting or extra text."""

TRANSCRIPT_RESPONSE_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "startTime": {"type": "number"},
            "endTime": {"type": "number"},
            "title": {"type": "string"},
            "description": {"type": "string"},
            "emotionalContent": {"type": "string"},
            "hookStrength": {"type": "string"},
            "transcript": {"type": "string"},
        },
        "required": ["startTime", "endTime", "title", "description", "emotionalContent", "hookStrength"],
    },
}

FALLBACK_REASONS = (
    "Key insight with engagement potential",
    "Memorable quote",
    "Strong hook",
    "Emotional moment",
    "Call to action",
)
FALLBACK_CAPTIONS = (
    "🔥 This changed everything...",
    "💡 The moment it clicked...",
    "What nobody tells you...",
    "⚡ Game changer alert!",
    "👀 Pay attention to this...",
)


def _to_float(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def hook_strength_from_score(model_score) -> str:
    """Converte o score 0-100 do modelo de vídeo no enum de hook strength."""
    value = _to_float(model_score)
    if value is None:
        return "medium"
    if value >= 90:
        return "very_strong"
    if value >= 80:
        return "strong"
    if value >= 70:
        return "medium"
    if value >= 60:
        return "weak"
    return "very_weak"


class TranscriptClipDetector:
    source = "ai_transcript"

    def __init__(self, client=None, model: str = None, temperature: float = None):
        self._client = client
        self.model = model or getattr(settings, "GEMINI_TRANSCRIPT_MODEL", "gemini-2.5-flash")
        self.temperature = temperature if temperature is not None else float(getattr(settings, "GEMINI_TEMPERATURE", 0.4))

    @property
    def client(self):
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def detect(self, transcript, video) -> List[ClipCandidate]:
        if transcript is None or not transcript.segments:
            raise ProviderError("Transcrição vazia, nada para analisar")

        from google.genai import types

        prompt = TRANSCRIPT_PROMPT.format(
            title=video.title or "Untitled",
            duration=float(transcript.duration or video.duration or 0),
            transcript=format_with_timestamps(transcript.segments),
        )

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=TRANSCRIPT_RESPONSE_SCHEMA,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            raise ProviderError(f"Falha na IA Generativa: {e}")

        log_gemini_usage(response, kind="clip_detection_transcript", model=self.model)

        try:
            data = parse_json_response(response.text)
        except ValueError as e:
            raise ProviderError(str(e))

        items = data.get("clips", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ProviderError("Resposta do modelo não contém uma lista de clips")

        candidates = []
        for item in items:
            if not isinstance(item, dict):
                continue
            start = _to_float(item.get("startTime"))
            end = _to_float(item.get("endTime"))
            if start is None or end is None:
                logger.warning(f"[detector] Item sem timestamps ignorado: {item}")
                continue
            candidates.append(
                ClipCandidate(
                    start_time=start,
                    end_time=end,
                    title=str(item.get("title") or "").strip(),
                    description=str(item.get("description") or "").strip(),
                    emotional_content=(item.get("emotionalContent") or None),
                    hook_strength=(item.get("hookStrength") or None),
                    transcript=str(item.get("transcript") or "").strip(),
                    source=self.source,
                )
            )

        logger.info(f"[detector] Gemini (transcrição) propôs {len(candidates)} clips")
        return candidates


class VideoClipDetector:
    source = "ai_video"

    def __init__(self, client=None, model: str = None, poll_seconds: int = None, max_polls: int = None):
        self._client = client
        self.model = model or getattr(settings, "GEMINI_VIDEO_MODEL", "gemini-2.5-flash")
        self.poll_seconds = poll_seconds if poll_seconds is not None else int(getattr(settings, "GEMINI_FILE_POLL_SECONDS", 5))
        self.max_polls = max_polls if max_polls is not None else int(getattr(settings, "GEMINI_FILE_POLL_MAX_ATTEMPTS", 120))

    @property
    def client(self):
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def _upload_and_wait(self, video_path: str):
        try:
            uploaded = self.client.files.upload(file=video_path)
        except Exception as e:
            raise ProviderError(f"Falha no upload do vídeo para o Gemini: {e}")

        attempts = 0
        while not uploaded.state or uploaded.state.name != "ACTIVE":
            if uploaded.state and uploaded.state.name == "FAILED":
                raise ProviderError("Processamento do vídeo falhou no Gemini")
            if attempts >= self.max_polls:
                raise ProviderError("Timeout aguardando processamento do vídeo no Gemini")
            attempts += 1
            time.sleep(self.poll_seconds)
            uploaded = self.client.files.get(name=uploaded.name)

        return uploaded

    def detect(self, transcript, video) -> List[ClipCandidate]:
        if not video.file_path:
            raise ProviderError("Vídeo sem arquivo local")

        uploaded = self._upload_and_wait(video.file_path)
        try:
            try:
                response = self.client.models.generate_content(
                    model=self.model,
                    contents=[uploaded, VIDEO_PROMPT],
                )
            except Exception as e:
                raise ProviderError(f"Falha na análise de vídeo do Gemini: {e}")

            log_gemini_usage(response, kind="clip_detection_video", model=self.model)
        finally:
            try:
                self.client.files.delete(name=uploaded.name)
            except Exception as e:
                logger.info(f"[detector] Não foi possível remover arquivo do Gemini {uploaded.name}: {e}")

        try:
            data = parse_json_response(response.text)
        except ValueError as e:
            raise ProviderError(str(e))

        items = data.get("clips", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ProviderError("Resposta do modelo não contém uma lista de clips")

        candidates = []
        for item in items:
            if not isinstance(item, dict):
                continue
            start = _to_float(item.get("startTime"))
            end = _to_float(item.get("endTime"))
            if start is None or end is None:
                continue
            hook_type = str(item.get("hookType") or "insight").lower()
            caption = str(item.get("suggestedCaption") or "").strip()
            candidates.append(
                ClipCandidate(
                    start_time=start,
                    end_time=end,
                    title=str(item.get("title") or caption[:50] or "Untitled Clip").strip(),
                    description=str(item.get("reason") or "").strip(),
                    emotional_content=HOOK_TYPE_TO_EMOTION.get(hook_type),
                    hook_strength=hook_strength_from_score(item.get("viralityScore")),
                    transcript=str(item.get("transcript") or "").strip(),
                    suggested_caption=caption,
                    source=self.source,
                    extra={
                        "hook_type": hook_type,
                        "model_score": item.get("viralityScore"),
                        "visual_highlight": item.get("visualHighlight") or "",
                    },
                )
            )

        logger.info(f"[detector] Gemini (vídeo) propôs {len(candidates)} clips")
        return candidates


class FallbackClipDetector:
    """
    Particiona o vídeo em até 5 janelas iguais de no máximo 45s.

    As tags qualitativas vêm de um PRNG semeado pelo id do vídeo: variam
    entre vídeos mas são reprodutíveis para o mesmo vídeo.
    """

    source = "fallback"
    MAX_WINDOWS = 5
    SECONDS_PER_WINDOW = 30
    MAX_WINDOW_LENGTH = 45

    def detect(self, transcript, video) -> List[ClipCandidate]:
        duration = float(video.duration or (transcript.duration if transcript else 0) or 0)
        count = min(self.MAX_WINDOWS, int(math.floor(duration / self.SECONDS_PER_WINDOW)))
        if count <= 0:
            return []

        rng = random.Random(str(video.video_id))
        step = duration / count
        length = min(self.MAX_WINDOW_LENGTH, step)

        candidates = []
        for i in range(count):
            start = i * step
            end = min(duration, start + length)
            candidates.append(
                ClipCandidate(
                    start_time=round(start, 3),
                    end_time=round(end, 3),
                    title=f"Highlight {i + 1}",
                    description=FALLBACK_REASONS[i % len(FALLBACK_REASONS)],
                    emotional_content=rng.choice(EMOTIONS),
                    hook_strength=rng.choice(HOOK_STRENGTHS),
                    transcript="",
                    suggested_caption=FALLBACK_CAPTIONS[i % len(FALLBACK_CAPTIONS)],
                    source=self.source,
                )
            )
        return candidates


def get_detector(kind: str = None):
    """Detector configurado ('transcript' | 'video' | 'fallback')."""
    kind = (kind or getattr(settings, "CLIP_DETECTION_BACKEND", "transcript") or "transcript").lower()
    if kind == "fallback" or not is_gemini_available():
        return FallbackClipDetector()
    if kind == "video":
        return VideoClipDetector()
    return TranscriptClipDetector()


def validate_candidates(candidates: List[ClipCandidate], transcript, video) -> List[ClipCandidate]:
    """
    Descarta (sem ajustar) candidatos com start >= end ou fora do intervalo
    coberto pela transcrição ([0, duração] quando não há transcrição).
    """
    bounds = covered_range(transcript)
    if bounds is None:
        bounds = (0.0, float(video.duration or 0))
    low, high = bounds
    if video.duration:
        high = min(high, float(video.duration))

    valid = []
    for candidate in candidates:
        try:
            if candidate.start_time >= candidate.end_time:
                raise DataInvariantError(
                    "start_time >= end_time",
                    start_time=candidate.start_time,
                    end_time=candidate.end_time,
                )
            if candidate.start_time < low or candidate.end_time > high:
                raise DataInvariantError(
                    "Candidato fora do intervalo coberto",
                    start_time=candidate.start_time,
                    end_time=candidate.end_time,
                    bounds=[low, high],
                )
        except DataInvariantError as e:
            logger.warning(f"[detector] Candidato descartado ({candidate.source}): {e.message} {e.details}")
            continue
        valid.append(candidate)
    return valid


def detect_candidates(detector, transcript, video) -> List[ClipCandidate]:
    """
    Roda o detector e cai no particionador determinístico se ele falhar
    ou não produzir nenhum candidato válido.
    """
    if not isinstance(detector, FallbackClipDetector):
        try:
            candidates = validate_candidates(detector.detect(transcript, video), transcript, video)
            if candidates:
                return candidates
            logger.warning(f"[detector] {detector.source} não retornou candidatos válidos, usando fallback")
        except Exception as e:
            logger.error(f"[detector] Falha em {detector.source}, usando fallback: {e}", exc_info=True)

    # As janelas do fallback cobrem o vídeo inteiro, não só o trecho falado
    return validate_candidates(FallbackClipDetector().detect(transcript, video), None, video)
