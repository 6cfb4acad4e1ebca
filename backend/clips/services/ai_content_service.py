"""
Título e descrição "virais" gerados pela IA para cada clip detectado.

Passo opcional: sem Gemini configurado, ou com qualquer falha do modelo,
o clip fica com o título e a descrição do detector.
"""

import logging

from django.conf import settings

from .candidate import ClipCandidate
from .gemini_utils import get_gemini_client, log_gemini_usage, parse_json_response

logger = logging.getLogger(__name__)

CONTENT_PROMPT = """Create a viral title and description for this short-form video clip.

ORIGINAL TITLE: {title}
TRANSCRIPT: {transcript}
EMOTION: {emotion}

Keep the title under 80 characters and the description under 300 characters.
Return JSON: {{"aiTitle": "...", "aiDescription": "..."}}"""

TITLE_MAX_CHARS = 255


def _fallback(candidate: ClipCandidate) -> dict:
    return {"ai_title": candidate.title or "", "ai_description": candidate.description or ""}


def generate_ai_content(candidate: ClipCandidate, client=None, model: str = None) -> dict:
    """
    Pede ao Gemini um título e uma descrição para o candidato.

    Returns:
        {"ai_title", "ai_description"}; em caso de falha, os textos do detector
    """
    model = model or getattr(settings, "GEMINI_CONTENT_MODEL", "gemini-2.5-flash")
    temperature = float(getattr(settings, "GEMINI_CONTENT_TEMPERATURE", 0.8))
    prompt = CONTENT_PROMPT.format(
        title=candidate.title or "Untitled Clip",
        transcript=(candidate.transcript or candidate.description or "")[:4000],
        emotion=candidate.emotional_content or "unknown",
    )

    try:
        from google.genai import types

        client = client or get_gemini_client()
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=temperature,
            ),
        )
        log_gemini_usage(response, kind="clip_ai_content", model=model)
        data = parse_json_response(response.text)
    except Exception as e:
        logger.warning(f"[ai_content] Falha ao gerar título/descrição ({candidate.start_time:.1f}s): {e}")
        return _fallback(candidate)

    if not isinstance(data, dict):
        logger.warning("[ai_content] Resposta do modelo não é um objeto, usando textos do detector")
        return _fallback(candidate)

    fallback = _fallback(candidate)
    title = str(data.get("aiTitle") or "").strip() or fallback["ai_title"]
    description = str(data.get("aiDescription") or "").strip() or fallback["ai_description"]
    return {"ai_title": title[:TITLE_MAX_CHARS], "ai_description": description}
