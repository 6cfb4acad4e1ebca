import json
import logging
import re

from django.conf import settings
from google import genai

logger = logging.getLogger(__name__)

_gemini_client = None

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def is_gemini_available() -> bool:
    return bool(getattr(settings, "GEMINI_API_KEY", None))


def get_gemini_client():
    global _gemini_client
    if _gemini_client:
        return _gemini_client

    api_key = getattr(settings, "GEMINI_API_KEY", None)
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY não configurada")

    _gemini_client = genai.Client(api_key=api_key)
    return _gemini_client


def parse_json_response(text: str):
    """
    Interpreta a resposta do modelo como JSON.

    Tenta o texto puro, depois o conteúdo de um bloco ```json``` e por fim o
    primeiro objeto/array encontrado no texto.

    Raises:
        ValueError: se nada puder ser interpretado
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Resposta vazia do modelo")

    attempts = [text]
    fenced = _FENCE_RE.search(text)
    if fenced:
        attempts.append(fenced.group(1).strip())
    for pattern in (_OBJECT_RE, _ARRAY_RE):
        match = pattern.search(text)
        if match:
            attempts.append(match.group(0))

    for attempt in attempts:
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue

    raise ValueError(f"Resposta do modelo não é JSON: {text[:200]}")


def log_gemini_usage(response, kind: str, model: str) -> None:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return

    logger.info(
        "[gemini_usage] kind=%s model=%s prompt_tokens=%s output_tokens=%s total_tokens=%s",
        kind,
        model,
        getattr(usage, "prompt_token_count", None),
        getattr(usage, "candidates_token_count", None),
        getattr(usage, "total_token_count", None),
    )
