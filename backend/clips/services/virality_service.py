"""
Score de viralidade: cinco sub-scores (0-100) e um agregado ponderado.

Funções puras: mesma entrada, mesmo resultado, sem chamadas externas.
As tabelas e léxicos são mantidos exatamente como estão para compatibilidade.
"""

import re
from typing import List, Sequence

from .candidate import ClipCandidate

VIRALITY_WEIGHTS = {
    "hook": 25,
    "emotion": 25,
    "insight": 20,
    "cta": 15,
    "quality": 15,
}

HOOK_STRENGTH_SCORES = {
    "very_strong": 95,
    "strong": 85,
    "medium": 70,
    "weak": 50,
    "very_weak": 30,
}
DEFAULT_HOOK_SCORE = 70
HOOK_WORDS = ("secret", "never", "always", "truth", "mistake", "how to", "why", "what if")

EMOTION_SCORES = {
    "humor": 90,
    "surprise": 88,
    "inspiration": 85,
    "controversy": 82,
    "motivation": 80,
    "story": 78,
    "education": 75,
    "fear": 70,
    "neutral": 50,
}
DEFAULT_EMOTION_SCORE = 65

ACTION_WORDS = ("step", "tip", "trick", "hack", "method", "strategy", "secret")
SHARE_WORDS = ("share", "tell", "tag", "send", "save", "follow")

MAX_CLIPS_PER_VIDEO = 10

_DIGIT_RE = re.compile(r"\d")


def _bounded(value: int) -> int:
    return max(0, min(100, value))


def hook_score(candidate: ClipCandidate) -> int:
    base = HOOK_STRENGTH_SCORES.get(candidate.hook_strength or "", DEFAULT_HOOK_SCORE)
    title = (candidate.title or "").lower()
    if any(word in title for word in HOOK_WORDS):
        base += 10
    return _bounded(base)


def emotion_score(candidate: ClipCandidate) -> int:
    return EMOTION_SCORES.get((candidate.emotional_content or "").lower(), DEFAULT_EMOTION_SCORE)


def insight_score(candidate: ClipCandidate) -> int:
    description = (candidate.description or "").lower()
    transcript = (candidate.transcript or "").lower()

    score = 60
    if any(w in description or w in transcript for w in ACTION_WORDS):
        score += 20
    if _DIGIT_RE.search(transcript):
        score += 10
    if 20 <= candidate.duration <= 45:
        score += 10
    return _bounded(score)


def cta_score(candidate: ClipCandidate) -> int:
    description = (candidate.description or "").lower()

    score = 60
    if any(w in description for w in SHARE_WORDS):
        score += 15
    if "controversial" in description or "debate" in description:
        score += 20
    if "relatable" in description or "everyone" in description:
        score += 15
    return _bounded(score)


def quality_score(candidate: ClipCandidate) -> int:
    score = 70

    duration = candidate.duration
    if 15 <= duration <= 60:
        score += 15
    elif duration < 10 or duration > 90:
        score -= 20

    transcript = candidate.transcript or ""
    if transcript.endswith((".", "!", "?")):
        score += 10

    word_count = len(transcript.split())
    if 30 <= word_count <= 150:
        score += 5
    return _bounded(score)


def aggregate(scores: dict) -> int:
    """Soma ponderada arredondada (meio para cima), calculada em inteiros."""
    weighted = sum(scores[name] * weight for name, weight in VIRALITY_WEIGHTS.items())
    return (weighted + 50) // 100


def score(candidate: ClipCandidate) -> dict:
    """Retorna {hook, emotion, insight, cta, quality, total}."""
    scores = {
        "hook": hook_score(candidate),
        "emotion": emotion_score(candidate),
        "insight": insight_score(candidate),
        "cta": cta_score(candidate),
        "quality": quality_score(candidate),
    }
    scores["total"] = aggregate(scores)
    return scores


def rank_candidates(candidates: Sequence[ClipCandidate], limit: int = MAX_CLIPS_PER_VIDEO) -> List[tuple]:
    """
    Pontua e ordena candidatos por total (desc), mantendo a ordem de
    detecção nos empates (sorted é estável).

    Returns:
        Lista de (candidate, scores) com no máximo `limit` itens
    """
    scored = [(candidate, score(candidate)) for candidate in candidates]
    ranked = sorted(scored, key=lambda pair: pair[1]["total"], reverse=True)
    return ranked[:limit]
