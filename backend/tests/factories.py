"""Dados de teste compartilhados."""


def build_transcript_payload(duration: float = 180.0, segment_length: float = 10.0) -> dict:
    """Segmentos de 10s com 5 palavras cada (uma a cada 2s, 1.5s de duração)."""
    segments = []
    counter = 0
    start = 0.0
    while start < duration:
        words = []
        for j in range(5):
            counter += 1
            word_start = start + 2 * j
            words.append({"start": word_start, "end": word_start + 1.5, "word": f"word{counter}"})
        segments.append(
            {
                "start": start,
                "end": min(duration, start + segment_length),
                "text": " ".join(w["word"] for w in words),
                "words": words,
            }
        )
        start += segment_length
    return {
        "full_text": " ".join(s["text"] for s in segments),
        "language": "en",
        "segments": segments,
    }
