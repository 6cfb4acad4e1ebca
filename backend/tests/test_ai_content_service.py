import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from clips.services.ai_content_service import generate_ai_content
from clips.services.analysis_service import build_clip
from clips.services.candidate import ClipCandidate

SCORES = {"total": 72, "hook": 20, "emotion": 15, "insight": 15, "cta": 10, "quality": 12}


def make_candidate(**overrides):
    data = {
        "start_time": 10.0,
        "end_time": 40.0,
        "title": "Why focus wins",
        "description": "A relatable tip",
        "emotional_content": "education",
        "transcript": "word6 word7",
        "source": "ai_transcript",
    }
    data.update(overrides)
    return ClipCandidate(**data)


def test_generate_ai_content_uses_model_answer():
    client = MagicMock()
    client.models.generate_content.return_value = SimpleNamespace(
        text=json.dumps({"aiTitle": "  Focus beats talent  ", "aiDescription": "One habit that changes everything"}),
        usage_metadata=None,
    )

    content = generate_ai_content(make_candidate(), client=client, model="test-model")

    assert content == {"ai_title": "Focus beats talent", "ai_description": "One habit that changes everything"}
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["config"].temperature == 0.8
    assert "Why focus wins" in kwargs["contents"]
    assert "education" in kwargs["contents"]


def test_generate_ai_content_falls_back_when_client_raises():
    client = MagicMock()
    client.models.generate_content.side_effect = RuntimeError("quota exceeded")

    content = generate_ai_content(make_candidate(), client=client)

    assert content == {"ai_title": "Why focus wins", "ai_description": "A relatable tip"}


def test_generate_ai_content_falls_back_on_unusable_answer():
    client = MagicMock()
    client.models.generate_content.return_value = SimpleNamespace(text="sorry, no idea", usage_metadata=None)

    assert generate_ai_content(make_candidate(), client=client)["ai_title"] == "Why focus wins"

    client.models.generate_content.return_value = SimpleNamespace(text='["a", "b"]', usage_metadata=None)
    assert generate_ai_content(make_candidate(), client=client)["ai_description"] == "A relatable tip"


def test_generate_ai_content_fills_missing_fields():
    client = MagicMock()
    client.models.generate_content.return_value = SimpleNamespace(
        text=json.dumps({"aiTitle": "New title"}), usage_metadata=None
    )

    content = generate_ai_content(make_candidate(), client=client)

    assert content == {"ai_title": "New title", "ai_description": "A relatable tip"}


def test_build_clip_stores_ai_content_when_gemini_available():
    with patch("clips.services.analysis_service.is_gemini_available", return_value=True), patch(
        "clips.services.analysis_service.generate_ai_content",
        return_value={"ai_title": "Focus beats talent", "ai_description": "One habit"},
    ) as generate:
        clip = build_clip(make_candidate(), SCORES, rank=1)

    generate.assert_called_once()
    assert clip.title == "Why focus wins"
    assert clip.metadata["ai_title"] == "Focus beats talent"
    assert clip.metadata["ai_description"] == "One habit"
    assert clip.metadata["hook_strength"] is None


def test_build_clip_skips_ai_content_without_gemini():
    with patch("clips.services.analysis_service.generate_ai_content") as generate:
        clip = build_clip(make_candidate(), SCORES, rank=1)

    generate.assert_not_called()
    assert "ai_title" not in clip.metadata
    assert clip.virality_score == 72
