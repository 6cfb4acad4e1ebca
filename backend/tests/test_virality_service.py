from clips.services.candidate import ClipCandidate
from clips.services.virality_service import VIRALITY_WEIGHTS, rank_candidates, score


def make_candidate(**kwargs):
    defaults = {"start_time": 0.0, "end_time": 30.0}
    defaults.update(kwargs)
    return ClipCandidate(**defaults)


def test_weights_sum_to_100():
    assert sum(VIRALITY_WEIGHTS.values()) == 100


def test_strong_candidate_scores():
    candidate = make_candidate(
        title="The secret to focus",
        description="Share this tip with everyone",
        emotional_content="humor",
        hook_strength="strong",
        transcript="Step 1 is simple.",
    )

    scores = score(candidate)

    assert scores == {
        "hook": 95,
        "emotion": 90,
        "insight": 100,
        "cta": 90,
        "quality": 95,
        "total": 94,
    }


def test_defaults_for_unknown_tags():
    scores = score(make_candidate(end_time=5.0, emotional_content="nostalgia", hook_strength="mystery"))

    assert scores["hook"] == 70
    assert scores["emotion"] == 65
    assert scores["insight"] == 60
    assert scores["cta"] == 60
    assert scores["quality"] == 50
    assert scores["total"] == 62


def test_total_rounds_half_up():
    # 70*25 + 70*25 + 60*20 + 60*15 + 70*15 = 6650 -> 66.5
    scores = score(make_candidate(end_time=12.0, emotional_content="fear"))

    assert scores["total"] == 67


def test_hook_is_capped_at_100():
    scores = score(make_candidate(title="Why you never win", hook_strength="very_strong"))

    assert scores["hook"] == 100


def test_all_scores_within_bounds():
    candidates = [
        make_candidate(end_time=end, hook_strength=hook, emotional_content=emotion, description=desc, transcript=text)
        for end, hook, emotion, desc, text in [
            (3.0, "very_weak", "neutral", "", ""),
            (200.0, "very_strong", "humor", "controversial debate share relatable", "tip 1 2 3!"),
            (40.0, None, None, "everyone tag", " ".join(["word"] * 60) + "."),
        ]
    ]
    for candidate in candidates:
        scores = score(candidate)
        for name, value in scores.items():
            assert 0 <= value <= 100, name
        weighted = sum(scores[k] * w for k, w in VIRALITY_WEIGHTS.items())
        assert scores["total"] == (weighted + 50) // 100


def test_rank_is_stable_and_limited():
    first = make_candidate(title="A")
    second = make_candidate(title="B")
    best = make_candidate(title="C", hook_strength="very_strong", emotional_content="humor")

    ranked = rank_candidates([first, second, best], limit=2)

    assert [c.title for c, _ in ranked] == ["C", "A"]
    assert ranked[0][1]["total"] >= ranked[1][1]["total"]
