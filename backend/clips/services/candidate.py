from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ClipCandidate:
    """Trecho proposto por um detector, ainda sem score e não persistido."""

    start_time: float
    end_time: float
    title: str = ""
    description: str = ""
    emotional_content: Optional[str] = None
    hook_strength: Optional[str] = None
    transcript: str = ""
    suggested_caption: str = ""
    source: str = "fallback"
    extra: dict = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time
