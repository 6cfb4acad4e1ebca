"""
Legendas ASS (estilizadas) e SRT (texto + tempo) a partir de palavras com timestamps.

Os tempos são sempre truncados (floor) para que a legenda nunca apareça
antes do áudio correspondente.
"""

import logging
import math
import os
import re
import uuid
from typing import List, Optional

from django.conf import settings

from ..exceptions import InvalidCaptionStyle, UnknownStylePreset

logger = logging.getLogger(__name__)

CAPTION_STYLES = {
    "animated": {
        "font_name": "Arial",
        "font_size": 18,
        "primary_color": "&H00FFFFFF",
        "outline_color": "&H00000000",
        "back_color": "&H80000000",
        "outline": 3,
        "shadow": 1,
        "bold": True,
        "alignment": 2,
        "margin_v": 50,
    },
    "bold": {
        "font_name": "Impact",
        "font_size": 24,
        "primary_color": "&H00FFFF00",
        "outline_color": "&H00000000",
        "back_color": "&H00000000",
        "outline": 4,
        "shadow": 2,
        "bold": True,
        "alignment": 2,
        "margin_v": 40,
    },
    "minimal": {
        "font_name": "Helvetica",
        "font_size": 14,
        "primary_color": "&H00FFFFFF",
        "outline_color": "&H00000000",
        "back_color": "&H00000000",
        "outline": 1,
        "shadow": 0,
        "bold": False,
        "alignment": 2,
        "margin_v": 60,
    },
    "karaoke": {
        "font_name": "Arial",
        "font_size": 20,
        "primary_color": "&H0000FFFF",
        "secondary_color": "&H00FFFFFF",
        "outline_color": "&H00000000",
        "back_color": "&H00000000",
        "outline": 2,
        "shadow": 1,
        "bold": True,
        "alignment": 2,
        "margin_v": 45,
    },
    "news": {
        "font_name": "Roboto",
        "font_size": 16,
        "primary_color": "&H00FFFFFF",
        "outline_color": "&H00000000",
        "back_color": "&HCC000000",
        "outline": 0,
        "shadow": 0,
        "bold": False,
        "alignment": 2,
        "margin_v": 30,
    },
}

DEFAULT_PRESET = "bold"
CUSTOM_PRESET = "custom"

ASS_WORDS_PER_LINE = 4
SRT_WORDS_PER_LINE = 5

# Aliases camelCase aceitos em estilos customizados
_STYLE_ALIASES = {
    "fontName": "font_name",
    "fontSize": "font_size",
    "primaryColor": "primary_color",
    "secondaryColor": "secondary_color",
    "outlineColor": "outline_color",
    "backColor": "back_color",
    "marginV": "margin_v",
}

_COLOR_RE = re.compile(r"^&H[0-9A-Fa-f]{8}$")
_COLOR_KEYS = ("primary_color", "secondary_color", "outline_color", "back_color")
_INT_LIMITS = {
    "font_size": (1, 300),
    "outline": (0, 20),
    "shadow": (0, 20),
    "alignment": (1, 9),
    "margin_v": (0, 1000),
}

_EPSILON = 1e-6


def list_presets() -> dict:
    return {name: dict(style) for name, style in CAPTION_STYLES.items()}


def default_caption_style() -> dict:
    return {"preset": DEFAULT_PRESET, **CAPTION_STYLES[DEFAULT_PRESET]}


def preset_style(name: str) -> dict:
    if name not in CAPTION_STYLES:
        raise UnknownStylePreset(
            f"Unknown caption style '{name}'",
            valid=sorted(CAPTION_STYLES),
        )
    return {"preset": name, **CAPTION_STYLES[name]}


def build_custom_style(overrides: dict, base: Optional[str] = None) -> dict:
    """
    Mescla atributos customizados sobre um preset.

    Sem `base` o resultado parte de 'bold' e é marcado como 'custom'; com
    `base` ele mantém o nome do preset (ex: karaoke continua com os tags \\k).

    Raises:
        InvalidCaptionStyle: chave desconhecida ou valor inválido
    """
    if not isinstance(overrides, dict):
        raise InvalidCaptionStyle("Caption style must be a preset name or an object")

    if base is not None and base not in CAPTION_STYLES:
        raise UnknownStylePreset(f"Unknown caption style '{base}'", valid=sorted(CAPTION_STYLES))

    known = set(CAPTION_STYLES[DEFAULT_PRESET]) | {"secondary_color"}
    if base is None:
        style = {"preset": CUSTOM_PRESET, **CAPTION_STYLES[DEFAULT_PRESET]}
    else:
        style = {"preset": base, **CAPTION_STYLES[base]}

    for raw_key, value in overrides.items():
        if raw_key == "preset":
            continue
        key = _STYLE_ALIASES.get(raw_key, raw_key)
        if key not in known:
            raise InvalidCaptionStyle(f"Unknown caption style attribute '{raw_key}'")

        if key in _COLOR_KEYS:
            if not isinstance(value, str) or not _COLOR_RE.match(value):
                raise InvalidCaptionStyle(f"'{raw_key}' must be an ASS color like &H00FFFFFF")
        elif key in _INT_LIMITS:
            low, high = _INT_LIMITS[key]
            if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
                raise InvalidCaptionStyle(f"'{raw_key}' must be an integer between {low} and {high}")
        elif key == "bold":
            if not isinstance(value, bool):
                raise InvalidCaptionStyle("'bold' must be a boolean")
        elif key == "font_name":
            if not isinstance(value, str) or not value.strip() or "," in value:
                raise InvalidCaptionStyle("'font_name' must be a non-empty name without commas")
            value = value.strip()

        style[key] = value

    return style


def resolve_caption_style(style_or_name) -> dict:
    """Aceita nome de preset, objeto customizado ou um estilo já resolvido."""
    if style_or_name is None:
        return default_caption_style()
    if isinstance(style_or_name, str):
        return preset_style(style_or_name)
    if isinstance(style_or_name, dict):
        preset = style_or_name.get("preset")
        if preset in CAPTION_STYLES:
            base = preset_style(preset)
            extras = {k: v for k, v in style_or_name.items() if k != "preset" and base.get(k) != v}
            if not extras:
                return base
            return build_custom_style(style_or_name, base=preset)
        return build_custom_style(style_or_name)
    raise InvalidCaptionStyle("Caption style must be a preset name or an object")


def group_words(words: List[dict], words_per_line: int = ASS_WORDS_PER_LINE, offset: float = 0.0) -> List[dict]:
    """
    Agrupa palavras consecutivas em eventos de legenda.

    Cada evento começa no início da primeira palavra e termina no fim da
    última, ambos relativos a `offset` (nunca negativos).
    """
    if words_per_line < 1:
        raise InvalidCaptionStyle("words_per_line must be >= 1")

    events = []
    for i in range(0, len(words), words_per_line):
        chunk = words[i:i + words_per_line]
        if not chunk:
            continue
        events.append({
            "start": max(0.0, float(chunk[0]["start"]) - offset),
            "end": max(0.0, float(chunk[-1]["end"]) - offset),
            "text": " ".join(str(w["word"]).strip() for w in chunk),
            "words": chunk,
        })
    return events


def format_ass_time(seconds: float) -> str:
    """H:MM:SS.CC (centésimos, truncado)."""
    total_cs = int(math.floor(max(0.0, seconds) * 100 + _EPSILON))
    h, rem = divmod(total_cs, 360000)
    m, rem = divmod(rem, 6000)
    s, cs = divmod(rem, 100)
    return f"{h}:{m:02d}:{s:02d}.{cs:02d}"


def format_srt_time(seconds: float) -> str:
    """HH:MM:SS,mmm (milissegundos, truncado)."""
    total_ms = int(math.floor(max(0.0, seconds) * 1000 + _EPSILON))
    h, rem = divmod(total_ms, 3600000)
    m, rem = divmod(rem, 60000)
    s, ms = divmod(rem, 1000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms:03d}"


def parse_ass_time(value: str) -> float:
    h, m, rest = value.strip().split(":")
    s, cs = rest.split(".")
    return int(h) * 3600 + int(m) * 60 + int(s) + int(cs) / 100


def parse_srt_time(value: str) -> float:
    h, m, rest = value.strip().split(":")
    s, ms = rest.split(",")
    return int(h) * 3600 + int(m) * 60 + int(s) + int(ms) / 1000


def _escape_ass_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("{", "(").replace("}", ")").replace("\n", "\\N")


def _karaoke_text(event: dict) -> str:
    parts = []
    for w in event["words"]:
        duration_cs = int(math.floor((float(w["end"]) - float(w["start"])) * 100 + _EPSILON))
        parts.append(f"{{\\k{max(0, duration_cs)}}}{_escape_ass_text(str(w['word']).strip())}")
    return " ".join(parts)


def render_ass(
    words: List[dict],
    style=None,
    resolution: tuple = (1080, 1920),
    words_per_line: int = ASS_WORDS_PER_LINE,
    offset: float = 0.0,
) -> str:
    """Gera o conteúdo de um arquivo ASS com o estilo dado."""
    style = resolve_caption_style(style)
    width, height = resolution

    header = f"""[Script Info]
Title: Clip Captions
ScriptType: v4.00+
PlayResX: {width}
PlayResY: {height}
WrapStyle: 0

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,{style["font_name"]},{style["font_size"]},{style["primary_color"]},{style.get("secondary_color") or style["primary_color"]},{style["outline_color"]},{style["back_color"]},{-1 if style["bold"] else 0},0,0,0,100,100,0,0,1,{style["outline"]},{style["shadow"]},{style["alignment"]},10,10,{style["margin_v"]},1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""

    karaoke = style.get("preset") == "karaoke"
    lines = []
    for event in group_words(words, words_per_line, offset):
        text = _karaoke_text(event) if karaoke else _escape_ass_text(event["text"])
        lines.append(
            f"Dialogue: 0,{format_ass_time(event['start'])},{format_ass_time(event['end'])},Default,,0,0,0,,{text}"
        )

    return header + "\n".join(lines) + ("\n" if lines else "")


def render_srt(words: List[dict], words_per_line: int = SRT_WORDS_PER_LINE, offset: float = 0.0) -> str:
    """Gera o conteúdo de um arquivo SRT, sem estilo."""
    blocks = []
    for index, event in enumerate(group_words(words, words_per_line, offset), 1):
        blocks.append(
            f"{index}\n{format_srt_time(event['start'])} --> {format_srt_time(event['end'])}\n{event['text']}\n"
        )
    return "\n".join(blocks)


def write_subtitle_file(content: str, extension: str, directory: Optional[str] = None) -> str:
    """Grava a legenda com nome único e retorna o caminho."""
    directory = directory or getattr(settings, "CLIP_SUBTITLES_DIR", "/tmp")
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{uuid.uuid4().hex}.{extension}")
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.debug(f"[captions] Legenda gerada: {path}")
    return path
