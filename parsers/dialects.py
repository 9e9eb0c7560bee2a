"""Structural conventions of screenplay dialects.

Each dialect describes how scene headers, character cues and dialogue look.
The language detector scores a document against these patterns and the
segmenter and structure extractor use them to recognise lines.
"""

import re
from dataclasses import dataclass
from re import Pattern

from core.models import Language, ScriptDialect

ASIAN_LANGUAGES = frozenset({Language.JA, Language.KO, Language.ZH, Language.HI})
EUROPEAN_LANGUAGES = frozenset(
    {Language.FR, Language.DE, Language.IT, Language.ES, Language.PT}
)


@dataclass(frozen=True, slots=True)
class DialectPatterns:
    """Line patterns for one dialect.

    ``dialogue`` is matched against the raw line (indentation matters), the
    other patterns against the stripped line.
    """

    scene_header: Pattern[str]
    character: Pattern[str]
    dialogue: Pattern[str]
    transition: Pattern[str] | None = None


_INDENTED = re.compile(r"^[ \t]+\S")

DIALECT_PATTERNS: dict[ScriptDialect, DialectPatterns] = {
    ScriptDialect.HOLLYWOOD: DialectPatterns(
        scene_header=re.compile(r"^(?:INT\.|EXT\.)"),
        character=re.compile(r"^[A-Z][A-Z .'\-]*(?:\s*\([A-Z. ]+\))?$"),
        dialogue=_INDENTED,
    ),
    ScriptDialect.EUROPEAN: DialectPatterns(
        scene_header=re.compile(r"^(?:INTÉRIEUR|EXTÉRIEUR|INTERIOR|EXTERIOR|INNEN|AUSSEN|INT\.|EXT\.)"),
        character=re.compile(r"^[A-ZÀ-ÖØ-Þ][A-ZÀ-ÖØ-Þ .'\-]*\s*:$"),
        dialogue=_INDENTED,
    ),
    ScriptDialect.FOUNTAIN: DialectPatterns(
        scene_header=re.compile(r"^(?:INT\.|EXT\.|\.(?=[A-Za-z])|>)"),
        character=re.compile(r"^@?[A-Z][A-Z .'\-]*(?:\s*\([A-Z. ]+\))?\^?$"),
        dialogue=_INDENTED,
        transition=re.compile(r"^(?:FADE IN|FADE OUT|CUT TO)"),
    ),
    ScriptDialect.ASIAN: DialectPatterns(
        scene_header=re.compile(r"^(?:屋内|屋外|內景|外景|内景|장면|씬)"),
        character=re.compile(r"^[\uac00-\ud7a3\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff]+\s*[：:]"),
        dialogue=_INDENTED,
    ),
}

# Scene-start keywords per language.  A line starting with one of these (after
# upper-casing) begins a new scene.
SCENE_KEYWORDS: dict[Language, tuple[str, ...]] = {
    Language.EN: ("FADE IN", "FADE OUT", "CUT TO", "INT.", "EXT."),
    Language.ES: ("INTERIOR", "EXTERIOR", "INT.", "EXT.", "CORTE A"),
    Language.FR: ("INTÉRIEUR", "EXTÉRIEUR", "INT.", "EXT.", "COUPE"),
    Language.DE: ("INNEN", "AUSSEN", "INT.", "EXT.", "SCHNITT"),
    Language.JA: ("屋内", "屋外", "内景", "外景", "フェードイン"),
    Language.KO: ("실내", "실외", "장면", "씬", "페이드인"),
    Language.ZH: ("内景", "外景", "场景", "淡入", "淡出"),
    Language.AR: ("داخلي", "خارجي", "مشهد", "انتقال"),
}


def patterns_for(dialect: ScriptDialect) -> DialectPatterns:
    return DIALECT_PATTERNS[dialect]


def scene_keywords_for(language: Language | None) -> tuple[str, ...]:
    """Return the scene-start keywords for *language* (English by default)."""
    if language is None:
        return SCENE_KEYWORDS[Language.EN]
    return SCENE_KEYWORDS.get(language, SCENE_KEYWORDS[Language.EN])


def dialect_for_language(language: Language) -> ScriptDialect:
    """Return the dialect a language family usually writes in."""
    if language in ASIAN_LANGUAGES:
        return ScriptDialect.ASIAN
    if language in EUROPEAN_LANGUAGES:
        return ScriptDialect.EUROPEAN
    return ScriptDialect.HOLLYWOOD
