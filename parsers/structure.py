"""Script element extraction and language-aware text normalisation.

Character names, dialogue and action lines are advisory only: they feed the
``Scene`` record and are never validated further.
"""

import re
from dataclasses import dataclass, field

from core.models import ActionLine, DialogueLine, Language, ScriptDialect
from parsers.dialects import patterns_for

_ASIAN_NAME_PATTERNS: dict[Language, re.Pattern[str]] = {
    Language.JA: re.compile(r"^[ぁ-んァ-ヶ一-龯]+[：:]?$"),
    Language.KO: re.compile(r"^[가-힣]+[：:]?$"),
    Language.ZH: re.compile(r"^[一-龯]+[：:]?$"),
    Language.AR: re.compile(r"^[؀-ۿ\s]+[：:]?$"),
}

_CAPS_NAME_RE = re.compile(r"^[A-Z\s]+$")
_QUOTE_START_RE = re.compile(r"^[\"'“「『„«]")
_QUOTE_END_RE = re.compile(r"[\"'”」』»]$")
_ACTION_START_RE = re.compile(r"^[A-Z一-鿿぀-ゟ゠-ヿ가-힯؀-ۿ]")
_FULLWIDTH_ALNUM_RE = re.compile(r"[Ａ-Ｚａ-ｚ０-９]")

# Words per minute by language
_READING_SPEEDS: dict[Language, int] = {
    Language.EN: 250, Language.ES: 220, Language.FR: 200, Language.DE: 180,
    Language.IT: 210, Language.PT: 200, Language.JA: 400, Language.KO: 350,
    Language.ZH: 300, Language.HI: 200, Language.AR: 150, Language.RU: 180,
    Language.NL: 200, Language.SV: 220, Language.DA: 220, Language.NO: 220,
    Language.FI: 200, Language.PL: 180, Language.CS: 180, Language.TR: 200,
}

# Languages written without spaces between words
_UNSPACED_LANGUAGES = frozenset({Language.JA, Language.ZH})


@dataclass(slots=True)
class SceneStructure:
    """Characters, dialogue and action found in one scene."""

    characters: list[str] = field(default_factory=list)
    dialogue_lines: list[DialogueLine] = field(default_factory=list)
    action_lines: list[ActionLine] = field(default_factory=list)


def is_character_name(line: str, language: Language, dialect: ScriptDialect) -> bool:
    """Heuristically decide whether a stripped line is a character cue."""
    if patterns_for(dialect).character.match(line):
        return True
    if len(line) < 2 or len(line) > 30:
        return False
    if line == line.upper() and _CAPS_NAME_RE.match(line):
        return True
    if line.endswith(":") or line.endswith("："):
        return True
    pattern = _ASIAN_NAME_PATTERNS.get(language)
    return bool(pattern and pattern.match(line))


def extract_character_name(line: str) -> str:
    name = re.sub(r"[：:]\s*$", "", line)
    name = re.sub(r"\s*\([^)]*\)\s*$", "", name)
    return name.strip().upper()


def is_dialogue(raw_line: str, dialect: ScriptDialect) -> bool:
    """Dialogue is indented or quoted."""
    if patterns_for(dialect).dialogue.match(raw_line):
        return True
    line = raw_line.strip()
    return bool(_QUOTE_START_RE.match(line) or _QUOTE_END_RE.search(line))


def is_action(raw_line: str) -> bool:
    """Action lines are not indented and start with a capital (or CJK/Arabic) letter."""
    if raw_line.startswith((" ", "\t")):
        return False
    return bool(_ACTION_START_RE.match(raw_line))


def extract_structure(
    scene_text: str,
    language: Language = Language.EN,
    dialect: ScriptDialect = ScriptDialect.HOLLYWOOD,
) -> SceneStructure:
    """Extract characters, dialogue and action lines from *scene_text*.

    The first line is treated as the scene header and skipped.
    """
    structure = SceneStructure()
    seen: set[str] = set()
    current_character: str | None = None
    header_pattern = patterns_for(dialect).scene_header

    for number, raw_line in enumerate(scene_text.split("\n")):
        line = raw_line.strip()
        if not line:
            continue
        if number == 0 or header_pattern.match(line):
            continue

        if is_character_name(line, language, dialect):
            current_character = extract_character_name(line)
            if current_character and current_character not in seen:
                seen.add(current_character)
                structure.characters.append(current_character)
            continue

        spoken = current_character and not line.startswith("(") and not is_action(raw_line)
        if is_dialogue(raw_line, dialect) or spoken:
            structure.dialogue_lines.append(
                DialogueLine(character=current_character, text=line, line_number=number)
            )
        elif is_action(raw_line):
            structure.action_lines.append(ActionLine(text=line, line_number=number))

    return structure


def normalize_content(content: str, language: Language) -> str:
    """Strip the BOM, normalise line endings and language-specific characters."""
    normalized = content.lstrip("\ufeff").replace("\r\n", "\n")

    if language is Language.AR:
        normalized = normalized.replace("ي", "ی").replace("ك", "ک")
    elif language is Language.JA:
        normalized = _FULLWIDTH_ALNUM_RE.sub(lambda m: chr(ord(m.group()) - 0xFEE0), normalized)
    elif language not in (Language.ZH, Language.KO):
        normalized = (
            normalized.replace("‘", "'")
            .replace("’", "'")
            .replace("“", '"')
            .replace("”", '"')
            .replace("…", "...")
        )

    return normalized.strip()


def count_words(content: str, language: Language) -> int:
    if language in _UNSPACED_LANGUAGES:
        # approximate: two characters per word
        return len(re.sub(r"\s", "", content)) // 2
    return len(content.split())


def estimate_reading_time(content: str, language: Language) -> int:
    """Estimated reading time in whole minutes."""
    speed = _READING_SPEEDS.get(language, _READING_SPEEDS[Language.EN])
    return -(-count_words(content, language) // speed)
