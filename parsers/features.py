"""Classification input extraction for a single scene.

Separates dialogue, action description and parenthetical emotional cues and
builds a bounded string that favours dialogue.
"""

import re

from services.lexicon import get_emotion_lexicon

MAX_FEATURE_LENGTH = 512  # BERT-style models
MIN_DIALOGUE_LENGTH = 100
MIN_COMBINED_LENGTH = 50

_ACTION_INDICATORS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[A-Z][A-Z\s]+ (?:walks|runs|sits|stands|looks|moves|enters|exits)"),
    re.compile(r"^The "),
    re.compile(r"^A "),
    re.compile(r"\b(?:suddenly|meanwhile|later|earlier|outside|inside)\b", re.IGNORECASE),
    re.compile(r"\b(?:camera|shot|angle|close|wide)\b", re.IGNORECASE),
)

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^\w\s.,!?'-]")


def is_character_line(line: str) -> bool:
    """Character cues are short, upper-case and contain no spaces."""
    return line == line.upper() and len(line) < 30 and " " not in line


def is_action_line(line: str) -> bool:
    return any(p.search(line) for p in _ACTION_INDICATORS)


def extract_emotional_cues(stage_direction: str) -> list[str]:
    """Return the cue words found in a parenthetical stage direction."""
    lower = stage_direction.lower()
    return [cue for cue in get_emotion_lexicon().stage_direction_cues if cue in lower]


def extract_features(scene_text: str) -> str:
    """Build the classification input for *scene_text* (at most 512 characters).

    Never returns an empty string for non-empty input.
    """
    dialogue: list[str] = []
    action: list[str] = []
    context: list[str] = []

    for line in scene_text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        if trimmed.startswith("(") and trimmed.endswith(")"):
            context.extend(extract_emotional_cues(trimmed))
            continue

        if is_character_line(trimmed):
            continue

        if is_action_line(trimmed):
            action.append(trimmed)
        else:
            dialogue.append(trimmed)

    combined = " ".join(dialogue)
    if len(combined) < MIN_DIALOGUE_LENGTH:
        combined = f"{combined} {' '.join(action)}"
    if len(combined) < MIN_COMBINED_LENGTH:
        combined = f"{combined} {' '.join(context)}"

    combined = _WHITESPACE_RE.sub(" ", combined)
    combined = _DISALLOWED_RE.sub("", combined).strip()[:MAX_FEATURE_LENGTH]

    return combined or scene_text[:MAX_FEATURE_LENGTH]
