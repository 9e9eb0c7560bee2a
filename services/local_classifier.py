"""Keyword/pattern emotion classifier used when no external capability answers.

Pure and total: it only reads the in-memory lexicon, so it is always
available.  The English profiles always apply; for any other language with a
keyword table, that table's words add to the score as well.
"""

from dataclasses import dataclass

from core.models import Emotion, Language
from services.lexicon import EmotionLexicon, get_emotion_lexicon

KEYWORD_WEIGHT = 1.0
PATTERN_WEIGHT = 1.5
MAX_LOCAL_CONFIDENCE = 0.9


@dataclass(frozen=True, slots=True)
class LocalClassification:
    """Result of the local heuristic classifier."""

    label: Emotion
    score: float
    confidence: float


def score_emotions(
    text: str,
    lexicon: EmotionLexicon | None = None,
    language: Language | None = None,
) -> dict[Emotion, float]:
    """Return the length-normalised score of every profiled emotion."""
    lexicon = lexicon or get_emotion_lexicon()
    lower = text.lower()
    norm = max(len(text) / 100, 1)

    raw: dict[Emotion, float] = {}
    for profile in lexicon.profiles:
        raw[profile.emotion] = sum(KEYWORD_WEIGHT for kw in profile.keywords if kw in lower)
        raw[profile.emotion] += sum(PATTERN_WEIGHT for p in profile.patterns if p.search(lower))

    # the English table mirrors the profiles above
    if language is not None and language is not Language.EN:
        for emotion, keywords in lexicon.emotion_keywords(language).items():
            hits = sum(KEYWORD_WEIGHT for kw in keywords if kw in lower)
            raw[emotion] = raw.get(emotion, 0.0) + hits

    # iterate in declaration order so ties keep the earlier emotion
    return {emotion: raw[emotion] / norm for emotion in Emotion if emotion in raw}


def classify_locally(
    text: str,
    lexicon: EmotionLexicon | None = None,
    language: Language | None = None,
) -> LocalClassification:
    """Pick the highest-scoring emotion for *text*.

    Ties keep the earlier emotion in declaration order; if nothing scores,
    the label is ``neutral`` with score 0.
    """
    best_label = Emotion.NEUTRAL
    best_score = 0.0

    for emotion, score in score_emotions(text, lexicon, language).items():
        if score > best_score:
            best_label = emotion
            best_score = score

    return LocalClassification(
        label=best_label,
        score=best_score,
        confidence=min(best_score / 3, MAX_LOCAL_CONFIDENCE),
    )
