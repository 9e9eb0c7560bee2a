"""Document language and screenplay dialect detection.

A supported language hint is trusted.  Otherwise the dominant writing system
decides (kana, Hangul, CJK ideographs, Arabic, Cyrillic, Devanagari).  Latin
script text goes through langdetect, and the configured default language is
used when neither pass gives a confident, supported answer.  The
returned confidence is diagnostic only; nothing downstream branches on it.
"""

import logging
import re

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

from core.models import LANGUAGE_INFO, Language, LanguageDetection, ScriptDialect
from parsers.dialects import (
    ASIAN_LANGUAGES,
    EUROPEAN_LANGUAGES,
    dialect_for_language,
    patterns_for,
)
from services.lexicon import EmotionLexicon, get_emotion_lexicon

logger = logging.getLogger(__name__)

SCRIPT_DENSITY_THRESHOLD = 0.10
DEFAULT_CONFIDENCE_CAP = 0.5
MAX_CONFIDENCE = 0.98
NO_KEYWORD_TABLE_SCORE = 0.5
STATISTICAL_MIN_LENGTH = 50
STATISTICAL_MIN_PROBABILITY = 0.9

METHOD_HINT = "hint"
METHOD_SCRIPT = "script"
METHOD_STATISTICAL = "statistical"
METHOD_DEFAULT = "default"

_KANA = re.compile(r"[぀-ゟ゠-ヿ]")

# (language code, characters counted for density, required marker characters)
# Order matters: Japanese text also contains CJK ideographs.
_SCRIPT_RANGES: tuple[tuple[str, re.Pattern[str], re.Pattern[str] | None], ...] = (
    ("ja", re.compile(r"[぀-ゟ゠-ヿ一-鿿]"), _KANA),
    ("ko", re.compile(r"[가-힯]"), None),
    ("zh", re.compile(r"[一-鿿]"), None),
    ("ar", re.compile(r"[؀-ۿ]"), None),
    ("ru", re.compile(r"[Ѐ-ӿ]"), None),
    ("hi", re.compile(r"[ऀ-ॿ]"), None),
    ("th", re.compile(r"[฀-๿]"), None),
)

_FOUNTAIN_RE = re.compile(r"^(?:>|\.[A-Za-z])", re.MULTILINE)

# langdetect is randomised unless seeded
DetectorFactory.seed = 0


def _detect_script(text: str) -> Language | None:
    visible = re.sub(r"\s", "", text)
    if not visible:
        return None

    for code, chars, marker in _SCRIPT_RANGES:
        if marker is not None and not marker.search(text):
            continue
        density = len(chars.findall(visible)) / len(visible)
        if density < SCRIPT_DENSITY_THRESHOLD:
            continue
        language = Language.from_code(code)
        if language is None:
            logger.debug("Script %s is dominant but unsupported", code)
            continue
        return language
    return None


def _detect_statistical(text: str) -> Language | None:
    """Identify a Latin-script language with langdetect, or ``None`` if unsure."""
    if len(text.strip()) < STATISTICAL_MIN_LENGTH:
        return None
    try:
        candidates = detect_langs(text)
    except LangDetectException as e:
        logger.debug("Statistical detection failed: %s", e)
        return None
    if not candidates:
        return None

    best = candidates[0]
    if best.prob < STATISTICAL_MIN_PROBABILITY:
        logger.debug("Statistical detection unsure: %s (%.2f)", best.lang, best.prob)
        return None
    # langdetect reports regional variants such as zh-cn
    language = Language.from_code(best.lang.split("-")[0])
    if language is None:
        logger.debug("Statistical detection found unsupported language %s", best.lang)
    return language


def structure_score(text: str, language: Language) -> float:
    """Score how well *text* follows the conventions of the language's dialect."""
    patterns = patterns_for(dialect_for_language(language))
    headers = characters = dialogue = 0
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if patterns.scene_header.match(line):
            headers += 1
        if patterns.character.match(line):
            characters += 1
        if patterns.dialogue.match(raw_line):
            dialogue += 1
    return min(headers / 5, 0.3) + min(characters / 10, 0.3) + min(dialogue / 20, 0.4)


def language_confidence(
    text: str, language: Language, lexicon: EmotionLexicon | None = None
) -> float:
    """Blend keyword overlap, content length and structure into a confidence."""
    lexicon = lexicon or get_emotion_lexicon()
    if lexicon.has_language_keywords(language):
        keywords = lexicon.language_keywords(language)
        lower = text.lower()
        hits = sum(1 for k in keywords if k in lower)
        keyword_score = hits / len(keywords) if keywords else 0.0
    else:
        keyword_score = NO_KEYWORD_TABLE_SCORE

    length_factor = min(len(text) / 1000, 1.0)
    blended = 0.4 * keyword_score + 0.3 * length_factor + 0.3 * structure_score(text, language)
    return min(blended, MAX_CONFIDENCE)


def determine_format(
    text: str, language: Language, format_hint: ScriptDialect | None = None
) -> ScriptDialect:
    """Infer the screenplay dialect of *text*."""
    if format_hint is not None:
        return format_hint
    if "FADE IN:" in text or "FADE OUT:" in text:
        return ScriptDialect.HOLLYWOOD
    if "INTÉRIEUR" in text or "EXTÉRIEUR" in text:
        return ScriptDialect.EUROPEAN
    if language in ASIAN_LANGUAGES:
        return ScriptDialect.ASIAN
    if language in EUROPEAN_LANGUAGES:
        return ScriptDialect.EUROPEAN
    if _FOUNTAIN_RE.search(text):
        return ScriptDialect.FOUNTAIN
    return ScriptDialect.HOLLYWOOD


def detect_language(
    text: str,
    hint: str | None = None,
    default: Language = Language.EN,
    format_hint: ScriptDialect | None = None,
    lexicon: EmotionLexicon | None = None,
) -> LanguageDetection:
    """Detect the language and dialect of *text*.  Never raises."""
    language = Language.from_code(hint)
    if language is not None:
        method = METHOD_HINT
    else:
        if hint:
            logger.warning("Unsupported language hint %r, detecting from content", hint)
        language = _detect_script(text)
        method = METHOD_SCRIPT
        if language is None:
            language = _detect_statistical(text)
            method = METHOD_STATISTICAL if language is not None else METHOD_DEFAULT

    if language is None:
        language = default
        confidence = min(language_confidence(text, language, lexicon), DEFAULT_CONFIDENCE_CAP)
    else:
        confidence = language_confidence(text, language, lexicon)

    name, direction = LANGUAGE_INFO[language]
    detection = LanguageDetection(
        language=language,
        confidence=round(confidence, 4),
        format=determine_format(text, language, format_hint),
        method=method,
        name=name,
        direction=direction,
    )
    logger.debug(
        "Detected language %s (%s, confidence %.2f, format %s)",
        detection.language.value,
        method,
        detection.confidence,
        detection.format.value,
    )
    return detection
