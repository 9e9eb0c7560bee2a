"""Tests for language and screenplay dialect detection."""

from unittest.mock import patch

import pytest

from core.models import Language, ScriptDialect
from parsers.language import (
    DEFAULT_CONFIDENCE_CAP,
    METHOD_DEFAULT,
    METHOD_HINT,
    METHOD_SCRIPT,
    METHOD_STATISTICAL,
    detect_language,
    determine_format,
    language_confidence,
    structure_score,
)

SCREENPLAY = "\n".join(
    f"INT. ROOM {i} - DAY\nJOHN\n    I am here.\nMARY\n    So am I." for i in range(5)
)

FRENCH_PROSE = (
    "Le soleil se couchait lentement sur la petite ville, et les rues étaient presque vides. "
    "Marie marchait le long du canal en pensant à sa mère, qui vivait seule dans une maison "
    "au bord de la mer. Elle avait promis de lui rendre visite avant la fin de l'été, mais "
    "le travail ne lui laissait jamais le temps. Ce soir, pourtant, elle avait pris sa "
    "décision : elle partirait demain matin par le premier train, sans prévenir personne, "
    "et elle resterait là-bas aussi longtemps qu'il le faudrait pour retrouver le calme."
)
GERMAN_PROSE = (
    "Es regnete schon den ganzen Tag, und die Straßen der kleinen Stadt waren still und leer. "
    "Thomas saß am Fenster seiner Wohnung und wartete auf einen Anruf, der nicht kommen wollte. "
    "Er dachte an den Sommer, an die langen Abende am See und an die Freunde, die längst "
    "weggezogen waren. Schließlich stand er auf, zog seinen Mantel an und ging hinaus."
)
ENGLISH_PROSE = (
    "The rain had been falling since morning, and the streets of the little town were quiet. "
    "Thomas sat by the window of his apartment and waited for a call that never came. "
    "He thought about the summer, the long evenings by the lake and the friends who had "
    "moved away years ago. Finally he stood up, put on his coat and walked outside."
)


# ===================================================================
# Detection
# ===================================================================


class TestDetectLanguage:
    """Tests for hint, script, statistical and default detection."""

    def test_supported_hint_trusted(self):
        detection = detect_language("Hello there, how are you?", hint="fr")
        assert detection.language == Language.FR
        assert detection.method == METHOD_HINT
        assert detection.name == "Français"

    def test_hint_is_case_insensitive(self):
        assert detect_language("text", hint=" DE ").language == Language.DE

    def test_unsupported_hint_falls_back_to_content(self):
        detection = detect_language("Just some English words.", hint="xx")
        assert detection.language == Language.EN
        assert detection.method == METHOD_DEFAULT

    @pytest.mark.parametrize(
        "text, language",
        [
            ("こんにちは、元気ですか。今日はいい天気ですね。", Language.JA),
            ("안녕하세요 반갑습니다 오늘 날씨가 좋네요", Language.KO),
            ("你好，今天天气很好。我们去公园吧。", Language.ZH),
            ("Привет, как дела? Сегодня хорошая погода.", Language.RU),
            ("مرحبا كيف حالك اليوم", Language.AR),
            ("नमस्ते आप कैसे हैं", Language.HI),
        ],
    )
    def test_script_detection(self, text, language):
        detection = detect_language(text)
        assert detection.language == language
        assert detection.method == METHOD_SCRIPT

    def test_arabic_is_right_to_left(self):
        assert detect_language("مرحبا كيف حالك اليوم").direction == "rtl"

    def test_unsupported_script_uses_default(self):
        detection = detect_language("สวัสดีครับ วันนี้อากาศดี")
        assert detection.language == Language.EN
        assert detection.method == METHOD_DEFAULT

    def test_sparse_script_below_density_threshold(self):
        text = "This is a long English sentence with one word 日本 inside it, nothing else."
        detection = detect_language(text)
        assert detection.method != METHOD_SCRIPT
        assert detection.language == Language.EN

    def test_configured_default_language(self):
        detection = detect_language("plain words", default=Language.DE)
        assert detection.language == Language.DE
        assert detection.format == ScriptDialect.EUROPEAN

    def test_default_confidence_is_capped(self):
        with patch("parsers.language._detect_statistical", return_value=None):
            detection = detect_language(SCREENPLAY * 10)
        assert detection.method == METHOD_DEFAULT
        assert detection.confidence <= DEFAULT_CONFIDENCE_CAP

    def test_format_hint_overrides(self):
        detection = detect_language("text", hint="ja", format_hint=ScriptDialect.FOUNTAIN)
        assert detection.format == ScriptDialect.FOUNTAIN

    def test_never_raises_on_empty_text(self):
        detection = detect_language("")
        assert detection.language == Language.EN
        assert 0.0 <= detection.confidence <= 1.0


# ===================================================================
# Confidence
# ===================================================================


class TestConfidence:
    """Tests for the diagnostic confidence score."""

    def test_missing_keyword_table_scores_half(self):
        assert language_confidence("", Language.KO) == pytest.approx(0.2)

    def test_empty_text_scores_zero_with_keyword_table(self):
        assert language_confidence("", Language.EN) == 0.0

    def test_structure_score(self):
        # every component reaches its cap
        assert structure_score(SCREENPLAY, Language.EN) == pytest.approx(1.0)

    def test_confidence_never_exceeds_ceiling(self):
        text = SCREENPLAY * 50 + " joy laugh smile tears fear terror love kiss shock disgust"
        assert language_confidence(text, Language.EN) <= 0.98


# ===================================================================
# Dialect
# ===================================================================


class TestDetermineFormat:
    """Tests for screenplay dialect inference."""

    def test_transition_markers_win(self):
        assert determine_format("FADE IN:\n屋内", Language.JA) == ScriptDialect.HOLLYWOOD

    def test_french_headers(self):
        assert determine_format("INTÉRIEUR. CAFÉ - JOUR", Language.EN) == ScriptDialect.EUROPEAN

    def test_language_family(self):
        assert determine_format("text", Language.KO) == ScriptDialect.ASIAN
        assert determine_format("text", Language.IT) == ScriptDialect.EUROPEAN

    @pytest.mark.parametrize("text", [".FLASHBACK\nShe runs.", "> THE END <"])
    def test_fountain_markers(self, text):
        assert determine_format(text, Language.EN) == ScriptDialect.FOUNTAIN

    def test_baseline(self):
        assert determine_format("INT. OFFICE - DAY", Language.EN) == ScriptDialect.HOLLYWOOD
        assert determine_format("...and then nothing", Language.EN) == ScriptDialect.HOLLYWOOD


# ===================================================================
# Statistical detection
# ===================================================================


class TestStatisticalDetection:
    """Tests for langdetect-based detection of Latin-script languages."""

    @pytest.mark.parametrize(
        "text, language",
        [
            (FRENCH_PROSE, Language.FR),
            (GERMAN_PROSE, Language.DE),
            (ENGLISH_PROSE, Language.EN),
        ],
    )
    def test_latin_script_languages(self, text, language):
        detection = detect_language(text)
        assert detection.language == language
        assert detection.method == METHOD_STATISTICAL

    def test_detected_language_selects_dialect(self):
        assert detect_language(FRENCH_PROSE).format == ScriptDialect.EUROPEAN

    def test_repeated_detection_is_stable(self):
        assert {detect_language(FRENCH_PROSE).language for _ in range(5)} == {Language.FR}

    def test_short_text_uses_default(self):
        detection = detect_language("Bonjour à tous.", default=Language.EN)
        assert detection.language == Language.EN
        assert detection.method == METHOD_DEFAULT

    def test_script_pass_runs_first(self):
        with patch("parsers.language._detect_statistical") as statistical:
            detection = detect_language("Привет, как дела? Сегодня хорошая погода.")
        assert detection.method == METHOD_SCRIPT
        statistical.assert_not_called()

    def test_unsupported_statistical_answer_uses_default(self):
        with patch("parsers.language._detect_statistical", return_value=None):
            detection = detect_language(FRENCH_PROSE, default=Language.EN)
        assert detection.language == Language.EN
        assert detection.method == METHOD_DEFAULT

    def test_unsure_answer_is_ignored(self):
        class Guess:
            lang = "fr"
            prob = 0.55

        with patch("parsers.language.detect_langs", return_value=[Guess()]):
            assert detect_language(FRENCH_PROSE).method == METHOD_DEFAULT

    def test_unsupported_language_is_ignored(self):
        class Guess:
            lang = "ro"
            prob = 0.99

        with patch("parsers.language.detect_langs", return_value=[Guess()]):
            assert detect_language(FRENCH_PROSE).language == Language.EN
