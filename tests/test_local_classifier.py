"""Tests for the local keyword/pattern classifier."""

import pytest

from core.models import Emotion, Language
from services.local_classifier import MAX_LOCAL_CONFIDENCE, classify_locally, score_emotions

GERMAN_SAD = "Sie weint. Ihre Tränen fallen, sie ist traurig und voller Trauer und Kummer."
SPANISH_FEAR = "Ella tiene miedo, siente pánico y está muy preocupada."
FRENCH_LOVE = "Il la prend dans ses bras avec tendresse. Un baiser, beaucoup d'amour."


# ===================================================================
# English profiles
# ===================================================================


class TestClassifyLocally:
    """Tests for keyword and pattern scoring with the English profiles."""

    def test_keywords(self):
        result = classify_locally("Alice screams in terror.")
        assert result.label == Emotion.FEARFUL
        assert result.score == pytest.approx(2.0)
        assert result.confidence == pytest.approx(2 / 3)

    def test_patterns_weigh_more(self):
        result = classify_locally("Run!! Hahaha")
        scores = score_emotions("Run!! Hahaha")
        # "run" scores as a tense keyword and a tense pattern
        assert scores[Emotion.TENSE] == pytest.approx(2.5)
        assert result.label == Emotion.TENSE

    def test_confidence_capped(self):
        result = classify_locally("She laughs and smiles at the party.")
        assert result.label == Emotion.HAPPY
        assert result.score == pytest.approx(3.0)
        assert result.confidence == MAX_LOCAL_CONFIDENCE

    def test_neutral_when_nothing_matches(self):
        result = classify_locally("The table is brown.")
        assert result.label == Emotion.NEUTRAL
        assert result.score == 0.0
        assert result.confidence == 0.0

    def test_ties_favour_declaration_order(self):
        scores = score_emotions("joy and tears")
        assert scores[Emotion.HAPPY] == scores[Emotion.SAD]
        assert classify_locally("joy and tears").label == Emotion.HAPPY

    def test_length_normalisation(self):
        text = "scared " + "z" * 993
        assert len(text) == 1000
        assert score_emotions(text)[Emotion.FEARFUL] == pytest.approx(0.1)

    def test_case_insensitive(self):
        assert classify_locally("TERROR!").label == Emotion.FEARFUL


# ===================================================================
# Language keyword tables
# ===================================================================


class TestLanguageKeywords:
    """Tests for scoring with the per-language emotional keywords."""

    @pytest.mark.parametrize(
        "text, language, expected",
        [
            (GERMAN_SAD, Language.DE, Emotion.SAD),
            (SPANISH_FEAR, Language.ES, Emotion.FEARFUL),
            (FRENCH_LOVE, Language.FR, Emotion.ROMANTIC),
        ],
    )
    def test_language_table_scores(self, text, language, expected):
        assert classify_locally(text).label == Emotion.NEUTRAL
        assert classify_locally(text, language=language).label == expected

    def test_german_keyword_count(self):
        result = classify_locally(GERMAN_SAD, language=Language.DE)
        # tränen, traurig, trauer, kummer
        assert result.score == pytest.approx(4.0)
        assert result.confidence == MAX_LOCAL_CONFIDENCE

    def test_english_is_not_counted_twice(self):
        result = classify_locally("Alice screams in terror.", language=Language.EN)
        assert result.score == pytest.approx(2.0)

    def test_ties_favour_declaration_order(self):
        scores = score_emotions("freude und tränen", language=Language.DE)
        assert scores[Emotion.HAPPY] == scores[Emotion.SAD]
        assert classify_locally("freude und tränen", language=Language.DE).label == Emotion.HAPPY

    def test_language_without_table(self):
        assert classify_locally(GERMAN_SAD, language=Language.KO).label == Emotion.NEUTRAL

    def test_english_profiles_still_apply(self):
        text = "Er hat Angst vor dem Monster."
        assert classify_locally(text, language=Language.DE).label == Emotion.FEARFUL
