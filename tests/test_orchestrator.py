"""Tests for tiered classification, contextual re-ranking and label mapping."""

import pytest

from core.exceptions import ClassificationException
from core.models import Emotion, Language, RankedLabel
from services.orchestrator import (
    EmotionOrchestrator,
    MalformedResponseException,
    rank_candidates,
    validate_candidates,
)
from services.pacing import CallPacer

JOY_FEAR = [{"label": "joy", "score": 0.6}, {"label": "fear", "score": 0.55}]
NIGHT_TEXT = "It is night and the dark house creaks."
PLAIN_TEXT = "A plain room with a table."


class CountingPacer(CallPacer):
    def __init__(self) -> None:
        super().__init__(0.0)
        self.waits = 0

    async def wait(self) -> None:
        self.waits += 1


# ===================================================================
# Response validation
# ===================================================================


class TestValidateCandidates:
    """Tests for shaping raw classifier responses."""

    def test_dicts_and_ranked_labels(self):
        candidates = validate_candidates(
            [{"label": "joy", "score": 1}, RankedLabel(label="fear", score=0.2)]
        )
        assert candidates == [
            RankedLabel(label="joy", score=1.0),
            RankedLabel(label="fear", score=0.2),
        ]

    @pytest.mark.parametrize(
        "response",
        [
            None,
            [],
            "joy",
            {"label": "joy", "score": 0.4},
            [{"label": 1, "score": 0.5}],
            [{"label": "joy"}],
            [{"label": "joy", "score": "high"}],
            [{"label": "joy", "score": True}],
            [{"label": "joy", "score": 1.5}],
            [{"label": "", "score": 0.5}],
            ["joy"],
        ],
    )
    def test_malformed(self, response):
        with pytest.raises(MalformedResponseException):
            validate_candidates(response)

    def test_malformed_is_a_classification_error(self):
        assert issubclass(MalformedResponseException, ClassificationException)


# ===================================================================
# Re-ranking
# ===================================================================


class TestRankCandidates:
    """Tests for boosted re-ranking of candidates."""

    def test_night_and_dark_boost_fear_over_joy(self, lexicon):
        result = rank_candidates(validate_candidates(JOY_FEAR), NIGHT_TEXT, lexicon)
        assert result.label == Emotion.FEARFUL
        assert result.original_label == "fear"
        assert result.score == pytest.approx(0.55)
        assert [(a.label, a.score) for a in result.alternates] == [(Emotion.HAPPY, 0.6)]

    def test_without_boost_external_ranking_wins(self, lexicon):
        result = rank_candidates(validate_candidates(JOY_FEAR), PLAIN_TEXT, lexicon)
        assert result.label == Emotion.HAPPY

    def test_ties_keep_external_order(self, lexicon):
        candidates = validate_candidates(
            [{"label": "anger", "score": 0.5}, {"label": "sadness", "score": 0.5}]
        )
        assert rank_candidates(candidates, PLAIN_TEXT, lexicon).label == Emotion.ANGRY

    def test_only_top_three_considered(self, lexicon):
        candidates = validate_candidates(
            [
                {"label": "joy", "score": 0.40},
                {"label": "sadness", "score": 0.30},
                {"label": "neutral", "score": 0.20},
                {"label": "fear", "score": 0.39},
            ]
        )
        result = rank_candidates(candidates, NIGHT_TEXT, lexicon)
        # sadness * 1.1 = 0.33 stays below joy; fear is fourth and ignored
        assert result.label == Emotion.HAPPY
        assert len(result.alternates) == 2

    def test_unmapped_label_resolves_to_neutral(self, lexicon):
        result = rank_candidates(
            validate_candidates([{"label": "LABEL_3", "score": 0.9}]), PLAIN_TEXT, lexicon
        )
        assert result.label == Emotion.NEUTRAL
        assert result.original_label == "LABEL_3"

    def test_canonical_label_passes_through(self, lexicon):
        result = rank_candidates(
            validate_candidates([{"label": "Mysterious", "score": 0.7}]), PLAIN_TEXT, lexicon
        )
        assert result.label == Emotion.MYSTERIOUS


# ===================================================================
# Strategy fold
# ===================================================================


class TestEmotionOrchestrator:
    """Tests for the primary, fallback and local strategy fold."""

    @pytest.mark.asyncio
    async def test_primary_success(self, make_orchestrator, scripted_classifier, tiers):
        classifier = scripted_classifier({tiers.default.primary: JOY_FEAR})
        result = await make_orchestrator(classifier).classify("features", Language.EN, NIGHT_TEXT)

        assert result.label == Emotion.FEARFUL
        assert result.fallback_used is False
        assert result.provider == "scripted"
        assert result.model == tiers.default.primary
        assert [model for model, _ in classifier.calls] == [tiers.default.primary]

    @pytest.mark.asyncio
    async def test_features_are_sent_to_classifier(
        self, make_orchestrator, scripted_classifier, tiers
    ):
        classifier = scripted_classifier({tiers.default.primary: JOY_FEAR})
        await make_orchestrator(classifier).classify("bounded input", Language.EN, NIGHT_TEXT)
        assert classifier.calls[0][1] == "bounded input"

    @pytest.mark.asyncio
    async def test_fallback_tier_after_primary_failure(
        self, make_orchestrator, scripted_classifier, tiers
    ):
        classifier = scripted_classifier({tiers.default.fallback: JOY_FEAR})
        result = await make_orchestrator(classifier).classify("features", Language.EN, PLAIN_TEXT)

        assert [model for model, _ in classifier.calls] == [
            tiers.default.primary,
            tiers.default.fallback,
        ]
        assert result.model == tiers.default.fallback
        assert result.fallback_used is False

    @pytest.mark.asyncio
    async def test_both_tiers_fail_uses_local(self, make_orchestrator, scripted_classifier):
        classifier = scripted_classifier({})
        result = await make_orchestrator(classifier).classify(
            "features", Language.EN, "Alice screams in terror."
        )

        assert len(classifier.calls) == 2
        assert result.fallback_used is True
        assert result.provider == "local"
        assert result.label == Emotion.FEARFUL
        assert 0.0 < result.score <= 0.9

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [[], "joy", [{"label": "joy", "score": 7}]])
    async def test_malformed_primary_falls_through(
        self, make_orchestrator, scripted_classifier, tiers, response
    ):
        classifier = scripted_classifier(
            {tiers.default.primary: response, tiers.default.fallback: JOY_FEAR}
        )
        result = await make_orchestrator(classifier).classify("features", Language.EN, PLAIN_TEXT)
        assert result.model == tiers.default.fallback

    @pytest.mark.asyncio
    async def test_timeout_treated_as_failure(self, make_orchestrator, scripted_classifier, tiers):
        classifier = scripted_classifier(
            {tiers.default.primary: JOY_FEAR, tiers.default.fallback: JOY_FEAR}, delay=0.2
        )
        result = await make_orchestrator(classifier, timeout=0.05).classify(
            "features", Language.EN, "Alice screams in terror."
        )
        assert len(classifier.calls) == 2
        assert result.fallback_used is True

    @pytest.mark.asyncio
    async def test_unexpected_error_falls_through(
        self, make_orchestrator, scripted_classifier, tiers
    ):
        classifier = scripted_classifier(
            {tiers.default.primary: RuntimeError("boom"), tiers.default.fallback: JOY_FEAR}
        )
        result = await make_orchestrator(classifier).classify("features", Language.EN, PLAIN_TEXT)
        assert result.model == tiers.default.fallback

    @pytest.mark.asyncio
    async def test_unknown_language_uses_default_tier(
        self, make_orchestrator, scripted_classifier, tiers
    ):
        classifier = scripted_classifier({tiers.default.primary: JOY_FEAR})
        result = await make_orchestrator(classifier).classify("features", Language.FI, PLAIN_TEXT)
        assert result.model == tiers.default.primary

    @pytest.mark.asyncio
    async def test_local_only(self, make_orchestrator):
        result = await make_orchestrator(None).classify("x", Language.EN, "The table is brown.")
        assert result.label == Emotion.NEUTRAL
        assert result.score == 0.0
        assert result.fallback_used is True

    @pytest.mark.asyncio
    async def test_pacing_only_on_external_path(self, tiers, lexicon, scripted_classifier):
        pacer = CountingPacer()
        local_only = EmotionOrchestrator(pacer=pacer, lexicon=lexicon, metrics_enabled=False)
        await local_only.classify("x", Language.EN, "text")
        assert pacer.waits == 0

        failing = EmotionOrchestrator(
            classifier=scripted_classifier({}),
            tiers=tiers,
            pacer=pacer,
            lexicon=lexicon,
            metrics_enabled=False,
        )
        await failing.classify("x", Language.EN, "text")
        assert pacer.waits == 2

    def test_classifier_requires_tiers(self, scripted_classifier):
        with pytest.raises(ValueError):
            EmotionOrchestrator(classifier=scripted_classifier({}))

    @pytest.mark.asyncio
    async def test_local_fallback_reads_scene_language(
        self, make_orchestrator, scripted_classifier
    ):
        text = "Sie weint. Ihre Tränen fallen, sie ist traurig und voller Trauer und Kummer."
        result = await make_orchestrator(scripted_classifier({})).classify("x", Language.DE, text)

        assert result.fallback_used is True
        assert result.label == Emotion.SAD
