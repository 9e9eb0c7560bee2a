"""Pytest configuration and fixtures."""

import asyncio
from typing import Any

import pytest

from classifiers.base import BaseEmotionClassifier
from classifiers.model_tiers import ModelTier, ModelTierTable
from core.config import Settings
from core.exceptions import ClassificationException
from core.models import Language
from services.lexicon import EmotionLexicon, get_emotion_lexicon
from services.orchestrator import EmotionOrchestrator
from services.pipeline import ScenePipeline

PRIMARY = "test/primary"
FALLBACK = "test/fallback"


class ScriptedClassifier(BaseEmotionClassifier):
    """Classifier answering from a per-model script.

    A script value may be a response, an exception to raise, or a callable
    taking the input text.  Models without a script fail.
    """

    def __init__(self, responses: dict[str, Any] | None = None, delay: float = 0.0) -> None:
        super().__init__({})
        self.responses = responses or {}
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def classify(self, text: str, model: str) -> Any:
        self.calls.append((model, text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if model not in self.responses:
            raise ClassificationException(f"No scripted answer for {model}")
        answer = self.responses[model]
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(text)
        return answer

    async def health_check(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "scripted"


@pytest.fixture
def settings() -> Settings:
    """Local-only settings that never sleep between calls."""
    return Settings(
        _env_file=None,
        classifier_provider="local",
        classification_pacing_seconds=0.0,
        metrics_enabled=False,
    )


@pytest.fixture
def lexicon() -> EmotionLexicon:
    return get_emotion_lexicon()


@pytest.fixture
def tiers() -> ModelTierTable:
    tier = ModelTier(primary=PRIMARY, fallback=FALLBACK)
    return ModelTierTable(tiers={Language.EN: tier}, default=tier)


@pytest.fixture
def make_orchestrator(tiers, lexicon):
    def _make(classifier: BaseEmotionClassifier | None, timeout: float = 1.0) -> EmotionOrchestrator:
        return EmotionOrchestrator(
            classifier=classifier,
            tiers=tiers if classifier is not None else None,
            timeout=timeout,
            lexicon=lexicon,
            metrics_enabled=False,
        )

    return _make


@pytest.fixture
def make_pipeline(settings, make_orchestrator):
    def _make(
        classifier: BaseEmotionClassifier | None = None, **overrides: Any
    ) -> ScenePipeline:
        pipeline_settings = settings.model_copy(update=overrides) if overrides else settings
        return ScenePipeline(pipeline_settings, orchestrator=make_orchestrator(classifier))

    return _make


@pytest.fixture
def scripted_classifier() -> type[ScriptedClassifier]:
    return ScriptedClassifier
