"""Emotion classification orchestrator.

Classification is an ordered list of strategies: the external primary model,
the external fallback model and finally the local heuristic.  Each strategy
returns a ``StrategyOutcome``; the orchestrator stops at the first success.
External answers are re-ranked with the lexicon's contextual boosts and mapped
onto the canonical emotion labels.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from classifiers.base import BaseEmotionClassifier
from classifiers.model_tiers import ModelTierTable, get_model_tiers
from core.config import Settings
from core.exceptions import ClassificationException
from core.metrics import record_classification_call
from core.models import Emotion, EmotionAlternate, EmotionResult, Language, RankedLabel
from services.lexicon import EmotionLexicon, get_emotion_lexicon
from services.local_classifier import classify_locally
from services.pacing import CallPacer, NoPacer

logger = logging.getLogger(__name__)

TOP_CANDIDATES = 3


class MalformedResponseException(ClassificationException):
    """Raised when an external answer cannot be read as ranked labels."""

    pass


@dataclass(frozen=True, slots=True)
class StrategyOutcome:
    """Result or failure reason of one classification strategy."""

    strategy: str
    result: EmotionResult | None = None
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class ClassificationStrategy(Protocol):
    name: str

    async def attempt(
        self, features: str, language: Language, original_text: str
    ) -> StrategyOutcome: ...


# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------


def validate_candidates(response: Any) -> list[RankedLabel]:
    """Check an external answer and return it as ranked labels.

    Raises ``MalformedResponseException`` for anything other than a non-empty
    list of items with a string label and a numeric score in [0, 1].
    """
    if not isinstance(response, Sequence) or isinstance(response, (str, bytes)):
        raise MalformedResponseException(
            "Classifier response is not a list", details={"type": type(response).__name__}
        )
    if not response:
        raise MalformedResponseException("Classifier response is empty")

    candidates: list[RankedLabel] = []
    for item in response:
        if isinstance(item, RankedLabel):
            candidates.append(item)
            continue
        if not isinstance(item, Mapping):
            raise MalformedResponseException(
                "Classifier response item is not an object", details={"item": repr(item)[:100]}
            )
        label, score = item.get("label"), item.get("score")
        if not isinstance(label, str) or isinstance(score, bool) or not isinstance(score, (int, float)):
            raise MalformedResponseException(
                "Classifier response item needs a string label and a numeric score",
                details={"item": repr(item)[:100]},
            )
        try:
            candidates.append(RankedLabel(label=label, score=float(score)))
        except ValidationError as exc:
            raise MalformedResponseException(
                "Classifier response item out of range", details={"item": repr(item)[:100]}
            ) from exc
    return candidates


def rank_candidates(
    candidates: Sequence[RankedLabel],
    original_text: str,
    lexicon: EmotionLexicon,
    provider: str = "external",
    model: str | None = None,
) -> EmotionResult:
    """Re-rank the top candidates with contextual boosts and map the winner.

    The boosted score only decides the winner; the reported score is the raw
    external score.  Equal boosted scores keep the external order.
    """
    top = list(candidates[:TOP_CANDIDATES])
    boosts = lexicon.contextual_boosts(original_text)

    winner_index = 0
    best = top[0].score * boosts.get(top[0].label.lower(), 1.0)
    for i, candidate in enumerate(top[1:], start=1):
        boosted = candidate.score * boosts.get(candidate.label.lower(), 1.0)
        if boosted > best:
            winner_index, best = i, boosted

    winner = top[winner_index]
    alternates = [
        EmotionAlternate(label=lexicon.map_label(c.label), score=c.score)
        for i, c in enumerate(top)
        if i != winner_index
    ]

    return EmotionResult(
        label=lexicon.map_label(winner.label),
        score=winner.score,
        original_label=winner.label,
        alternates=alternates,
        fallback_used=False,
        provider=provider,
        model=model,
    )


def local_result(
    text: str, lexicon: EmotionLexicon, language: Language | None = None
) -> EmotionResult:
    """Classify *text* with the local heuristic."""
    local = classify_locally(text, lexicon, language)
    return EmotionResult(
        label=local.label,
        score=local.confidence,
        original_label=local.label.value,
        fallback_used=True,
        provider="local",
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class ExternalStrategy:
    """One external model tier, paced and bounded by a timeout."""

    def __init__(
        self,
        classifier: BaseEmotionClassifier,
        tier: str,
        model: str,
        pacer: CallPacer,
        timeout: float,
        lexicon: EmotionLexicon,
        metrics_enabled: bool = True,
    ) -> None:
        self.classifier = classifier
        self.tier = tier
        self.model = model
        self.pacer = pacer
        self.timeout = timeout
        self.lexicon = lexicon
        self.metrics_enabled = metrics_enabled
        self.name = f"{classifier.provider_name}:{tier}"

    def _fail(self, outcome: str, reason: str) -> StrategyOutcome:
        record_classification_call(
            self.metrics_enabled, self.classifier.provider_name, self.tier, outcome
        )
        logger.warning("%s tier failed (%s): %s", self.name, self.model, reason)
        return StrategyOutcome(strategy=self.name, failure=reason)

    async def attempt(
        self, features: str, language: Language, original_text: str
    ) -> StrategyOutcome:
        await self.pacer.wait()
        try:
            response = await asyncio.wait_for(
                self.classifier.classify(features, self.model), timeout=self.timeout
            )
            candidates = validate_candidates(response)
        except asyncio.TimeoutError:
            return self._fail("timeout", f"timed out after {self.timeout}s")
        except MalformedResponseException as e:
            return self._fail("malformed", e.message)
        except ClassificationException as e:
            return self._fail("error", e.message)

        record_classification_call(
            self.metrics_enabled, self.classifier.provider_name, self.tier, "success"
        )
        result = rank_candidates(
            candidates,
            original_text,
            self.lexicon,
            provider=self.classifier.provider_name,
            model=self.model,
        )
        return StrategyOutcome(strategy=self.name, result=result)


class LocalStrategy:
    """The keyword/pattern heuristic.  Never waits and never fails."""

    name = "local"

    def __init__(self, lexicon: EmotionLexicon) -> None:
        self.lexicon = lexicon

    async def attempt(
        self, features: str, language: Language, original_text: str
    ) -> StrategyOutcome:
        return StrategyOutcome(
            strategy=self.name, result=local_result(original_text, self.lexicon, language)
        )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class EmotionOrchestrator:
    """Classify one scene, degrading through the model tiers to the local heuristic."""

    def __init__(
        self,
        classifier: BaseEmotionClassifier | None = None,
        tiers: ModelTierTable | None = None,
        pacer: CallPacer | None = None,
        timeout: float = 30.0,
        lexicon: EmotionLexicon | None = None,
        metrics_enabled: bool = True,
    ) -> None:
        if classifier is not None and tiers is None:
            raise ValueError("An external classifier needs a model tier table")
        self.classifier = classifier
        self.tiers = tiers
        self.pacer = pacer or NoPacer()
        self.timeout = timeout
        self.lexicon = lexicon or get_emotion_lexicon()
        self.metrics_enabled = metrics_enabled
        self._local = LocalStrategy(self.lexicon)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        classifier: BaseEmotionClassifier | None = None,
        pacer: CallPacer | None = None,
    ) -> "EmotionOrchestrator":
        """Build an orchestrator from *settings*; *classifier*'s provider picks the model tiers."""
        return cls(
            classifier=classifier,
            tiers=(
                get_model_tiers(settings, classifier.provider_name)
                if classifier is not None
                else None
            ),
            pacer=pacer or CallPacer(settings.classification_pacing_seconds),
            timeout=settings.classification_timeout,
            metrics_enabled=settings.metrics_enabled,
        )

    def strategies_for(self, language: Language) -> list[ClassificationStrategy]:
        """Return the strategies to try for *language*, in order."""
        strategies: list[ClassificationStrategy] = []
        if self.classifier is not None and self.tiers is not None:
            for tier, model in self.tiers.tier_for(language).as_tiers():
                strategies.append(
                    ExternalStrategy(
                        self.classifier,
                        tier,
                        model,
                        self.pacer,
                        self.timeout,
                        self.lexicon,
                        self.metrics_enabled,
                    )
                )
        strategies.append(self._local)
        return strategies

    async def classify(
        self, features: str, language: Language, original_text: str | None = None
    ) -> EmotionResult:
        """Classify *features*; contextual boosts and the local heuristic read *original_text*.

        Never raises: the local heuristic is the last strategy and always answers.
        """
        original = original_text if original_text is not None else features
        failures: list[str] = []

        for strategy in self.strategies_for(language):
            try:
                outcome = await strategy.attempt(features, language, original)
            except Exception:
                logger.exception("Strategy %s raised unexpectedly", strategy.name)
                failures.append(f"{strategy.name}: unexpected error")
                continue

            if outcome.succeeded and outcome.result is not None:
                if failures:
                    logger.info(
                        "Classified with %s after %d failed tier(s)", strategy.name, len(failures)
                    )
                return outcome.result
            failures.append(f"{strategy.name}: {outcome.failure}")

        # LocalStrategy only fails on a broken lexicon
        logger.error("All classification strategies failed: %s", "; ".join(failures))
        return EmotionResult(
            label=Emotion.NEUTRAL,
            score=0.0,
            original_label=Emotion.NEUTRAL.value,
            fallback_used=True,
        )
