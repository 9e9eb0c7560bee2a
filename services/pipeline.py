"""Pipeline coordinator: document text in, ordered classified scenes out.

Language and dialect are detected once per document.  Every span is then
processed on its own: a failure while classifying one scene degrades that
scene to the local heuristic and never touches its siblings.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from classifiers.base import BaseEmotionClassifier
from classifiers.factory import get_classifier
from core.config import Settings, get_settings
from core.exceptions import AnalysisTimeoutException, EmptyDocumentException
from core.metrics import observe_pipeline, record_scene
from core.models import (
    EmotionResult,
    Language,
    LanguageDetection,
    LocationType,
    RawDocument,
    Scene,
    ScriptAnalysis,
    ScriptDialect,
)
from parsers.features import extract_features
from parsers.language import detect_language
from parsers.scene_heading import extract_scene_header, parse_scene_heading
from parsers.scene_splitter import CandidateSpan, merge_and_filter, split_into_scenes
from parsers.structure import (
    SceneStructure,
    count_words,
    estimate_reading_time,
    extract_structure,
    normalize_content,
)
from services.orchestrator import EmotionOrchestrator, local_result
from services.pacing import ConcurrencyLimiter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _SpanOutcome:
    span: CandidateSpan
    structure: SceneStructure
    result: EmotionResult


class ScenePipeline:
    """Segment a document and classify each scene."""

    def __init__(
        self,
        settings: Settings | None = None,
        orchestrator: EmotionOrchestrator | None = None,
        classifier: BaseEmotionClassifier | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if orchestrator is None:
            if classifier is None:
                classifier = get_classifier(self.settings)
            orchestrator = EmotionOrchestrator.from_settings(self.settings, classifier=classifier)
        self.orchestrator = orchestrator
        self._limiter = ConcurrencyLimiter(self.settings.max_concurrent_classifications)

    @property
    def default_language(self) -> Language:
        return Language.from_code(self.settings.default_language) or Language.EN

    async def run(
        self,
        text: str,
        language_hint: str | None = None,
        format_hint: ScriptDialect | None = None,
        timeout: float | None = None,
    ) -> list[Scene]:
        """Return the classified scenes of *text* in source order."""
        analysis = await self.analyze(
            text, language_hint=language_hint, format_hint=format_hint, timeout=timeout
        )
        return analysis.scenes

    async def analyze(
        self,
        text: str,
        language_hint: str | None = None,
        format_hint: ScriptDialect | None = None,
        timeout: float | None = None,
    ) -> ScriptAnalysis:
        """Run the full pipeline on *text*.

        Raises:
            EmptyDocumentException: If *text* is empty or whitespace only
            AnalysisTimeoutException: If the run exceeds *timeout* (or the
                configured pipeline deadline)
        """
        if not text or not text.strip():
            raise EmptyDocumentException("Document has no content to segment")

        document = RawDocument(text=text, language_hint=language_hint, format_hint=format_hint)
        deadline = timeout if timeout is not None else self.settings.pipeline_timeout_seconds

        if deadline is None:
            return await self._analyze(document)
        try:
            return await asyncio.wait_for(self._analyze(document), timeout=deadline)
        except asyncio.TimeoutError:
            raise AnalysisTimeoutException(
                f"Analysis exceeded {deadline}s", details={"timeout": deadline}
            ) from None

    async def _analyze(self, document: RawDocument) -> ScriptAnalysis:
        started = time.perf_counter()
        warnings: list[str] = []

        detection = detect_language(
            document.text,
            hint=document.language_hint,
            default=self.default_language,
            format_hint=document.format_hint,
        )
        if document.language_hint and detection.method != "hint":
            warnings.append(f"Unsupported language hint '{document.language_hint}' ignored")

        text = normalize_content(document.text, detection.language)
        if not text:
            raise EmptyDocumentException("Document has no content to segment")

        spans = self._segment(text, detection, warnings)
        outcomes = await asyncio.gather(
            *(self._process_span(span, detection) for span in spans)
        )

        scenes: list[Scene] = []
        for number, outcome in enumerate(outcomes, start=1):
            scene = self._build_scene(number, outcome, detection.language)
            record_scene(self.settings.metrics_enabled, scene.fallback_used)
            scenes.append(scene)

        fallback_count = sum(1 for s in scenes if s.fallback_used)
        if fallback_count:
            warnings.append(
                f"{fallback_count} of {len(scenes)} scenes were classified by the local "
                "heuristic and carry lower confidence"
            )

        elapsed = time.perf_counter() - started
        observe_pipeline(self.settings.metrics_enabled, elapsed)
        logger.info(
            "Analyzed %d scenes (%s, %s) in %.2fs, %d fallback",
            len(scenes),
            detection.language.value,
            spans[0].source,
            elapsed,
            fallback_count,
        )

        return ScriptAnalysis(
            scenes=scenes,
            language=detection,
            segmentation_source=spans[0].source,
            total_scenes=len(scenes),
            fallback_scene_count=fallback_count,
            processing_time_seconds=round(elapsed, 4),
            metadata={
                "character_count": len(text),
                "word_count": count_words(text, detection.language),
                "estimated_reading_time_minutes": estimate_reading_time(text, detection.language),
                "format": detection.format.value,
            },
            warnings=warnings,
        )

    def _segment(
        self, text: str, detection: LanguageDetection, warnings: list[str]
    ) -> list[CandidateSpan]:
        raw_spans = split_into_scenes(
            text,
            language=detection.language,
            dialect=detection.format,
            min_length=self.settings.min_scene_length,
        )
        merged = merge_and_filter(raw_spans, max_scenes=len(raw_spans))

        max_scenes = self.settings.max_scenes
        if len(merged) > max_scenes:
            warnings.append(
                f"Document has {len(merged)} scenes; only the first {max_scenes} were kept"
            )
            merged = merged[:max_scenes]
        return merged

    async def _process_span(
        self, span: CandidateSpan, detection: LanguageDetection
    ) -> _SpanOutcome:
        language = detection.language
        try:
            features = extract_features(span.text)
            structure = extract_structure(span.text, language, detection.format)
            async with self._limiter:
                result = await self.orchestrator.classify(features, language, span.text)
        except Exception:
            logger.exception("Scene %d failed; using the local heuristic", span.index + 1)
            structure = SceneStructure()
            result = local_result(span.text, self.orchestrator.lexicon, language)

        logger.debug(
            "Scene %d: %s (%.2f) via %s",
            span.index + 1,
            result.label.value,
            result.score,
            result.provider,
        )
        return _SpanOutcome(span=span, structure=structure, result=result)

    @staticmethod
    def _build_scene(number: int, outcome: _SpanOutcome, language: Language) -> Scene:
        result = outcome.result
        header = extract_scene_header(outcome.span.text)
        heading = parse_scene_heading(header)
        return Scene(
            scene_number=number,
            content=outcome.span.text,
            header=header,
            location_type=heading.location_type,
            location=heading.location if heading.location_type != LocationType.UNKNOWN else "",
            time_of_day=heading.time_of_day,
            characters=outcome.structure.characters,
            dialogue_lines=outcome.structure.dialogue_lines,
            action_lines=outcome.structure.action_lines,
            emotion=result.label,
            confidence=result.score,
            original_label=result.original_label,
            alternates=result.alternates,
            language=language,
            fallback_used=result.fallback_used,
        )
