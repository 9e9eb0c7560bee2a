"""Pydantic models for documents, scenes and classification results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    """Supported document languages (ISO 639-1)."""

    EN = "en"
    ES = "es"
    FR = "fr"
    DE = "de"
    IT = "it"
    PT = "pt"
    JA = "ja"
    KO = "ko"
    ZH = "zh"
    HI = "hi"
    AR = "ar"
    RU = "ru"
    NL = "nl"
    SV = "sv"
    DA = "da"
    NO = "no"
    FI = "fi"
    PL = "pl"
    CS = "cs"
    TR = "tr"

    @classmethod
    def from_code(cls, code: str | None) -> "Language | None":
        """Return the language for *code*, or ``None`` if unsupported."""
        if not code:
            return None
        try:
            return cls(code.strip().lower())
        except ValueError:
            return None


# (display name, text direction)
LANGUAGE_INFO: dict[Language, tuple[str, str]] = {
    Language.EN: ("English", "ltr"),
    Language.ES: ("Español", "ltr"),
    Language.FR: ("Français", "ltr"),
    Language.DE: ("Deutsch", "ltr"),
    Language.IT: ("Italiano", "ltr"),
    Language.PT: ("Português", "ltr"),
    Language.JA: ("日本語", "ltr"),
    Language.KO: ("한국어", "ltr"),
    Language.ZH: ("中文", "ltr"),
    Language.HI: ("हिन्दी", "ltr"),
    Language.AR: ("العربية", "rtl"),
    Language.RU: ("Русский", "ltr"),
    Language.NL: ("Nederlands", "ltr"),
    Language.SV: ("Svenska", "ltr"),
    Language.DA: ("Dansk", "ltr"),
    Language.NO: ("Norsk", "ltr"),
    Language.FI: ("Suomi", "ltr"),
    Language.PL: ("Polski", "ltr"),
    Language.CS: ("Čeština", "ltr"),
    Language.TR: ("Türkçe", "ltr"),
}


class ScriptDialect(str, Enum):
    """Structural conventions of a screenplay (headers, character cues, dialogue)."""

    HOLLYWOOD = "hollywood"
    EUROPEAN = "european"
    ASIAN = "asian"
    FOUNTAIN = "fountain"


class TimeOfDay(str, Enum):
    """Time-of-day designation extracted from scene headings."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    DAWN = "DAWN"
    DUSK = "DUSK"
    MORNING = "MORNING"
    EVENING = "EVENING"
    CONTINUOUS = "CONTINUOUS"
    UNKNOWN = "UNKNOWN"


class LocationType(str, Enum):
    """Interior/exterior designation from scene headings."""

    INT = "INT"
    EXT = "EXT"
    INT_EXT = "INT/EXT"
    UNKNOWN = "UNKNOWN"


class Emotion(str, Enum):
    """Canonical emotion labels.

    Declaration order is significant: the local heuristic classifier breaks
    score ties in favour of the earlier member.
    """

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    FEARFUL = "fearful"
    ROMANTIC = "romantic"
    SURPRISED = "surprised"
    DISGUSTED = "disgusted"
    TENSE = "tense"
    MYSTERIOUS = "mysterious"
    DRAMATIC = "dramatic"
    PEACEFUL = "peaceful"
    NEUTRAL = "neutral"


class RawDocument(BaseModel):
    """Immutable pipeline input."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Full plain text of the document")
    language_hint: str | None = Field(None, description="Optional ISO 639-1 language code")
    format_hint: ScriptDialect | None = Field(None, description="Optional structural dialect")


class DialogueLine(BaseModel):
    """A dialogue line attributed to the most recent character cue."""

    model_config = ConfigDict(frozen=True)

    character: str | None = Field(None, description="Speaking character, if known")
    text: str = Field(..., description="Dialogue text")
    line_number: int = Field(..., ge=0, description="Line index within the scene")


class ActionLine(BaseModel):
    """An action/description line."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Action text")
    line_number: int = Field(..., ge=0, description="Line index within the scene")


class RankedLabel(BaseModel):
    """One candidate returned by an external classification capability."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    score: float = Field(..., ge=0.0, le=1.0)


class EmotionAlternate(BaseModel):
    """A secondary emotion candidate, kept for transparency."""

    model_config = ConfigDict(frozen=True)

    label: Emotion
    score: float = Field(..., ge=0.0, le=1.0)


class EmotionResult(BaseModel):
    """Outcome of classifying one scene."""

    model_config = ConfigDict(frozen=True)

    label: Emotion
    score: float = Field(..., ge=0.0, le=1.0)
    original_label: str = Field(..., description="Raw label before canonical mapping")
    alternates: list[EmotionAlternate] = Field(default_factory=list, max_length=2)
    fallback_used: bool = False
    provider: str = Field(default="local", description="Provider that produced the label")
    model: str | None = Field(None, description="External model id, if any")


class LanguageDetection(BaseModel):
    """Detected document language and structural dialect."""

    model_config = ConfigDict(frozen=True)

    language: Language
    confidence: float = Field(..., ge=0.0, le=1.0)
    format: ScriptDialect
    method: str = Field(..., description="hint, script, statistical or default")
    name: str
    direction: str = Field(default="ltr", description="ltr or rtl")


class Scene(BaseModel):
    """A classified scene, the terminal output of the pipeline."""

    model_config = ConfigDict(frozen=True)

    scene_number: int = Field(..., ge=1)
    content: str = Field(..., min_length=1)
    header: str = Field(default="", description="Best-effort slug line")
    location_type: LocationType = LocationType.UNKNOWN
    location: str = Field(default="", description="Location parsed from the slug line")
    time_of_day: TimeOfDay = TimeOfDay.UNKNOWN
    characters: list[str] = Field(default_factory=list)
    dialogue_lines: list[DialogueLine] = Field(default_factory=list)
    action_lines: list[ActionLine] = Field(default_factory=list)
    emotion: Emotion
    confidence: float = Field(..., ge=0.0, le=1.0)
    original_label: str = Field(default="")
    alternates: list[EmotionAlternate] = Field(default_factory=list, max_length=2)
    language: Language
    fallback_used: bool = False

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Scene content cannot be blank")
        return v


class ScriptAnalysis(BaseModel):
    """Complete analysis of one document.  Transient, never persisted."""

    scenes: list[Scene] = Field(default_factory=list)
    language: LanguageDetection
    segmentation_source: str = Field(..., description="Strategy that produced the spans")
    total_scenes: int = Field(..., ge=0)
    fallback_scene_count: int = Field(default=0, ge=0)
    processing_time_seconds: float = Field(..., ge=0.0)
    metadata: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
