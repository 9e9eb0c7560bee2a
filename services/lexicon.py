"""Emotion lexicon manager.

Loads the local-classifier keyword tables, contextual boost rules, raw label
mapping and per-language keyword lists from YAML configuration into
immutable structures, and provides lookup and mapping helpers.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from re import Pattern
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from core.exceptions import ConfigurationException
from core.models import Emotion, Language

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config" / "emotions"
_DECLARED = list(Emotion)


@dataclass(frozen=True, slots=True)
class EmotionProfile:
    """Keywords and regex patterns scored for one canonical emotion."""

    emotion: Emotion
    keywords: tuple[str, ...]
    patterns: tuple[Pattern[str], ...]


@dataclass(frozen=True, slots=True)
class BoostRule:
    """Multipliers applied to raw labels when *pattern* matches the scene text."""

    name: str
    pattern: Pattern[str]
    lowercase: bool
    boosts: Mapping[str, float]

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text.lower() if self.lowercase else text))


def _compile(pattern: str, source: str) -> Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationException(
            f"Invalid regex in {source}: {pattern}",
            details={"pattern": pattern, "error": str(exc)},
        ) from exc


class EmotionLexicon:
    """Immutable view of ``lexicon.yaml``."""

    def __init__(self, lexicon_path: Path | str | None = None) -> None:
        path = Path(lexicon_path) if lexicon_path else _CONFIG_DIR / "lexicon.yaml"
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8"))

        self._version = str(raw.get("version", "unknown"))
        self._profiles = self._load_profiles(raw.get("local_classifier") or {})
        self._boost_rules = self._load_boost_rules(raw.get("contextual_boosts") or [])
        self._label_mapping = self._load_label_mapping(raw.get("label_mapping") or {})
        self._cues = tuple(str(c).lower() for c in raw.get("stage_direction_cues") or [])
        self._language_emotions = self._load_language_keywords(
            raw.get("language_keywords") or {}
        )

        logger.info(
            "EmotionLexicon v%s loaded: %d profiles, %d boost rules, %d label mappings",
            self._version,
            len(self._profiles),
            len(self._boost_rules),
            len(self._label_mapping),
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @staticmethod
    def _load_profiles(section: dict[str, Any]) -> tuple[EmotionProfile, ...]:
        profiles: list[EmotionProfile] = []
        for name, data in section.items():
            try:
                emotion = Emotion(name)
            except ValueError:
                raise ConfigurationException(
                    f"Unknown emotion in local_classifier: {name}",
                    details={"emotion": name},
                )
            profiles.append(
                EmotionProfile(
                    emotion=emotion,
                    keywords=tuple(str(k).lower() for k in data.get("keywords") or []),
                    patterns=tuple(
                        _compile(p, f"local_classifier.{name}") for p in data.get("patterns") or []
                    ),
                )
            )

        # Tie-breaking relies on declaration order of the enum, not the YAML.
        profiles.sort(key=lambda p: _DECLARED.index(p.emotion))
        return tuple(profiles)

    @staticmethod
    def _load_boost_rules(section: list[dict[str, Any]]) -> tuple[BoostRule, ...]:
        rules = []
        for entry in section:
            name = entry.get("name", "unnamed")
            rules.append(
                BoostRule(
                    name=name,
                    pattern=_compile(entry["pattern"], f"contextual_boosts.{name}"),
                    lowercase=bool(entry.get("lowercase", True)),
                    boosts=MappingProxyType(
                        {str(k).lower(): float(v) for k, v in (entry.get("boosts") or {}).items()}
                    ),
                )
            )
        return tuple(rules)

    @staticmethod
    def _load_label_mapping(section: dict[str, Any]) -> Mapping[str, Emotion]:
        mapping: dict[str, Emotion] = {}
        for raw_label, canonical in section.items():
            try:
                mapping[str(raw_label).lower()] = Emotion(str(canonical).lower())
            except ValueError:
                raise ConfigurationException(
                    f"label_mapping target is not a canonical emotion: {canonical}",
                    details={"raw_label": raw_label, "target": canonical},
                )
        return MappingProxyType(mapping)

    @staticmethod
    def _load_language_keywords(
        section: dict[str, Any],
    ) -> Mapping[Language, Mapping[Emotion, tuple[str, ...]]]:
        table: dict[Language, Mapping[Emotion, tuple[str, ...]]] = {}
        for code, emotions in section.items():
            language = Language.from_code(str(code))
            if language is None:
                logger.warning("Skipping keywords for unsupported language %r", code)
                continue
            by_emotion: dict[Emotion, tuple[str, ...]] = {}
            for name, keywords in (emotions or {}).items():
                try:
                    emotion = Emotion(name)
                except ValueError:
                    raise ConfigurationException(
                        f"Unknown emotion in language_keywords.{code}: {name}",
                        details={"language": str(code), "emotion": name},
                    )
                by_emotion[emotion] = tuple(str(k).lower() for k in keywords or [])
            table[language] = MappingProxyType(
                dict(sorted(by_emotion.items(), key=lambda item: _DECLARED.index(item[0])))
            )
        return MappingProxyType(table)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def version(self) -> str:
        return self._version

    @property
    def profiles(self) -> tuple[EmotionProfile, ...]:
        """Local classifier profiles in emotion declaration order."""
        return self._profiles

    @property
    def boost_rules(self) -> tuple[BoostRule, ...]:
        return self._boost_rules

    @property
    def stage_direction_cues(self) -> tuple[str, ...]:
        return self._cues

    def language_keywords(self, language: Language) -> tuple[str, ...]:
        """Return all emotional keywords for *language* (empty if none)."""
        return tuple(
            word for words in self.emotion_keywords(language).values() for word in words
        )

    def emotion_keywords(self, language: Language) -> Mapping[Emotion, tuple[str, ...]]:
        """Return *language*'s keywords per emotion, in declaration order."""
        return self._language_emotions.get(language, MappingProxyType({}))

    def has_language_keywords(self, language: Language) -> bool:
        return language in self._language_emotions

    # ------------------------------------------------------------------
    # Mapping and boosts
    # ------------------------------------------------------------------

    def map_label(self, raw_label: str) -> Emotion:
        """Map a raw model label to a canonical emotion.

        Unmapped labels pass through lower-cased; a pass-through value that is
        not itself a canonical label resolves to ``Emotion.NEUTRAL``.
        """
        key = raw_label.strip().lower()
        mapped = self._label_mapping.get(key)
        if mapped is not None:
            return mapped
        try:
            return Emotion(key)
        except ValueError:
            logger.debug("Unmapped raw label %r resolved to neutral", raw_label)
            return Emotion.NEUTRAL

    def contextual_boosts(self, text: str) -> dict[str, float]:
        """Return raw-label multipliers triggered by *text*.

        Later rules replace multipliers set by earlier rules.
        """
        boosts: dict[str, float] = {}
        for rule in self._boost_rules:
            if rule.matches(text):
                boosts.update(rule.boosts)
        return boosts


@lru_cache
def get_emotion_lexicon() -> EmotionLexicon:
    """Return a cached singleton ``EmotionLexicon``."""
    return EmotionLexicon()
