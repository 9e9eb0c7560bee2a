"""Primary/fallback model selection per language.

Hugging Face tiers come from ``config/emotions/models.yaml``; the Ollama
provider uses the same two models for every language.  Every table has a
default arm, so lookups never fail.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from core.config import Settings
from core.exceptions import ConfigurationException
from core.models import Language

logger = logging.getLogger(__name__)

_DEFAULT_YAML_PATH = Path(__file__).resolve().parent.parent / "config" / "emotions" / "models.yaml"


@dataclass(frozen=True, slots=True)
class ModelTier:
    """Ordered pair of external models tried for one language."""

    primary: str
    fallback: str

    def as_tiers(self) -> tuple[tuple[str, str], ...]:
        """``(tier name, model)`` pairs in call order."""
        return (("primary", self.primary), ("fallback", self.fallback))


@dataclass(frozen=True, slots=True)
class ModelTierTable:
    """Closed language -> tier mapping with a guaranteed default arm."""

    tiers: Mapping[Language, ModelTier]
    default: ModelTier

    def tier_for(self, language: Language) -> ModelTier:
        return self.tiers.get(language, self.default)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationException(f"Model tier YAML not found: {path}", details={"path": str(path)})
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_huggingface_tiers(yaml_path: Path | str | None = None) -> ModelTierTable:
    """Load the Hugging Face tier table."""
    path = Path(yaml_path) if yaml_path else _DEFAULT_YAML_PATH
    section = _load_yaml(path).get("huggingface") or {}

    tiers: dict[Language, ModelTier] = {}
    for code, entry in (section.get("tiers") or {}).items():
        language = Language.from_code(str(code))
        if language is None:
            logger.warning("Skipping model tier for unsupported language %r", code)
            continue
        try:
            tiers[language] = ModelTier(primary=entry["primary"], fallback=entry["fallback"])
        except (KeyError, TypeError) as exc:
            raise ConfigurationException(
                f"Model tier for {code} needs primary and fallback",
                details={"language": str(code)},
            ) from exc

    default_language = Language.from_code(str(section.get("default", "en")))
    if default_language not in tiers:
        raise ConfigurationException(
            "Default model tier language has no entry",
            details={"default": section.get("default")},
        )

    logger.info("Loaded %d Hugging Face model tiers from %s", len(tiers), path)
    return ModelTierTable(tiers=MappingProxyType(tiers), default=tiers[default_language])


def ollama_tiers(settings: Settings) -> ModelTierTable:
    """Ollama models are multilingual: one tier serves every language."""
    tier = ModelTier(primary=settings.ollama_model, fallback=settings.ollama_fallback_model)
    return ModelTierTable(tiers=MappingProxyType({}), default=tier)


@lru_cache
def get_huggingface_tiers() -> ModelTierTable:
    """Return the cached Hugging Face tier table."""
    return load_huggingface_tiers()


def get_model_tiers(settings: Settings, provider: str | None = None) -> ModelTierTable:
    """Return the tier table for *provider* (default: the configured provider)."""
    if (provider or settings.classifier_provider) == "ollama":
        return ollama_tiers(settings)
    return get_huggingface_tiers()
