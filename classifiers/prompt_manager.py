"""Prompts for LLM-backed classifiers, loaded from YAML.

Prompts live in ``config/prompts/prompts.yaml`` so that wording can change
without touching Python code.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from core.exceptions import ConfigurationException

logger = logging.getLogger(__name__)

_DEFAULT_YAML_PATH = Path(__file__).resolve().parent.parent / "config" / "prompts" / "prompts.yaml"


class PromptManager:
    """Load and format prompt templates.

    Usage::

        system, user = get_prompt_manager().get(
            "emotion_classification", "scene",
            language="en", labels="happy, sad", scene_text="...",
        )
    """

    def __init__(self, yaml_path: Path | str | None = None) -> None:
        path = Path(yaml_path) if yaml_path else _DEFAULT_YAML_PATH
        if not path.exists():
            raise ConfigurationException(f"Prompt YAML not found: {path}", details={"path": str(path)})
        self._prompts: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        self._version = str(self._prompts.get("version", "unknown"))
        logger.info("PromptManager loaded v%s from %s", self._version, path)

    @property
    def version(self) -> str:
        return self._version

    def get(self, section: str, name: str, **variables: Any) -> tuple[str, str]:
        """Return ``(system_prompt, user_prompt)`` with *variables* substituted.

        Raises ``KeyError`` if the prompt or one of its template variables is missing.
        """
        try:
            entry = self._prompts[section][name]
        except (KeyError, TypeError):
            raise KeyError(f"Prompt not found: {section}.{name}")

        return entry["system"].strip(), entry["user"].strip().format(**variables)

    def sections(self) -> list[str]:
        """List available top-level sections (excluding 'version')."""
        return [k for k in self._prompts if k != "version"]


@lru_cache
def get_prompt_manager() -> PromptManager:
    """Return a cached singleton ``PromptManager``."""
    return PromptManager()
