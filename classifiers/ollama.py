"""Ollama zero-shot emotion classifier."""

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from classifiers.base import BaseEmotionClassifier
from classifiers.prompt_manager import PromptManager, get_prompt_manager
from core.exceptions import ClassificationException
from core.models import Emotion, RankedLabel
from core.prompt_sanitizer import PromptSanitizer

logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


class OllamaEmotionClassifier(BaseEmotionClassifier):
    """Ranks canonical emotions with a local LLM served by Ollama."""

    def __init__(
        self, config: dict[str, Any], prompt_manager: PromptManager | None = None
    ) -> None:
        """Initialize Ollama provider."""
        super().__init__(config)
        self.base_url = config.get("base_url", "http://ollama:11434").rstrip("/")
        self.timeout = config.get("timeout", 30)
        self.language = config.get("language", "en")
        self._transport: httpx.AsyncBaseTransport | None = config.get("transport")
        self._prompts = prompt_manager or get_prompt_manager()

    def build_messages(self, text: str, language: str | None = None) -> list[dict[str, str]]:
        """Build the chat messages for one scene."""
        clean = PromptSanitizer.validate_and_sanitize(text)
        system, user = self._prompts.get(
            "emotion_classification",
            "scene",
            language=language or self.language,
            labels=", ".join(e.value for e in Emotion),
            scene_text=PromptSanitizer.fence(clean),
        )
        return [
            {"role": "system", "content": PromptSanitizer.wrap_with_system_lock(system)},
            {"role": "user", "content": user},
        ]

    async def classify(self, text: str, model: str) -> list[RankedLabel]:
        """Ask *model* to rank the canonical emotions for *text*."""
        payload = {
            "model": model,
            "messages": self.build_messages(text),
            "stream": False,
            "format": "json",
            "options": {"temperature": 0.0},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/api/chat", json=payload)
                response.raise_for_status()
                content = response.json()["message"]["content"]
        except httpx.HTTPError as e:
            logger.error("Ollama Chat API error: %s", e)
            raise ClassificationException(
                f"Ollama Chat API request failed: {e}",
                details={"provider": self.provider_name, "model": model, "base_url": self.base_url},
            ) from e
        except (KeyError, TypeError, ValueError) as e:
            raise ClassificationException(
                "Unexpected response from Ollama Chat API",
                details={"provider": self.provider_name, "model": model, "error": str(e)},
            ) from e

        return self.parse_answer(content, model)

    def parse_answer(self, content: str, model: str) -> list[RankedLabel]:
        """Parse ``{"emotions": [{"label": ..., "score": ...}]}`` from the model answer."""
        response_text = _strip_code_fence(content)
        try:
            data = json.loads(response_text)
            items = data["emotions"]
            labels = [RankedLabel.model_validate(item) for item in items]
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.error("Failed to parse Ollama answer: %s", e)
            raise ClassificationException(
                "Invalid JSON answer from Ollama",
                details={"provider": self.provider_name, "model": model, "response": response_text[:200]},
            ) from e

        return sorted(labels, key=lambda item: item.score, reverse=True)

    async def health_check(self) -> bool:
        """Check Ollama availability."""
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error("Ollama health check failed: %s", e)
            return False

    async def list_models(self) -> list[str]:
        """
        List available models in Ollama.

        Returns:
            List of model names
        """
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                result = response.json()
                return [model["name"] for model in result.get("models", [])]
        except httpx.HTTPError as e:
            logger.error("Failed to list Ollama models: %s", e)
            return []

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "ollama"
