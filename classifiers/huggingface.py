"""Hugging Face Inference API provider."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from classifiers.base import BaseEmotionClassifier
from core.exceptions import ClassificationException
from core.models import RankedLabel

logger = logging.getLogger(__name__)


def _flatten(payload: Any) -> list[Any]:
    """Text-classification pipelines answer ``[[{...}, ...]]`` for one input."""
    if isinstance(payload, list) and payload and isinstance(payload[0], list):
        return payload[0]
    return payload


class HuggingFaceClassifier(BaseEmotionClassifier):
    """Text-classification models served by the Hugging Face Inference API."""

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize Hugging Face provider."""
        super().__init__(config)
        self.api_key = config.get("api_key", "")
        self.base_url = config.get("base_url", "https://api-inference.huggingface.co/models").rstrip("/")
        self.timeout = config.get("timeout", 30)
        self._transport: httpx.AsyncBaseTransport | None = config.get("transport")

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.AsyncClient(
            timeout=timeout or self.timeout, headers=headers, transport=self._transport
        )

    async def classify(self, text: str, model: str) -> list[RankedLabel]:
        """Run *model* on *text* and return its labels by descending score."""
        payload = {"inputs": text, "options": {"wait_for_model": True}}

        try:
            async with self._client() as client:
                response = await client.post(f"{self.base_url}/{model}", json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            logger.error("Hugging Face API error for %s: %s", model, e)
            raise ClassificationException(
                f"Hugging Face API request failed: {e}",
                details={"provider": self.provider_name, "model": model},
            ) from e
        except ValueError as e:
            raise ClassificationException(
                "Invalid JSON response from Hugging Face",
                details={"provider": self.provider_name, "model": model, "error": str(e)},
            ) from e

        if isinstance(result, dict) and "error" in result:
            raise ClassificationException(
                f"Hugging Face model error: {result['error']}",
                details={"provider": self.provider_name, "model": model},
            )

        items = _flatten(result)
        if not isinstance(items, list):
            raise ClassificationException(
                "Unexpected response shape from Hugging Face",
                details={"provider": self.provider_name, "model": model, "type": type(items).__name__},
            )

        try:
            labels = [RankedLabel.model_validate(item) for item in items]
        except ValidationError as e:
            raise ClassificationException(
                "Malformed label in Hugging Face response",
                details={"provider": self.provider_name, "model": model, "error": str(e)},
            ) from e

        # sorted() is stable: equal scores keep the model's order
        return sorted(labels, key=lambda item: item.score, reverse=True)

    async def health_check(self) -> bool:
        """Check that the inference endpoint is reachable."""
        try:
            async with self._client(timeout=10) as client:
                response = await client.get(self.base_url)
                return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error("Hugging Face health check failed: %s", e)
            return False

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "huggingface"
