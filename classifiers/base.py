"""Base class for external emotion classification providers."""

from abc import ABC, abstractmethod
from typing import Any

from core.models import RankedLabel


class BaseEmotionClassifier(ABC):
    """Base class for all emotion classification providers."""

    def __init__(self, config: dict[str, Any]) -> None:
        """
        Initialize classification provider.

        Args:
            config: Provider-specific configuration
        """
        self.config = config

    @abstractmethod
    async def classify(self, text: str, model: str) -> list[RankedLabel]:
        """
        Rank emotion labels for *text* with *model*.

        Args:
            text: Classification input (already bounded by the feature extractor)
            model: Provider-specific model identifier

        Returns:
            Candidates ordered by descending score

        Raises:
            ClassificationException: On timeout, HTTP error or unreadable response
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is available.

        Returns:
            True if provider is healthy, False otherwise
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name."""
        pass
