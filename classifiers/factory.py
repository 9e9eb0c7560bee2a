"""Factory for creating emotion classification providers."""

import logging

from classifiers.base import BaseEmotionClassifier
from classifiers.huggingface import HuggingFaceClassifier
from classifiers.ollama import OllamaEmotionClassifier
from core.config import Settings
from core.exceptions import ClassificationException

logger = logging.getLogger(__name__)


def get_classifier(settings: Settings) -> BaseEmotionClassifier | None:
    """
    Create the classification provider selected in *settings*.

    Args:
        settings: Engine settings

    Returns:
        Initialized provider, or None when only the local heuristic is used

    Raises:
        ValueError: If provider type is invalid
    """
    provider_type = settings.classifier_provider.lower()

    logger.info("Initializing classification provider: %s", provider_type)

    if provider_type == "local":
        return None

    if provider_type == "huggingface":
        if not settings.huggingface_api_key:
            logger.warning("HUGGINGFACE_API_KEY is not set; requests may be rate limited")
        config = {
            "api_key": settings.huggingface_api_key,
            "base_url": settings.huggingface_base_url,
            "timeout": settings.classification_timeout,
        }
        return HuggingFaceClassifier(config)

    if provider_type == "ollama":
        config = {
            "base_url": settings.ollama_base_url,
            "timeout": settings.classification_timeout,
            "language": settings.default_language,
        }
        return OllamaEmotionClassifier(config)

    raise ValueError(
        f"Invalid classifier provider: {provider_type}. "
        f"Valid options: huggingface, ollama, local"
    )


async def smoke_test_classifier(classifier: BaseEmotionClassifier, model: str) -> bool:
    """
    Classify a short sample to check that *classifier* and *model* work.

    Args:
        classifier: Provider to test
        model: Model identifier to call

    Returns:
        True if test successful
    """
    if not await classifier.health_check():
        logger.error("Provider %s health check failed", classifier.provider_name)
        return False

    try:
        labels = await classifier.classify("I can't believe we finally made it!", model)
    except ClassificationException as e:
        logger.error("Provider %s test failed: %s", classifier.provider_name, e)
        return False

    if not labels:
        logger.error("Provider %s returned no labels", classifier.provider_name)
        return False

    logger.info("Provider %s test successful: top label %s (%.2f)",
                classifier.provider_name, labels[0].label, labels[0].score)
    return True
