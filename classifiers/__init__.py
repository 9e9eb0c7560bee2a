"""External emotion classification providers."""

from classifiers.base import BaseEmotionClassifier
from classifiers.factory import get_classifier

__all__ = ["get_classifier", "BaseEmotionClassifier"]
