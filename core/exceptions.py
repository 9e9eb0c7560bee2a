"""Custom exceptions for the scenemood engine."""

from typing import Any


class SceneMoodException(Exception):
    """Base exception for the scenemood engine."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class EmptyDocumentException(SceneMoodException):
    """Raised when a document has no content to segment."""

    pass


class ClassificationException(SceneMoodException):
    """Raised when the external classification capability fails."""

    pass


class ConfigurationException(SceneMoodException):
    """Raised when static tables or settings are invalid."""

    pass


class AnalysisTimeoutException(SceneMoodException):
    """Raised when a pipeline run exceeds its deadline."""

    pass
