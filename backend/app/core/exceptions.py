"""
Error taxonomy for the tutor core.

Every failure in chunking, embedding, retrieval or generation surfaces as
one of these types. The HTTP layer maps them to status codes in app.main.
"""

from typing import Any


class TutorError(Exception):
    """Base exception for all tutor core errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidConfigurationError(TutorError):
    """Raised when chunking or retrieval parameters are malformed."""


class UnknownModelError(TutorError):
    """Raised when a model id is not in the model registry."""


class DocumentExtractionError(TutorError):
    """Raised when uploaded bytes cannot be turned into text."""


class EmbeddingProviderError(TutorError):
    """Raised when the embedding call fails, times out or returns malformed data."""


class DimensionMismatchError(TutorError):
    """Raised when embedding vectors disagree on length."""

    def __init__(
        self,
        expected: int,
        actual: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}",
            details,
        )


class GenerationProviderError(TutorError):
    """Raised when the generative model call fails or times out."""


class MalformedGenerationError(TutorError):
    """Raised when structured model output fails schema validation."""


class EmptyGenerationError(TutorError):
    """Raised when the provider returns no usable text."""
