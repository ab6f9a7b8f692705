"""
Exception hierarchy for the annotation studio.
"""
from typing import Any, List


class AnnotationError(Exception):
    """Base class for all annotation studio errors."""


class ValidationError(AnnotationError):
    """Raised when an annotation does not fit the document it is rendered against."""

    def __init__(self, annotation: Any, reason: str) -> None:
        self.annotation = annotation
        self.reason = reason
        super().__init__(f"Invalid annotation {annotation!r}: {reason}")


class PreconditionError(AnnotationError):
    """Raised when a malformed annotation reaches the export path."""

    def __init__(self, annotation: Any, reason: str) -> None:
        self.annotation = annotation
        self.reason = reason
        super().__init__(f"Export precondition violated by {annotation!r}: {reason}")


class StorageError(AnnotationError):
    """Raised when the persistence layer fails."""


class LLMResponseError(AnnotationError):
    """Raised when the external model output fails validation."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = errors
        super().__init__(f"LLM response validation failed: {errors}")


class WriteBarrierValidationError(AnnotationError):
    """Raised when a stage validator rejects the payload at the audit barrier."""

    def __init__(self, stage: str, errors: List[str]) -> None:
        self.stage = stage
        self.errors = errors
        super().__init__(f"Validation failed at stage '{stage}': {errors}")
