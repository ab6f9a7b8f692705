"""
Capability interface for the external entity-recognition service.

Any adapter exposing these two calls can back the auto-label and extraction
paths; nothing else in the package knows which model or prompt is used.
"""
from typing import Protocol


class EntityAnnotator(Protocol):
    """External model capable of reading a resume."""

    def extract_entities(self, text: str) -> dict | str:
        """Structured fields: Name, Email, Skills, Organization, Education, Location."""
        ...

    def suggest_spans(self, text: str) -> dict | str:
        """``{"annotations": [{"label", "text"}, ...]}`` with verbatim substrings, no offsets."""
        ...
