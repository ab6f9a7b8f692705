"""
Typed Pydantic model for the structured resume extraction result.

The external model returns one object with the six resume fields. Fields it
could not find come back as ``null`` or are missing; list fields are
normalized to empty lists so callers never branch on ``None``.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from annotation_studio.config.constants import EXTRACTION_FIELD_LABELS
from annotation_studio.models.annotation import AnnotationCandidate


class ExtractedEntities(BaseModel):
    """Structured fields extracted from a resume."""

    Name: Optional[str] = Field(None, description="The candidate's full name.")
    Email: Optional[str] = Field(None, description="Email address.")
    Skills: List[str] = Field(default_factory=list, description="Technical or professional skills.")
    Organization: List[str] = Field(default_factory=list, description="Companies worked for.")
    Education: List[str] = Field(default_factory=list, description="Universities or degrees.")
    Location: Optional[str] = Field(None, description="City, Country.")

    @field_validator("Skills", "Organization", "Education", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[List[str]]) -> List[str]:
        return [] if v is None else v

    def to_candidates(self) -> List[AnnotationCandidate]:
        """
        Flatten the structured fields into annotation candidates.

        Order follows the field declaration order; empty values are skipped.
        """
        candidates: List[AnnotationCandidate] = []
        for field_name, label in EXTRACTION_FIELD_LABELS.items():
            value = getattr(self, field_name)
            values = value if isinstance(value, list) else [value]
            for item in values:
                if item and item.strip():
                    candidates.append(AnnotationCandidate(label=label, text=item))
        return candidates
