"""
Typed Pydantic models for the exported dataset.

One DatasetRecord per annotated document; each record serializes to exactly
one self-contained JSONL line.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class RecordMeta(BaseModel):
    """Document provenance carried in every record."""

    filename: str
    id: str


class DatasetSpan(BaseModel):
    """A labeled span, copied verbatim from a stored annotation."""

    label: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    text: str


class DatasetRecord(BaseModel):
    """
    One line of the exported dataset.

    Field order matters: ``text``, ``meta``, ``spans`` is the on-disk order.
    """

    text: str
    meta: RecordMeta
    spans: List[DatasetSpan] = Field(default_factory=list)
