"""
Auto-label Orchestrator — main entry point for model-assisted annotation.

Executes the 4-stage auto-label flow:
    1. Span suggestion (external model, no offsets)
    2. Validation & Normalization (schema + label taxonomy)
    3. Offset resolution (first occurrence)
    4. Audit (optional Redis write barrier)

annotate_from_fields() is the alternative flow built on structured extraction.
Plus the in-memory editing session used between auto-labeling and saving.
"""
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from annotation_studio.annotation.reconciler import (
    partition,
    rendered_annotations,
    validate_annotation,
)
from annotation_studio.annotation.resolver import locate, resolve
from annotation_studio.annotation.validation import validate_extraction, validate_suggestions
from annotation_studio.errors import LLMResponseError, StorageError, WriteBarrierValidationError
from annotation_studio.llm.base import EntityAnnotator
from annotation_studio.metrics import timed_stage
from annotation_studio.models.annotation import Annotation, AnnotationCandidate
from annotation_studio.models.document import Document
from annotation_studio.models.extraction import ExtractedEntities
from annotation_studio.models.segment import Segment
from annotation_studio.models.validation import ValidationResult
from annotation_studio.storage.audit import process_stage_with_barrier

logger = logging.getLogger(__name__)

SUGGESTION_STAGE = "suggest_spans"


@dataclass
class AutoLabelResult:
    """Outcome of one auto-label run over a document."""

    document_id: str
    annotations: List[Annotation]
    warnings: List[str] = field(default_factory=list)
    candidates: int = 0           # candidates surviving validation
    unresolved: int = 0           # candidates whose text was not found
    duration_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "annotations": [a.to_dict() for a in self.annotations],
            "diagnostics": {"warnings": self.warnings},
            "processing_metadata": {
                "candidates": self.candidates,
                "resolved": len(self.annotations),
                "unresolved": self.unresolved,
                "duration_ms": self.duration_ms,
            },
        }


def auto_annotate(
    document: Document,
    annotator: EntityAnnotator,
    audit_client: Optional[Any] = None,
    run_id: Optional[str] = None,
) -> AutoLabelResult:
    """
    Ask the external model for span suggestions and resolve their offsets.

    Args:
        document: Resume to annotate.
        annotator: EntityAnnotator adapter.
        audit_client: Redis-compatible client; when given, raw and normalized
            payloads are persisted through the write barrier.
        run_id: Audit run identifier. Defaults to a fresh UUID.

    Returns:
        AutoLabelResult with resolved annotations in suggestion order.

    Raises:
        LLMResponseError: If the model output fails validation.
    """
    start_time = time.monotonic()

    with timed_stage(SUGGESTION_STAGE):
        # ==============================================================
        # Stage 1: Suggest spans
        # ==============================================================
        raw = annotator.suggest_spans(document.content)

        # ==============================================================
        # Stage 2: Validate & normalize
        # ==============================================================
        validation: ValidationResult = validate_suggestions(raw)
        if not validation.valid:
            logger.error("Span suggestions rejected for %s: %s", document.id, validation.errors)
            if audit_client is not None:
                try:
                    _audit(audit_client, run_id, document, raw, validation)
                except WriteBarrierValidationError as exc:
                    raise LLMResponseError(validation.errors) from exc
            raise LLMResponseError(validation.errors)

        candidates: List[AnnotationCandidate] = validation.data

        # ==============================================================
        # Stage 3: Resolve offsets
        # ==============================================================
        annotations = resolve(document.content, candidates)

        # ==============================================================
        # Stage 4: Audit
        # ==============================================================
        if audit_client is not None:
            _audit(audit_client, run_id, document, raw, validation, annotations)

    unresolved = len(candidates) - len(annotations)
    if unresolved:
        logger.info(
            "%d of %d suggestions for %s could not be located in the text",
            unresolved, len(candidates), document.id,
        )

    return AutoLabelResult(
        document_id=document.id,
        annotations=annotations,
        warnings=validation.warnings,
        candidates=len(candidates),
        unresolved=unresolved,
        duration_ms=int((time.monotonic() - start_time) * 1000),
    )


def _audit(
    audit_client: Any,
    run_id: Optional[str],
    document: Document,
    raw: Any,
    validation: ValidationResult,
    annotations: Optional[List[Annotation]] = None,
) -> None:
    """Persist the payloads; the validation outcome is already known."""
    process_stage_with_barrier(
        raw_payload=raw,
        validator_fn=lambda _payload: validation,
        normalizer_fn=lambda _outcome: [a.to_dict() for a in annotations or []],
        redis_client=audit_client,
        run_id=run_id or str(uuid.uuid4()),
        document_id=document.id,
        stage=SUGGESTION_STAGE,
    )


def extract_fields(document: Document, annotator: EntityAnnotator) -> ExtractedEntities:
    """
    Structured extraction of the six resume fields.

    Raises:
        LLMResponseError: If the model output fails validation.
    """
    with timed_stage("extract_entities"):
        raw = annotator.extract_entities(document.content)
        validation = validate_extraction(raw)

    if not validation.valid:
        logger.error("Entity extraction rejected for %s: %s", document.id, validation.errors)
        raise LLMResponseError(validation.errors)

    for warning in validation.warnings:
        logger.warning("Extraction for %s: %s", document.id, warning)
    return validation.data


def annotate_from_fields(document: Document, annotator: EntityAnnotator) -> AutoLabelResult:
    """
    Auto-label from the structured extraction instead of span suggestions.

    Every extracted field value becomes a candidate (Skills, Organization and
    Education contribute one per item) and is resolved by first occurrence.

    Raises:
        LLMResponseError: If the model output fails validation.
    """
    start_time = time.monotonic()

    entities = extract_fields(document, annotator)
    candidates = entities.to_candidates()
    annotations = resolve(document.content, candidates)

    return AutoLabelResult(
        document_id=document.id,
        annotations=annotations,
        candidates=len(candidates),
        unresolved=len(candidates) - len(annotations),
        duration_ms=int((time.monotonic() - start_time) * 1000),
    )


# ======================================================================
# Editing session
# ======================================================================

class AnnotationSession:
    """
    Mutable annotation set for one document, until saved.

    Annotations can be added and removed freely; saving replaces the stored
    set wholesale.
    """

    def __init__(self, document: Document, annotations: Optional[Iterable[Annotation]] = None) -> None:
        self.document = document
        self.annotations: List[Annotation] = list(annotations or [])

    @classmethod
    def load(cls, store: Any, document_id: str) -> "AnnotationSession":
        """
        Open a session on a stored document with its persisted annotations.

        Raises:
            StorageError: If the document does not exist.
        """
        document = store.get_document(document_id)
        if document is None:
            raise StorageError(f"Unknown document: {document_id}")
        return cls(document, store.get_annotations(document_id))

    def add_selection(self, label: str, selected_text: str) -> Optional[Annotation]:
        """
        Add an annotation for text selected by the user.

        The selection is trimmed and located by its first occurrence, so a
        repeated phrase always maps to its first appearance. Returns None
        when the selection is empty or not found.
        """
        selected_text = selected_text.strip()
        pos = locate(self.document.content, selected_text)
        if pos == -1:
            return None

        annotation = Annotation(label=label, start=pos, end=pos + len(selected_text), text=selected_text)
        self.annotations.append(annotation)
        return annotation

    def add_span(self, label: str, start: int, end: int) -> Annotation:
        """
        Add an annotation from explicit offsets; text is re-derived from the document.

        Raises:
            ValidationError: If the offsets do not fit the document.
        """
        annotation = Annotation(label=label, start=start, end=end, text="")
        validate_annotation(self.document.content, annotation)
        annotation = Annotation(label=label, start=start, end=end, text=self.document.content[start:end])
        self.annotations.append(annotation)
        return annotation

    def remove(self, index: int) -> Annotation:
        return self.annotations.pop(index)

    def replace_all(self, annotations: Iterable[Annotation]) -> None:
        self.annotations = list(annotations)

    def segments(self) -> List[Segment]:
        return partition(self.document.content, self.annotations)

    def visible_annotations(self) -> List[Annotation]:
        return rendered_annotations(self.document.content, self.annotations)

    def save(self, store: Any) -> int:
        """Replace the stored annotation set with this session's annotations."""
        return store.replace_annotations(self.document.id, self.annotations)
