"""
Validation & Normalization — multi-stage validation of model payloads.

Implements, for span suggestions:
- JSON parse
- Field stripping (the model sometimes echoes extra keys)
- Schema conformance (jsonschema strict)
- Business rules (label aliases, closed taxonomy, empty texts)

And, for structured extraction:
- JSON parse
- Schema conformance
- Pydantic model validation
"""
import json
import logging
from typing import List

from jsonschema import ValidationError, validate
from pydantic import ValidationError as PydanticValidationError

from annotation_studio.config.constants import LABEL_ALIASES, LABELS
from annotation_studio.config.schemas import (
    EXTRACTION_RESPONSE_SCHEMA,
    SUGGESTION_RESPONSE_SCHEMA,
)
from annotation_studio.metrics import record_validation_error
from annotation_studio.models.annotation import AnnotationCandidate
from annotation_studio.models.extraction import ExtractedEntities
from annotation_studio.models.validation import ValidationResult

logger = logging.getLogger(__name__)

SUGGESTION_FIELDS = {"label", "text"}


# ======================================================================
# Internal helpers
# ======================================================================

def _parse(payload: str | dict | list, errors: List[str]) -> dict | list | None:
    if isinstance(payload, (dict, list)):
        data = payload
    else:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, TypeError) as e:
            errors.append(f"Invalid JSON: {e}")
            return None

    # A bare list of {label, text} is accepted as the annotations array.
    if isinstance(data, list):
        data = {"annotations": data}
    return data


def _strip_extra_fields(data: dict, warnings: List[str]) -> dict:
    """Keep only label/text on each suggestion; warns for anything else."""
    items = data.get("annotations") if isinstance(data, dict) else None
    if not isinstance(items, list):
        return data

    clean = []
    for item in items:
        if isinstance(item, dict):
            extra = set(item.keys()) - SUGGESTION_FIELDS
            if extra:
                warnings.append(f"annotations: stripped unexpected fields {sorted(extra)}")
            item = {k: v for k, v in item.items() if k in SUGGESTION_FIELDS}
        clean.append(item)
    return {**data, "annotations": clean}


def normalize_label(label: str) -> str:
    """Upper-case, trim and resolve known aliases; unknown labels pass through."""
    key = label.strip().upper()
    return LABEL_ALIASES.get(key, key)


# ======================================================================
# Span suggestions
# ======================================================================

def validate_suggestions(payload: str | dict | list) -> ValidationResult:
    """
    Multi-stage validation of a span-suggestion payload.

    Stages:
        1. JSON parse
        2. Strip echoed fields
        3. Schema conformance
        4. Business rules (label normalization, empty text)

    Repeated (label, text) suggestions are kept; they resolve to the same span.

    Args:
        payload: Raw model output (JSON string, dict, or bare list).

    Returns:
        ValidationResult whose ``data`` is a list of AnnotationCandidate.
    """
    errors: List[str] = []
    warnings: List[str] = []

    # ------------------------------------------------------------------
    # Stage 1: Parse JSON
    # ------------------------------------------------------------------
    data = _parse(payload, errors)
    if data is None:
        record_validation_error("suggestions", "invalid_json")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    # ------------------------------------------------------------------
    # Stage 2: Strip echoed fields
    # ------------------------------------------------------------------
    data = _strip_extra_fields(data, warnings)

    # ------------------------------------------------------------------
    # Stage 3: Schema validation
    # ------------------------------------------------------------------
    try:
        validate(instance=data, schema=SUGGESTION_RESPONSE_SCHEMA["schema"])
    except ValidationError as e:
        errors.append(f"Schema violation: {e.message}")
        record_validation_error("suggestions", "schema_mismatch")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    # ------------------------------------------------------------------
    # Stage 4: Business rules
    # ------------------------------------------------------------------
    candidates: List[AnnotationCandidate] = []
    dropped = 0

    for item in data["annotations"]:
        label = normalize_label(item["label"])
        if label != item["label"]:
            warnings.append(f"label normalized: '{item['label']}' → '{label}'")
        if label not in LABELS:
            warnings.append(f"Unknown label kept: '{label}'")

        if not item["text"].strip():
            warnings.append(f"Dropped {label} suggestion with empty text")
            dropped += 1
            continue

        candidates.append(AnnotationCandidate(label=label, text=item["text"]))

    return ValidationResult(
        valid=True,
        errors=errors,
        warnings=warnings,
        data=candidates,
        dropped=dropped,
    )


# ======================================================================
# Structured extraction
# ======================================================================

def validate_extraction(payload: str | dict) -> ValidationResult:
    """
    Validate a structured extraction payload.

    Returns:
        ValidationResult whose ``data`` is an ExtractedEntities instance.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if isinstance(payload, dict):
        data = payload
    else:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, TypeError) as e:
            errors.append(f"Invalid JSON: {e}")
            data = None

    if not isinstance(data, dict):
        if not errors:
            errors.append("Extraction payload must be a JSON object")
        record_validation_error("extraction", "invalid_json")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    try:
        validate(instance=data, schema=EXTRACTION_RESPONSE_SCHEMA["schema"])
    except ValidationError as e:
        errors.append(f"Schema violation: {e.message}")
        record_validation_error("extraction", "schema_mismatch")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    unexpected = set(data.keys()) - set(ExtractedEntities.model_fields)
    if unexpected:
        warnings.append(f"extraction: ignored unexpected fields {sorted(unexpected)}")

    try:
        entities = ExtractedEntities.model_validate(
            {k: v for k, v in data.items() if k in ExtractedEntities.model_fields}
        )
    except PydanticValidationError as e:
        errors.append(f"Model violation: {e}")
        record_validation_error("extraction", "model_mismatch")
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    return ValidationResult(valid=True, errors=errors, warnings=warnings, data=entities)
