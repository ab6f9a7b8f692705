"""
JSON Schemas for LLM response validation and dataset export.

Three schemas:
1. SUGGESTION_RESPONSE_SCHEMA  — span suggestions (label + exact text, no offsets)
2. EXTRACTION_RESPONSE_SCHEMA  — structured resume fields
3. DATASET_RECORD_SCHEMA       — one exported JSONL line
"""

# =============================================================================
# 1. Span Suggestion Schema (pre-annotation)
# =============================================================================
# Labels are plain strings here: unknown labels are kept and only warned
# about, so the closed taxonomy is enforced in business rules, not schema.
SUGGESTION_RESPONSE_SCHEMA: dict = {
    "name": "resume_span_suggestions_v1",
    "strict": True,
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "required": ["annotations"],
        "properties": {
            "annotations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "required": ["label", "text"],
                    "properties": {
                        "label": {
                            "type": "string",
                            "description": "One of NAME, EMAIL, SKILL, ORG, EDU, LOC",
                        },
                        "text": {
                            "type": "string",
                            "description": "Exact substring of the resume, copied verbatim",
                        },
                    },
                },
            },
        },
    },
}


# =============================================================================
# 2. Structured Extraction Schema
# =============================================================================
EXTRACTION_RESPONSE_SCHEMA: dict = {
    "name": "resume_entities_v1",
    "strict": False,
    "schema": {
        "type": "object",
        "properties": {
            "Name": {"type": ["string", "null"]},
            "Email": {"type": ["string", "null"]},
            "Skills": {"type": ["array", "null"], "items": {"type": "string"}},
            "Organization": {"type": ["array", "null"], "items": {"type": "string"}},
            "Education": {"type": ["array", "null"], "items": {"type": "string"}},
            "Location": {"type": ["string", "null"]},
        },
    },
}


# =============================================================================
# 3. Dataset Record Schema (one JSONL line)
# =============================================================================
DATASET_RECORD_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": ["text", "meta", "spans"],
    "properties": {
        "text": {"type": "string"},
        "meta": {
            "type": "object",
            "additionalProperties": False,
            "required": ["filename", "id"],
            "properties": {
                "filename": {"type": "string"},
                "id": {"type": "string"},
            },
        },
        "spans": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["label", "start", "end", "text"],
                "properties": {
                    "label": {"type": "string"},
                    "start": {"type": "integer", "minimum": 0},
                    "end": {"type": "integer", "minimum": 0},
                    "text": {"type": "string"},
                },
            },
        },
    },
}
