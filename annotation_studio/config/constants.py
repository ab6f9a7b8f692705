"""
Constants used across the annotation studio.
Label taxonomy is closed and pinned for dataset reproducibility.
"""
from typing import Dict, List

# =============================================================================
# Label Taxonomy (closed enum)
# =============================================================================
LABELS: List[str] = [
    "NAME",
    "EMAIL",
    "SKILL",
    "ORG",
    "EDU",
    "LOC",
]

# Variants the model tends to produce instead of the canonical label.
LABEL_ALIASES: Dict[str, str] = {
    "PERSON": "NAME",
    "FULL_NAME": "NAME",
    "E-MAIL": "EMAIL",
    "MAIL": "EMAIL",
    "SKILLS": "SKILL",
    "ORGANIZATION": "ORG",
    "ORGANISATION": "ORG",
    "COMPANY": "ORG",
    "EDUCATION": "EDU",
    "UNIVERSITY": "EDU",
    "DEGREE": "EDU",
    "LOCATION": "LOC",
    "CITY": "LOC",
    "COUNTRY": "LOC",
}

# =============================================================================
# Display styles (one class string per label)
# =============================================================================
LABEL_STYLES: Dict[str, str] = {
    "NAME": "bg-blue-100 text-blue-700 border-blue-200",
    "EMAIL": "bg-purple-100 text-purple-700 border-purple-200",
    "SKILL": "bg-emerald-100 text-emerald-700 border-emerald-200",
    "ORG": "bg-orange-100 text-orange-700 border-orange-200",
    "EDU": "bg-pink-100 text-pink-700 border-pink-200",
    "LOC": "bg-cyan-100 text-cyan-700 border-cyan-200",
}

# Unknown labels render with the first label's style.
DEFAULT_LABEL_STYLE: str = LABEL_STYLES["NAME"]

# =============================================================================
# Document lifecycle
# =============================================================================
STATUS_RAW: str = "raw"
STATUS_ANNOTATED: str = "annotated"

# =============================================================================
# Structured extraction → label mapping
# =============================================================================
EXTRACTION_FIELD_LABELS: Dict[str, str] = {
    "Name": "NAME",
    "Email": "EMAIL",
    "Skills": "SKILL",
    "Organization": "ORG",
    "Education": "EDU",
    "Location": "LOC",
}
