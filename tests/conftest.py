"""
Shared test fixtures for the annotation studio test suite.
"""
import json

import pytest

from annotation_studio.models.annotation import Annotation, AnnotationCandidate
from annotation_studio.models.document import Document
from annotation_studio.storage.repository import AnnotationStore


RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com\n"
    "San Francisco, USA\n"
    "\n"
    "Skills: Python, SQL, Docker\n"
    "Experience: Software Engineer at Acme Corp (2019-2023)\n"
    "Education: BSc Computer Science, Stanford University\n"
    "Also used Python at Globex."
)


def span_of(text: str, needle: str, label: str) -> Annotation:
    """Annotation for the first occurrence of *needle* in *text*."""
    start = text.index(needle)
    return Annotation(label=label, start=start, end=start + len(needle), text=needle)


# ==========================================================================
# Documents
# ==========================================================================

@pytest.fixture
def resume_text():
    return RESUME_TEXT


@pytest.fixture
def mock_document():
    return Document(
        id="doc-001",
        filename="jane_doe.txt",
        content=RESUME_TEXT,
        upload_date="2026-01-15T10:00:00+00:00",
    )


# ==========================================================================
# Candidates & annotations
# ==========================================================================

@pytest.fixture
def mock_candidates():
    return [
        AnnotationCandidate("NAME", "Jane Doe"),
        AnnotationCandidate("EMAIL", "jane.doe@example.com"),
        AnnotationCandidate("SKILL", "Python"),
        AnnotationCandidate("ORG", "Acme Corp"),
        AnnotationCandidate("EDU", "Stanford University"),
        AnnotationCandidate("LOC", "San Francisco, USA"),
    ]


@pytest.fixture
def mock_annotations():
    return [
        span_of(RESUME_TEXT, "Jane Doe", "NAME"),
        span_of(RESUME_TEXT, "jane.doe@example.com", "EMAIL"),
        span_of(RESUME_TEXT, "Python", "SKILL"),
        span_of(RESUME_TEXT, "Acme Corp", "ORG"),
    ]


# ==========================================================================
# LLM output
# ==========================================================================

@pytest.fixture
def mock_suggestions():
    return {
        "annotations": [
            {"label": "NAME", "text": "Jane Doe"},
            {"label": "EMAIL", "text": "jane.doe@example.com"},
            {"label": "SKILL", "text": "Python"},
            {"label": "SKILL", "text": "Rust"},
            {"label": "Organization", "text": "Acme Corp"},
            {"label": "EDU", "text": "Stanford University"},
        ]
    }


@pytest.fixture
def mock_extraction():
    return {
        "Name": "Jane Doe",
        "Email": "jane.doe@example.com",
        "Skills": ["Python", "SQL", "Docker"],
        "Organization": ["Acme Corp", "Globex"],
        "Education": None,
        "Location": "San Francisco, USA",
    }


class FakeAnnotator:
    """EntityAnnotator returning canned payloads; records the texts it saw."""

    def __init__(self, suggestions=None, extraction=None):
        self.suggestions = suggestions
        self.extraction = extraction
        self.calls = []

    def suggest_spans(self, text):
        self.calls.append(("suggest_spans", text))
        return json.dumps(self.suggestions)

    def extract_entities(self, text):
        self.calls.append(("extract_entities", text))
        return json.dumps(self.extraction)


@pytest.fixture
def fake_annotator(mock_suggestions, mock_extraction):
    return FakeAnnotator(mock_suggestions, mock_extraction)


@pytest.fixture
def make_annotator():
    """Factory for annotators returning custom payloads."""
    return FakeAnnotator


# ==========================================================================
# Redis & storage
# ==========================================================================

class InMemoryRedis:
    """Minimal in-memory Redis stub (no server required)."""

    def __init__(self):
        self._store: dict = {}

    def set(self, key: str, value: str, **kwargs) -> None:  # noqa: ARG002
        self._store[key] = value

    def get(self, key: str):
        return self._store.get(key)

    def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self._store)

    def delete(self, *keys: str) -> int:
        deleted = 0
        for k in keys:
            if k in self._store:
                del self._store[k]
                deleted += 1
        return deleted

    def keys_matching(self, prefix: str) -> list:
        return [k for k in self._store if k.startswith(prefix)]


@pytest.fixture
def redis_stub():
    return InMemoryRedis()


@pytest.fixture
def store(tmp_path):
    s = AnnotationStore(url=f"sqlite:///{tmp_path / 'test.db'}")
    s.init_schema()
    return s
