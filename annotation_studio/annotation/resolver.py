"""
Offset Resolver — maps model-suggested (label, text) pairs to character spans.

Each candidate is located by the FIRST exact, case-sensitive occurrence of its
text in the document. There is no search cursor across candidates and no
global assignment: two candidates with identical text resolve to the same
span, and a text that repeats always resolves to its first occurrence.
Candidates whose text cannot be found are dropped.
"""
import logging
from typing import Iterable, List, Union

from annotation_studio.config.settings import MAX_TEXT_LOG_CHARS
from annotation_studio.metrics import record_resolution
from annotation_studio.models.annotation import Annotation, AnnotationCandidate

logger = logging.getLogger(__name__)

CandidateLike = Union[AnnotationCandidate, dict]


def _as_candidate(candidate: CandidateLike) -> AnnotationCandidate:
    if isinstance(candidate, AnnotationCandidate):
        return candidate
    return AnnotationCandidate.from_dict(candidate)


def locate(document: str, text: str) -> int:
    """
    Return the offset of the first occurrence of *text* in *document*.

    Returns -1 when *text* is empty or absent; an empty needle would
    otherwise match at offset 0.
    """
    if not text:
        return -1
    return document.find(text)


def resolve(document: str, candidates: Iterable[CandidateLike]) -> List[Annotation]:
    """
    Resolve offsets for each candidate, in input order.

    Args:
        document: Full resume text.
        candidates: AnnotationCandidate objects or ``{"label", "text"}`` dicts.

    Returns:
        Annotations for every candidate whose text was found, in input order.
    """
    annotations: List[Annotation] = []

    for raw in candidates:
        candidate = _as_candidate(raw)

        if not candidate.text:
            logger.debug("Skipping candidate with empty text (label=%s)", candidate.label)
            record_resolution("empty")
            continue

        pos = locate(document, candidate.text)
        if pos == -1:
            logger.debug(
                "Candidate text not found in document: label=%s text='%s'",
                candidate.label,
                candidate.text[:MAX_TEXT_LOG_CHARS],
            )
            record_resolution("not_found")
            continue

        annotations.append(
            Annotation(
                label=candidate.label,
                start=pos,
                end=pos + len(candidate.text),
                text=candidate.text,
            )
        )
        record_resolution("resolved")

    return annotations
