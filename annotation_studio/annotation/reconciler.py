"""
Span Reconciler — partitions a document into plain and labeled segments.

Rendering rules:
    1. Every annotation is validated against the document first.
    2. Annotations are stably sorted by start offset (ties keep input order).
    3. A cursor walks left to right; gaps become PlainSegments, annotations
       become LabeledSegments and advance the cursor to their end.
    4. An annotation starting before the cursor overlaps one already
       rendered and is skipped. It stays valid for storage and export.

Concatenating the segment texts always reproduces the document.
"""
import logging
from typing import Iterable, List, Tuple

from annotation_studio.errors import ValidationError
from annotation_studio.metrics import record_overlap_skip, record_validation_error
from annotation_studio.models.annotation import Annotation
from annotation_studio.models.segment import LabeledSegment, PlainSegment, Segment

logger = logging.getLogger(__name__)


def validate_annotation(document: str, annotation: Annotation) -> None:
    """
    Check that *annotation* addresses a real span of *document*.

    Raises:
        ValidationError: If offsets are not integers, fall outside
            ``[0, len(document)]``, or are inverted.
    """
    start, end = annotation.start, annotation.end

    if isinstance(start, bool) or isinstance(end, bool) or not isinstance(start, int) or not isinstance(end, int):
        raise ValidationError(annotation, "offsets must be integers")
    if start > end:
        raise ValidationError(annotation, f"start {start} is after end {end}")
    if start < 0 or end > len(document):
        raise ValidationError(
            annotation,
            f"span [{start},{end}] outside document of length {len(document)}",
        )


def _walk(document: str, annotations: Iterable[Annotation]) -> Tuple[List[Segment], List[Annotation]]:
    """Shared cursor walk: returns (segments, rendered annotations)."""
    annotations = list(annotations)
    for ann in annotations:
        try:
            validate_annotation(document, ann)
        except ValidationError:
            record_validation_error("partition", "out_of_range")
            raise

    ordered = sorted(annotations, key=lambda a: a.start)

    segments: List[Segment] = []
    rendered: List[Annotation] = []
    cursor = 0

    for ann in ordered:
        if ann.start < cursor:
            logger.debug("Skipping overlapping annotation %r (cursor=%d)", ann, cursor)
            record_overlap_skip()
            continue

        if ann.start > cursor:
            segments.append(PlainSegment(document[cursor:ann.start]))

        segments.append(LabeledSegment(ann.label, document[ann.start:ann.end]))
        rendered.append(ann)
        cursor = ann.end

    if cursor < len(document):
        segments.append(PlainSegment(document[cursor:]))

    return segments, rendered


def partition(document: str, annotations: Iterable[Annotation]) -> List[Segment]:
    """
    Partition *document* into contiguous segments for display.

    Args:
        document: Full resume text.
        annotations: Annotations in any order, possibly overlapping.

    Returns:
        Segments in reading order. No annotations gives a single
        PlainSegment, an empty document gives an empty list.

    Raises:
        ValidationError: If any annotation does not fit the document.
    """
    segments, _ = _walk(document, annotations)
    return segments


def rendered_annotations(document: str, annotations: Iterable[Annotation]) -> List[Annotation]:
    """The annotations that :func:`partition` actually renders, in reading order."""
    _, rendered = _walk(document, annotations)
    return rendered


def partition_to_annotations(segments: Iterable[Segment]) -> List[Annotation]:
    """
    Re-derive annotations from a rendered partition.

    Offsets are recomputed from the running length of the segment texts, so
    the result is consistent with the document the segments reconstruct.
    """
    annotations: List[Annotation] = []
    offset = 0

    for seg in segments:
        end = offset + len(seg.text)
        if isinstance(seg, LabeledSegment):
            annotations.append(Annotation(label=seg.label, start=offset, end=end, text=seg.text))
        offset = end

    return annotations
