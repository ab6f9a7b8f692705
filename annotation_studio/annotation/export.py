"""
Export Serializer — projects stored annotations into dataset records.

Record shape (one JSONL line per annotated document):
    {"text": ..., "meta": {"filename": ..., "id": ...},
     "spans": [{"label": ..., "start": ..., "end": ..., "text": ...}]}

Spans are copied verbatim and in stored order; nothing is re-sorted. A
malformed annotation here means an upstream stage let it through, so it
fails loudly instead of producing a corrupt line.
"""
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Union

from annotation_studio.errors import PreconditionError
from annotation_studio.metrics import record_exported, timed_stage
from annotation_studio.models.annotation import Annotation
from annotation_studio.models.dataset import DatasetRecord, DatasetSpan, RecordMeta

logger = logging.getLogger(__name__)


def _check_precondition(annotation: Any) -> None:
    if not isinstance(annotation, Annotation):
        raise PreconditionError(annotation, "not an Annotation")

    start, end = annotation.start, annotation.end
    if isinstance(start, bool) or isinstance(end, bool) or not isinstance(start, int) or not isinstance(end, int):
        raise PreconditionError(annotation, "offsets must be integers")
    if start < 0 or end < start:
        raise PreconditionError(annotation, f"invalid span [{start},{end}]")
    if not isinstance(annotation.label, str) or not isinstance(annotation.text, str):
        raise PreconditionError(annotation, "label and text must be strings")


def to_dataset_record(
    document: str,
    meta: Union[RecordMeta, dict],
    annotations: Iterable[Annotation],
) -> DatasetRecord:
    """
    Build the dataset record for one document.

    Args:
        document: Full resume text.
        meta: ``{"filename", "id"}`` of the document.
        annotations: Already-validated annotations.

    Returns:
        DatasetRecord with spans in input order.

    Raises:
        PreconditionError: If any annotation is malformed.
    """
    spans: List[DatasetSpan] = []
    for ann in annotations:
        _check_precondition(ann)
        if ann.end > len(document):
            raise PreconditionError(ann, f"end {ann.end} beyond document length {len(document)}")
        if ann.text != document[ann.start:ann.end]:
            raise PreconditionError(ann, "text does not match document[start:end]")
        spans.append(DatasetSpan(label=ann.label, start=ann.start, end=ann.end, text=ann.text))

    if not isinstance(meta, RecordMeta):
        meta = RecordMeta(**meta)

    return DatasetRecord(text=document, meta=meta, spans=spans)


def record_to_line(record: DatasetRecord) -> str:
    """Serialize *record* as one self-contained JSON line (no trailing newline)."""
    return json.dumps(record.model_dump(), ensure_ascii=False)


def iter_dataset_lines(store: Any) -> Iterator[str]:
    """
    Yield one JSONL line per annotated document in *store*.

    *store* must provide ``annotated_documents()`` and ``get_annotations(id)``.
    """
    for doc in store.annotated_documents():
        annotations = store.get_annotations(doc.id)
        record = to_dataset_record(doc.content, doc.meta, annotations)
        yield record_to_line(record)


def write_dataset(store: Any, path: Union[str, Path]) -> int:
    """
    Write the full dataset to *path* as newline-delimited JSON.

    Returns:
        Number of records written.
    """
    path = Path(path)
    count = 0

    with timed_stage("export"):
        with open(path, "w", encoding="utf-8") as f:
            for line in iter_dataset_lines(store):
                f.write(line + "\n")
                count += 1

    record_exported(count)
    logger.info("Exported %d dataset records to %s", count, path)
    return count
