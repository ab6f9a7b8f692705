"""
Unit tests for the export serializer (dataset records and JSONL lines).
"""
import json

import pytest
from jsonschema import validate

from annotation_studio.annotation.export import (
    iter_dataset_lines,
    record_to_line,
    to_dataset_record,
    write_dataset,
)
from annotation_studio.config.schemas import DATASET_RECORD_SCHEMA
from annotation_studio.errors import PreconditionError
from annotation_studio.models.annotation import Annotation
from annotation_studio.models.dataset import RecordMeta


META = {"filename": "cv.txt", "id": "doc-1"}


class TestToDatasetRecord:
    def test_spans_copied_verbatim(self):
        anns = [Annotation("SKILL", 7, 13, "Python")]
        record = to_dataset_record("I know Python", META, anns)

        assert record.text == "I know Python"
        assert record.meta == RecordMeta(filename="cv.txt", id="doc-1")
        assert len(record.spans) == 1
        assert record.spans[0].model_dump() == {"label": "SKILL", "start": 7, "end": 13, "text": "Python"}

    def test_does_not_resort(self):
        doc = "one two three"
        anns = [Annotation("B", 8, 13, "three"), Annotation("A", 0, 3, "one")]
        record = to_dataset_record(doc, META, anns)
        assert [s.label for s in record.spans] == ["B", "A"]

    def test_keeps_overlapping_spans(self):
        doc = "abcdef"
        anns = [Annotation("A", 0, 3, "abc"), Annotation("B", 2, 5, "cde")]
        record = to_dataset_record(doc, META, anns)
        assert len(record.spans) == 2

    def test_no_annotations(self):
        record = to_dataset_record("text", META, [])
        assert record.spans == []

    def test_accepts_record_meta(self):
        record = to_dataset_record("x", RecordMeta(**META), [])
        assert record.meta.id == "doc-1"

    @pytest.mark.parametrize(
        "bad",
        [
            Annotation("X", 5, 3, ""),
            Annotation("X", -1, 2, "ab"),
            Annotation("X", 0, 99, "abc"),
            Annotation("X", "0", 2, "ab"),
            Annotation("X", 0, 5, "WRONG"),
            {"label": "X", "start": 0, "end": 1, "text": "a"},
        ],
    )
    def test_malformed_annotation_raises(self, bad):
        with pytest.raises(PreconditionError):
            to_dataset_record("abcdef", META, [bad])

    def test_text_mismatch_not_emitted(self):
        with pytest.raises(PreconditionError, match="does not match"):
            to_dataset_record("hello world", META, [Annotation("X", 0, 5, "WRONG")])


class TestRecordToLine:
    def test_exact_shape(self):
        record = to_dataset_record("I know Python", META, [Annotation("SKILL", 7, 13, "Python")])
        line = record_to_line(record)

        assert "\n" not in line
        data = json.loads(line)
        assert list(data.keys()) == ["text", "meta", "spans"]
        assert data == {
            "text": "I know Python",
            "meta": {"filename": "cv.txt", "id": "doc-1"},
            "spans": [{"label": "SKILL", "start": 7, "end": 13, "text": "Python"}],
        }
        validate(instance=data, schema=DATASET_RECORD_SCHEMA)

    def test_newlines_in_text_escaped(self):
        line = record_to_line(to_dataset_record("a\nb", META, []))
        assert "\n" not in line
        assert json.loads(line)["text"] == "a\nb"

    def test_non_ascii_preserved(self):
        line = record_to_line(to_dataset_record("Zürich", META, []))
        assert "Zürich" in line


class TestStoreExport:
    def test_only_annotated_documents(self, store, resume_text, mock_annotations):
        annotated = store.add_document("annotated.txt", resume_text)
        store.add_document("raw.txt", "not annotated yet")
        store.replace_annotations(annotated.id, mock_annotations)

        lines = list(iter_dataset_lines(store))
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["meta"] == {"filename": "annotated.txt", "id": annotated.id}
        assert len(data["spans"]) == len(mock_annotations)
        for span in data["spans"]:
            assert resume_text[span["start"]:span["end"]] == span["text"]

    def test_write_dataset(self, store, tmp_path):
        doc = store.add_document("a.txt", "I know Python")
        store.replace_annotations(doc.id, [Annotation("SKILL", 7, 13, "Python")])
        out = tmp_path / "dataset.jsonl"

        count = write_dataset(store, out)

        assert count == 1
        lines = out.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        validate(instance=json.loads(lines[0]), schema=DATASET_RECORD_SCHEMA)

    def test_stored_order_preserved(self, store):
        doc = store.add_document("a.txt", "abcdef")
        store.replace_annotations(doc.id, [Annotation("B", 3, 6, "def"), Annotation("A", 0, 3, "abc")])

        data = json.loads(next(iter_dataset_lines(store)))
        assert [s["label"] for s in data["spans"]] == ["B", "A"]

    def test_write_empty_dataset(self, store, tmp_path):
        out = tmp_path / "empty.jsonl"
        assert write_dataset(store, out) == 0
        assert out.read_text(encoding="utf-8") == ""
