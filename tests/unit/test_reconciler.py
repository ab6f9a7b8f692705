"""
Unit tests for the span reconciler (document partitioning for display).
"""
import pytest

from annotation_studio.annotation.reconciler import (
    partition,
    partition_to_annotations,
    rendered_annotations,
    validate_annotation,
)
from annotation_studio.config.constants import DEFAULT_LABEL_STYLE, LABEL_STYLES
from annotation_studio.errors import ValidationError
from annotation_studio.models.annotation import Annotation
from annotation_studio.models.segment import LabeledSegment, PlainSegment


def _join(segments):
    return "".join(s.text for s in segments)


class TestPartition:
    """Tests for partition()."""

    def test_overlap_is_skipped(self):
        doc = "abcdef"
        anns = [
            Annotation("A", 0, 3, "abc"),
            Annotation("B", 2, 5, "cde"),
        ]
        assert partition(doc, anns) == [LabeledSegment("A", "abc"), PlainSegment("def")]

    def test_gap_fill(self):
        doc = "hello world"
        anns = [Annotation("X", 6, 11, "world")]
        assert partition(doc, anns) == [PlainSegment("hello "), LabeledSegment("X", "world")]

    def test_no_annotations_single_plain(self):
        assert partition("hello", []) == [PlainSegment("hello")]

    def test_empty_document(self):
        assert partition("", []) == []

    def test_out_of_order_input_sorted(self):
        doc = "one two three"
        anns = [Annotation("B", 8, 13, "three"), Annotation("A", 0, 3, "one")]
        assert partition(doc, anns) == [
            LabeledSegment("A", "one"),
            PlainSegment(" two "),
            LabeledSegment("B", "three"),
        ]

    def test_tie_on_start_keeps_input_order(self):
        doc = "abcdef"
        anns = [Annotation("FIRST", 0, 2, "ab"), Annotation("SECOND", 0, 4, "abcd")]
        segments = partition(doc, anns)
        assert segments[0] == LabeledSegment("FIRST", "ab")
        assert segments[1] == PlainSegment("cdef")

    def test_adjacent_annotations_no_plain_between(self):
        doc = "abcdef"
        anns = [Annotation("A", 0, 3, "abc"), Annotation("B", 3, 6, "def")]
        assert partition(doc, anns) == [LabeledSegment("A", "abc"), LabeledSegment("B", "def")]

    def test_contained_annotation_skipped(self):
        doc = "Stanford University"
        anns = [Annotation("EDU", 0, 19, doc), Annotation("LOC", 0, 8, "Stanford")]
        assert partition(doc, anns) == [LabeledSegment("EDU", doc)]

    def test_segment_text_comes_from_document(self):
        doc = "hello world"
        # Stale text in the annotation does not leak into rendering.
        anns = [Annotation("X", 0, 5, "HELLO")]
        assert partition(doc, anns)[0] == LabeledSegment("X", "hello")

    def test_input_not_mutated(self):
        doc = "one two three"
        anns = [Annotation("B", 8, 13, "three"), Annotation("A", 0, 3, "one")]
        original = list(anns)
        partition(doc, anns)
        assert anns == original

    def test_round_trip(self, resume_text, mock_annotations):
        assert _join(partition(resume_text, mock_annotations)) == resume_text

    def test_round_trip_with_overlaps(self, resume_text, mock_annotations):
        overlapping = mock_annotations + [Annotation("NAME", 0, 4, "Jane")]
        assert _join(partition(resume_text, overlapping)) == resume_text

    def test_idempotent(self, resume_text, mock_annotations):
        first = partition(resume_text, mock_annotations)
        second = partition(resume_text, partition_to_annotations(first))
        assert first == second

    def test_deterministic(self, resume_text, mock_annotations):
        assert partition(resume_text, mock_annotations) == partition(resume_text, mock_annotations)


class TestValidation:
    """Out-of-range and inverted annotations must fail loudly."""

    def test_inverted_span(self):
        with pytest.raises(ValidationError) as exc_info:
            partition("abcdefgh", [Annotation("X", 5, 3, "")])
        assert exc_info.value.annotation == Annotation("X", 5, 3, "")
        assert "X" in str(exc_info.value)

    def test_negative_start(self):
        with pytest.raises(ValidationError):
            partition("abc", [Annotation("X", -1, 2, "ab")])

    def test_end_beyond_document(self):
        with pytest.raises(ValidationError):
            partition("abc", [Annotation("X", 1, 10, "bc")])

    def test_invalid_annotation_fails_even_when_others_are_valid(self):
        anns = [Annotation("A", 0, 1, "a"), Annotation("B", 2, 99, "")]
        with pytest.raises(ValidationError) as exc_info:
            partition("abc", anns)
        assert exc_info.value.annotation.label == "B"

    def test_non_integer_offsets(self):
        with pytest.raises(ValidationError):
            validate_annotation("abc", Annotation("X", "0", 2, "ab"))

    def test_boundary_span_is_valid(self):
        validate_annotation("abc", Annotation("X", 0, 3, "abc"))
        validate_annotation("abc", Annotation("X", 3, 3, ""))


class TestRenderedAnnotations:
    def test_excludes_skipped(self):
        doc = "abcdef"
        a = Annotation("A", 0, 3, "abc")
        b = Annotation("B", 2, 5, "cde")
        c = Annotation("C", 4, 6, "ef")
        assert rendered_annotations(doc, [b, c, a]) == [a, c]


class TestPartitionToAnnotations:
    def test_offsets_from_running_length(self):
        segments = [PlainSegment("hello "), LabeledSegment("X", "world"), PlainSegment("!")]
        assert partition_to_annotations(segments) == [Annotation("X", 6, 11, "world")]

    def test_empty(self):
        assert partition_to_annotations([]) == []


class TestSegmentStyle:
    def test_known_label_style(self):
        assert LabeledSegment("SKILL", "Python").style == LABEL_STYLES["SKILL"]

    def test_unknown_label_gets_default_style(self):
        assert LabeledSegment("HOBBY", "chess").style == DEFAULT_LABEL_STYLE

    def test_to_dict(self):
        assert PlainSegment("x").to_dict() == {"type": "plain", "text": "x"}
        d = LabeledSegment("ORG", "Acme").to_dict()
        assert d["label"] == "ORG"
        assert d["style"] == LABEL_STYLES["ORG"]
