"""
Annotation models — unresolved candidates and resolved character spans.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class AnnotationCandidate:
    """A (label, text) guess from the external model, without offsets."""

    label: str
    text: str

    @classmethod
    def from_dict(cls, data: dict) -> "AnnotationCandidate":
        return cls(label=str(data.get("label", "")), text=str(data.get("text", "")))

    def to_dict(self) -> dict:
        return {"label": self.label, "text": self.text}


@dataclass(frozen=True)
class Annotation:
    """A labeled half-open span [start, end) over a document."""

    label: str
    start: int
    end: int
    text: str

    def overlaps(self, other: "Annotation") -> bool:
        """Check if two annotations have overlapping spans."""
        return not (self.end <= other.start or other.end <= self.start)

    def span_length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "start": self.start,
            "end": self.end,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Annotation":
        """
        Build an Annotation from a payload or a persisted row.

        Accepts both ``start``/``end`` and the stored ``start_index``/``end_index``
        keys. Offsets are taken as given; callers rendering the result must
        validate them against the document.
        """
        start = data["start"] if "start" in data else data["start_index"]
        end = data["end"] if "end" in data else data["end_index"]
        return cls(
            label=str(data["label"]),
            start=int(start),
            end=int(end),
            text=str(data.get("text", "")),
        )

    def __repr__(self) -> str:
        return f"Annotation({self.label}, [{self.start},{self.end}], '{self.text}')"
