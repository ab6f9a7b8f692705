"""
Render segments — contiguous plain or labeled slices of a document.
"""
from dataclasses import dataclass
from typing import Union

from annotation_studio.config.constants import DEFAULT_LABEL_STYLE, LABEL_STYLES


@dataclass(frozen=True)
class PlainSegment:
    """Unlabeled text between annotations."""

    text: str

    def to_dict(self) -> dict:
        return {"type": "plain", "text": self.text}


@dataclass(frozen=True)
class LabeledSegment:
    """Highlighted text carrying an annotation label."""

    label: str
    text: str

    @property
    def style(self) -> str:
        """Display style for the label; unknown labels get the default style."""
        return LABEL_STYLES.get(self.label, DEFAULT_LABEL_STYLE)

    def to_dict(self) -> dict:
        return {"type": "labeled", "label": self.label, "text": self.text, "style": self.style}


Segment = Union[PlainSegment, LabeledSegment]
