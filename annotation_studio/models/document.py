"""
Document — an uploaded resume, immutable once stored.
"""
from dataclasses import dataclass

from annotation_studio.config.constants import STATUS_ANNOTATED, STATUS_RAW


@dataclass(frozen=True)
class Document:
    """Resume text plus the metadata stored alongside it."""

    id: str
    filename: str
    content: str
    upload_date: str                    # ISO-8601
    status: str = STATUS_RAW            # "raw" | "annotated"

    @property
    def is_annotated(self) -> bool:
        return self.status == STATUS_ANNOTATED

    @property
    def meta(self) -> dict:
        """Export metadata for this document."""
        return {"filename": self.filename, "id": self.id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "content": self.content,
            "upload_date": self.upload_date,
            "status": self.status,
        }
