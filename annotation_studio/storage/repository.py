"""
Annotation Store — relational persistence for resumes and their annotations.

Two tables:
  resumes     (id, filename, content, upload_date, status)
  annotations (id, resume_id → resumes.id, label, start_index, end_index, text, position)

A document's annotation set is only ever replaced as a whole, inside a single
transaction (delete + insert + status update). Readers see either the old
set or the new one. Annotations load back in the order they were saved.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from annotation_studio.config.constants import STATUS_ANNOTATED, STATUS_RAW
from annotation_studio.config.settings import DATABASE_URL
from annotation_studio.errors import StorageError
from annotation_studio.models.annotation import Annotation
from annotation_studio.models.document import Document

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS resumes (
        id TEXT PRIMARY KEY,
        filename TEXT NOT NULL,
        content TEXT NOT NULL,
        upload_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'raw'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS annotations (
        id TEXT PRIMARY KEY,
        resume_id TEXT NOT NULL REFERENCES resumes(id),
        label TEXT NOT NULL,
        start_index INTEGER NOT NULL,
        end_index INTEGER NOT NULL,
        text TEXT NOT NULL,
        position INTEGER NOT NULL DEFAULT 0
    )
    """,
]


def _row_to_document(row) -> Document:
    return Document(
        id=row.id,
        filename=row.filename,
        content=row.content,
        upload_date=row.upload_date,
        status=row.status,
    )


class AnnotationStore:
    """SQLAlchemy-backed store for resumes and annotation sets."""

    def __init__(self, engine: Optional[Engine] = None, url: Optional[str] = None) -> None:
        self.engine = engine if engine is not None else create_engine(url or DATABASE_URL, future=True)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def init_schema(self) -> None:
        """Create tables if missing. No migrations."""
        try:
            with self.engine.begin() as conn:
                for stmt in SCHEMA_STATEMENTS:
                    conn.execute(text(stmt))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to initialise schema: {exc}") from exc

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(self, filename: str, content: str) -> Document:
        doc = Document(
            id=str(uuid.uuid4()),
            filename=filename,
            content=content,
            upload_date=datetime.now(timezone.utc).isoformat(),
            status=STATUS_RAW,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    text(
                        "INSERT INTO resumes (id, filename, content, upload_date, status) "
                        "VALUES (:id, :filename, :content, :upload_date, :status)"
                    ),
                    doc.to_dict(),
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to store document '{filename}': {exc}") from exc

        logger.info("Stored document %s (%s, %d chars)", doc.id, filename, len(content))
        return doc

    def list_documents(self) -> List[Document]:
        """All documents, newest upload first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM resumes ORDER BY upload_date DESC")
            ).all()
        return [_row_to_document(r) for r in rows]

    def get_document(self, document_id: str) -> Optional[Document]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT * FROM resumes WHERE id = :id"), {"id": document_id}
            ).first()
        return _row_to_document(row) if row else None

    def annotated_documents(self) -> List[Document]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM resumes WHERE status = :status ORDER BY upload_date"),
                {"status": STATUS_ANNOTATED},
            ).all()
        return [_row_to_document(r) for r in rows]

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    def get_annotations(self, document_id: str) -> List[Annotation]:
        """Stored annotations for a document, verbatim and in saved order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                text(
                    "SELECT label, start_index, end_index, text FROM annotations "
                    "WHERE resume_id = :id ORDER BY position"
                ),
                {"id": document_id},
            ).all()
        return [
            Annotation(label=r.label, start=r.start_index, end=r.end_index, text=r.text)
            for r in rows
        ]

    def replace_annotations(self, document_id: str, annotations: Iterable[Annotation]) -> int:
        """
        Atomically replace a document's annotation set and mark it annotated.

        Returns:
            Number of annotations stored.

        Raises:
            StorageError: Unknown document or any database failure; on failure
                the previous annotation set is left untouched.
        """
        annotations = list(annotations)
        try:
            with self.engine.begin() as conn:
                exists = conn.execute(
                    text("SELECT 1 FROM resumes WHERE id = :id"), {"id": document_id}
                ).first()
                if exists is None:
                    raise StorageError(f"Unknown document: {document_id}")

                conn.execute(
                    text("DELETE FROM annotations WHERE resume_id = :id"), {"id": document_id}
                )
                if annotations:
                    conn.execute(
                        text(
                            "INSERT INTO annotations "
                            "(id, resume_id, label, start_index, end_index, text, position) "
                            "VALUES (:id, :resume_id, :label, :start_index, :end_index, :text, :position)"
                        ),
                        [
                            {
                                "id": str(uuid.uuid4()),
                                "resume_id": document_id,
                                "label": a.label,
                                "start_index": a.start,
                                "end_index": a.end,
                                "text": a.text,
                                "position": position,
                            }
                            for position, a in enumerate(annotations)
                        ],
                    )
                conn.execute(
                    text("UPDATE resumes SET status = :status WHERE id = :id"),
                    {"status": STATUS_ANNOTATED, "id": document_id},
                )
        except SQLAlchemyError as exc:
            logger.error("Annotation save failed for %s: %s", document_id, exc)
            raise StorageError(f"Failed to save annotations for {document_id}: {exc}") from exc

        logger.info("Saved %d annotations for %s", len(annotations), document_id)
        return len(annotations)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, object]:
        """Counts for the dashboard: documents, annotated documents, annotations per label."""
        with self.engine.connect() as conn:
            total_documents = conn.execute(text("SELECT COUNT(*) FROM resumes")).scalar_one()
            annotated = conn.execute(
                text("SELECT COUNT(*) FROM resumes WHERE status = :status"),
                {"status": STATUS_ANNOTATED},
            ).scalar_one()
            total_annotations = conn.execute(text("SELECT COUNT(*) FROM annotations")).scalar_one()
            label_rows = conn.execute(
                text("SELECT label, COUNT(*) AS n FROM annotations GROUP BY label ORDER BY label")
            ).all()

        return {
            "total_documents": total_documents,
            "annotated_documents": annotated,
            "total_annotations": total_annotations,
            "label_stats": {label: n for label, n in label_rows},
        }
