"""
GeneratedArtifact — one row per artifact produced by the pipeline.

Keyed by the id the content store gave the artifact, so persisting the
same artifact twice updates this row instead of adding another.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Column, DateTime, String

from docgen.db.models.base import Base, utcnow


class GeneratedArtifact(Base):
    """Registry record of a generated document."""

    __tablename__ = "generated_artifacts"

    id = Column(String(255), primary_key=True)

    # ── Identity ──────────────────────────────
    document_type = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default="CREATED")

    # ── Location ──────────────────────────────
    destination_path = Column(String(1000), nullable=True)
    destination_id = Column(String(255), nullable=True)
    link = Column(String(1000), nullable=True)

    # ── Associated entities ───────────────────
    class_name = Column(String(50), nullable=True, index=True)
    student_email = Column(String(255), nullable=True)
    teacher_email = Column(String(255), nullable=True)
    subject_code = Column(String(50), nullable=True)
    run_id = Column(String(64), nullable=True)

    # Anything else the caller puts in the record
    extra = Column(JSON, nullable=False, default=dict)

    # ── Timestamps ────────────────────────────
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    COLUMNS = (
        "id", "document_type", "name", "status", "destination_path", "destination_id", "link",
        "class_name", "student_email", "teacher_email", "subject_code", "run_id",
        "created_at", "modified_at",
    )

    def to_dict(self) -> dict[str, Any]:
        data = {column: getattr(self, column) for column in self.COLUMNS}
        data.update(self.extra or {})
        return {key: value for key, value in data.items() if value is not None}

    def __repr__(self) -> str:
        return f"<GeneratedArtifact {self.id} type={self.document_type} status={self.status}>"
