"""
Generated-artifact repository: data access for the generated_artifacts table.

Repository rules:
- Pure data-access logic only
- Every function receives a Session explicitly
- Functions flush, but never commit

SqlArtifactRegistry wraps these functions behind the registry interface
the pipeline uses (find_by_id / insert / update), one transaction per call.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from docgen.core.logging import get_logger
from docgen.db.models.base import utcnow
from docgen.db.models.generated_artifact import GeneratedArtifact
from docgen.db.session import build_engine, build_session_factory, init_db, session_scope
from docgen.pipeline.errors import PersistenceError

logger = get_logger(__name__)

_COLUMNS = frozenset(GeneratedArtifact.COLUMNS)


def _split(record: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    columns = {key: value for key, value in record.items() if key in _COLUMNS}
    extra = {key: value for key, value in record.items() if key not in _COLUMNS}
    return columns, extra


def get_artifact(db: Session, artifact_id: str) -> GeneratedArtifact | None:
    """Fetch a record by artifact id."""
    return db.get(GeneratedArtifact, artifact_id)


def list_artifacts(
    db: Session,
    *,
    document_type: str | None = None,
    class_name: str | None = None,
) -> list[GeneratedArtifact]:
    """List records, optionally filtered by type and class, newest first."""
    stmt = select(GeneratedArtifact)
    if document_type is not None:
        stmt = stmt.where(GeneratedArtifact.document_type == document_type)
    if class_name is not None:
        stmt = stmt.where(GeneratedArtifact.class_name == class_name)
    stmt = stmt.order_by(GeneratedArtifact.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def create_artifact(db: Session, record: dict[str, Any]) -> GeneratedArtifact:
    """Insert a new record."""
    columns, extra = _split(record)
    row = GeneratedArtifact(**columns, extra=extra)
    db.add(row)
    db.flush()
    return row


def update_artifact(db: Session, artifact_id: str, record: dict[str, Any]) -> GeneratedArtifact | None:
    """Update an existing record in place.  created_at is never overwritten."""
    row = db.get(GeneratedArtifact, artifact_id)
    if row is None:
        return None

    columns, extra = _split(record)
    columns.pop("id", None)
    columns.pop("created_at", None)
    for key, value in columns.items():
        setattr(row, key, value)
    if "modified_at" not in columns:
        row.modified_at = utcnow()
    if extra:
        row.extra = {**(row.extra or {}), **extra}

    db.flush()
    return row


class SqlArtifactRegistry:
    """
    Generated-artifacts registry backed by SQLAlchemy.

    Usage::

        registry = SqlArtifactRegistry.from_url("sqlite:///./artifacts.db")
        collaborators = Collaborators.default(artifacts=registry)
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    @classmethod
    def from_url(cls, url: str | None = None, *, create_tables: bool = True) -> SqlArtifactRegistry:
        return cls.from_engine(build_engine(url), create_tables=create_tables)

    @classmethod
    def from_engine(cls, engine: Engine, *, create_tables: bool = True) -> SqlArtifactRegistry:
        if create_tables:
            init_db(engine)
        return cls(build_session_factory(engine))

    def find_by_id(self, artifact_id: str) -> dict[str, Any] | None:
        with session_scope(self.session_factory) as db:
            row = get_artifact(db, artifact_id)
            return row.to_dict() if row is not None else None

    def insert(self, record: dict[str, Any]) -> dict[str, Any]:
        try:
            with session_scope(self.session_factory) as db:
                row = create_artifact(db, record)
                saved = row.to_dict()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Database error while inserting artifact '{record.get('id')}': {exc}") from exc
        logger.info("Generated artifact inserted", artifact_id=saved["id"])
        return saved

    def update(self, artifact_id: str, record: dict[str, Any]) -> dict[str, Any] | None:
        try:
            with session_scope(self.session_factory) as db:
                row = update_artifact(db, artifact_id, record)
                saved = row.to_dict() if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Database error while updating artifact '{artifact_id}': {exc}") from exc
        if saved is not None:
            logger.info("Generated artifact updated", artifact_id=artifact_id)
        return saved

    def list(self, **filters: Any) -> list[dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            return [row.to_dict() for row in list_artifacts(db, **filters)]
