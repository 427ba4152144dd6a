"""
PersistReferenceStep — upserts the generated-artifact record.

The record is keyed by the artifact id: a second run for the same
artifact updates the existing record (keeping its created_at) instead
of inserting a duplicate.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from docgen.core.constants import ArtifactStatus
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PersistenceError
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


class PersistReferenceStep(GenerationStep):
    """Insert or update the record in the generated-artifacts registry."""

    name = "persist_reference"
    description = "Save the artifact reference to the generated-artifacts registry"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["artifacts", "created_artifact"])

        registry = ctx.collaborators.artifacts
        record = self.build_record(ctx)
        artifact_id = record["id"]

        existing = registry.find_by_id(artifact_id)
        if existing is not None:
            record.pop("created_at", None)
            saved = registry.update(artifact_id, record)
            if saved is None:
                raise PersistenceError(
                    f"Generated artifact '{artifact_id}' disappeared during update",
                    step_name=self.name,
                )
            self.log(ctx, f"Reference updated for artifact '{artifact_id}'.")
        else:
            saved = registry.insert(record)
            self.log(ctx, f"Reference inserted for artifact '{artifact_id}'.")

        self.publish(ctx, "persisted_reference", saved)

    def build_record(self, ctx: GenerationContext) -> dict[str, Any]:
        artifact = ctx.created_artifact
        destination = ctx.destination
        now = datetime.now(timezone.utc)

        record: dict[str, Any] = {
            "id": artifact.id,
            "document_type": ctx.document_type,
            "name": artifact.name,
            "status": ArtifactStatus.CREATED.value,
            "destination_path": destination.path if destination else None,
            "destination_id": destination.id if destination else None,
            "link": artifact.link or None,
            "class_name": ctx.class_name,
            "student_email": ctx.student_entity.email if ctx.student_entity else None,
            "teacher_email": ctx.teacher_entity.email if ctx.teacher_entity else None,
            "subject_code": ctx.subject_entity.code if ctx.subject_entity else None,
            "run_id": ctx.run_id,
            "created_at": now,
            "modified_at": now,
        }
        return {key: value for key, value in record.items() if value is not None}
