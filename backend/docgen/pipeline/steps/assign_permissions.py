"""
AssignPermissionsStep — shares the artifact and its folder.

For each recipient role the step resolves the e-mail addresses from the
context entities and the role registry, then reads the level configured
for that role on the file and on the folder:

    coordinator      class coordinators
    referent         holder of the document type's referent role
    subject_teacher  class teachers of the current subject
    tutor            class tutors
    self             the student the document is about

Entries from the "permissions" config are merged on top, in the form::

    {"file": {"secretary": {"level": "READ", "emails": ["a@school.it"]}},
     "folder": {...}}

Levels are mapped to grant levels (READ/LETTURA → reader, ...).  NONE is
skipped silently; an unknown level logs a WARN and grants nothing.

Grants are recorded on the context as they are made.  When the guard
retries the step, grants already made by an earlier attempt are skipped.
"""

from __future__ import annotations

from typing import Any

from docgen.collaborators.models import DocumentType
from docgen.core.constants import (
    ACCESS_LEVEL_GRANTS,
    NO_ACCESS_LEVELS,
    GrantLevel,
    LogLevel,
    PermissionTarget,
    RecipientRole,
)
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


def map_access_level(level: str | None) -> GrantLevel | None:
    """Grant level for an internal access level label, or None if unknown."""
    if not level:
        return None
    return ACCESS_LEVEL_GRANTS.get(str(level).strip().upper())


class AssignPermissionsStep(GenerationStep):
    """Grant access on the artifact and the destination folder."""

    name = "assign_permissions"
    description = "Assign file and folder permissions by recipient role"

    principal_type = "user"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["permissions", "created_artifact"])
        self.log(ctx, "Assigning permissions.")

        plan = self._collect(ctx)
        if not plan[PermissionTarget.FILE] and not plan[PermissionTarget.FOLDER]:
            self.log(ctx, "No permission configuration found. Step skipped.")
            self.publish(ctx, "applied_permissions", {"file": [], "folder": []})
            return

        # partial result of an earlier attempt, if any
        applied: dict[str, list[dict[str, Any]]] = (
            ctx.result("applied_permissions", step=self.name) or {"file": [], "folder": []}
        )
        ctx.set_result(self.name, "applied_permissions", applied)

        self._apply(ctx, ctx.created_artifact.id, plan[PermissionTarget.FILE], PermissionTarget.FILE, applied["file"])
        if ctx.destination is not None:
            self._apply(ctx, ctx.destination.id, plan[PermissionTarget.FOLDER], PermissionTarget.FOLDER, applied["folder"])

        self.publish(ctx, "applied_permissions", applied)
        self.log(ctx, f"{len(applied['file']) + len(applied['folder'])} permission(s) applied.")

    # ─── Collection ────────────────────────────────────

    def _collect(self, ctx: GenerationContext) -> dict[str, dict[str, dict[str, Any]]]:
        plan: dict[str, dict[str, dict[str, Any]]] = {PermissionTarget.FILE: {}, PermissionTarget.FOLDER: {}}

        doc_type = self.document_type_info(ctx)
        if doc_type is None:
            self.log(ctx, f"No metadata for document type '{ctx.document_type}'; role permissions skipped.", LogLevel.WARN)
        else:
            for role in RecipientRole:
                emails = self.emails_for(ctx, role, doc_type)
                if not emails:
                    continue
                for target in PermissionTarget:
                    level = doc_type.permission_for(role, target)
                    if level and level.upper() not in NO_ACCESS_LEVELS:
                        plan[target][role.value] = {"level": level, "emails": emails}

        configured = self.get_config(ctx, "permissions", {}) or {}
        for target in PermissionTarget:
            plan[target].update(configured.get(target.value) or {})

        return plan

    def emails_for(self, ctx: GenerationContext, role: RecipientRole, doc_type: DocumentType) -> list[str]:
        emails: list[str] = []
        school_class = ctx.class_entity

        if role == RecipientRole.COORDINATOR and school_class is not None:
            emails = school_class.coordinator_emails()
        elif role == RecipientRole.TUTOR and school_class is not None:
            emails = school_class.tutor_emails()
        elif role == RecipientRole.SUBJECT_TEACHER and school_class is not None:
            subject_code = ctx.subject_entity.code if ctx.subject_entity else ctx.param("subject")
            if subject_code:
                emails = school_class.subject_teacher_emails(subject_code)
        elif role == RecipientRole.REFERENT and doc_type.referent_role:
            roles = ctx.collaborators.roles
            holder = roles.find_by_code(doc_type.referent_role) if roles is not None else None
            if holder is not None and holder.holder_email:
                emails = [holder.holder_email]
        elif role == RecipientRole.SELF and ctx.student_entity is not None:
            emails = [ctx.student_entity.email]

        # de-duplicate, keep order
        return list(dict.fromkeys(email for email in emails if email))

    # ─── Application ───────────────────────────────────

    def _apply(
        self,
        ctx: GenerationContext,
        target_id: str,
        entries: dict[str, dict[str, Any]],
        target: PermissionTarget,
        applied: list[dict[str, Any]],
    ) -> None:
        service = ctx.collaborators.permissions
        done = {(grant["target_id"], grant["email"], grant["level"]) for grant in applied}

        for label, entry in entries.items():
            emails = entry.get("emails") or []
            level = entry.get("level")
            if not emails or (level and str(level).upper() in NO_ACCESS_LEVELS):
                continue

            grant_level = map_access_level(level)
            if grant_level is None:
                self.log(ctx, f"Unrecognised permission '{level}' for role '{label}'.", LogLevel.WARN)
                continue

            for email in emails:
                if (target_id, email, grant_level.value) in done:
                    continue
                service.grant(target_id, email, grant_level.value, self.principal_type)
                done.add((target_id, email, grant_level.value))
                applied.append({
                    "role": label,
                    "email": email,
                    "level": grant_level.value,
                    "target": target.value,
                    "target_id": target_id,
                })
                self.log(ctx, f"Permission {grant_level} granted to {email} on {target} '{target_id}'.")
