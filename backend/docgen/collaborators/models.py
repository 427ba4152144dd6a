"""
Data shapes exchanged with the external collaborators.

Store-side records (templates, artifacts, destinations) are plain
dataclasses.  Registry-side records (document types and school
entities) are pydantic models: their source rows keep lists as
comma-separated strings and maps as JSON text, and the validators
below normalise both.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ═══════════════════════════════════════════════════════════
#  Store records
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TemplateInfo:
    """A template as returned by the template repository."""

    id: str
    name: str
    content_type: str
    link: str = ""


@dataclass(frozen=True)
class StoredArtifact:
    """A file created in the content store."""

    id: str
    name: str
    content_type: str
    link: str = ""
    parents: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Destination:
    """A registered destination container (folder)."""

    id: str
    name: str
    link: str = ""
    path: str = ""


# ═══════════════════════════════════════════════════════════
#  Validators shared by registry models
# ═══════════════════════════════════════════════════════════

def _split_emails(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip() for item in items if item and str(item).strip()]


def _load_json(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return {}
        return json.loads(text)
    return value if value is not None else {}


# ═══════════════════════════════════════════════════════════
#  Document type metadata
# ═══════════════════════════════════════════════════════════

class DocumentType(BaseModel):
    """
    Generation metadata for one document type.

    permissions maps a recipient role ("coordinator", "referent",
    "subject_teacher", "tutor", "self") to per-target access levels::

        {"coordinator": {"file": "WRITE", "folder": "READ"}}
    """

    model_config = ConfigDict(frozen=True)

    key: str
    name: str = ""
    parent_path: str | None = None
    subfolder_pattern: str | None = None
    name_pattern: str | None = None
    templates: dict[str, str] = Field(default_factory=dict)
    extra_params: dict[str, Any] = Field(default_factory=dict)
    referent_role: str | None = None
    permissions: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("templates", mode="before")
    @classmethod
    def _parse_templates(cls, value: Any) -> Any:
        # A bare id means "same template for every variant"
        if isinstance(value, str) and value.strip() and not value.strip().startswith("{"):
            return {"DEFAULT": value.strip()}
        return _load_json(value)

    @field_validator("extra_params", mode="before")
    @classmethod
    def _parse_extra_params(cls, value: Any) -> Any:
        return _load_json(value)

    @field_validator("permissions", mode="before")
    @classmethod
    def _parse_permissions(cls, value: Any) -> Any:
        value = _load_json(value)
        return {
            str(role).lower(): {str(target).lower(): str(level).upper() for target, level in (targets or {}).items()}
            for role, targets in value.items()
        }

    def permission_for(self, role: str, target: str) -> str | None:
        """Configured access level for *role* on *target* ("file" / "folder")."""
        return self.permissions.get(role.lower(), {}).get(target.lower())


# ═══════════════════════════════════════════════════════════
#  School entities
# ═══════════════════════════════════════════════════════════

class SchoolClass(BaseModel):
    """A class (group of students) and the staff attached to it."""

    model_config = ConfigDict(frozen=True)

    name: str
    course_year: int | None = None
    section: str = ""
    track: str = ""
    active: bool = True
    coordinators: list[str] = Field(default_factory=list)
    tutors: list[str] = Field(default_factory=list)
    subject_teachers: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("coordinators", "tutors", mode="before")
    @classmethod
    def _split(cls, value: Any) -> list[str]:
        return _split_emails(value)

    @field_validator("subject_teachers", mode="before")
    @classmethod
    def _split_subjects(cls, value: Any) -> dict[str, list[str]]:
        value = _load_json(value)
        return {str(code).upper(): _split_emails(emails) for code, emails in value.items()}

    def coordinator_emails(self) -> list[str]:
        return list(self.coordinators)

    def tutor_emails(self) -> list[str]:
        return list(self.tutors)

    def subject_teacher_emails(self, subject_code: str) -> list[str]:
        return list(self.subject_teachers.get(subject_code.upper(), []))


class Student(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    full_name: str = ""
    class_name: str | None = None


class Teacher(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str = ""


class Role(BaseModel):
    """An institutional role, optionally held by a single person."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str = ""
    holder_email: str | None = None
