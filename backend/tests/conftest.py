"""Shared fixtures: in-memory collaborators seeded for a REPORT document type."""

from __future__ import annotations

from typing import Any

import pytest

from docgen.collaborators import (
    Collaborators,
    DocumentType,
    Role,
    SchoolClass,
    StoredArtifact,
    Student,
    Subject,
    TemplateInfo,
)
from docgen.core.logging import setup_logging
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.guard import ExecutionGuard, RetryPolicy

GOOGLE_DOC = "application/vnd.google-apps.document"
GOOGLE_SHEET = "application/vnd.google-apps.spreadsheet"

REPORT_TYPE: dict[str, Any] = {
    "key": "REPORT",
    "name": "Class report",
    "parent_path": "Reports/{{ class_name }}",
    "name_pattern": "Report {{ class_name }} - {{ document_type }}",
    "templates": '{"DEFAULT": "tpl-report", "5": "tpl-report-final"}',
    "extra_params": '{"author": "Secretariat"}',
    "referent_role": "REF_REPORTS",
    "permissions": {
        "coordinator": {"file": "WRITE", "folder": "READ"},
        "referent": {"file": "LETTURA", "folder": "NESSUNO"},
    },
}


class RecordingLogger:
    """Logger collaborator that keeps every line."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str]] = []

    def log(self, level: str, message: str) -> None:
        self.lines.append((str(level), message))

    def messages(self, level: str | None = None) -> list[str]:
        return [message for lvl, message in self.lines if level is None or lvl == level]


@pytest.fixture(scope="session", autouse=True)
def configure_logging() -> None:
    """Console logs, warnings and above, for the whole session."""
    setup_logging("WARNING", json_output=False)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def collaborators(recording_logger: RecordingLogger) -> Collaborators:
    bundle = Collaborators.default(logger=recording_logger)

    bundle.store.put_document(
        "tpl-report",
        "Report for {{ class_name }} on {{ today }}. Author: {{ author }}",
        name="Report template",
        content_type=GOOGLE_DOC,
    )
    bundle.store.put_document("tpl-report-final", "Final year report", name="Final report", content_type=GOOGLE_DOC)
    bundle.store.put_sheets(
        "tpl-grid",
        {
            "Summary": [["Class", "{{ class_name }}"], ["Author", "{{ author }}"]],
            "Notes": [["{{ class_name }}", 3]],
        },
        name="Grid template",
        content_type=GOOGLE_SHEET,
    )
    bundle.templates.add(TemplateInfo("tpl-report", "Report template", GOOGLE_DOC))
    bundle.templates.add(TemplateInfo("tpl-report-final", "Final report", GOOGLE_DOC))
    bundle.templates.add(TemplateInfo("tpl-grid", "Grid template", GOOGLE_SHEET))

    bundle.destinations.register("Reports/1A", dest_id="dest-1a")
    bundle.destinations.register("Reports/5B", dest_id="dest-5b")

    bundle.classes.add(SchoolClass(
        name="1A",
        course_year=1,
        coordinators="coord@school.it",
        tutors="tutor@school.it",
        subject_teachers={"MAT": "math@school.it, math2@school.it"},
    ))
    bundle.classes.add(SchoolClass(name="5B", course_year=5, coordinators="coord5@school.it"))
    bundle.students.add(Student(email="anna@school.it", full_name="Anna Rossi", class_name="1A"))
    bundle.subjects.add(Subject(code="MAT", name="Mathematics"))
    bundle.roles.add(Role(code="REF_REPORTS", name="Reports referent", holder_email="ref@school.it"))

    bundle.document_types.add(REPORT_TYPE)
    return bundle


@pytest.fixture
def guard() -> ExecutionGuard:
    """Three attempts, never sleeps."""
    return ExecutionGuard(policy=RetryPolicy(max_attempts=3), sleep=lambda seconds: None)


@pytest.fixture
def make_ctx(collaborators: Collaborators):
    """Factory for contexts bound to the seeded collaborators."""

    def factory(**overrides: Any) -> GenerationContext:
        values: dict[str, Any] = {
            "run_name": "test run",
            "document_type": "REPORT",
            "collaborators": collaborators,
            "class_entity": collaborators.classes.find_by_key("1A"),
        }
        values.update(overrides)
        return GenerationContext(**values)

    return factory


@pytest.fixture
def artifact() -> StoredArtifact:
    return StoredArtifact(id="art-1", name="Report 1A", content_type=GOOGLE_DOC, link="memory://files/art-1")


@pytest.fixture
def report_type(collaborators: Collaborators) -> DocumentType:
    return collaborators.document_types.find_by_key("REPORT")
