from docgen.collaborators.bundle import Collaborators
from docgen.collaborators.models import (
    Destination,
    DocumentType,
    Role,
    SchoolClass,
    StoredArtifact,
    Student,
    Subject,
    Teacher,
    TemplateInfo,
)

__all__ = [
    "Collaborators",
    "Destination",
    "DocumentType",
    "Role",
    "SchoolClass",
    "StoredArtifact",
    "Student",
    "Subject",
    "Teacher",
    "TemplateInfo",
]
