"""
Collaborators — the bundle of external services a generation run uses.

The generator receives one bundle (constructor injection) and attaches
it to every context it creates.  Any field may be None; steps that need
a missing collaborator fail their precondition check.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from docgen.collaborators.memory import (
    InMemoryArtifactRegistry,
    InMemoryContentStore,
    InMemoryDestinationRegistry,
    InMemoryDocumentTypeRegistry,
    InMemoryPermissionService,
    InMemoryRoleRegistry,
    InMemoryTemplateRepository,
    KeyedRegistry,
    StructlogLogger,
)
from docgen.collaborators.models import SchoolClass, Student, Subject, Teacher
from docgen.collaborators.placeholders import JinjaPlaceholderResolver
from docgen.collaborators.protocols import (
    ArtifactRegistry,
    ContentStore,
    DestinationRegistry,
    DocumentTypeRegistry,
    EntityRegistry,
    Logger,
    PermissionService,
    PlaceholderResolver,
    RoleRegistry,
    TemplateRepository,
)


@dataclass
class Collaborators:
    templates: TemplateRepository | None = None
    store: ContentStore | None = None
    destinations: DestinationRegistry | None = None
    placeholders: PlaceholderResolver | None = None
    permissions: PermissionService | None = None
    classes: EntityRegistry[SchoolClass] | None = None
    students: EntityRegistry[Student] | None = None
    teachers: EntityRegistry[Teacher] | None = None
    subjects: EntityRegistry[Subject] | None = None
    roles: RoleRegistry | None = None
    artifacts: ArtifactRegistry | None = None
    document_types: DocumentTypeRegistry | None = None
    logger: Logger | None = None

    @classmethod
    def default(cls, **overrides: Any) -> Collaborators:
        """
        In-memory implementations for every collaborator, with optional overrides.

        The default placeholder resolver reads from the final store, so
        overriding ``store`` alone keeps substitution working.
        """
        bundle = cls(
            templates=InMemoryTemplateRepository(),
            store=InMemoryContentStore(),
            destinations=InMemoryDestinationRegistry(),
            permissions=InMemoryPermissionService(),
            classes=KeyedRegistry[SchoolClass](lambda entity: entity.name),
            students=KeyedRegistry[Student](lambda entity: entity.email),
            teachers=KeyedRegistry[Teacher](lambda entity: entity.email),
            subjects=KeyedRegistry[Subject](lambda entity: entity.code),
            roles=InMemoryRoleRegistry(),
            artifacts=InMemoryArtifactRegistry(),
            document_types=InMemoryDocumentTypeRegistry(),
            logger=StructlogLogger(),
        ).with_overrides(**overrides)

        if "placeholders" not in overrides and bundle.store is not None:
            bundle.placeholders = JinjaPlaceholderResolver(bundle.store)
        return bundle

    def with_overrides(self, **overrides: Any) -> Collaborators:
        """Copy of the bundle with some collaborators swapped.  Unknown names raise."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown collaborator(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def get(self, name: str) -> Any:
        """Collaborator by field name, or None."""
        if name not in {f.name for f in fields(self)}:
            return None
        return getattr(self, name)
