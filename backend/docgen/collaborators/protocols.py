"""
Structural interfaces for every external collaborator of the pipeline.

The pipeline only ever talks to these capability sets; concrete
implementations are injected through the Collaborators bundle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from docgen.collaborators.models import (
    Destination,
    DocumentType,
    Role,
    StoredArtifact,
    TemplateInfo,
)

if TYPE_CHECKING:
    from docgen.pipeline.context import GenerationContext

E = TypeVar("E", covariant=True)


@runtime_checkable
class TemplateRepository(Protocol):
    def resolve(self, template_id: str) -> TemplateInfo | None: ...


@runtime_checkable
class ContentStore(Protocol):
    def copy(self, template_id: str, new_name: str, destination_id: str) -> StoredArtifact | None: ...


@runtime_checkable
class DestinationRegistry(Protocol):
    def find_by_path(self, path: str) -> Destination | None: ...


@runtime_checkable
class PlaceholderResolver(Protocol):
    def substitute_in_string(self, pattern: str, ctx: GenerationContext) -> str: ...

    def process_document(self, artifact_id: str, ctx: GenerationContext) -> bool: ...

    def process_sheet(self, artifact_id: str, ctx: GenerationContext, sheet_name: str | None = None) -> bool: ...

    def register(self, name: str, resolver: Callable[[GenerationContext], Any]) -> None: ...


@runtime_checkable
class PermissionService(Protocol):
    def grant(self, target_id: str, email: str, level: str, principal_type: str = "user") -> dict[str, Any]: ...


@runtime_checkable
class EntityRegistry(Protocol, Generic[E]):
    def find_by_key(self, key: str) -> E | None: ...


@runtime_checkable
class RoleRegistry(Protocol):
    def find_by_code(self, code: str) -> Role | None: ...


@runtime_checkable
class DocumentTypeRegistry(Protocol):
    def find_by_key(self, key: str) -> DocumentType | None: ...


@runtime_checkable
class ArtifactRegistry(Protocol):
    def find_by_id(self, artifact_id: str) -> dict[str, Any] | None: ...

    def insert(self, record: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, artifact_id: str, record: dict[str, Any]) -> dict[str, Any] | None: ...


@runtime_checkable
class Logger(Protocol):
    def log(self, level: str, message: str) -> None: ...
