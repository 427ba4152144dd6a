"""
In-memory collaborator implementations.

These are the defaults assembled by Collaborators.default().  They keep
everything in dictionaries, which makes them suitable for tests, local
runs and as a reference for real adapters.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, TypeVar

from docgen.collaborators.models import (
    Destination,
    DocumentType,
    Role,
    StoredArtifact,
    TemplateInfo,
)
from docgen.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _norm_key(key: Any) -> str:
    return str(key).strip().casefold()


def _norm_path(path: str) -> str:
    parts = [part.strip() for part in str(path).replace("\\", "/").split("/")]
    return "/".join(part for part in parts if part)


# ─── Templates and content ─────────────────────────────

class InMemoryTemplateRepository:
    """Templates indexed by id."""

    def __init__(self, templates: Iterable[TemplateInfo] = ()) -> None:
        self._templates: dict[str, TemplateInfo] = {}
        for template in templates:
            self.add(template)

    def add(self, template: TemplateInfo) -> TemplateInfo:
        self._templates[template.id] = template
        return template

    def resolve(self, template_id: str) -> TemplateInfo | None:
        if not template_id:
            return None
        return self._templates.get(str(template_id).strip())


@dataclass
class _StoredFile:
    artifact: StoredArtifact
    text: str | None = None
    sheets: dict[str, list[list[Any]]] = field(default_factory=dict)


class InMemoryContentStore:
    """
    Content store holding document text and sheet cells per file.

    Templates are seeded with put_document() / put_sheets(); copy()
    duplicates their content under a fresh id.
    """

    def __init__(self, link_base: str = "memory://files") -> None:
        self.link_base = link_base.rstrip("/")
        self._files: dict[str, _StoredFile] = {}

    def put_document(self, file_id: str, text: str, *, name: str = "", content_type: str = "") -> None:
        self._files[file_id] = _StoredFile(
            artifact=StoredArtifact(id=file_id, name=name or file_id, content_type=content_type, link=self._link(file_id)),
            text=text,
        )

    def put_sheets(
        self,
        file_id: str,
        sheets: dict[str, list[list[Any]]],
        *,
        name: str = "",
        content_type: str = "",
    ) -> None:
        self._files[file_id] = _StoredFile(
            artifact=StoredArtifact(id=file_id, name=name or file_id, content_type=content_type, link=self._link(file_id)),
            sheets=copy.deepcopy(sheets),
        )

    def copy(self, template_id: str, new_name: str, destination_id: str) -> StoredArtifact | None:
        source = self._files.get(template_id)
        if source is None:
            return None

        new_id = uuid.uuid4().hex
        artifact = StoredArtifact(
            id=new_id,
            name=new_name,
            content_type=source.artifact.content_type,
            link=self._link(new_id),
            parents=[destination_id],
        )
        self._files[new_id] = _StoredFile(
            artifact=artifact,
            text=source.text,
            sheets=copy.deepcopy(source.sheets),
        )
        logger.debug("File copied", template_id=template_id, artifact_id=new_id, destination_id=destination_id)
        return artifact

    def get(self, file_id: str) -> StoredArtifact | None:
        stored = self._files.get(file_id)
        return stored.artifact if stored else None

    def has(self, file_id: str) -> bool:
        return file_id in self._files

    # ─── Content access (used by the placeholder resolver) ──

    def read_document(self, file_id: str) -> str | None:
        stored = self._files.get(file_id)
        return stored.text if stored else None

    def write_document(self, file_id: str, text: str) -> None:
        self._files[file_id].text = text

    def read_sheets(self, file_id: str) -> dict[str, list[list[Any]]] | None:
        stored = self._files.get(file_id)
        return stored.sheets if stored else None

    def write_sheet(self, file_id: str, sheet_name: str, rows: list[list[Any]]) -> None:
        self._files[file_id].sheets[sheet_name] = rows

    def _link(self, file_id: str) -> str:
        return f"{self.link_base}/{file_id}"


# ─── Destinations ──────────────────────────────────────

class InMemoryDestinationRegistry:
    """Folders indexed by normalised path ("A/B/C", no leading/trailing slash)."""

    def __init__(self, destinations: Iterable[Destination] = ()) -> None:
        self._by_path: dict[str, Destination] = {}
        for destination in destinations:
            self.add(destination)

    def add(self, destination: Destination) -> Destination:
        self._by_path[_norm_path(destination.path or destination.name)] = destination
        return destination

    def register(self, path: str, *, dest_id: str | None = None, link: str = "") -> Destination:
        normalized = _norm_path(path)
        destination = Destination(
            id=dest_id or uuid.uuid4().hex,
            name=normalized.rsplit("/", 1)[-1],
            link=link,
            path=normalized,
        )
        return self.add(destination)

    def find_by_path(self, path: str) -> Destination | None:
        return self._by_path.get(_norm_path(path))


# ─── Permissions ───────────────────────────────────────

class InMemoryPermissionService:
    """Records every grant; granted() exposes them for inspection."""

    def __init__(self) -> None:
        self._grants: list[dict[str, Any]] = []

    def grant(self, target_id: str, email: str, level: str, principal_type: str = "user") -> dict[str, Any]:
        record = {
            "id": uuid.uuid4().hex,
            "target_id": target_id,
            "email": email,
            "level": level,
            "principal_type": principal_type,
        }
        self._grants.append(record)
        return record

    def granted(self, target_id: str | None = None) -> list[dict[str, Any]]:
        if target_id is None:
            return list(self._grants)
        return [grant for grant in self._grants if grant["target_id"] == target_id]


# ─── Registries ────────────────────────────────────────

class KeyedRegistry(Generic[T]):
    """Case-insensitive lookup of entities by a key attribute."""

    def __init__(self, key: Callable[[T], str], items: Iterable[T] = ()) -> None:
        self._key = key
        self._items: dict[str, T] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> T:
        self._items[_norm_key(self._key(item))] = item
        return item

    def find_by_key(self, key: str) -> T | None:
        if key is None or str(key).strip() == "":
            return None
        return self._items.get(_norm_key(key))

    def __len__(self) -> int:
        return len(self._items)


class InMemoryRoleRegistry:
    def __init__(self, roles: Iterable[Role] = ()) -> None:
        self._roles = KeyedRegistry[Role](lambda role: role.code, roles)

    def add(self, role: Role) -> Role:
        return self._roles.add(role)

    def find_by_code(self, code: str) -> Role | None:
        return self._roles.find_by_key(code)


class InMemoryDocumentTypeRegistry:
    def __init__(self, types: Iterable[DocumentType | dict[str, Any]] = ()) -> None:
        self._types = KeyedRegistry[DocumentType](lambda doc_type: doc_type.key)
        for doc_type in types:
            self.add(doc_type)

    def add(self, doc_type: DocumentType | dict[str, Any]) -> DocumentType:
        if not isinstance(doc_type, DocumentType):
            doc_type = DocumentType.model_validate(doc_type)
        return self._types.add(doc_type)

    def find_by_key(self, key: str) -> DocumentType | None:
        return self._types.find_by_key(key)


class InMemoryArtifactRegistry:
    """Generated-artifact records keyed by artifact id."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    def find_by_id(self, artifact_id: str) -> dict[str, Any] | None:
        record = self._records.get(artifact_id)
        return dict(record) if record is not None else None

    def insert(self, record: dict[str, Any]) -> dict[str, Any]:
        artifact_id = record["id"]
        if artifact_id in self._records:
            raise ValueError(f"Duplicate key: generated artifact '{artifact_id}' already exists")
        self._records[artifact_id] = dict(record)
        return dict(record)

    def update(self, artifact_id: str, record: dict[str, Any]) -> dict[str, Any] | None:
        existing = self._records.get(artifact_id)
        if existing is None:
            return None
        existing.update(record)
        existing["id"] = artifact_id
        return dict(existing)

    def all(self) -> list[dict[str, Any]]:
        return [dict(record) for record in self._records.values()]


# ─── Logger ────────────────────────────────────────────

class StructlogLogger:
    """Logger collaborator forwarding log(level, message) to structlog."""

    _METHODS = {
        "DEBUG": "debug",
        "INFO": "info",
        "WARN": "warning",
        "WARNING": "warning",
        "ERROR": "error",
    }

    def __init__(self, name: str = "docgen.run") -> None:
        self._logger = get_logger(name)

    def log(self, level: str, message: str) -> None:
        method = self._METHODS.get(str(level).upper(), "info")
        getattr(self._logger, method)(message)
