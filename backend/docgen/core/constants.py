"""Shared constants and enums used across the application."""

from enum import StrEnum


class LogLevel(StrEnum):
    """Levels recorded in the per-run log."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class GuardMode(StrEnum):
    """How the execution guard reacts to a failed attempt."""

    STRICT = "STRICT"          # one attempt, no retry
    RECOVERY = "RECOVERY"      # retry failures classified as retryable


class ErrorCategory(StrEnum):
    """Broad family of a classified failure."""

    QUOTA = "QUOTA"
    PERMISSION = "PERMISSION"
    ARGUMENT = "ARGUMENT"
    SERVICE = "SERVICE"
    MISSING_RESOURCE = "MISSING_RESOURCE"
    FORMAT = "FORMAT"
    MISSING_DATA = "MISSING_DATA"
    DATABASE = "DATABASE"
    INTEGRITY = "INTEGRITY"
    TIMEOUT = "TIMEOUT"
    NETWORK = "NETWORK"
    PRECONDITION = "PRECONDITION"
    TRANSIENT = "TRANSIENT"
    GENERIC = "GENERIC"


class Severity(StrEnum):
    """Severity attached to a classified failure."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ArtifactKind(StrEnum):
    """Kind of generated artifact, derived from its content type."""

    DOCUMENT = "DOCUMENT"
    SPREADSHEET = "SPREADSHEET"
    PRESENTATION = "PRESENTATION"
    FORM = "FORM"
    UNKNOWN = "UNKNOWN"


class ArtifactStatus(StrEnum):
    """Lifecycle status stored in the generated-artifacts registry."""

    CREATED = "CREATED"


class PermissionTarget(StrEnum):
    """What a permission is granted on."""

    FILE = "file"
    FOLDER = "folder"


class RecipientRole(StrEnum):
    """Roles that may receive access to a generated artifact."""

    COORDINATOR = "coordinator"
    REFERENT = "referent"
    SUBJECT_TEACHER = "subject_teacher"
    TUTOR = "tutor"
    SELF = "self"


class GrantLevel(StrEnum):
    """Concrete grant levels understood by the permission service."""

    READER = "reader"
    COMMENTER = "commenter"
    WRITER = "writer"
    OWNER = "owner"


# Content type → artifact kind
CONTENT_TYPE_KINDS: dict[str, ArtifactKind] = {
    "application/vnd.google-apps.document": ArtifactKind.DOCUMENT,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ArtifactKind.DOCUMENT,
    "application/vnd.google-apps.spreadsheet": ArtifactKind.SPREADSHEET,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ArtifactKind.SPREADSHEET,
    "application/vnd.google-apps.presentation": ArtifactKind.PRESENTATION,
    "application/vnd.google-apps.form": ArtifactKind.FORM,
}

# Internal access level (English or Italian label) → grant level.
# "NONE" / "NESSUNO" are not listed: callers skip them.
ACCESS_LEVEL_GRANTS: dict[str, GrantLevel] = {
    "READ": GrantLevel.READER,
    "LETTURA": GrantLevel.READER,
    "COMMENT": GrantLevel.COMMENTER,
    "COMMENTO": GrantLevel.COMMENTER,
    "WRITE": GrantLevel.WRITER,
    "SCRITTURA": GrantLevel.WRITER,
    "OWNER": GrantLevel.OWNER,
    "PROPRIETARIO": GrantLevel.OWNER,
}

NO_ACCESS_LEVELS: frozenset[str] = frozenset({"NONE", "NESSUNO"})

GENERAL_ERROR_STEP = "general"
