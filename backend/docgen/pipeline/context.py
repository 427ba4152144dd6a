"""
GenerationContext — mutable state object carried through every step.

This is the single source of truth for one generation run.  It holds
the caller's parameters and resolved entities (set once, before the
pipeline starts), the collaborator bundle, and everything the steps
accumulate: per-step results, the run log and the error slot.

Step results are stored ONLY in ``results_by_step``.  ``ctx.results``
is a read-only flattened view computed on demand, so two steps that
publish the same key never overwrite each other's stored values.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from docgen.core.logging import get_logger

if TYPE_CHECKING:
    from docgen.collaborators.bundle import Collaborators
    from docgen.collaborators.models import (
        Destination,
        SchoolClass,
        StoredArtifact,
        Student,
        Subject,
        Teacher,
        TemplateInfo,
    )

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Run log / error slot
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RunLogEntry:
    """One line of the in-memory run log."""

    timestamp: datetime
    step: str
    level: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "step": self.step,
            "level": self.level,
            "message": self.message,
        }


@dataclass(frozen=True)
class StepError:
    """Structured error written when a run cannot continue."""

    step: str
    message: str
    kind: str = "UNKNOWN"
    stack: str = ""
    attempts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "message": self.message,
            "kind": self.kind,
            "stack": self.stack,
            "attempts": self.attempts,
        }


# ═══════════════════════════════════════════════════════════
#  GenerationContext
# ═══════════════════════════════════════════════════════════

@dataclass
class GenerationContext:
    """
    Carries all state between pipeline steps.

    Populated progressively — the generator fills identity, parameters,
    entities and collaborators; each step publishes its results.
    """

    # ─── Identity (set at init) ────────────────────────
    run_name: str
    document_type: str
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ─── Caller input + resolved entities ──────────────
    params: dict[str, Any] = field(default_factory=dict)
    class_entity: SchoolClass | None = None
    student_entity: Student | None = None
    teacher_entity: Teacher | None = None
    subject_entity: Subject | None = None

    # ─── Collaborators and hooks ───────────────────────
    collaborators: Collaborators | None = None
    template_selector: Callable[[GenerationContext], TemplateInfo | None] | None = None

    # ─── Configuration ─────────────────────────────────
    global_config: dict[str, Any] = field(default_factory=dict)

    # ─── Accumulated during the run ────────────────────
    results_by_step: dict[str, dict[str, Any]] = field(default_factory=dict)
    run_log: list[RunLogEntry] = field(default_factory=list)
    error: StepError | None = None
    halted_by: str | None = None

    # ─── Results ───────────────────────────────────────

    def set_result(self, step_name: str, key: str, value: Any) -> None:
        """Store a result under the publishing step."""
        self.results_by_step.setdefault(step_name, {})[key] = value

    @property
    def results(self) -> Mapping[str, Any]:
        """
        Flattened, read-only view of every published result.

        Steps are folded in publication order, so for a key published
        by more than one step the latest publisher is visible here.
        """
        flat: dict[str, Any] = {}
        for values in self.results_by_step.values():
            flat.update(values)
        return MappingProxyType(flat)

    def result(self, key: str, default: Any = None, *, step: str | None = None) -> Any:
        """Look up a result, optionally scoped to the step that published it."""
        if step is not None:
            return self.results_by_step.get(step, {}).get(key, default)
        return self.results.get(key, default)

    # ─── Convenience accessors for the canonical results ──

    @property
    def destination(self) -> Destination | None:
        return self.result("destination")

    @property
    def selected_template(self) -> TemplateInfo | None:
        return self.result("selected_template")

    @property
    def artifact_name(self) -> str | None:
        return self.result("artifact_name")

    @property
    def created_artifact(self) -> StoredArtifact | None:
        return self.result("created_artifact")

    @property
    def artifact_kind(self) -> str | None:
        return self.result("artifact_kind")

    # ─── Parameters ────────────────────────────────────

    def param(self, key: str, default: Any = None) -> Any:
        """Retrieve a caller-supplied parameter."""
        return self.params.get(key, default)

    @property
    def class_name(self) -> str | None:
        """Name of the target class, resolved entity first, raw input second."""
        if self.class_entity is not None:
            return self.class_entity.name
        return self.params.get("class")

    # ─── Presence checks ───────────────────────────────

    def has_value(self, name: str) -> bool:
        """
        True if *name* is available to steps.

        Looks, in order, at context attributes, published results,
        caller parameters and the collaborator bundle.  None counts as
        absent everywhere.
        """
        if not name.startswith("_") and getattr(self, name, None) is not None:
            return True
        if self.results.get(name) is not None:
            return True
        if self.params.get(name) is not None:
            return True
        if self.collaborators is not None and self.collaborators.get(name) is not None:
            return True
        return False

    # ─── Logging / error slot ──────────────────────────

    def append_log(self, step: str, level: str, message: str) -> RunLogEntry:
        entry = RunLogEntry(
            timestamp=datetime.now(timezone.utc),
            step=step,
            level=level,
            message=message,
        )
        self.run_log.append(entry)
        return entry

    def record_error(self, error: StepError) -> bool:
        """Set the error slot.  Only the first error of a run is kept."""
        if self.error is not None:
            logger.warning(
                "Error slot already set, ignoring later error",
                run_id=self.run_id,
                kept_step=self.error.step,
                ignored_step=error.step,
            )
            return False
        self.error = error
        return True

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.halted_by is None

    # ─── Copying / serialisation ───────────────────────

    def fork(self) -> GenerationContext:
        """
        Shallow copy for a pipeline run.

        Containers the run mutates (results, log, config, params) are
        copied so the original object is left untouched; collaborators
        and entities are shared.
        """
        clone = copy.copy(self)
        clone.params = dict(self.params)
        clone.global_config = dict(self.global_config)
        clone.results_by_step = {step: dict(values) for step, values in self.results_by_step.items()}
        clone.run_log = list(self.run_log)
        return clone

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        artifact = self.created_artifact
        return {
            "run_id": self.run_id,
            "run_name": self.run_name,
            "document_type": self.document_type,
            "class_name": self.class_name,
            "steps_with_results": list(self.results_by_step.keys()),
            "artifact_id": artifact.id if artifact else None,
            "artifact_name": artifact.name if artifact else None,
            "halted_by": self.halted_by,
            "error": self.error.to_dict() if self.error else None,
            "log_entries": len(self.run_log),
        }
