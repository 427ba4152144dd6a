"""
GenerationStep — abstract base class for all pipeline steps.

Every step in the generation pipeline inherits from this class.
The pipeline calls run(); run() hands execute() to the execution guard
and turns a final failure into a structured error on the context.
Steps only need to implement the business logic in execute().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from docgen.core.constants import GuardMode, LogLevel
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext, StepError
from docgen.pipeline.errors import PreconditionError
from docgen.pipeline.guard import ExecutionGuard

if TYPE_CHECKING:
    from docgen.collaborators.models import DocumentType

logger = get_logger(__name__)


class GenerationStep(ABC):
    """
    Base class for every pipeline step.

    Subclasses MUST implement:
        - name (str)          — unique identifier, e.g. "select_template"
        - execute(ctx)        — the actual business logic

    execute() signals failure by raising; it must not swallow the
    exceptions that are meant to abort the step.  Return values are
    ignored — results are handed to later steps with publish().
    """

    name: str = "unnamed_step"
    description: str = "No description"

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        guard: ExecutionGuard | None = None,
    ) -> None:
        self.config: dict[str, Any] = dict(config or {})
        self.guard = guard or ExecutionGuard()

    def run(self, ctx: GenerationContext) -> bool:
        """
        Execute the step under the guard.

        Returns True to continue with the next step, False to stop the
        pipeline.  Never raises.
        """
        outcome = self.guard.guard(
            lambda: self.execute(ctx),
            operation_name=f"Step: {self.name}",
            mode=GuardMode.RECOVERY,
            metadata=self._diagnostics(ctx),
        )

        if outcome.succeeded:
            return True

        error = outcome.error
        self.log(
            ctx,
            f"Failed definitively after {outcome.attempts} attempt(s). Error: {error.message}",
            LogLevel.ERROR,
        )
        ctx.record_error(StepError(
            step=self.name,
            message=error.message,
            kind=error.kind,
            stack=error.stack,
            attempts=outcome.attempts,
        ))
        return False

    @abstractmethod
    def execute(self, ctx: GenerationContext) -> None:
        """Run the step's logic.  Raise to signal failure."""
        ...

    # ─── Helpers available to all steps ────────────────

    def get_config(self, ctx: GenerationContext, key: str, default: Any = None) -> Any:
        """Step config wins over the pipeline-global config, which wins over *default*."""
        if self.config.get(key) is not None:
            return self.config[key]
        if ctx is not None and ctx.global_config.get(key) is not None:
            return ctx.global_config[key]
        return default

    def require_fields(self, ctx: GenerationContext, names: list[str]) -> bool:
        """
        Check that every name is available on the context or among its
        collaborators.  Logs an ERROR and returns False on the first
        missing one; the caller decides whether to raise.
        """
        for name in names:
            if not ctx.has_value(name):
                self.log(ctx, f"Required context field or collaborator missing: '{name}'.", LogLevel.ERROR)
                return False
        return True

    def ensure_fields(self, ctx: GenerationContext, names: list[str]) -> None:
        """require_fields() that raises PreconditionError instead of returning False."""
        if not self.require_fields(ctx, names):
            missing = [name for name in names if not ctx.has_value(name)]
            raise PreconditionError(
                f"Invalid context for step '{self.name}': missing {', '.join(missing)}",
                step_name=self.name,
                missing=missing,
            )

    def log(self, ctx: GenerationContext | None, message: str, level: str = LogLevel.INFO) -> None:
        """Append to the run log and forward to the Logger collaborator."""
        level = str(level).upper()
        if ctx is not None:
            ctx.append_log(self.name, level, message)

        sink = ctx.collaborators.logger if ctx is not None and ctx.collaborators else None
        if sink is not None:
            sink.log(level, f"[{self.name}] {message}")
        else:
            logger.info(message, step_name=self.name, level=level)

    def document_type_info(self, ctx: GenerationContext) -> DocumentType | None:
        """Metadata for ctx.document_type from the document type registry, if any."""
        registry = ctx.collaborators.document_types if ctx.collaborators else None
        if registry is None:
            return None
        return registry.find_by_key(ctx.document_type)

    def publish(self, ctx: GenerationContext, key: str, value: Any) -> None:
        """Store a result under this step's name."""
        ctx.set_result(self.name, key, value)
        self.log(ctx, f"Result '{key}' published.", LogLevel.DEBUG)

    def _diagnostics(self, ctx: GenerationContext) -> dict[str, Any]:
        """Metadata attached to guard logs for this step."""
        return {
            "step_name": self.name,
            "run_id": ctx.run_id,
            "document_type": ctx.document_type,
            "class_name": ctx.class_name,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
