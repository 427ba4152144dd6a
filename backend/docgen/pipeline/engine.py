"""
Pipeline — runs generation steps sequentially against one context.

Responsibilities:
    - Hold the ordered step list (append / insert / replace by name)
    - Hold the pipeline-global configuration scope
    - Run each step once, in order, stopping at the first step whose
      run() reports an unrecoverable failure
    - Return the (possibly partial) context; never raise
"""

from __future__ import annotations

from typing import Any, Iterable

from docgen.core.constants import LogLevel
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PipelineConfigError
from docgen.pipeline.step import GenerationStep


class Pipeline:
    """
    Ordered, mutable list of GenerationStep objects plus a global config.

    Usage::

        pipeline = Pipeline("Council minutes")
        pipeline.append(ResolveDestinationStep()).append(SelectTemplateStep())
        pipeline.set_config({"sheet_name": "Summary"})
        final_ctx = pipeline.run(ctx)
        if final_ctx.halted_by:
            print(final_ctx.error.message)
    """

    def __init__(
        self,
        name: str,
        steps: Iterable[GenerationStep] | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.steps: list[GenerationStep] = []
        self.config: dict[str, Any] = dict(config or {})
        self.logger = get_logger("pipeline.engine").bind(pipeline=name)

        for step in steps or []:
            self.append(step)

    # ─── Step list management ──────────────────────────

    def append(self, step: GenerationStep) -> Pipeline:
        """Add a step at the end.  Returns self for chaining."""
        self._check_step(step)
        self.steps.append(step)
        self.logger.debug("Step appended", step_name=step.name, position=len(self.steps) - 1)
        return self

    def insert_at(self, index: int, step: GenerationStep) -> Pipeline:
        """Insert a step at a 0-based position (len(steps) appends)."""
        self._check_step(step)
        if index < 0 or index > len(self.steps):
            raise PipelineConfigError(
                f"Position {index} is not valid for a pipeline of {len(self.steps)} steps",
                step_name=step.name,
            )
        self.steps.insert(index, step)
        self.logger.debug("Step inserted", step_name=step.name, position=index)
        return self

    def replace(self, step_name: str, step: GenerationStep) -> Pipeline:
        """Swap the step named *step_name* for *step*, keeping its position."""
        self._check_step(step)
        index = self.index_of(step_name)
        if index is None:
            raise PipelineConfigError(
                f"No step named '{step_name}' in pipeline '{self.name}'",
                step_name=step_name,
            )
        self.steps[index] = step
        self.logger.debug("Step replaced", replaced=step_name, step_name=step.name, position=index)
        return self

    def index_of(self, step_name: str) -> int | None:
        for index, step in enumerate(self.steps):
            if step.name == step_name:
                return index
        return None

    def get(self, step_name: str) -> GenerationStep | None:
        index = self.index_of(step_name)
        return self.steps[index] if index is not None else None

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def set_config(self, config: dict[str, Any] | None) -> Pipeline:
        """Set the global configuration visible to every step."""
        self.config = dict(config or {})
        return self

    # ─── Execution ─────────────────────────────────────

    def run(self, initial_ctx: GenerationContext) -> GenerationContext:
        """
        Run every step in insertion order against a copy of *initial_ctx*.

        Context-level global config entries win over the pipeline's own
        config for the same key.
        """
        ctx = initial_ctx.fork()
        ctx.global_config = {**self.config, **ctx.global_config}

        log = self.logger.bind(run_id=ctx.run_id, document_type=ctx.document_type, total_steps=len(self.steps))
        log.info("Pipeline started")

        for index, step in enumerate(self.steps):
            log.info(f"Step {index + 1}/{len(self.steps)}: {step.name}", step_name=step.name)

            if not step.run(ctx):
                ctx.halted_by = step.name
                message = f"Pipeline '{self.name}' halted by step '{step.name}'."
                ctx.append_log(step.name, LogLevel.WARN, message)
                if ctx.collaborators is not None and ctx.collaborators.logger is not None:
                    ctx.collaborators.logger.log(LogLevel.WARN, message)
                log.warning("Step failed — pipeline stopping", step_name=step.name)
                break

        log.info("Pipeline finished", halted_by=ctx.halted_by)
        return ctx

    def _check_step(self, step: Any) -> None:
        if not isinstance(step, GenerationStep):
            raise PipelineConfigError(
                f"Pipeline steps must be GenerationStep instances, got {type(step).__name__}"
            )

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"<Pipeline {self.name!r} steps={self.step_names}>"
