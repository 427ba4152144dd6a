"""
WorkPlanGenerator — per-class teaching work plan.

Needs a resolved class: the destination and the permissions are both
derived from it.
"""

from __future__ import annotations

from typing import Any

from docgen.collaborators.bundle import Collaborators
from docgen.generator import DocumentGenerator
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PreconditionError


class WorkPlanGenerator(DocumentGenerator):
    DOCUMENT_TYPE = "WORK_PLAN"

    def __init__(
        self,
        *,
        collaborators: Collaborators | None = None,
        step_options: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            "Work plan",
            self.DOCUMENT_TYPE,
            collaborators=collaborators,
            step_options=step_options,
            **kwargs,
        )

    def pre_run(self, ctx: GenerationContext) -> GenerationContext:
        if ctx.class_entity is None:
            raise PreconditionError(
                f"A work plan needs a known class, got {ctx.param('class')!r}",
                missing=["class_entity"],
            )
        return ctx
