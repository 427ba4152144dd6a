"""
UpdateStatusStep — extension point for cross-registry status updates.

The built-in step only checks that there is something to propagate and
calls propagate(), which does nothing.  Subclass it (or swap it in with
Pipeline.replace) to mark related records once the artifact exists.
"""

from __future__ import annotations

from docgen.core.constants import LogLevel
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.step import GenerationStep


class UpdateStatusStep(GenerationStep):
    name = "update_status"
    description = "Propagate the generation status to related registries"

    def execute(self, ctx: GenerationContext) -> None:
        self.log(ctx, "Updating status of related records.")

        if not ctx.has_value("artifacts") or ctx.created_artifact is None:
            self.log(ctx, "Not enough context to update status. Step skipped.", LogLevel.WARN)
            return

        self.propagate(ctx)
        self.log(ctx, "Status update completed.")

    def propagate(self, ctx: GenerationContext) -> None:
        """Hook for subclasses; the default does nothing."""
