"""
SubstitutePlaceholdersStep — fills placeholders inside the new artifact.

Documents are processed as a whole; spreadsheets are processed on the
configured "sheet_name" (every sheet when unset).  Other kinds are
skipped without failing.
"""

from __future__ import annotations

from docgen.core.constants import ArtifactKind, LogLevel
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PlaceholderError
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


class SubstitutePlaceholdersStep(GenerationStep):
    """Run the placeholder resolver on the created artifact."""

    name = "substitute_placeholders"
    description = "Substitute placeholders in the artifact content"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["placeholders", "created_artifact"])

        artifact = ctx.created_artifact
        kind = ctx.artifact_kind or ArtifactKind.UNKNOWN
        resolver = ctx.collaborators.placeholders

        if kind == ArtifactKind.DOCUMENT:
            self.log(ctx, f"Substituting placeholders in document '{artifact.name}'.")
            completed = resolver.process_document(artifact.id, ctx)
        elif kind == ArtifactKind.SPREADSHEET:
            sheet_name = self.get_config(ctx, "sheet_name")
            self.log(ctx, f"Substituting placeholders in spreadsheet '{artifact.name}' (sheet: {sheet_name or 'all'}).")
            completed = resolver.process_sheet(artifact.id, ctx, sheet_name)
        else:
            self.log(ctx, f"No substitution for artifact kind '{kind}'. Step skipped.", LogLevel.INFO)
            self.publish(ctx, "substitution_completed", False)
            return

        if not completed:
            raise PlaceholderError(
                f"Placeholder substitution failed for artifact '{artifact.id}'",
                step_name=self.name,
            )

        self.publish(ctx, "substitution_completed", True)
        self.log(ctx, "Placeholder substitution completed.")
