"""
CreateArtifactStep — copies the selected template into the destination.

Also derives the artifact kind from the copy's content type; the
substitution step routes on it.
"""

from __future__ import annotations

from docgen.core.constants import CONTENT_TYPE_KINDS, ArtifactKind
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import ArtifactCreationError
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


def artifact_kind_for(content_type: str | None) -> ArtifactKind:
    return CONTENT_TYPE_KINDS.get((content_type or "").strip().lower(), ArtifactKind.UNKNOWN)


class CreateArtifactStep(GenerationStep):
    """Create the artifact as a copy of the template."""

    name = "create_artifact"
    description = "Copy the template into the destination folder"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["store", "selected_template", "destination", "artifact_name"])

        template = ctx.selected_template
        destination = ctx.destination
        self.log(ctx, f"Copying template '{template.name}' as '{ctx.artifact_name}' into '{destination.name}'.")

        artifact = ctx.collaborators.store.copy(template.id, ctx.artifact_name, destination.id)
        if artifact is None or not artifact.id:
            raise ArtifactCreationError(
                f"Artifact creation failed: the store returned no file for template '{template.id}'",
                step_name=self.name,
            )

        kind = artifact_kind_for(artifact.content_type)

        self.publish(ctx, "created_artifact", artifact)
        self.publish(ctx, "artifact_kind", kind)
        self.log(ctx, f"Artifact created: '{artifact.name}' (id: {artifact.id}, kind: {kind}).")
