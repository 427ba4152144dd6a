"""
ResolveDestinationStep — finds the folder the artifact will be created in.

The path is the document type's parent path, optionally followed by its
sub-folder pattern, both rendered through the placeholder resolver
(e.g. "Classes/{{ class_name }}" + "Minutes/{{ month }}").
"""

from __future__ import annotations

from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import DestinationNotFoundError, StepExecutionError
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


class ResolveDestinationStep(GenerationStep):
    """Compute the destination path and look it up in the destination registry."""

    name = "resolve_destination"
    description = "Resolve the destination folder from the document type metadata"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["document_types", "destinations", "placeholders"])
        self.log(ctx, "Resolving destination folder.")

        doc_type = self.document_type_info(ctx)
        if doc_type is None:
            raise StepExecutionError(
                f"Missing data: no metadata for document type '{ctx.document_type}'",
                step_name=self.name,
            )

        parent_pattern = self.get_config(ctx, "parent_path", doc_type.parent_path)
        if not parent_pattern:
            raise StepExecutionError(
                f"Missing data: document type '{ctx.document_type}' has no parent path",
                step_name=self.name,
            )

        resolver = ctx.collaborators.placeholders
        path = resolver.substitute_in_string(parent_pattern, ctx).strip().rstrip("/")

        subfolder_pattern = self.get_config(ctx, "subfolder_pattern", doc_type.subfolder_pattern)
        if subfolder_pattern:
            subfolder = resolver.substitute_in_string(subfolder_pattern, ctx).strip().strip("/")
            if subfolder:
                path = f"{path}/{subfolder}"

        self.log(ctx, f"Destination path: '{path}'.")

        destination = ctx.collaborators.destinations.find_by_path(path)
        if destination is None:
            raise DestinationNotFoundError(
                f"Destination folder not found: '{path}'",
                step_name=self.name,
                path=path,
            )

        self.publish(ctx, "destination", destination)
        self.log(ctx, f"Destination folder found: '{destination.name}' (id: {destination.id}).")
