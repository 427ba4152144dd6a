"""
ConfigurePlaceholdersStep — builds the placeholder map for the run.

Sources, in increasing priority:
    1. Document type extra parameters
    2. "placeholders" from the step / pipeline config
    3. "placeholders" supplied by the caller
Standard values (class name, dates, artifact name, type) only fill keys
that are still missing.  Every entry is registered on the resolver.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from docgen.core.config import settings
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)


class ConfigurePlaceholdersStep(GenerationStep):
    """Merge and register the placeholders used by substitution."""

    name = "configure_placeholders"
    description = "Merge metadata, configured and caller placeholders"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["placeholders"])
        self.log(ctx, "Configuring placeholders.")

        placeholders: dict[str, Any] = {}

        doc_type = self.document_type_info(ctx)
        if doc_type is not None:
            placeholders.update(doc_type.extra_params)
        placeholders.update(self.get_config(ctx, "placeholders", {}) or {})
        placeholders.update(ctx.param("placeholders") or {})

        for key, value in self._standard_placeholders(ctx).items():
            placeholders.setdefault(key, value)

        resolver = ctx.collaborators.placeholders
        for key in placeholders:
            resolver.register(key, self._reader(key))

        self.publish(ctx, "placeholders", placeholders)
        self.log(ctx, f"{len(placeholders)} placeholder(s) configured.")

    def _standard_placeholders(self, ctx: GenerationContext) -> dict[str, Any]:
        now = datetime.now()
        return {
            "class_name": ctx.class_name or "",
            "today": now.strftime(settings.DATE_FORMAT),
            "timestamp": now.strftime(settings.TIMESTAMP_FORMAT),
            "artifact_name": ctx.artifact_name or "",
            "document_type": ctx.document_type,
        }

    def _reader(self, key: str):
        """Resolver reading *key* from the map published in the rendering run."""
        def read(run_ctx: GenerationContext) -> Any:
            return (run_ctx.result("placeholders", step=self.name) or {}).get(key)
        return read
