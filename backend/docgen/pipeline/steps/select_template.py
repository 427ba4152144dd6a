"""
SelectTemplateStep — picks the template the artifact is copied from.

Priority:
    1. The custom selection hook on the context (generator override)
    2. An explicit "template_id" in the step / pipeline config
    3. The document type's template map: the caller's "variant" or the
       class's course year when a matching key exists, then "DEFAULT"
"""

from __future__ import annotations

from docgen.collaborators.models import TemplateInfo
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import TemplateNotFoundError
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)

DEFAULT_TEMPLATE_KEY = "DEFAULT"


class SelectTemplateStep(GenerationStep):
    """Select the template for the current document type."""

    name = "select_template"
    description = "Select the template (custom hook, explicit id, or type metadata)"

    def execute(self, ctx: GenerationContext) -> None:
        self.ensure_fields(ctx, ["templates"])
        self.log(ctx, "Selecting template.")

        template, source = self._select(ctx)
        if template is None:
            raise TemplateNotFoundError(
                f"Template not found for document type '{ctx.document_type}'",
                step_name=self.name,
            )

        self.publish(ctx, "selected_template", template)
        self.log(ctx, f"Template selected from {source}: '{template.name}' (id: {template.id}).")

    def _select(self, ctx: GenerationContext) -> tuple[TemplateInfo | None, str]:
        repository = ctx.collaborators.templates

        # ── Priority 1: custom hook ──
        if ctx.template_selector is not None:
            template = ctx.template_selector(ctx)
            if template is not None:
                return template, "custom selector"

        # ── Priority 2: explicit id ──
        template_id = self.get_config(ctx, "template_id")
        if template_id:
            template = repository.resolve(template_id)
            if template is not None:
                return template, "configured id"
            self.log(ctx, f"Configured template id '{template_id}' does not resolve.", "WARN")

        # ── Priority 3: metadata map ──
        doc_type = self.document_type_info(ctx)
        if doc_type is not None and doc_type.templates:
            for key in self._candidate_keys(ctx):
                template_id = doc_type.templates.get(key)
                if not template_id:
                    continue
                template = repository.resolve(template_id)
                if template is not None:
                    return template, f"metadata key '{key}'"

        return None, "nowhere"

    def _candidate_keys(self, ctx: GenerationContext) -> list[str]:
        keys: list[str] = []
        variant = ctx.param("variant")
        if variant:
            keys.append(str(variant))
        if ctx.class_entity is not None and ctx.class_entity.course_year is not None:
            keys.append(str(ctx.class_entity.course_year))
        keys.append(DEFAULT_TEMPLATE_KEY)
        return keys
