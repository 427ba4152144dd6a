"""
DocumentGenerator — orchestrates one document generation end to end.

Responsibilities:
    - Hold the collaborator bundle (injected, or in-memory defaults)
    - Build the pipeline for its document type via FlowResolver
    - Turn the caller's input into a GenerationContext, resolving
      entity references (class, student, teacher, subject)
    - Run pre_run → pipeline → post_run and return the final context

generate() never raises: failures inside steps are recorded by the
steps themselves, anything escaping context preparation or the hooks is
recorded on the context under the step label "general".
"""

from __future__ import annotations

import traceback
from typing import Any

from docgen.collaborators.bundle import Collaborators
from docgen.collaborators.models import TemplateInfo
from docgen.core.constants import GENERAL_ERROR_STEP, LogLevel
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext, StepError
from docgen.pipeline.engine import Pipeline
from docgen.pipeline.flows import FlowResolver
from docgen.pipeline.guard import ExecutionGuard
from docgen.pipeline.step import GenerationStep

# Input key → (collaborator, context attribute)
ENTITY_REFERENCES: dict[str, tuple[str, str]] = {
    "class": ("classes", "class_entity"),
    "student": ("students", "student_entity"),
    "teacher": ("teachers", "teacher_entity"),
    "subject": ("subjects", "subject_entity"),
}

CLASS_KEY_ALIASES = ("entity_key",)


class DocumentGenerator:
    """
    Generates documents of one type.

    Usage::

        generator = DocumentGenerator(
            "Class report",
            "REPORT",
            collaborators=Collaborators.default(artifacts=SqlArtifactRegistry.from_url()),
            step_options={"substitute_placeholders": {"sheet_name": "Summary"}},
        )
        ctx = generator.generate({"class": "1A"})
        if ctx.error:
            print(ctx.error.step, ctx.error.message)
        else:
            print(ctx.created_artifact.link)

    Subclasses customise through the hooks pre_run(), post_run() and
    select_template(), or by overriding build_pipeline().
    """

    def __init__(
        self,
        name: str,
        document_type: str,
        *,
        collaborators: Collaborators | None = None,
        step_options: dict[str, Any] | None = None,
        guard: ExecutionGuard | None = None,
        flow_resolver: FlowResolver | None = None,
    ) -> None:
        self.name = name
        self.document_type = document_type
        self.collaborators = collaborators or Collaborators.default()
        self.step_options: dict[str, Any] = dict(step_options or {})
        self.guard = guard or ExecutionGuard()
        self.flow_resolver = flow_resolver or FlowResolver()
        self.logger = get_logger("docgen.generator").bind(generator=name, document_type=document_type)

        self.pipeline = Pipeline(name, config=self.step_options)
        self.build_pipeline()

    # ─── Pipeline assembly ─────────────────────────────

    def build_pipeline(self) -> None:
        """Append the steps for this document type.  Override for a different flow."""
        for step in self.flow_resolver.resolve(self.document_type, self.step_options, self.guard):
            self.pipeline.append(step)

    def replace_step(self, step_name: str, step: GenerationStep) -> DocumentGenerator:
        self.pipeline.replace(step_name, step)
        return self

    # ─── Hooks ─────────────────────────────────────────

    def pre_run(self, ctx: GenerationContext) -> GenerationContext:
        """Called before the pipeline.  Raise to abort the run."""
        return ctx

    def post_run(self, ctx: GenerationContext) -> GenerationContext:
        """Called with the final context, whether or not the pipeline halted."""
        return ctx

    def select_template(self, ctx: GenerationContext) -> TemplateInfo | None:
        """Custom template choice.  None falls back to config and metadata."""
        return None

    # ─── Execution ─────────────────────────────────────

    def generate(self, params: dict[str, Any] | None = None) -> GenerationContext:
        params = dict(params or {})
        self.logger.info("Document generation started", params=sorted(params))

        ctx: GenerationContext | None = None
        try:
            ctx = self.prepare_context(params)
            ctx = self.pre_run(ctx) or ctx
            ctx = self.pipeline.run(ctx)
            ctx = self.post_run(ctx) or ctx
        except Exception as exc:
            self.logger.error(
                "Unhandled error during document generation",
                error=str(exc),
                exc_info=True,
            )
            if ctx is None:
                ctx = self._bare_context(params)
            ctx.append_log(GENERAL_ERROR_STEP, LogLevel.ERROR, f"Unhandled error: {exc}")
            ctx.record_error(StepError(
                step=GENERAL_ERROR_STEP,
                message=str(exc),
                kind=self.guard.classifier.classify(exc).kind,
                stack="".join(traceback.format_exception(exc)),
            ))
            return ctx

        if ctx.error is None:
            self.logger.info("Document generation completed", **ctx.to_summary_dict())
        else:
            self.logger.warning("Document generation failed", **ctx.to_summary_dict())
        return ctx

    def prepare_context(self, params: dict[str, Any]) -> GenerationContext:
        """Build the initial context from the caller's input."""
        params = dict(params)
        for alias in CLASS_KEY_ALIASES:
            if params.get("class") is None and params.get(alias) is not None:
                params["class"] = params[alias]

        ctx = GenerationContext(
            run_name=self.name,
            document_type=params.get("type") or self.document_type,
            params=params,
            collaborators=self.collaborators,
            template_selector=self.select_template,
        )

        for key, (registry_name, attribute) in ENTITY_REFERENCES.items():
            reference = params.get(key)
            if reference is None:
                continue
            setattr(ctx, attribute, self._resolve_entity(registry_name, reference))

        return ctx

    def _resolve_entity(self, registry_name: str, reference: Any) -> Any:
        registry = self.collaborators.get(registry_name)
        entity = registry.find_by_key(reference) if registry is not None else None
        if entity is None:
            self.logger.warning("Entity reference not resolved", registry=registry_name, reference=reference)
            if self.collaborators.logger is not None:
                self.collaborators.logger.log(LogLevel.WARN, f"Unresolved {registry_name} reference '{reference}'.")
        return entity

    def _bare_context(self, params: dict[str, Any]) -> GenerationContext:
        return GenerationContext(
            run_name=self.name,
            document_type=str(params.get("type") or self.document_type),
            params=params,
            collaborators=self.collaborators,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} type={self.document_type!r}>"
