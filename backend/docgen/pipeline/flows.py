"""
FlowResolver — maps a document type to an ordered step sequence.

Every document type uses the canonical nine-step flow unless a
different builder is registered for its key.  Builders receive the
per-step options (``{step_name: {...}}``) and the execution guard
shared by the generator.

To add a flow for a document type:
    1. Write a builder returning a list of GenerationStep
    2. Register it in FLOW_REGISTRY (or pass a registry to FlowResolver)
"""

from __future__ import annotations

from typing import Any, Callable

from docgen.core.logging import get_logger
from docgen.pipeline.errors import PipelineConfigError
from docgen.pipeline.guard import ExecutionGuard
from docgen.pipeline.step import GenerationStep

# ─── Import all steps ─────────────────────────────────
from docgen.pipeline.steps.resolve_destination import ResolveDestinationStep
from docgen.pipeline.steps.select_template import SelectTemplateStep
from docgen.pipeline.steps.generate_name import GenerateNameStep
from docgen.pipeline.steps.create_artifact import CreateArtifactStep
from docgen.pipeline.steps.configure_placeholders import ConfigurePlaceholdersStep
from docgen.pipeline.steps.substitute_placeholders import SubstitutePlaceholdersStep
from docgen.pipeline.steps.assign_permissions import AssignPermissionsStep
from docgen.pipeline.steps.persist_reference import PersistReferenceStep
from docgen.pipeline.steps.update_status import UpdateStatusStep

logger = get_logger(__name__)

FlowBuilder = Callable[[dict[str, Any], ExecutionGuard | None], list[GenerationStep]]

CANONICAL_STEP_CLASSES: tuple[type[GenerationStep], ...] = (
    ResolveDestinationStep,
    SelectTemplateStep,
    GenerateNameStep,
    CreateArtifactStep,
    ConfigurePlaceholdersStep,
    SubstitutePlaceholdersStep,
    AssignPermissionsStep,
    PersistReferenceStep,
    UpdateStatusStep,
)


def canonical_flow(
    step_options: dict[str, Any] | None = None,
    guard: ExecutionGuard | None = None,
) -> list[GenerationStep]:
    """
    The standard flow:

    Destination → Template → Name → Copy → Placeholders (configure,
    substitute) → Permissions → Registry record → Status
    """
    step_options = step_options or {}
    return [
        step_class(config=step_options.get(step_class.name), guard=guard)
        for step_class in CANONICAL_STEP_CLASSES
    ]


# ═══════════════════════════════════════════════════════════
#  Flow Registry
# ═══════════════════════════════════════════════════════════
#
#  Maps document type key → flow builder function.
#

FLOW_REGISTRY: dict[str, FlowBuilder] = {
    "DEFAULT": canonical_flow,
}


class FlowResolver:
    """
    Resolves a document type to an ordered list of steps.

    Lookup order:
        1. Exact (case-insensitive) match on the document type key
        2. Fall back to "DEFAULT"
    """

    def __init__(self, registry: dict[str, FlowBuilder] | None = None) -> None:
        self.registry = {key.upper(): builder for key, builder in (registry or FLOW_REGISTRY).items()}

    def resolve(
        self,
        document_type: str,
        step_options: dict[str, Any] | None = None,
        guard: ExecutionGuard | None = None,
    ) -> list[GenerationStep]:
        key = (document_type or "").upper()

        if key in self.registry:
            logger.info("Flow resolved by document type", document_type=document_type)
            return self.registry[key](step_options or {}, guard)

        if "DEFAULT" in self.registry:
            logger.debug("Flow resolved to DEFAULT", document_type=document_type)
            return self.registry["DEFAULT"](step_options or {}, guard)

        raise PipelineConfigError(
            f"No flow registered for document type '{document_type}' and no DEFAULT flow",
            step_name="flow_resolution",
        )

    def list_available_flows(self) -> list[str]:
        return list(self.registry.keys())
