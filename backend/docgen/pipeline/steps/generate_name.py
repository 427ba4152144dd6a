"""
GenerateNameStep — builds the file name of the new artifact.

Uses the name pattern from config or document type metadata, rendered
by the placeholder resolver; without a pattern the name is
"<type>_<yyyyMMdd_HHmmss>".  The result is always sanitised.
"""

from __future__ import annotations

import re
from datetime import datetime

from docgen.core.config import settings
from docgen.core.logging import get_logger
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.step import GenerationStep

logger = get_logger(__name__)

ILLEGAL_NAME_CHARS = re.compile(r'[\\/:*?"<>|]')
WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_name(
    raw: str | None,
    *,
    max_length: int | None = None,
    fallback: str | None = None,
) -> str:
    """
    Make *raw* safe as a file name.

    Strips \\ / : * ? " < > |, collapses whitespace runs to one space,
    trims, and truncates to max_length.  Empty results become *fallback*.
    """
    max_length = max_length or settings.ARTIFACT_NAME_MAX_LENGTH
    fallback = fallback or settings.ARTIFACT_FALLBACK_NAME

    name = ILLEGAL_NAME_CHARS.sub("", raw or "")
    name = WHITESPACE_RUN.sub(" ", name).strip()
    name = name[:max_length].rstrip()
    return name or fallback


class GenerateNameStep(GenerationStep):
    """Render and sanitise the artifact name."""

    name = "generate_name"
    description = "Generate the artifact file name from the name pattern"

    def execute(self, ctx: GenerationContext) -> None:
        self.log(ctx, "Generating artifact name.")

        doc_type = self.document_type_info(ctx)
        pattern = self.get_config(ctx, "name_pattern", doc_type.name_pattern if doc_type else None)

        if pattern:
            self.ensure_fields(ctx, ["placeholders"])
            raw = ctx.collaborators.placeholders.substitute_in_string(pattern, ctx)
        else:
            raw = f"{ctx.document_type}_{datetime.now().strftime(settings.NAME_TIMESTAMP_FORMAT)}"
            self.log(ctx, f"No name pattern configured, using '{raw}'.", "DEBUG")

        artifact_name = sanitize_name(
            raw,
            max_length=self.get_config(ctx, "max_name_length", settings.ARTIFACT_NAME_MAX_LENGTH),
            fallback=self.get_config(ctx, "fallback_name", settings.ARTIFACT_FALLBACK_NAME),
        )

        self.publish(ctx, "artifact_name", artifact_name)
        self.log(ctx, f"Artifact name: '{artifact_name}'.")
