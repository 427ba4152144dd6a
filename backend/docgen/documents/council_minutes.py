"""
CouncilMinutesGenerator — minutes of a monthly class council meeting.

The meeting month may be given as a number (10, "10", "09") or as an
English or Italian month name ("October", "ottobre").  pre_run()
normalises it into two parameters used by name and path patterns:

    month       two-digit month number, e.g. "10"
    month_name  Italian month name, e.g. "Ottobre"
"""

from __future__ import annotations

from typing import Any

from docgen.collaborators.bundle import Collaborators
from docgen.generator import DocumentGenerator
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PreconditionError

ITALIAN_MONTHS = (
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
)
ENGLISH_MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_MONTHS_BY_NAME: dict[str, int] = {
    **{name: index + 1 for index, name in enumerate(ITALIAN_MONTHS)},
    **{name: index + 1 for index, name in enumerate(ENGLISH_MONTHS)},
}


def normalize_month(value: Any) -> int | None:
    """Month number 1-12 for a number or month name, None if unrecognised."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 1 <= value <= 12 else None

    text = str(value).strip().casefold()
    if text.isdigit():
        number = int(text)
        return number if 1 <= number <= 12 else None
    return _MONTHS_BY_NAME.get(text)


class CouncilMinutesGenerator(DocumentGenerator):
    DOCUMENT_TYPE = "COUNCIL_MINUTES"

    def __init__(
        self,
        *,
        collaborators: Collaborators | None = None,
        step_options: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            "Class council minutes",
            self.DOCUMENT_TYPE,
            collaborators=collaborators,
            step_options=step_options,
            **kwargs,
        )

    def pre_run(self, ctx: GenerationContext) -> GenerationContext:
        missing = []
        if ctx.class_entity is None:
            missing.append("class_entity")

        month = normalize_month(ctx.param("month"))
        if month is None:
            missing.append("month")

        if missing:
            raise PreconditionError(
                f"Council minutes need a known class and a valid month "
                f"(class={ctx.param('class')!r}, month={ctx.param('month')!r})",
                missing=missing,
            )

        ctx.params["month"] = f"{month:02d}"
        ctx.params["month_name"] = ITALIAN_MONTHS[month - 1].capitalize()
        return ctx
