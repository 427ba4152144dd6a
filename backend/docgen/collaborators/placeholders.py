"""
JinjaPlaceholderResolver — default placeholder resolver.

Placeholders are written as Jinja expressions (``{{ class_name }}``) and
rendered in a sandbox: attribute access to Python internals is refused.
Values available while rendering, later sources winning:

    1. Standard values     — document_type, type, class_name, run_name,
                             artifact_name, today, timestamp
    2. Caller parameters   — ctx.params
    3. Configured map      — the "placeholders" result of the run
    4. Registered resolvers — register(name, fn); fn(ctx) is called at
                              render time, a None result is ignored

Names that resolve to nothing render as an empty string.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Protocol

from jinja2 import BaseLoader, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from docgen.core.config import settings
from docgen.core.logging import get_logger
from docgen.pipeline.errors import PlaceholderError

if TYPE_CHECKING:
    from docgen.pipeline.context import GenerationContext

logger = get_logger(__name__)


class EditableContent(Protocol):
    """Content access the resolver needs from the store."""

    def read_document(self, file_id: str) -> str | None: ...

    def write_document(self, file_id: str, text: str) -> None: ...

    def read_sheets(self, file_id: str) -> dict[str, list[list[Any]]] | None: ...

    def write_sheet(self, file_id: str, sheet_name: str, rows: list[list[Any]]) -> None: ...


class JinjaPlaceholderResolver:
    def __init__(self, content: EditableContent) -> None:
        self.content = content
        self._resolvers: dict[str, Callable[[GenerationContext], Any]] = {}
        self._env = SandboxedEnvironment(
            loader=BaseLoader(),
            autoescape=False,
            keep_trailing_newline=True,
        )

    # ─── Registration ──────────────────────────────────

    def register(self, name: str, resolver: Callable[[GenerationContext], Any]) -> None:
        self._resolvers[name] = resolver

    @property
    def registered(self) -> list[str]:
        return list(self._resolvers)

    # ─── Rendering ─────────────────────────────────────

    def substitute_in_string(self, pattern: str, ctx: GenerationContext) -> str:
        if not pattern:
            return ""
        return self._render(pattern, self._variables(ctx))

    def process_document(self, artifact_id: str, ctx: GenerationContext) -> bool:
        text = self.content.read_document(artifact_id)
        if text is None:
            logger.warning("Document has no content to process", artifact_id=artifact_id)
            return False

        self.content.write_document(artifact_id, self._render(text, self._variables(ctx)))
        logger.debug("Document placeholders substituted", artifact_id=artifact_id)
        return True

    def process_sheet(self, artifact_id: str, ctx: GenerationContext, sheet_name: str | None = None) -> bool:
        sheets = self.content.read_sheets(artifact_id)
        if not sheets:
            logger.warning("Spreadsheet has no sheets to process", artifact_id=artifact_id)
            return False

        if sheet_name is not None and sheet_name not in sheets:
            logger.warning("Sheet not found", artifact_id=artifact_id, sheet_name=sheet_name)
            return False

        variables = self._variables(ctx)
        names = [sheet_name] if sheet_name is not None else list(sheets)
        for name in names:
            rows = [
                [self._render(cell, variables) if isinstance(cell, str) and "{" in cell else cell for cell in row]
                for row in sheets[name]
            ]
            self.content.write_sheet(artifact_id, name, rows)

        logger.debug("Sheet placeholders substituted", artifact_id=artifact_id, sheets=names)
        return True

    # ─── Internals ─────────────────────────────────────

    def _variables(self, ctx: GenerationContext) -> dict[str, Any]:
        now = datetime.now()
        variables: dict[str, Any] = {
            "document_type": ctx.document_type,
            "type": ctx.document_type,
            "class_name": ctx.class_name or "",
            "run_name": ctx.run_name,
            "artifact_name": ctx.artifact_name or "",
            "today": now.strftime(settings.DATE_FORMAT),
            "timestamp": now.strftime(settings.TIMESTAMP_FORMAT),
        }
        variables.update(ctx.params)
        variables.update(ctx.result("placeholders") or {})
        for name, resolver in self._resolvers.items():
            value = resolver(ctx)
            if value is not None:
                variables[name] = value
        return variables

    def _render(self, text: str, variables: dict[str, Any]) -> str:
        try:
            return self._env.from_string(text).render(**variables)
        except TemplateError as exc:
            raise PlaceholderError(f"Invalid placeholder syntax: {exc}") from exc
