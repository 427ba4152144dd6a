"""
Domain-specific exception hierarchy for the generation pipeline.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (step name, details) for logging/debugging.

Inside a run these exceptions never reach the caller: the execution
guard catches them and turns them into a structured error on the
context.  Only PipelineConfigError (a misuse of the Pipeline API) is
raised to the code that builds the pipeline.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class PipelineConfigError(PipelineError):
    """Invalid pipeline construction (wrong step type, bad index, ...)."""
    pass


class PreconditionError(PipelineError):
    """A step's required context fields or collaborators are missing."""

    def __init__(
        self,
        message: str,
        *,
        missing: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.missing = missing or []
        super().__init__(message, **kwargs)


class StepExecutionError(PipelineError):
    """A step failed during execution."""
    pass


class TransientError(StepExecutionError):
    """A failure worth retrying (rate limits, flaky collaborator, ...)."""
    pass


class DestinationNotFoundError(StepExecutionError):
    """The computed destination path is not registered."""

    def __init__(self, message: str, *, path: str | None = None, **kwargs) -> None:
        self.path = path
        super().__init__(message, **kwargs)


class TemplateNotFoundError(StepExecutionError):
    """No template could be selected for the document type."""
    pass


class ArtifactCreationError(StepExecutionError):
    """Copying the template into the destination did not produce an artifact."""
    pass


class PlaceholderError(StepExecutionError):
    """Placeholder substitution reported a failure."""
    pass


class PersistenceError(StepExecutionError):
    """Writing the generated-artifact record failed."""
    pass
