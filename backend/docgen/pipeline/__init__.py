"""
Generation pipeline — step-based engine that turns a document request
into a created, filled, shared and registered artifact.

Each step runs under an execution guard that classifies and retries
failures; the first unrecoverable failure halts the run and leaves a
structured error on the context.
"""

from docgen.pipeline.context import GenerationContext, RunLogEntry, StepError
from docgen.pipeline.engine import Pipeline
from docgen.pipeline.guard import ExecutionGuard, ExecutionOutcome, RetryPolicy
from docgen.pipeline.step import GenerationStep

__all__ = [
    "ExecutionGuard",
    "ExecutionOutcome",
    "GenerationContext",
    "GenerationStep",
    "Pipeline",
    "RetryPolicy",
    "RunLogEntry",
    "StepError",
]
