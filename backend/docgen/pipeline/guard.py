"""
ExecutionGuard — runs one unit of work with classification and retry.

The guard never lets an exception escape: every call returns an
ExecutionOutcome describing whether the operation succeeded, how many
attempts it took and, on failure, the classified error.

Classification and retry are separate, injectable objects:

    ErrorClassifier   exception → Classification(kind, category, retryable)
    RetryPolicy       how many attempts per category, and the backoff

Defaults come from settings (GUARD_MAX_ATTEMPTS, GUARD_BACKOFF_SECONDS,
GUARD_BACKOFF_FACTOR): three attempts, no waiting.
"""

from __future__ import annotations

import re
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable

from docgen.core.config import settings
from docgen.core.constants import ErrorCategory, GuardMode, Severity
from docgen.core.logging import get_logger
from docgen.pipeline.errors import PreconditionError, TransientError

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Outcome value objects
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ErrorInfo:
    """Classified description of the final failed attempt."""

    kind: str
    message: str
    stack: str = ""
    category: str = ErrorCategory.GENERIC
    severity: str = Severity.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "stack": self.stack,
            "category": self.category,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of a guarded call.  Never raised, always returned."""

    succeeded: bool
    attempts: int
    error: ErrorInfo | None = None
    value: Any = None


# ═══════════════════════════════════════════════════════════
#  Classification
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Classification:
    kind: str
    category: str
    severity: str
    retryable: bool


@dataclass(frozen=True)
class ClassificationRule:
    kind: str
    pattern: re.Pattern
    category: str
    severity: str
    retryable: bool


def _rule(kind: str, pattern: str, category: str, severity: str, retryable: bool) -> ClassificationRule:
    return ClassificationRule(kind, re.compile(pattern, re.IGNORECASE), category, severity, retryable)


# Checked in order; first match wins.
DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    _rule("QUOTA_LIMIT", r"quota|limit.*exceeded|too many requests|rate.?limit",
          ErrorCategory.QUOTA, Severity.MEDIUM, True),
    _rule("PERMISSION_DENIED", r"permission.*denied|unauthori[sz]ed|forbidden|do not have.*permission|not have.*access",
          ErrorCategory.PERMISSION, Severity.HIGH, False),
    _rule("INVALID_ARGUMENT", r"invalid.*argument|invalid.*parameter",
          ErrorCategory.ARGUMENT, Severity.HIGH, False),
    _rule("SERVICE_UNAVAILABLE", r"service.*unavailable|\b503\b|temporarily unavailable",
          ErrorCategory.SERVICE, Severity.MEDIUM, True),
    _rule("NOT_FOUND", r"not found|\b404\b|does not exist|no such",
          ErrorCategory.MISSING_RESOURCE, Severity.MEDIUM, False),
    _rule("INVALID_FORMAT", r"invalid.*format|malformed",
          ErrorCategory.FORMAT, Severity.LOW, False),
    _rule("MISSING_DATA", r"missing.*data|missing field|null reference",
          ErrorCategory.MISSING_DATA, Severity.MEDIUM, False),
    _rule("DB_CONNECTION", r"database.*connection|could not connect to (the )?database",
          ErrorCategory.DATABASE, Severity.CRITICAL, True),
    _rule("INTEGRITY_ERROR", r"integrity.*constraint|duplicate key|foreign.*key",
          ErrorCategory.INTEGRITY, Severity.HIGH, False),
    _rule("TIMEOUT", r"timed? ?out|execution.*time.*exceeded",
          ErrorCategory.TIMEOUT, Severity.HIGH, False),
    _rule("NETWORK_ERROR", r"network.*error|connection.*(refused|reset)",
          ErrorCategory.NETWORK, Severity.MEDIUM, True),
)


class ErrorClassifier:
    """
    Maps an exception to a Classification.

    Lookup order:
        1. PreconditionError → PRECONDITION_FAILED, never retried
        2. TransientError    → TRANSIENT, always retried
        3. Regex rules on the exception message (DEFAULT_RULES)
        4. Anything else     → UNKNOWN / GENERIC, retryable
    """

    def __init__(self, rules: tuple[ClassificationRule, ...] | list[ClassificationRule] | None = None) -> None:
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def classify(self, exc: BaseException) -> Classification:
        if isinstance(exc, PreconditionError):
            return Classification("PRECONDITION_FAILED", ErrorCategory.PRECONDITION, Severity.HIGH, False)
        if isinstance(exc, TransientError):
            return Classification("TRANSIENT", ErrorCategory.TRANSIENT, Severity.MEDIUM, True)

        message = str(exc)
        for rule in self.rules:
            if rule.pattern.search(message):
                return Classification(rule.kind, rule.category, rule.severity, rule.retryable)

        return Classification("UNKNOWN", ErrorCategory.GENERIC, Severity.MEDIUM, True)


# ═══════════════════════════════════════════════════════════
#  Retry policy
# ═══════════════════════════════════════════════════════════

@dataclass
class RetryPolicy:
    """
    Bounded retry with optional exponential backoff.

    max_attempts applies to every retryable category unless
    category_attempts caps it lower (or higher) for that category.
    """

    max_attempts: int = 3
    backoff_seconds: float = 0.0
    backoff_factor: float = 2.0
    category_attempts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.GUARD_MAX_ATTEMPTS,
            backoff_seconds=settings.GUARD_BACKOFF_SECONDS,
            backoff_factor=settings.GUARD_BACKOFF_FACTOR,
        )

    def attempts_for(self, category: str) -> int:
        return max(1, self.category_attempts.get(category, self.max_attempts))

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        if self.backoff_seconds <= 0:
            return 0.0
        return self.backoff_seconds * (self.backoff_factor ** (attempt - 1))


# ═══════════════════════════════════════════════════════════
#  Guard
# ═══════════════════════════════════════════════════════════

class ExecutionGuard:
    """
    Wraps a zero-argument operation and returns an ExecutionOutcome.

    Usage::

        guard = ExecutionGuard()
        outcome = guard.guard(
            lambda: step.execute(ctx),
            operation_name="Step: select_template",
            mode=GuardMode.RECOVERY,
            metadata={"document_type": ctx.document_type},
        )
        if not outcome.succeeded:
            print(outcome.error.kind, outcome.error.message)
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        classifier: ErrorClassifier | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy.from_settings()
        self.classifier = classifier or ErrorClassifier()
        self._sleep = sleep

    def guard(
        self,
        operation: Callable[[], Any],
        *,
        operation_name: str = "operation",
        mode: GuardMode | str = GuardMode.STRICT,
        metadata: dict[str, Any] | None = None,
    ) -> ExecutionOutcome:
        log = logger.bind(operation=operation_name, mode=str(mode), **(metadata or {}))
        attempt = 0

        while True:
            attempt += 1
            try:
                value = operation()
            except Exception as exc:
                classification = self.classifier.classify(exc)
                max_attempts = (
                    self.policy.attempts_for(classification.category)
                    if mode == GuardMode.RECOVERY and classification.retryable
                    else 1
                )

                log.warning(
                    "Guarded operation failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    kind=classification.kind,
                    error=str(exc),
                )

                if attempt >= max_attempts:
                    log.error(
                        "Guarded operation failed definitively",
                        attempts=attempt,
                        kind=classification.kind,
                    )
                    return ExecutionOutcome(
                        succeeded=False,
                        attempts=attempt,
                        error=ErrorInfo(
                            kind=classification.kind,
                            message=str(exc),
                            stack="".join(traceback.format_exception(exc)),
                            category=classification.category,
                            severity=classification.severity,
                        ),
                    )

                delay = self.policy.delay_for(attempt)
                if delay > 0:
                    self._sleep(delay)
                continue

            if attempt > 1:
                log.info("Guarded operation recovered", attempts=attempt)
            return ExecutionOutcome(succeeded=True, attempts=attempt, value=value)
