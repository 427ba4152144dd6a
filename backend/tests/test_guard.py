"""Tests for ExecutionGuard, ErrorClassifier and RetryPolicy."""

from __future__ import annotations

import pytest

from docgen.core.constants import ErrorCategory, GuardMode
from docgen.pipeline.errors import PreconditionError, TransientError
from docgen.pipeline.guard import ErrorClassifier, ExecutionGuard, RetryPolicy


class Flaky:
    """Raises the given errors in order, then returns "ok"."""

    def __init__(self, *errors: Exception) -> None:
        self.errors = list(errors)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def test_success_on_first_attempt(guard):
    outcome = guard.guard(lambda: 42, operation_name="answer", mode=GuardMode.RECOVERY)

    assert outcome.succeeded
    assert outcome.attempts == 1
    assert outcome.value == 42
    assert outcome.error is None


def test_recovery_retries_until_success(guard):
    operation = Flaky(RuntimeError("glitch"), RuntimeError("glitch again"))

    outcome = guard.guard(operation, mode=GuardMode.RECOVERY)

    assert outcome.succeeded
    assert outcome.attempts == 3
    assert operation.calls == 3


def test_recovery_gives_up_after_max_attempts(guard):
    operation = Flaky(*[RuntimeError("still broken")] * 5)

    outcome = guard.guard(operation, operation_name="broken", mode=GuardMode.RECOVERY)

    assert not outcome.succeeded
    assert outcome.attempts == 3
    assert operation.calls == 3
    assert outcome.error.kind == "UNKNOWN"
    assert outcome.error.message == "still broken"
    assert "Traceback" in outcome.error.stack


def test_strict_mode_makes_a_single_attempt(guard):
    operation = Flaky(TransientError("rate limited"))

    outcome = guard.guard(operation, mode=GuardMode.STRICT)

    assert not outcome.succeeded
    assert outcome.attempts == 1
    assert outcome.error.kind == "TRANSIENT"


def test_precondition_failures_are_not_retried(guard):
    operation = Flaky(PreconditionError("missing store", missing=["store"]))

    outcome = guard.guard(operation, mode=GuardMode.RECOVERY)

    assert outcome.attempts == 1
    assert outcome.error.kind == "PRECONDITION_FAILED"
    assert outcome.error.category == ErrorCategory.PRECONDITION


def test_non_retryable_classification_stops_immediately(guard):
    operation = Flaky(RuntimeError("Permission denied for user x"))

    outcome = guard.guard(operation, mode=GuardMode.RECOVERY)

    assert outcome.attempts == 1
    assert outcome.error.kind == "PERMISSION_DENIED"


def test_category_attempt_cap():
    guard = ExecutionGuard(
        policy=RetryPolicy(max_attempts=5, category_attempts={ErrorCategory.QUOTA: 2}),
        sleep=lambda seconds: None,
    )
    operation = Flaky(*[RuntimeError("Quota exceeded")] * 5)

    outcome = guard.guard(operation, mode=GuardMode.RECOVERY)

    assert outcome.attempts == 2
    assert outcome.error.kind == "QUOTA_LIMIT"


def test_exponential_backoff_between_attempts():
    delays: list[float] = []
    guard = ExecutionGuard(
        policy=RetryPolicy(max_attempts=3, backoff_seconds=0.5, backoff_factor=2.0),
        sleep=delays.append,
    )

    guard.guard(Flaky(*[RuntimeError("x")] * 3), mode=GuardMode.RECOVERY)

    assert delays == [0.5, 1.0]


def test_no_sleep_without_backoff(guard):
    delays: list[float] = []
    guard = ExecutionGuard(policy=RetryPolicy(max_attempts=3), sleep=delays.append)

    guard.guard(Flaky(*[RuntimeError("x")] * 3), mode=GuardMode.RECOVERY)

    assert delays == []


@pytest.mark.parametrize(
    ("message", "kind", "retryable"),
    [
        ("User rate limit exceeded", "QUOTA_LIMIT", True),
        ("Service unavailable, try later", "SERVICE_UNAVAILABLE", True),
        ("File not found: abc", "NOT_FOUND", False),
        ("Invalid argument: name", "INVALID_ARGUMENT", False),
        ("Duplicate key value violates unique constraint", "INTEGRITY_ERROR", False),
        ("Network error while connecting", "NETWORK_ERROR", True),
        ("something odd happened", "UNKNOWN", True),
    ],
)
def test_classifier_rules(message, kind, retryable):
    classification = ErrorClassifier().classify(RuntimeError(message))

    assert classification.kind == kind
    assert classification.retryable is retryable


def test_policy_never_allows_less_than_one_attempt():
    policy = RetryPolicy(max_attempts=0)

    assert policy.attempts_for(ErrorCategory.GENERIC) == 1
