"""Unit tests for the retry orchestrator."""

import asyncio
import random

import pytest
from fakes import RecordingSleep

from resume_printer.contexts.printing.exceptions import CaptureFailure
from resume_printer.contexts.printing.retry import RetryOrchestrator


class FlakyOperation:
    """Fails the first `failures` calls, then returns 'ok'."""

    def __init__(self, failures: int, error: Exception = None):
        self.failures = failures
        self.error = error or CaptureFailure("Failed to export page", page=1)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.unit
def test_always_failing_runs_three_attempts_and_reraises_original():
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=10)
    orchestrator = RetryOrchestrator("print", sleep=sleep)

    with pytest.raises(CaptureFailure) as exc_info:
        asyncio.run(orchestrator.run(operation, "clx42"))

    assert operation.calls == 3
    assert exc_info.value is operation.error
    assert len(sleep.delays) == 2


@pytest.mark.unit
def test_single_failure_then_success_logs_one_retry(log_messages):
    operation = FlakyOperation(failures=1)
    orchestrator = RetryOrchestrator("print", sleep=RecordingSleep())

    result = asyncio.run(orchestrator.run(operation, "clx42"))

    assert result == "ok"
    assert operation.calls == 2
    retries = [m for m in log_messages if m.startswith("[print] Retrying")]
    assert retries == ["[print] Retrying to print resume #clx42, attempt #2"]


@pytest.mark.unit
def test_success_on_first_attempt_never_sleeps():
    sleep = RecordingSleep()
    operation = FlakyOperation(failures=0)

    asyncio.run(RetryOrchestrator("print", sleep=sleep).run(operation, "clx42"))

    assert operation.calls == 1
    assert sleep.delays == []


@pytest.mark.unit
def test_backoff_is_randomized_and_bounded():
    orchestrator = RetryOrchestrator(
        "print", base_delay=1.0, factor=2.0, max_delay=3.0, rng=random.Random(7)
    )

    first_retry = orchestrator.delay_for(2)
    second_retry = orchestrator.delay_for(3)

    assert 1.0 <= first_retry <= 2.0
    assert 2.0 <= second_retry <= 3.0
    assert orchestrator.delay_for(10) == 3.0


@pytest.mark.unit
def test_orchestrators_do_not_share_attempts():
    sleep = RecordingSleep()
    print_retry = RetryOrchestrator("print", sleep=sleep)
    preview_retry = RetryOrchestrator("generate a preview of", sleep=sleep)
    print_operation = FlakyOperation(failures=2)
    preview_operation = FlakyOperation(failures=2)

    assert asyncio.run(print_retry.run(print_operation, "a")) == "ok"
    assert asyncio.run(preview_retry.run(preview_operation, "a")) == "ok"
    assert print_operation.calls == 3
    assert preview_operation.calls == 3


@pytest.mark.unit
def test_invalid_max_attempts():
    with pytest.raises(ValueError):
        RetryOrchestrator("print", max_attempts=0)
