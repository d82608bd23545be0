r"""Unit tests for the scheduler exceptions."""

from __future__ import annotations

import pytest

from aretrier.exceptions import AbortError, NotAwaitableError, RetrierError, SynchronousError


def test_synchronous_error_message_and_cause() -> None:
    cause = OSError("disk on fire")
    error = SynchronousError(cause)
    assert str(error) == "Synchronous error: disk on fire"
    assert error.cause is cause
    assert error.__cause__ is cause


def test_not_awaitable_error_default_message() -> None:
    error = NotAwaitableError()
    assert str(error) == "Result is not awaitable."
    assert isinstance(error, TypeError)


def test_abort_error_default_message() -> None:
    assert str(AbortError()) == "This operation was aborted"


@pytest.mark.parametrize(
    "error",
    [SynchronousError(ValueError()), NotAwaitableError(), AbortError()],
)
def test_errors_share_base_class(error: Exception) -> None:
    assert isinstance(error, RetrierError)
