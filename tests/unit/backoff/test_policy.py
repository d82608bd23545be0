r"""Unit tests for retry eligibility and abandonment checks."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from aretrier.backoff import MultiplicativeBackoff, is_time_to_bail, is_time_to_retry
from aretrier.task import RetryTask


@pytest.fixture
def task(mock_monotonic: Mock) -> RetryTask:
    """Create a task at time 100.0."""
    return RetryTask(Mock(), ValueError("first"), Mock())


######################################
#     Tests for is_time_to_retry     #
######################################


def test_is_time_to_retry_first_retry(task: RetryTask) -> None:
    """Test that the first retry waits for the floored delay."""
    backoff = MultiplicativeBackoff(factor=2.0, max_delay=1.0, min_elapsed=0.25)
    assert not is_time_to_retry(task, backoff, now=100.4)
    assert is_time_to_retry(task, backoff, now=100.5)
    assert is_time_to_retry(task, backoff, now=101.0)


def test_is_time_to_retry_uses_attempt_history(task: RetryTask) -> None:
    """Test that the delay grows with the time since the task was
    created."""
    backoff = MultiplicativeBackoff(factor=2.0, max_delay=10.0, min_elapsed=0.25)
    task.last_attempt = 102.0  # 2s after creation, so wait 4s
    assert not is_time_to_retry(task, backoff, now=105.5)
    assert is_time_to_retry(task, backoff, now=106.0)


def test_is_time_to_retry_capped(task: RetryTask) -> None:
    backoff = MultiplicativeBackoff(factor=2.0, max_delay=1.0)
    task.last_attempt = 150.0
    assert not is_time_to_retry(task, backoff, now=150.5)
    assert is_time_to_retry(task, backoff, now=151.0)


def test_is_time_to_retry_reads_clock(task: RetryTask, mock_monotonic: Mock) -> None:
    backoff = MultiplicativeBackoff(factor=2.0, max_delay=1.0, min_elapsed=0.25)
    assert not is_time_to_retry(task, backoff)
    mock_monotonic.return_value = 100.5
    assert is_time_to_retry(task, backoff)


#####################################
#     Tests for is_time_to_bail     #
#####################################


def test_is_time_to_bail(task: RetryTask, mock_monotonic: Mock) -> None:
    assert not is_time_to_bail(task, timeout=5.0)
    mock_monotonic.return_value = 105.0
    assert not is_time_to_bail(task, timeout=5.0)
    mock_monotonic.return_value = 105.5
    assert is_time_to_bail(task, timeout=5.0)


def test_is_time_to_bail_zero_timeout(task: RetryTask, mock_monotonic: Mock) -> None:
    """Test that a zero timeout abandons a task as soon as any time
    passed."""
    assert not is_time_to_bail(task, timeout=0.0)
    mock_monotonic.return_value = 100.001
    assert is_time_to_bail(task, timeout=0.0)
