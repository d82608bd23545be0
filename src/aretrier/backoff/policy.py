r"""Eligibility and abandonment checks for tasks waiting to be retried."""

from __future__ import annotations

__all__ = ["is_time_to_bail", "is_time_to_retry"]

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aretrier.backoff.base import BaseBackoffStrategy
    from aretrier.task import RetryTask


def is_time_to_retry(
    task: RetryTask, backoff_strategy: BaseBackoffStrategy, now: float | None = None
) -> bool:
    """Check whether a task waited long enough since its latest attempt.

    Args:
        task: The task to check.
        backoff_strategy: Strategy giving the delay to wait.
        now: Current ``time.monotonic()`` value. Read from the clock
            if omitted.

    Returns:
        ``True`` if the task can be attempted again.
    """
    if now is None:
        now = time.monotonic()
    desired_delay = backoff_strategy.calculate(task.last_attempt - task.created_at)
    return now - task.last_attempt >= desired_delay


def is_time_to_bail(task: RetryTask, timeout: float) -> bool:
    """Check whether a task has been retrying for longer than ``timeout``.

    Args:
        task: The task to check.
        timeout: Maximum retry lifetime in seconds.

    Returns:
        ``True`` if the task has to be abandoned.
    """
    return task.age > timeout
