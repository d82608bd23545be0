r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy determines how long a task has to wait after its
    latest attempt before it is attempted again. The delay is derived
    from the task's own history rather than from an attempt counter, so
    it follows real elapsed time even when the event loop is busy.
    """

    @abstractmethod
    def calculate(self, elapsed: float) -> float:
        """Calculate the delay to wait after the latest attempt.

        Args:
            elapsed: Seconds between the creation of the task and its
                latest attempt.

        Returns:
            The delay in seconds before the next attempt.
        """
