r"""Multiplicative backoff strategy."""

from __future__ import annotations

__all__ = ["MultiplicativeBackoff"]

from aretrier.backoff.base import BaseBackoffStrategy
from aretrier.core.config import DEFAULT_MAX_DELAY

# Floor applied to the elapsed time so the very first retry still waits
MIN_ELAPSED = 0.001


class MultiplicativeBackoff(BaseBackoffStrategy):
    """Multiplicative backoff strategy.

    Calculates delay as: max(elapsed, min_elapsed) * factor, capped at
    max_delay.

    Because ``elapsed`` keeps growing with every attempt, the delay grows
    by roughly ``factor`` per attempt until it reaches the cap. A small
    cap favors many quick retries, which suits exhaustion errors that
    clear up as soon as other work completes.

    Args:
        factor: Growth factor applied to the elapsed time (default: 1.2).
        max_delay: Maximum delay in seconds (default: 0.1).
        min_elapsed: Floor for the elapsed time in seconds
            (default: 0.001).

    Example:
        ```pycon
        >>> from aretrier.backoff import MultiplicativeBackoff
        >>> backoff = MultiplicativeBackoff(factor=2.0, max_delay=1.0)
        >>> backoff.calculate(0.0)  # First retry, elapsed floored
        0.002
        >>> backoff.calculate(0.25)
        0.5
        >>> backoff.calculate(10.0)  # Capped
        1.0

        ```
    """

    def __init__(
        self,
        factor: float = 1.2,
        max_delay: float = DEFAULT_MAX_DELAY,
        min_elapsed: float = MIN_ELAPSED,
    ) -> None:
        self.factor = factor
        self.max_delay = max_delay
        self.min_elapsed = min_elapsed

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(factor={self.factor}, "
            f"max_delay={self.max_delay}, min_elapsed={self.min_elapsed})"
        )

    def calculate(self, elapsed: float) -> float:
        """Calculate multiplicative backoff delay.

        Args:
            elapsed: Seconds between the creation of the task and its
                latest attempt.

        Returns:
            The calculated delay, capped at max_delay.
        """
        return min(max(elapsed, self.min_elapsed) * self.factor, self.max_delay)
