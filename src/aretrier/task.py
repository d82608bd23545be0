r"""Records describing submitted calls.

A call lives in exactly one place at a time: the pending queue (as a
``PendingCall``), in flight, or the retry queue (as a ``RetryTask``).
"""

from __future__ import annotations

__all__ = ["PendingCall", "RetryTask"]

import logging
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from aretrier.abort import abort_reason_to_exception

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from aretrier.abort import CancelSignal
    from aretrier.settlement import Settlement

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingCall:
    """A submitted call waiting for a free concurrency slot.

    Attributes:
        fn: The operation to invoke.
        signal: Optional cancellation signal.
        settlement: Token bound to the caller's future.
    """

    fn: Callable[[], Awaitable[Any]]
    signal: CancelSignal | None
    settlement: Settlement


class RetryTask:
    """Retry state of a call whose first attempt failed with a retryable
    error.

    The task is mutated in place on every attempt: ``error`` always holds
    the most recent retryable failure and ``last_attempt`` the time of the
    most recent invocation. ``created_at`` never changes and is used to
    decide when the task is abandoned.

    Args:
        fn: The operation to invoke on every attempt.
        error: The retryable failure of the first attempt.
        settlement: Token bound to the caller's future.
        signal: Optional cancellation signal.

    Attributes:
        id: Short random identifier, for diagnostics only.
        created_at: ``time.monotonic()`` value at creation.
        last_attempt: ``time.monotonic()`` value of the latest attempt.
    """

    def __init__(
        self,
        fn: Callable[[], Awaitable[Any]],
        error: BaseException,
        settlement: Settlement,
        signal: CancelSignal | None = None,
    ) -> None:
        self.id = uuid.uuid4().hex[:10]
        self.fn = fn
        self.error = error
        self.settlement = settlement
        self.signal = signal
        self.created_at = time.monotonic()
        self.last_attempt = self.created_at
        self._unsubscribe: Callable[[], None] | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(id={self.id!r}, age={self.age:.3f}, "
            f"settled={self.settled})"
        )

    @property
    def age(self) -> float:
        r"""Seconds elapsed since the task was created."""
        return time.monotonic() - self.created_at

    @property
    def settled(self) -> bool:
        return self.settlement.settled

    def watch_signal(self) -> None:
        """Reject the task as soon as its signal is triggered.

        The task stays in whatever queue it is in; the scheduler drops
        settled tasks the next time it visits them. A signal that fired
        before the task existed rejects it right away.
        """
        signal = self.signal
        if signal is None:
            return
        if signal.aborted:
            self._abort()
            return
        self._unsubscribe = signal.add_listener(self._abort)

    def resolve(self, value: Any) -> bool:
        """Fulfill the caller's future and release the signal listener."""
        self._release()
        return self.settlement.resolve(value)

    def reject(self, error: BaseException) -> bool:
        """Fail the caller's future and release the signal listener."""
        self._release()
        return self.settlement.reject(error)

    def cancel(self) -> bool:
        """Cancel the caller's future and release the signal listener."""
        self._release()
        return self.settlement.cancel()

    def _abort(self) -> None:
        logger.debug(f"Task {self.id} was aborted by its signal.")
        self.reject(abort_reason_to_exception(self.signal.reason))

    def _release(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
