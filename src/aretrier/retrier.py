r"""Concurrency-bounded scheduler retrying asynchronous operations.

This module provides the ``Retrier`` class. Operations submitted with
``Retrier.retry`` are started in submission order as long as fewer than
``concurrency`` attempts are in flight. An attempt failing with an error
accepted by the retry predicate moves to the retry queue, where it is
attempted again with a growing delay until it succeeds, fails with a
non-retryable error, exceeds ``timeout``, or is aborted.
"""

from __future__ import annotations

__all__ = ["Retrier"]

import asyncio
import inspect
import logging
import time
from collections import deque
from functools import partial
from typing import TYPE_CHECKING, Any

from aretrier.abort import abort_reason_to_exception
from aretrier.backoff import MultiplicativeBackoff, is_time_to_bail, is_time_to_retry
from aretrier.core.config import RetrierConfig
from aretrier.core.validation import validate_check
from aretrier.exceptions import NotAwaitableError, SynchronousError
from aretrier.settlement import Settlement
from aretrier.task import PendingCall, RetryTask
from aretrier.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from aretrier.abort import CancelSignal
    from aretrier.backoff import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


class Retrier:
    """Retry asynchronous operations failing with transient errors.

    The retrier owns three collections: a FIFO queue of calls waiting for
    a concurrency slot, a counter of attempts in flight, and a queue of
    tasks waiting for their next retry. A call is in exactly one of them
    at any time.

    New calls are admitted in strict submission order. Tasks waiting for
    a retry give no ordering guarantee: a task that is not yet eligible,
    or that fails again, goes to the back of the retry queue.

    The retry queue is processed one task per event loop iteration, and
    only while there is something to do: no timer is left behind once
    both queues are empty. Timeouts are checked lazily, when the retry
    loop visits a task, so abandonment can lag ``timeout`` by up to one
    backoff interval.

    Args:
        check: Predicate receiving the error of a failed attempt and
            returning ``True`` if the operation should be attempted again.
        config: Optional scheduler configuration. Defaults to
            ``RetrierConfig()``.
        timeout: Overrides ``config.timeout`` if provided.
        max_delay: Overrides ``config.max_delay`` if provided.
        concurrency: Overrides ``config.concurrency`` if provided.
        backoff_strategy: Optional backoff strategy. Defaults to
            ``MultiplicativeBackoff(max_delay=config.max_delay)``.

    Raises:
        TypeError: If ``check`` is not callable or a configuration
            value has the wrong type.

    Example:
        ```pycon
        >>> import asyncio
        >>> import errno
        >>> from aretrier import Retrier
        >>> attempts = []
        >>> async def read():
        ...     attempts.append(1)
        ...     if len(attempts) < 3:
        ...         raise OSError(errno.EMFILE, "Too many open files")
        ...     return "content"
        ...
        >>> async def main():
        ...     retrier = Retrier(lambda error: getattr(error, "errno", None) == errno.EMFILE)
        ...     return await retrier.retry(read)
        ...
        >>> asyncio.run(main())
        'content'
        >>> len(attempts)
        3

        ```
    """

    def __init__(
        self,
        check: Callable[[BaseException], bool],
        *,
        config: RetrierConfig | None = None,
        timeout: float | None = None,
        max_delay: float | None = None,
        concurrency: int | None = None,
        backoff_strategy: BaseBackoffStrategy | None = None,
    ) -> None:
        validate_check(check)
        self._check = check
        self._config = (config if config is not None else RetrierConfig()).merge(
            timeout=timeout, max_delay=max_delay, concurrency=concurrency
        )
        self._backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy
            if backoff_strategy is not None
            else MultiplicativeBackoff(max_delay=self._config.max_delay)
        )

        self._pending: deque[PendingCall] = deque()
        self._retrying: deque[RetryTask] = deque()
        self._working = 0
        self._timer: asyncio.Handle | None = None
        # the event loop only keeps weak references to tasks
        self._attempts: set[asyncio.Future[Any]] = set()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(retrying={self.retrying}, "
            f"pending={self.pending}, working={self.working})"
        )

    @property
    def config(self) -> RetrierConfig:
        return self._config

    @property
    def backoff_strategy(self) -> BaseBackoffStrategy:
        return self._backoff_strategy

    @property
    def retrying(self) -> int:
        r"""Number of tasks waiting to be retried."""
        return len(self._retrying)

    @property
    def pending(self) -> int:
        r"""Number of calls waiting for a concurrency slot."""
        return len(self._pending)

    @property
    def working(self) -> int:
        r"""Number of calls started and not yet settled.

        A task waiting for its next retry still holds its slot.
        """
        return self._working

    def retry(
        self,
        fn: Callable[[], Awaitable[Any]],
        *,
        signal: CancelSignal | None = None,
    ) -> asyncio.Future[Any]:
        """Call ``fn`` and retry it while it fails with retryable errors.

        The call is queued and the admission loop runs before this
        method returns, so ``fn`` has already been invoked once if a
        concurrency slot was free. Must be called from a running event
        loop.

        Args:
            fn: Zero-argument callable returning an awaitable. It is
                invoked once per attempt.
            signal: Optional cancellation signal. Once triggered, the
                returned future fails with the signal's reason.

        Returns:
            A future resolved with the result of the first successful
            attempt, or failed with:

            - ``SynchronousError`` if ``fn`` raised instead of returning
              an awaitable,
            - ``NotAwaitableError`` if ``fn`` returned something that
              cannot be awaited,
            - the error itself if the retry predicate rejected it,
            - the last retryable error if the task exceeded ``timeout``,
            - the signal's reason if the signal was triggered.

            Cancelling the returned future gives up on the call.

        Raises:
            BaseException: The signal's reason, if ``signal`` is already
                aborted. ``fn`` is not invoked.
        """
        if signal is not None and signal.aborted:
            raise abort_reason_to_exception(signal.reason)

        settlement = Settlement(asyncio.get_running_loop().create_future())
        self._pending.append(PendingCall(fn=fn, signal=signal, settlement=settlement))
        self._process_pending()
        return settlement.future

    def _stats(self) -> dict[str, int]:
        return {"retrying": self.retrying, "pending": self.pending, "working": self.working}

    def _should_retry(self, error: BaseException) -> tuple[bool, BaseException]:
        """Classify the error of a failed attempt.

        Returns:
            Tuple of (should_retry, error to report). A predicate that
            raises makes the failure terminal and its own exception is
            reported.
        """
        try:
            return (bool(self._check(error)), error)
        except Exception as exc:
            logger.debug(f"Retry predicate raised {type(exc).__name__} for {error!r}")
            return (False, exc)

    def _track(self, awaitable: Awaitable[Any]) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(awaitable)
        self._attempts.add(future)
        future.add_done_callback(self._attempts.discard)
        return future

    def _process_pending(self) -> None:
        """Start pending calls while concurrency slots are free."""
        log_structured(logger, logging.DEBUG, "Processing pending tasks.", **self._stats())
        while self._pending and self._working < self._config.concurrency:
            self._start(self._pending.popleft())
        log_structured(logger, logging.DEBUG, "Processed pending tasks.", **self._stats())

    def _start(self, call: PendingCall) -> None:
        if call.settlement.settled:
            # cancelled by the caller while pending
            return
        if call.signal is not None and call.signal.aborted:
            call.settlement.reject(abort_reason_to_exception(call.signal.reason))
            return

        try:
            result = call.fn()
        except BaseException as exc:  # noqa: BLE001
            # must not escape into the done-callback of another call
            call.settlement.reject(SynchronousError(exc))
            return

        if not inspect.isawaitable(result):
            call.settlement.reject(NotAwaitableError())
            return

        self._working += 1
        future = self._track(result)
        future.add_done_callback(partial(self._on_first_attempt_done, call))

    def _on_first_attempt_done(self, call: PendingCall, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            self._working -= 1
            call.settlement.cancel()
            self._process_pending()
            return

        error = future.exception()
        if error is None:
            log_structured(
                logger, logging.DEBUG, "Function called successfully without retry.", **self._stats()
            )
            self._working -= 1
            call.settlement.resolve(future.result())
            self._process_pending()
            return

        should_retry, error = self._should_retry(error)
        if not should_retry:
            self._working -= 1
            call.settlement.reject(error)
            self._process_pending()
            return

        task = RetryTask(call.fn, error, call.settlement, call.signal)
        self._retrying.append(task)
        log_structured(
            logger,
            logging.DEBUG,
            f"Function failed, queuing for retry with task {task.id}.",
            task_id=task.id,
            **self._stats(),
        )
        task.watch_signal()
        self._process_queue()

    def _process_again(self) -> None:
        self._timer = asyncio.get_running_loop().call_soon(self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._process_pending()
        self._process_queue()

    def _process_queue(self) -> None:
        """Examine the task at the front of the retry queue."""
        # a pass is starting now, any scheduled one is redundant
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        log_structured(logger, logging.DEBUG, "Processing retry queue.", **self._stats())

        if not self._retrying:
            logger.debug("Queue is empty, exiting.")
            if self._pending:
                self._process_again()
            return

        task = self._retrying.popleft()

        if task.settled:
            self._working -= 1
            task.cancel()
            log_structured(
                logger,
                logging.DEBUG,
                f"Task {task.id} was already settled, dropping it.",
                task_id=task.id,
                **self._stats(),
            )
            self._process_again()
            return

        if is_time_to_bail(task, self._config.timeout):
            self._working -= 1
            log_structured(
                logger,
                logging.DEBUG,
                f"Task {task.id} was abandoned due to timeout.",
                task_id=task.id,
                **self._stats(),
            )
            task.reject(task.error)
            self._process_again()
            return

        if not is_time_to_retry(task, self._backoff_strategy):
            self._retrying.append(task)
            self._process_again()
            return

        task.last_attempt = time.monotonic()
        try:
            result = task.fn()
        except BaseException as exc:  # noqa: BLE001
            self._working -= 1
            task.reject(SynchronousError(exc))
            self._process_again()
            return

        if not inspect.isawaitable(result):
            self._working -= 1
            task.reject(NotAwaitableError())
            self._process_again()
            return

        future = self._track(result)
        future.add_done_callback(partial(self._on_retry_done, task))

    def _on_retry_done(self, task: RetryTask, future: asyncio.Future[Any]) -> None:
        try:
            self._settle_retry(task, future)
        finally:
            self._process_pending()
            self._process_queue()

    def _settle_retry(self, task: RetryTask, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            self._working -= 1
            task.cancel()
            return

        error = future.exception()
        if error is None:
            self._working -= 1
            log_structured(
                logger,
                logging.DEBUG,
                f"Task {task.id} succeeded after {task.age:.3f}s.",
                task_id=task.id,
                **self._stats(),
            )
            task.resolve(future.result())
            return

        should_retry, error = self._should_retry(error)
        if not should_retry:
            self._working -= 1
            log_structured(
                logger,
                logging.DEBUG,
                f"Task {task.id} failed with non-retryable error: {error}.",
                task_id=task.id,
                **self._stats(),
            )
            task.reject(error)
            return

        if task.settled:
            # aborted while this attempt was running
            self._working -= 1
            task.cancel()
            return

        task.error = error
        task.last_attempt = time.monotonic()
        self._retrying.append(task)
        log_structured(
            logger,
            logging.DEBUG,
            f"Task {task.id} failed, requeueing to try again.",
            task_id=task.id,
            **self._stats(),
        )
