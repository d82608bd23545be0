r"""Cancellation signals for retried operations.

A signal is handed to ``Retrier.retry`` to cancel a call from outside.
Any object implementing the ``CancelSignal`` protocol is accepted;
``AbortController`` and ``AbortSignal`` provide a ready-made
implementation.

Example:
    ```pycon
    >>> from aretrier.abort import AbortController
    >>> controller = AbortController()
    >>> controller.signal.aborted
    False
    >>> controller.abort(ValueError("stop"))
    >>> controller.signal.aborted
    True
    >>> controller.signal.reason
    ValueError('stop')

    ```
"""

from __future__ import annotations

__all__ = ["AbortController", "AbortSignal", "CancelSignal", "abort_reason_to_exception"]

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from aretrier.exceptions import AbortError

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


def abort_reason_to_exception(reason: Any) -> BaseException:
    """Turn an abort reason into something a future can be failed with.

    Args:
        reason: The reason of a triggered signal.

    Returns:
        ``reason`` itself if it is an exception, an ``AbortError``
        otherwise.

    Example:
        ```pycon
        >>> from aretrier.abort import abort_reason_to_exception
        >>> abort_reason_to_exception(ValueError("stop"))
        ValueError('stop')
        >>> abort_reason_to_exception("user left")
        AbortError('user left')

        ```
    """
    if isinstance(reason, BaseException):
        return reason
    if reason is None:
        return AbortError()
    return AbortError(str(reason))


@runtime_checkable
class CancelSignal(Protocol):
    """Interface of a cancellation observer consumed by the scheduler."""

    @property
    def aborted(self) -> bool:
        """Whether the signal has already been triggered."""

    @property
    def reason(self) -> Any:
        """The value the caller receives when the signal is triggered."""

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback fired when the signal is triggered.

        Args:
            listener: Zero-argument callback.

        Returns:
            A function that removes the listener.
        """


class AbortSignal:
    """Observable cancellation flag.

    Signals are created by an ``AbortController``, or through the
    ``abort`` and ``timeout`` factories. Listeners fire once, in
    registration order, when the signal is triggered.
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Any = None
        self._listeners: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(aborted={self._aborted})"

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Any:
        return self._reason

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback fired when the signal is triggered.

        Listeners added after the signal fired are never called; check
        ``aborted`` first.

        Args:
            listener: Zero-argument callback.

        Returns:
            A function that removes the listener. Calling it more than
            once is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def throw_if_aborted(self) -> None:
        """Raise ``reason`` if the signal has been triggered.

        Raises:
            BaseException: The abort reason, when it is an exception.
            AbortError: When the reason is not an exception.
        """
        if self._aborted:
            raise abort_reason_to_exception(self._reason)

    def _trigger(self, reason: Any) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._reason = AbortError() if reason is None else reason
        listeners, self._listeners = self._listeners, []
        logger.debug(f"Signal aborted, notifying {len(listeners)} listener(s)")
        for listener in listeners:
            listener()

    @classmethod
    def abort(cls, reason: Any = None) -> AbortSignal:
        """Create a signal that is already aborted.

        Args:
            reason: The abort reason. Defaults to ``AbortError``.

        Returns:
            An aborted signal.

        Example:
            ```pycon
            >>> from aretrier.abort import AbortSignal
            >>> AbortSignal.abort().aborted
            True

            ```
        """
        signal = cls()
        signal._trigger(reason)
        return signal

    @classmethod
    def timeout(cls, delay: float) -> AbortSignal:
        """Create a signal aborted after ``delay`` seconds.

        Must be called from a running event loop. The reason is a
        ``TimeoutError``.

        Args:
            delay: Delay in seconds before the signal is triggered.

        Returns:
            A signal triggered by the event loop after ``delay``.
        """
        signal = cls()
        asyncio.get_running_loop().call_later(
            delay,
            signal._trigger,
            TimeoutError(f"The operation timed out after {delay} seconds"),
        )
        return signal


class AbortController:
    """Owner of an ``AbortSignal``.

    The controller keeps the right to trigger the signal, while the
    signal itself is handed to the code that has to observe it.
    """

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        return self._signal

    def abort(self, reason: Any = None) -> None:
        """Trigger the signal.

        Only the first call has an effect.

        Args:
            reason: The abort reason. Defaults to ``AbortError``.
        """
        self._signal._trigger(reason)
