r"""Exceptions raised by the retry scheduler.

Failures produced by the submitted operations themselves are never
wrapped: a non-retryable failure, or the last retryable failure of an
abandoned task, reaches the caller unchanged. The classes below only
cover the cases where the scheduler itself has to explain why a call
failed.
"""

from __future__ import annotations

__all__ = ["AbortError", "NotAwaitableError", "RetrierError", "SynchronousError"]


class RetrierError(Exception):
    """Base class for errors raised by the scheduler."""


class SynchronousError(RetrierError):
    """Raised when an operation fails before producing an awaitable.

    Synchronous failures are never retried. The original exception is
    chained as ``__cause__`` and is also available as ``cause``.

    Args:
        cause: The exception raised by the operation.

    Example:
        ```pycon
        >>> from aretrier.exceptions import SynchronousError
        >>> error = SynchronousError(ValueError("boom"))
        >>> str(error)
        'Synchronous error: boom'
        >>> error.__cause__
        ValueError('boom')

        ```
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Synchronous error: {cause}")
        self.cause = cause
        self.__cause__ = cause


class NotAwaitableError(RetrierError, TypeError):
    """Raised when an operation returns a value that cannot be awaited."""

    def __init__(self, message: str = "Result is not awaitable.") -> None:
        super().__init__(message)


class AbortError(RetrierError):
    """Default reason of an aborted signal.

    Example:
        ```pycon
        >>> from aretrier.exceptions import AbortError
        >>> raise AbortError()
        Traceback (most recent call last):
            ...
        aretrier.exceptions.AbortError: This operation was aborted

        ```
    """

    def __init__(self, message: str = "This operation was aborted") -> None:
        super().__init__(message)
