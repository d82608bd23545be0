r"""Validation utilities for Retrier construction.

These checks run once, when a ``Retrier`` or ``RetrierConfig`` is
created. They only check types: ranges are deliberately left to the
caller.
"""

from __future__ import annotations

__all__ = ["validate_check", "validate_config_types"]

from typing import Any


def validate_check(check: Any) -> None:
    """Validate the retry predicate.

    Args:
        check: The predicate deciding whether an error is retryable.

    Raises:
        TypeError: If ``check`` is not callable.

    Example:
        ```pycon
        >>> from aretrier.core.validation import validate_check
        >>> validate_check(lambda error: True)
        >>> validate_check(None)
        Traceback (most recent call last):
            ...
        TypeError: Missing function to check errors

        ```
    """
    if not callable(check):
        msg = "Missing function to check errors"
        raise TypeError(msg)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config_types(timeout: Any, max_delay: Any, concurrency: Any) -> None:
    """Validate the types of the scheduler parameters.

    Args:
        timeout: Maximum retry lifetime in seconds. Must be a number.
        max_delay: Backoff delay cap in seconds. Must be a number.
        concurrency: Maximum number of in-flight attempts. Must be an int.

    Raises:
        TypeError: If a parameter has the wrong type.

    Example:
        ```pycon
        >>> from aretrier.core.validation import validate_config_types
        >>> validate_config_types(timeout=60.0, max_delay=0.1, concurrency=1000)
        >>> validate_config_types(timeout="60", max_delay=0.1, concurrency=1000)
        Traceback (most recent call last):
            ...
        TypeError: timeout must be a number, got str

        ```
    """
    if not _is_number(timeout):
        msg = f"timeout must be a number, got {type(timeout).__name__}"
        raise TypeError(msg)
    if not _is_number(max_delay):
        msg = f"max_delay must be a number, got {type(max_delay).__name__}"
        raise TypeError(msg)
    if not isinstance(concurrency, int) or isinstance(concurrency, bool):
        msg = f"concurrency must be an int, got {type(concurrency).__name__}"
        raise TypeError(msg)
