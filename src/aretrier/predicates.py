r"""Ready-made retry predicates.

A predicate receives the error of a failed attempt and returns ``True``
if the operation should be attempted again.

Example:
    ```pycon
    >>> import errno
    >>> from aretrier.predicates import any_of, is_resource_exhausted, is_transient_http_error
    >>> check = any_of(is_resource_exhausted, is_transient_http_error)
    >>> check(OSError(errno.EMFILE, "Too many open files"))
    True
    >>> check(ValueError("bad input"))
    False

    ```
"""

from __future__ import annotations

__all__ = [
    "RESOURCE_EXHAUSTION_ERRNOS",
    "RETRY_STATUS_CODES",
    "any_of",
    "is_resource_exhausted",
    "is_transient_http_error",
]

import errno
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable

# EMFILE: too many open files in this process
# ENFILE: too many open files in the system
RESOURCE_EXHAUSTION_ERRNOS = (errno.EMFILE, errno.ENFILE)

# HTTP status codes worth another attempt
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def is_resource_exhausted(error: BaseException) -> bool:
    """Check whether an error reports exhausted file descriptors.

    Args:
        error: The error of a failed attempt.

    Returns:
        ``True`` for an ``OSError`` with errno ``EMFILE`` or ``ENFILE``.
    """
    return isinstance(error, OSError) and error.errno in RESOURCE_EXHAUSTION_ERRNOS


def is_transient_http_error(error: BaseException) -> bool:
    """Check whether an ``httpx`` error is likely to go away on its own.

    Timeouts (pool timeouts included) and network errors are transient,
    as are responses whose status is in ``RETRY_STATUS_CODES`` once
    turned into an ``httpx.HTTPStatusError`` by ``raise_for_status``.

    Args:
        error: The error of a failed attempt.

    Returns:
        ``True`` if the request should be sent again.

    Example:
        ```pycon
        >>> import httpx
        >>> from aretrier.predicates import is_transient_http_error
        >>> is_transient_http_error(httpx.ConnectTimeout("timed out"))
        True
        >>> request = httpx.Request("GET", "https://example.com")
        >>> response = httpx.Response(503, request=request)
        >>> is_transient_http_error(
        ...     httpx.HTTPStatusError("unavailable", request=request, response=response)
        ... )
        True

        ```
    """
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRY_STATUS_CODES
    return False


def any_of(
    *predicates: Callable[[BaseException], bool],
) -> Callable[[BaseException], bool]:
    """Combine predicates: an error is retryable if any of them accepts it.

    Args:
        *predicates: The predicates to combine.

    Returns:
        The combined predicate.
    """

    def check(error: BaseException) -> bool:
        return any(predicate(error) for predicate in predicates)

    return check
