r"""aretrier - Retry asynchronous operations failing with transient errors.

This package provides a scheduler that runs asynchronous operations under
a global concurrency cap and retries the ones failing with errors a
caller-supplied predicate deems transient, such as "too many open files".
Retries back off multiplicatively up to a small cap, and give up once a
task has been retrying for longer than a timeout.

Key Features:
    - Strict first-in first-out admission under a concurrency cap
    - Multiplicative backoff computed from each task's own history
    - Timeout reporting the last real error rather than a synthetic one
    - Cancellation through ``AbortController`` / ``AbortSignal``
    - Exactly one settlement per submitted call
    - Ready-made predicates for file descriptor exhaustion and
      transient ``httpx`` errors

Example:
    ```pycon
    >>> import asyncio
    >>> from aretrier import Retrier
    >>> from aretrier.predicates import is_resource_exhausted
    >>> async def main():
    ...     retrier = Retrier(is_resource_exhausted, concurrency=100)
    ...     async def read():
    ...         return "data"
    ...     return await retrier.retry(read)
    ...
    >>> asyncio.run(main())
    'data'

    ```
"""

from __future__ import annotations

__all__ = [
    "AbortController",
    "AbortError",
    "AbortSignal",
    "NotAwaitableError",
    "Retrier",
    "RetrierConfig",
    "RetrierError",
    "SynchronousError",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from aretrier.abort import AbortController, AbortSignal
from aretrier.core.config import RetrierConfig
from aretrier.exceptions import AbortError, NotAwaitableError, RetrierError, SynchronousError
from aretrier.retrier import Retrier

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
