r"""Backoff strategies and retry timing checks.

This package decides when a task waiting in the retry queue may be
attempted again, and when it has to be abandoned.
"""

from __future__ import annotations

__all__ = [
    "BaseBackoffStrategy",
    "MultiplicativeBackoff",
    "is_time_to_bail",
    "is_time_to_retry",
]

from aretrier.backoff.base import BaseBackoffStrategy
from aretrier.backoff.multiplicative import MultiplicativeBackoff
from aretrier.backoff.policy import is_time_to_bail, is_time_to_retry
