r"""Core configuration and validation shared by the scheduler."""

from __future__ import annotations

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_TIMEOUT",
    "RetrierConfig",
    "validate_check",
    "validate_config_types",
]

from aretrier.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_DELAY,
    DEFAULT_TIMEOUT,
    RetrierConfig,
)
from aretrier.core.validation import validate_check, validate_config_types
