r"""Configuration dataclass and defaults for the Retrier.

This module provides configuration constants and a dataclass-based
configuration object for the ``Retrier`` scheduler.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_TIMEOUT",
    "RetrierConfig",
]

from dataclasses import asdict, dataclass, replace
from typing import Any

from aretrier.core.validation import validate_config_types

# Maximum lifetime in seconds of a task waiting to be retried
# After this, the task is abandoned with its last error
DEFAULT_TIMEOUT = 60.0

# Cap in seconds for the delay between two attempts of the same task
# Kept low on purpose: exhaustion errors usually clear up quickly
DEFAULT_MAX_DELAY = 0.1

# Maximum number of attempts awaited at the same time
DEFAULT_CONCURRENCY = 1000


@dataclass
class RetrierConfig:
    """Configuration for Retrier scheduling behavior.

    Values are validated by type only. Zero or negative values are
    accepted and used as-is.

    Args:
        timeout: Maximum time in seconds a task may keep retrying,
            measured from its first failure.
        max_delay: Maximum backoff delay in seconds between two
            attempts of the same task.
        concurrency: Maximum number of attempts in flight at once.

    Example:
        ```pycon
        >>> from aretrier.core.config import RetrierConfig
        >>> config = RetrierConfig()
        >>> config.concurrency
        1000
        >>> merged = config.merge(concurrency=10)
        >>> merged.concurrency
        10
        >>> config.concurrency
        1000

        ```
    """

    timeout: float = DEFAULT_TIMEOUT
    max_delay: float = DEFAULT_MAX_DELAY
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            TypeError: If any parameter has the wrong type.
        """
        validate_config_types(
            timeout=self.timeout,
            max_delay=self.max_delay,
            concurrency=self.concurrency,
        )

    def merge(self, **overrides: Any) -> RetrierConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new RetrierConfig instance with overrides applied.

        Example:
            ```pycon
            >>> from aretrier.core.config import RetrierConfig
            >>> RetrierConfig(timeout=5.0).merge(timeout=None, max_delay=0.5)
            RetrierConfig(timeout=5.0, max_delay=0.5, concurrency=1000)

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary with the configuration parameters.
        """
        return asdict(self)
