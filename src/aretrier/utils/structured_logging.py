r"""Structured logging utilities for machine-readable log output.

The scheduler attaches its queue occupancy (``retrying``, ``pending``,
``working``) and the id of the task involved to every debug record it
emits. ``StructuredFormatter`` renders those records as JSON, which is
handy when chasing a stalled queue through log aggregation.

The formatter is opt-in:

```python
import logging
from aretrier.utils.structured_logging import StructuredFormatter

handler = logging.StreamHandler()
handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("aretrier")
logger.addHandler(handler)
logger.setLevel(logging.DEBUG)
```
"""

from __future__ import annotations

__all__ = ["StructuredFormatter", "log_structured"]

import json
import logging
import time
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 timestamp (UTC, millisecond precision)
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - module, function, line: Origin of the record

    Fields passed through ``extra`` (or ``log_structured``) are added as
    top-level keys. Values that are not JSON serializable are rendered
    with ``repr``.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from aretrier.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Queue drained", extra={"working": 0})
        >>> '"working": 0' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_data[key] = value

        return json.dumps(log_data, default=repr)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format timestamp as ISO 8601, ignoring ``datefmt``."""
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    Nothing is computed when ``level`` is disabled for ``logger``.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.DEBUG).
        message: Log message.
        **extra: Additional structured fields to include in the record.

    Example:
        ```pycon
        >>> import logging
        >>> from aretrier.utils.structured_logging import log_structured
        >>> log_structured(logging.getLogger("aretrier"), logging.DEBUG, "idle", working=0)

        ```
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra=extra)
