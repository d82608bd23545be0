r"""Utility helpers shared across the package."""

from __future__ import annotations

__all__ = ["StructuredFormatter", "log_structured"]

from aretrier.utils.structured_logging import StructuredFormatter, log_structured
