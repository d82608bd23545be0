from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

from aretrier import Retrier
from tests.helpers import is_transient

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def retrier() -> Retrier:
    """Create a Retrier retrying ``TransientError`` with short timings."""
    return Retrier(is_transient, timeout=1.0, max_delay=0.01)


@pytest.fixture
def mock_check() -> Mock:
    """Create a mock retry predicate accepting every error."""
    return Mock(return_value=True)


@pytest.fixture
def mock_monotonic() -> Generator[Mock, None, None]:
    """Patch time.monotonic with a clock starting at 100.0.

    Set ``return_value`` to move the clock. The event loop reads the
    same clock, so only use this fixture in synchronous tests.
    """
    with patch("time.monotonic", return_value=100.0) as mock:
        yield mock
