r"""Shared test helpers for scheduler tests.

This module contains operations with scripted outcomes used across
multiple test files.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any


class TransientError(Exception):
    r"""Error accepted by ``is_transient``."""


class FatalError(Exception):
    r"""Error rejected by ``is_transient``."""


def is_transient(error: BaseException) -> bool:
    return isinstance(error, TransientError)


@dataclass
class ScriptedOperation:
    """Async operation failing with scripted errors before succeeding.

    Each call pops the next entry of ``errors``: an exception is raised,
    ``None`` means success. Once ``errors`` is exhausted every call
    succeeds with ``value``.

    Attributes:
        errors: Outcomes of the successive attempts.
        value: Value returned by successful attempts.
        delay: Seconds each attempt takes.
        calls: Number of times the operation was invoked.
    """

    errors: list[BaseException | None] = field(default_factory=list)
    value: Any = "done"
    delay: float = 0.0
    calls: int = 0

    def __call__(self) -> Any:
        self.calls += 1
        outcome = self.errors.pop(0) if self.errors else None
        return self._run(outcome)

    async def _run(self, outcome: BaseException | None) -> Any:
        await asyncio.sleep(self.delay)
        if outcome is not None:
            raise outcome
        return self.value


def flaky(failures: int, value: Any = "done", delay: float = 0.0) -> ScriptedOperation:
    r"""Create an operation failing ``failures`` times with ``TransientError``."""
    return ScriptedOperation(
        errors=[TransientError(f"attempt {i + 1}") for i in range(failures)],
        value=value,
        delay=delay,
    )


async def wait_until_idle(retrier: Any, timeout: float = 2.0) -> None:
    r"""Wait until the retrier has nothing left in any queue."""
    deadline = asyncio.get_running_loop().time() + timeout
    while retrier.retrying or retrier.pending or retrier.working:
        assert asyncio.get_running_loop().time() < deadline, repr(retrier)
        await asyncio.sleep(0.001)
