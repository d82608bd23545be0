r"""Single-use completion token for a submitted call.

Cancellation races make double settlement routine: a task aborted while
it waits for a retry still gets visited by the retry loop afterwards.
``Settlement`` turns those redundant calls into no-ops instead of
``InvalidStateError``.
"""

from __future__ import annotations

__all__ = ["Settlement"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import asyncio


class Settlement:
    """Wrap the future returned to the caller with an explicit
    ``unsettled -> settled`` state.

    The first of ``resolve``, ``reject`` or ``cancel`` wins and returns
    ``True``. Every later call returns ``False`` and leaves the future
    untouched. Cancelling the future from the caller side also moves the
    token to the settled state.

    Args:
        future: The future awaited by the caller.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretrier.settlement import Settlement
        >>> async def main():
        ...     settlement = Settlement(asyncio.get_running_loop().create_future())
        ...     first = settlement.resolve(1)
        ...     second = settlement.reject(ValueError("late"))
        ...     return first, second, await settlement.future
        ...
        >>> asyncio.run(main())
        (True, False, 1)

        ```
    """

    def __init__(self, future: asyncio.Future[Any]) -> None:
        self._future = future
        self._settled = False
        future.add_done_callback(self._on_future_done)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(settled={self._settled})"

    @property
    def future(self) -> asyncio.Future[Any]:
        return self._future

    @property
    def settled(self) -> bool:
        return self._settled or self._future.done()

    def resolve(self, value: Any) -> bool:
        """Fulfill the future with ``value`` unless already settled."""
        if not self._settle():
            return False
        self._future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        """Fail the future with ``error`` unless already settled."""
        if not self._settle():
            return False
        self._future.set_exception(error)
        return True

    def cancel(self) -> bool:
        """Cancel the future unless already settled."""
        if not self._settle():
            return False
        self._future.cancel()
        return True

    def _settle(self) -> bool:
        if self._settled or self._future.done():
            self._settled = True
            return False
        self._settled = True
        return True

    def _on_future_done(self, future: asyncio.Future[Any]) -> None:
        # the caller may cancel the future directly
        self._settled = True
