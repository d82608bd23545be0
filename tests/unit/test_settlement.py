r"""Unit tests for the Settlement token."""

from __future__ import annotations

import asyncio

import pytest

from aretrier.settlement import Settlement


@pytest.mark.asyncio
async def test_settlement_resolve() -> None:
    settlement = Settlement(asyncio.get_running_loop().create_future())
    assert not settlement.settled
    assert settlement.resolve(1)
    assert settlement.settled
    assert await settlement.future == 1


@pytest.mark.asyncio
async def test_settlement_reject() -> None:
    settlement = Settlement(asyncio.get_running_loop().create_future())
    assert settlement.reject(ValueError("boom"))
    with pytest.raises(ValueError, match=r"boom"):
        await settlement.future


@pytest.mark.asyncio
async def test_settlement_second_call_is_noop() -> None:
    """Test that only the first settlement has an effect."""
    settlement = Settlement(asyncio.get_running_loop().create_future())
    assert settlement.reject(ValueError("first"))
    assert not settlement.resolve(2)
    assert not settlement.reject(KeyError("second"))
    assert not settlement.cancel()
    with pytest.raises(ValueError, match=r"first"):
        await settlement.future


@pytest.mark.asyncio
async def test_settlement_cancel() -> None:
    settlement = Settlement(asyncio.get_running_loop().create_future())
    assert settlement.cancel()
    assert settlement.future.cancelled()
    assert not settlement.resolve(1)


@pytest.mark.asyncio
async def test_settlement_caller_cancelled_future() -> None:
    """Test that cancelling the future from outside settles the token."""
    settlement = Settlement(asyncio.get_running_loop().create_future())
    settlement.future.cancel()
    assert settlement.settled
    assert not settlement.resolve(1)
    await asyncio.sleep(0)
    assert settlement.settled


@pytest.mark.asyncio
async def test_settlement_repr() -> None:
    settlement = Settlement(asyncio.get_running_loop().create_future())
    assert repr(settlement) == "Settlement(settled=False)"
    settlement.resolve(None)
    assert repr(settlement) == "Settlement(settled=True)"
