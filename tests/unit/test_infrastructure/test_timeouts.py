"""Unit tests for timeout races."""

import asyncio

import pytest

pytest_plugins = ('pytest_asyncio',)

from stylescope.errors import EvaluationTimeout
from stylescope.infrastructure.timeouts import race_with_timeout


def _timeout():
    return EvaluationTimeout("timed out", 50)


@pytest.mark.asyncio
async def test_fast_operation_returns_result():
    async def fast():
        return 42

    assert await race_with_timeout(fast(), 1000, _timeout) == 42


@pytest.mark.asyncio
async def test_slow_operation_raises_timeout():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(EvaluationTimeout) as exc_info:
        await race_with_timeout(slow(), 50, _timeout)

    assert exc_info.value.timeout_ms == 50
    await asyncio.sleep(0.01)
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_operation_error_propagates():
    async def broken():
        raise RuntimeError("Protocol error")

    with pytest.raises(RuntimeError, match="Protocol error"):
        await race_with_timeout(broken(), 1000, _timeout)
