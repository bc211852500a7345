"""
Timeout races for browser operations.

Playwright calls can hang well past their own timeout when the browser is
wedged, so every call that talks to the browser is raced against a local
timer. The loser is cancelled on a best-effort basis and otherwise
abandoned; the caller still owns page/session cleanup.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from ..errors import TimeoutFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _consume_outcome(task: "asyncio.Future[Any]") -> None:
    """Retrieve an abandoned task's outcome so it is never reported as unhandled."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Abandoned browser operation finished with: {error}")


async def race_with_timeout(
    operation: Awaitable[T],
    timeout_ms: int,
    on_timeout: Callable[[], TimeoutFailure],
) -> T:
    """
    Await an operation, failing as soon as a timer expires first.

    Args:
        operation: Coroutine or future to run
        timeout_ms: Timer length in milliseconds
        on_timeout: Factory for the exception raised when the timer wins

    Returns:
        The operation's result

    Raises:
        TimeoutFailure: As built by on_timeout, if the timer settles first
        Exception: Whatever the operation raises, if it settles first
    """
    task = asyncio.ensure_future(operation)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        task.add_done_callback(_consume_outcome)
        raise

    if task in done:
        return task.result()

    task.add_done_callback(_consume_outcome)
    task.cancel()
    raise on_timeout()
