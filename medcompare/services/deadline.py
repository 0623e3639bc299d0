from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from medcompare.errors import DeadlineExceeded, RetrievalError
from medcompare.services.logger import get_logger

T = TypeVar("T")

logger = get_logger("deadline")


def _consume_outcome(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned task %s finished with %r", task.get_name(), exc)


async def with_deadline(aw: Awaitable[T], seconds: float, label: str = "task") -> T:
    """Await ``aw`` for at most ``seconds``.

    On expiry the inner task is cancelled but not awaited, so a slow
    cancellation never holds the caller past the deadline. Its outcome is
    consumed in a done-callback. A task that cancels itself is reported as a
    ``RetrievalError`` rather than cancelling the caller.
    """
    task = asyncio.ensure_future(aw)
    try:
        done, _ = await asyncio.wait({task}, timeout=max(seconds, 0))
    except asyncio.CancelledError:
        task.cancel()
        task.add_done_callback(_consume_outcome)
        raise

    if task in done:
        # Caller is still running, so the cancellation came from inside the task.
        if task.cancelled():
            raise RetrievalError(f"{label} was cancelled")
        return task.result()

    task.cancel()
    task.add_done_callback(_consume_outcome)
    raise DeadlineExceeded(label, seconds)
