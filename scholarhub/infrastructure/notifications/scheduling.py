"""Schedule coroutine deliveries without blocking the caller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
from anyio import from_thread

logger = logging.getLogger(__name__)

_pending_tasks: set[asyncio.Task[Any]] = set()
_delivery_loop: asyncio.AbstractEventLoop | None = None


def bind_delivery_loop(loop: asyncio.AbstractEventLoop | None) -> None:
    """Register the loop that owns the websocket connections.

    Threads not started by anyio hand their deliveries to this loop. Pass
    ``None`` on shutdown.
    """

    global _delivery_loop
    _delivery_loop = loop


def schedule_delivery(
    func: Callable[..., Awaitable[Any]], *args: Any
) -> None:
    """Run ``func(*args)`` on the event loop and return immediately.

    Inside the loop the coroutine becomes a task. From a worker thread started
    by anyio (FastAPI runs sync endpoints there) the task is created through
    the loop's portal. Any other thread hands the task to the bound delivery
    loop while it runs. Without any loop, as in the maintenance scripts, the
    coroutine runs to completion inline.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        _create_task(func, args)
        return

    try:
        from_thread.run_sync(_create_task, func, args)
        return
    except RuntimeError:
        pass

    loop = _delivery_loop
    if loop is not None and loop.is_running():
        loop.call_soon_threadsafe(_create_task, func, args)
        return

    logger.debug("No running event loop; delivering %s inline", func)
    anyio.run(_run_guarded, func, args)


def _create_task(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    loop = asyncio.get_running_loop()
    task = loop.create_task(_run_guarded(func, args))
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)


async def _run_guarded(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    try:
        await func(*args)
    except Exception:
        logger.exception("Scheduled delivery %s failed", getattr(func, "__qualname__", func))


async def drain_pending_deliveries() -> None:
    """Wait for every delivery scheduled on the current loop."""

    loop = asyncio.get_running_loop()
    while True:
        tasks = [task for task in _pending_tasks if task.get_loop() is loop]
        if not tasks:
            return
        await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["bind_delivery_loop", "drain_pending_deliveries", "schedule_delivery"]
