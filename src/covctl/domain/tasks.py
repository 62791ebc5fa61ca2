"""Fire-and-forget task helpers.

Background tasks spawned from event handlers are never awaited by whoever
triggered them, so their exceptions must be retrieved and logged here or
they surface later as "Task exception was never retrieved" noise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


def _task_label(task: asyncio.Task[Any], context: str | None) -> str:
    if context:
        return context
    return task.get_name() or "background task"


def add_task_exception_logger(
    task: asyncio.Task[Any],
    *,
    context: str | None = None,
) -> asyncio.Task[Any]:
    """Ensure *task*'s exception is retrieved and logged when it finishes."""

    def _done(done_task: asyncio.Task[Any]) -> None:
        if done_task.cancelled():
            return
        exc = done_task.exception()
        if exc is not None:
            logger.error(
                "Unhandled exception in %s",
                _task_label(done_task, context),
                exc_info=exc,
            )

    task.add_done_callback(_done)
    return task


def create_logged_task(
    coro: Coroutine[Any, Any, Any],
    *,
    context: str | None = None,
    pending: set[asyncio.Task[Any]] | None = None,
) -> asyncio.Task[Any]:
    """Schedule *coro* on the running loop without losing its exceptions.

    When *pending* is given the task is added to it and removed again once
    done, so an owner can join its outstanding work.
    """
    loop = asyncio.get_running_loop()
    task = loop.create_task(coro, name=context)
    add_task_exception_logger(task, context=context)

    if pending is not None:
        pending.add(task)
        task.add_done_callback(pending.discard)

    return task
