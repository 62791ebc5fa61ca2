"""DelegateCommand — a user-invocable action with an enablement predicate.

A command re-announces its enablement through :attr:`can_execute_changed`
whenever one of its trigger properties changes on the source object, so
bound controls never need to re-subscribe.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from covctl.domain.observable import ObservableObject, Signal
from covctl.domain.tasks import create_logged_task

logger = logging.getLogger(__name__)


class DelegateCommand:
    """Command built from plain callables.

    Parameters:
        execute: Called with the command parameter. May return a coroutine,
            in which case :meth:`execute` schedules it as a background task.
        can_execute: Optional predicate over the parameter; always enabled
            when omitted.
        source: Observable object whose property changes re-evaluate
            enablement.
        triggers: Property names on *source* that affect :meth:`can_execute`.
        name: Label used in logs and background task names.
    """

    def __init__(
        self,
        execute: Callable[[Any], Any],
        can_execute: Callable[[Any], bool] | None = None,
        *,
        source: ObservableObject | None = None,
        triggers: Iterable[str] = (),
        name: str | None = None,
        pending: set[asyncio.Task[Any]] | None = None,
    ) -> None:
        self._execute = execute
        self._can_execute = can_execute
        self._pending = pending
        self.name = name or getattr(execute, "__name__", "command")
        self.can_execute_changed = Signal(f"{self.name}.can_execute_changed")
        self.failed = Signal(f"{self.name}.failed")
        self.triggers = tuple(triggers)
        if source is not None:
            for prop in self.triggers:
                source.subscribe(prop, self.raise_can_execute_changed)

    def can_execute(self, parameter: Any = None) -> bool:
        if self._can_execute is None:
            return True
        return bool(self._can_execute(parameter))

    def raise_can_execute_changed(self) -> None:
        self.can_execute_changed.emit(self)

    def execute(self, parameter: Any = None) -> Any:
        """Run the command, fire-and-forget for coroutine actions.

        Returns the action's result, or the scheduled task for coroutine
        actions. Failures are announced on :attr:`failed`; synchronous
        failures are re-raised as well.
        """
        if not self.can_execute(parameter):
            logger.debug("Command %s is disabled; ignoring execute", self.name)
            return None
        try:
            result = self._execute(parameter)
        except Exception as exc:
            self.failed.emit(exc)
            raise

        if inspect.iscoroutine(result):
            try:
                task = create_logged_task(result, context=self.name, pending=self._pending)
            except RuntimeError as exc:
                result.close()
                self.failed.emit(exc)
                raise
            task.add_done_callback(self._report_task_failure)
            return task
        return result

    async def execute_async(self, parameter: Any = None) -> Any:
        """Run the command and wait for it, raising any failure."""
        if not self.can_execute(parameter):
            logger.debug("Command %s is disabled; ignoring execute", self.name)
            return None
        try:
            result = self._execute(parameter)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self.failed.emit(exc)
            raise
        return result

    def _report_task_failure(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.failed.emit(exc)

    def __repr__(self) -> str:
        return f"DelegateCommand({self.name!r})"
