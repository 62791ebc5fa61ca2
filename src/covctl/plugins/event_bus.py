"""WAL-backed event dispatch to plugins via pluggy + ThreadPoolExecutor.

Each lifecycle event is written to the ``event_wal`` table before dispatch,
so an event whose plugin failed (or whose process exited mid-flight) can
be retried with :meth:`EventBus.drain`.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from covctl.infrastructure.database.schema import event_wal

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from covctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class EventBus:
    """Dispatches lifecycle hooks to plugins.

    Parameters:
        engine: SQLAlchemy engine with the ``event_wal`` table.
        plugin_manager: PluginManager whose hook relay receives events.
        sync: Dispatch on the calling thread (``--sync`` and tests).
        max_retries: Attempts before an event is marked ``dead_letter``.
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._sync = sync
        self._max_retries = max_retries
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Record the event, then run its hook. Returns the WAL row id."""
        event_id = self._write_wal(hook_name, payload)

        if self._executor is None:
            self._execute_hook(event_id, hook_name, payload)
        else:
            self._futures.append(
                self._executor.submit(self._execute_hook, event_id, hook_name, payload)
            )
        return event_id

    def drain(self) -> list[dict[str, Any]]:
        """Join in-flight events, then retry pending/failed ones synchronously.

        Returns ``{id, hook_name, status}`` for each retried event.
        """
        self._wait_futures()

        with self._engine.connect() as conn:
            rows = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_(["pending", "failed"]))
                .order_by(event_wal.c.id)
            ).fetchall()

        results: list[dict[str, Any]] = []
        for row in rows:
            self._execute_hook(row.id, row.hook_name, json.loads(row.payload))
            with self._engine.connect() as conn:
                status = conn.execute(
                    select(event_wal.c.status).where(event_wal.c.id == row.id)
                ).scalar_one()
            results.append({"id": row.id, "hook_name": row.hook_name, "status": status})
        return results

    def shutdown(self) -> None:
        """Wait for in-flight events and stop the worker pool."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_wal(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload, default=str),
                    status="pending",
                    retries=0,
                    created=_now(),
                )
            )
            assert result.lastrowid is not None
            return result.lastrowid

    def _execute_hook(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> None:
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            self._mark_completed(event_id)
            return

        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed: %s", hook_name, exc)
            self._mark_failed(event_id, str(exc))
        else:
            self._mark_completed(event_id)

    def _mark_completed(self, event_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(status="completed", completed=_now())
            )

    def _mark_failed(self, event_id: int, error: str) -> None:
        """Count the attempt; give up after ``max_retries``."""
        with self._engine.begin() as conn:
            retries = conn.execute(
                select(event_wal.c.retries).where(event_wal.c.id == event_id)
            ).scalar_one() + 1
            status = "dead_letter" if retries >= self._max_retries else "failed"
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(
                    status=status,
                    error=error,
                    retries=retries,
                    completed=_now() if status == "dead_letter" else None,
                )
            )

    def _wait_futures(self) -> None:
        for future in self._futures:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("Event future failed", exc_info=True)
        self._futures.clear()
