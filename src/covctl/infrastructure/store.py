"""Durable key/value settings store backed by the ``settings`` table.

Values are JSON-encoded. Every write is its own transaction, so a value
returned by :meth:`SettingsStore.read` is visible to any later process
opening the same database.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError

from covctl.domain.errors import PersistenceError
from covctl.infrastructure.database.schema import settings

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_MISSING = object()


class SettingsStore:
    """Read/write JSON values by key.

    Any database or encoding failure on write raises
    :class:`~covctl.domain.errors.PersistenceError`.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def read(self, key: str, default: Any = None) -> Any:
        """Return the stored value for *key*, or *default* if never written."""
        with self._engine.connect() as conn:
            raw = conn.execute(
                select(settings.c.value).where(settings.c.key == key)
            ).scalar_one_or_none()
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt stored value for setting %s", key)
            return default

    def contains(self, key: str) -> bool:
        return self.read(key, _MISSING) is not _MISSING

    def write(self, key: str, value: Any) -> None:
        """Persist *value* under *key* (insert or replace)."""
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(key, f"value is not JSON-serializable: {exc}") from exc

        stmt = insert(settings).values(
            key=key,
            value=encoded,
            modified=datetime.now(UTC).isoformat(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[settings.c.key],
            set_={"value": stmt.excluded.value, "modified": stmt.excluded.modified},
        )
        try:
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(key, str(exc)) from exc
        logger.debug("Persisted setting %s", key)

    def delete(self, key: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(delete(settings).where(settings.c.key == key))
        except SQLAlchemyError as exc:
            raise PersistenceError(key, str(exc)) from exc

    def keys(self) -> list[str]:
        with self._engine.connect() as conn:
            return list(conn.execute(select(settings.c.key).order_by(settings.c.key)).scalars())
