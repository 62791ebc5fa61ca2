"""Database engine setup for SQLite with WAL mode.

The state database lives at ``{root}/.covctl/covctl.db``. SQLAlchemy Core
(not ORM): covctl stores flat key/value rows and an event log, so
there is nothing for an identity map to do.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from covctl.infrastructure.database.schema import metadata

DB_FILENAME = "covctl.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL journaling."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def init_database(state_dir: Path) -> Engine:
    """Create *state_dir* if needed and all tables in its database.

    Idempotent — safe to call on an existing workspace.
    """
    state_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / "plugins").mkdir(exist_ok=True)

    engine = create_db_engine(state_dir / DB_FILENAME)
    metadata.create_all(engine)
    return engine
