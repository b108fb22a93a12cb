"""SQLAlchemy engine factory and session maker for the key/value database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Engine

MEMORY_PATH = ":memory:"


def create_db_engine(
    db_path: str | Path,
    *,
    echo: bool = False,
    busy_timeout: float = 30.0,
) -> Engine:
    """Create an engine for a SQLite file, or a shared in-memory database.

    An in-memory database lives only as long as its connection, so every
    session must reuse the same one.
    """
    path_str = str(db_path)
    in_memory = path_str == MEMORY_PATH

    if in_memory:
        engine = create_engine(
            "sqlite://",
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            f"sqlite:///{path_str}",
            echo=echo,
            connect_args={"timeout": busy_timeout},
        )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: object, _connection_record: object) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[attr-defined]
        if not in_memory:
            # Readers keep working while the API writes
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout * 1000)}")
        cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)
