"""Durable string key/value storage backed by SQLAlchemy.

Plays the role browser local storage plays for a single-page app: each key
holds one serialized document, read and written whole. There is no locking
across read-modify-write cycles; concurrent writers to the same key race and
the last write wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from nichescout.db.engine import create_db_engine, create_session_factory
from nichescout.db.orm import Base, KeyValueRow
from nichescout.errors import StorageUnavailableError

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session, sessionmaker


class KeyValueStore:
    """SQLite-backed key/value store."""

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        self._engine: Engine = create_db_engine(self.db_path)
        self._session_factory: sessionmaker[Session] = create_session_factory(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def init_schema(self) -> None:
        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    def check_connection(self) -> bool:
        """Verify the database is reachable. Returns True or raises."""
        with self._session_factory() as session:
            session.execute(text("SELECT 1"))
        return True

    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueRow, key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                f"Failed to read key {key!r}: {exc}",
                user_message="Local storage is unavailable.",
            ) from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueRow, key)
                if row is None:
                    session.add(KeyValueRow(key=key, value=value))
                else:
                    row.value = value
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                f"Failed to write key {key!r}: {exc}",
                user_message="Could not save to local storage.",
            ) from exc

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueRow, key)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(
                f"Failed to delete key {key!r}: {exc}",
                user_message="Could not update local storage.",
            ) from exc

