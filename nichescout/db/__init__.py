"""Storage package: engine, ORM models, and the key/value facade."""

from nichescout.db.engine import create_db_engine, create_session_factory
from nichescout.db.facade import KeyValueStore
from nichescout.db.orm import Base, KeyValueRow

__all__ = [
    "Base",
    "KeyValueRow",
    "KeyValueStore",
    "create_db_engine",
    "create_session_factory",
]
