"""SQLAlchemy ORM model for the key/value table."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow_str() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Base(DeclarativeBase):
    pass


class KeyValueRow(Base):
    """One serialized document per key (idea collections, exclusion list, session user)."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(
        Text, nullable=False, default=_utcnow_str, onupdate=_utcnow_str
    )
