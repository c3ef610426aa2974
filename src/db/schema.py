"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBUser(Base):
    __tablename__ = "users"
    username: Mapped[str] = mapped_column(primary_key=True)
    rating: Mapped[int]
    friends: Mapped[list[str]] = mapped_column(JSON, default=list)
    games_played: Mapped[int] = mapped_column(default=0)
    wins: Mapped[int] = mapped_column(default=0)
    draws: Mapped[int] = mapped_column(default=0)
    losses: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBGameRecord(Base):
    """Append-only: a record is written once at the end of a game and never updated."""

    __tablename__ = "game_records"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(ForeignKey("users.username"), index=True)
    timestamp: Mapped[datetime]
    opponent_name: Mapped[str]
    result: Mapped[str]
    moves: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    mode: Mapped[str]
    user_color: Mapped[str]
