from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.utils import now


class Base(DeclarativeBase):
    pass


def enum_column(enum_cls: type[StrEnum]) -> Enum:
    """Store a StrEnum by value in a plain VARCHAR column."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda members: [m.value for m in members],
    )


class ServerStatus(StrEnum):
    unknown = "unknown"
    online = "online"
    offline = "offline"


class Server(Base):
    __tablename__ = "servers"
    # Removed servers leave owner and vote rows behind; ids must never be reused
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    server_name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ServerStatus] = mapped_column(
        enum_column(ServerStatus), nullable=False, default=ServerStatus.unknown
    )
    # Observed by an external checker, never set here
    online: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    registered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    def __repr__(self) -> str:
        return f"Server(id={self.id}, server_name={self.server_name!r})"


class User(Base):
    """Owner record created alongside an approved server.

    ``server_id`` is a plain column: removing a server leaves its owner rows
    behind.
    """

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    discord_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    server_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        Index("ix_votes_server_ip", "server_id", "ip", "last_vote"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    server_id: Mapped[int] = mapped_column(Integer, nullable=False)
    ip: Mapped[str] = mapped_column(String(64), nullable=False)
    user_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_vote: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
