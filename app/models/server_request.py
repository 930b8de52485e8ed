"""Moderated listing requests and their status machine."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.server import Base, enum_column
from app.utils import now


class RequestStatus(StrEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# approved and rejected are terminal
TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.pending: frozenset({RequestStatus.approved, RequestStatus.rejected}),
    RequestStatus.approved: frozenset(),
    RequestStatus.rejected: frozenset(),
}


def sources_for(target: RequestStatus) -> list[RequestStatus]:
    """Statuses a request may be in to move to ``target``."""
    return [status for status, allowed in TRANSITIONS.items() if target in allowed]


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in TRANSITIONS[current]


class ServerRequest(Base):
    __tablename__ = "server_requests"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    server_name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_name: Mapped[str] = mapped_column(Text, nullable=False)
    owner_discord: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        enum_column(RequestStatus),
        nullable=False,
        default=RequestStatus.pending,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )

    def __repr__(self) -> str:
        return (
            f"ServerRequest(id={self.id}, server_name={self.server_name!r}, "
            f"status={self.status.value})"
        )
