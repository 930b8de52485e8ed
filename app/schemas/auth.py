"""Session schemas."""

from __future__ import annotations

from pydantic import BaseModel


class SessionOut(BaseModel):
    authenticated: bool
    discord_id: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
