from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from app.models.server import ServerStatus


class ServerOut(BaseModel):
    """A listed server as shown on the leaderboard."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    server_name: str
    url: str = ""
    description: str = ""
    tags: str = ""
    logo_url: str = ""
    status: ServerStatus = ServerStatus.unknown
    online: int = 0
    registered: int = 0
    votes: int = 0
    added: datetime
    owner: str = ""

    @field_validator("url", "description", "tags", "logo_url", "owner", mode="before")
    @classmethod
    def _null_as_empty(cls, value: str | None) -> str:
        return value or ""


class VoteOut(BaseModel):
    ok: bool = True
    votes: int
