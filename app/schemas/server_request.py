from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.server_request import RequestStatus

MAX_DESCRIPTION_LENGTH = 250


class ServerRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    server_name: str
    url: str = ""
    description: str = ""
    tags: str = ""
    owner_name: str
    owner_discord: str
    status: RequestStatus
    created_at: datetime | None = None
    logo_url: str = ""

    @field_validator("url", "description", "tags", "logo_url", mode="before")
    @classmethod
    def _null_as_empty(cls, value: str | None) -> str:
        return value or ""


class ServerRequestFields(BaseModel):
    """Editable fields of a request, shared by submission and admin edits."""

    server_name: str = ""
    url: str = ""
    logo_url: str = ""
    description: str = ""
    tags: str = ""
    owner_name: str = ""
    owner_discord: str = ""


class ServerRequestSubmission(ServerRequestFields):
    tos_accepted: bool = False
    captcha_token: str = ""


class ServerRequestUpdate(BaseModel):
    server_name: str = ""
    url: str = ""
    logo_url: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    owner_name: str = ""
    owner_discord: str = ""

    def to_fields(self) -> ServerRequestFields:
        tags = ",".join(t.strip() for t in self.tags if t.strip())
        return ServerRequestFields(
            server_name=self.server_name,
            url=self.url,
            logo_url=self.logo_url,
            description=self.description,
            tags=tags,
            owner_name=self.owner_name,
            owner_discord=self.owner_discord,
        )


class ApproveOut(BaseModel):
    ok: bool = True
    server_id: int


class OkOut(BaseModel):
    ok: bool = True
