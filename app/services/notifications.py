"""Discord webhook notifications for the moderation queue.

Every ``notify_*`` method is meant to be scheduled as a background task:
it never raises for delivery problems, it only logs them.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel

from app.config import Settings
from app.schemas.server_request import ServerRequestOut
from app.utils import now

logger = logging.getLogger(__name__)

COLOR_NEW = 0xFF66AA
COLOR_APPROVED = 0x57F287
COLOR_REJECTED = 0xED4245

SNIPPET_LENGTH = 200


# ---------------------------------------------------------------------------
# Webhook payload
# ---------------------------------------------------------------------------
class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    text: str


class EmbedThumbnail(BaseModel):
    url: str


class EmbedAuthor(BaseModel):
    name: str
    url: str | None = None


class Embed(BaseModel):
    title: str
    description: str | None = None
    url: str | None = None
    color: int | None = None
    fields: list[EmbedField] = []
    timestamp: str | None = None
    footer: EmbedFooter | None = None
    thumbnail: EmbedThumbnail | None = None
    author: EmbedAuthor | None = None


class WebhookPayload(BaseModel):
    content: str | None = None
    embeds: list[Embed]


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------
def coalesce(value: str | None, fallback: str) -> str:
    value = (value or "").strip()
    return value or fallback


def truncate(value: str, limit: int) -> str:
    value = value.strip()
    if not value or limit <= 0 or len(value) <= limit:
        return value
    if limit == 1:
        return value[:1]
    return value[: limit - 1] + "…"


def format_tags(tags: str | None) -> str:
    parts = [f"`{t.strip()}`" for t in (tags or "").split(",") if t.strip()]
    return " · ".join(parts) if parts else "none"


def format_owner(name: str | None, discord_id: str | None) -> str:
    name = coalesce(name, "unknown")
    discord_id = (discord_id or "").strip()
    if not discord_id:
        return name
    # Numeric ids are snowflakes and render as a mention
    if discord_id.isdigit():
        return f"{name} (<@{discord_id}>)"
    return f"{name} ({discord_id})"


def _thumbnail(logo_url: str | None) -> EmbedThumbnail | None:
    logo_url = (logo_url or "").strip()
    return EmbedThumbnail(url=logo_url) if logo_url else None


def _quoted_description(intro: str, description: str | None) -> str:
    snippet = truncate(coalesce(description, "No description was provided."), SNIPPET_LENGTH)
    return f"{intro}\n\n> {snippet}"


# ---------------------------------------------------------------------------
# Notifier
# ---------------------------------------------------------------------------
class AdminNotifier:
    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._webhook_url = settings.admin_webhook_url.strip()
        self._mention = settings.admin_mention.strip()
        self._env_label = settings.env_label
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    def _footer(self, context: str) -> EmbedFooter:
        return EmbedFooter(text=f"mossai · {context} · {self._env_label}")

    async def send(self, embed: Embed) -> None:
        if not self.enabled:
            return

        payload = WebhookPayload(content=self._mention or None, embeds=[embed])
        try:
            resp = await self._client.post(
                self._webhook_url, json=payload.model_dump(exclude_none=True)
            )
        except httpx.HTTPError as exc:
            logger.warning("Admin webhook delivery failed: %s", exc)
            return
        if not resp.is_success:
            logger.warning("Admin webhook returned %s: %s", resp.status_code, resp.text)

    async def notify_new_request(self, request: ServerRequestOut) -> None:
        name = coalesce(request.server_name, "unnamed server")
        embed = Embed(
            title=f"🆕 New server request · {name}",
            description=_quoted_description(
                "A new osu! private server has been submitted and is waiting "
                "in the review queue.",
                request.description,
            ),
            color=COLOR_NEW,
            author=EmbedAuthor(name=name),
            fields=[
                EmbedField(
                    name="Owner",
                    value=format_owner(request.owner_name, request.owner_discord),
                    inline=True,
                ),
                EmbedField(name="Request ID", value=f"`{request.id}`", inline=True),
                EmbedField(
                    name="Submitted at",
                    value=request.created_at.isoformat() if request.created_at else "N/A",
                    inline=True,
                ),
                EmbedField(name="Server URL", value=coalesce(request.url, "N/A")),
                EmbedField(name="Tags", value=format_tags(request.tags)),
            ],
            timestamp=now().isoformat(),
            footer=self._footer("new server request"),
            thumbnail=_thumbnail(request.logo_url),
        )
        await self.send(embed)

    async def notify_approved(self, request: ServerRequestOut, server_id: int) -> None:
        server_url = self._settings.server_url(server_id)
        embed = Embed(
            title="🟢 Server approved",
            description="The request has been approved and the server is now live on mossai.",
            url=server_url,
            color=COLOR_APPROVED,
            author=EmbedAuthor(
                name=coalesce(request.server_name, "unnamed server"), url=server_url
            ),
            fields=[
                EmbedField(name="Server ID", value=f"`{server_id}`", inline=True),
                EmbedField(name="Request ID", value=f"`{request.id}`", inline=True),
                EmbedField(
                    name="Owner",
                    value=format_owner(request.owner_name, request.owner_discord),
                ),
                EmbedField(name="Server URL", value=coalesce(request.url, "N/A")),
                EmbedField(name="Tags", value=format_tags(request.tags)),
            ],
            timestamp=now().isoformat(),
            footer=self._footer("server approved"),
            thumbnail=_thumbnail(request.logo_url),
        )
        await self.send(embed)

    async def notify_rejected(self, request: ServerRequestOut) -> None:
        embed = Embed(
            title="⛔ Server request rejected",
            description=_quoted_description(
                "The server request was rejected.", request.description
            ),
            color=COLOR_REJECTED,
            author=EmbedAuthor(name=coalesce(request.server_name, "unnamed server")),
            fields=[
                EmbedField(
                    name="Owner",
                    value=format_owner(request.owner_name, request.owner_discord),
                    inline=True,
                ),
                EmbedField(name="Request ID", value=f"`{request.id}`", inline=True),
                EmbedField(
                    name="Submitted at",
                    value=request.created_at.isoformat() if request.created_at else "N/A",
                ),
            ],
            timestamp=now().isoformat(),
            footer=self._footer("server rejected"),
        )
        await self.send(embed)
