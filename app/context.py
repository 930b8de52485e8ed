"""Process-wide wiring, built once at startup and stored on ``app.state``."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.config import Settings
from app.database import Database
from app.services.admins import AdminAllowList
from app.services.captcha import TurnstileVerifier
from app.services.directory import ServerDirectory
from app.services.moderation import ModerationService
from app.services.notifications import AdminNotifier
from app.services.session_codec import SessionCodec

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    db: Database
    http: httpx.AsyncClient
    codec: SessionCodec
    admins: AdminAllowList
    captcha: TurnstileVerifier
    notifier: AdminNotifier
    moderation: ModerationService
    directory: ServerDirectory

    @classmethod
    def build(
        cls, settings: Settings, http: httpx.AsyncClient | None = None
    ) -> "AppContext":
        db = Database(settings.database_url)
        http = http or httpx.AsyncClient(timeout=10.0)
        captcha = TurnstileVerifier(
            http, settings.turnstile_secret, settings.turnstile_verify_url
        )
        return cls(
            settings=settings,
            db=db,
            http=http,
            codec=SessionCodec(settings.session_secret),
            admins=AdminAllowList.from_setting(settings.admin_ids),
            captcha=captcha,
            notifier=AdminNotifier(http, settings),
            moderation=ModerationService(db, captcha),
            directory=ServerDirectory(db),
        )

    async def startup(self) -> None:
        # A database that cannot be reached aborts startup
        await self.db.create_all()

        if self.codec.insecure:
            logger.warning(
                "SESSION_SECRET is not set: sessions are signed with the insecure "
                "development secret. Do not run this in production."
            )
        if not len(self.admins):
            logger.warning("MOSS_ADMIN_IDS is empty: nobody can use the admin API")
        if not self.captcha.enabled:
            logger.info("TURNSTILE_SECRET is not set: captcha verification disabled")
        if not self.notifier.enabled:
            logger.info("DISCORD_ADMIN_WEBHOOK_URL is not set: admin notifications disabled")
        if not self.settings.discord_configured:
            logger.warning("Discord OAuth is not configured: login is unavailable")

        logger.info("DATABASE_URL scheme: %s", self.db.scheme)
        logger.info("Admins configured: %d", len(self.admins))

    async def shutdown(self) -> None:
        await self.http.aclose()
        await self.db.dispose()
