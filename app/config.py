from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


def _fix_async_url(url: str) -> str:
    """Hosting providers give postgresql://… but asyncpg needs postgresql+asyncpg://…"""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./mossai.db"
    cors_origins: str = "http://localhost:8080"
    port: int = 8080
    log_level: str = "INFO"
    public_dir: str = "public"

    # Session cookie
    session_secret: str = ""
    session_cookie_secure: bool = False

    # Discord OAuth2
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_redirect_uri: str = ""
    discord_oauth_scopes: str = "identify"
    discord_api_base: str = "https://discord.com/api"

    # Comma-separated Discord ids allowed into the admin API
    admin_ids: str = Field(
        default="", validation_alias=AliasChoices("MOSS_ADMIN_IDS", "admin_ids")
    )

    # Cloudflare Turnstile; empty secret disables verification
    turnstile_secret: str = ""
    turnstile_verify_url: str = (
        "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    )

    # Admin webhook notifications
    admin_webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("DISCORD_ADMIN_WEBHOOK_URL", "admin_webhook_url"),
    )
    admin_mention: str = Field(
        default="",
        validation_alias=AliasChoices(
            "DISCORD_ADMIN_PING", "DISCORD_ADMIN_MENTION", "admin_mention"
        ),
    )
    env_label: str = Field(
        default="local",
        validation_alias=AliasChoices("MOSSAI_ENV", "APP_ENV", "ENV", "env_label"),
    )
    base_url: str = Field(
        default="http://localhost:8080",
        validation_alias=AliasChoices("MOSSAI_BASE_URL", "PUBLIC_BASE_URL", "base_url"),
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _normalise(self) -> "Settings":
        self.database_url = _fix_async_url(self.database_url)
        self.base_url = self.base_url.strip().rstrip("/") or "http://localhost:8080"
        self.env_label = self.env_label.strip() or "local"
        return self

    @property
    def discord_configured(self) -> bool:
        return bool(
            self.discord_client_id.strip()
            and self.discord_client_secret.strip()
            and self.discord_redirect_uri.strip()
        )

    def server_url(self, server_id: int) -> str:
        """Public page of a listed server."""
        return f"{self.base_url}/servers/{server_id}"
