"""Discord OAuth2 login and cookie session endpoints."""

from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse

from app.auth import SESSION_COOKIE, STATE_COOKIE, get_current_user_optional
from app.config import Settings
from app.context import AppContext
from app.deps import get_context
from app.errors import UpstreamError
from app.schemas.auth import SessionOut
from app.services.session_codec import SESSION_TTL, SessionUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

STATE_MAX_AGE = 600


def _set_cookie(response: Response, settings: Settings, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def _clear_cookie(response: Response, settings: Settings, key: str) -> None:
    response.delete_cookie(
        key,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def _require_discord(settings: Settings) -> None:
    if not settings.discord_configured:
        logger.error("Discord OAuth requested but DISCORD_* settings are missing")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Discord login is not configured.",
        )


def _avatar_url(discord_id: str, avatar_hash: str | None) -> str:
    if avatar_hash:
        return f"https://cdn.discordapp.com/avatars/{discord_id}/{avatar_hash}.png"
    return ""


@router.get("/discord/login")
async def discord_login(ctx: AppContext = Depends(get_context)):
    """Redirect to Discord's authorization page."""
    settings = ctx.settings
    _require_discord(settings)

    state = secrets.token_hex(16)
    params = {
        "response_type": "code",
        "client_id": settings.discord_client_id,
        "scope": settings.discord_oauth_scopes,
        "redirect_uri": settings.discord_redirect_uri,
        "state": state,
    }
    response = RedirectResponse(
        f"{settings.discord_api_base}/oauth2/authorize?{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )
    _set_cookie(response, settings, STATE_COOKIE, state, STATE_MAX_AGE)
    return response


async def _exchange_code(ctx: AppContext, code: str) -> tuple[str, str]:
    settings = ctx.settings
    try:
        token_resp = await ctx.http.post(
            f"{settings.discord_api_base}/oauth2/token",
            data={
                "client_id": settings.discord_client_id,
                "client_secret": settings.discord_client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings.discord_redirect_uri,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as exc:
        logger.error("Discord token exchange failed: %s", exc)
        raise UpstreamError("Failed to contact Discord.") from exc

    if token_resp.status_code != 200:
        logger.error("Discord token exchange failed (%s): %s", token_resp.status_code, token_resp.text)
        raise UpstreamError("Discord token exchange failed.")
    try:
        token_data = token_resp.json()
    except ValueError as exc:
        logger.error("Discord token response is not JSON: %s", exc)
        raise UpstreamError("Failed to read Discord response.") from exc

    access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
    if not access_token:
        logger.error("Discord token response without access_token")
        raise UpstreamError("Discord token exchange failed.")
    return token_data.get("token_type") or "Bearer", access_token


async def _fetch_user(ctx: AppContext, token_type: str, access_token: str) -> dict:
    try:
        user_resp = await ctx.http.get(
            f"{ctx.settings.discord_api_base}/users/@me",
            headers={"Authorization": f"{token_type} {access_token}"},
        )
    except httpx.HTTPError as exc:
        logger.error("Discord user fetch failed: %s", exc)
        raise UpstreamError("Failed to contact Discord.") from exc

    if user_resp.status_code != 200:
        logger.error("Discord user fetch failed (%s): %s", user_resp.status_code, user_resp.text)
        raise UpstreamError("Failed to fetch Discord user info.")
    try:
        discord_user = user_resp.json()
    except ValueError as exc:
        logger.error("Discord user response is not JSON: %s", exc)
        raise UpstreamError("Failed to read Discord user.") from exc

    if not isinstance(discord_user, dict) or not discord_user.get("id"):
        logger.error("Discord user without id")
        raise UpstreamError("Invalid Discord user.")
    return discord_user


@router.get("/discord/callback")
async def discord_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    ctx: AppContext = Depends(get_context),
    state_cookie: str | None = Cookie(default=None, alias=STATE_COOKIE),
):
    """Handle the OAuth2 callback from Discord."""
    settings = ctx.settings
    if error:
        raise HTTPException(status_code=400, detail=f"Discord auth error: {error}")
    if not code or not state:
        raise HTTPException(status_code=400, detail="Missing code or state.")
    if not state_cookie or not secrets.compare_digest(state_cookie.encode(), state.encode()):
        raise HTTPException(status_code=400, detail="Invalid state.")
    _require_discord(settings)

    # 1. Exchange code for access token, 2. fetch the Discord user
    token_type, access_token = await _exchange_code(ctx, code)
    discord_user = await _fetch_user(ctx, token_type, access_token)

    discord_id = str(discord_user["id"])
    username = discord_user.get("username") or ""
    display_name = discord_user.get("global_name") or username

    # 3. Issue the session cookie & redirect home
    session = SessionUser(
        discord_id=discord_id,
        username=display_name,
        avatar_url=_avatar_url(discord_id, discord_user.get("avatar")),
    )
    token = ctx.codec.encode(session)
    logger.info("Discord login for %s (%s)", discord_id, display_name)

    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    _clear_cookie(response, settings, STATE_COOKIE)
    _set_cookie(
        response, settings, SESSION_COOKIE, token, int(SESSION_TTL.total_seconds())
    )
    return response


@router.get("/me", response_model=SessionOut)
async def get_me(
    user: SessionUser | None = Depends(get_current_user_optional),
    ctx: AppContext = Depends(get_context),
):
    """Return the current session, or ``authenticated: false``."""
    if user is None:
        return SessionOut(authenticated=False)
    return SessionOut(
        authenticated=True,
        discord_id=user.discord_id,
        username=user.username,
        avatar_url=user.avatar_url,
        is_admin=ctx.admins.is_admin(user.discord_id),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(ctx: AppContext = Depends(get_context)):
    """Clear the session cookie. Tokens themselves stay valid until expiry."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_cookie(response, ctx.settings, SESSION_COOKIE)
    return response
