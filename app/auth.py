"""Authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, Request

from app.context import AppContext
from app.deps import get_context
from app.errors import Forbidden, Unauthenticated
from app.services.session_codec import SessionUser

SESSION_COOKIE = "mossai_session"
STATE_COOKIE = "mossai_oauth_state"


async def get_current_user_optional(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> SessionUser | None:
    """Return the session user or ``None`` for any missing or bad cookie."""
    return ctx.codec.load(request.cookies.get(SESSION_COOKIE))


async def get_current_user(
    user: SessionUser | None = Depends(get_current_user_optional),
) -> SessionUser:
    """Return the session user or raise 401."""
    if user is None:
        raise Unauthenticated()
    return user


async def require_admin(
    user: SessionUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> SessionUser:
    """401 without a session, 403 for a session outside the allow-list."""
    if not ctx.admins.is_admin(user.discord_id):
        raise Forbidden()
    return user
