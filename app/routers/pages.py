"""HTML pages served from the public directory."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, RedirectResponse

from app.auth import get_current_user_optional
from app.context import AppContext
from app.deps import get_context
from app.services.session_codec import SessionUser

router = APIRouter(include_in_schema=False)


def _page(ctx: AppContext, filename: str) -> FileResponse:
    path = Path(ctx.settings.public_dir) / filename
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return FileResponse(path, media_type="text/html")


@router.get("/")
async def index_page(ctx: AppContext = Depends(get_context)):
    return _page(ctx, "index.html")


@router.get("/list")
async def list_page(ctx: AppContext = Depends(get_context)):
    return _page(ctx, "list.html")


@router.get("/servers/{server_id}")
async def server_page(server_id: int, ctx: AppContext = Depends(get_context)):
    return _page(ctx, "server.html")


@router.get("/admin/requests")
async def admin_requests_page(
    user: SessionUser | None = Depends(get_current_user_optional),
    ctx: AppContext = Depends(get_context),
):
    """Non-admins are sent back to the front page."""
    if user is None or not ctx.admins.is_admin(user.discord_id):
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    return _page(ctx, "admin_requests.html")
