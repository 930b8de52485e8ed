"""Moderation queue endpoints (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends

from app.auth import require_admin
from app.context import AppContext
from app.deps import get_context
from app.schemas.server_request import (
    ApproveOut,
    OkOut,
    ServerRequestOut,
    ServerRequestUpdate,
)
from app.services.session_codec import SessionUser

router = APIRouter(tags=["Admin"])


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@router.get("/admin/requests/data", response_model=list[ServerRequestOut])
async def list_pending_requests(
    _admin: SessionUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    return await ctx.moderation.list_pending()


@router.post("/admin/requests/{request_id}/update", response_model=OkOut)
async def update_request(
    request_id: int,
    body: ServerRequestUpdate,
    _admin: SessionUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    await ctx.moderation.edit(request_id, body.to_fields())
    return OkOut()


@router.post("/admin/requests/{request_id}/approve", response_model=ApproveOut)
async def approve_request(
    request_id: int,
    background_tasks: BackgroundTasks,
    _admin: SessionUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    request, server_id = await ctx.moderation.approve(request_id)
    background_tasks.add_task(ctx.notifier.notify_approved, request, server_id)
    return ApproveOut(server_id=server_id)


@router.post("/admin/requests/{request_id}/reject", response_model=OkOut)
async def reject_request(
    request_id: int,
    background_tasks: BackgroundTasks,
    _admin: SessionUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    request = await ctx.moderation.reject(request_id)
    background_tasks.add_task(ctx.notifier.notify_rejected, request)
    return OkOut()


# ---------------------------------------------------------------------------
# Listed servers
# ---------------------------------------------------------------------------


@router.post("/api/admin/servers/{server_id}/remove", response_model=OkOut)
async def remove_server(
    server_id: int,
    _admin: SessionUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    await ctx.moderation.remove_server(server_id)
    return OkOut()
