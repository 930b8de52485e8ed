"""Public leaderboard and voting endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request

from app.context import AppContext
from app.deps import client_ip, get_context
from app.schemas.server import ServerOut, VoteOut

router = APIRouter(tags=["Servers"])


@router.get("/leaderboard", response_model=list[ServerOut])
async def leaderboard(ctx: AppContext = Depends(get_context)):
    """Listed servers, most voted first, newest first among ties."""
    return await ctx.directory.list_servers()


@router.get("/server/{server_id}", response_model=ServerOut)
async def get_server(server_id: int, ctx: AppContext = Depends(get_context)):
    return await ctx.directory.get_server(server_id)


@router.post("/server/{server_id}/vote", response_model=VoteOut)
async def vote(
    server_id: int,
    request: Request,
    name: str = Form(""),
    ctx: AppContext = Depends(get_context),
):
    votes = await ctx.directory.vote(server_id, client_ip(request), name)
    return VoteOut(votes=votes)
