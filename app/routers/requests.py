"""Public server listing submissions."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from app.context import AppContext
from app.deps import client_ip, get_context
from app.schemas.server_request import ServerRequestSubmission

router = APIRouter(tags=["Requests"])


@router.post("/list")
async def submit_request(
    request: Request,
    background_tasks: BackgroundTasks,
    server_name: str = Form(""),
    url: str = Form(""),
    description: str = Form(""),
    tags: str = Form(""),
    owner_name: str = Form(""),
    owner_discord: str = Form(""),
    logo_url: str = Form(""),
    tos_accept: str = Form(""),
    captcha_token: str = Form("", alias="cf-turnstile-response"),
    ctx: AppContext = Depends(get_context),
):
    """Queue a listing for admin review, then send the visitor back to the list."""
    submission = ServerRequestSubmission(
        server_name=server_name,
        url=url,
        description=description,
        tags=tags,
        owner_name=owner_name,
        owner_discord=owner_discord,
        logo_url=logo_url,
        tos_accepted=bool(tos_accept.strip()),
        captcha_token=captcha_token,
    )
    created = await ctx.moderation.submit(submission, client_ip(request))
    background_tasks.add_task(ctx.notifier.notify_new_request, created)
    return RedirectResponse("/list?submitted=1", status_code=status.HTTP_303_SEE_OTHER)
