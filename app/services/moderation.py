"""Moderation queue: submit, edit, approve, reject, remove.

Requests start ``pending``; ``approved`` and ``rejected`` are terminal. Every
status change goes through :meth:`ModerationService._transition`, a single
``UPDATE`` conditioned on the allowed source statuses, so a request is
processed at most once even when two admins race.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Database
from app.errors import (
    CaptchaFailed,
    NotFound,
    NotFoundOrAlreadyProcessed,
    NotFoundOrNotPending,
    ValidationFailed,
)
from app.models.server import Server, ServerStatus, User
from app.models.server_request import (
    RequestStatus,
    ServerRequest,
    can_transition,
    sources_for,
)
from app.schemas.server_request import (
    MAX_DESCRIPTION_LENGTH,
    ServerRequestFields,
    ServerRequestOut,
    ServerRequestSubmission,
)
from app.services.captcha import TurnstileVerifier
from app.utils import clean, none_if_empty

logger = logging.getLogger(__name__)


def validate_fields(fields: ServerRequestFields) -> ServerRequestFields:
    """Trim every field and enforce the required/length rules."""
    cleaned = ServerRequestFields(
        server_name=clean(fields.server_name),
        url=clean(fields.url),
        logo_url=clean(fields.logo_url),
        description=clean(fields.description),
        tags=clean(fields.tags),
        owner_name=clean(fields.owner_name),
        owner_discord=clean(fields.owner_discord),
    )
    if not (cleaned.server_name and cleaned.owner_name and cleaned.owner_discord):
        raise ValidationFailed("server_name, owner_name and owner_discord are required")
    if len(cleaned.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationFailed(
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters."
        )
    return cleaned


class ModerationService:
    def __init__(self, db: Database, captcha: TurnstileVerifier) -> None:
        self._db = db
        self._captcha = captcha

    # ------------------------------------------------------------------
    # Public submission
    # ------------------------------------------------------------------

    async def submit(
        self, submission: ServerRequestSubmission, remote_ip: str | None = None
    ) -> ServerRequestOut:
        fields = validate_fields(submission)
        if not submission.tos_accepted:
            raise ValidationFailed("You must accept the Terms of Service to submit.")
        if not await self._captcha.verify(submission.captcha_token, remote_ip):
            raise CaptchaFailed()

        request = ServerRequest(
            server_name=fields.server_name,
            url=none_if_empty(fields.url),
            description=none_if_empty(fields.description),
            tags=none_if_empty(fields.tags),
            logo_url=none_if_empty(fields.logo_url),
            owner_name=fields.owner_name,
            owner_discord=fields.owner_discord,
            status=RequestStatus.pending,
        )
        async with self._db.session() as session:
            session.add(request)
            await session.commit()
        logger.info("Server request %s submitted: %r", request.id, request.server_name)
        return ServerRequestOut.model_validate(request)

    # ------------------------------------------------------------------
    # Admin queue
    # ------------------------------------------------------------------

    async def list_pending(self) -> list[ServerRequestOut]:
        async with self._db.session() as session:
            result = await session.execute(
                select(ServerRequest)
                .where(ServerRequest.status == RequestStatus.pending)
                .order_by(ServerRequest.created_at.desc(), ServerRequest.id.desc())
            )
            return [ServerRequestOut.model_validate(r) for r in result.scalars().all()]

    async def edit(self, request_id: int, fields: ServerRequestFields) -> None:
        fields = validate_fields(fields)
        async with self._db.session() as session:
            async with session.begin():
                result = await session.execute(
                    update(ServerRequest)
                    .where(
                        ServerRequest.id == request_id,
                        ServerRequest.status == RequestStatus.pending,
                    )
                    .values(
                        server_name=fields.server_name,
                        url=none_if_empty(fields.url),
                        logo_url=none_if_empty(fields.logo_url),
                        description=none_if_empty(fields.description),
                        tags=none_if_empty(fields.tags),
                        owner_name=fields.owner_name,
                        owner_discord=fields.owner_discord,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise NotFoundOrNotPending()
        logger.info("Server request %s edited", request_id)

    async def approve(self, request_id: int) -> tuple[ServerRequestOut, int]:
        """Materialize a pending request into a live server and its owner.

        The server insert, the owner insert and the status change commit
        together or not at all.
        """
        async with self._db.session() as session:
            try:
                async with session.begin():
                    request = await self._load_for(session, request_id, RequestStatus.approved)
                    server = await self._create_server(session, request)
                    await self._create_owner(session, request, server.id)
                    await self._transition(session, request_id, RequestStatus.approved)
                    snapshot = ServerRequestOut.model_validate(request).model_copy(
                        update={"status": RequestStatus.approved}
                    )
                    server_id = server.id
            except SQLAlchemyError:
                logger.exception("Approving server request %s failed", request_id)
                raise
        logger.info("Server request %s approved as server %s", request_id, server_id)
        return snapshot, server_id

    async def reject(self, request_id: int) -> ServerRequestOut:
        async with self._db.session() as session:
            async with session.begin():
                request = await self._load_for(session, request_id, RequestStatus.rejected)
                await self._transition(session, request_id, RequestStatus.rejected)
                snapshot = ServerRequestOut.model_validate(request).model_copy(
                    update={"status": RequestStatus.rejected}
                )
        logger.info("Server request %s rejected", request_id)
        return snapshot

    async def remove_server(self, server_id: int) -> None:
        """Delete a listed server. Owner and vote rows are left in place."""
        async with self._db.session() as session:
            async with session.begin():
                result = await session.execute(
                    delete(Server)
                    .where(Server.id == server_id)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise NotFound("server not found")
        logger.info("Server %s removed", server_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_for(
        self, session: AsyncSession, request_id: int, target: RequestStatus
    ) -> ServerRequest:
        """Lock the request row and check it may move to ``target``."""
        request = await session.get(ServerRequest, request_id, with_for_update=True)
        if request is None or not can_transition(request.status, target):
            raise NotFoundOrAlreadyProcessed()
        return request

    async def _transition(
        self, session: AsyncSession, request_id: int, target: RequestStatus
    ) -> None:
        result = await session.execute(
            update(ServerRequest)
            .where(
                ServerRequest.id == request_id,
                ServerRequest.status.in_(sources_for(target)),
            )
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundOrAlreadyProcessed()

    async def _create_server(self, session: AsyncSession, request: ServerRequest) -> Server:
        server = Server(
            server_name=request.server_name,
            url=none_if_empty(request.url),
            description=none_if_empty(request.description),
            tags=none_if_empty(request.tags),
            logo_url=none_if_empty(request.logo_url),
            status=ServerStatus.unknown,
            votes=0,
        )
        session.add(server)
        await session.flush()
        return server

    async def _create_owner(
        self, session: AsyncSession, request: ServerRequest, server_id: int
    ) -> User:
        owner = User(
            username=request.owner_name,
            discord_id=request.owner_discord,
            server_id=server_id,
        )
        session.add(owner)
        await session.flush()
        return owner
