"""Public server listing and voting."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import Select, select, update

from app.database import Database
from app.errors import NameRequired, NotFound, TooSoon
from app.models.server import Server, User, Vote
from app.schemas.server import ServerOut
from app.utils import clean, now

logger = logging.getLogger(__name__)

VOTE_COOLDOWN = timedelta(hours=12)


def _with_owner() -> Select:
    return select(Server, User.username).join(User, User.server_id == Server.id)


def _to_out(server: Server, owner: str | None) -> ServerOut:
    return ServerOut.model_validate(server).model_copy(update={"owner": owner or ""})


class ServerDirectory:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def list_servers(self) -> list[ServerOut]:
        async with self._db.session() as session:
            result = await session.execute(
                _with_owner().order_by(
                    Server.votes.desc(), Server.added.desc(), Server.id.desc()
                )
            )
            return [_to_out(server, owner) for server, owner in result.all()]

    async def get_server(self, server_id: int) -> ServerOut:
        async with self._db.session() as session:
            result = await session.execute(
                _with_owner().where(Server.id == server_id).limit(1)
            )
            row = result.first()
            if row is None:
                raise NotFound("server not found")
            return _to_out(*row)

    async def vote(self, server_id: int, ip: str, name: str | None) -> int:
        """Record a vote and return the server's new total.

        One vote per (server, ip) per cooldown window. The counter increment
        and the vote row are committed together.
        """
        name = clean(name)
        if not name:
            raise NameRequired()

        cutoff = now() - VOTE_COOLDOWN
        async with self._db.session() as session:
            async with session.begin():
                server = await session.get(Server, server_id)
                if server is None:
                    raise NotFound("server not found")

                recent = await session.execute(
                    select(Vote.last_vote)
                    .where(
                        Vote.server_id == server_id,
                        Vote.ip == ip,
                        Vote.last_vote > cutoff,
                    )
                    .order_by(Vote.last_vote.desc())
                    .limit(1)
                )
                if recent.scalar_one_or_none() is not None:
                    raise TooSoon()

                await session.execute(
                    update(Server)
                    .where(Server.id == server_id)
                    .values(votes=Server.votes + 1)
                    .execution_options(synchronize_session=False)
                )
                session.add(Vote(server_id=server_id, ip=ip, user_name=name, last_vote=now()))
                await session.flush()
                await session.refresh(server)
                votes = server.votes

        logger.info("Vote for server %s from %s (%s)", server_id, ip, name)
        return votes
