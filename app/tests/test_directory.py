"""Tests for server listing and vote acceptance."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select, update

from app.database import Database
from app.errors import NameRequired, NotFound, TooSoon
from app.models import Server, User, Vote
from app.services.directory import ServerDirectory
from app.utils import now


async def add_server(db: Database, name: str, owner: str = "owner", votes: int = 0) -> int:
    async with db.session() as session:
        async with session.begin():
            server = Server(server_name=name, votes=votes)
            session.add(server)
            await session.flush()
            session.add(User(username=owner, discord_id="42", server_id=server.id))
    return server.id


async def votes_of(db: Database, server_id: int) -> int:
    async with db.session() as session:
        return (await session.get(Server, server_id)).votes


async def vote_rows(db: Database) -> int:
    async with db.session() as session:
        return (await session.execute(select(func.count()).select_from(Vote))).scalar_one()


@pytest.fixture()
def directory(db: Database) -> ServerDirectory:
    return ServerDirectory(db)


class TestListing:
    @pytest.mark.asyncio
    async def test_sorted_by_votes_then_newest(self, directory: ServerDirectory, db: Database):
        old = await add_server(db, "Old", votes=5)
        top = await add_server(db, "Top", votes=9)
        new = await add_server(db, "New", votes=5)

        servers = await directory.list_servers()
        assert [s.id for s in servers] == [top, new, old]
        assert servers[0].owner == "owner"
        assert servers[0].status == "unknown"
        assert servers[0].url == ""

    @pytest.mark.asyncio
    async def test_get_server(self, directory: ServerDirectory, db: Database):
        server_id = await add_server(db, "Foo", owner="Bar")
        server = await directory.get_server(server_id)
        assert server.server_name == "Foo"
        assert server.owner == "Bar"

    @pytest.mark.asyncio
    async def test_get_missing_server(self, directory: ServerDirectory):
        with pytest.raises(NotFound):
            await directory.get_server(99)


class TestVote:
    @pytest.mark.asyncio
    async def test_cooldown_per_ip(self, directory: ServerDirectory, db: Database):
        server_id = await add_server(db, "Foo")

        assert await directory.vote(server_id, "1.2.3.4", "alice") == 1
        assert await votes_of(db, server_id) == 1

        with pytest.raises(TooSoon):
            await directory.vote(server_id, "1.2.3.4", "alice")
        assert await votes_of(db, server_id) == 1
        assert await vote_rows(db) == 1

        assert await directory.vote(server_id, "5.6.7.8", "bob") == 2

    @pytest.mark.asyncio
    async def test_cooldown_is_per_server(self, directory: ServerDirectory, db: Database):
        first = await add_server(db, "First")
        second = await add_server(db, "Second")
        await directory.vote(first, "1.2.3.4", "alice")
        assert await directory.vote(second, "1.2.3.4", "alice") == 1

    @pytest.mark.asyncio
    async def test_vote_allowed_after_window(self, directory: ServerDirectory, db: Database):
        server_id = await add_server(db, "Foo")
        await directory.vote(server_id, "1.2.3.4", "alice")
        async with db.session() as session:
            async with session.begin():
                await session.execute(
                    update(Vote).values(last_vote=now() - timedelta(hours=13))
                )
        assert await directory.vote(server_id, "1.2.3.4", "alice") == 2
        assert await vote_rows(db) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_name_required(self, directory: ServerDirectory, db: Database, name):
        server_id = await add_server(db, "Foo")
        with pytest.raises(NameRequired):
            await directory.vote(server_id, "1.2.3.4", name)
        assert await votes_of(db, server_id) == 0

    @pytest.mark.asyncio
    async def test_unknown_server(self, directory: ServerDirectory, db: Database):
        with pytest.raises(NotFound):
            await directory.vote(404, "1.2.3.4", "alice")
        assert await vote_rows(db) == 0
