"""Insert a demo server for local development.

    python -m app.seed
"""

import asyncio
import logging

from app.config import Settings
from app.database import Database
from app.models import Server, ServerStatus, User

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("app.seed")

DEMO_SERVER = {
    "server_name": "M1PPosu",
    "url": "https://m1pposu.dev",
    "description": (
        "An osu! server where we rank the unrankable! From huge map packs to "
        "farm maps, everything is rankable here. With Vanilla, Relax and "
        "Autopilot leaderboards, you can never get bored!"
    ),
    "tags": "relax, autopilot, farm",
    "logo_url": "/static/m1pplogo.png",
}
DEMO_OWNER = {"username": "M1PP Team", "discord_id": "123456789012345678"}


async def seed(db: Database) -> int:
    await db.create_all()
    async with db.session() as session:
        async with session.begin():
            server = Server(**DEMO_SERVER, status=ServerStatus.unknown, votes=0)
            session.add(server)
            await session.flush()
            session.add(User(**DEMO_OWNER, server_id=server.id))
    return server.id


async def _main() -> None:
    db = Database(Settings().database_url)
    try:
        server_id = await seed(db)
    finally:
        await db.dispose()
    logger.info("Seeded server %s with id %d", DEMO_SERVER["server_name"], server_id)


if __name__ == "__main__":
    asyncio.run(_main())
