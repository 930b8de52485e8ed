import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine (and so the connection pool) for the process."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.is_sqlite = url.startswith("sqlite")
        self.engine: AsyncEngine = create_async_engine(url, **self._engine_kwargs())
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    def _engine_kwargs(self) -> dict:
        if not self.is_sqlite:
            return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live as long as their connection
        if ":memory:" in self.url or self.url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    @property
    def scheme(self) -> str:
        return self.url.split("@")[0].split("://")[0]

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured (%s)", self.scheme)

    async def dispose(self) -> None:
        await self.engine.dispose()

