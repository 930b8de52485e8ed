import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import Settings
from app.context import AppContext
from app.errors import AppError
from app.routers import admin, auth, pages, requests, servers

logger = logging.getLogger(__name__)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(
    settings: Settings | None = None, http_client: httpx.AsyncClient | None = None
) -> FastAPI:
    """Build the API. Served with ``uvicorn --factory app.main:create_app``."""
    settings = settings or Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    context = AppContext.build(settings, http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await context.startup()
        logger.info("mossai API started")
        yield
        await context.shutdown()

    app = FastAPI(title="mossai API", version="1.0.0", lifespan=lifespan)
    app.state.context = context

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AppError, app_error_handler)

    app.include_router(auth.router)
    app.include_router(servers.router)
    app.include_router(requests.router)
    app.include_router(admin.router)
    app.include_router(pages.router)

    static_dir = Path(settings.public_dir)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app

