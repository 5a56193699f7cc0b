"""FastAPI entrypoint wiring services together."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.config import Settings, get_settings
from marketplace.database import Database
from marketplace.errors import register_error_handlers
from marketplace.mailer import Mailer
from marketplace.routers import catalog, requests, users
from services.recovery import MailTransport

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Settings | None = None, mailer: MailTransport | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    database = Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
        await database.create_all()
        logger.info("Database ready at %s", settings.database_url.split("@")[-1])
        yield
        await database.dispose()

    app = FastAPI(title="Service Marketplace API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.mailer = mailer or Mailer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(users.router)
    app.include_router(requests.router)
    app.include_router(catalog.router)

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        return {"message": "Service marketplace API is running"}

    return app


app = create_app()
