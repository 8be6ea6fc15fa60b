from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from app.web import router as web_router
from datastore.database import Database
from logging_config import configure_logging
from services.readings import ReadingService
from settings import Settings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    database = app.state.database_override or Database.from_settings(app.state.settings)
    database.create_all()
    app.state.database = database
    app.state.reading_service = ReadingService(database)
    try:
        yield
    finally:
        database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    configure_logging()
    settings = settings or get_settings()
    app = FastAPI(
        title="GeoSeis Stats",
        description="Parses dated frequency readings and serves daily and monthly statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database_override = database
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(web_router)
    return app


app = create_app()
