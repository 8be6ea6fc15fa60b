from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from datastore.models import Base
from settings import Settings

logger = logging.getLogger(__name__)

_MEMORY_DATABASES = {None, "", ":memory:"}


class Database:
    """Owns the engine and session factory for one relational store.

    Constructed once at startup and disposed at shutdown; components that
    need storage receive the instance instead of importing a global.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, future=True, **_engine_options(url))
        self._sessionmaker = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.database_echo)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)
        logger.info(
            "Database schema ready",
            extra={"database_url": self.engine.url.render_as_string(hide_password=True)},
        )

    def session(self) -> Session:
        return self._sessionmaker()

    def dispose(self) -> None:
        self.engine.dispose()


def _engine_options(url: str) -> Dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in _MEMORY_DATABASES:
        # Every connection to an in-memory database is a fresh database.
        options["poolclass"] = StaticPool
    else:
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    return options
