"""
==============================================================================
Database Connection Module
==============================================================================

Engine and sessions for the blob table.

An in-memory URL ("sqlite://") is served from one shared connection
through StaticPool; file and server URLs get a regular pool.

==============================================================================
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from scanlist.config import get_settings


# Module logger
logger = logging.getLogger(__name__)

# Declarative base for the blob table
Base = declarative_base()

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class DatabaseManager:
    """Owns the engine for the configured DATABASE_URL, created on first use."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._database_url = database_url or get_settings().database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if self._database_url.startswith("sqlite"):
                kwargs = {"connect_args": {"check_same_thread": False}}
                if self._database_url in _MEMORY_URLS:
                    kwargs["poolclass"] = StaticPool
                self._engine = create_engine(self._database_url, **kwargs)
            else:
                self._engine = create_engine(self._database_url, pool_pre_ping=True)
            logger.info(f"🗄️ Blob database: {self._database_url}")
        return self._engine

    def get_session(self) -> Session:
        """New session on the shared engine; the caller closes it."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._session_factory()

    def create_tables(self) -> None:
        from scanlist.db import models  # noqa: F401  registers the blob table

        Base.metadata.create_all(bind=self.engine)


@lru_cache(maxsize=1)
def get_database_manager() -> DatabaseManager:
    return DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    session = get_database_manager().get_session()
    try:
        yield session
    finally:
        session.close()
