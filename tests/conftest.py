"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, client, record and repository fixtures.

==============================================================================
"""

import os

# Keep the app off the on-disk database and background pulls during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_REFRESH_ENABLED", "false")
os.environ.setdefault("SYNC_BACKEND", "blob")

import pytest
from typing import Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from scanlist.main import app
from scanlist.barcodes import BarcodeRecord
from scanlist.db.database import Base, get_db
from scanlist.db import models  # noqa: F401  registers tables on Base
from scanlist.services.repositories import BarcodeRepository, RepositoryError


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

# In-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# RECORD FIXTURES
# ============================================================================

def make_record(code: str, timestamp: str = "01/02/2025, 10:00:00 AM") -> BarcodeRecord:
    return BarcodeRecord(code=code, timestamp=timestamp)


@pytest.fixture
def mixed_records() -> List[BarcodeRecord]:
    """One list touching several carriers, newest first."""
    return [
        make_record("FM111"),
        make_record("36ABC"),
        make_record("FM222"),
        make_record("ZZ999"),
        make_record("1400X"),
    ]


# ============================================================================
# REPOSITORY FIXTURES
# ============================================================================

class MemoryRepository(BarcodeRepository):
    """In-memory repository recording every call."""

    def __init__(self, records: Optional[List[BarcodeRecord]] = None):
        self.stored: List[BarcodeRecord] = list(records or [])
        self.saves: List[List[BarcodeRecord]] = []
        self.loads = 0
        self.fail_saves = False
        self.fail_loads = False
        self.fail_clears = False
        self.clears = 0
        self.closed = False

    async def load(self) -> List[BarcodeRecord]:
        self.loads += 1
        if self.fail_loads:
            raise RepositoryError("load failed")
        return list(self.stored)

    async def save(self, records: List[BarcodeRecord]) -> None:
        self.saves.append(list(records))
        if self.fail_saves:
            raise RepositoryError("save failed")
        self.stored = list(records)

    async def clear(self) -> None:
        self.clears += 1
        if self.fail_clears:
            raise RepositoryError("clear failed")
        self.stored = []

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def memory_repository() -> MemoryRepository:
    return MemoryRepository()
