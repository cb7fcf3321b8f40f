"""
PetHaven Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock session for pure unit tests
    ├── temp_storage:     temporary directory for blob storage tests
    ├── db_engine:        in-memory SQLite engine with the full schema
    ├── session_factory:  sessions bound to db_engine
    ├── seeded_db:        users 7/8, breeds, pets 3 (Dog), 4 (Cat), 5 (Rabbit)
    ├── serialized_db:    same data in a file DB whose transactions queue
    └── test_client:      HTTPX AsyncClient against the app, DB overridden
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="pethaven_test_")
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db_session  # noqa: E402
from app.models.application import Application  # noqa: E402
from app.models.pet import CatBreed, DogBreed, Pet  # noqa: E402
from app.models.user import User  # noqa: E402

DOG_PET_ID = 3
CAT_PET_ID = 4
RABBIT_PET_ID = 5
USER_ID = 7
OTHER_USER_ID = 8


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def application_payload():
    """Intake answers of the reference scenario (user 7 applying for pet 3)."""
    return {
        "user_id": USER_ID,
        "pet_id": DOG_PET_ID,
        "adoptionReason": "space",
        "livingSituation": "house",
        "experience": "none",
        "householdMembers": "2",
        "workSchedule": "remote",
    }


# ══════════════════════════════════════════════════════════════════════════
# Database fixtures (in-memory SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps one connection so every session sees the same database.
    SQLite ignores FOR UPDATE, so lock contention itself is not exercised here.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def seeded_db(session_factory):
    await seed_reference_data(session_factory)
    return session_factory


async def seed_reference_data(session_factory) -> None:
    now = datetime.now(timezone.utc)
    async with session_factory() as session:
        session.add_all([
            User(id=USER_ID, first_name="Ada", last_name="Lovelace",
                 phone_number="555-0107", email="ada@example.com", password="x"),
            User(id=OTHER_USER_ID, first_name="Alan", last_name="Turing",
                 phone_number=None, email="alan@example.com", password="x"),
            DogBreed(id=1, name="Labrador Retriever"),
            CatBreed(id=1, name="Siamese"),
            Pet(id=DOG_PET_ID, name="Biscuit", species="Dog", breed_id=1, gender="Male",
                age=3, status=1, created_at=now, updated_at=now),
            Pet(id=CAT_PET_ID, name="Miso", species="Cat", breed_id=1, gender="Female",
                age=2, status=1, created_at=now, updated_at=now),
            Pet(id=RABBIT_PET_ID, name="Clover", species="Rabbit", breed_id=1, gender="Female",
                age=1, status=1, created_at=now, updated_at=now),
        ])
        await session.commit()


@pytest_asyncio.fixture
async def serialized_db(tmp_path):
    """
    Seeded file-backed SQLite where each session gets its own connection and
    every transaction starts with BEGIN IMMEDIATE.

    SQLite has no row locks; taking the database write lock at transaction
    start makes concurrent sessions queue the way FOR UPDATE makes them
    queue on PostgreSQL.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'serialized.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    await seed_reference_data(factory)
    yield factory
    await engine.dispose()


async def read_state(session_factory, application_id: int, pet_id: int):
    """(application.status, pet.status) as committed in the database."""
    async with session_factory() as session:
        application = await session.get(Application, application_id)
        pet = await session.get(Pet, pet_id)
        return application.status, pet.status


# ══════════════════════════════════════════════════════════════════════════
# HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(seeded_db):
    """
    HTTPX AsyncClient over ASGITransport, with get_db_session pointed at the
    seeded in-memory database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import app

    async def override_db_session():
        async with seeded_db() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
