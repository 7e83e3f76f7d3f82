"""
Pytest configuration and fixtures for Drive tests

Each test gets its own SQLite database file and blob directory, so tests
never share state. The application is driven in-process through httpx.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth import create_access_token
from app.database import Base, build_engine, get_db
from app.models.item import Item, ItemKind
from app.models.user import User
from app.storage import get_blob_store
from app.storage.local import LocalBlobStore
from main import app


@pytest.fixture
async def test_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'drive_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def async_db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads")


@pytest.fixture
async def client(session_factory, blob_store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database and blob store"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, first_name: str, last_name: str, email: str) -> User:
    user = User(first_name=first_name, last_name=last_name, email=email, hashed_password="not-used")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_item(db: AsyncSession, owner: User, name: str, kind: ItemKind, parent: Item | None = None) -> Item:
    """Insert an item directly, bypassing the service validation"""
    item = Item(
        name=name,
        kind=kind,
        owner_id=owner.id,
        parent_id=parent.id if parent else None,
        extension=None if kind == ItemKind.FOLDER else "." + name.rsplit(".", 1)[-1],
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture
async def test_user(async_db_session) -> User:
    """Owner of the trees built in most tests"""
    return await make_user(async_db_session, "Olivia", "Owner", "owner@example.com")


@pytest.fixture
async def other_user(async_db_session) -> User:
    """Receives grants from test_user"""
    return await make_user(async_db_session, "Victor", "Viewer", "viewer@example.com")


@pytest.fixture
async def stranger(async_db_session) -> User:
    """Has nothing shared with them"""
    return await make_user(async_db_session, "Sam", "Stranger", "stranger@example.com")


@pytest.fixture
def user_headers(test_user) -> dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
def other_headers(other_user) -> dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture
def stranger_headers(stranger) -> dict[str, str]:
    return auth_headers(stranger)
