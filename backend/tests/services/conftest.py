"""Service test fixtures — async DB, FastAPI test client and signed-in users.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for code paths that open sessions directly
    - Redis is never configured: view de-duplication runs against the database

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific behaviour such as ON DELETE SET NULL is not relied on)
    - Users are created through the real signup/login endpoints so tokens are genuine
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from promptserver.db.base import Base
from promptserver.infrastructure.database import get_db, DatabaseSessionManager
from promptserver.models.category import Category
import promptserver.infrastructure.database as db_module
from promptserver.main import app
from tests.services.api_helpers import sign_in, create_prompt


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def auth_headers(client):
    return await sign_in(client, "author@example.com", "Author")


@pytest.fixture
async def other_headers(client):
    return await sign_in(client, "reader@example.com", "Reader")


@pytest.fixture
async def category(test_db):
    """A root category with one child."""
    root = Category(name="development", display_name="Development")
    test_db.add(root)
    await test_db.commit()
    await test_db.refresh(root)
    child = Category(
        name="backend", display_name="Backend", parent_category_id=root.id,
    )
    test_db.add(child)
    await test_db.commit()
    await test_db.refresh(child)
    return root


@pytest.fixture
async def prompt(client, auth_headers, category):
    return await create_prompt(client, auth_headers, category.id)
