"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

# Settings are cached on first use, so the test environment must be in place
# before anything from ``tq`` is imported.
os.environ["TQ_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TQ_REDIS_URL"] = ""
os.environ["TQ_JWT_ALGORITHM"] = "HS256"
os.environ["TQ_JWT_SECRET"] = "test-secret-for-therapy-quest-suite"
os.environ["TQ_ENRICHMENT_URL"] = ""
os.environ["TQ_LOG_FORMAT"] = "console"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from tq.accounts.service import create_account, link_supervisor  # noqa: E402
from tq.auth.jwt import create_access_token, reset_keys  # noqa: E402
from tq.config import get_settings  # noqa: E402
from tq.database import close_db, create_schema, get_session_factory, init_db  # noqa: E402
from tq.db.models import Account  # noqa: E402
from tq.gamification.xp_service import apply_experience  # noqa: E402
from tq.main import create_app  # noqa: E402

get_settings.cache_clear()
reset_keys()

# 12:00 in America/Sao_Paulo (UTC-3), so the local day matches the UTC day
NOW = datetime(2026, 3, 10, 15, 0, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh in-memory schema per test."""
    await init_db(get_settings().database_url)
    await create_schema()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Session on the shared in-memory database."""
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def app() -> FastAPI:
    return create_app()


@pytest_asyncio.fixture
async def client(app: FastAPI, database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app on the test database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def frozen_task_clock(monkeypatch: pytest.MonkeyPatch) -> datetime:
    """Pin the task service's clock so fixed dates around NOW stay in the future."""
    monkeypatch.setattr("tq.tasks.service.utcnow", lambda: NOW)
    return NOW


async def make_account(
    db: AsyncSession,
    display_name: str = "Ana",
    role: str = "member",
    experience: int = 0,
    points: int = 0,
    timezone_name: str | None = None,
) -> Account:
    """Create and commit an account with the given starting balances."""
    account = await create_account(db, display_name, role=role, timezone_name=timezone_name)
    apply_experience(account, experience)
    account.points = points
    await db.commit()
    return account


async def make_supervised_pair(db: AsyncSession) -> tuple[Account, Account]:
    """A supervisor and the member it supervises."""
    supervisor = await make_account(db, "Dr. Lima", role="supervisor")
    member = await make_account(db, "Ana")
    await link_supervisor(db, supervisor.id, member.id)
    await db.commit()
    return supervisor, member


def auth_headers(account: Account) -> dict[str, str]:
    token = create_access_token(account.id, account.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def member(db_session: AsyncSession) -> Account:
    return await make_account(db_session)


@pytest_asyncio.fixture
async def member_client(client: AsyncClient, db_session: AsyncSession) -> tuple[AsyncClient, Account]:
    """Client plus a member account whose token is set on every request."""
    account = await make_account(db_session)
    client.headers.update(auth_headers(account))
    return client, account
