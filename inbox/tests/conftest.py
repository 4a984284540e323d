import os

# Configure test environment before the app package creates its engine
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('JWT_SECRET', 'test-secret')

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from inbox import models, clock
from inbox.models import Base, make_engine
from inbox.models.users import User


class FakeClock:
    """Deterministic stand-in for clock.now_ms; advances 1 ms per read."""

    def __init__(self, start: int):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now

    def advance(self, ms: int):
        self.now += ms


@pytest_asyncio.fixture
async def db(monkeypatch):
    """Fresh in-memory database per test, swapped in as the app's session factory."""
    engine = make_engine('sqlite+aiosqlite:///:memory:')
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(models, 'AsyncSessionLocal', session_factory)
    yield session_factory
    await engine.dispose()


@pytest_asyncio.fixture
async def file_db(monkeypatch, tmp_path):
    """On-disk database with a real connection pool, for tests that run sessions concurrently."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'inbox.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(models, 'AsyncSessionLocal', session_factory)
    yield session_factory
    await engine.dispose()


@pytest.fixture
def fake_clock(monkeypatch):
    # 10 minutes into an hour window, so a burst of sends stays in one bucket
    fc = FakeClock(1_767_225_600_000 + 10 * 60 * 1000)
    monkeypatch.setattr(clock, 'now_ms', fc)
    return fc


@pytest.fixture
def make_user(db):
    async def _make(name: str, inbox_enabled=None, **kw) -> int:
        async with db() as session:
            user = User(name=name, username=name.lower(), inbox_enabled=inbox_enabled, **kw)
            session.add(user)
            await session.commit()
            return user.id
    return _make


@pytest_asyncio.fixture
async def client(db):
    from inbox.main import app
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac
