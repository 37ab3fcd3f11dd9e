"""Shared fixtures: in-memory database, fixed clock and seed data"""

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from document_service.infrastructure.database.models import Base
from document_service.models import RequestContext, UserActor

from tests.support import OWNER_ID, FakeClock, seed


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def context():
    return RequestContext(ip_adres="203.0.113.7", user_agent="pytest")


@pytest.fixture
def owner():
    return UserActor(user_id=OWNER_ID)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        await seed(session)
        yield session
