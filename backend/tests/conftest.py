import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from elie import models  # noqa: F401
from elie.database import Base
from elie.services.store import ConversationStore

from tests.fakes import FakeAssistantClient, FakeClock


@pytest_asyncio.fixture
async def store():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield ConversationStore(
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def configured_store(store):
    await store.save_config("sk-test", assistant_id="asst_1", vector_store_id="vs_1")
    return store


@pytest_asyncio.fixture
async def conversation(store):
    return await store.create_conversation("Trip planning")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client():
    return FakeAssistantClient()
