import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.database import Base
from src.models import DealRecord  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def session_factory():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def headphone_results():
    return [dict(r) for r in HEADPHONE_RESULTS]


HEADPHONE_RESULTS = [
    {
        "position": 1,
        "title": "Sony WH-1000XM5",
        "product_link": "https://example.com/sony",
        "source": "Best Buy",
        "extracted_price": 80,
        "extracted_old_price": 100,
        "thumbnail": "https://example.com/sony.jpg",
    },
    {
        "position": 2,
        "title": "JBL Tune 510BT",
        "link": "https://example.com/jbl",
        "source": "Target",
        "extracted_old_price": 50,
    },
    {
        "position": 3,
        "title": "Bose QuietComfort 45",
        "product_link": "https://example.com/bose",
        "source": "Amazon",
        "extracted_price": 150,
        "extracted_old_price": 200,
    },
]
