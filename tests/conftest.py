import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reportdesk.db.models.reference import Branch, Source
from reportdesk.db.session import Base
import reportdesk.db.models  # noqa: F401  register all models


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture()
async def session(engine) -> AsyncSession:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        yield sess


@pytest.fixture()
async def branch(session) -> Branch:
    b = Branch(code="0102", name="Branch, East")
    session.add(b)
    await session.flush()
    return b


@pytest.fixture()
async def source(session) -> Source:
    s = Source(code="ABS", name="Automated Banking System", ris="RIS-ABS")
    session.add(s)
    await session.flush()
    return s
