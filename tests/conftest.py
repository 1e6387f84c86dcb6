"""
Test infrastructure for the article service.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces every session to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- A fresh engine is built and all tables are created before each test and
  dropped after, giving each test a clean isolated state.
- Tests open short-lived sessions (seed, then assert) rather than holding
  one open across service calls, because all sessions share one connection.
- The Redis cache is disabled by setting cache._redis = None; the
  CacheManager handles a None _redis gracefully (no-op reads and writes).
"""
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import solo.models  # noqa: F401  (registers the tables on Base.metadata)
from solo.cache import cache
from solo.database import Base
from solo.instrumentation import install_query_counter
from solo.schemas import UserCreate
from solo.services import user_service
from solo.services.article_service import ArticleService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BLOG_ID = 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    """Per-test SQLite engine with the schema created."""
    engine_test = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_query_counter(engine_test)

    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine_test
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine_test.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def service(session_factory) -> ArticleService:
    """An ArticleService bound to the test database with its own lock."""
    cache._redis = None
    return ArticleService(session_factory)


@pytest_asyncio.fixture
async def author(session_factory):
    """A committed user of blog ``BLOG_ID`` with no articles."""
    async with session_factory() as session, session.begin():
        user = await user_service.create_user(
            session, UserCreate(username="admin", blog_id=BLOG_ID)
        )
    return user
