"""
ReqCheck — Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── reporter: Fresh DiagnosticsReporter per test
    ├── router: Router writing to that reporter
    ├── db_engine: SQLite file database in tmp_path with tables created
    ├── movie_store: MovieStore bound to db_engine
    ├── app: create_app() wired to reporter + movie_store
    ├── test_client: HTTPX AsyncClient talking to app in-process
    └── fetcher: ClientFetcher talking to app in-process
"""

import os
import tempfile

# Override settings for testing BEFORE any reqcheck imports
_test_dir = tempfile.mkdtemp(prefix="reqcheck_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/default.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"
os.environ["DEMO_ROUTES_ENABLED"] = "true"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from reqcheck.database import init_db  # noqa: E402
from reqcheck.services.diagnostics import DiagnosticsReporter  # noqa: E402
from reqcheck.services.fetcher import ClientFetcher  # noqa: E402
from reqcheck.services.movie_store import MovieStore  # noqa: E402
from reqcheck.services.router import Router  # noqa: E402


@pytest.fixture
def reporter():
    return DiagnosticsReporter()


@pytest.fixture
def router(reporter):
    return Router(reporter=reporter)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A throwaway SQLite database with the movies table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/movies.db")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def movie_store(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    return MovieStore(factory)


@pytest.fixture
def app(reporter, movie_store):
    from reqcheck.main import create_app
    return create_app(reporter=reporter, store=movie_store)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def fetcher(app):
    async with ClientFetcher(base_url="http://test", transport=ASGITransport(app=app)) as client:
        yield client


@pytest.fixture
def lesson_movie():
    """The payload the lesson's new-movie form submits."""
    return {"title": "", "year": 2021}
