"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator

# Test database URL - use TEST_DATABASE_URL from environment or fall back to
# a SQLite file. Set before importing the app so the engine picks it up.
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'shelfwise_test.db')}",
)
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from app.core.security import create_access_token  # noqa: E402
from app.db.session import get_db, get_session_factory  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.models.book import Book, Genre  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


async def make_user(
    db: AsyncSession,
    username: str,
    display_name: str | None = None,
    profession: str | None = None,
    genres: list[Genre] | None = None,
) -> User:
    """Insert a reader."""
    user = User(
        email=f"{username}@example.com",
        username=username,
        display_name=display_name or username.title(),
        profession=profession,
        preferred_genres=genres or [],
    )
    db.add(user)
    await db.commit()
    return user


async def make_book(
    db: AsyncSession,
    title: str,
    page_count: int | None = 300,
    genres: list[Genre] | None = None,
    author: str | None = "Test Author",
) -> Book:
    """Insert a catalogue book."""
    book = Book(
        title=title,
        author=author,
        page_count=page_count,
        genres=genres or [],
    )
    db.add(book)
    await db.commit()
    return book


@pytest_asyncio.fixture
async def fantasy(db_session: AsyncSession) -> Genre:
    """Create a genre."""
    genre = Genre(name="Fantasy")
    db_session.add(genre)
    await db_session.commit()
    return genre


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    return await make_user(db_session, "testuser", display_name="Test User", profession="Engineer")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create a second reader."""
    return await make_user(db_session, "otheruser", display_name="Other Reader")


@pytest_asyncio.fixture
async def test_book(db_session: AsyncSession, fantasy: Genre) -> Book:
    """Create a 300 page test book."""
    return await make_book(db_session, "Test Book", page_count=300, genres=[fantasy])


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Create authentication headers for test user."""
    token = create_access_token(subject=str(test_user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def authenticated_client(
    client: AsyncClient,
    auth_headers: dict[str, str],
) -> AsyncClient:
    """Create authenticated test client."""
    client.headers.update(auth_headers)
    return client


@pytest_asyncio.fixture
async def user_factory(db_session: AsyncSession):
    """Factory inserting extra readers."""

    async def factory(username: str, **kwargs) -> User:
        return await make_user(db_session, username, **kwargs)

    return factory


@pytest_asyncio.fixture
async def book_factory(db_session: AsyncSession):
    """Factory inserting extra books."""

    async def factory(title: str, **kwargs) -> Book:
        return await make_book(db_session, title, **kwargs)

    return factory
