"""Page aggregation service and endpoint tests."""

import uuid
from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import NotFoundError, StoreError
from app.models.book import Book
from app.models.user import User
from app.repositories.book_repo import BookRepository
from app.schemas.goal import GoalCreate
from app.services.book_service import BookService
from app.services.feed_service import FeedService
from app.services.goal_service import GoalService
from app.services.session_service import SessionService
from app.services.status_service import StatusService
from app.services.user_service import UserService


class TestHomeFeed:
    @pytest.mark.asyncio
    async def test_sections(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
        book_factory,
    ):
        await book_factory("Newest")
        await SessionService(db_session).start_reading_session(test_user.id, test_book.id, 30)

        feed = await FeedService(session_factory).get_home_feed(test_user.id, "friends")

        assert feed.filter == "friends"
        assert [b.id for b in feed.currently_reading] == [test_book.id]
        assert feed.currently_reading[0].progress == 10
        assert len(feed.recently_added) == 2
        assert feed.recently_added[0].days_ago == 0

    @pytest.mark.asyncio
    async def test_unknown_filter_normalized(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
    ):
        feed = await FeedService(session_factory).get_home_feed(test_user.id, "nearby")

        assert feed.filter == "similar"

    @pytest.mark.asyncio
    async def test_failed_section_comes_back_empty(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
        monkeypatch,
    ):
        async def broken(self, *args, **kwargs):
            raise RuntimeError("trending index unavailable")

        monkeypatch.setattr(BookService, "get_trending_books_in_user_genres", broken)
        await SessionService(db_session).start_reading_session(test_user.id, test_book.id, 1)

        feed = await FeedService(session_factory).get_home_feed(test_user.id)

        assert feed.trending == []
        assert [b.id for b in feed.currently_reading] == [test_book.id]
        assert [b.id for b in feed.recently_added] == [test_book.id]


class TestMyBooks:
    @pytest.mark.asyncio
    async def test_sections(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
        book_factory,
    ):
        done = await book_factory("Done")
        wanted = await book_factory("Wanted")
        statuses = StatusService(db_session)
        await statuses.update_user_book_status(test_user.id, test_book.id, "reading", current_page=150)
        await statuses.update_user_book_status(test_user.id, done.id, "finished")
        await statuses.rate_book(test_user.id, done.id, 4)
        await statuses.update_user_book_status(test_user.id, wanted.id, "want-to-read")
        await BookService(db_session).add_to_favorites(test_user.id, done.id)

        page = await FeedService(session_factory).get_my_books(test_user.id)

        assert page.stats.books_reading == 1
        assert page.stats.books_finished == 1
        assert page.stats.books_want_to_read == 1
        assert [b.id for b in page.reading] == [test_book.id]
        assert page.reading[0].progress == 50
        assert [b.id for b in page.to_read] == [wanted.id]
        assert [b.id for b in page.completed] == [done.id]
        assert page.completed[0].rating == 4
        assert [b.id for b in page.favorites] == [done.id]
        assert page.goals == []


class TestBookPage:
    @pytest.mark.asyncio
    async def test_sections(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
    ):
        sessions = SessionService(db_session)
        first = await sessions.start_reading_session(test_user.id, test_book.id, 1)
        await sessions.end_reading_session(first, 40)
        await sessions.start_reading_session(test_user.id, test_book.id, 40)
        await StatusService(db_session).review_book(test_user.id, test_book.id, "Slow start")

        page = await FeedService(session_factory).get_book_page(test_user.id, test_book.id)

        assert page.book.title == "Test Book"
        assert page.book.readers_count == 1
        assert page.status.status == "reading"
        assert page.status.current_page == 40
        assert page.review == "Slow start"
        assert page.active_session is not None
        assert page.active_session.start_page == 40
        assert [s.id for s in page.sessions] == [first]
        assert page.session_stats.session_count == 1
        assert page.session_stats.total_pages_read == 39

    @pytest.mark.asyncio
    async def test_unknown_book(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
    ):
        with pytest.raises(NotFoundError):
            await FeedService(session_factory).get_book_page(test_user.id, uuid.uuid4())


class TestBookDetail:
    @pytest.mark.asyncio
    async def test_friends_and_similar(
        self,
        db_session: AsyncSession,
        test_user: User,
        other_user: User,
        test_book: Book,
        fantasy,
        user_factory,
        book_factory,
    ):
        sibling = await book_factory("Sibling", genres=[fantasy])
        stranger = await user_factory("stranger")
        await UserService(db_session).add_friend(test_user.id, other_user.id)
        statuses = StatusService(db_session)
        await statuses.update_user_book_status(other_user.id, test_book.id, "reading")
        await statuses.update_user_book_status(stranger.id, test_book.id, "finished")
        await statuses.rate_book(other_user.id, test_book.id, 4)
        await statuses.rate_book(stranger.id, test_book.id, 5)

        detail = await BookService(db_session).get_book_by_id(test_book.id, test_user.id)

        assert detail.average_rating == 4.5
        assert detail.ratings_count == 2
        assert detail.readers_count == 1
        assert detail.finished_count == 1
        assert [f.id for f in detail.friends_reading] == [other_user.id]
        assert detail.friends_reading[0].status == "reading"
        assert [b.id for b in detail.similar_books] == [sibling.id]

    @pytest.mark.asyncio
    async def test_unknown_book(self, db_session: AsyncSession, test_user: User):
        with pytest.raises(NotFoundError):
            await BookService(db_session).get_book_by_id(uuid.uuid4(), test_user.id)

    @pytest.mark.asyncio
    async def test_store_failure_is_not_an_empty_book(
        self,
        db_session: AsyncSession,
        test_user: User,
        test_book: Book,
        monkeypatch,
    ):
        async def broken(self, *args, **kwargs):
            raise OperationalError("SELECT ratings", {}, Exception("connection lost"))

        monkeypatch.setattr(BookRepository, "get_rating_summary", broken)

        with pytest.raises(StoreError):
            await BookService(db_session).get_book_by_id(test_book.id, test_user.id)

    @pytest.mark.asyncio
    async def test_book_page_degrades_failed_detail(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
        monkeypatch,
    ):
        async def broken(self, *args, **kwargs):
            raise OperationalError("SELECT ratings", {}, Exception("connection lost"))

        monkeypatch.setattr(BookRepository, "get_rating_summary", broken)

        page = await FeedService(session_factory).get_book_page(test_user.id, test_book.id)

        assert page.book is None
        assert page.status.status == "none"


@pytest.mark.asyncio
async def test_goals_on_my_books_page(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    test_user: User,
):
    await GoalService(db_session).set_reading_goal(
        test_user.id,
        GoalCreate(period="annual", target=12, start_date=date(2026, 1, 1), end_date=date(2026, 12, 31)),
    )

    page = await FeedService(session_factory).get_my_books(test_user.id)

    assert [g.target for g in page.goals] == [12]


class TestFeedEndpoints:
    @pytest.mark.asyncio
    async def test_home_feed(self, authenticated_client: AsyncClient, test_book: Book):
        response = await authenticated_client.get("/v1/feed/home", params={"filter": "friends"})

        assert response.status_code == 200
        data = response.json()
        assert data["filter"] == "friends"
        assert set(data) == {"filter", "currently_reading", "trending", "recommendations", "recently_added"}

    @pytest.mark.asyncio
    async def test_my_books(self, authenticated_client: AsyncClient, test_book: Book):
        await authenticated_client.put(f"/v1/books/{test_book.id}/status", json={"status": "want-to-read"})

        response = await authenticated_client.get("/v1/feed/my-books")

        assert response.status_code == 200
        assert response.json()["stats"]["books_want_to_read"] == 1

    @pytest.mark.asyncio
    async def test_book_page(self, authenticated_client: AsyncClient, test_book: Book):
        response = await authenticated_client.get(f"/v1/feed/books/{test_book.id}")

        assert response.status_code == 200
        assert response.json()["book"]["title"] == "Test Book"
        assert response.json()["status"]["status"] == "none"

    @pytest.mark.asyncio
    async def test_unknown_book_page(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get(f"/v1/feed/books/{uuid.uuid4()}")

        assert response.status_code == 404
