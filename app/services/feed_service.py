"""Page aggregation service.

Each page gathers several independent reads concurrently. Every read runs
in its own session, and a failed read is replaced by its empty default so
one failing section never fails the whole page.
"""

from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import NotFoundError
from app.core.resilience import gather_with_fallback
from app.repositories.book_repo import BookRepository
from app.schemas.feed import BookPage, HomeFeed, MyBooksPage
from app.schemas.reading import BookStatusResponse, SessionStats
from app.schemas.user import UserReadingStats
from app.services.book_service import BookService
from app.services.goal_service import GoalService
from app.services.recommendation_service import RecommendationService, normalize_filter
from app.services.session_service import SessionService
from app.services.status_service import StatusService
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


def _none() -> None:
    return None


class FeedService:
    """Service building page-level aggregates."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    def _branch(
        self,
        call: Callable[[AsyncSession], Awaitable[Any]],
    ) -> Callable[[], Awaitable[Any]]:
        """Wrap a read so it runs in a session of its own."""

        async def run() -> Any:
            async with self.session_factory() as db:
                return await call(db)

        return run

    async def get_home_feed(self, user_id: UUID, filter_type: str | None = None) -> HomeFeed:
        """Currently reading, trending, recommendations and new arrivals."""
        filter_type = normalize_filter(filter_type)

        sections = await gather_with_fallback(
            {
                "currently_reading": (
                    self._branch(lambda db: BookService(db).get_currently_reading_books(user_id)),
                    list,
                ),
                "trending": (
                    self._branch(
                        lambda db: BookService(db).get_trending_books_in_user_genres(user_id)
                    ),
                    list,
                ),
                "recommendations": (
                    self._branch(
                        lambda db: RecommendationService(db).get_book_recommendations(
                            user_id, filter_type
                        )
                    ),
                    list,
                ),
                "recently_added": (
                    self._branch(lambda db: BookService(db).get_recently_added_books()),
                    list,
                ),
            }
        )

        logger.debug("Home feed built", user_id=str(user_id), filter=filter_type)

        return HomeFeed(filter=filter_type, **sections)

    async def get_my_books(self, user_id: UUID) -> MyBooksPage:
        """Stats, shelves, goals and favorites of the user."""
        sections = await gather_with_fallback(
            {
                "stats": (
                    self._branch(lambda db: UserService(db).get_user_reading_stats(user_id)),
                    UserReadingStats,
                ),
                "reading": (
                    self._branch(lambda db: BookService(db).get_user_reading_books(user_id)),
                    list,
                ),
                "to_read": (
                    self._branch(lambda db: BookService(db).get_user_to_read_books(user_id)),
                    list,
                ),
                "completed": (
                    self._branch(lambda db: BookService(db).get_user_completed_books(user_id)),
                    list,
                ),
                "goals": (
                    self._branch(lambda db: GoalService(db).get_user_reading_goals(user_id)),
                    list,
                ),
                "favorites": (
                    self._branch(lambda db: BookService(db).get_user_favorite_books(user_id)),
                    list,
                ),
            }
        )

        return MyBooksPage(**sections)

    async def get_book_page(self, user_id: UUID, book_id: UUID) -> BookPage:
        """Book detail with the user's status, review and sessions.

        Raises:
            NotFoundError: Unknown book
        """
        async with self.session_factory() as db:
            if not await BookRepository(db).exists(book_id):
                raise NotFoundError("Book", str(book_id))

        sections = await gather_with_fallback(
            {
                "book": (
                    self._branch(lambda db: BookService(db).get_book_by_id(book_id, user_id)),
                    _none,
                ),
                "status": (
                    self._branch(
                        lambda db: StatusService(db).get_user_book_status(user_id, book_id)
                    ),
                    BookStatusResponse,
                ),
                "review": (
                    self._branch(
                        lambda db: StatusService(db).get_user_book_review(user_id, book_id)
                    ),
                    _none,
                ),
                "active_session": (
                    self._branch(
                        lambda db: SessionService(db).get_active_reading_session(user_id, book_id)
                    ),
                    _none,
                ),
                "sessions": (
                    self._branch(
                        lambda db: SessionService(db).get_book_reading_sessions(user_id, book_id)
                    ),
                    list,
                ),
                "session_stats": (
                    self._branch(
                        lambda db: SessionService(db).get_book_reading_session_stats(
                            user_id, book_id
                        )
                    ),
                    SessionStats,
                ),
            }
        )

        return BookPage(**sections)
