"""Book service: book details, shelves, favorites and discovery lists."""

from datetime import timedelta
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundError
from app.core.numbers import round_half_up, to_number
from app.core.resilience import fallback_on_error, translate_store_errors
from app.core.timeutils import days_between, ensure_utc, utcnow
from app.models.book import Book
from app.models.reading import ReadingStatus
from app.repositories.book_repo import BookRepository
from app.repositories.user_repo import UserRepository
from app.schemas.book import (
    BookBrief,
    BookDetail,
    CompletedBook,
    FavoriteResponse,
    FriendOnBook,
    RecentlyAddedBook,
    ShelfBook,
    TrendingBook,
)

logger = structlog.get_logger(__name__)


def build_book_brief(book: Book, genres: dict[UUID, list[str]]) -> BookBrief:
    """Build the compact view of a book from a genre lookup."""
    return BookBrief(
        id=book.id,
        title=book.title,
        author=book.author,
        cover_url=book.cover_url,
        page_count=book.page_count,
        genres=genres.get(book.id, []),
    )


def _shelf_book(book: Book, fact: ReadingStatus, genres: dict[UUID, list[str]]) -> ShelfBook:
    return ShelfBook(
        **build_book_brief(book, genres).model_dump(),
        current_page=fact.current_page,
        progress=round_half_up(to_number(fact.percent_complete)),
        updated_at=ensure_utc(fact.updated_at),
    )


class BookService:
    """Service for book views and per-user book lists."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.book_repo = BookRepository(db)
        self.user_repo = UserRepository(db)

    @translate_store_errors("load book")
    async def get_book_by_id(self, book_id: UUID, user_id: UUID) -> BookDetail:
        """Get a book with community counters, friends and similar books.

        ``friends_reading`` lists up to five friends of ``user_id`` who hold
        any status on the book.

        Unlike the listing reads this does not fall back to an empty result:
        a missing book and a failing store must stay distinguishable, so a
        store failure surfaces as ``StoreError``. The book page fan-out still
        degrades it to ``book=None``.

        Raises:
            NotFoundError: Unknown book
            StoreError: Store failure while loading
        """
        book = await self.book_repo.get_by_id(book_id)
        if not book:
            raise NotFoundError("Book", str(book_id))

        avg_rating, ratings_count = await self.book_repo.get_rating_summary(book_id)
        status_counts = await self.book_repo.count_by_status(book_id)
        friends = await self.user_repo.get_friends_on_book(user_id, book_id, limit=5)
        similar = await self.book_repo.get_similar_books(book_id, limit=4)

        genres = await self.book_repo.get_genre_names([book.id] + [b.id for b in similar])

        return BookDetail(
            **build_book_brief(book, genres).model_dump(),
            description=book.description,
            language=book.language,
            isbn=book.isbn,
            published_year=book.published_year,
            average_rating=round(to_number(avg_rating), 2) if ratings_count else None,
            ratings_count=to_number(ratings_count),
            readers_count=to_number(status_counts.get("reading")),
            finished_count=to_number(status_counts.get("finished")),
            friends_reading=[
                FriendOnBook(
                    id=friend.id,
                    display_name=friend.display_name,
                    avatar_url=friend.avatar_url,
                    status=status,
                )
                for friend, status in friends
            ],
            similar_books=[build_book_brief(b, genres) for b in similar],
        )

    # Shelves

    @fallback_on_error(default=list)
    async def get_currently_reading_books(
        self,
        user_id: UUID,
        limit: int | None = None,
    ) -> list[ShelfBook]:
        """Get the books the user is reading, most recently updated first."""
        limit = limit or settings.currently_reading_limit
        return await self._shelf(user_id, "reading", limit)

    @fallback_on_error(default=list)
    async def get_user_reading_books(self, user_id: UUID) -> list[ShelfBook]:
        return await self._shelf(user_id, "reading")

    @fallback_on_error(default=list)
    async def get_user_to_read_books(self, user_id: UUID) -> list[ShelfBook]:
        return await self._shelf(user_id, "want-to-read")

    @fallback_on_error(default=list)
    async def get_user_completed_books(self, user_id: UUID) -> list[CompletedBook]:
        """Get finished books with the user's own rating."""
        rows = await self.book_repo.get_completed_books(user_id)
        genres = await self.book_repo.get_genre_names([book.id for book, _, _ in rows])

        return [
            CompletedBook(
                **build_book_brief(book, genres).model_dump(),
                finished_at=ensure_utc(fact.started_at),
                rating=rating,
            )
            for book, fact, rating in rows
        ]

    @fallback_on_error(default=list)
    async def get_user_favorite_books(self, user_id: UUID) -> list[BookBrief]:
        books = await self.book_repo.get_user_favorites(user_id)
        genres = await self.book_repo.get_genre_names([book.id for book in books])
        return [build_book_brief(book, genres) for book in books]

    async def _shelf(
        self,
        user_id: UUID,
        status: str,
        limit: int | None = None,
    ) -> list[ShelfBook]:
        rows = await self.book_repo.get_books_with_status(user_id, status, limit)
        genres = await self.book_repo.get_genre_names([book.id for book, _ in rows])
        return [_shelf_book(book, fact, genres) for book, fact in rows]

    # Favorites

    @translate_store_errors("add favorite")
    async def add_to_favorites(self, user_id: UUID, book_id: UUID) -> FavoriteResponse:
        """Add a book to the user's favorites. Idempotent."""
        if not await self.book_repo.exists(book_id):
            raise NotFoundError("Book", str(book_id))

        await self.book_repo.add_favorite(user_id, book_id)
        await self.db.commit()

        logger.info("Book favorited", user_id=str(user_id), book_id=str(book_id))

        return FavoriteResponse(book_id=book_id, favorited=True)

    @translate_store_errors("remove favorite")
    async def remove_from_favorites(self, user_id: UUID, book_id: UUID) -> FavoriteResponse:
        """Remove a book from the user's favorites."""
        removed = await self.book_repo.remove_favorite(user_id, book_id)
        await self.db.commit()

        if removed:
            logger.info("Book unfavorited", user_id=str(user_id), book_id=str(book_id))

        return FavoriteResponse(book_id=book_id, favorited=False)

    # Discovery

    @fallback_on_error(default=list)
    async def get_trending_books_in_user_genres(
        self,
        user_id: UUID,
        days: int | None = None,
        limit: int = 4,
    ) -> list[TrendingBook]:
        """Get books in the user's genres with the most readers lately."""
        since = utcnow() - timedelta(days=days or settings.trending_window_days)
        rows = await self.book_repo.get_trending_in_user_genres(user_id, since, limit)
        genres = await self.book_repo.get_genre_names([book.id for book, _ in rows])

        return [
            TrendingBook(
                **build_book_brief(book, genres).model_dump(),
                readers=to_number(readers),
            )
            for book, readers in rows
        ]

    @fallback_on_error(default=list)
    async def get_recently_added_books(self, limit: int = 2) -> list[RecentlyAddedBook]:
        """Get the newest books with how many days ago they were added."""
        books = await self.book_repo.get_recently_added(limit)
        genres = await self.book_repo.get_genre_names([book.id for book in books])
        now = utcnow()

        return [
            RecentlyAddedBook(
                **build_book_brief(book, genres).model_dump(),
                days_ago=max(days_between(book.created_at, now), 0),
            )
            for book in books
        ]
