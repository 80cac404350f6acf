"""Book repository for database operations."""

import uuid
from collections import defaultdict
from datetime import UTC, datetime

from sqlalchemy import and_, func, select, union
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.book import Book, Favorite, Genre, Rating, Review, book_genres
from app.models.reading import ReadingStatus
from app.models.user import user_genre_preferences


class BookRepository:
    """Repository for Book, rating, review and favorite operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Book lookups

    async def get_by_id(self, book_id: uuid.UUID) -> Book | None:
        """Get book by ID."""
        stmt = select(Book).where(Book.id == book_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, book_id: uuid.UUID) -> bool:
        """Check whether a book exists."""
        stmt = select(Book.id).where(Book.id == book_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_page_count(self, book_id: uuid.UUID) -> int | None:
        """Get the page count of a book (None when unset or book unknown)."""
        stmt = select(Book.page_count).where(Book.id == book_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_recently_added(self, limit: int = 2) -> list[Book]:
        """Get the newest books in the catalogue."""
        stmt = select(Book).order_by(Book.created_at.desc(), Book.title).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Genres

    async def get_genre_names(self, book_ids: list[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
        """Get genre names per book, alphabetically."""
        if not book_ids:
            return {}

        stmt = (
            select(book_genres.c.book_id, Genre.name)
            .join(Genre, Genre.id == book_genres.c.genre_id)
            .where(book_genres.c.book_id.in_(book_ids))
            .order_by(Genre.name)
        )
        result = await self.db.execute(stmt)

        genres: dict[uuid.UUID, list[str]] = defaultdict(list)
        for book_id, name in result.all():
            genres[book_id].append(name)
        return dict(genres)

    async def list_genre_names(self) -> list[str]:
        """Get every genre name, alphabetically."""
        result = await self.db.execute(select(Genre.name).order_by(Genre.name))
        return list(result.scalars().all())

    async def list_authors(self) -> list[str]:
        """Get the distinct authors of catalogued books, alphabetically."""
        stmt = (
            select(Book.author)
            .where(Book.author.is_not(None))
            .group_by(Book.author)
            .order_by(Book.author)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_or_create_genres(self, names: list[str]) -> list[Genre]:
        """Resolve genre names, creating the missing ones."""
        cleaned = sorted({name.strip() for name in names if name and name.strip()})
        if not cleaned:
            return []

        stmt = select(Genre).where(Genre.name.in_(cleaned))
        result = await self.db.execute(stmt)
        found = {genre.name: genre for genre in result.scalars().all()}

        for name in cleaned:
            if name not in found:
                genre = Genre(name=name)
                self.db.add(genre)
                found[name] = genre

        await self.db.flush()
        return [found[name] for name in cleaned]

    async def get_similar_books(self, book_id: uuid.UUID, limit: int = 4) -> list[Book]:
        """Get books sharing the most genres with the given book."""
        own_genres = select(book_genres.c.genre_id).where(book_genres.c.book_id == book_id)
        overlap = func.count(book_genres.c.genre_id).label("overlap")

        stmt = (
            select(Book, overlap)
            .join(book_genres, book_genres.c.book_id == Book.id)
            .where(
                and_(
                    book_genres.c.genre_id.in_(own_genres),
                    Book.id != book_id,
                )
            )
            .group_by(Book.id)
            .order_by(overlap.desc(), Book.title)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [row[0] for row in result.all()]

    async def get_trending_in_user_genres(
        self,
        user_id: uuid.UUID,
        since: datetime,
        limit: int = 4,
    ) -> list[tuple[Book, int]]:
        """Get books in the user's preferred genres with the most recent readers.

        A reader is a user who rated the book or updated a ``reading``
        status on it after ``since``.
        """
        recent_readers = union(
            select(Rating.user_id, Rating.book_id).where(Rating.rated_at >= since),
            select(ReadingStatus.user_id, ReadingStatus.book_id).where(
                and_(
                    ReadingStatus.status == "reading",
                    ReadingStatus.updated_at >= since,
                )
            ),
        ).subquery()

        preferred = select(user_genre_preferences.c.genre_id).where(
            user_genre_preferences.c.user_id == user_id
        )
        in_genres = select(book_genres.c.book_id).where(book_genres.c.genre_id.in_(preferred))
        readers = func.count(func.distinct(recent_readers.c.user_id)).label("readers")

        stmt = (
            select(Book, readers)
            .join(recent_readers, recent_readers.c.book_id == Book.id)
            .where(Book.id.in_(in_genres))
            .group_by(Book.id)
            .order_by(readers.desc(), Book.title)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    # Aggregates

    async def get_rating_summary(self, book_id: uuid.UUID) -> tuple[float | None, int]:
        """Get (average rating, ratings count) for a book."""
        stmt = select(
            func.avg(Rating.rating),
            func.count(Rating.id),
        ).where(Rating.book_id == book_id)
        result = await self.db.execute(stmt)
        avg_rating, count = result.one()
        return avg_rating, count

    async def count_by_status(self, book_id: uuid.UUID) -> dict[str, int]:
        """Count users per reading status for a book."""
        stmt = (
            select(ReadingStatus.status, func.count(ReadingStatus.id))
            .where(ReadingStatus.book_id == book_id)
            .group_by(ReadingStatus.status)
        )
        result = await self.db.execute(stmt)
        return {row[0]: row[1] for row in result.all()}

    # Shelves

    async def get_books_with_status(
        self,
        user_id: uuid.UUID,
        status: str,
        limit: int | None = None,
    ) -> list[tuple[Book, ReadingStatus]]:
        """Get the user's books holding a status, most recently updated first."""
        stmt = (
            select(Book, ReadingStatus)
            .join(ReadingStatus, ReadingStatus.book_id == Book.id)
            .where(
                and_(
                    ReadingStatus.user_id == user_id,
                    ReadingStatus.status == status,
                )
            )
            .order_by(ReadingStatus.updated_at.desc(), Book.title)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_completed_books(
        self,
        user_id: uuid.UUID,
    ) -> list[tuple[Book, ReadingStatus, int | None]]:
        """Get the user's finished books with the user's rating, if any."""
        stmt = (
            select(Book, ReadingStatus, Rating.rating)
            .join(ReadingStatus, ReadingStatus.book_id == Book.id)
            .outerjoin(
                Rating,
                and_(
                    Rating.book_id == Book.id,
                    Rating.user_id == user_id,
                ),
            )
            .where(
                and_(
                    ReadingStatus.user_id == user_id,
                    ReadingStatus.status == "finished",
                )
            )
            .order_by(ReadingStatus.updated_at.desc(), Book.title)
        )
        result = await self.db.execute(stmt)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def get_interacted_book_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        """Get ids of books the user has a status on or has rated."""
        stmt = union(
            select(ReadingStatus.book_id).where(ReadingStatus.user_id == user_id),
            select(Rating.book_id).where(Rating.user_id == user_id),
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    # Rating operations

    async def get_user_rating(
        self,
        book_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Rating | None:
        """Get user's rating for a book."""
        stmt = select(Rating).where(
            and_(
                Rating.book_id == book_id,
                Rating.user_id == user_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_rating(
        self,
        book_id: uuid.UUID,
        user_id: uuid.UUID,
        rating_value: int,
    ) -> Rating:
        """Create or overwrite a user's rating, refreshing its timestamp."""
        existing = await self.get_user_rating(book_id, user_id)

        if existing:
            existing.rating = rating_value
            existing.rated_at = datetime.now(UTC)
            await self.db.flush()
            return existing

        rating = Rating(
            book_id=book_id,
            user_id=user_id,
            rating=rating_value,
            rated_at=datetime.now(UTC),
        )
        self.db.add(rating)
        await self.db.flush()
        return rating

    # Review operations

    async def get_review(self, book_id: uuid.UUID, user_id: uuid.UUID) -> Review | None:
        """Get user's review for a book."""
        stmt = select(Review).where(
            and_(
                Review.book_id == book_id,
                Review.user_id == user_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_review(
        self,
        book_id: uuid.UUID,
        user_id: uuid.UUID,
        content: str,
    ) -> Review:
        """Create or update a review; ``created_at`` survives updates."""
        existing = await self.get_review(book_id, user_id)
        now = datetime.now(UTC)

        if existing:
            existing.content = content
            existing.updated_at = now
            await self.db.flush()
            return existing

        review = Review(
            book_id=book_id,
            user_id=user_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.db.add(review)
        await self.db.flush()
        return review

    async def delete_review(self, book_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete user's review. Returns True if one existed."""
        review = await self.get_review(book_id, user_id)
        if review:
            await self.db.delete(review)
            await self.db.flush()
            return True
        return False

    # Favorite operations

    async def add_favorite(
        self,
        user_id: uuid.UUID,
        book_id: uuid.UUID,
    ) -> Favorite:
        """Add book to user's favorites."""
        existing = await self.get_favorite(user_id, book_id)
        if existing:
            return existing

        favorite = Favorite(user_id=user_id, book_id=book_id)
        self.db.add(favorite)
        await self.db.flush()
        return favorite

    async def remove_favorite(
        self,
        user_id: uuid.UUID,
        book_id: uuid.UUID,
    ) -> bool:
        """Remove book from user's favorites. Returns True if removed."""
        favorite = await self.get_favorite(user_id, book_id)
        if favorite:
            await self.db.delete(favorite)
            await self.db.flush()
            return True
        return False

    async def get_favorite(
        self,
        user_id: uuid.UUID,
        book_id: uuid.UUID,
    ) -> Favorite | None:
        """Get a specific favorite."""
        stmt = select(Favorite).where(
            and_(
                Favorite.user_id == user_id,
                Favorite.book_id == book_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_favorites(self, user_id: uuid.UUID) -> list[Book]:
        """Get user's favorite books, most recently added first."""
        stmt = (
            select(Book)
            .join(Favorite, Favorite.book_id == Book.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Book.title)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

