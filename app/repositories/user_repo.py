"""User repository for database operations."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import and_, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.book import Genre
from app.models.reading import ReadingStatus
from app.models.user import Friendship, User, user_author_preferences, user_genre_preferences


class UserRepository:
    """Repository for User, preference and friendship operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: str | uuid.UUID) -> User | None:
        """Get user by ID."""
        if isinstance(user_id, str):
            user_id = uuid.UUID(user_id)

        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, user_id: uuid.UUID) -> bool:
        """Check whether a user exists."""
        stmt = select(User.id).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(
        self,
        email: str,
        username: str,
        display_name: str,
        profession: str | None = None,
        bio: str | None = None,
    ) -> User:
        """Create a new user."""
        user = User(
            email=email.lower(),
            username=username.lower(),
            display_name=display_name,
            profession=profession,
            bio=bio,
            preferred_genres=[],
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def update(self, user: User, **kwargs) -> User:
        """Update user fields."""
        for key, value in kwargs.items():
            if hasattr(user, key):
                setattr(user, key, value)

        user.updated_at = datetime.now(UTC)
        await self.db.flush()
        return user

    # Genre preferences

    async def get_preferred_genres(self, user_id: uuid.UUID) -> list[str]:
        """Get names of the user's preferred genres, alphabetically."""
        stmt = (
            select(Genre.name)
            .join(user_genre_preferences, user_genre_preferences.c.genre_id == Genre.id)
            .where(user_genre_preferences.c.user_id == user_id)
            .order_by(Genre.name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_preferred_genres(
        self,
        user_id: uuid.UUID,
        genre_ids: list[uuid.UUID],
    ) -> None:
        """Replace the user's preferred genres."""
        await self.db.execute(
            delete(user_genre_preferences).where(user_genre_preferences.c.user_id == user_id)
        )
        if genre_ids:
            await self.db.execute(
                insert(user_genre_preferences),
                [{"user_id": user_id, "genre_id": genre_id} for genre_id in genre_ids],
            )
        await self.db.flush()

    # Author preferences

    async def get_preferred_authors(self, user_id: uuid.UUID) -> list[str]:
        """Get the user's preferred author names, alphabetically."""
        stmt = (
            select(user_author_preferences.c.author)
            .where(user_author_preferences.c.user_id == user_id)
            .order_by(user_author_preferences.c.author)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_preferred_authors(self, user_id: uuid.UUID, authors: list[str]) -> None:
        """Replace the user's preferred authors."""
        await self.db.execute(
            delete(user_author_preferences).where(user_author_preferences.c.user_id == user_id)
        )
        if authors:
            await self.db.execute(
                insert(user_author_preferences),
                [{"user_id": user_id, "author": author} for author in authors],
            )
        await self.db.flush()

    async def list_professions(self) -> list[str]:
        """Get the distinct professions readers have entered, alphabetically."""
        stmt = (
            select(User.profession)
            .where(User.profession.is_not(None))
            .group_by(User.profession)
            .order_by(User.profession)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Friendships

    async def get_friends(self, user_id: uuid.UUID) -> list[User]:
        """Get users the given user follows, by display name."""
        stmt = (
            select(User)
            .join(Friendship, Friendship.friend_id == User.id)
            .where(Friendship.user_id == user_id)
            .order_by(User.display_name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_friendship(
        self,
        user_id: uuid.UUID,
        friend_id: uuid.UUID,
    ) -> Friendship | None:
        """Get a specific friend edge."""
        stmt = select(Friendship).where(
            and_(
                Friendship.user_id == user_id,
                Friendship.friend_id == friend_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_friend(self, user_id: uuid.UUID, friend_id: uuid.UUID) -> Friendship:
        """Add a friend edge. Returns the existing one if already present."""
        existing = await self.get_friendship(user_id, friend_id)
        if existing:
            return existing

        friendship = Friendship(user_id=user_id, friend_id=friend_id)
        self.db.add(friendship)
        await self.db.flush()
        return friendship

    async def remove_friend(self, user_id: uuid.UUID, friend_id: uuid.UUID) -> bool:
        """Remove a friend edge. Returns True if removed."""
        result = await self.db.execute(
            delete(Friendship).where(
                and_(
                    Friendship.user_id == user_id,
                    Friendship.friend_id == friend_id,
                )
            )
        )
        await self.db.flush()
        return result.rowcount > 0

    async def get_friends_on_book(
        self,
        user_id: uuid.UUID,
        book_id: uuid.UUID,
        limit: int = 5,
    ) -> list[tuple[User, str]]:
        """Get friends of ``user_id`` holding any status on a book."""
        stmt = (
            select(User, ReadingStatus.status)
            .join(Friendship, Friendship.friend_id == User.id)
            .join(
                ReadingStatus,
                and_(
                    ReadingStatus.user_id == User.id,
                    ReadingStatus.book_id == book_id,
                ),
            )
            .where(Friendship.user_id == user_id)
            .order_by(ReadingStatus.updated_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    # Reading stats

    async def count_statuses(self, user_id: uuid.UUID) -> dict[str, int]:
        """Count the user's books per reading status."""
        stmt = (
            select(ReadingStatus.status, func.count(ReadingStatus.id))
            .where(ReadingStatus.user_id == user_id)
            .group_by(ReadingStatus.status)
        )
        result = await self.db.execute(stmt)
        return {row[0]: row[1] for row in result.all()}
