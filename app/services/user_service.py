"""User profile, preference and friendship service."""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.core.numbers import to_number
from app.core.resilience import fallback_on_error, translate_store_errors
from app.repositories.book_repo import BookRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    FriendResponse,
    PreferenceOptions,
    UserPreferences,
    UserProfile,
    UserProfileUpdate,
    UserReadingStats,
)

logger = structlog.get_logger(__name__)

# Offered until readers have entered professions of their own
DEFAULT_PROFESSIONS = [
    "Accountant",
    "Architect",
    "Artist",
    "Chef",
    "Designer",
    "Doctor",
    "Electrician",
    "Entrepreneur",
    "Lawyer",
    "Manager",
    "Marketing Professional",
    "Mechanic",
    "Nurse",
    "Other",
    "Retired",
    "Sales Representative",
    "Scientist",
    "Software Engineer",
    "Student",
    "Teacher",
    "Writer",
]


class UserService:
    """Service for user profile operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.book_repo = BookRepository(db)

    @translate_store_errors("update profile")
    async def update_user_profile(self, user_id: UUID, data: UserProfileUpdate) -> UserProfile:
        """Update the fields present in ``data``."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))

        changes = data.model_dump(exclude_unset=True)
        if "display_name" in changes and not changes["display_name"]:
            raise InvalidArgumentError("display_name cannot be empty")

        await self.user_repo.update(user, **changes)
        await self.db.commit()

        logger.info("Profile updated", user_id=str(user_id), fields=sorted(changes))

        return UserProfile.model_validate(user)

    @fallback_on_error(default=UserPreferences)
    async def get_user_preferences(self, user_id: UUID) -> UserPreferences:
        genres = await self.user_repo.get_preferred_genres(user_id)
        authors = await self.user_repo.get_preferred_authors(user_id)
        return UserPreferences(genres=genres, authors=authors)

    @translate_store_errors("update preferences")
    async def update_user_preferences(
        self,
        user_id: UUID,
        data: UserPreferences,
    ) -> UserPreferences:
        """Replace the user's preferred genres and authors.

        Unknown genre names are created; author names are stored as given.
        """
        if not await self.user_repo.exists(user_id):
            raise NotFoundError("User", str(user_id))

        genres = await self.book_repo.get_or_create_genres(data.genres)
        authors = sorted({a.strip() for a in data.authors if a and a.strip()})

        await self.user_repo.replace_preferred_genres(user_id, [g.id for g in genres])
        await self.user_repo.replace_preferred_authors(user_id, authors)
        await self.db.commit()

        logger.info(
            "Preferences updated",
            user_id=str(user_id),
            genres=len(genres),
            authors=len(authors),
        )

        return UserPreferences(genres=[g.name for g in genres], authors=authors)

    @fallback_on_error(default=PreferenceOptions)
    async def get_preference_options(self) -> PreferenceOptions:
        """Genres, authors and professions to choose from."""
        professions = await self.user_repo.list_professions()
        return PreferenceOptions(
            genres=await self.book_repo.list_genre_names(),
            authors=await self.book_repo.list_authors(),
            professions=professions or DEFAULT_PROFESSIONS,
        )

    @fallback_on_error(default=list)
    async def get_friends(self, user_id: UUID) -> list[FriendResponse]:
        friends = await self.user_repo.get_friends(user_id)
        return [FriendResponse.model_validate(f) for f in friends]

    @translate_store_errors("add friend")
    async def add_friend(self, user_id: UUID, friend_id: UUID) -> FriendResponse:
        if friend_id == user_id:
            raise InvalidArgumentError("Cannot add yourself as a friend")

        friend = await self.user_repo.get_by_id(friend_id)
        if not friend:
            raise NotFoundError("User", str(friend_id))

        await self.user_repo.add_friend(user_id, friend_id)
        await self.db.commit()

        logger.info("Friend added", user_id=str(user_id), friend_id=str(friend_id))

        return FriendResponse.model_validate(friend)

    @translate_store_errors("remove friend")
    async def remove_friend(self, user_id: UUID, friend_id: UUID) -> None:
        removed = await self.user_repo.remove_friend(user_id, friend_id)
        if not removed:
            raise NotFoundError("Friend", str(friend_id))

        await self.db.commit()
        logger.info("Friend removed", user_id=str(user_id), friend_id=str(friend_id))

    @fallback_on_error(default=UserReadingStats)
    async def get_user_reading_stats(self, user_id: UUID) -> UserReadingStats:
        counts = await self.user_repo.count_statuses(user_id)
        return UserReadingStats(
            books_reading=to_number(counts.get("reading")),
            books_finished=to_number(counts.get("finished")),
            books_want_to_read=to_number(counts.get("want-to-read")),
        )
