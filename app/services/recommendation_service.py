"""Recommendation service for personalized book suggestions.

Three strategies score candidate books:

- ``similar``: books rated by readers sharing the user's preferred genres
- ``friends``: books the user's friends are reading or rated 4+
- ``profession``: books rated by many readers, boosted when a rater shares
  the user's profession

Every strategy skips books the user already rated or holds a status on.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy import and_, case, func, literal, select, union
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.numbers import round_half_up, to_number
from app.core.resilience import fallback_on_error
from app.models.book import Book, Rating
from app.models.reading import ReadingStatus
from app.models.user import Friendship, User, user_genre_preferences
from app.repositories.book_repo import BookRepository
from app.schemas.recommendation import (
    FriendsReason,
    ProfessionReason,
    RecommendationReason,
    RecommendedBook,
    SimilarReason,
)

logger = structlog.get_logger(__name__)

RECOMMENDATION_FILTERS = ("similar", "friends", "profession")

DEFAULT_FILTER = "similar"

MAX_MATCH_PERCENT = 99


@dataclass
class ScoredCandidate:
    """A candidate book with its raw score and reason."""

    book: Book
    score: float
    reason: RecommendationReason


Strategy = Callable[[UUID, set[UUID], int], Awaitable[list[ScoredCandidate]]]


def normalize_filter(filter_type: str | None) -> str:
    """Known filter types pass through; anything else becomes ``similar``."""
    return filter_type if filter_type in RECOMMENDATION_FILTERS else DEFAULT_FILTER


def match_percent(score: float) -> int:
    """Round a raw score and clamp it to ``[0, 99]``."""
    return min(max(round_half_up(score), 0), MAX_MATCH_PERCENT)


def friends_message(top_friend: str | None, friend_count: int) -> str:
    """Human readable reason naming the top friend by first name."""
    name = top_friend.split(" ")[0] if top_friend else None
    if name and friend_count > 1:
        return f"{name} and {friend_count - 1} others are reading"
    if name:
        return f"{name} is reading"
    return "Friend recommendation"


class RecommendationService:
    """Service for generating personalized book recommendations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.book_repo = BookRepository(db)

    @fallback_on_error(default=list)
    async def get_book_recommendations(
        self,
        user_id: UUID,
        filter_type: str | None = DEFAULT_FILTER,
        limit: int | None = None,
    ) -> list[RecommendedBook]:
        """Get recommendations from one strategy, best match first.

        Unknown filter types fall back to ``similar``. Scoring, ordering and
        the limit run in the database, so only the returned books are loaded.
        """
        strategies: dict[str, Strategy] = {
            "similar": self._similar_readers,
            "friends": self._friends_activity,
            "profession": self._profession,
        }
        filter_type = normalize_filter(filter_type)
        limit = limit or settings.recommendation_limit

        excluded = await self.book_repo.get_interacted_book_ids(user_id)
        ranked = await strategies[filter_type](user_id, excluded, limit)
        if not ranked:
            return []

        genres = await self.book_repo.get_genre_names([c.book.id for c in ranked])

        recommendations = [
            RecommendedBook(
                book_id=c.book.id,
                title=c.book.title,
                author=c.book.author,
                genres=genres.get(c.book.id, [])[:2],
                cover_url=c.book.cover_url,
                match_percent=match_percent(c.score),
                reason=c.reason,
            )
            for c in ranked
        ]

        logger.info(
            "Generated recommendations",
            user_id=str(user_id),
            filter=filter_type,
            count=len(recommendations),
        )

        return recommendations

    async def _similar_readers(
        self,
        user_id: UUID,
        excluded: set[UUID],
        limit: int,
    ) -> list[ScoredCandidate]:
        """Score books rated by other readers by genre overlap and rating."""
        own_genres = select(user_genre_preferences.c.genre_id).where(
            user_genre_preferences.c.user_id == user_id
        )
        overlap_by_reader = (
            select(
                user_genre_preferences.c.user_id.label("reader_id"),
                func.count(user_genre_preferences.c.genre_id).label("overlap"),
            )
            .where(user_genre_preferences.c.genre_id.in_(own_genres))
            .group_by(user_genre_preferences.c.user_id)
            .subquery()
        )

        avg_rating = func.avg(Rating.rating)
        overlap = func.max(func.coalesce(overlap_by_reader.c.overlap, 0))
        score = case((overlap > 0, overlap * 10 + avg_rating * 5), else_=avg_rating * 10)

        query = (
            select(
                Book,
                avg_rating.label("avg_rating"),
                overlap.label("overlap"),
                score.label("score"),
            )
            .join(Rating, Rating.book_id == Book.id)
            .outerjoin(overlap_by_reader, overlap_by_reader.c.reader_id == Rating.user_id)
            .where(self._candidate_filter(Rating.book_id, Rating.user_id, user_id, excluded))
            .group_by(Book.id)
            .order_by(score.desc(), Book.title)
            .limit(limit)
        )
        result = await self.db.execute(query)

        return [
            ScoredCandidate(
                book=row.Book,
                score=float(to_number(row.score)),
                reason=SimilarReason(
                    genre_overlap=int(to_number(row.overlap)),
                    average_rating=round(float(to_number(row.avg_rating)), 2),
                ),
            )
            for row in result.all()
        ]

    async def _friends_activity(
        self,
        user_id: UUID,
        excluded: set[UUID],
        limit: int,
    ) -> list[ScoredCandidate]:
        """Score books by how many friends are reading or loved them."""
        friend_ids = select(Friendship.friend_id).where(Friendship.user_id == user_id)
        # Union rows are distinct (friend, book) pairs
        activity = union(
            select(Rating.user_id, Rating.book_id).where(
                and_(Rating.user_id.in_(friend_ids), Rating.rating >= 4)
            ),
            select(ReadingStatus.user_id, ReadingStatus.book_id).where(
                and_(ReadingStatus.user_id.in_(friend_ids), ReadingStatus.status == "reading")
            ),
        ).subquery()

        friend_count = func.count(activity.c.user_id)
        score = case((friend_count > 3, friend_count * 25), else_=friend_count * 20)

        query = (
            select(
                Book,
                friend_count.label("friend_count"),
                func.min(User.display_name).label("top_friend"),
                score.label("score"),
            )
            .join(activity, activity.c.book_id == Book.id)
            .join(User, User.id == activity.c.user_id)
            .where(self._candidate_filter(activity.c.book_id, activity.c.user_id, user_id, excluded))
            .group_by(Book.id)
            .order_by(score.desc(), Book.title)
            .limit(limit)
        )
        result = await self.db.execute(query)

        candidates = []
        for row in result.all():
            count = int(to_number(row.friend_count))
            candidates.append(
                ScoredCandidate(
                    book=row.Book,
                    score=float(to_number(row.score)),
                    reason=FriendsReason(
                        friend_count=count,
                        message=friends_message(row.top_friend, count),
                    ),
                )
            )
        return candidates

    async def _profession(
        self,
        user_id: UUID,
        excluded: set[UUID],
        limit: int,
    ) -> list[ScoredCandidate]:
        """Score books by readers times rating, tripled for shared professions."""
        profession = (
            await self.db.execute(select(User.profession).where(User.id == user_id))
        ).scalar_one_or_none()

        if profession:
            boost = func.max(case((User.profession == profession, 3), else_=1))
        else:
            boost = func.max(literal(1))

        reader_count = func.count(Rating.user_id)
        avg_rating = func.avg(Rating.rating)
        score = reader_count * avg_rating * boost

        query = (
            select(
                Book,
                reader_count.label("reader_count"),
                avg_rating.label("avg_rating"),
                boost.label("boost"),
                score.label("score"),
            )
            .join(Rating, Rating.book_id == Book.id)
            .join(User, User.id == Rating.user_id)
            .where(self._candidate_filter(Rating.book_id, Rating.user_id, user_id, excluded))
            .group_by(Book.id)
            .order_by(score.desc(), Book.title)
            .limit(limit)
        )
        result = await self.db.execute(query)

        return [
            ScoredCandidate(
                book=row.Book,
                score=float(to_number(row.score)),
                reason=ProfessionReason(
                    reader_count=int(to_number(row.reader_count)),
                    average_rating=round(float(to_number(row.avg_rating)), 2),
                    profession_match=int(to_number(row.boost)) > 1,
                ),
            )
            for row in result.all()
        ]

    @staticmethod
    def _candidate_filter(book_col, reader_col, user_id: UUID, excluded: set[UUID]):
        conditions = [reader_col != user_id]
        if excluded:
            conditions.append(book_col.not_in(excluded))
        return and_(*conditions)
