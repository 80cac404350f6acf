"""SQLAlchemy models package."""

from app.models.base import Base
from app.models.book import Book, Favorite, Genre, Rating, Review, book_genres
from app.models.goal import GOAL_PERIODS, GOAL_STATUSES, ReadingGoal
from app.models.reading import (
    HISTORY_ACTIONS,
    READING_STATUSES,
    HistoryEntry,
    ReadingSession,
    ReadingStatus,
)
from app.models.user import (
    Friendship,
    User,
    user_author_preferences,
    user_genre_preferences,
)

__all__ = [
    "Base",
    "User",
    "Friendship",
    "user_genre_preferences",
    "user_author_preferences",
    "Book",
    "Genre",
    "book_genres",
    "Rating",
    "Review",
    "Favorite",
    "ReadingStatus",
    "ReadingSession",
    "HistoryEntry",
    "READING_STATUSES",
    "HISTORY_ACTIONS",
    "ReadingGoal",
    "GOAL_PERIODS",
    "GOAL_STATUSES",
]
