"""Repository package for data access."""

from app.repositories.book_repo import BookRepository
from app.repositories.goal_repo import GoalRepository
from app.repositories.reading_repo import ReadingRepository
from app.repositories.user_repo import UserRepository

__all__ = [
    "UserRepository",
    "BookRepository",
    "ReadingRepository",
    "GoalRepository",
]
