"""Page-level aggregate schemas."""

from pydantic import BaseModel, Field

from app.schemas.book import (
    BookBrief,
    BookDetail,
    CompletedBook,
    RecentlyAddedBook,
    ShelfBook,
    TrendingBook,
)
from app.schemas.goal import GoalResponse
from app.schemas.reading import ActiveSession, BookStatusResponse, ClosedSession, SessionStats
from app.schemas.recommendation import RecommendedBook
from app.schemas.user import UserReadingStats


class HomeFeed(BaseModel):
    """Home page sections."""

    filter: str = "similar"
    currently_reading: list[ShelfBook] = Field(default_factory=list)
    trending: list[TrendingBook] = Field(default_factory=list)
    recommendations: list[RecommendedBook] = Field(default_factory=list)
    recently_added: list[RecentlyAddedBook] = Field(default_factory=list)


class MyBooksPage(BaseModel):
    """The user's library page sections."""

    stats: UserReadingStats = Field(default_factory=UserReadingStats)
    reading: list[ShelfBook] = Field(default_factory=list)
    to_read: list[ShelfBook] = Field(default_factory=list)
    completed: list[CompletedBook] = Field(default_factory=list)
    goals: list[GoalResponse] = Field(default_factory=list)
    favorites: list[BookBrief] = Field(default_factory=list)


class BookPage(BaseModel):
    """Book detail page sections."""

    book: BookDetail | None = None
    status: BookStatusResponse = Field(default_factory=BookStatusResponse)
    review: str | None = None
    active_session: ActiveSession | None = None
    sessions: list[ClosedSession] = Field(default_factory=list)
    session_stats: SessionStats = Field(default_factory=SessionStats)
