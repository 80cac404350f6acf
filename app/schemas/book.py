"""Book, shelf and favorite schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BookBrief(BaseModel):
    """Compact book representation used in lists and cards."""

    id: UUID
    title: str
    author: str | None = None
    cover_url: str | None = None
    page_count: int | None = None
    genres: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class FriendOnBook(BaseModel):
    """A friend of the caller holding a status on a book."""

    id: UUID
    display_name: str
    avatar_url: str | None = None
    status: str


class BookDetail(BookBrief):
    """Full book view with community counters."""

    description: str | None = None
    language: str = "en"
    isbn: str | None = None
    published_year: int | None = None
    average_rating: float | None = None
    ratings_count: int = 0
    readers_count: int = 0
    finished_count: int = 0
    friends_reading: list[FriendOnBook] = Field(default_factory=list)
    similar_books: list[BookBrief] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "The Left Hand of Darkness",
                "author": "Ursula K. Le Guin",
                "cover_url": "https://example.com/cover.jpg",
                "page_count": 304,
                "genres": ["Fiction", "Science Fiction"],
                "average_rating": 4.4,
                "ratings_count": 18,
                "readers_count": 6,
                "finished_count": 11,
                "friends_reading": [],
                "similar_books": [],
            }
        }
    )


class ShelfBook(BookBrief):
    """Book on a user's shelf with progress."""

    current_page: int | None = None
    progress: int = Field(0, ge=0, le=100, description="Percent complete, rounded")
    updated_at: datetime | None = None


class CompletedBook(BookBrief):
    """Finished book with the user's rating."""

    finished_at: datetime | None = None
    rating: int | None = None


class TrendingBook(BookBrief):
    """Book trending in the user's preferred genres."""

    readers: int = 0


class RecentlyAddedBook(BookBrief):
    """Newly catalogued book."""

    days_ago: int = 0


class FavoriteResponse(BaseModel):
    """Favorite flag for a book."""

    book_id: UUID
    favorited: bool
