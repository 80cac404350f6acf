"""Reading status, review, session and history schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.book import BookBrief

# Status and review


class StatusUpdate(BaseModel):
    """Request to change the reading status of a book."""

    status: str = Field(..., description="One of: want-to-read, reading, finished")
    current_page: int | None = Field(
        default=None,
        ge=1,
        description="Seed page when starting to read",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "reading",
                "current_page": 1,
            }
        }
    )


class StatusChangeResponse(BaseModel):
    """Status after an update."""

    status: str


class BookStatusResponse(BaseModel):
    """User's status, rating and progress for a book."""

    status: str = "none"
    rating: int = 0
    current_page: int = 1
    percent_complete: float = 0.0


class RatingUpdate(BaseModel):
    """Request to rate a book."""

    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")


class RatingResponse(BaseModel):
    """Stored rating."""

    rating: int


class ReviewUpdate(BaseModel):
    """Request to save a review. Empty content deletes the review."""

    content: str = Field("", max_length=10000)


class ReviewResponse(BaseModel):
    """Stored review, None when absent."""

    content: str | None = None


# Progress


class PageUpdate(BaseModel):
    """Request to move the page marker without a session."""

    current_page: int = Field(..., ge=1, description="Current page number (1-indexed)")


class PageProgress(BaseModel):
    """Page marker and derived percent complete."""

    current_page: int
    percent_complete: float


# Sessions


class SessionStart(BaseModel):
    """Request to start a reading session."""

    start_page: int = Field(1, ge=1, description="Page the session starts on")


class SessionStarted(BaseModel):
    """Identity of a newly opened session."""

    session_id: UUID


class SessionEnd(BaseModel):
    """Request to end a reading session."""

    end_page: int = Field(..., ge=0, description="Page the session ended on")
    notes: str | None = Field(default=None, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "end_page": 151,
                "notes": "Finished part one",
            }
        }
    )


class SessionSummary(BaseModel):
    """Result of ending a session."""

    session_id: UUID
    start_page: int
    end_page: int
    pages_read: int
    duration_minutes: int
    percent_complete: float = Field(ge=0, le=100)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "123e4567-e89b-12d3-a456-426614174000",
                "start_page": 1,
                "end_page": 151,
                "pages_read": 150,
                "duration_minutes": 45,
                "percent_complete": 50.3,
            }
        }
    )


class ActiveSession(BaseModel):
    """Open session with its live duration."""

    id: UUID
    book_id: UUID
    start_page: int
    start_time: datetime
    current_duration_minutes: int
    book: BookBrief


class ClosedSession(BaseModel):
    """Finished session."""

    id: UUID
    book_id: UUID
    start_page: int
    end_page: int | None
    pages_read: int | None
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SessionStats(BaseModel):
    """Aggregates over a user's closed sessions on a book."""

    session_count: int = 0
    total_reading_minutes: int | float = 0
    total_pages_read: int | float = 0
    avg_session_duration: int | float = 0
    avg_pages_per_session: int | float = 0


class BookReadingStats(BaseModel):
    """Aggregates over every user's closed sessions on a book."""

    session_count: int = 0
    avg_session_duration: int | float = 0
    avg_pages_per_session: int | float = 0
    avg_days_to_finish: int | float = 0


# History


class HistoryItem(BaseModel):
    """One audit record of a reader action."""

    id: UUID
    book_id: UUID
    book_title: str
    action: str
    context: str
    timestamp: datetime
    payload: dict[str, Any] = Field(default_factory=dict)
