"""Reading status, session and history database models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, UUIDMixin

READING_STATUSES = ("want-to-read", "reading", "finished")

HISTORY_ACTIONS = ("started", "finished", "want-to-read", "reviewed", "progress-update")


class ReadingStatus(Base, UUIDMixin):
    """The single current status of a user for a book.

    Replacing a status deletes the old row and inserts a new one, so
    ``started_at`` marks when the current status began.
    """

    __tablename__ = "reading_statuses"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Progress, only meaningful while status is "reading"
    current_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    percent_complete: Mapped[float | None] = mapped_column(Float, nullable=True)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        # At most one status per user per book
        UniqueConstraint("user_id", "book_id", name="uq_reading_status_user_book"),
        CheckConstraint(
            "status IN ('want-to-read', 'reading', 'finished')",
            name="check_reading_status_value",
        ),
        CheckConstraint(
            "percent_complete IS NULL OR (percent_complete >= 0 AND percent_complete <= 100)",
            name="check_reading_status_percent_range",
        ),
        Index("idx_reading_statuses_user_status", "user_id", "status"),
        Index("idx_reading_statuses_book_id", "book_id"),
    )

    def __repr__(self) -> str:
        return f"<ReadingStatus {self.status} user={self.user_id} book={self.book_id}>"


class ReadingSession(Base, UUIDMixin):
    """One timed reading interval. Active until ended, immutable afterwards."""

    __tablename__ = "reading_sessions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )

    start_page: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Set when the session ends
    end_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pages_read: Mapped[int | None] = mapped_column(Integer, nullable=True)  # may be negative
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    __table_args__ = (
        CheckConstraint("start_page >= 1", name="check_session_start_page_positive"),
        # At most one active session per user per book
        Index(
            "uq_reading_sessions_active_user_book",
            "user_id",
            "book_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index("idx_reading_sessions_user_book", "user_id", "book_id", "end_time"),
        Index("idx_reading_sessions_book_id", "book_id"),
    )

    def __repr__(self) -> str:
        state = "active" if self.is_active else "closed"
        return f"<ReadingSession {self.id} {state}>"


class HistoryEntry(Base, UUIDMixin):
    """Append-only audit record of a reader action on a book."""

    __tablename__ = "history_entries"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )

    action: Mapped[str] = mapped_column(String(30), nullable=False)
    context: Mapped[str] = mapped_column(String(20), nullable=False, default="app")
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Action-specific data: page range, duration, notes, review excerpt
    payload: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "action IN ('started', 'finished', 'want-to-read', 'reviewed', 'progress-update')",
            name="check_history_action",
        ),
        Index("idx_history_entries_user_timestamp", "user_id", "timestamp"),
        Index("idx_history_entries_user_action", "user_id", "action"),
    )

    def __repr__(self) -> str:
        return f"<HistoryEntry {self.action} user={self.user_id} book={self.book_id}>"
