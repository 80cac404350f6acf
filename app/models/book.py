"""Book-related database models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

book_genres = Table(
    "book_genres",
    Base.metadata,
    Column("book_id", Uuid, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Uuid, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_book_genres_genre_id", "genre_id"),
)


class Genre(Base, UUIDMixin):
    """Book genre."""

    __tablename__ = "genres"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Genre {self.name}>"


class Book(Base, UUIDMixin, TimestampMixin):
    """Book in the catalogue. Read-only from the reading core."""

    __tablename__ = "books"

    # Metadata
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    published_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Book details; page_count may be unset, progress then reports 0%
    page_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cover_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    genres: Mapped[list["Genre"]] = relationship(
        "Genre",
        secondary=book_genres,
        lazy="selectin",
        order_by="Genre.name",
    )

    __table_args__ = (
        CheckConstraint("page_count IS NULL OR page_count >= 0", name="check_book_page_count"),
        Index("idx_books_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Book {self.title[:30]} ({self.id})>"


class Rating(Base, UUIDMixin):
    """Star rating for a book, at most one per user."""

    __tablename__ = "ratings"

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Rating 1-5 stars
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    rated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        # One rating per user per book
        UniqueConstraint("book_id", "user_id", name="uq_rating_book_user"),
        # Check constraint for valid rating value
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_value"),
        # Index for fetching book ratings
        Index("idx_ratings_book_id", "book_id"),
        Index("idx_ratings_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Rating {self.rating}/5 for book={self.book_id}>"


class Review(Base, UUIDMixin):
    """Free-text review, at most one per user and book.

    An empty review is never stored; clearing a review deletes the row.
    """

    __tablename__ = "reviews"

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
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
        UniqueConstraint("book_id", "user_id", name="uq_review_book_user"),
        Index("idx_reviews_book_id", "book_id"),
    )

    def __repr__(self) -> str:
        return f"<Review user={self.user_id} book={self.book_id}>"


class Favorite(Base):
    """User's favorite books."""

    __tablename__ = "favorites"

    # Composite primary key
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        # Index for user's favorites listing
        Index("idx_favorites_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Favorite user={self.user_id} book={self.book_id}>"
