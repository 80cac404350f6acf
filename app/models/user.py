"""User-related database models."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.book import Genre


# Genres a user prefers; drives "similar readers" recommendations and
# trending-in-your-genres feeds
user_genre_preferences = Table(
    "user_genre_preferences",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Uuid, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_user_genre_preferences_genre_id", "genre_id"),
)

# Authors a user prefers, by the name stored on books
user_author_preferences = Table(
    "user_author_preferences",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("author", String(255), primary_key=True),
)


class User(Base, UUIDMixin, TimestampMixin):
    """Reader account. Created by the identity service."""

    __tablename__ = "users"

    # Core fields
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)

    # Profile
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profession: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        server_default="active",
    )  # active, suspended, deleted

    # Relationships
    preferred_genres: Mapped[list["Genre"]] = relationship(
        "Genre",
        secondary=user_genre_preferences,
        lazy="selectin",
        order_by="Genre.name",
    )

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.email})>"


class Friendship(Base):
    """Directed friend edge: ``user_id`` follows ``friend_id``."""

    __tablename__ = "friendships"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    friend_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    friend: Mapped["User"] = relationship("User", foreign_keys=[friend_id], lazy="joined")

    __table_args__ = (
        CheckConstraint("user_id <> friend_id", name="check_friendship_not_self"),
        Index("idx_friendships_friend_id", "friend_id"),
    )

    def __repr__(self) -> str:
        return f"<Friendship {self.user_id} -> {self.friend_id}>"
