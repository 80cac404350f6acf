"""User profile, preference and friendship schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Public profile of the current user."""

    id: UUID
    email: str
    username: str
    display_name: str
    avatar_url: str | None = None
    bio: str | None = None
    profession: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserProfileUpdate(BaseModel):
    """Profile fields a user may change. Omitted fields stay unchanged."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)
    profession: str | None = Field(default=None, max_length=100)
    avatar_url: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "display_name": "Amira Haddad",
                "bio": "Slow reader of long novels",
                "profession": "Engineer",
            }
        }
    )


class UserPreferences(BaseModel):
    """Preferred genres and authors by name."""

    genres: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "genres": ["Fantasy", "Mystery"],
                "authors": ["Ursula K. Le Guin"],
            }
        }
    )


class PreferenceOptions(BaseModel):
    """Choices offered by the profile editor."""

    genres: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    professions: list[str] = Field(default_factory=list)


class FriendResponse(BaseModel):
    """A user the current user follows."""

    id: UUID
    username: str
    display_name: str
    avatar_url: str | None = None
    profession: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserReadingStats(BaseModel):
    """Count of the user's books per status."""

    books_reading: int = 0
    books_finished: int = 0
    books_want_to_read: int = 0
