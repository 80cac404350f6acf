"""Recommendation schemas."""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SimilarReason(BaseModel):
    """Recommended because readers with similar genre tastes rated it."""

    kind: Literal["similar"] = "similar"
    genre_overlap: int
    average_rating: float


class FriendsReason(BaseModel):
    """Recommended because friends are reading or loved it."""

    kind: Literal["friends"] = "friends"
    friend_count: int
    message: str


class ProfessionReason(BaseModel):
    """Recommended because readers, possibly of the same profession, rated it."""

    kind: Literal["profession"] = "profession"
    reader_count: int
    average_rating: float
    profession_match: bool


RecommendationReason = Annotated[
    SimilarReason | FriendsReason | ProfessionReason,
    Field(discriminator="kind"),
]


class RecommendedBook(BaseModel):
    """Recommended book with its score and reason."""

    book_id: UUID
    title: str
    author: str | None
    genres: list[str] = Field(default_factory=list, max_length=2)
    cover_url: str | None
    match_percent: int = Field(ge=0, le=99)
    reason: RecommendationReason

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "book_id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Piranesi",
                "author": "Susanna Clarke",
                "genres": ["Fantasy", "Fiction"],
                "cover_url": "https://example.com/cover.jpg",
                "match_percent": 60,
                "reason": {
                    "kind": "friends",
                    "friend_count": 3,
                    "message": "Amira and 2 others are reading",
                },
            }
        }
    )
