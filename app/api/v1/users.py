"""User endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.api.v1.deps import CurrentUser, DBSession
from app.schemas.common import ERROR_RESPONSES
from app.schemas.user import (
    FriendResponse,
    UserPreferences,
    UserProfile,
    UserProfileUpdate,
    UserReadingStats,
)
from app.services.user_service import UserService

router = APIRouter()


@router.get(
    "/me",
    response_model=UserProfile,
    summary="Get my profile",
    description="""
Get the authenticated user's profile.

**Example:**
```bash
curl -X GET /v1/users/me \\
  -H "Authorization: Bearer <token>"
```

**Requires:** Bearer token authentication
    """,
)
async def get_my_profile(current_user: CurrentUser) -> UserProfile:
    """Get the current authenticated user's profile."""
    return UserProfile.model_validate(current_user)


@router.patch(
    "/me",
    response_model=UserProfile,
    responses=ERROR_RESPONSES,
    summary="Update my profile",
    description="""
Update your profile. Omitted fields stay unchanged.

**Updatable Fields:**
- `display_name` - Your public display name
- `avatar_url` - Profile picture URL
- `bio` - Short biography
- `profession` - Used by the `profession` recommendation filter
    """,
)
async def update_my_profile(
    updates: UserProfileUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> UserProfile:
    service = UserService(db)
    return await service.update_user_profile(current_user.id, updates)


@router.get(
    "/me/preferences",
    response_model=UserPreferences,
    summary="Get my preferred genres and authors",
)
async def get_my_preferences(current_user: CurrentUser, db: DBSession) -> UserPreferences:
    service = UserService(db)
    return await service.get_user_preferences(current_user.id)


@router.put(
    "/me/preferences",
    response_model=UserPreferences,
    responses=ERROR_RESPONSES,
    summary="Replace my preferred genres and authors",
    description="Replace both preference lists. Unknown genre names are created.",
)
async def update_my_preferences(
    preferences: UserPreferences,
    current_user: CurrentUser,
    db: DBSession,
) -> UserPreferences:
    service = UserService(db)
    return await service.update_user_preferences(current_user.id, preferences)


@router.get(
    "/me/stats",
    response_model=UserReadingStats,
    summary="Get my reading stats",
    description="Number of books per reading status.",
)
async def get_my_stats(current_user: CurrentUser, db: DBSession) -> UserReadingStats:
    service = UserService(db)
    return await service.get_user_reading_stats(current_user.id)


@router.get(
    "/me/friends",
    response_model=list[FriendResponse],
    summary="List my friends",
)
async def list_my_friends(current_user: CurrentUser, db: DBSession) -> list[FriendResponse]:
    service = UserService(db)
    return await service.get_friends(current_user.id)


@router.put(
    "/me/friends/{friend_id}",
    response_model=FriendResponse,
    responses=ERROR_RESPONSES,
    summary="Add a friend",
    description="Follow another user. Adding an existing friend is a no-op.",
)
async def add_friend(
    friend_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> FriendResponse:
    service = UserService(db)
    return await service.add_friend(current_user.id, friend_id)


@router.delete(
    "/me/friends/{friend_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    summary="Remove a friend",
)
async def remove_friend(
    friend_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> None:
    service = UserService(db)
    await service.remove_friend(current_user.id, friend_id)
