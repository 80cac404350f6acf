"""Profile editor option endpoints."""

from fastapi import APIRouter

from app.api.v1.deps import CurrentUser, DBSession
from app.schemas.user import PreferenceOptions
from app.services.user_service import UserService

router = APIRouter()


@router.get(
    "",
    response_model=PreferenceOptions,
    summary="List preference options",
    description="""
Values offered when editing a profile: every genre and author in the
catalogue, plus the professions readers have entered. A default list of
professions is returned until any reader has set one.

**Requires:** Bearer token authentication
    """,
)
async def list_options(current_user: CurrentUser, db: DBSession) -> PreferenceOptions:
    service = UserService(db)
    return await service.get_preference_options()
