"""Reading session endpoints not scoped to a single book."""

from uuid import UUID

from fastapi import APIRouter, Request

from app.api.v1.deps import CurrentUser, DBSession
from app.config import settings
from app.rate_limiter import limiter
from app.schemas.common import ERROR_RESPONSES
from app.schemas.reading import ActiveSession, SessionEnd, SessionSummary
from app.services.session_service import SessionService

router = APIRouter()


@router.get(
    "/active",
    response_model=ActiveSession | None,
    summary="Get my active session",
    description="The most recently started open session, or null.",
)
async def get_active_session(current_user: CurrentUser, db: DBSession) -> ActiveSession | None:
    service = SessionService(db)
    return await service.get_active_reading_session(current_user.id)


@router.post(
    "/{session_id}/end",
    response_model=SessionSummary,
    responses=ERROR_RESPONSES,
    summary="End a reading session",
    description="""
Close an active session. Your page marker moves to `end_page` and a
`progress-update` entry is added to your history.

`pages_read` is `end_page - start_page` and is negative when you went back.

Ending an unknown or already closed session returns `409 INVALID_STATE`.
    """,
)
@limiter.limit(settings.rate_limit_writes)
async def end_session(
    request: Request,
    session_id: UUID,
    end: SessionEnd,
    current_user: CurrentUser,
    db: DBSession,
) -> SessionSummary:
    service = SessionService(db)
    return await service.end_reading_session(
        session_id,
        end.end_page,
        notes=end.notes,
        user_id=current_user.id,
    )
