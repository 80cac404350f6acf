"""Reading goal endpoints."""

from uuid import UUID

from fastapi import APIRouter

from app.api.v1.deps import CurrentUser, DBSession
from app.core.exceptions import NotFoundError
from app.schemas.common import ERROR_RESPONSES
from app.schemas.goal import (
    GoalCancelResponse,
    GoalCreate,
    GoalPeriod,
    GoalProgressResponse,
    GoalProgressUpdate,
    GoalResponse,
    GoalSetResponse,
)
from app.services.goal_service import GoalService

router = APIRouter()


@router.get(
    "",
    response_model=list[GoalResponse],
    summary="List my reading goals",
)
async def list_goals(current_user: CurrentUser, db: DBSession) -> list[GoalResponse]:
    service = GoalService(db)
    return await service.get_user_reading_goals(current_user.id)


@router.post(
    "",
    response_model=GoalSetResponse,
    responses=ERROR_RESPONSES,
    summary="Set a reading goal",
    description="""
Set the goal for a period. If you already have an active goal for that
period its target and dates are updated (`updated: true`), otherwise a new
goal is created.

**Periods:** `weekly`, `monthly`, `quarterly`, `biannual`, `annual`
    """,
)
async def set_goal(
    goal: GoalCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> GoalSetResponse:
    service = GoalService(db)
    return await service.set_reading_goal(current_user.id, goal)


@router.get(
    "/active/{period}",
    response_model=GoalResponse | None,
    summary="Get my active goal for a period",
)
async def get_active_goal(
    period: GoalPeriod,
    current_user: CurrentUser,
    db: DBSession,
) -> GoalResponse | None:
    service = GoalService(db)
    return await service.get_active_reading_goal(current_user.id, period)


@router.get(
    "/completed",
    response_model=list[GoalResponse],
    summary="List my completed goals",
)
async def list_completed_goals(current_user: CurrentUser, db: DBSession) -> list[GoalResponse]:
    service = GoalService(db)
    return await service.get_completed_goals(current_user.id)


@router.post(
    "/sync",
    response_model=list[GoalProgressResponse],
    responses=ERROR_RESPONSES,
    summary="Recompute goal progress",
    description="Recount finished books for every active goal.",
)
async def sync_goals(current_user: CurrentUser, db: DBSession) -> list[GoalProgressResponse]:
    service = GoalService(db)
    return await service.sync_goal_progress(current_user.id)


@router.put(
    "/{goal_id}/progress",
    response_model=GoalProgressResponse,
    responses=ERROR_RESPONSES,
    summary="Record goal progress",
    description="An active goal whose progress reaches its target becomes `completed`.",
)
async def update_goal_progress(
    goal_id: UUID,
    update: GoalProgressUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> GoalProgressResponse:
    service = GoalService(db)
    return await service.update_goal_progress(current_user.id, goal_id, update.progress)


@router.post(
    "/{goal_id}/cancel",
    response_model=GoalCancelResponse,
    responses=ERROR_RESPONSES,
    summary="Cancel a reading goal",
)
async def cancel_goal(
    goal_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> GoalCancelResponse:
    service = GoalService(db)
    cancelled = await service.cancel_reading_goal(current_user.id, goal_id)
    if not cancelled:
        raise NotFoundError("Reading goal", str(goal_id))
    return GoalCancelResponse(cancelled=True)
