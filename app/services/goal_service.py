"""Reading goal service.

A goal is created ``active`` and ends either ``completed`` (progress
reached target) or ``cancelled``. Each user has at most one active goal
per period.
"""

from datetime import date
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError
from app.core.resilience import fallback_on_error, translate_store_errors
from app.core.timeutils import end_of_day, start_of_day
from app.models.goal import ReadingGoal
from app.repositories.goal_repo import GoalRepository
from app.repositories.reading_repo import ReadingRepository
from app.schemas.goal import GoalCreate, GoalProgressResponse, GoalResponse, GoalSetResponse

logger = structlog.get_logger(__name__)


class GoalService:
    """Service for reading goals."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.goal_repo = GoalRepository(db)
        self.reading_repo = ReadingRepository(db)

    @fallback_on_error(default=list)
    async def get_user_reading_goals(self, user_id: UUID) -> list[GoalResponse]:
        goals = await self.goal_repo.list_goals(user_id)
        return [GoalResponse.model_validate(g) for g in goals]

    @translate_store_errors("set reading goal")
    async def set_reading_goal(self, user_id: UUID, data: GoalCreate) -> GoalSetResponse:
        """Update the active goal of the period, or create one."""
        existing = await self.goal_repo.get_active_goal(user_id, data.period)
        if existing:
            return await self._update_target(existing, data)

        try:
            goal = await self.goal_repo.create_goal(
                user_id,
                period=data.period,
                target=data.target,
                start_date=data.start_date,
                end_date=data.end_date,
            )
            await self.db.commit()
        except IntegrityError:
            # A concurrent request created the active goal first
            await self.db.rollback()
            existing = await self.goal_repo.get_active_goal(user_id, data.period)
            if existing is None:
                raise
            return await self._update_target(existing, data)

        logger.info(
            "Reading goal created",
            user_id=str(user_id),
            goal_id=str(goal.id),
            period=goal.period,
            target=goal.target,
        )

        return GoalSetResponse(id=goal.id, period=goal.period, target=goal.target, updated=False)

    async def _update_target(self, goal: ReadingGoal, data: GoalCreate) -> GoalSetResponse:
        await self.goal_repo.update_goal(
            goal,
            target=data.target,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        await self.db.commit()

        logger.info(
            "Reading goal updated",
            user_id=str(goal.user_id),
            goal_id=str(goal.id),
            period=goal.period,
            target=goal.target,
        )

        return GoalSetResponse(id=goal.id, period=goal.period, target=goal.target, updated=True)

    @translate_store_errors("update goal progress")
    async def update_goal_progress(
        self,
        user_id: UUID,
        goal_id: UUID,
        progress: int,
    ) -> GoalProgressResponse:
        """Record progress; an active goal reaching its target completes.

        Raises:
            NotFoundError: Unknown goal
            InvalidStateError: Goal was cancelled
        """
        goal = await self.goal_repo.get_goal(user_id, goal_id)
        if goal is None:
            raise NotFoundError("Reading goal", str(goal_id))
        if goal.status == "cancelled":
            raise InvalidStateError(
                "Cannot update progress of a cancelled goal",
                details={"goal_id": str(goal_id)},
            )

        changes: dict = {"progress": progress}
        if goal.status == "active" and progress >= goal.target:
            changes["status"] = "completed"

        await self.goal_repo.update_goal(goal, **changes)
        await self.db.commit()

        if changes.get("status") == "completed":
            logger.info("Reading goal completed", user_id=str(user_id), goal_id=str(goal_id))

        return GoalProgressResponse(
            id=goal.id,
            progress=goal.progress,
            target=goal.target,
            status=goal.status,
        )

    @fallback_on_error(default=lambda: None)
    async def get_active_reading_goal(self, user_id: UUID, period: str) -> GoalResponse | None:
        goal = await self.goal_repo.get_active_goal(user_id, period)
        return GoalResponse.model_validate(goal) if goal else None

    @fallback_on_error(default=list)
    async def get_completed_goals(self, user_id: UUID) -> list[GoalResponse]:
        goals = await self.goal_repo.list_goals(user_id, status="completed")
        return [GoalResponse.model_validate(g) for g in goals]

    @translate_store_errors("cancel reading goal")
    async def cancel_reading_goal(self, user_id: UUID, goal_id: UUID) -> bool:
        """Cancel an active goal. Returns False when the goal is unknown.

        Raises:
            InvalidStateError: Goal is already completed or cancelled
        """
        goal = await self.goal_repo.get_goal(user_id, goal_id)
        if goal is None:
            return False
        if goal.status != "active":
            raise InvalidStateError(
                f"Cannot cancel a {goal.status} goal",
                details={"goal_id": str(goal_id)},
            )

        await self.goal_repo.update_goal(goal, status="cancelled")
        await self.db.commit()

        logger.info("Reading goal cancelled", user_id=str(user_id), goal_id=str(goal_id))
        return True

    @fallback_on_error(default=int)
    async def get_books_read_in_period(
        self,
        user_id: UUID,
        start_date: date,
        end_date: date,
    ) -> int:
        """Count distinct books finished between two dates, inclusive."""
        return await self.reading_repo.count_books_finished_between(
            user_id,
            start_of_day(start_date),
            end_of_day(end_date),
        )

    @translate_store_errors("sync goal progress")
    async def sync_goal_progress(self, user_id: UUID) -> list[GoalProgressResponse]:
        """Recompute every active goal from finished books and persist it."""
        goals = await self.recalculate_active_goals(user_id)
        await self.db.commit()
        return [
            GoalProgressResponse(id=g.id, progress=g.progress, target=g.target, status=g.status)
            for g in goals
        ]

    async def recalculate_active_goals(self, user_id: UUID) -> list[ReadingGoal]:
        """Refresh active goal progress inside the caller's transaction."""
        goals = await self.goal_repo.list_goals(user_id, status="active")

        for goal in goals:
            progress = await self.reading_repo.count_books_finished_between(
                user_id,
                start_of_day(goal.start_date),
                end_of_day(goal.end_date),
            )
            changes: dict = {"progress": progress}
            if progress >= goal.target:
                changes["status"] = "completed"
                logger.info("Reading goal completed", user_id=str(user_id), goal_id=str(goal.id))
            await self.goal_repo.update_goal(goal, **changes)

        return goals
