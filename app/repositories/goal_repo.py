"""Reading goal repository."""

from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.goal import ReadingGoal


class GoalRepository:
    """Repository for reading goal operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_goal(self, user_id: UUID, goal_id: UUID) -> ReadingGoal | None:
        """Get one of the user's goals."""
        query = select(ReadingGoal).where(
            and_(
                ReadingGoal.id == goal_id,
                ReadingGoal.user_id == user_id,
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_goals(self, user_id: UUID, status: str | None = None) -> list[ReadingGoal]:
        """List the user's goals, newest start date first."""
        query = (
            select(ReadingGoal)
            .where(ReadingGoal.user_id == user_id)
            .order_by(ReadingGoal.start_date.desc(), ReadingGoal.created_at.desc())
        )
        if status is not None:
            query = query.where(ReadingGoal.status == status)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_active_goal(self, user_id: UUID, period: str) -> ReadingGoal | None:
        """Get the user's active goal for a period."""
        query = select(ReadingGoal).where(
            and_(
                ReadingGoal.user_id == user_id,
                ReadingGoal.period == period,
                ReadingGoal.status == "active",
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create_goal(
        self,
        user_id: UUID,
        period: str,
        target: int,
        start_date: date,
        end_date: date,
    ) -> ReadingGoal:
        """Create an active goal with zero progress."""
        goal = ReadingGoal(
            user_id=user_id,
            period=period,
            target=target,
            start_date=start_date,
            end_date=end_date,
            progress=0,
            status="active",
        )
        self.db.add(goal)
        await self.db.flush()
        return goal

    async def update_goal(self, goal: ReadingGoal, **kwargs) -> ReadingGoal:
        """Update goal fields."""
        for key, value in kwargs.items():
            if hasattr(goal, key):
                setattr(goal, key, value)

        goal.updated_at = datetime.now(UTC)
        await self.db.flush()
        return goal
