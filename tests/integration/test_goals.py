"""Reading goal service and endpoint tests."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError
from app.core.timeutils import utcnow
from app.models.book import Book
from app.models.user import User
from app.schemas.goal import GoalCreate
from app.services.goal_service import GoalService
from app.services.status_service import StatusService


def _weekly(target: int) -> GoalCreate:
    today = utcnow().date()
    return GoalCreate(
        period="weekly",
        target=target,
        start_date=today - timedelta(days=1),
        end_date=today + timedelta(days=5),
    )


class TestSetGoal:
    @pytest.mark.asyncio
    async def test_setting_twice_updates(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)

        created = await service.set_reading_goal(test_user.id, _weekly(3))
        updated = await service.set_reading_goal(test_user.id, _weekly(5))

        assert created.updated is False
        assert updated.updated is True
        assert updated.id == created.id
        assert updated.target == 5

        goals = await service.get_user_reading_goals(test_user.id)
        assert len(goals) == 1
        assert goals[0].target == 5

    @pytest.mark.asyncio
    async def test_periods_are_independent(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)
        monthly = _weekly(10).model_copy(update={"period": "monthly"})

        await service.set_reading_goal(test_user.id, _weekly(3))
        await service.set_reading_goal(test_user.id, monthly)

        assert len(await service.get_user_reading_goals(test_user.id)) == 2
        active = await service.get_active_reading_goal(test_user.id, "monthly")
        assert active.target == 10


class TestGoalProgress:
    @pytest.mark.asyncio
    async def test_reaching_target_completes(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)
        goal = await service.set_reading_goal(test_user.id, _weekly(2))

        partial = await service.update_goal_progress(test_user.id, goal.id, 1)
        assert partial.status == "active"

        done = await service.update_goal_progress(test_user.id, goal.id, 2)
        assert done.status == "completed"

        completed = await service.get_completed_goals(test_user.id)
        assert [g.id for g in completed] == [goal.id]
        assert await service.get_active_reading_goal(test_user.id, "weekly") is None

    @pytest.mark.asyncio
    async def test_finishing_a_book_counts(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = GoalService(db_session)
        goal = await service.set_reading_goal(test_user.id, _weekly(1))

        await StatusService(db_session).update_user_book_status(test_user.id, test_book.id, "finished")

        goals = await service.get_user_reading_goals(test_user.id)
        assert goals[0].id == goal.id
        assert goals[0].progress == 1
        assert goals[0].status == "completed"

    @pytest.mark.asyncio
    async def test_books_read_in_period(self, db_session: AsyncSession, test_user: User, test_book: Book):
        await StatusService(db_session).update_user_book_status(test_user.id, test_book.id, "finished")
        service = GoalService(db_session)
        today = utcnow().date()

        assert await service.get_books_read_in_period(test_user.id, today, today) == 1
        assert await service.get_books_read_in_period(
            test_user.id, today - timedelta(days=10), today - timedelta(days=5)
        ) == 0

    @pytest.mark.asyncio
    async def test_sync_goal_progress(self, db_session: AsyncSession, test_user: User, test_book: Book):
        await StatusService(db_session).update_user_book_status(test_user.id, test_book.id, "finished")
        service = GoalService(db_session)
        await service.set_reading_goal(test_user.id, _weekly(3))

        synced = await service.sync_goal_progress(test_user.id)

        assert len(synced) == 1
        assert synced[0].progress == 1
        assert synced[0].status == "active"

    @pytest.mark.asyncio
    async def test_unknown_goal(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)

        with pytest.raises(NotFoundError):
            await service.update_goal_progress(test_user.id, uuid.uuid4(), 1)


class TestCancelGoal:
    @pytest.mark.asyncio
    async def test_cancel(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)
        goal = await service.set_reading_goal(test_user.id, _weekly(3))

        assert await service.cancel_reading_goal(test_user.id, goal.id) is True
        assert await service.get_active_reading_goal(test_user.id, "weekly") is None

        with pytest.raises(InvalidStateError):
            await service.cancel_reading_goal(test_user.id, goal.id)

        with pytest.raises(InvalidStateError):
            await service.update_goal_progress(test_user.id, goal.id, 1)

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)

        assert await service.cancel_reading_goal(test_user.id, uuid.uuid4()) is False

    @pytest.mark.asyncio
    async def test_new_goal_after_cancel(self, db_session: AsyncSession, test_user: User):
        service = GoalService(db_session)
        first = await service.set_reading_goal(test_user.id, _weekly(3))
        await service.cancel_reading_goal(test_user.id, first.id)

        second = await service.set_reading_goal(test_user.id, _weekly(4))

        assert second.updated is False
        assert second.id != first.id


class TestGoalEndpoints:
    @pytest.mark.asyncio
    async def test_goal_flow(self, authenticated_client: AsyncClient):
        goal = {"period": "monthly", "target": 4, "start_date": "2026-10-01", "end_date": "2026-10-31"}

        response = await authenticated_client.post("/v1/goals", json=goal)
        assert response.status_code == 200
        assert response.json()["updated"] is False
        goal_id = response.json()["id"]

        response = await authenticated_client.post("/v1/goals", json={**goal, "target": 6})
        assert response.json()["updated"] is True
        assert response.json()["id"] == goal_id

        response = await authenticated_client.get("/v1/goals")
        assert len(response.json()) == 1

        response = await authenticated_client.get("/v1/goals/active/monthly")
        assert response.json()["target"] == 6

        response = await authenticated_client.put(f"/v1/goals/{goal_id}/progress", json={"progress": 6})
        assert response.json()["status"] == "completed"

        response = await authenticated_client.get("/v1/goals/completed")
        assert [g["id"] for g in response.json()] == [goal_id]

    @pytest.mark.asyncio
    async def test_cancel(self, authenticated_client: AsyncClient):
        goal = {"period": "weekly", "target": 1, "start_date": "2026-10-19", "end_date": "2026-10-25"}
        goal_id = (await authenticated_client.post("/v1/goals", json=goal)).json()["id"]

        response = await authenticated_client.post(f"/v1/goals/{goal_id}/cancel")
        assert response.json() == {"cancelled": True}

        response = await authenticated_client.post(f"/v1/goals/{goal_id}/cancel")
        assert response.status_code == 409

        response = await authenticated_client.post(f"/v1/goals/{uuid.uuid4()}/cancel")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_dates(self, authenticated_client: AsyncClient):
        goal = {"period": "weekly", "target": 1, "start_date": "2026-10-25", "end_date": "2026-10-19"}

        response = await authenticated_client.post("/v1/goals", json=goal)

        assert response.status_code == 422
