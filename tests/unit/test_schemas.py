"""Unit tests for request schema validation."""

from datetime import date

import pytest
from pydantic import ValidationError

from app.schemas.goal import GoalCreate
from app.schemas.reading import SessionEnd, SessionStart, StatusUpdate


class TestGoalCreate:
    def test_valid_goal(self):
        goal = GoalCreate(
            period="weekly",
            target=3,
            start_date=date(2026, 10, 19),
            end_date=date(2026, 10, 25),
        )
        assert goal.target == 3

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            GoalCreate(
                period="weekly",
                target=3,
                start_date=date(2026, 10, 25),
                end_date=date(2026, 10, 19),
            )

    def test_unknown_period_rejected(self):
        with pytest.raises(ValidationError):
            GoalCreate(
                period="daily",
                target=1,
                start_date=date(2026, 10, 19),
                end_date=date(2026, 10, 19),
            )


class TestSessionSchemas:
    def test_start_page_defaults_to_first_page(self):
        assert SessionStart().start_page == 1

    def test_start_page_below_one_rejected(self):
        with pytest.raises(ValidationError):
            SessionStart(start_page=0)

    def test_end_page_zero_allowed(self):
        assert SessionEnd(end_page=0).end_page == 0


def test_status_update_page_must_be_positive():
    with pytest.raises(ValidationError):
        StatusUpdate(status="reading", current_page=0)
