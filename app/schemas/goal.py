"""Reading goal schemas."""

from datetime import date
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

GoalPeriod = Literal["weekly", "monthly", "quarterly", "biannual", "annual"]


class GoalCreate(BaseModel):
    """Request to set the goal of a period."""

    period: GoalPeriod
    target: int = Field(..., ge=1, description="Books to finish within the period")
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "GoalCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "period": "weekly",
                "target": 3,
                "start_date": "2026-10-19",
                "end_date": "2026-10-25",
            }
        }
    )


class GoalSetResponse(BaseModel):
    """Outcome of setting a goal."""

    id: UUID
    period: str
    target: int
    updated: bool = Field(description="True when an existing active goal was updated")


class GoalResponse(BaseModel):
    """Reading goal."""

    id: UUID
    period: str
    target: int
    start_date: date
    end_date: date
    progress: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class GoalProgressUpdate(BaseModel):
    """Request to record goal progress."""

    progress: int = Field(..., ge=0)


class GoalProgressResponse(BaseModel):
    """Goal progress after an update."""

    id: UUID
    progress: int
    target: int
    status: str


class GoalCancelResponse(BaseModel):
    """Outcome of cancelling a goal."""

    cancelled: bool
