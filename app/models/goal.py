"""Reading goal database model."""

import uuid
from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDMixin

GOAL_PERIODS = ("weekly", "monthly", "quarterly", "biannual", "annual")

GOAL_STATUSES = ("active", "completed", "cancelled")


class ReadingGoal(Base, UUIDMixin, TimestampMixin):
    """Target number of books to finish within a period."""

    __tablename__ = "reading_goals"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    period: Mapped[str] = mapped_column(String(20), nullable=False)
    target: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # active -> completed | cancelled; terminal states are final
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default="active",
    )

    __table_args__ = (
        CheckConstraint(
            "period IN ('weekly', 'monthly', 'quarterly', 'biannual', 'annual')",
            name="check_goal_period",
        ),
        CheckConstraint(
            "status IN ('active', 'completed', 'cancelled')",
            name="check_goal_status",
        ),
        CheckConstraint("target >= 1", name="check_goal_target_positive"),
        CheckConstraint("end_date >= start_date", name="check_goal_date_range"),
        # At most one active goal per user per period
        Index(
            "uq_reading_goals_active_user_period",
            "user_id",
            "period",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("idx_reading_goals_user_start", "user_id", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<ReadingGoal {self.period} {self.progress}/{self.target} {self.status}>"
