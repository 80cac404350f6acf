"""Reading status, rating and review service."""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.core.numbers import percent_complete, to_number
from app.core.resilience import fallback_on_error, translate_store_errors
from app.core.timeutils import ensure_utc
from app.models.reading import READING_STATUSES
from app.repositories.book_repo import BookRepository
from app.repositories.reading_repo import ReadingRepository
from app.repositories.user_repo import UserRepository
from app.schemas.reading import BookStatusResponse, HistoryItem, StatusChangeResponse
from app.services.goal_service import GoalService

logger = structlog.get_logger(__name__)

# History action recorded for each status
STATUS_ACTIONS = {
    "want-to-read": "want-to-read",
    "reading": "started",
    "finished": "finished",
}

REVIEW_EXCERPT_LENGTH = 100


def review_excerpt(content: str) -> str:
    """First 100 characters of a review, with an ellipsis when cut."""
    if len(content) > REVIEW_EXCERPT_LENGTH:
        return content[:REVIEW_EXCERPT_LENGTH] + "..."
    return content


class StatusService:
    """Service for a user's status, rating and review of a book."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.reading_repo = ReadingRepository(db)
        self.book_repo = BookRepository(db)
        self.user_repo = UserRepository(db)
        self.goal_service = GoalService(db)

    @fallback_on_error(default=BookStatusResponse)
    async def get_user_book_status(self, user_id: UUID, book_id: UUID) -> BookStatusResponse:
        """Get status, rating and progress. Defaults to ``none`` with no activity."""
        fact = await self.reading_repo.get_status(user_id, book_id)
        rating = await self.book_repo.get_user_rating(book_id, user_id)

        response = BookStatusResponse(rating=rating.rating if rating else 0)
        if fact is None:
            return response

        response.status = fact.status
        if fact.status == "reading":
            response.current_page = to_number(fact.current_page) or 1
            response.percent_complete = to_number(fact.percent_complete)
        return response

    @translate_store_errors("update reading status")
    async def update_user_book_status(
        self,
        user_id: UUID,
        book_id: UUID,
        status: str,
        current_page: int | None = None,
    ) -> StatusChangeResponse:
        """Replace the user's status for a book and record it in history.

        Raises:
            InvalidArgumentError: Unknown status or ``current_page`` below 1
            NotFoundError: Unknown user or book
        """
        if status not in READING_STATUSES:
            raise InvalidArgumentError(
                f"Invalid status '{status}'",
                details={"allowed": list(READING_STATUSES)},
            )
        if current_page is not None and current_page < 1:
            raise InvalidArgumentError(
                "current_page must be at least 1",
                details={"current_page": current_page},
            )

        await self._ensure_user_and_book(user_id, book_id)

        if status == "reading" and current_page is not None:
            page_count = await self.book_repo.get_page_count(book_id)
            await self.reading_repo.replace_status(
                user_id,
                book_id,
                status,
                current_page=current_page,
                percent_complete=percent_complete(current_page, page_count),
            )
        else:
            await self.reading_repo.replace_status(user_id, book_id, status)

        payload = {"current_page": current_page} if current_page is not None else {}
        await self.reading_repo.add_history(user_id, book_id, STATUS_ACTIONS[status], payload)

        if status == "finished":
            await self.goal_service.recalculate_active_goals(user_id)

        await self.db.commit()

        logger.info(
            "Reading status updated",
            user_id=str(user_id),
            book_id=str(book_id),
            status=status,
        )

        return StatusChangeResponse(status=status)

    @translate_store_errors("rate book")
    async def rate_book(self, user_id: UUID, book_id: UUID, rating: int) -> int:
        """Create or overwrite the user's 1-5 rating."""
        if not 1 <= rating <= 5:
            raise InvalidArgumentError(
                "Rating must be between 1 and 5",
                details={"rating": rating},
            )

        await self._ensure_user_and_book(user_id, book_id)

        stored = await self.book_repo.upsert_rating(book_id, user_id, rating)
        await self.db.commit()

        logger.info("Book rated", user_id=str(user_id), book_id=str(book_id), rating=rating)

        return stored.rating

    @fallback_on_error(default=lambda: None)
    async def get_user_book_review(self, user_id: UUID, book_id: UUID) -> str | None:
        review = await self.book_repo.get_review(book_id, user_id)
        return review.content if review else None

    @translate_store_errors("save review")
    async def review_book(self, user_id: UUID, book_id: UUID, content: str | None) -> str | None:
        """Save a review. Empty or blank content deletes it and returns None."""
        if not content or not content.strip():
            deleted = await self.book_repo.delete_review(book_id, user_id)
            await self.db.commit()
            if deleted:
                logger.info("Review deleted", user_id=str(user_id), book_id=str(book_id))
            return None

        await self._ensure_user_and_book(user_id, book_id)

        review = await self.book_repo.upsert_review(book_id, user_id, content)
        await self.reading_repo.add_history(
            user_id,
            book_id,
            "reviewed",
            {"content": review_excerpt(content)},
        )
        await self.db.commit()

        logger.info("Review saved", user_id=str(user_id), book_id=str(book_id))

        return review.content

    @fallback_on_error(default=list)
    async def get_reading_history(
        self,
        user_id: UUID,
        book_id: UUID | None = None,
        limit: int | None = None,
    ) -> list[HistoryItem]:
        """Get the user's history entries, newest first."""
        rows = await self.reading_repo.get_history(
            user_id,
            book_id,
            limit or settings.history_page_size,
        )

        return [
            HistoryItem(
                id=entry.id,
                book_id=entry.book_id,
                book_title=title,
                action=entry.action,
                context=entry.context,
                timestamp=ensure_utc(entry.timestamp),
                payload=entry.payload or {},
            )
            for entry, title in rows
        ]

    async def _ensure_user_and_book(self, user_id: UUID, book_id: UUID) -> None:
        if not await self.user_repo.exists(user_id):
            raise NotFoundError("User", str(user_id))
        if not await self.book_repo.exists(book_id):
            raise NotFoundError("Book", str(book_id))
