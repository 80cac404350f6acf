"""Reading session service.

A session is a timed reading interval for one (user, book) pair and moves
through ``NoSession -> Active -> Closed``. Starting a session marks the
book as being read; ending it moves the page marker of the ``reading``
status and records a ``progress-update`` history entry, all in one
transaction.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidArgumentError, InvalidStateError, NotFoundError
from app.core.numbers import percent_complete, to_number
from app.core.resilience import fallback_on_error, translate_store_errors
from app.core.timeutils import days_between, ensure_utc, minutes_between, utcnow
from app.repositories.book_repo import BookRepository
from app.repositories.reading_repo import ReadingRepository
from app.repositories.user_repo import UserRepository
from app.schemas.reading import (
    ActiveSession,
    BookReadingStats,
    ClosedSession,
    PageProgress,
    SessionStats,
    SessionSummary,
)
from app.services.book_service import build_book_brief

logger = structlog.get_logger(__name__)


class SessionService:
    """Service for reading sessions and page progress."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.reading_repo = ReadingRepository(db)
        self.book_repo = BookRepository(db)
        self.user_repo = UserRepository(db)

    @translate_store_errors("start reading session")
    async def start_reading_session(
        self,
        user_id: UUID,
        book_id: UUID,
        start_page: int,
    ) -> UUID:
        """Open an active session and make sure the book is marked as reading.

        Raises:
            InvalidArgumentError: ``start_page`` is below 1
            NotFoundError: Unknown user or book
            InvalidStateError: A session is already active for this book
        """
        if start_page < 1:
            raise InvalidArgumentError(
                "start_page must be at least 1",
                details={"start_page": start_page},
            )

        if not await self.user_repo.exists(user_id):
            raise NotFoundError("User", str(user_id))

        book = await self.book_repo.get_by_id(book_id)
        if not book:
            raise NotFoundError("Book", str(book_id))

        if await self.reading_repo.get_active_session(user_id, book_id):
            raise InvalidStateError(
                "A reading session is already active for this book",
                details={"book_id": str(book_id)},
            )

        percent = percent_complete(start_page, book.page_count)

        try:
            session = await self.reading_repo.create_session(user_id, book_id, start_page)

            fact = await self.reading_repo.get_status(user_id, book_id)
            if fact is None or fact.status != "reading":
                await self.reading_repo.replace_status(
                    user_id,
                    book_id,
                    "reading",
                    current_page=start_page,
                    percent_complete=percent,
                )
                await self.reading_repo.add_history(
                    user_id,
                    book_id,
                    "started",
                    {"current_page": start_page},
                )
            else:
                await self.reading_repo.set_progress(fact, start_page, percent)

            await self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent start for the same pair
            await self.db.rollback()
            raise InvalidStateError(
                "A reading session is already active for this book",
                details={"book_id": str(book_id)},
            ) from e

        logger.info(
            "Reading session started",
            user_id=str(user_id),
            book_id=str(book_id),
            session_id=str(session.id),
            start_page=start_page,
        )

        return session.id

    @translate_store_errors("end reading session")
    async def end_reading_session(
        self,
        session_id: UUID,
        end_page: int,
        notes: str | None = None,
        user_id: UUID | None = None,
    ) -> SessionSummary:
        """Close an active session.

        ``pages_read`` is ``end_page - start_page`` and may be negative.
        When ``user_id`` is given, sessions of other users are treated as
        unknown.

        Raises:
            InvalidStateError: Session is unknown, already closed, or foreign
        """
        session = await self.reading_repo.get_session(session_id)

        if (
            session is None
            or not session.is_active
            or (user_id is not None and session.user_id != user_id)
        ):
            logger.warning("Cannot end reading session", session_id=str(session_id))
            raise InvalidStateError(
                "Failed to end reading session",
                details={"session_id": str(session_id)},
            )

        end_time = utcnow()
        duration = minutes_between(session.start_time, end_time)
        page_count = await self.book_repo.get_page_count(session.book_id)
        percent = percent_complete(end_page, page_count)

        closed = await self.reading_repo.close_session(
            session,
            end_page=end_page,
            end_time=end_time,
            duration_minutes=duration,
            notes=notes,
        )
        if not closed:
            # Ended by a concurrent request after the check above
            await self.db.rollback()
            logger.warning("Reading session already ended", session_id=str(session_id))
            raise InvalidStateError(
                "Failed to end reading session",
                details={"session_id": str(session_id)},
            )

        # Only a "reading" fact carries a page marker
        fact = await self.reading_repo.get_status(session.user_id, session.book_id)
        if fact is not None and fact.status == "reading":
            await self.reading_repo.set_progress(fact, end_page, percent)

        await self.reading_repo.add_history(
            session.user_id,
            session.book_id,
            "progress-update",
            {
                "from_page": session.start_page,
                "to_page": end_page,
                "duration_minutes": duration,
                "notes": notes,
            },
        )

        await self.db.commit()

        logger.info(
            "Reading session ended",
            user_id=str(session.user_id),
            book_id=str(session.book_id),
            session_id=str(session_id),
            pages_read=session.pages_read,
            duration_minutes=duration,
        )

        return SessionSummary(
            session_id=session.id,
            start_page=session.start_page,
            end_page=end_page,
            pages_read=session.pages_read,
            duration_minutes=duration,
            percent_complete=percent,
        )

    @fallback_on_error(default=lambda: None)
    async def get_active_reading_session(
        self,
        user_id: UUID,
        book_id: UUID | None = None,
    ) -> ActiveSession | None:
        """Get the most recently started active session, for one book or any."""
        found = await self.reading_repo.get_active_session(user_id, book_id)
        if not found:
            return None

        session, book = found
        genres = await self.book_repo.get_genre_names([book.id])

        return ActiveSession(
            id=session.id,
            book_id=book.id,
            start_page=session.start_page,
            start_time=ensure_utc(session.start_time),
            current_duration_minutes=max(minutes_between(session.start_time, utcnow()), 0),
            book=build_book_brief(book, genres),
        )

    @fallback_on_error(default=list)
    async def get_book_reading_sessions(
        self,
        user_id: UUID,
        book_id: UUID,
    ) -> list[ClosedSession]:
        """Get closed sessions, most recently ended first."""
        sessions = await self.reading_repo.get_closed_sessions(user_id, book_id)
        return [ClosedSession.model_validate(s) for s in sessions]

    @translate_store_errors("update current page")
    async def update_current_page(
        self,
        user_id: UUID,
        book_id: UUID,
        current_page: int,
    ) -> PageProgress:
        """Move the page marker without touching sessions.

        Raises:
            InvalidArgumentError: ``current_page`` is below 1
            NotFoundError: The user is not reading the book
        """
        if current_page < 1:
            raise InvalidArgumentError(
                "current_page must be at least 1",
                details={"current_page": current_page},
            )

        fact = await self.reading_repo.get_status(user_id, book_id)
        if fact is None or fact.status != "reading":
            raise NotFoundError("Reading status for book", str(book_id))

        page_count = await self.book_repo.get_page_count(book_id)
        percent = percent_complete(current_page, page_count)
        await self.reading_repo.set_progress(fact, current_page, percent)
        await self.db.commit()

        logger.info(
            "Current page updated",
            user_id=str(user_id),
            book_id=str(book_id),
            current_page=current_page,
        )

        return PageProgress(current_page=current_page, percent_complete=percent)

    @fallback_on_error(default=SessionStats)
    async def get_book_reading_session_stats(
        self,
        user_id: UUID,
        book_id: UUID,
    ) -> SessionStats:
        """Aggregate the user's closed sessions on a book."""
        row = await self.reading_repo.get_session_totals(user_id, book_id)

        return SessionStats(
            session_count=to_number(row.session_count),
            total_reading_minutes=to_number(row.total_minutes),
            total_pages_read=to_number(row.total_pages),
            avg_session_duration=round(to_number(row.avg_duration), 1),
            avg_pages_per_session=round(to_number(row.avg_pages), 1),
        )

    @fallback_on_error(default=BookReadingStats)
    async def get_book_reading_stats(self, book_id: UUID) -> BookReadingStats:
        """Aggregate every user's closed sessions on a book.

        ``avg_days_to_finish`` averages, over users, the whole days between
        a user's first session start and last session end.
        """
        row = await self.reading_repo.get_book_session_totals(book_id)
        spans = await self.reading_repo.get_reader_spans(book_id)

        days = [days_between(first, last) for first, last in spans if first and last]
        avg_days = sum(days) / len(days) if days else 0

        return BookReadingStats(
            session_count=to_number(row.session_count),
            avg_session_duration=round(to_number(row.avg_duration), 1),
            avg_pages_per_session=round(to_number(row.avg_pages), 1),
            avg_days_to_finish=round(avg_days, 1),
        )
