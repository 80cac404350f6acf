"""Reading session service tests."""

import asyncio
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import InvalidArgumentError, InvalidStateError, NotFoundError
from app.core.timeutils import utcnow
from app.models.book import Book
from app.models.reading import HistoryEntry, ReadingSession, ReadingStatus
from app.models.user import User
from app.schemas.reading import SessionSummary
from app.services.session_service import SessionService
from app.services.status_service import StatusService


async def _backdate(db: AsyncSession, session_id: uuid.UUID, minutes: int) -> None:
    session = await db.get(ReadingSession, session_id)
    session.start_time = utcnow() - timedelta(minutes=minutes)
    await db.commit()


class TestSessionLifecycle:
    """Start, end and inspect a session."""

    @pytest.mark.asyncio
    async def test_read_half_a_book(self, db_session: AsyncSession, test_user: User, test_book: Book):
        """Reading pages 1 to 151 of 300 over 45 minutes."""
        service = SessionService(db_session)

        session_id = await service.start_reading_session(test_user.id, test_book.id, 1)
        await _backdate(db_session, session_id, 45)

        summary = await service.end_reading_session(session_id, 151)

        assert summary.session_id == session_id
        assert summary.pages_read == 150
        assert summary.duration_minutes == 45
        assert summary.percent_complete == 50.3

        status = await StatusService(db_session).get_user_book_status(test_user.id, test_book.id)
        assert status.status == "reading"
        assert status.current_page == 151
        assert status.percent_complete == 50.3

    @pytest.mark.asyncio
    async def test_start_marks_book_as_reading(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)

        await service.start_reading_session(test_user.id, test_book.id, 20)

        status = await StatusService(db_session).get_user_book_status(test_user.id, test_book.id)
        assert status.status == "reading"
        assert status.current_page == 20

        history = await StatusService(db_session).get_reading_history(test_user.id, test_book.id)
        assert [h.action for h in history] == ["started"]

    @pytest.mark.asyncio
    async def test_end_records_progress_history(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)
        session_id = await service.start_reading_session(test_user.id, test_book.id, 10)

        await service.end_reading_session(session_id, 30, notes="Great chapter")

        history = await StatusService(db_session).get_reading_history(test_user.id, test_book.id)
        progress = [h for h in history if h.action == "progress-update"]
        assert len(progress) == 1
        assert progress[0].payload["from_page"] == 10
        assert progress[0].payload["to_page"] == 30
        assert progress[0].payload["notes"] == "Great chapter"
        assert progress[0].book_title == "Test Book"

    @pytest.mark.asyncio
    async def test_going_back_gives_negative_pages(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)
        session_id = await service.start_reading_session(test_user.id, test_book.id, 50)

        summary = await service.end_reading_session(session_id, 40)

        assert summary.pages_read == -10

    @pytest.mark.asyncio
    async def test_book_without_page_count_reports_zero_percent(
        self, db_session: AsyncSession, test_user: User, book_factory
    ):
        book = await book_factory("Unpaged", page_count=0)
        service = SessionService(db_session)

        session_id = await service.start_reading_session(test_user.id, book.id, 1)
        summary = await service.end_reading_session(session_id, 10)

        assert summary.percent_complete == 0
        assert summary.pages_read == 9


class TestSessionStateErrors:
    """Invalid transitions are rejected."""

    @pytest.mark.asyncio
    async def test_end_twice_rejected(self, db_session: AsyncSession, test_user: User, test_book: Book):
        service = SessionService(db_session)
        session_id = await service.start_reading_session(test_user.id, test_book.id, 1)
        await service.end_reading_session(session_id, 5)

        with pytest.raises(InvalidStateError) as exc_info:
            await service.end_reading_session(session_id, 10)

        assert exc_info.value.error_message == "Failed to end reading session"

    @pytest.mark.asyncio
    async def test_end_unknown_session_rejected(self, db_session: AsyncSession):
        service = SessionService(db_session)

        with pytest.raises(InvalidStateError):
            await service.end_reading_session(uuid.uuid4(), 10)

    @pytest.mark.asyncio
    async def test_end_foreign_session_rejected(
        self, db_session: AsyncSession, test_user: User, other_user: User, test_book: Book
    ):
        service = SessionService(db_session)
        session_id = await service.start_reading_session(test_user.id, test_book.id, 1)

        with pytest.raises(InvalidStateError):
            await service.end_reading_session(session_id, 10, user_id=other_user.id)

    @pytest.mark.asyncio
    async def test_second_active_session_rejected(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)
        await service.start_reading_session(test_user.id, test_book.id, 1)

        with pytest.raises(InvalidStateError):
            await service.start_reading_session(test_user.id, test_book.id, 5)

        result = await db_session.execute(
            select(func.count()).select_from(ReadingSession).where(ReadingSession.is_active.is_(True))
        )
        assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_concurrent_ends_close_once(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
    ):
        session_id = await SessionService(db_session).start_reading_session(test_user.id, test_book.id, 1)

        async def end(end_page: int):
            async with session_factory() as db:
                return await SessionService(db).end_reading_session(session_id, end_page)

        outcomes = await asyncio.gather(end(10), end(20), return_exceptions=True)

        ended = [o for o in outcomes if isinstance(o, SessionSummary)]
        rejected = [o for o in outcomes if isinstance(o, InvalidStateError)]
        assert len(ended) == 1
        assert len(rejected) == 1

        result = await db_session.execute(
            select(func.count())
            .select_from(HistoryEntry)
            .where(HistoryEntry.action == "progress-update")
        )
        assert result.scalar() == 1

        result = await db_session.execute(
            select(ReadingStatus.current_page).where(ReadingStatus.user_id == test_user.id)
        )
        assert result.scalar() == ended[0].end_page

    @pytest.mark.asyncio
    async def test_concurrent_starts_open_one_session(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        test_user: User,
        test_book: Book,
    ):
        async def start(start_page: int):
            async with session_factory() as db:
                return await SessionService(db).start_reading_session(
                    test_user.id, test_book.id, start_page
                )

        outcomes = await asyncio.gather(start(1), start(5), return_exceptions=True)

        started = [o for o in outcomes if isinstance(o, uuid.UUID)]
        rejected = [o for o in outcomes if isinstance(o, InvalidStateError)]
        assert len(started) == 1
        assert len(rejected) == 1

        result = await db_session.execute(
            select(func.count()).select_from(ReadingSession).where(ReadingSession.is_active.is_(True))
        )
        assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_new_session_after_ending(self, db_session: AsyncSession, test_user: User, test_book: Book):
        service = SessionService(db_session)
        first = await service.start_reading_session(test_user.id, test_book.id, 1)
        await service.end_reading_session(first, 20)

        second = await service.start_reading_session(test_user.id, test_book.id, 20)

        assert second != first

    @pytest.mark.asyncio
    async def test_start_page_below_one_rejected(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)

        with pytest.raises(InvalidArgumentError):
            await service.start_reading_session(test_user.id, test_book.id, 0)

    @pytest.mark.asyncio
    async def test_start_unknown_book(self, db_session: AsyncSession, test_user: User):
        service = SessionService(db_session)

        with pytest.raises(NotFoundError):
            await service.start_reading_session(test_user.id, uuid.uuid4(), 1)


class TestSessionQueries:
    """Active session, closed sessions and aggregates."""

    @pytest.mark.asyncio
    async def test_active_session(self, db_session: AsyncSession, test_user: User, test_book: Book):
        service = SessionService(db_session)
        assert await service.get_active_reading_session(test_user.id) is None

        session_id = await service.start_reading_session(test_user.id, test_book.id, 3)
        await _backdate(db_session, session_id, 12)

        active = await service.get_active_reading_session(test_user.id)

        assert active is not None
        assert active.id == session_id
        assert active.start_page == 3
        assert active.current_duration_minutes == 12
        assert active.book.title == "Test Book"
        assert active.book.genres == ["Fantasy"]

    @pytest.mark.asyncio
    async def test_closed_sessions_and_stats(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)

        first = await service.start_reading_session(test_user.id, test_book.id, 1)
        await _backdate(db_session, first, 30)
        await service.end_reading_session(first, 51)

        second = await service.start_reading_session(test_user.id, test_book.id, 51)
        await _backdate(db_session, second, 60)
        await service.end_reading_session(second, 151)

        sessions = await service.get_book_reading_sessions(test_user.id, test_book.id)
        assert [s.id for s in sessions] == [second, first]

        stats = await service.get_book_reading_session_stats(test_user.id, test_book.id)
        assert stats.session_count == 2
        assert stats.total_reading_minutes == 90
        assert stats.total_pages_read == 150
        assert stats.avg_session_duration == 45.0
        assert stats.avg_pages_per_session == 75.0

        book_stats = await service.get_book_reading_stats(test_book.id)
        assert book_stats.session_count == 2
        assert book_stats.avg_days_to_finish == 0

    @pytest.mark.asyncio
    async def test_days_to_finish_averages_readers(
        self, db_session: AsyncSession, test_user: User, other_user: User, test_book: Book
    ):
        """One reader spans two days, the other four."""
        service = SessionService(db_session)

        for reader, days in ((test_user, 2), (other_user, 4)):
            session_id = await service.start_reading_session(reader.id, test_book.id, 1)
            await _backdate(db_session, session_id, days * 24 * 60 + 30)
            await service.end_reading_session(session_id, 100)

        stats = await service.get_book_reading_stats(test_book.id)

        assert stats.session_count == 2
        assert stats.avg_days_to_finish == 3.0

    @pytest.mark.asyncio
    async def test_stats_without_sessions(self, db_session: AsyncSession, test_user: User, test_book: Book):
        service = SessionService(db_session)

        stats = await service.get_book_reading_session_stats(test_user.id, test_book.id)

        assert stats.session_count == 0
        assert stats.total_reading_minutes == 0
        assert stats.avg_session_duration == 0


class TestCurrentPage:
    """Page marker updates outside sessions."""

    @pytest.mark.asyncio
    async def test_update_current_page(self, db_session: AsyncSession, test_user: User, test_book: Book):
        await StatusService(db_session).update_user_book_status(test_user.id, test_book.id, "reading")
        service = SessionService(db_session)

        progress = await service.update_current_page(test_user.id, test_book.id, 75)

        assert progress.current_page == 75
        assert progress.percent_complete == 25.0

        fact = (
            await db_session.execute(select(ReadingStatus).where(ReadingStatus.user_id == test_user.id))
        ).scalar_one()
        assert fact.current_page == 75

    @pytest.mark.asyncio
    async def test_update_without_reading_status(
        self, db_session: AsyncSession, test_user: User, test_book: Book
    ):
        service = SessionService(db_session)

        with pytest.raises(NotFoundError):
            await service.update_current_page(test_user.id, test_book.id, 10)
