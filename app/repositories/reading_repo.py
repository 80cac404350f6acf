"""Reading status, session and history repository."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.book import Book
from app.models.reading import HistoryEntry, ReadingSession, ReadingStatus


class ReadingRepository:
    """Repository for reading status, session and history operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Status facts

    async def get_status(self, user_id: UUID, book_id: UUID) -> ReadingStatus | None:
        """Get the user's current status fact for a book."""
        query = select(ReadingStatus).where(
            and_(
                ReadingStatus.user_id == user_id,
                ReadingStatus.book_id == book_id,
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def replace_status(
        self,
        user_id: UUID,
        book_id: UUID,
        status: str,
        current_page: int | None = None,
        percent_complete: float | None = None,
    ) -> ReadingStatus:
        """Supersede any existing status fact with a new one."""
        # Core delete runs before the insert is flushed, so the unique
        # (user_id, book_id) constraint never sees two rows
        await self.db.execute(
            delete(ReadingStatus)
            .where(
                and_(
                    ReadingStatus.user_id == user_id,
                    ReadingStatus.book_id == book_id,
                )
            )
            .execution_options(synchronize_session="fetch")
        )

        now = datetime.now(UTC)
        fact = ReadingStatus(
            user_id=user_id,
            book_id=book_id,
            status=status,
            current_page=current_page,
            percent_complete=percent_complete,
            started_at=now,
            updated_at=now,
        )
        self.db.add(fact)
        await self.db.flush()
        return fact

    async def set_progress(
        self,
        fact: ReadingStatus,
        current_page: int,
        percent_complete: float,
    ) -> ReadingStatus:
        """Move the page marker of a status fact."""
        fact.current_page = current_page
        fact.percent_complete = percent_complete
        fact.updated_at = datetime.now(UTC)
        await self.db.flush()
        return fact

    # Sessions

    async def get_session(self, session_id: UUID) -> ReadingSession | None:
        """Get a session by id."""
        query = select(ReadingSession).where(ReadingSession.id == session_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_active_session(
        self,
        user_id: UUID,
        book_id: UUID | None = None,
    ) -> tuple[ReadingSession, Book] | None:
        """Get the most recently started active session with its book."""
        query = (
            select(ReadingSession, Book)
            .join(Book, ReadingSession.book_id == Book.id)
            .where(
                and_(
                    ReadingSession.user_id == user_id,
                    ReadingSession.is_active.is_(True),
                )
            )
            .order_by(ReadingSession.start_time.desc())
            .limit(1)
        )
        if book_id is not None:
            query = query.where(ReadingSession.book_id == book_id)

        result = await self.db.execute(query)
        row = result.first()
        return (row[0], row[1]) if row else None

    async def create_session(
        self,
        user_id: UUID,
        book_id: UUID,
        start_page: int,
    ) -> ReadingSession:
        """Open a new active session."""
        session = ReadingSession(
            user_id=user_id,
            book_id=book_id,
            start_page=start_page,
            start_time=datetime.now(UTC),
            is_active=True,
        )
        self.db.add(session)
        await self.db.flush()
        return session

    async def close_session(
        self,
        session: ReadingSession,
        end_page: int,
        end_time: datetime,
        duration_minutes: int,
        notes: str | None = None,
    ) -> bool:
        """Close a session if it is still active.

        The update is conditional on ``is_active`` so a session closes exactly
        once; returns False when it was already closed.
        """
        result = await self.db.execute(
            update(ReadingSession)
            .where(
                and_(
                    ReadingSession.id == session.id,
                    ReadingSession.is_active.is_(True),
                )
            )
            .values(
                end_page=end_page,
                end_time=end_time,
                duration_minutes=duration_minutes,
                pages_read=end_page - session.start_page,
                notes=notes,
                is_active=False,
            )
            .returning(ReadingSession.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return False

        await self.db.refresh(session)
        return True

    async def get_closed_sessions(self, user_id: UUID, book_id: UUID) -> list[ReadingSession]:
        """Get closed sessions for a pair, most recently ended first."""
        query = (
            select(ReadingSession)
            .where(
                and_(
                    ReadingSession.user_id == user_id,
                    ReadingSession.book_id == book_id,
                    ReadingSession.is_active.is_(False),
                )
            )
            .order_by(ReadingSession.end_time.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_session_totals(self, user_id: UUID, book_id: UUID):
        """Aggregate closed sessions of one user on one book."""
        query = select(
            func.count(ReadingSession.id).label("session_count"),
            func.sum(ReadingSession.duration_minutes).label("total_minutes"),
            func.sum(ReadingSession.pages_read).label("total_pages"),
            func.avg(ReadingSession.duration_minutes).label("avg_duration"),
            func.avg(ReadingSession.pages_read).label("avg_pages"),
        ).where(
            and_(
                ReadingSession.user_id == user_id,
                ReadingSession.book_id == book_id,
                ReadingSession.is_active.is_(False),
            )
        )
        result = await self.db.execute(query)
        return result.one()

    async def get_book_session_totals(self, book_id: UUID):
        """Aggregate closed sessions of all users on one book."""
        query = select(
            func.count(ReadingSession.id).label("session_count"),
            func.avg(ReadingSession.duration_minutes).label("avg_duration"),
            func.avg(ReadingSession.pages_read).label("avg_pages"),
        ).where(
            and_(
                ReadingSession.book_id == book_id,
                ReadingSession.is_active.is_(False),
            )
        )
        result = await self.db.execute(query)
        return result.one()

    async def get_reader_spans(self, book_id: UUID) -> list[tuple[datetime, datetime]]:
        """Per user: first session start and last session end on a book."""
        query = (
            select(
                func.min(ReadingSession.start_time),
                func.max(ReadingSession.end_time),
            )
            .where(
                and_(
                    ReadingSession.book_id == book_id,
                    ReadingSession.is_active.is_(False),
                )
            )
            .group_by(ReadingSession.user_id)
        )
        result = await self.db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    # History

    async def add_history(
        self,
        user_id: UUID,
        book_id: UUID,
        action: str,
        payload: dict | None = None,
    ) -> HistoryEntry:
        """Append a history entry."""
        entry = HistoryEntry(
            user_id=user_id,
            book_id=book_id,
            action=action,
            context="app",
            timestamp=datetime.now(UTC),
            payload=payload or {},
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_history(
        self,
        user_id: UUID,
        book_id: UUID | None = None,
        limit: int = 50,
    ) -> list[tuple[HistoryEntry, str]]:
        """Get history entries with book titles, newest first."""
        query = (
            select(HistoryEntry, Book.title)
            .join(Book, HistoryEntry.book_id == Book.id)
            .where(HistoryEntry.user_id == user_id)
            .order_by(HistoryEntry.timestamp.desc())
            .limit(limit)
        )
        if book_id is not None:
            query = query.where(HistoryEntry.book_id == book_id)

        result = await self.db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def count_books_finished_between(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
    ) -> int:
        """Count distinct books with a ``finished`` entry in [start, end]."""
        query = select(func.count(func.distinct(HistoryEntry.book_id))).where(
            and_(
                HistoryEntry.user_id == user_id,
                HistoryEntry.action == "finished",
                HistoryEntry.timestamp >= start,
                HistoryEntry.timestamp <= end,
            )
        )
        result = await self.db.execute(query)
        return result.scalar() or 0
