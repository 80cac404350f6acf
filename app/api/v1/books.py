"""Book API endpoints: detail, status, rating, review, progress and sessions."""

from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from app.api.v1.deps import CurrentUser, DBSession
from app.config import settings
from app.rate_limiter import limiter
from app.schemas.book import BookDetail, FavoriteResponse
from app.schemas.common import ERROR_RESPONSES
from app.schemas.reading import (
    BookReadingStats,
    BookStatusResponse,
    ClosedSession,
    HistoryItem,
    PageProgress,
    PageUpdate,
    RatingResponse,
    RatingUpdate,
    ReviewResponse,
    ReviewUpdate,
    SessionStart,
    SessionStarted,
    SessionStats,
    StatusChangeResponse,
    StatusUpdate,
)
from app.services.book_service import BookService
from app.services.session_service import SessionService
from app.services.status_service import StatusService

router = APIRouter()


@router.get(
    "/{book_id}",
    response_model=BookDetail,
    responses=ERROR_RESPONSES,
    summary="Get book details",
    description="""
Get a book with its rating summary, reader counts, similar books and the
friends of the caller who hold a status on it.
    """,
)
async def get_book(book_id: UUID, current_user: CurrentUser, db: DBSession) -> BookDetail:
    service = BookService(db)
    return await service.get_book_by_id(book_id, current_user.id)


@router.get(
    "/{book_id}/stats",
    response_model=BookReadingStats,
    summary="Get reading stats of a book",
    description="Session aggregates over every reader of the book.",
)
async def get_book_stats(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> BookReadingStats:
    service = SessionService(db)
    return await service.get_book_reading_stats(book_id)


# Status, rating and review


@router.get(
    "/{book_id}/status",
    response_model=BookStatusResponse,
    summary="Get my status for a book",
    description="Status is `none` when you have no activity on the book.",
)
async def get_status(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> BookStatusResponse:
    service = StatusService(db)
    return await service.get_user_book_status(current_user.id, book_id)


@router.put(
    "/{book_id}/status",
    response_model=StatusChangeResponse,
    responses=ERROR_RESPONSES,
    summary="Set my status for a book",
    description="""
Replace your status for a book. Each change is recorded in your history.

**Statuses:** `want-to-read`, `reading`, `finished`

Finishing a book refreshes the progress of your active reading goals.
    """,
)
async def update_status(
    book_id: UUID,
    update: StatusUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> StatusChangeResponse:
    service = StatusService(db)
    return await service.update_user_book_status(
        current_user.id,
        book_id,
        update.status,
        update.current_page,
    )


@router.put(
    "/{book_id}/rating",
    response_model=RatingResponse,
    responses=ERROR_RESPONSES,
    summary="Rate a book",
)
async def rate_book(
    book_id: UUID,
    update: RatingUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> RatingResponse:
    service = StatusService(db)
    rating = await service.rate_book(current_user.id, book_id, update.rating)
    return RatingResponse(rating=rating)


@router.get(
    "/{book_id}/review",
    response_model=ReviewResponse,
    summary="Get my review of a book",
)
async def get_review(book_id: UUID, current_user: CurrentUser, db: DBSession) -> ReviewResponse:
    service = StatusService(db)
    content = await service.get_user_book_review(current_user.id, book_id)
    return ReviewResponse(content=content)


@router.put(
    "/{book_id}/review",
    response_model=ReviewResponse,
    responses=ERROR_RESPONSES,
    summary="Write my review of a book",
    description="Save or replace your review. Empty content deletes it.",
)
async def review_book(
    book_id: UUID,
    update: ReviewUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ReviewResponse:
    service = StatusService(db)
    content = await service.review_book(current_user.id, book_id, update.content)
    return ReviewResponse(content=content)


@router.get(
    "/{book_id}/history",
    response_model=list[HistoryItem],
    summary="Get my history for a book",
)
async def get_book_history(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    limit: int = Query(50, ge=1, le=200, description="Number of entries to return"),
) -> list[HistoryItem]:
    service = StatusService(db)
    return await service.get_reading_history(current_user.id, book_id, limit)


# Progress and sessions


@router.put(
    "/{book_id}/progress",
    response_model=PageProgress,
    responses=ERROR_RESPONSES,
    summary="Update current page",
    description="Move your page marker on a book you are reading, without a session.",
)
async def update_progress(
    book_id: UUID,
    update: PageUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> PageProgress:
    service = SessionService(db)
    return await service.update_current_page(current_user.id, book_id, update.current_page)


@router.get(
    "/{book_id}/sessions",
    response_model=list[ClosedSession],
    summary="List my finished sessions",
    description="Closed reading sessions on the book, most recently ended first.",
)
async def list_sessions(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> list[ClosedSession]:
    service = SessionService(db)
    return await service.get_book_reading_sessions(current_user.id, book_id)


@router.get(
    "/{book_id}/sessions/stats",
    response_model=SessionStats,
    summary="Get my session stats",
)
async def get_session_stats(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> SessionStats:
    service = SessionService(db)
    return await service.get_book_reading_session_stats(current_user.id, book_id)


@router.post(
    "/{book_id}/sessions",
    response_model=SessionStarted,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Start a reading session",
    description="""
Open a reading session on a book. The book is marked as `reading` if it
was not already.

Only one session per book can be active at a time; starting a second one
returns `409 INVALID_STATE`.

**Example:**
```bash
curl -X POST /v1/books/{book_id}/sessions \\
  -H "Authorization: Bearer <token>" \\
  -d '{"start_page": 1}'
```
    """,
)
@limiter.limit(settings.rate_limit_writes)
async def start_session(
    request: Request,
    book_id: UUID,
    start: SessionStart,
    current_user: CurrentUser,
    db: DBSession,
) -> SessionStarted:
    service = SessionService(db)
    session_id = await service.start_reading_session(current_user.id, book_id, start.start_page)
    return SessionStarted(session_id=session_id)


# Favorites


@router.put(
    "/{book_id}/favorite",
    response_model=FavoriteResponse,
    responses=ERROR_RESPONSES,
    summary="Add to favorites",
)
async def add_favorite(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> FavoriteResponse:
    service = BookService(db)
    return await service.add_to_favorites(current_user.id, book_id)


@router.delete(
    "/{book_id}/favorite",
    response_model=FavoriteResponse,
    summary="Remove from favorites",
)
async def remove_favorite(
    book_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> FavoriteResponse:
    service = BookService(db)
    return await service.remove_from_favorites(current_user.id, book_id)
