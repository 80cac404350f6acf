"""Shelf and history endpoints for the current user."""

from fastapi import APIRouter, Query

from app.api.v1.deps import CurrentUser, DBSession
from app.schemas.book import BookBrief, CompletedBook, ShelfBook
from app.schemas.reading import HistoryItem
from app.services.book_service import BookService
from app.services.status_service import StatusService

router = APIRouter()


@router.get(
    "/shelves/reading",
    response_model=list[ShelfBook],
    summary="Books I am reading",
)
async def get_reading_shelf(current_user: CurrentUser, db: DBSession) -> list[ShelfBook]:
    service = BookService(db)
    return await service.get_user_reading_books(current_user.id)


@router.get(
    "/shelves/to-read",
    response_model=list[ShelfBook],
    summary="Books I want to read",
)
async def get_to_read_shelf(current_user: CurrentUser, db: DBSession) -> list[ShelfBook]:
    service = BookService(db)
    return await service.get_user_to_read_books(current_user.id)


@router.get(
    "/shelves/completed",
    response_model=list[CompletedBook],
    summary="Books I finished",
    description="Finished books with when they were finished and your rating.",
)
async def get_completed_shelf(current_user: CurrentUser, db: DBSession) -> list[CompletedBook]:
    service = BookService(db)
    return await service.get_user_completed_books(current_user.id)


@router.get(
    "/shelves/favorites",
    response_model=list[BookBrief],
    summary="My favorite books",
)
async def get_favorites_shelf(current_user: CurrentUser, db: DBSession) -> list[BookBrief]:
    service = BookService(db)
    return await service.get_user_favorite_books(current_user.id)


@router.get(
    "/history",
    response_model=list[HistoryItem],
    summary="My reading history",
    description="Status changes, progress updates and reviews across all books, newest first.",
)
async def get_history(
    current_user: CurrentUser,
    db: DBSession,
    limit: int = Query(50, ge=1, le=200, description="Number of entries to return"),
) -> list[HistoryItem]:
    service = StatusService(db)
    return await service.get_reading_history(current_user.id, limit=limit)
