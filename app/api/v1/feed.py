"""Page aggregate endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from app.api.v1.deps import CurrentUser, SessionFactory
from app.schemas.common import ERROR_RESPONSES
from app.schemas.feed import BookPage, HomeFeed, MyBooksPage
from app.services.feed_service import FeedService

router = APIRouter()


@router.get(
    "/home",
    response_model=HomeFeed,
    summary="Get home feed",
    description="""
Currently reading, trending in your genres, recommendations and recently
added books in one response.

Sections are loaded concurrently. A section that fails to load comes back
empty instead of failing the whole feed.
    """,
)
async def get_home_feed(
    current_user: CurrentUser,
    session_factory: SessionFactory,
    filter: str | None = Query(None, description="Recommendation filter"),
) -> HomeFeed:
    service = FeedService(session_factory)
    return await service.get_home_feed(current_user.id, filter)


@router.get(
    "/my-books",
    response_model=MyBooksPage,
    summary="Get my books page",
    description="Stats, shelves, goals and favorites in one response.",
)
async def get_my_books(current_user: CurrentUser, session_factory: SessionFactory) -> MyBooksPage:
    service = FeedService(session_factory)
    return await service.get_my_books(current_user.id)


@router.get(
    "/books/{book_id}",
    response_model=BookPage,
    responses=ERROR_RESPONSES,
    summary="Get book page",
    description="Book detail with your status, review, active session and session history.",
)
async def get_book_page(
    book_id: UUID,
    current_user: CurrentUser,
    session_factory: SessionFactory,
) -> BookPage:
    service = FeedService(session_factory)
    return await service.get_book_page(current_user.id, book_id)
