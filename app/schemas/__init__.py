"""Pydantic schemas package."""

from app.schemas.book import (
    BookBrief,
    BookDetail,
    CompletedBook,
    FavoriteResponse,
    FriendOnBook,
    RecentlyAddedBook,
    ShelfBook,
    TrendingBook,
)
from app.schemas.common import ERROR_RESPONSES, ErrorDetail, ErrorResponse
from app.schemas.feed import BookPage, HomeFeed, MyBooksPage
from app.schemas.goal import (
    GoalCancelResponse,
    GoalCreate,
    GoalProgressResponse,
    GoalProgressUpdate,
    GoalResponse,
    GoalSetResponse,
)
from app.schemas.reading import (
    ActiveSession,
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
    SessionEnd,
    SessionStart,
    SessionStarted,
    SessionStats,
    SessionSummary,
    StatusChangeResponse,
    StatusUpdate,
)
from app.schemas.recommendation import (
    FriendsReason,
    ProfessionReason,
    RecommendedBook,
    SimilarReason,
)
from app.schemas.user import (
    FriendResponse,
    PreferenceOptions,
    UserPreferences,
    UserProfile,
    UserProfileUpdate,
    UserReadingStats,
)

__all__ = [
    # Common
    "ErrorResponse",
    "ErrorDetail",
    "ERROR_RESPONSES",
    # Book
    "BookBrief",
    "BookDetail",
    "FriendOnBook",
    "ShelfBook",
    "CompletedBook",
    "TrendingBook",
    "RecentlyAddedBook",
    "FavoriteResponse",
    # Reading
    "StatusUpdate",
    "StatusChangeResponse",
    "BookStatusResponse",
    "RatingUpdate",
    "RatingResponse",
    "ReviewUpdate",
    "ReviewResponse",
    "PageUpdate",
    "PageProgress",
    "SessionStart",
    "SessionStarted",
    "SessionEnd",
    "SessionSummary",
    "ActiveSession",
    "ClosedSession",
    "SessionStats",
    "BookReadingStats",
    "HistoryItem",
    # Goal
    "GoalCreate",
    "GoalSetResponse",
    "GoalResponse",
    "GoalProgressUpdate",
    "GoalProgressResponse",
    "GoalCancelResponse",
    # Recommendation
    "RecommendedBook",
    "SimilarReason",
    "FriendsReason",
    "ProfessionReason",
    # User
    "UserProfile",
    "UserProfileUpdate",
    "UserPreferences",
    "PreferenceOptions",
    "FriendResponse",
    "UserReadingStats",
    # Feed
    "HomeFeed",
    "MyBooksPage",
    "BookPage",
]
