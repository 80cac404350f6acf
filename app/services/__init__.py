"""Services package for business logic."""

from app.services.book_service import BookService
from app.services.feed_service import FeedService
from app.services.goal_service import GoalService
from app.services.recommendation_service import RecommendationService
from app.services.session_service import SessionService
from app.services.status_service import StatusService
from app.services.user_service import UserService

__all__ = [
    "BookService",
    "FeedService",
    "GoalService",
    "RecommendationService",
    "SessionService",
    "StatusService",
    "UserService",
]
