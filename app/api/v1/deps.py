"""Shared API dependencies for authentication and database access."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import UnauthorizedError
from app.core.security import verify_access_token
from app.db.session import get_db, get_session_factory
from app.models.user import User
from app.repositories.user_repo import UserRepository

# Security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """
    Get the current authenticated user from the bearer token.

    The token's ``sub`` claim holds the user id. Unknown or inactive users
    are rejected the same way as a bad token.
    """
    if bearer:
        payload = verify_access_token(bearer.credentials)
        if payload:
            try:
                user_id = UUID(str(payload.get("sub")))
            except ValueError:
                user_id = None
            if user_id:
                user = await UserRepository(db).get_by_id(user_id)
                if user and user.status == "active":
                    return user

    raise UnauthorizedError("Invalid or missing authentication credentials")


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
DBSession = Annotated[AsyncSession, Depends(get_db)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
