"""Main API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import (
    books,
    feed,
    goals,
    health,
    options,
    recommendations,
    sessions,
    shelves,
    users,
)

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, tags=["Health"])

# User endpoints
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(options.router, prefix="/options", tags=["Users"])

# Book endpoints
api_router.include_router(books.router, prefix="/books", tags=["Books"])

# Reading session endpoints
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])

# Reading goal endpoints
api_router.include_router(goals.router, prefix="/goals", tags=["Goals"])

# Recommendation endpoints
api_router.include_router(recommendations.router, prefix="/recommendations", tags=["Recommendations"])

# Shelves and history
api_router.include_router(shelves.router, tags=["Shelves"])

# Page aggregates
api_router.include_router(feed.router, prefix="/feed", tags=["Feed"])
