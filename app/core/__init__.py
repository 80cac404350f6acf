"""Core utilities package."""

from app.core.exceptions import (
    APIError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
)
from app.core.numbers import percent_complete, to_number
from app.core.security import create_access_token, verify_access_token

__all__ = [
    "create_access_token",
    "verify_access_token",
    "to_number",
    "percent_complete",
    "APIError",
    "NotFoundError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "InvalidStateError",
    "StoreError",
]
