"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1.router import api_router
from app.config import settings
from app.core.exceptions import APIError
from app.db.session import close_db, init_db
from app.rate_limiter import limiter

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.is_production else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# OpenAPI tag descriptions with use cases
OPENAPI_TAGS = [
    {
        "name": "Health",
        "description": """
**System Health & Monitoring**

Check API availability and database connectivity.

**Use Cases:**
- Load balancer health checks
- Deployment verification
        """,
    },
    {
        "name": "Users",
        "description": """
**User Profiles & Preferences**

Manage your profile, preferred genres and authors, and friends.
`GET /v1/options` lists the genres, authors and professions to choose from.

Preferred genres drive the trending list and the `similar` recommendation
filter. Friends drive the `friends` filter and the "friends reading" panel
on book details.
        """,
    },
    {
        "name": "Books",
        "description": """
**Book Details & Personal Activity**

Look up a book and manage everything you do with it.

**Key Features:**
- Reading status (`want-to-read`, `reading`, `finished`)
- 1-5 star ratings and free-text reviews
- Page progress with derived percent complete
- Timed reading sessions
- Favorites
        """,
    },
    {
        "name": "Sessions",
        "description": """
**Reading Sessions**

A session is a timed reading interval on one book. Start it with
`POST /books/{book_id}/sessions` and close it with
`POST /sessions/{session_id}/end`.

Ending a session moves your page marker and records the pages read and
minutes spent.
        """,
    },
    {
        "name": "Goals",
        "description": """
**Reading Goals**

Set a target number of finished books per period. You have at most one
active goal per period. Finishing a book refreshes the progress of your
active goals; a goal reaching its target becomes `completed`.
        """,
    },
    {
        "name": "Recommendations",
        "description": """
**Personalized Book Recommendations**

Three filters score candidate books:

1. **similar** - Rated by readers who share your genres
2. **friends** - Read or loved by your friends
3. **profession** - Popular with readers, boosted for your profession

**Each Recommendation Includes:**
- Book details (title, author, cover, up to two genres)
- `match_percent` between 0 and 99
- `reason`, a typed explanation discriminated by `kind`
        """,
    },
    {
        "name": "Shelves",
        "description": """
**Shelves & History**

Your books grouped by status, your favorites, and an audit trail of
status changes, progress updates and reviews.
        """,
    },
    {
        "name": "Feed",
        "description": """
**Page Aggregates**

Whole pages in a single call: the home feed, the my-books page and the
book page. Sections load concurrently and a section that fails to load
comes back empty.
        """,
    },
]

# Rich API description with getting started guide
API_DESCRIPTION = """
# Shelfwise API

**Track what you read, discover what to read next**

---

## Key Features

| Feature | Description |
|---------|-------------|
| **Reading Status** | Want-to-read, reading and finished shelves |
| **Sessions** | Timed reading sessions with pages and minutes |
| **Goals** | Weekly to annual reading targets |
| **Recommendations** | Similar readers, friends and profession based |
| **Feeds** | Home, my-books and book pages in one call |

---

## Authentication

| Method | Header | Use Case |
|--------|--------|----------|
| **JWT Token** | `Authorization: Bearer <token>` | Web/mobile apps |

Tokens are issued by the identity service. The `sub` claim is your user id.

---

## Error Responses

All errors follow this format:
```json
{
  "error": {
    "code": "INVALID_STATE",
    "message": "Human-readable description",
    "details": {...},
    "requestId": "req_abc123"
  }
}
```

| Status | Code | Description |
|--------|------|-------------|
| 401 | UNAUTHORIZED | Missing or invalid token |
| 404 | NOT_FOUND | Resource doesn't exist |
| 409 | INVALID_STATE | Not allowed in the current state |
| 422 | INVALID_ARGUMENT | Argument outside the accepted range |
| 429 | RATE_LIMITED | Too many requests |
| 503 | STORE_FAILURE | The database failed to apply a change |
| 500 | INTERNAL_ERROR | Server error |
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("Starting Shelfwise API", version=settings.app_version, env=settings.environment)
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Shelfwise API")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=API_DESCRIPTION,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Rate limiter state and exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        """Log all incoming requests."""
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        response = await call_next(request)

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response

    # Request ID middleware (registered last so it runs first)
    @app.middleware("http")
    async def add_request_id(request: Request, call_next) -> Response:
        """Add unique request ID to each request for tracing."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        # Bind request ID to structlog context
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Render domain errors in the shared error envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.error_message,
                    "details": exc.details,
                    "requestId": getattr(request.state, "request_id", None),
                }
            },
            headers=exc.headers,
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.exception("Unhandled exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "requestId": getattr(request.state, "request_id", None),
                }
            },
        )

    # Include API router
    app.include_router(api_router, prefix="/v1")

    return app


app = create_app()
