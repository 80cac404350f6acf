"""Recommendation API endpoints."""

from fastapi import APIRouter, Query

from app.api.v1.deps import CurrentUser, DBSession
from app.schemas.recommendation import RecommendedBook
from app.services.recommendation_service import RecommendationService

router = APIRouter()


@router.get(
    "",
    response_model=list[RecommendedBook],
    summary="Get personalized recommendations",
    description="""
Get book recommendations from one strategy.

**Filters:**
- `similar` (default) - Books rated by readers who share your preferred genres
- `friends` - Books your friends are reading or rated 4 stars or more
- `profession` - Books many readers rated, boosted when they share your profession

Unknown filters fall back to `similar`. Books you already rated or hold a
status on are never recommended.

Each recommendation carries a `match_percent` between 0 and 99 and a
`reason` whose fields depend on its `kind`.

**Example:**
```bash
curl "/v1/recommendations?filter=friends&limit=5" \\
  -H "Authorization: Bearer <token>"
```
    """,
)
async def get_recommendations(
    current_user: CurrentUser,
    db: DBSession,
    filter: str = Query("similar", description="similar, friends or profession"),
    limit: int = Query(10, ge=1, le=50, description="Number of recommendations"),
) -> list[RecommendedBook]:
    service = RecommendationService(db)
    return await service.get_book_recommendations(current_user.id, filter, limit)
