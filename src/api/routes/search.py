"""
Search API Routes.

Ranked product search with constraint chips, the audience question and
natural-language follow-ups.

NOTE: Routes use `async def` because the service awaits the optional
assistant call. Ranking itself is synchronous and in-memory.
"""

from fastapi import APIRouter, Depends

from search.models import SearchRequest, SearchResponse
from services.shopping_service import ShoppingService, get_shopping_service

router = APIRouter(prefix="/api", tags=["Search"])


@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_by_alias=True,
    summary="Search products",
)
async def search(
    request: SearchRequest,
    service: ShoppingService = Depends(get_shopping_service),
) -> SearchResponse:
    """
    Search the catalog with a free-text query.

    - **Constraints** are extracted from the query (budget, category, color...)
      and returned with display chips
    - **Audience question** is returned when the audience is unknown and has
      not been asked yet
    - **Follow-ups** (`followUp` + `session`) refine the session's original
      query with a constraint delta
    """
    return await service.search(request)
