"""
Cart API Routes.

Builds Budget / Balanced / Premium outfit bundles for a query.
"""

from fastapi import APIRouter, Depends

from services.models import BundleRequest, BundlesResponse
from services.shopping_service import ShoppingService, get_shopping_service

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.post(
    "/build",
    response_model=BundlesResponse,
    response_model_by_alias=True,
    summary="Build tiered outfit bundles",
)
async def build_cart(
    request: BundleRequest,
    service: ShoppingService = Depends(get_shopping_service),
) -> BundlesResponse:
    """
    Build exactly three bundles of three role-tagged items.

    Returns 422 with diagnostics when the scenario/audience pool cannot
    produce complete bundles.
    """
    return await service.build_bundles(request)
