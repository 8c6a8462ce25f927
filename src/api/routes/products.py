"""
Product API Routes.

Product lookup, two-product comparison and single-product insight.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from services.models import CompareRequest, CompareVerdict, InsightRequest, InsightResponse
from services.shopping_service import ShoppingService, get_shopping_service

router = APIRouter(prefix="/api", tags=["Products"])


@router.get("/products/{product_id}", summary="Get a product")
async def get_product(
    product_id: str,
    service: ShoppingService = Depends(get_shopping_service),
) -> Dict[str, Any]:
    return service.get_product(product_id).to_dict()


@router.post(
    "/compare/verdict",
    response_model=CompareVerdict,
    response_model_by_alias=True,
    summary="Compare two products",
)
async def compare_verdict(
    request: CompareRequest,
    service: ShoppingService = Depends(get_shopping_service),
) -> CompareVerdict:
    return await service.compare(request)


@router.post(
    "/product/insight",
    response_model=InsightResponse,
    response_model_by_alias=True,
    summary="Product insight and alternatives",
)
async def product_insight(
    request: InsightRequest,
    service: ShoppingService = Depends(get_shopping_service),
) -> InsightResponse:
    """Fit summary, tradeoffs, styling tips and up to two in-scope alternatives."""
    return await service.product_insight(request)
