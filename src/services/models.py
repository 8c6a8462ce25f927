"""
Pydantic models for bundle, compare and insight requests, and for the
structured text the assistant returns.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from search.models import Audience, CamelModel


# ============================================================================
# Assistant payloads
# ============================================================================

class ShoppingBrief(CamelModel):
    """What the shopper wants, as understood from query + answer."""
    budget_max: Optional[int] = None
    category: Optional[str] = None
    color: Optional[str] = None
    occasion: Optional[str] = None
    style: Optional[str] = None
    notes: str = ""

    @field_validator("budget_max", mode="before")
    @classmethod
    def coerce_budget(cls, v):
        if v is None or v == "":
            return None
        return int(float(v))


class CompareVerdict(CamelModel):
    verdict: str
    bullets_a: List[str] = Field(default_factory=list)
    bullets_b: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class Alternative(CamelModel):
    id: str
    reason: str


class ProductInsight(CamelModel):
    fit_summary: str
    tradeoffs: List[str] = Field(default_factory=list)
    styling: List[str] = Field(default_factory=list)
    alternatives: List[Alternative] = Field(default_factory=list)


# ============================================================================
# Request Models
# ============================================================================

class BundleRequest(CamelModel):
    """Request body for building tiered outfit bundles."""
    query: str = Field(..., max_length=500)
    audience: Optional[Audience] = None
    scenario_id: Optional[str] = None
    anchor_product_id: Optional[str] = None
    user_answer: Optional[str] = None


class CompareRequest(CamelModel):
    """Request body for a two-product comparison."""
    product_a_id: Optional[str] = None
    product_b_id: Optional[str] = None
    brief: Dict[str, Any] = Field(default_factory=dict)


class InsightRequest(CamelModel):
    """Request body for a single-product insight."""
    product_id: Optional[str] = None
    brief: Dict[str, Any] = Field(default_factory=dict)
    candidate_ids: List[str] = Field(default_factory=list)


# ============================================================================
# Response Models
# ============================================================================

class CartItemResponse(CamelModel):
    id: str
    title: str
    brand: str
    price: int
    image_url: str
    category: str
    color: str
    role: str
    why: str


class BundleResponse(CamelModel):
    name: str
    items: List[CartItemResponse]
    notes: List[str] = Field(default_factory=list)
    strategy: str
    total_price: int


class BundlesResponse(CamelModel):
    """Budget, Balanced and Premium bundles, in that order."""
    scenario_id: Optional[str] = None
    audience: Audience
    anchor_product_id: Optional[str] = None
    carts: List[BundleResponse]


class InsightResponse(CamelModel):
    product_id: str
    insight: ProductInsight
