"""
Search data types and the pydantic models for the search API.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog.models import Product


Audience = Literal["men", "women", "unisex"]


# ============================================================================
# Enums
# ============================================================================

class SortBy(str, Enum):
    """Result ordering requested by the shopper."""
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class ShopperIntent(str, Enum):
    """How much the shopper has told us."""
    CLEAR = "CLEAR"          # Specific enough to search directly
    AMBIGUOUS = "AMBIGUOUS"  # One or two words ("sneakers")
    GOAL = "GOAL"            # Describes an occasion or need ("I need a wedding outfit")


# ============================================================================
# Domain types
# ============================================================================

@dataclass
class Constraints:
    """Structured shopping constraints inferred from a query.

    ``color`` and ``color_exclude`` are never both set by one extraction.
    """

    budget_max: Optional[int] = None
    category: Optional[str] = None
    color: Optional[str] = None
    color_exclude: Optional[str] = None
    occasion: Optional[str] = None
    style: Optional[str] = None
    gender: Optional[str] = None
    include_keywords: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)
    exclude_categories: List[str] = field(default_factory=list)
    sort_by: str = SortBy.RELEVANCE.value

    def copy(self) -> "Constraints":
        return replace(
            self,
            include_keywords=list(self.include_keywords),
            exclude_keywords=list(self.exclude_keywords),
            exclude_categories=list(self.exclude_categories),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Normalized constraints shown to (and removable by) the shopper."""
        return {
            "budgetMax": self.budget_max,
            "category": self.category,
            "color": self.color,
            "colorExclude": self.color_exclude,
            "occasion": self.occasion,
            "style": self.style,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_public_dict()
        data.update({
            "gender": self.gender,
            "includeKeywords": list(self.include_keywords),
            "excludeKeywords": list(self.exclude_keywords),
            "excludeCategories": list(self.exclude_categories),
            "sortBy": self.sort_by,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Constraints":
        """Read camelCase constraints sent back by the client."""
        budget = data.get("budgetMax")
        return cls(
            budget_max=int(budget) if budget is not None else None,
            category=data.get("category"),
            color=data.get("color"),
            color_exclude=data.get("colorExclude"),
            occasion=data.get("occasion"),
            style=data.get("style"),
            gender=data.get("gender"),
            include_keywords=list(data.get("includeKeywords") or []),
            exclude_keywords=list(data.get("excludeKeywords") or []),
            exclude_categories=list(data.get("excludeCategories") or []),
            sort_by=SortBy(data.get("sortBy") or SortBy.RELEVANCE.value).value,
        )


@dataclass(frozen=True)
class SearchResult:
    product: Product
    score: float


# ============================================================================
# Request Models
# ============================================================================

class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionState(CamelModel):
    """Conversation state echoed between search turns."""
    original_query: str = ""
    asked: bool = False
    audience: Optional[Audience] = None


class SearchRequest(CamelModel):
    """Request body for product search."""
    query: str = Field(..., max_length=500, description="Free-text search query")
    audience: Optional[Audience] = Field(None, description="Known audience, if any")
    sort_by: SortBy = Field(SortBy.RELEVANCE, description="Result ordering")
    user_answer: Optional[str] = Field(None, description="Answer to the assistant's question")
    session: Optional[SessionState] = None
    follow_up: Optional[str] = Field(None, description="Natural-language refinement")
    constraints_override: Optional[Dict[str, Any]] = Field(
        None, description="Previously extracted constraints to refine instead of re-extracting"
    )
    limit: Optional[int] = Field(None, ge=1, le=100)


# ============================================================================
# Response Models
# ============================================================================

class ProductResult(CamelModel):
    """A single product in search results."""
    id: str
    title: str
    brand: str
    price: int
    image_url: str
    category: str
    color: str
    scenario_id: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)


class ConstraintsPayload(CamelModel):
    budget_max: Optional[int] = None
    category: Optional[str] = None
    color: Optional[str] = None
    color_exclude: Optional[str] = None
    occasion: Optional[str] = None
    style: Optional[str] = None


class SearchResponse(CamelModel):
    """Search response: ranked products plus what we understood."""
    intent: ShopperIntent
    assistant_question: Optional[str] = None
    session: Optional[SessionState] = None
    audience: Optional[Audience] = None
    scenario_id: Optional[str] = None
    constraints: ConstraintsPayload
    chips: List[str] = Field(default_factory=list)
    results: List[ProductResult] = Field(default_factory=list)
