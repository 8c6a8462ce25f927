"""
Follow-up refinement: constraint deltas and merging.

A follow-up such as "exclude black, under 150" becomes a ConstraintDelta,
either from the assistant or from the local parser below, and is merged
into the constraints of the original query.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from search.models import Constraints, SortBy
from search.vocabulary import COLOR_VOCABULARY, display_name


class ConstraintDelta(BaseModel):
    """New or changed constraints from a follow-up. ``None`` means unchanged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    budget_max: Optional[int] = None
    category: Optional[str] = None
    color_include: Optional[str] = None
    color_exclude: Optional[str] = None
    style: Optional[str] = None
    occasion: Optional[str] = None
    include_keywords: Optional[List[str]] = None
    exclude_keywords: Optional[List[str]] = None
    sort_by: Optional[SortBy] = None

    @field_validator("budget_max", mode="before")
    @classmethod
    def coerce_budget(cls, v):
        # Models sometimes answer "150" or 150.0
        if v is None or v == "":
            return None
        return int(float(v))

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


# ============================================================================
# Local parser
# ============================================================================

_BUDGET_RE = re.compile(r"(?:under|below|less than|upto|up to)\s*(?:\$|usd)?\s*(\d+)")
_EXCLUDE_RE = re.compile(r"\bexclude\s+(\w+)")
_INCLUDE_RE = re.compile(r"\b(?:only|show|in)\s+(\w+)")
_FORMAL_RE = re.compile(r"\bformal\b")
_CASUAL_RE = re.compile(r"\b(?:more relaxed|casual)\b")
_CHEAPEST_RE = re.compile(r"\b(?:cheapest|lowest price)\b")
_PRICIEST_RE = re.compile(r"\b(?:expensive|highest price)\b")

DELTA_CATEGORIES: List[str] = [
    "t-shirts", "shirts", "trousers", "jeans", "blazers",
    "dresses", "sneakers", "loafers", "handbags", "watches",
]


def parse_constraint_delta_local(follow_up: str) -> ConstraintDelta:
    """Deterministic follow-up parser used when the assistant is unavailable."""
    lower = (follow_up or "").lower()
    delta = ConstraintDelta()

    budget = _BUDGET_RE.search(lower)
    if budget:
        delta.budget_max = int(budget.group(1))

    for match in _EXCLUDE_RE.finditer(lower):
        if match.group(1) in COLOR_VOCABULARY:
            delta.color_exclude = display_name(match.group(1))
            break

    for match in _INCLUDE_RE.finditer(lower):
        if match.group(1) in COLOR_VOCABULARY:
            delta.color_include = display_name(match.group(1))
            break

    for category in DELTA_CATEGORIES:
        if re.search(r"\b" + re.escape(category) + r"\b", lower):
            delta.category = display_name(category)
            break

    if _FORMAL_RE.search(lower):
        delta.style = "Formal"
        delta.occasion = "Formal"
    elif _CASUAL_RE.search(lower):
        delta.style = "Casual"
        delta.occasion = "Casual"

    if _CHEAPEST_RE.search(lower):
        delta.sort_by = SortBy.PRICE_ASC
    elif _PRICIEST_RE.search(lower):
        delta.sort_by = SortBy.PRICE_DESC

    return delta


# ============================================================================
# Merge
# ============================================================================

def merge_constraints(existing: Constraints, delta: ConstraintDelta) -> Constraints:
    """
    Apply a delta on top of existing constraints.

    Set delta fields override. An excluded color clears any included color;
    an included color replaces the existing one. The input is not modified.
    """
    merged = existing.copy()

    if delta.budget_max is not None:
        merged.budget_max = delta.budget_max
    if delta.category is not None:
        merged.category = delta.category
    if delta.style is not None:
        merged.style = delta.style
    if delta.occasion is not None:
        merged.occasion = delta.occasion
    if delta.include_keywords is not None:
        merged.include_keywords = list(delta.include_keywords)
    if delta.exclude_keywords is not None:
        merged.exclude_keywords = list(delta.exclude_keywords)
    if delta.sort_by is not None:
        merged.sort_by = delta.sort_by.value

    if delta.color_exclude:
        merged.color_exclude = delta.color_exclude
        merged.color = None
    elif delta.color_include:
        merged.color = delta.color_include
        if merged.color_exclude and merged.color_exclude.lower() == delta.color_include.lower():
            merged.color_exclude = None

    return merged
