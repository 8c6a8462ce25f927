"""
Query-conditional exclusion rules layered on top of ordinary filtering.

Guardrails are derived fresh from each query; nothing here holds state
between requests.
"""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from catalog.models import Product
from config.constants import (
    EVENING_CONTEXT_WORDS,
    PINK_KEYWORDS,
    RELAXED_CONTEXT_WORDS,
    TEE_CATEGORIES,
)
from search.vocabulary import build_keyword_pattern

_PINK_PATTERN = build_keyword_pattern(PINK_KEYWORDS)
_SMART_PATTERN = re.compile(r"\bsmart\b", re.IGNORECASE)
_EVENING_PATTERN = build_keyword_pattern(EVENING_CONTEXT_WORDS)
_RELAXED_PATTERN = build_keyword_pattern(RELAXED_CONTEXT_WORDS)


def mentions_pink(text: str) -> bool:
    """True when the text asks for pink or a pink-adjacent color."""
    return bool(_PINK_PATTERN.search(text or ""))


def blocks_pink(query: str, audience: Optional[str]) -> bool:
    """Menswear hides pink unless the shopper asked for it."""
    return audience == "men" and not mentions_pink(query)


def blocks_tees(query: str) -> bool:
    """Smart evening looks drop tees unless the shopper wants it relaxed."""
    text = query or ""
    return (
        bool(_SMART_PATTERN.search(text))
        and bool(_EVENING_PATTERN.search(text))
        and not _RELAXED_PATTERN.search(text)
    )


@dataclass(frozen=True)
class Guardrails:
    """Colors and categories removed from a candidate pool."""

    exclude_colors: FrozenSet[str] = frozenset()
    exclude_categories: FrozenSet[str] = frozenset()

    @classmethod
    def for_search(cls, query: str, audience: Optional[str]) -> "Guardrails":
        colors = frozenset({"pink"}) if blocks_pink(query, audience) else frozenset()
        return cls(exclude_colors=colors)

    @classmethod
    def for_outfit(cls, query: str, audience: Optional[str]) -> "Guardrails":
        colors = frozenset({"pink"}) if blocks_pink(query, audience) else frozenset()
        categories = frozenset(TEE_CATEGORIES) if blocks_tees(query) else frozenset()
        return cls(exclude_colors=colors, exclude_categories=categories)

    @property
    def active(self) -> bool:
        return bool(self.exclude_colors or self.exclude_categories)

    def allows(self, product: Product) -> bool:
        if product.color.lower() in self.exclude_colors:
            return False
        return product.category not in self.exclude_categories

    def describe(self) -> Dict[str, list]:
        return {
            "excludeColors": sorted(self.exclude_colors),
            "excludeCategories": sorted(self.exclude_categories),
        }
