"""
Product search: tokenization, constraint extraction, hard filtering,
relevance scoring and follow-up refinement.

Provides:
- search_products: full ranked search over a product list
- extract_constraints / get_constraint_chips: query understanding
- tokenize_query: synonym and typo expansion
- merge_constraints / parse_constraint_delta_local: follow-up refinement
"""

from search.constraint_extractor import (
    detect_intent,
    extract_constraints,
    get_constraint_chips,
    infer_audience,
)
from search.engine import detect_scenario, search_products
from search.models import Constraints, SearchResult, ShopperIntent, SortBy
from search.refinement import ConstraintDelta, merge_constraints, parse_constraint_delta_local
from search.tokenizer import tokenize_query

__all__ = [
    "Constraints",
    "ConstraintDelta",
    "SearchResult",
    "ShopperIntent",
    "SortBy",
    "detect_intent",
    "detect_scenario",
    "extract_constraints",
    "get_constraint_chips",
    "infer_audience",
    "merge_constraints",
    "parse_constraint_delta_local",
    "search_products",
    "tokenize_query",
]
