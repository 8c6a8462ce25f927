"""
Product search pipeline.

    query -> extract_constraints + tokenize_query -> pre_filter
          -> guardrails -> calculate_score -> sort_results -> top N

Pure and synchronous: the same catalog, query, audience and sort order
always produce the same ordered list.
"""

import time
from typing import List, Optional, Sequence

from catalog.models import Product
from core.logging import get_logger
from search.constraint_extractor import extract_constraints
from search.guardrails import Guardrails
from search.models import Constraints, SearchResult, SortBy
from search.prefilter import pre_filter
from search.scoring import calculate_score, sort_results
from search.tokenizer import tokenize_query

logger = get_logger(__name__)

DEFAULT_LIMIT = 24


def search_products(
    products: Sequence[Product],
    query: str,
    limit: int = DEFAULT_LIMIT,
    audience: Optional[str] = None,
    sort_by: Optional[str] = None,
    constraints: Optional[Constraints] = None,
    tie_threshold: float = 5.0,
    guardrail_text: Optional[str] = None,
) -> List[SearchResult]:
    """
    Rank products for a free-text query.

    Args:
        products: Catalog to search.
        query: Free-text query. Blank queries return no results.
        limit: Maximum results to return.
        audience: Restricts results to the audience's categories.
        sort_by: Optional ordering; overrides the constraints' own sort_by.
        constraints: Pre-built constraints (follow-up refinement). Extracted
            from the query when omitted.
        tie_threshold: Score gap within which price may reorder results.
        guardrail_text: Everything the shopper said this turn (query plus
            follow-up or answer). Defaults to the query.

    Returns:
        At most ``limit`` SearchResults, best first.
    """
    if not query or not query.strip():
        return []

    start = time.time()
    tokens = tokenize_query(query)
    active = constraints.copy() if constraints is not None else extract_constraints(query, audience)
    if sort_by:
        active.sort_by = SortBy(sort_by).value

    # A pink color constraint counts as asking for pink
    shopper_text = " ".join(filter(None, [guardrail_text or query, active.color]))
    guardrails = Guardrails.for_search(shopper_text, audience)
    candidates = [
        product for product in products
        if pre_filter(product, active, audience) and guardrails.allows(product)
    ]

    scored = [
        SearchResult(product=product, score=calculate_score(product, tokens, active, query))
        for product in candidates
    ]
    results = sort_results(scored, active.sort_by, tie_threshold)[:limit]

    logger.info(
        "Search completed",
        query=query,
        audience=audience,
        sort_by=active.sort_by,
        candidates=len(candidates),
        returned=len(results),
        elapsed_ms=round((time.time() - start) * 1000, 2),
    )
    return results


def detect_scenario(results: Sequence[SearchResult]) -> Optional[str]:
    """Scenario of the top-ranked result, if any."""
    if not results:
        return None
    return results[0].product.scenario_id or None

