"""
Relevance scoring and result ordering.

Weighted additive model over product fields:

    score = sum over tokens of field matches (+ literal-token bonus)
          + scenario keyword boost
          + alignment with extracted constraints
          + budget headroom bonus

All products reaching this module have passed pre_filter(); nothing here
removes a product.
"""

from itertools import groupby
from typing import List, Optional

from rapidfuzz.distance import Levenshtein

from catalog.models import Product
from catalog.scenarios import SCENARIO_KEYWORDS, SCENARIO_TOKEN_BOOSTS
from config.constants import DEFAULT_SCORING_WEIGHTS, ScoringWeights
from search.models import Constraints, SearchResult, SortBy
from search.tokenizer import base_tokens


def fuzzy_match(field_value: str, token: str, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> bool:
    """
    Tolerate small misspellings of short closed-vocabulary fields.

    Substring containment either way counts as a match; otherwise the edit
    distance must be within both the absolute and relative limits.
    """
    field_lower = field_value.lower()
    token_lower = token.lower()
    if not field_lower or not token_lower:
        return False
    if token_lower in field_lower or field_lower in token_lower:
        return True

    distance = Levenshtein.distance(field_lower, token_lower)
    max_length = max(len(field_lower), len(token_lower))
    return (
        distance <= weights.fuzzy_max_distance
        and distance / max_length < weights.fuzzy_max_ratio
    )


def _is_literal(token: str, original_tokens: List[str]) -> bool:
    return any(orig == token or token in orig or orig in token for orig in original_tokens)


def calculate_score(
    product: Product,
    tokens: List[str],
    constraints: Constraints,
    original_query: str = "",
    weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
) -> float:
    """
    Score a pre-filtered product against the expanded query tokens.

    Args:
        product: Product that already satisfies every hard constraint.
        tokens: Expanded token list from tokenize_query().
        constraints: Constraints extracted from the same query.
        original_query: Un-expanded query; literal tokens earn a bonus.
        weights: Scoring weights.

    Returns:
        Non-negative relevance score.
    """
    score = 0.0

    # Scenario named by the query (applied once)
    keywords = SCENARIO_KEYWORDS.get(product.scenario_id)
    if keywords:
        joined = " ".join(tokens).lower()
        if any(keyword in joined for keyword in keywords):
            score += weights.scenario_boost

    original_tokens = base_tokens(original_query)
    title = product.title.lower()
    brand = product.brand.lower()
    category = product.category.lower()
    color = product.color.lower()
    style = product.style.lower()
    description = product.description.lower()
    tags = [tag.lower() for tag in product.occasion_tags]
    token_boosts = SCENARIO_TOKEN_BOOSTS.get(product.scenario_id, {})

    for token in tokens:
        bonus = weights.original_token_bonus if _is_literal(token, original_tokens) else 0.0

        if token in title:
            score += weights.title + bonus
        if token in brand:
            score += weights.brand + bonus

        if token in category:
            score += weights.category + bonus
        elif fuzzy_match(product.category, token, weights):
            score += weights.category_fuzzy

        if token in color:
            score += weights.color + bonus
        elif fuzzy_match(product.color, token, weights):
            score += weights.color_fuzzy

        if token in style:
            score += weights.style + bonus
        if any(token in tag for tag in tags):
            score += weights.occasion + bonus
        if token in description:
            score += weights.description

        score += token_boosts.get(token, 0.0)

    # Alignment with the extracted brief
    if constraints.category and product.category == constraints.category:
        score += weights.category_alignment
    if constraints.color and product.color == constraints.color:
        score += weights.color_alignment
    if constraints.occasion and constraints.occasion.lower() in tags:
        score += weights.occasion_alignment
    if constraints.style and product.style == constraints.style:
        score += weights.style_alignment

    if constraints.budget_max is not None:
        headroom = constraints.budget_max - product.price
        if headroom > 0:
            score += min(headroom / weights.budget_divisor, weights.budget_cap)

    return max(score, 0.0)


def _score_bands(results: List[SearchResult], tie_threshold: float) -> List[int]:
    """Label score-sorted results with a band index.

    A band opens at its highest score and takes every following result
    within ``tie_threshold`` of it.
    """
    labels: List[int] = []
    band = -1
    leader: Optional[float] = None
    for result in results:
        if leader is None or leader - result.score > tie_threshold:
            band += 1
            leader = result.score
        labels.append(band)
    return labels


def sort_results(
    results: List[SearchResult],
    sort_by: str = SortBy.RELEVANCE.value,
    tie_threshold: float = 5.0,
) -> List[SearchResult]:
    """
    Order results by score, letting price break near-ties only.

    Relevance order is score descending, then product id. For price
    orderings, results whose scores fall in the same band (within
    ``tie_threshold`` of the band's top score) are ordered by price;
    bands themselves stay in score order.
    """
    ranked = sorted(results, key=lambda r: (-r.score, r.product.id))
    if sort_by not in (SortBy.PRICE_ASC.value, SortBy.PRICE_DESC.value):
        return ranked

    direction = 1 if sort_by == SortBy.PRICE_ASC.value else -1
    labels = _score_bands(ranked, tie_threshold)

    ordered: List[SearchResult] = []
    for _, group in groupby(zip(labels, ranked), key=lambda pair: pair[0]):
        members = [result for _, result in group]
        members.sort(key=lambda r: (direction * r.product.price, r.product.id))
        ordered.extend(members)
    return ordered
