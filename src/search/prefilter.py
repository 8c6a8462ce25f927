"""
Hard-constraint filter applied before scoring.

This is the only place correctness constraints are enforced; the scorer
assumes every product it sees has already passed here.
"""

from typing import Optional

from catalog.models import Product
from config.constants import AUDIENCE_CATEGORIES
from search.models import Constraints


def in_audience(product: Product, audience: Optional[str]) -> bool:
    """True when the product's category is visible to the audience."""
    if not audience or audience not in AUDIENCE_CATEGORIES:
        return True
    return product.category in AUDIENCE_CATEGORIES[audience]


def pre_filter(product: Product, constraints: Constraints, audience: Optional[str] = None) -> bool:
    """
    Check one product against every active hard constraint.

    Checks run in a fixed order and stop at the first failure:
    audience whitelist, budget, category, color, color exclusion,
    include keywords, exclude keywords, excluded categories, occasion, style.
    """
    if not in_audience(product, audience):
        return False

    if constraints.budget_max is not None and product.price > constraints.budget_max:
        return False

    if constraints.category and product.category != constraints.category:
        return False

    if constraints.color and product.color != constraints.color:
        return False

    if constraints.color_exclude and product.color.lower() == constraints.color_exclude.lower():
        return False

    if constraints.include_keywords:
        category = product.category.lower()
        if not any(category == keyword.lower() for keyword in constraints.include_keywords):
            return False
        # Keyword lists may name categories outside the audience
        if not in_audience(product, audience):
            return False

    if constraints.exclude_keywords:
        text = " ".join([product.title, product.description, product.category, product.color]).lower()
        if any(keyword.lower() in text for keyword in constraints.exclude_keywords):
            return False

    if constraints.exclude_categories and product.category in constraints.exclude_categories:
        return False

    if constraints.occasion:
        occasion = constraints.occasion.lower()
        if not any(tag.lower() == occasion for tag in product.occasion_tags):
            return False

    if constraints.style and product.style != constraints.style:
        return False

    return True
