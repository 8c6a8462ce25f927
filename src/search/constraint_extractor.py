"""
Constraint extraction from free-text queries.

Extraction is a fixed, ordered list of small rule functions. Each rule reads
the query (raw and typo-corrected) plus the constraints found so far and
returns one optional field value. Rules are pure: the same query and
audience always give the same Constraints.

Examples:
    "black shirts under 2000"  -> category=Shirts, color=Black, budget_max=2000
    "exclude black sneakers"   -> category=Sneakers, color_exclude=Black
    "shoes for men"            -> include_keywords=[Sneakers, Loafers, Derbies]
"""

import re
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

from config.constants import FOOTWEAR_BY_AUDIENCE, FOOTWEAR_CATEGORIES
from core.logging import get_logger
from search.models import Constraints, ShopperIntent
from search.vocabulary import (
    AUDIENCE_CUES,
    CATEGORY_VOCABULARY,
    COLOR_EXCLUSION_PREFIXES,
    COLOR_VOCABULARY,
    GENDER_KEYWORDS,
    GOAL_CONTEXT_WORDS,
    GOAL_PHRASES,
    OCCASION_VOCABULARY,
    STYLE_VOCABULARY,
    TYPO_CORRECTIONS,
    build_keyword_pattern,
    display_name,
)

logger = get_logger(__name__)


class QueryText(NamedTuple):
    raw: str
    normalized: str
    audience: Optional[str]


# ============================================================================
# Compiled patterns
# ============================================================================

_TYPO_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\b" + re.escape(typo) + r"\b", re.IGNORECASE), fix)
    for typo, fix in TYPO_CORRECTIONS.items()
]

# First match wins
_BUDGET_PATTERNS: List[re.Pattern] = [
    re.compile(r"(?:under|below|less than|max|maximum|upto|up to)\s*(?:\$|usd|dollars?)?\s*(\d+)", re.IGNORECASE),
    re.compile(r"(?:\$|usd|dollars?)\s*(\d+)\s*(?:and|or)\s*(?:below|under|less)", re.IGNORECASE),
    re.compile(r"(?:\$|usd|dollars?)\s*(\d+)\s*(?:max|maximum)", re.IGNORECASE),
    re.compile(r"(?:\$|usd|dollars?)\s*(\d+)", re.IGNORECASE),
]

_CATEGORY_PATTERNS: List[Tuple[str, re.Pattern]] = [
    (term, build_keyword_pattern([term])) for term in CATEGORY_VOCABULARY
]

_COLOR_EXCLUSION_PATTERNS: List[re.Pattern] = [
    re.compile(r"\b" + prefix + r"\s+(\w+)", re.IGNORECASE)
    for prefix in COLOR_EXCLUSION_PREFIXES
]

_COLOR_PATTERNS: List[Tuple[str, re.Pattern]] = [
    (color, build_keyword_pattern([color])) for color in COLOR_VOCABULARY
]

_AUDIENCE_PATTERNS: List[Tuple[str, re.Pattern]] = [
    (audience, build_keyword_pattern(cues)) for audience, cues in AUDIENCE_CUES
]

_GOAL_PHRASE_PATTERN = build_keyword_pattern(GOAL_PHRASES)


# ============================================================================
# Rules
# ============================================================================

def normalize_query(query: str) -> str:
    """Lowercase the query and apply the typo table to whole words."""
    normalized = query.lower()
    for pattern, fix in _TYPO_PATTERNS:
        normalized = pattern.sub(fix, normalized)
    return normalized


def extract_budget(text: QueryText, found: Constraints) -> Optional[int]:
    for pattern in _BUDGET_PATTERNS:
        match = pattern.search(text.raw)
        if match:
            return int(match.group(1))
    return None


def extract_category(text: QueryText, found: Constraints) -> Optional[str]:
    for term, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text.normalized):
            return display_name(term)
    return None


def extract_footwear_keywords(text: QueryText, found: Constraints) -> Optional[List[str]]:
    """Generic "shoe" with no specific category becomes an OR over footwear."""
    if found.category is not None or "shoe" not in text.normalized:
        return None
    if text.audience in FOOTWEAR_BY_AUDIENCE:
        return list(FOOTWEAR_BY_AUDIENCE[text.audience])
    return list(FOOTWEAR_CATEGORIES)


def extract_color_exclusion(text: QueryText, found: Constraints) -> Optional[str]:
    for pattern in _COLOR_EXCLUSION_PATTERNS:
        for match in pattern.finditer(text.normalized):
            word = match.group(1).lower()
            if word in COLOR_VOCABULARY:
                return display_name(word)
    return None


def extract_color(text: QueryText, found: Constraints) -> Optional[str]:
    if found.color_exclude is not None:
        return None
    for color, pattern in _COLOR_PATTERNS:
        if pattern.search(text.normalized):
            return display_name(color)
    return None


def _first_substring(vocabulary: List[str], text: str) -> Optional[str]:
    for term in vocabulary:
        if term in text:
            return display_name(term)
    return None


def extract_occasion(text: QueryText, found: Constraints) -> Optional[str]:
    return _first_substring(OCCASION_VOCABULARY, text.normalized)


def extract_style(text: QueryText, found: Constraints) -> Optional[str]:
    return _first_substring(STYLE_VOCABULARY, text.normalized)


def extract_gender(text: QueryText, found: Constraints) -> Optional[str]:
    for gender, words in GENDER_KEYWORDS:
        if any(word in text.normalized for word in words):
            return gender
    return None


Rule = Callable[[QueryText, Constraints], Any]

# Applied in order; later rules may read fields set by earlier ones
EXTRACTION_RULES: List[Tuple[str, Rule]] = [
    ("budget_max", extract_budget),
    ("category", extract_category),
    ("include_keywords", extract_footwear_keywords),
    ("color_exclude", extract_color_exclusion),
    ("color", extract_color),
    ("occasion", extract_occasion),
    ("style", extract_style),
    ("gender", extract_gender),
]


def extract_constraints(query: str, audience: Optional[str] = None) -> Constraints:
    """
    Turn a free-text query into structured Constraints.

    Args:
        query: Raw shopper query.
        audience: Known audience; narrows the footwear list for "shoe" queries.
    """
    text = QueryText(raw=query, normalized=normalize_query(query), audience=audience)
    constraints = Constraints()
    for field_name, rule in EXTRACTION_RULES:
        value = rule(text, constraints)
        if value is not None:
            setattr(constraints, field_name, value)

    logger.debug("Extracted constraints", query=query, constraints=constraints.to_dict())
    return constraints


# ============================================================================
# Audience, intent and chips
# ============================================================================

def infer_audience(query: str) -> Optional[str]:
    """Light audience heuristics: men, then women, then unisex accessories."""
    for audience, pattern in _AUDIENCE_PATTERNS:
        if pattern.search(query):
            return audience
    return None


def detect_intent(query: str) -> ShopperIntent:
    lower = query.lower().strip()

    if _GOAL_PHRASE_PATTERN.search(lower):
        return ShopperIntent.GOAL
    if any(word in lower for word in GOAL_CONTEXT_WORDS):
        return ShopperIntent.GOAL
    if len(lower.split()) <= 2:
        return ShopperIntent.AMBIGUOUS
    return ShopperIntent.CLEAR


def get_constraint_chips(constraints: Constraints) -> List[str]:
    """Short labels for the active constraints, in display order."""
    chips: List[str] = []
    if constraints.budget_max:
        chips.append(f"Under ${constraints.budget_max}")
    if constraints.category:
        chips.append(constraints.category)
    if constraints.color:
        chips.append(constraints.color)
    if constraints.color_exclude:
        chips.append(f"Exclude {constraints.color_exclude}")
    chips.extend(f"Exclude {category}" for category in constraints.exclude_categories)
    if constraints.occasion:
        chips.append(constraints.occasion)
    if constraints.style:
        chips.append(constraints.style)
    if constraints.gender:
        chips.append(constraints.gender)
    chips.extend(f"Only {keyword}" for keyword in constraints.include_keywords)
    chips.extend(f"No {keyword}" for keyword in constraints.exclude_keywords)
    return chips
