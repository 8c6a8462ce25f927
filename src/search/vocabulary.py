"""
Search vocabularies: typo corrections, synonyms and the closed value sets
the constraint extractor recognizes.

Kept as plain data so they can be extended and tested independently of the
tokenizer and extractor.
"""

import re
from typing import Dict, Iterable, List, Set, Tuple


# ============================================================================
# Tokenizer tables
# ============================================================================

STOP_WORDS: Set[str] = {"the", "and", "or", "for", "with", "under", "below", "max"}

# Tokens of this length or shorter carry no signal
MIN_TOKEN_LENGTH = 3

TYPO_CORRECTIONS: Dict[str, str] = {
    "snikers": "sneakers",
    "sniker": "sneaker",
    "trainers": "sneakers",
    "trainer": "sneaker",
}

SYNONYMS: Dict[str, List[str]] = {
    "shoe": ["sneaker", "loafer", "derby", "heel", "flat", "footwear"],
    "shoes": ["sneakers", "trainers", "athletic shoes", "runners", "footwear"],
    "sneaker": ["sneakers", "trainers", "athletic shoes", "runners"],
    "snikers": ["sneakers", "sneaker"],
    "sneakers": ["sneaker", "trainers", "athletic shoes", "runners"],
    "shirt": ["shirts", "blouse", "top", "tee", "t-shirt"],
    "shirts": ["shirt", "blouse", "top", "tee", "t-shirt"],
    "pants": ["trousers", "chinos", "jeans", "slacks"],
    "trousers": ["pants", "chinos", "jeans", "slacks"],
    "jacket": ["blazer", "coat", "outerwear"],
    "blazer": ["jacket", "coat", "blazers"],
    "bag": ["handbag", "purse", "clutch", "tote"],
    "handbag": ["bag", "purse", "clutch", "tote"],
    "purse": ["handbag", "bag", "clutch", "tote"],
}


# ============================================================================
# Constraint vocabularies
# ============================================================================

# Compound forms come first so "t-shirts" is not read as "shirts"
CATEGORY_VOCABULARY: List[str] = [
    "t-shirts", "t shirts", "shirts", "trousers", "jeans", "blazers",
    "dresses", "sneakers", "loafers", "derbies", "heels", "flats",
    "handbags", "watches", "polos", "chinos", "blouses", "skirts",
    "clutches", "overshirts", "hoodies", "jackets", "backpacks",
    "sunglasses", "beanies", "tees",
]

COLOR_VOCABULARY: List[str] = [
    "black", "white", "navy", "gray", "grey", "beige", "brown", "blue",
    "red", "green", "pink", "purple", "yellow", "orange", "maroon", "olive",
]

COLOR_EXCLUSION_PREFIXES: List[str] = ["no", "exclude", "without", "not"]

OCCASION_VOCABULARY: List[str] = [
    "casual", "formal", "party", "work", "wedding",
    "sports", "travel", "evening", "beach", "office",
]

STYLE_VOCABULARY: List[str] = [
    "minimalist", "vintage", "contemporary", "bohemian",
    "classic", "streetwear", "elegant", "sporty",
]

# Checked in order; "women"/"female" first since they contain "men"/"male"
GENDER_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("Women", ["women", "female", "ladies"]),
    ("Men", ["men", "male", "gents"]),
]


# ============================================================================
# Audience and intent cues
# ============================================================================

AUDIENCE_CUES: List[Tuple[str, List[str]]] = [
    ("men", ["men", "mens", "for my husband", "for my boyfriend", "for him"]),
    ("women", [
        "women", "womens", "dress", "dresses", "heels",
        "for my wife", "for my girlfriend", "for her",
    ]),
    ("unisex", ["backpack", "backpacks", "beanie", "beanies", "gloves", "sunglasses"]),
]

GOAL_PHRASES: List[str] = [
    "i need", "help me", "for my", "looking for", "want to", "i want",
    "trying to", "need to", "i have", "i'm going", "i'm attending",
    "attending", "going to",
]

GOAL_CONTEXT_WORDS: List[str] = [
    "date night", "wedding", "dinner", "party", "event", "occasion",
    "weekend", "evening", "night out", "meeting", "interview",
    "celebration", "vacation", "travel", "trip",
]


def display_name(term: str) -> str:
    """Catalog casing for a vocabulary term ("t shirts" -> "T-Shirts")."""
    if term in ("t-shirts", "t shirts"):
        return "T-Shirts"
    if term == "grey":
        return "Gray"
    return term[:1].upper() + term[1:]


def build_keyword_pattern(keywords: Iterable[str]) -> re.Pattern:
    """Build a single compiled regex that matches any keyword at word boundaries.

    Sorts keywords longest-first so multi-word phrases match before their
    component words.
    """
    sorted_kws = sorted(set(keywords), key=len, reverse=True)
    parts = [r"\b" + re.escape(kw) + r"\b" for kw in sorted_kws]
    return re.compile("|".join(parts), re.IGNORECASE)
