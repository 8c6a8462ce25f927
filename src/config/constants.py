"""
Application constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass
from typing import Dict, List, Set, Tuple


# =============================================================================
# Audiences
# =============================================================================

AUDIENCES: Tuple[str, ...] = ("men", "women", "unisex")

# Categories visible to each audience. A product's category must belong to
# its audience's list, and searches scoped to an audience never leave it.
AUDIENCE_CATEGORIES: Dict[str, List[str]] = {
    "men": [
        "Shirts", "Polos", "Chinos", "Jeans", "Tees",
        "Blazers", "Sneakers", "Loafers", "Derbies",
    ],
    "women": [
        "Dresses", "Blouses", "Trousers", "Skirts", "Tees",
        "Blazers", "Sneakers", "Flats", "Heels", "Clutches",
    ],
    "unisex": [
        "Tees", "Overshirts", "Hoodies", "Jackets", "Trousers",
        "Sneakers", "Backpacks", "Sunglasses", "Beanies",
    ],
}

# Footwear used for the generic "shoe" query, per audience
FOOTWEAR_CATEGORIES: List[str] = ["Sneakers", "Loafers", "Derbies", "Heels", "Flats"]

FOOTWEAR_BY_AUDIENCE: Dict[str, List[str]] = {
    "men": ["Sneakers", "Loafers", "Derbies"],
    "women": ["Sneakers", "Flats", "Heels"],
    "unisex": ["Sneakers"],
}

# Categories sold without size/fit
ACCESSORY_CATEGORIES: Set[str] = {
    "Watches",
    "Handbags",
    "Clutches",
    "Sunglasses",
    "Beanies",
    "Backpacks",
}


# =============================================================================
# Guardrails
# =============================================================================

# Query words that lift the "no pink for men" guardrail
PINK_KEYWORDS: List[str] = ["pink", "magenta", "pastel", "bold", "pop color"]

# "smart" + one of these (and no relaxed word) removes tees from outfits
EVENING_CONTEXT_WORDS: List[str] = ["evening", "dinner", "party", "night", "date", "cocktail"]
RELAXED_CONTEXT_WORDS: List[str] = ["casual", "relaxed"]
TEE_CATEGORIES: Set[str] = {"Tees", "T-Shirts"}


# =============================================================================
# Search Scoring Weights
# =============================================================================

@dataclass(frozen=True)
class ScoringWeights:
    """Additive weights for the relevance score."""

    # Per-token field matches
    title: float = 10.0
    brand: float = 8.0
    category: float = 7.0
    category_fuzzy: float = 5.0
    color: float = 6.0
    color_fuzzy: float = 4.0
    style: float = 5.0
    occasion: float = 4.0
    description: float = 2.0

    # Literal (un-expanded) query token bonus
    original_token_bonus: float = 2.0

    # Product scenario named by the query
    scenario_boost: float = 15.0

    # Product fields equal to extracted constraints
    category_alignment: float = 5.0
    color_alignment: float = 4.0
    occasion_alignment: float = 3.0
    style_alignment: float = 3.0

    # Budget headroom bonus: min((budget - price) / divisor, cap)
    budget_divisor: float = 100.0
    budget_cap: float = 5.0

    # Fuzzy match limits (edit distance)
    fuzzy_max_distance: int = 2
    fuzzy_max_ratio: float = 0.3


DEFAULT_SCORING_WEIGHTS = ScoringWeights()


# =============================================================================
# Bundle Assembly
# =============================================================================

TIER_NAMES: Tuple[str, ...] = ("Budget", "Balanced", "Premium")

BUNDLE_NOTES: Dict[str, List[str]] = {
    "Budget": [
        "Affordable options that don't compromise on style",
        "Perfect for everyday wear",
        "Great value for money",
    ],
    "Balanced": [
        "Great value with quality and style",
        "Versatile pieces for multiple occasions",
        "Balanced price-to-quality ratio",
    ],
    "Premium": [
        "Premium quality and design",
        "Investment pieces for your wardrobe",
        "Top-tier materials and craftsmanship",
    ],
}


@dataclass(frozen=True)
class BundleConfig:
    """Configuration for tiered outfit assembly."""

    items_per_bundle: int = 3

    # Price band cut points as fractions of the pool's price range
    lower_cut: float = 0.33
    upper_cut: float = 0.67

    # Role candidate scoring
    tier_alignment: float = 10.0
    occasion_alignment: float = 5.0
    formality_alignment: float = 5.0
    delivery_cohesion: float = 3.0
    delivery_window_days: int = 2

    # Fill order for the generic role classifier
    fallback_role_order: Tuple[str, ...] = ("primary", "top", "bottom", "footwear", "addOn")


DEFAULT_BUNDLE_CONFIG = BundleConfig()
