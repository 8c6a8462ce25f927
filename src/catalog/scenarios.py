"""
Shopping scenarios and their hero products.

A scenario scopes a slice of the catalog (60 products per audience), the
keywords that boost it in search, and the role templates used to dress it.
Hero products have fixed ids and hand-picked attributes; the rest of each
slice is generated from the scenario's palette and price range.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class HeroProduct:
    id: str
    category: str
    color: str
    title: str
    bundle_role: str
    price: int


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    prefix: str
    formality: str
    palette: str
    colors: Tuple[str, ...]
    price_min: int
    price_max: int
    occasion_tags: Tuple[str, ...]
    delivery_min: int
    delivery_max: int
    season: str
    heroes: Dict[str, Tuple[HeroProduct, ...]]

    def hero_for(self, audience: str, index: int) -> Optional[HeroProduct]:
        heroes = self.heroes.get(audience, ())
        if index < len(heroes):
            return heroes[index]
        return None


AUDIENCE_PREFIXES: Dict[str, str] = {"men": "men", "women": "wom", "unisex": "uni"}


def product_id(scenario: Scenario, audience: str, index: int) -> str:
    """Stable product id: prod-<scenario>-<audience>-NNN (1-based)."""
    return f"prod-{scenario.prefix}-{AUDIENCE_PREFIXES[audience]}-{index + 1:03d}"


def _h(pid: str, category: str, color: str, title: str, role: str, price: int) -> HeroProduct:
    return HeroProduct(pid, category, color, title, role, price)


SCENARIOS: List[Scenario] = [
    Scenario(
        id="nyc_dinner",
        name="NYC Work Dinner",
        prefix="nyc",
        formality="smart_casual",
        palette="neutral",
        colors=("Navy", "Gray", "Black", "White", "Beige"),
        price_min=89,
        price_max=450,
        occasion_tags=("Work", "Evening", "Office"),
        delivery_min=1,
        delivery_max=2,
        season="all",
        heroes={
            "men": (
                _h("prod-nyc-men-001", "Blazers", "Navy", "Navy Smart Blazer", "anchor", 289),
                _h("prod-nyc-men-002", "Shirts", "White", "Crisp White Dress Shirt", "core", 89),
                _h("prod-nyc-men-003", "Chinos", "Gray", "Gray Chino Trousers", "core", 129),
                _h("prod-nyc-men-004", "Loafers", "Brown", "Brown Leather Loafers", "core", 199),
                _h("prod-nyc-men-005", "Shirts", "Navy", "Navy Button-Down Shirt", "add_on", 79),
                _h("prod-nyc-men-006", "Blazers", "Black", "Classic Black Blazer", "add_on", 279),
            ),
            "women": (
                _h("prod-nyc-wom-001", "Blazers", "Navy", "Navy Tailored Blazer", "anchor", 299),
                _h("prod-nyc-wom-002", "Blouses", "White", "Silk White Blouse", "core", 89),
                _h("prod-nyc-wom-003", "Trousers", "Gray", "Gray Wide-Leg Trousers", "core", 119),
                _h("prod-nyc-wom-004", "Heels", "Black", "Black Pumps", "core", 149),
                _h("prod-nyc-wom-005", "Clutches", "Black", "Evening Clutch", "add_on", 89),
                _h("prod-nyc-wom-006", "Dresses", "Navy", "Navy Wrap Dress", "add_on", 159),
            ),
            "unisex": (
                _h("prod-nyc-uni-001", "Blazers", "Navy", "Unisex Navy Blazer", "anchor", 269),
                _h("prod-nyc-uni-002", "Overshirts", "White", "White Overshirt", "core", 79),
                _h("prod-nyc-uni-003", "Trousers", "Gray", "Gray Tailored Trousers", "core", 109),
                _h("prod-nyc-uni-004", "Sneakers", "White", "White Minimalist Sneakers", "core", 129),
                _h("prod-nyc-uni-005", "Backpacks", "Black", "Leather Backpack", "add_on", 199),
                _h("prod-nyc-uni-006", "Sunglasses", "Black", "Classic Aviators", "add_on", 89),
            ),
        },
    ),
    Scenario(
        id="summer_wedding",
        name="Summer Outdoor Wedding",
        prefix="wed",
        formality="festive",
        palette="warm",
        colors=("Beige", "Navy", "Pink", "White", "Yellow"),
        price_min=79,
        price_max=350,
        occasion_tags=("Wedding", "Party", "Evening"),
        delivery_min=2,
        delivery_max=5,
        season="summer",
        heroes={
            "men": (
                _h("prod-wed-men-001", "Blazers", "Navy", "Navy Linen Blazer", "anchor", 249),
                _h("prod-wed-men-002", "Shirts", "White", "White Linen Shirt", "core", 89),
                _h("prod-wed-men-003", "Chinos", "Beige", "Beige Chinos", "core", 119),
                _h("prod-wed-men-004", "Loafers", "Brown", "Brown Suede Loafers", "core", 149),
                _h("prod-wed-men-005", "Polos", "Navy", "Navy Polo Shirt", "add_on", 69),
                _h("prod-wed-men-006", "Derbies", "Brown", "Brown Leather Derbies", "add_on", 179),
            ),
            "women": (
                _h("prod-wed-wom-001", "Dresses", "Beige", "Elegant Beige Midi Dress", "anchor", 189),
                _h("prod-wed-wom-002", "Blazers", "Navy", "Navy Summer Blazer", "core", 249),
                _h("prod-wed-wom-003", "Heels", "Nude", "Nude Heels", "core", 129),
                _h("prod-wed-wom-004", "Clutches", "Beige", "Beige Clutch Bag", "add_on", 89),
                _h("prod-wed-wom-005", "Dresses", "Pink", "Floral Pink Dress", "add_on", 159),
                _h("prod-wed-wom-006", "Blouses", "White", "White Floral Blouse", "add_on", 79),
            ),
            "unisex": (
                _h("prod-wed-uni-001", "Jackets", "Beige", "Beige Linen Jacket", "anchor", 199),
                _h("prod-wed-uni-002", "Overshirts", "White", "White Linen Overshirt", "core", 89),
                _h("prod-wed-uni-003", "Trousers", "Navy", "Navy Linen Trousers", "core", 119),
                _h("prod-wed-uni-004", "Sneakers", "White", "White Canvas Sneakers", "core", 99),
                _h("prod-wed-uni-005", "Sunglasses", "Brown", "Brown Aviators", "add_on", 79),
                _h("prod-wed-uni-006", "Backpacks", "Beige", "Beige Canvas Backpack", "add_on", 89),
            ),
        },
    ),
    Scenario(
        id="biz_travel",
        name="Business Travel Capsule",
        prefix="trv",
        formality="smart_casual",
        palette="neutral",
        colors=("Navy", "Gray", "Black", "White", "Beige"),
        price_min=59,
        price_max=320,
        occasion_tags=("Travel", "Work", "Office"),
        delivery_min=1,
        delivery_max=3,
        season="all",
        heroes={
            "men": (
                _h("prod-trv-men-001", "Blazers", "Navy", "Wrinkle-Free Travel Blazer", "anchor", 279),
                _h("prod-trv-men-002", "Shirts", "White", "Non-Iron Dress Shirt", "core", 79),
                _h("prod-trv-men-003", "Chinos", "Navy", "Stretch Travel Chinos", "core", 119),
                _h("prod-trv-men-004", "Sneakers", "White", "Comfortable White Sneakers", "core", 129),
                _h("prod-trv-men-005", "Shirts", "Blue", "Wrinkle-Resistant Blue Shirt", "add_on", 69),
                _h("prod-trv-men-006", "Polos", "Navy", "Navy Travel Polo", "add_on", 59),
            ),
            "women": (
                _h("prod-trv-wom-001", "Blazers", "Navy", "Wrinkle-Free Blazer", "anchor", 269),
                _h("prod-trv-wom-002", "Blouses", "White", "Non-Iron White Blouse", "core", 79),
                _h("prod-trv-wom-003", "Trousers", "Navy", "Stretch Travel Trousers", "core", 109),
                _h("prod-trv-wom-004", "Sneakers", "White", "Comfortable White Sneakers", "core", 119),
                _h("prod-trv-wom-005", "Clutches", "Black", "Travel Clutch", "add_on", 89),
                _h("prod-trv-wom-006", "Blouses", "Blue", "Wrinkle-Resistant Blue Blouse", "add_on", 69),
            ),
            "unisex": (
                _h("prod-trv-uni-001", "Jackets", "Navy", "Travel Jacket", "anchor", 249),
                _h("prod-trv-uni-002", "Overshirts", "White", "White Travel Overshirt", "core", 79),
                _h("prod-trv-uni-003", "Trousers", "Navy", "Stretch Travel Trousers", "core", 109),
                _h("prod-trv-uni-004", "Sneakers", "White", "Comfortable White Sneakers", "core", 119),
                _h("prod-trv-uni-005", "Backpacks", "Black", "Carry-On Travel Backpack", "add_on", 199),
                _h("prod-trv-uni-006", "Tees", "Navy", "Navy Travel Tee", "add_on", 39),
            ),
        },
    ),
    Scenario(
        id="chi_winter",
        name="Chicago Winter Commute",
        prefix="chi",
        formality="smart_casual",
        palette="cool",
        colors=("Navy", "Gray", "Black", "Brown", "Olive"),
        price_min=69,
        price_max=380,
        occasion_tags=("Work", "Office", "Casual"),
        delivery_min=2,
        delivery_max=4,
        season="winter",
        heroes={
            "men": (
                _h("prod-chi-men-001", "Blazers", "Navy", "Warm Wool Blazer", "anchor", 329),
                _h("prod-chi-men-002", "Chinos", "Gray", "Insulated Winter Chinos", "core", 139),
                _h("prod-chi-men-003", "Shirts", "White", "Long-Sleeve Dress Shirt", "core", 89),
                _h("prod-chi-men-004", "Sneakers", "Black", "Weatherproof Black Sneakers", "core", 149),
                _h("prod-chi-men-005", "Blazers", "Black", "Classic Black Blazer", "add_on", 279),
                _h("prod-chi-men-006", "Polos", "Navy", "Long-Sleeve Polo", "add_on", 69),
            ),
            "women": (
                _h("prod-chi-wom-001", "Blazers", "Navy", "Warm Wool Blazer", "anchor", 319),
                _h("prod-chi-wom-002", "Trousers", "Gray", "Insulated Winter Trousers", "core", 129),
                _h("prod-chi-wom-003", "Blouses", "White", "Long-Sleeve Blouse", "core", 79),
                _h("prod-chi-wom-004", "Sneakers", "Black", "Weatherproof Black Sneakers", "core", 139),
                _h("prod-chi-wom-005", "Clutches", "Brown", "Leather Briefcase", "add_on", 229),
                _h("prod-chi-wom-006", "Blazers", "Black", "Classic Black Blazer", "add_on", 269),
            ),
            "unisex": (
                _h("prod-chi-uni-001", "Jackets", "Navy", "Warm Wool Jacket", "anchor", 299),
                _h("prod-chi-uni-002", "Trousers", "Gray", "Insulated Winter Trousers", "core", 119),
                _h("prod-chi-uni-003", "Hoodies", "Black", "Warm Fleece Hoodie", "core", 89),
                _h("prod-chi-uni-004", "Sneakers", "Black", "Weatherproof Black Sneakers", "core", 139),
                _h("prod-chi-uni-005", "Backpacks", "Brown", "Leather Backpack", "add_on", 239),
                _h("prod-chi-uni-006", "Beanies", "Black", "Wool Beanie", "add_on", 29),
            ),
        },
    ),
    Scenario(
        id="campus",
        name="Back-to-School Essentials",
        prefix="cmp",
        formality="relaxed",
        palette="cool",
        colors=("Blue", "Black", "Gray", "White", "Navy"),
        price_min=29,
        price_max=180,
        occasion_tags=("Casual", "Sports", "Travel"),
        delivery_min=3,
        delivery_max=7,
        season="all",
        heroes={
            "men": (
                _h("prod-cmp-men-001", "Tees", "Blue", "Classic Blue T-Shirt", "anchor", 29),
                _h("prod-cmp-men-002", "Jeans", "Blue", "Comfortable Blue Jeans", "core", 79),
                _h("prod-cmp-men-003", "Sneakers", "White", "White Athletic Sneakers", "core", 89),
                _h("prod-cmp-men-004", "Tees", "Gray", "Gray Casual T-Shirt", "add_on", 24),
                _h("prod-cmp-men-005", "Sneakers", "Black", "Black Everyday Sneakers", "add_on", 79),
                _h("prod-cmp-men-006", "Polos", "Navy", "Navy Polo Shirt", "add_on", 49),
            ),
            "women": (
                _h("prod-cmp-wom-001", "Tees", "Blue", "Classic Blue T-Shirt", "anchor", 29),
                _h("prod-cmp-wom-002", "Trousers", "Navy", "Comfortable Navy Trousers", "core", 69),
                _h("prod-cmp-wom-003", "Sneakers", "White", "White Athletic Sneakers", "core", 89),
                _h("prod-cmp-wom-004", "Clutches", "Black", "Backpack Style Bag", "add_on", 59),
                _h("prod-cmp-wom-005", "Tees", "Gray", "Gray Casual T-Shirt", "add_on", 24),
                _h("prod-cmp-wom-006", "Flats", "Black", "Black Ballet Flats", "add_on", 49),
            ),
            "unisex": (
                _h("prod-cmp-uni-001", "Tees", "Blue", "Classic Blue T-Shirt", "anchor", 29),
                _h("prod-cmp-uni-002", "Hoodies", "Gray", "Gray Campus Hoodie", "core", 69),
                _h("prod-cmp-uni-003", "Sneakers", "White", "White Athletic Sneakers", "core", 89),
                _h("prod-cmp-uni-004", "Backpacks", "Black", "Backpack Style Bag", "add_on", 59),
                _h("prod-cmp-uni-005", "Tees", "Black", "Black Casual T-Shirt", "add_on", 24),
                _h("prod-cmp-uni-006", "Beanies", "Navy", "Navy Beanie", "add_on", 19),
            ),
        },
    ),
]

SCENARIOS_BY_ID: Dict[str, Scenario] = {s.id: s for s in SCENARIOS}

# Query words that point at a scenario (search boost)
SCENARIO_KEYWORDS: Dict[str, List[str]] = {
    "summer_wedding": ["summer", "wedding", "outdoor", "festive"],
    "nyc_dinner": ["nyc", "new york", "dinner", "evening", "work"],
    "biz_travel": ["business", "travel", "trip", "airport"],
    "chi_winter": ["chicago", "winter", "cold", "snow"],
    "campus": ["campus", "college", "university", "school"],
}

# Extra per-token boosts on top of the scenario keyword boost
SCENARIO_TOKEN_BOOSTS: Dict[str, Dict[str, float]] = {
    "summer_wedding": {"summer": 8.0, "wedding": 8.0, "outdoor": 6.0},
}


def get_scenario(scenario_id: str) -> Optional[Scenario]:
    return SCENARIOS_BY_ID.get(scenario_id)
