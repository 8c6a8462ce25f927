"""
Deterministic catalog generation.

Each scenario gets 60 products per audience: the 6 hero products first,
then 54 generated ones whose category, color, price and copy rotate through
the scenario's tables by index. Stock and delivery values come from a
random.Random seeded by (scenario, audience, index), so the same catalog is
produced on every run.
"""

import random
import re
from typing import List

from catalog.models import Product
from catalog.scenarios import SCENARIOS, Scenario, product_id
from config.constants import ACCESSORY_CATEGORIES, AUDIENCE_CATEGORIES, AUDIENCES
from core.logging import get_logger

logger = get_logger(__name__)


PRODUCTS_PER_AUDIENCE = 60

BRANDS: List[str] = [
    "StyleCraft",
    "UrbanEdge",
    "ClassicWear",
    "ModernFit",
    "EliteFashion",
    "TrendSet",
    "PremiumStyle",
    "FashionHub",
    "DesignerWear",
    "LuxuryBrand",
]

FITS: List[str] = ["Slim", "Regular", "Relaxed", "Oversized", "Fitted"]
SIZES: List[str] = ["XS", "S", "M", "L", "XL", "XXL"]

STYLES: List[str] = [
    "Minimalist",
    "Vintage",
    "Contemporary",
    "Bohemian",
    "Classic",
    "Streetwear",
    "Elegant",
    "Sporty",
    "Casual",
    "Formal",
]

_DESCRIPTION_TEMPLATES: List[str] = [
    "Perfect for {scenario}. {color} {category} from {brand}.",
    "Stylish {category} featuring {style} design. Ideal for {scenario}.",
    "Comfortable {fit} fit {category} in {color_lower}.",
    "High-quality {category} by {brand}. Designed for {scenario}.",
]

# Womenswear words kept out of menswear copy ("dress shirt" is fine)
_BLOUSE_RE = re.compile(r"\bblouses?\b", re.IGNORECASE)
_DRESS_RE = re.compile(r"\bdress(?:es)?\b(?!\s+shirt)", re.IGNORECASE)
_TOP_RE = re.compile(r"\btops?\b", re.IGNORECASE)


def _clean_menswear_text(text: str, category: str) -> str:
    text = _BLOUSE_RE.sub("Shirt", text)
    text = _DRESS_RE.sub(category, text)
    return _TOP_RE.sub("Shirt", text)


def generate_product(scenario: Scenario, audience: str, index: int) -> Product:
    """Generate the product at ``index`` (0-based) of a scenario/audience slice."""
    hero = scenario.hero_for(audience, index)
    categories = AUDIENCE_CATEGORIES[audience]

    brand = BRANDS[index % len(BRANDS)]
    fit = FITS[index % len(FITS)]
    size = SIZES[index % len(SIZES)]
    style = STYLES[index % len(STYLES)]

    if hero is not None:
        category = hero.category
        color = hero.color
        price = hero.price
        title = hero.title
        bundle_role = hero.bundle_role
        pid = hero.id
    else:
        category = categories[index % len(categories)]
        color = scenario.colors[index % len(scenario.colors)]
        price = scenario.price_min + (index * 17) % (scenario.price_max - scenario.price_min + 1)
        title = f"{brand} {category} - {color}"
        bundle_role = "anchor" if index < 2 else "core" if index < 4 else "add_on"
        pid = product_id(scenario, audience, index)

    occasion_tags = list(scenario.occasion_tags)
    if scenario.formality == "smart_casual" and "Casual" not in occasion_tags:
        occasion_tags.append("Casual")

    description = _DESCRIPTION_TEMPLATES[index % len(_DESCRIPTION_TEMPLATES)].format(
        scenario=scenario.name.lower(),
        color=color,
        color_lower=color.lower(),
        category=category.lower(),
        brand=brand,
        style=style.lower(),
        fit=fit.lower(),
    )

    if audience == "men":
        title = _clean_menswear_text(title, category)
        description = _clean_menswear_text(description, category.lower())

    rng = random.Random(f"{scenario.id}:{audience}:{index}")
    in_stock = rng.random() > 0.1
    stock_count = rng.randint(5, 54) if in_stock else 0
    delivery_days = rng.randint(scenario.delivery_min, scenario.delivery_max)

    has_size_fit = category not in ACCESSORY_CATEGORIES

    return Product(
        id=pid,
        title=title,
        brand=brand,
        price=price,
        image_url=f"/api/images/{pid}",
        category=category,
        color=color,
        size=size if has_size_fit else None,
        fit=fit if has_size_fit else None,
        occasion_tags=tuple(occasion_tags),
        style=style,
        description=description,
        scenario_id=scenario.id,
        audience=audience,
        formality=scenario.formality,
        palette=scenario.palette,
        bundle_role=bundle_role,
        in_stock=in_stock,
        stock_count=stock_count,
        delivery_days=delivery_days,
        season=scenario.season,
    )


def generate_catalog() -> List[Product]:
    """Generate the full catalog: scenarios x audiences x 60 products."""
    products: List[Product] = []
    for scenario in SCENARIOS:
        for audience in AUDIENCES:
            for index in range(PRODUCTS_PER_AUDIENCE):
                products.append(generate_product(scenario, audience, index))

    logger.info(
        "Generated catalog",
        products=len(products),
        scenarios=len(SCENARIOS),
        audiences=len(AUDIENCES),
    )
    return products
