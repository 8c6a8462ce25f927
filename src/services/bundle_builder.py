"""
Tiered outfit bundle assembly.

Given a ranked candidate pool for one scenario and audience, build exactly
three bundles (Budget, Balanced, Premium) of exactly three role-tagged items,
or raise with a diagnostic payload.

Pipeline per request:
  1. Hard filtering   - scenario, audience whitelist, query guardrails
  2. Price tiering    - quantile bands, or rank thirds for near-uniform pools
  3. Strategies       - each role template in order, then the generic
                        role classifier; the first complete build wins
  4. Failure          - InsufficientCandidatesError / TemplateResolutionError

Role candidates are scored, not first-matched:
  tier alignment (+10) + occasion (+5) + formality (+5) + delivery cohesion (+3)
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from catalog.models import Product
from config.constants import BUNDLE_NOTES, DEFAULT_BUNDLE_CONFIG, TIER_NAMES, BundleConfig
from core.errors import InsufficientCandidatesError, TemplateResolutionError
from core.logging import LoggerMixin
from search.guardrails import Guardrails
from search.prefilter import in_audience
from search.vocabulary import build_keyword_pattern
from services.bundle_templates import RoleTemplate, templates_for


# =============================================================================
# Generic role classifier
# =============================================================================

ROLE_CATEGORIES: Dict[str, FrozenSet[str]] = {
    "primary": frozenset({"Dresses", "Jumpsuits"}),
    "top": frozenset({"Shirts", "Blouses", "Polos", "Tees", "T-Shirts", "Overshirts", "Hoodies"}),
    "bottom": frozenset({"Trousers", "Chinos", "Jeans", "Skirts"}),
    "footwear": frozenset({"Sneakers", "Loafers", "Derbies", "Heels", "Flats"}),
    "addOn": frozenset({
        "Blazers", "Jackets", "Clutches", "Handbags",
        "Backpacks", "Sunglasses", "Beanies", "Watches",
    }),
}


def classify_role(category: str) -> str:
    """Map a category to primary/top/bottom/footwear/addOn, or "item"."""
    for role, categories in ROLE_CATEGORIES.items():
        if category in categories:
            return role
    return "item"


# =============================================================================
# Query signals
# =============================================================================

# Query cue -> occasion tags it implies
_OCCASION_CUES: List[Tuple[re.Pattern, FrozenSet[str]]] = [
    (build_keyword_pattern(["evening", "dinner", "party", "night", "date", "cocktail"]),
     frozenset({"Evening", "Party"})),
    (build_keyword_pattern(["wedding", "ceremony", "reception"]), frozenset({"Wedding", "Party"})),
    (build_keyword_pattern(["work", "office", "meeting", "business"]), frozenset({"Work", "Office"})),
    (build_keyword_pattern(["travel", "trip", "flight", "airport"]), frozenset({"Travel"})),
    (build_keyword_pattern(["casual", "relaxed", "campus", "college", "school"]), frozenset({"Casual"})),
    (build_keyword_pattern(["sport", "sports", "gym", "athletic"]), frozenset({"Sports"})),
]

_SMART_PATTERN = build_keyword_pattern(["smart", "formal", "elegant", "dressy", "tailored", "sharp"])
_RELAXED_PATTERN = build_keyword_pattern(["casual", "relaxed", "laid-back", "comfy", "comfortable"])

SMART_STYLES: FrozenSet[str] = frozenset({"Classic", "Elegant", "Formal", "Minimalist", "Contemporary"})
RELAXED_STYLES: FrozenSet[str] = frozenset({"Casual", "Streetwear", "Sporty", "Vintage", "Bohemian"})

# Scenario formality -> styles that suit it, used when the query is silent
FORMALITY_STYLES: Dict[str, FrozenSet[str]] = {
    "smart_casual": frozenset({"Classic", "Contemporary", "Minimalist", "Casual"}),
    "festive": frozenset({"Elegant", "Classic", "Bohemian", "Formal"}),
    "relaxed": RELAXED_STYLES,
}


def implied_occasions(query: str) -> FrozenSet[str]:
    tags: set = set()
    for pattern, occasion_tags in _OCCASION_CUES:
        if pattern.search(query or ""):
            tags.update(occasion_tags)
    return frozenset(tags)


def target_styles(query: str, formality: Optional[str]) -> FrozenSet[str]:
    """Styles that match the formality the query (or scenario) asks for."""
    smart = bool(_SMART_PATTERN.search(query or ""))
    relaxed = bool(_RELAXED_PATTERN.search(query or ""))
    if smart and relaxed:
        return SMART_STYLES | frozenset({"Casual"})
    if smart:
        return SMART_STYLES
    if relaxed:
        return RELAXED_STYLES
    return FORMALITY_STYLES.get(formality or "", frozenset())


# =============================================================================
# Data types
# =============================================================================

@dataclass
class CartItem:
    """A product placed in a bundle under a role."""

    product: Product
    role: str
    why: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = self.product.to_summary()
        data["role"] = self.role
        data["why"] = self.why
        return data


@dataclass
class Bundle:
    """One price tier's outfit."""

    name: str
    items: List[CartItem]
    notes: List[str] = field(default_factory=list)
    strategy: str = ""

    @property
    def total_price(self) -> int:
        return sum(item.product.price for item in self.items)

    @property
    def average_price(self) -> float:
        return self.total_price / len(self.items) if self.items else 0.0

    @property
    def roles(self) -> List[str]:
        return [item.role for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
            "notes": list(self.notes),
            "strategy": self.strategy,
            "totalPrice": self.total_price,
        }


@dataclass(frozen=True)
class PriceTier:
    """A named price band and the pool products that fall inside it."""

    name: str
    low: float
    high: float
    products: Tuple[Product, ...]

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def contains(self, price: float) -> bool:
        return self.low <= price <= self.high


# =============================================================================
# Price tiering
# =============================================================================

def _band(products: Sequence[Product], fallback: Tuple[float, float]) -> Tuple[float, float]:
    if not products:
        return fallback
    prices = [p.price for p in products]
    return float(min(prices)), float(max(prices))


def compute_price_tiers(
    products: Sequence[Product],
    uniform_threshold: float = 30,
    config: BundleConfig = DEFAULT_BUNDLE_CONFIG,
) -> List[PriceTier]:
    """
    Split a pool into Budget / Balanced / Premium tiers.

    Pools whose price range is below ``uniform_threshold`` are tiered by rank
    thirds of the price-sorted list so no tier is empty by construction.
    Wider pools are cut at fixed fractions of the range.
    """
    if not products:
        return [PriceTier(name, 0.0, 0.0, ()) for name in TIER_NAMES]

    ordered = sorted(products, key=lambda p: (p.price, p.id))
    low = float(ordered[0].price)
    high = float(ordered[-1].price)
    price_range = high - low

    if price_range < uniform_threshold:
        n = len(ordered)
        slices = [
            ordered[:math.ceil(n / 3)],
            ordered[n // 3:(2 * n) // 3],
            ordered[(2 * n) // 3:],
        ]
        return [
            PriceTier(name, *_band(chunk, (low, high)), products=tuple(chunk))
            for name, chunk in zip(TIER_NAMES, slices)
        ]

    lower_cut = low + price_range * config.lower_cut
    upper_cut = low + price_range * config.upper_cut
    budget = tuple(p for p in ordered if p.price <= lower_cut)
    balanced = tuple(p for p in ordered if lower_cut < p.price <= upper_cut)
    premium = tuple(p for p in ordered if p.price > upper_cut)

    return [
        PriceTier(TIER_NAMES[0], low, lower_cut, budget),
        PriceTier(TIER_NAMES[1], lower_cut, upper_cut, balanced),
        PriceTier(TIER_NAMES[2], upper_cut, high, premium),
    ]


# =============================================================================
# Role candidate scoring
# =============================================================================

@dataclass(frozen=True)
class AssemblyContext:
    """Request-scoped inputs shared by every strategy."""

    pool: Tuple[Product, ...]
    occasions: FrozenSet[str]
    styles: FrozenSet[str]
    price_span: float
    config: BundleConfig = DEFAULT_BUNDLE_CONFIG


def role_score(product: Product, tier: PriceTier, ctx: AssemblyContext, chosen: Sequence[CartItem]) -> float:
    config = ctx.config
    score = 0.0

    if tier.contains(product.price):
        score += config.tier_alignment
    else:
        distance = tier.low - product.price if product.price < tier.low else product.price - tier.high
        score += max(0.0, config.tier_alignment * (1 - distance / ctx.price_span))

    if ctx.occasions and ctx.occasions.intersection(product.occasion_tags):
        score += config.occasion_alignment

    if product.style in ctx.styles:
        score += config.formality_alignment

    if chosen:
        average = sum(item.product.delivery_days for item in chosen) / len(chosen)
        if abs(product.delivery_days - average) <= config.delivery_window_days:
            score += config.delivery_cohesion

    return score


def _tie_break(tier: PriceTier, product: Product) -> float:
    if tier.name == "Budget":
        return product.price
    if tier.name == "Premium":
        return -product.price
    return abs(product.price - tier.midpoint)


def pick_best(
    tier: PriceTier,
    ctx: AssemblyContext,
    chosen: Sequence[CartItem],
    accepts: Callable[[Product], bool],
) -> Optional[Product]:
    """Highest-scoring unused product the predicate accepts.

    Looks in the tier's own pool first and widens to the whole filtered
    pool only when the tier has no acceptable product.
    """
    used = {item.product.id for item in chosen}
    candidates = [p for p in tier.products if p.id not in used and accepts(p)]
    if not candidates:
        candidates = [p for p in ctx.pool if p.id not in used and accepts(p)]
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda p: (-role_score(p, tier, ctx, chosen), _tie_break(tier, p), p.id),
    )


# =============================================================================
# Strategies
# =============================================================================

class BuildStrategy:
    """One way of filling a tier. Returns None when it cannot complete."""

    name = "strategy"

    def build(
        self, tier: PriceTier, ctx: AssemblyContext, anchor: Optional[Product] = None
    ) -> Optional[List[CartItem]]:
        raise NotImplementedError


class TemplateStrategy(BuildStrategy):
    """Fill every role of one RoleTemplate."""

    def __init__(self, template: RoleTemplate):
        self.template = template
        self.name = template.name

    def build(self, tier, ctx, anchor=None):
        items: List[CartItem] = []

        if anchor is not None:
            anchor_role = self.template.role_for_category(anchor.category)
            if anchor_role is None:
                return None
            items.append(CartItem(anchor, anchor_role))

        filled = {item.role for item in items}
        for role, categories in self.template.roles:
            if role in filled:
                continue
            product = pick_best(tier, ctx, items, lambda p, c=categories: p.category in c)
            if product is None:
                return None
            items.append(CartItem(product, role))

        return items


class FallbackStrategy(BuildStrategy):
    """Generic classifier: fill roles in priority order, then pad."""

    name = "fallback"

    def __init__(self, templates: Sequence[RoleTemplate], config: BundleConfig = DEFAULT_BUNDLE_CONFIG):
        self.templates = list(templates)
        self.config = config

    def anchor_role(self, anchor: Product) -> str:
        for template in self.templates:
            role = template.role_for_category(anchor.category)
            if role is not None:
                return role
        return classify_role(anchor.category)

    @staticmethod
    def _blocked(role: str, filled: set) -> bool:
        # A primary piece stands in for top and bottom
        if role in ("top", "bottom") and "primary" in filled:
            return True
        return role == "primary" and bool(filled & {"top", "bottom"})

    def build(self, tier, ctx, anchor=None):
        size = self.config.items_per_bundle
        items: List[CartItem] = []
        if anchor is not None:
            items.append(CartItem(anchor, self.anchor_role(anchor)))

        filled = {item.role for item in items}
        for role in self.config.fallback_role_order:
            if len(items) >= size:
                break
            if role in filled or self._blocked(role, filled):
                continue
            product = pick_best(tier, ctx, items, lambda p, r=role: classify_role(p.category) == r)
            if product is not None:
                items.append(CartItem(product, role))
                filled.add(role)

        while len(items) < size:
            product = pick_best(
                tier, ctx, items, lambda p: classify_role(p.category) not in filled
            )
            if product is None:
                break
            role = classify_role(product.category)
            items.append(CartItem(product, role))
            filled.add(role)

        return items if len(items) == size else None


# =============================================================================
# Assembler
# =============================================================================

class BundleAssembler(LoggerMixin):
    """Builds the Budget / Balanced / Premium bundles for one request."""

    def __init__(self, config: BundleConfig = DEFAULT_BUNDLE_CONFIG, uniform_range_threshold: float = 30):
        self.config = config
        self.uniform_range_threshold = uniform_range_threshold

    def filter_pool(
        self,
        candidates: Sequence[Product],
        scenario_id: Optional[str],
        audience: str,
        guardrails: Guardrails,
        anchor: Optional[Product] = None,
    ) -> List[Product]:
        seen = set()
        pool: List[Product] = []
        for product in candidates:
            if product.id in seen or (anchor is not None and product.id == anchor.id):
                continue
            if scenario_id and product.scenario_id != scenario_id:
                continue
            if product.audience != audience or not in_audience(product, audience):
                continue
            if not guardrails.allows(product):
                continue
            seen.add(product.id)
            pool.append(product)
        return pool

    def _diagnostics(self, scenario_id, audience, pool, anchor, guardrails) -> Dict[str, Any]:
        return {
            "scenarioId": scenario_id,
            "audience": audience,
            "availableProducts": len(pool) + (1 if anchor is not None else 0),
            "categories": sorted({p.category for p in pool}),
            "anchorProductId": anchor.id if anchor is not None else None,
            "guardrails": guardrails.describe(),
        }

    def assemble(
        self,
        candidates: Sequence[Product],
        scenario_id: Optional[str],
        audience: str,
        query: str = "",
        anchor_product: Optional[Product] = None,
    ) -> List[Bundle]:
        """
        Build one bundle per price tier.

        Args:
            candidates: Ranked products (any scope; filtered here).
            scenario_id: Scenario every bundled product must belong to.
            audience: Audience every bundled product must belong to.
            query: Shopper query; drives guardrails, occasion and formality.
            anchor_product: Product placed in every bundle. It skips price
                tiering; an anchor the guardrails block is dropped.

        Raises:
            InsufficientCandidatesError: fewer than three usable products.
            TemplateResolutionError: a tier could not be completed by any
                template or by the generic classifier.
        """
        size = self.config.items_per_bundle
        guardrails = Guardrails.for_outfit(query, audience)
        if anchor_product is not None and not guardrails.allows(anchor_product):
            self.logger.warning(
                "Anchor product blocked by guardrails, ignoring",
                anchor=anchor_product.id,
                color=anchor_product.color,
                category=anchor_product.category,
                guardrails=guardrails.describe(),
            )
            anchor_product = None
        pool = self.filter_pool(candidates, scenario_id, audience, guardrails, anchor_product)
        diagnostics = self._diagnostics(scenario_id, audience, pool, anchor_product, guardrails)

        if diagnostics["availableProducts"] < size:
            self.logger.warning("Not enough products for bundles", **diagnostics)
            raise InsufficientCandidatesError(
                f"Need at least {size} products for {scenario_id}/{audience}, "
                f"found {diagnostics['availableProducts']}",
                diagnostics,
            )

        tiers = compute_price_tiers(pool, self.uniform_range_threshold, self.config)
        prices = [p.price for p in pool]
        span = float(max(prices) - min(prices)) if prices else 0.0

        scenario_formality = pool[0].formality if pool else (anchor_product.formality if anchor_product else None)
        ctx = AssemblyContext(
            pool=tuple(pool),
            occasions=implied_occasions(query),
            styles=target_styles(query, scenario_formality),
            price_span=span or 1.0,
            config=self.config,
        )

        templates = templates_for(scenario_id, audience)
        strategies: List[BuildStrategy] = [TemplateStrategy(t) for t in templates]
        strategies.append(FallbackStrategy(templates, self.config))

        bundles: List[Bundle] = []
        failed: List[str] = []
        for tier in tiers:
            for strategy in strategies:
                items = strategy.build(tier, ctx, anchor_product)
                if items:
                    bundles.append(Bundle(
                        name=tier.name,
                        items=items,
                        notes=list(BUNDLE_NOTES[tier.name]),
                        strategy=strategy.name,
                    ))
                    break
            else:
                failed.append(tier.name)

        if failed:
            diagnostics["failedTiers"] = failed
            self.logger.warning("Bundle tiers unresolved", **diagnostics)
            raise TemplateResolutionError(
                f"Could not complete {', '.join(failed)} bundle(s) for {scenario_id}/{audience}",
                diagnostics,
            )

        self.logger.info(
            "Bundles assembled",
            scenario_id=scenario_id,
            audience=audience,
            pool_size=len(pool),
            anchor=anchor_product.id if anchor_product else None,
            strategies=[b.strategy for b in bundles],
        )
        return bundles
