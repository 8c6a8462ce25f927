"""
Shopping service: request-level orchestration for search, follow-up
refinement, bundle building, comparisons and product insights.

Search and bundle assembly are synchronous and pure; the only awaited work
is the optional assistant call, made at most once per helper and always
recovered locally when it fails.
"""

import json
import re
import threading
from typing import Dict, List, Optional

from catalog.models import Product
from catalog.scenarios import SCENARIOS_BY_ID
from catalog.store import CatalogStore, get_catalog_store
from config.settings import Settings, get_settings
from core.errors import InputError, NotFoundError
from core.logging import LoggerMixin
from search.constraint_extractor import (
    detect_intent,
    extract_constraints,
    get_constraint_chips,
    infer_audience,
)
from search.engine import detect_scenario, search_products
from search.guardrails import Guardrails, blocks_pink
from search.models import (
    Constraints,
    ConstraintsPayload,
    ProductResult,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SessionState,
    ShopperIntent,
    SortBy,
)
from search.prefilter import in_audience
from search.refinement import merge_constraints
from services.assistant import AssistantCollaborator, get_assistant
from services.bundle_builder import Bundle, BundleAssembler
from services.models import (
    BundleRequest,
    BundlesResponse,
    CompareRequest,
    CompareVerdict,
    InsightRequest,
    InsightResponse,
    ShoppingBrief,
)

AUDIENCE_QUESTION = "Who is this for: Men, Women, or Unisex?"
DEFAULT_WHY = "Great choice for this cart"

# "women" is checked before "men" since it contains it
_ANSWER_AUDIENCES = [
    ("women", re.compile(r"\b(women|womens|woman|female|her)\b", re.IGNORECASE)),
    ("men", re.compile(r"\b(men|mens|man|male|him)\b", re.IGNORECASE)),
    ("unisex", re.compile(r"\bunisex\b", re.IGNORECASE)),
]


def parse_audience_answer(answer: Optional[str]) -> Optional[str]:
    """Audience named in the shopper's answer to the audience question."""
    if not answer:
        return None
    for audience, pattern in _ANSWER_AUDIENCES:
        if pattern.search(answer):
            return audience
    return None


def apply_brief(constraints: Constraints, brief: ShoppingBrief) -> Constraints:
    """Fields the brief sets override the extracted ones."""
    merged = constraints.copy()
    if brief.budget_max is not None:
        merged.budget_max = brief.budget_max
    if brief.category:
        merged.category = brief.category
    if brief.color:
        merged.color = brief.color
        merged.color_exclude = None
    if brief.occasion:
        merged.occasion = brief.occasion
    if brief.style:
        merged.style = brief.style
    return merged


def outfit_constraints(query: str, audience: Optional[str]) -> Constraints:
    """Constraints for building an outfit pool.

    An outfit spans categories, so category, include keywords, color
    include, occasion and style are dropped. Budget, color exclusion and
    exclusion lists stay hard.
    """
    constraints = extract_constraints(query, audience)
    constraints.category = None
    constraints.include_keywords = []
    constraints.color = None
    constraints.occasion = None
    constraints.style = None
    return constraints


class ShoppingService(LoggerMixin):
    """Request orchestration over the catalog store and the assistant."""

    def __init__(
        self,
        store: Optional[CatalogStore] = None,
        settings: Optional[Settings] = None,
        assistant: Optional[AssistantCollaborator] = None,
        assembler: Optional[BundleAssembler] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or get_catalog_store()
        self.assistant = assistant or get_assistant()
        self.assembler = assembler or BundleAssembler(
            uniform_range_threshold=self.settings.tier_uniform_range_threshold
        )

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_product(self, product_id: str) -> Product:
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}", {"productId": product_id})
        return product

    def _scoped(self, audience: Optional[str]) -> List[Product]:
        products = self.store.get()
        if audience:
            return [p for p in products if p.audience == audience]
        return list(products)

    # =========================================================================
    # Search
    # =========================================================================

    def resolve_audience(self, request: SearchRequest) -> Optional[str]:
        """Request, then session, then the shopper's answer, then the query."""
        if request.audience:
            return request.audience
        if request.session and request.session.audience:
            return request.session.audience
        answered = parse_audience_answer(request.user_answer)
        if answered:
            return answered
        return infer_audience(request.query)

    async def _results_with_reasons(
        self, results: List[SearchResult], query: str, user_answer: Optional[str]
    ) -> List[ProductResult]:
        reasons = await self.assistant.product_reasons(
            [r.product for r in results], query, user_answer
        )
        return [
            ProductResult(
                id=r.product.id,
                title=r.product.title,
                brand=r.product.brand,
                price=r.product.price,
                image_url=r.product.image_url,
                category=r.product.category,
                color=r.product.color,
                scenario_id=r.product.scenario_id,
                reasons=reasons[idx],
            )
            for idx, r in enumerate(results)
        ]

    async def search(self, request: SearchRequest) -> SearchResponse:
        query = (request.query or "").strip()
        if not query:
            raise InputError("Query is required")

        if request.follow_up and request.session:
            return await self.refine(request)

        limit = request.limit or self.settings.search_default_limit
        intent = detect_intent(query)
        audience = self.resolve_audience(request)

        session = request.session.model_copy() if request.session else SessionState(original_query=query)
        question = None
        if audience is None and not session.asked:
            question = AUDIENCE_QUESTION
        elif audience is not None:
            session.audience = audience
            session.asked = True

        constraints = extract_constraints(query, audience)
        if request.user_answer:
            brief = await self.assistant.shopping_brief(query, request.user_answer)
            constraints = apply_brief(constraints, brief)

        results = search_products(
            self._scoped(audience),
            query,
            limit=limit,
            audience=audience,
            sort_by=request.sort_by.value,
            constraints=constraints,
            tie_threshold=self.settings.price_tie_threshold,
            guardrail_text=" ".join(filter(None, [query, request.user_answer])),
        )

        self.logger.info(
            "Search handled",
            query=query,
            intent=intent.value,
            audience=audience,
            asked_audience=question is not None,
            results=len(results),
        )

        return SearchResponse(
            intent=intent,
            assistant_question=question,
            session=session if (question or session.asked) else None,
            audience=audience,
            scenario_id=detect_scenario(results),
            constraints=ConstraintsPayload.model_validate(constraints.to_public_dict()),
            chips=get_constraint_chips(constraints),
            results=await self._results_with_reasons(results, query, request.user_answer),
        )

    async def refine(self, request: SearchRequest) -> SearchResponse:
        """Apply a natural-language follow-up to the session's original query."""
        session = request.session
        original_query = (session.original_query or request.query).strip()
        audience = session.audience or request.audience

        if request.constraints_override:
            try:
                existing = Constraints.from_dict(request.constraints_override)
            except (TypeError, ValueError) as e:
                raise InputError(
                    "Invalid constraintsOverride",
                    {"constraintsOverride": request.constraints_override, "reason": str(e)},
                ) from e
        else:
            existing = extract_constraints(original_query, audience)

        delta = await self.assistant.constraint_delta(request.follow_up, existing)
        merged = merge_constraints(existing, delta)
        if request.sort_by != SortBy.RELEVANCE:
            merged.sort_by = request.sort_by.value

        results = search_products(
            self._scoped(audience),
            original_query,
            limit=request.limit or self.settings.search_default_limit,
            audience=audience,
            constraints=merged,
            tie_threshold=self.settings.price_tie_threshold,
            guardrail_text=f"{original_query} {request.follow_up}",
        )

        self.logger.info(
            "Follow-up applied",
            query=original_query,
            follow_up=request.follow_up,
            delta=delta.model_dump(exclude_none=True, by_alias=True, mode="json"),
            results=len(results),
        )

        return SearchResponse(
            intent=ShopperIntent.CLEAR,
            assistant_question=None,
            session=SessionState(original_query=original_query, asked=True, audience=audience),
            audience=audience,
            scenario_id=detect_scenario(results),
            constraints=ConstraintsPayload.model_validate(merged.to_public_dict()),
            chips=get_constraint_chips(merged),
            results=await self._results_with_reasons(results, original_query, request.follow_up),
        )

    # =========================================================================
    # Bundles
    # =========================================================================

    def _resolve_scenario(self, request: BundleRequest, query: str, audience: str) -> str:
        if request.scenario_id:
            scenario_id = request.scenario_id
        else:
            ranked = search_products(
                self._scoped(audience),
                query,
                limit=self.settings.search_candidate_limit,
                audience=audience,
                tie_threshold=self.settings.price_tie_threshold,
            )
            scenario_id = detect_scenario(ranked)
            if scenario_id is None:
                raise InputError(
                    "Could not determine a scenario for this query",
                    {"query": query, "audience": audience},
                )

        if scenario_id not in SCENARIOS_BY_ID:
            raise InputError(
                f"Unknown scenario: {scenario_id}",
                {"scenarioId": scenario_id, "known": sorted(SCENARIOS_BY_ID)},
            )
        return scenario_id

    def _resolve_anchor(
        self, anchor_id: Optional[str], scenario_id: str, audience: str, query: str
    ) -> Optional[Product]:
        if not anchor_id:
            return None
        anchor = self.get_product(anchor_id)
        if anchor.scenario_id != scenario_id or anchor.audience != audience or not in_audience(anchor, audience):
            self.logger.warning(
                "Anchor product out of scope, ignoring",
                anchor=anchor_id,
                anchor_scenario=anchor.scenario_id,
                anchor_audience=anchor.audience,
                scenario_id=scenario_id,
                audience=audience,
            )
            return None
        if not Guardrails.for_outfit(query, audience).allows(anchor):
            self.logger.warning(
                "Anchor product blocked by guardrails, ignoring",
                anchor=anchor_id,
                color=anchor.color,
                category=anchor.category,
            )
            return None
        return anchor

    async def build_bundles(self, request: BundleRequest) -> BundlesResponse:
        query = (request.query or "").strip()
        if not query:
            raise InputError("Query is required")

        audience = request.audience or parse_audience_answer(request.user_answer) or infer_audience(query)
        if audience is None:
            raise InputError("Audience is required to build bundles", {"query": query})

        scenario_id = self._resolve_scenario(request, query, audience)
        anchor = self._resolve_anchor(request.anchor_product_id, scenario_id, audience, query)

        scope = [p for p in self._scoped(audience) if p.scenario_id == scenario_id]
        ranked = search_products(
            scope,
            query,
            limit=len(scope),
            audience=audience,
            constraints=outfit_constraints(query, audience),
            tie_threshold=self.settings.price_tie_threshold,
        )
        bundles = self.assembler.assemble(
            [r.product for r in ranked],
            scenario_id,
            audience,
            query=query,
            anchor_product=anchor,
        )
        await self._fill_why(bundles, query, request.user_answer)

        return BundlesResponse.model_validate({
            "scenarioId": scenario_id,
            "audience": audience,
            "anchorProductId": anchor.id if anchor else None,
            "carts": [bundle.to_dict() for bundle in bundles],
        })

    async def _fill_why(self, bundles: List[Bundle], query: str, user_answer: Optional[str]) -> None:
        items = [item for bundle in bundles for item in bundle.items]
        reasons = await self.assistant.product_reasons(
            [item.product for item in items], query, user_answer, roles=[item.role for item in items]
        )
        for idx, item in enumerate(items):
            item.why = reasons[idx][0] if idx < len(reasons) and reasons[idx] else DEFAULT_WHY

    # =========================================================================
    # Compare & insight
    # =========================================================================

    async def compare(self, request: CompareRequest) -> CompareVerdict:
        if not request.product_a_id or not request.product_b_id:
            raise InputError("Both productAId and productBId are required")
        product_a = self.get_product(request.product_a_id)
        product_b = self.get_product(request.product_b_id)
        return await self.assistant.compare_verdict(product_a, product_b, request.brief)

    def insight_alternatives(
        self, product: Product, brief: Dict, candidate_ids: List[str], limit: int = 2
    ) -> List[Product]:
        """Same scenario and audience, visible to the audience, guardrails applied."""
        if candidate_ids:
            pool = [p for p in (self.store.get_product(pid) for pid in candidate_ids) if p is not None]
        else:
            pool = sorted(
                self._scoped(product.audience),
                key=lambda p: (abs(p.price - product.price), p.id),
            )

        hide_pink = blocks_pink(json.dumps(brief or {}), product.audience)
        alternatives: List[Product] = []
        for candidate in pool:
            if candidate.id == product.id:
                continue
            if candidate.audience != product.audience or candidate.scenario_id != product.scenario_id:
                continue
            if not in_audience(candidate, product.audience):
                continue
            if hide_pink and candidate.color.lower() == "pink":
                continue
            alternatives.append(candidate)
            if len(alternatives) >= limit:
                break
        return alternatives

    async def product_insight(self, request: InsightRequest) -> InsightResponse:
        if not request.product_id:
            raise InputError("productId is required")
        product = self.get_product(request.product_id)
        alternatives = self.insight_alternatives(product, request.brief, request.candidate_ids)
        insight = await self.assistant.product_insight(product, request.brief, alternatives)
        return InsightResponse(product_id=product.id, insight=insight)


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[ShoppingService] = None
_service_lock = threading.Lock()


def get_shopping_service() -> ShoppingService:
    """Get or create the ShoppingService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = ShoppingService()
    return _service
