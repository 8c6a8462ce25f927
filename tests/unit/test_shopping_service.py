"""
Tests for request orchestration in ShoppingService.

The assistant is disabled (no API key), so every text field comes from the
local fallbacks.
"""

import asyncio

import pytest

from core.errors import InputError, InsufficientCandidatesError, NotFoundError
from search.models import Constraints, SearchRequest, SessionState, ShopperIntent, SortBy
from services.models import BundleRequest, CompareRequest, InsightRequest, ShoppingBrief
from services.shopping_service import (
    AUDIENCE_QUESTION,
    apply_brief,
    outfit_constraints,
    parse_audience_answer,
)


def _search(service, **kw):
    return asyncio.run(service.search(SearchRequest(**kw)))


def _bundles(service, **kw):
    return asyncio.run(service.build_bundles(BundleRequest(**kw)))


class TestHelpers:
    """Tests for module-level helpers."""

    @pytest.mark.parametrize("answer,audience", [
        ("Women", "women"),
        ("it's for a woman", "women"),
        ("for him", "men"),
        ("Men please", "men"),
        ("unisex", "unisex"),
        ("not sure", None),
        (None, None),
    ])
    def test_parse_audience_answer(self, answer, audience):
        assert parse_audience_answer(answer) == audience

    def test_apply_brief(self):
        constraints = Constraints(color_exclude="Black", budget_max=300)

        merged = apply_brief(constraints, ShoppingBrief(budget_max=150, color="Navy"))

        assert merged.budget_max == 150
        assert merged.color == "Navy"
        assert merged.color_exclude is None
        assert constraints.budget_max == 300

    def test_outfit_constraints_keep_only_exclusions_and_budget(self):
        constraints = outfit_constraints("exclude black formal shirts under 200", "men")

        assert constraints.budget_max == 200
        assert constraints.color_exclude == "Black"
        assert constraints.category is None
        assert constraints.occasion is None


class TestSearch:
    """Tests for ShoppingService.search."""

    def test_blank_query(self, shopping_service):
        with pytest.raises(InputError):
            _search(shopping_service, query="   ")

    def test_asks_for_audience_once(self, shopping_service):
        response = _search(shopping_service, query="navy blazer")

        assert response.assistant_question == AUDIENCE_QUESTION
        assert response.audience is None
        assert response.session.original_query == "navy blazer"
        assert response.results

    def test_no_question_after_asked(self, shopping_service):
        response = _search(
            shopping_service,
            query="navy blazer",
            session=SessionState(original_query="navy blazer", asked=True),
        )

        assert response.assistant_question is None

    def test_answer_sets_audience(self, shopping_service):
        response = _search(
            shopping_service,
            query="navy blazer",
            user_answer="Women",
            session=SessionState(original_query="navy blazer"),
        )

        assert response.audience == "women"
        assert response.assistant_question is None
        assert response.session.asked is True
        assert all(r.id.split("-")[2] == "wom" for r in response.results)

    def test_audience_inferred_from_query(self, shopping_service):
        response = _search(shopping_service, query="loafers for men")

        assert response.audience == "men"
        assert response.assistant_question is None

    def test_constraints_chips_and_reasons(self, shopping_service):
        response = _search(shopping_service, query="black shirts under 200", audience="men")

        assert response.constraints.budget_max == 200
        assert response.constraints.category == "Shirts"
        assert response.chips == ["Under $200", "Shirts", "Black"]
        assert response.results
        assert all(len(r.reasons) == 3 for r in response.results)
        assert all(r.price <= 200 for r in response.results)

    def test_intent(self, shopping_service):
        assert _search(shopping_service, query="sneakers", audience="men").intent == ShopperIntent.AMBIGUOUS
        assert _search(shopping_service, query="I need a wedding outfit", audience="men").intent == ShopperIntent.GOAL

    def test_limit(self, shopping_service):
        assert len(_search(shopping_service, query="sneakers", limit=3).results) == 3

    def test_answer_asking_for_pink_lifts_guardrail(self, shopping_service):
        response = _search(
            shopping_service,
            query="summer wedding shirts",
            user_answer="for him, pink is fine",
            session=SessionState(original_query="summer wedding shirts"),
            limit=100,
        )

        assert response.audience == "men"
        assert any(r.color == "Pink" for r in response.results)

    def test_scenario_detected(self, shopping_service):
        response = _search(shopping_service, query="summer wedding outfit", audience="women")

        assert response.scenario_id == "summer_wedding"


class TestRefine:
    """Tests for follow-up refinement."""

    def test_follow_up_applies_delta(self, shopping_service):
        response = _search(
            shopping_service,
            query="sneakers",
            follow_up="exclude black",
            session=SessionState(original_query="sneakers", asked=True, audience="men"),
        )

        assert response.intent == ShopperIntent.CLEAR
        assert response.constraints.color_exclude == "Black"
        assert "Exclude Black" in response.chips
        assert response.results
        assert all(r.color != "Black" and r.category == "Sneakers" for r in response.results)
        assert response.session.asked is True
        assert response.session.audience == "men"

    def test_follow_up_sorts(self, shopping_service):
        response = _search(
            shopping_service,
            query="loafers",
            follow_up="cheapest first",
            session=SessionState(original_query="loafers", asked=True, audience="men"),
            limit=100,
        )

        assert response.results
        assert all(r.category == "Loafers" for r in response.results)

    def test_follow_up_asking_for_pink_lifts_guardrail(self, shopping_service):
        response = _search(
            shopping_service,
            query="summer wedding shirts",
            follow_up="only pink",
            session=SessionState(original_query="summer wedding shirts", asked=True, audience="men"),
        )

        assert response.constraints.color == "Pink"
        assert response.results
        assert all(r.color == "Pink" for r in response.results)

    def test_follow_up_keeps_request_sort(self, shopping_service):
        from unittest.mock import patch

        from services import shopping_service as module

        with patch.object(module, "search_products", wraps=module.search_products) as spy:
            _search(
                shopping_service,
                query="loafers",
                follow_up="under 300",
                session=SessionState(original_query="loafers", asked=True, audience="men"),
                sort_by=SortBy.PRICE_ASC,
            )

        assert spy.call_args.kwargs["constraints"].sort_by == "price_asc"

    def test_delta_sort_used_when_request_is_relevance(self, shopping_service):
        from unittest.mock import patch

        from services import shopping_service as module

        with patch.object(module, "search_products", wraps=module.search_products) as spy:
            _search(
                shopping_service,
                query="loafers",
                follow_up="cheapest first",
                session=SessionState(original_query="loafers", asked=True, audience="men"),
            )

        assert spy.call_args.kwargs["constraints"].sort_by == "price_asc"

    def test_invalid_override_budget(self, shopping_service):
        with pytest.raises(InputError) as exc_info:
            _search(
                shopping_service,
                query="loafers",
                follow_up="under 150",
                session=SessionState(original_query="loafers", asked=True, audience="men"),
                constraints_override={"budgetMax": "cheap"},
            )

        assert exc_info.value.diagnostics["constraintsOverride"] == {"budgetMax": "cheap"}

    def test_invalid_override_sort(self, shopping_service):
        with pytest.raises(InputError):
            _search(
                shopping_service,
                query="loafers",
                follow_up="under 150",
                session=SessionState(original_query="loafers", asked=True, audience="men"),
                constraints_override={"sortBy": "newest"},
            )

    def test_constraints_override(self, shopping_service):
        response = _search(
            shopping_service,
            query="something",
            follow_up="under 150",
            session=SessionState(original_query="something", asked=True, audience="men"),
            constraints_override={"category": "Loafers"},
            limit=100,
        )

        assert response.results
        assert all(r.category == "Loafers" and r.price <= 150 for r in response.results)


class TestBuildBundles:
    """Tests for ShoppingService.build_bundles."""

    def test_smart_dinner(self, shopping_service):
        response = _bundles(shopping_service, query="smart outfit for nyc dinner", audience="women")

        assert response.scenario_id == "nyc_dinner"
        assert [c.name for c in response.carts] == ["Budget", "Balanced", "Premium"]
        for cart in response.carts:
            assert len(cart.items) == 3
            assert len({item.role for item in cart.items}) == 3
            assert all(item.category != "Tees" for item in cart.items)
            assert all(item.why for item in cart.items)
            assert cart.total_price == sum(item.price for item in cart.items)

    def test_explicit_scenario(self, shopping_service):
        response = _bundles(shopping_service, query="outfit", audience="men", scenario_id="campus")

        assert response.scenario_id == "campus"
        assert all(item.id.startswith("prod-cmp-men-") for c in response.carts for item in c.items)

    def test_anchor(self, shopping_service):
        response = _bundles(
            shopping_service,
            query="nyc dinner outfit",
            audience="unisex",
            scenario_id="nyc_dinner",
            anchor_product_id="prod-nyc-uni-004",
        )

        assert response.anchor_product_id == "prod-nyc-uni-004"
        for cart in response.carts:
            roles = {item.id: item.role for item in cart.items}
            assert roles["prod-nyc-uni-004"] == "footwear"

    def test_out_of_scope_anchor_ignored(self, shopping_service):
        response = _bundles(
            shopping_service,
            query="nyc dinner outfit",
            audience="unisex",
            scenario_id="nyc_dinner",
            anchor_product_id="prod-cmp-uni-001",
        )

        assert response.anchor_product_id is None
        assert all("prod-cmp-uni-001" != item.id for c in response.carts for item in c.items)

    def test_pink_anchor_ignored_for_men(self, shopping_service):
        pink = next(
            p for p in shopping_service.store.get()
            if p.scenario_id == "summer_wedding" and p.audience == "men" and p.color == "Pink"
        )

        response = _bundles(
            shopping_service,
            query="summer wedding outfit",
            audience="men",
            scenario_id="summer_wedding",
            anchor_product_id=pink.id,
        )

        assert response.anchor_product_id is None
        assert all(item.color != "Pink" for c in response.carts for item in c.items)

    def test_unknown_anchor(self, shopping_service):
        with pytest.raises(NotFoundError):
            _bundles(shopping_service, query="outfit", audience="men",
                     scenario_id="nyc_dinner", anchor_product_id="prod-missing")

    def test_audience_required(self, shopping_service):
        with pytest.raises(InputError):
            _bundles(shopping_service, query="outfit for dinner")

    def test_audience_from_answer(self, shopping_service):
        response = _bundles(shopping_service, query="outfit", user_answer="women", scenario_id="campus")

        assert response.audience == "women"

    def test_unknown_scenario(self, shopping_service):
        with pytest.raises(InputError):
            _bundles(shopping_service, query="outfit", audience="men", scenario_id="mars_base")

    def test_budget_too_low(self, shopping_service):
        with pytest.raises(InsufficientCandidatesError) as exc_info:
            _bundles(shopping_service, query="outfit under 30", audience="men", scenario_id="nyc_dinner")

        assert exc_info.value.diagnostics["availableProducts"] == 0


class TestCompareAndInsight:
    """Tests for comparison and product insight."""

    def test_compare(self, shopping_service):
        verdict = asyncio.run(shopping_service.compare(
            CompareRequest(product_a_id="prod-nyc-men-001", product_b_id="prod-nyc-men-002")
        ))

        assert verdict.verdict.startswith("Choose B for budget")

    def test_compare_missing_id(self, shopping_service):
        with pytest.raises(InputError):
            asyncio.run(shopping_service.compare(CompareRequest(product_a_id="prod-nyc-men-001")))

    def test_compare_unknown_id(self, shopping_service):
        with pytest.raises(NotFoundError):
            asyncio.run(shopping_service.compare(
                CompareRequest(product_a_id="prod-nyc-men-001", product_b_id="nope")
            ))

    def test_insight_alternatives_in_scope(self, shopping_service):
        response = asyncio.run(shopping_service.product_insight(InsightRequest(product_id="prod-wed-men-002")))

        assert response.product_id == "prod-wed-men-002"
        alternatives = [shopping_service.get_product(a.id) for a in response.insight.alternatives]
        assert 1 <= len(alternatives) <= 2
        for alt in alternatives:
            assert alt.id != "prod-wed-men-002"
            assert alt.scenario_id == "summer_wedding"
            assert alt.audience == "men"

    def test_insight_alternatives_hide_pink_for_men(self, shopping_service):
        product = shopping_service.get_product("prod-wed-men-002")

        alternatives = shopping_service.insight_alternatives(product, {}, [], limit=50)

        assert alternatives
        assert all(alt.color != "Pink" for alt in alternatives)

    def test_insight_candidate_ids_filtered(self, shopping_service):
        product = shopping_service.get_product("prod-wed-men-002")

        alternatives = shopping_service.insight_alternatives(
            product, {}, ["prod-wed-men-003", "prod-nyc-men-003", "missing", "prod-wed-men-002"]
        )

        assert [alt.id for alt in alternatives] == ["prod-wed-men-003"]

    def test_insight_missing_id(self, shopping_service):
        with pytest.raises(InputError):
            asyncio.run(shopping_service.product_insight(InsightRequest()))

    def test_get_product_not_found(self, shopping_service):
        with pytest.raises(NotFoundError) as exc_info:
            shopping_service.get_product("prod-missing")

        assert exc_info.value.diagnostics == {"productId": "prod-missing"}
