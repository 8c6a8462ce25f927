"""
Tests for the assistant collaborator and its local fallbacks.

The OpenAI client is replaced by a MagicMock whose
chat.completions.create is an AsyncMock; no network calls are made.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import get_settings_for_testing
from core.errors import CollaboratorError
from search.models import Constraints, SortBy
from services.assistant import (
    AssistantCollaborator,
    InsightKind,
    extract_json,
    local_compare_verdict,
    local_product_insight,
    local_product_reasons,
)


def _make_client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
        return client

    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


def _make_assistant(client=None, **overrides):
    settings = get_settings_for_testing(assistant_enabled=True, **overrides)
    return AssistantCollaborator(settings=settings, client=client)


class TestExtractJson:
    """Tests for pulling JSON out of model replies."""

    def test_plain_object(self):
        assert extract_json('{"verdict": "A"}') == {"verdict": "A"}

    def test_code_fence(self):
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_surrounding_prose(self):
        assert extract_json('Sure! Here you go: {"a": 1} Hope it helps.') == {"a": 1}

    def test_trailing_commas(self):
        assert extract_json('[["a", "b",],]', expects_array=True) == [["a", "b"]]

    def test_wrong_type(self):
        with pytest.raises(CollaboratorError):
            extract_json('["a"]', expects_array=False)

    def test_invalid_json(self):
        with pytest.raises(CollaboratorError):
            extract_json("{not: json}")

    def test_empty(self):
        with pytest.raises(CollaboratorError):
            extract_json("")


class TestLocalFallbacks:
    """Tests for deterministic fallback text."""

    def test_product_reasons(self):
        assert local_product_reasons() == ["Matches your search criteria", "Good value for money", "Popular choice"]
        assert local_product_reasons("footwear")[0] == "Perfect footwear for this look"

    def test_compare_verdict(self, make_product):
        product_a = make_product(id="a", price=100, style="Formal")
        product_b = make_product(id="b", price=80, style="Classic")

        verdict = local_compare_verdict(product_a, product_b)

        assert verdict.verdict == "Choose B for budget, A for formal occasions."
        assert verdict.tags == ["Best for budget", "Best for formal"]
        assert verdict.bullets_a[0] == "Price: $100"

    def test_compare_verdict_without_formal(self, make_product):
        verdict = local_compare_verdict(make_product(id="a", price=50), make_product(id="b", price=80))

        assert verdict.verdict == "Choose A for budget, A for formal occasions."
        assert verdict.tags == ["Best for budget"]

    def test_product_insight(self, make_product):
        product = make_product(price=200, category="Shirts", color="White")
        cheaper = make_product(id="alt-1", price=120)
        pricier = make_product(id="alt-2", price=260, style="Vintage")

        insight = local_product_insight(product, [cheaper, pricier])

        assert insight.fit_summary == "Shirts in White fits your needs."
        assert insight.styling[0] == "Pair with trousers"
        assert [a.id for a in insight.alternatives] == ["alt-1", "alt-2"]
        assert insight.alternatives[0].reason == "Lower price at $120"
        assert insight.alternatives[1].reason == "Different style: Vintage"


class TestDisabledAssistant:
    """Without a key every helper answers locally."""

    def test_disabled_without_key(self, assistant):
        assert assistant.enabled is False
        assert asyncio.run(assistant.generate_text_insights(InsightKind.SHOPPING_BRIEF, {})) is None

    def test_enabled_flag_needs_key(self):
        assert _make_assistant().enabled is False
        assert _make_assistant(openai_api_key="sk-test").enabled is True

    def test_product_reasons(self, assistant, make_product):
        reasons = asyncio.run(assistant.product_reasons([make_product(), make_product(id="b")], "blazer"))

        assert reasons == [local_product_reasons(), local_product_reasons()]

    def test_shopping_brief(self, assistant):
        brief = asyncio.run(assistant.shopping_brief("blazer", "for work"))

        assert brief.notes == "Local fallback: No API key configured"
        assert brief.budget_max is None

    def test_constraint_delta_uses_local_parser(self, assistant):
        delta = asyncio.run(assistant.constraint_delta("exclude black, cheapest first", Constraints()))

        assert delta.color_exclude == "Black"
        assert delta.sort_by == SortBy.PRICE_ASC

    def test_compare_and_insight(self, assistant, make_product):
        product_a = make_product(id="a", price=100)
        product_b = make_product(id="b", price=80)

        verdict = asyncio.run(assistant.compare_verdict(product_a, product_b))
        insight = asyncio.run(assistant.product_insight(product_a, {}, [product_b]))

        assert verdict.verdict.startswith("Choose B for budget")
        assert insight.alternatives[0].id == "b"


class TestEnabledAssistant:
    """Tests with a stubbed client."""

    def test_product_reasons_parsed(self, make_product):
        client = _make_client('[["Sharp cut", "Office ready", "Navy works"], ["Good value", "Light", "Packable"]]')
        assistant = _make_assistant(client=client)

        reasons = asyncio.run(assistant.product_reasons(
            [make_product(id="a"), make_product(id="b")], "navy blazer"
        ))

        assert reasons[0] == ["Sharp cut", "Office ready", "Navy works"]
        assert reasons[1] == ["Good value", "Light", "Packable"]
        client.chat.completions.create.assert_awaited_once()

    def test_product_reasons_padded_and_backfilled(self, make_product):
        client = _make_client('[["Only one"], "not a list"]')
        assistant = _make_assistant(client=client)

        reasons = asyncio.run(assistant.product_reasons(
            [make_product(id="a"), make_product(id="b"), make_product(id="c")],
            "blazer",
            roles=["top", "bottom", None],
        ))

        assert reasons[0] == ["Only one", "Matches your search", "Good quality"]
        assert reasons[1] == local_product_reasons("bottom")
        assert reasons[2] == local_product_reasons()

    def test_uses_configured_model(self, make_product):
        client = _make_client('{"budgetMax": 150}')
        assistant = _make_assistant(client=client, assistant_model="gpt-test")

        asyncio.run(assistant.shopping_brief("blazer under 150"))

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"][0]["role"] == "system"

    def test_shopping_brief_parsed(self):
        assistant = _make_assistant(client=_make_client('{"budgetMax": "150", "color": "Navy", "notes": "work"}'))

        brief = asyncio.run(assistant.shopping_brief("navy blazer", "under 150"))

        assert brief.budget_max == 150
        assert brief.color == "Navy"

    def test_shopping_brief_failure(self):
        assistant = _make_assistant(client=_make_client(error=RuntimeError("timeout")))

        brief = asyncio.run(assistant.shopping_brief("navy blazer"))

        assert brief.notes == "Error generating brief"

    def test_compare_verdict_fenced(self, make_product):
        content = '```json\n{"verdict": "Choose A for work", "bulletsA": ["Sharp"], "bulletsB": [], "tags": ["Best for work"]}\n```'
        assistant = _make_assistant(client=_make_client(content))

        verdict = asyncio.run(assistant.compare_verdict(make_product(id="a"), make_product(id="b")))

        assert verdict.verdict == "Choose A for work"
        assert verdict.bullets_a == ["Sharp"]

    def test_malformed_reply_falls_back(self, make_product):
        assistant = _make_assistant(client=_make_client("I cannot help with that."))
        product_a = make_product(id="a", price=100)
        product_b = make_product(id="b", price=80)

        verdict = asyncio.run(assistant.compare_verdict(product_a, product_b))

        assert verdict == local_compare_verdict(product_a, product_b)

    def test_wrong_shape_falls_back(self, make_product):
        assistant = _make_assistant(client=_make_client('{"bulletsA": ["no verdict"]}'))
        product_a = make_product(id="a", price=100)
        product_b = make_product(id="b", price=80)

        verdict = asyncio.run(assistant.compare_verdict(product_a, product_b))

        assert verdict == local_compare_verdict(product_a, product_b)

    def test_constraint_delta_from_model(self):
        assistant = _make_assistant(client=_make_client('{"colorExclude": "Black", "budgetMax": 150, "sortBy": null}'))

        delta = asyncio.run(assistant.constraint_delta("no black, max 150", Constraints()))

        assert delta.color_exclude == "Black"
        assert delta.budget_max == 150
        assert delta.sort_by is None

    def test_constraint_delta_failure_uses_local(self):
        assistant = _make_assistant(client=_make_client(error=RuntimeError("boom")))

        delta = asyncio.run(assistant.constraint_delta("under 90", Constraints()))

        assert delta.budget_max == 90

    def test_product_insight_drops_unknown_alternatives(self, make_product):
        content = (
            '{"fitSummary": "Works for the office", "tradeoffs": [], "styling": [], '
            '"alternatives": [{"id": "made-up", "reason": "x"}, {"id": "alt-1", "reason": "Cheaper"}]}'
        )
        assistant = _make_assistant(client=_make_client(content))

        insight = asyncio.run(assistant.product_insight(
            make_product(), {}, [make_product(id="alt-1", price=80)]
        ))

        assert insight.fit_summary == "Works for the office"
        assert [a.id for a in insight.alternatives] == ["alt-1"]
