"""
Tests for follow-up deltas and constraint merging.
"""

import pytest

from search.models import Constraints, SortBy
from search.refinement import ConstraintDelta, merge_constraints, parse_constraint_delta_local


class TestConstraintDelta:
    """Tests for the delta model."""

    def test_reads_camel_case(self):
        delta = ConstraintDelta.model_validate({
            "budgetMax": "150",
            "colorExclude": "Black",
            "sortBy": "price_asc",
            "somethingElse": True,
        })

        assert delta.budget_max == 150
        assert delta.color_exclude == "Black"
        assert delta.sort_by == SortBy.PRICE_ASC

    def test_float_budget(self):
        assert ConstraintDelta.model_validate({"budgetMax": 99.9}).budget_max == 99

    def test_is_empty(self):
        assert ConstraintDelta().is_empty()
        assert not ConstraintDelta(category="Jeans").is_empty()


class TestParseConstraintDeltaLocal:
    """Tests for the deterministic follow-up parser."""

    def test_budget(self):
        assert parse_constraint_delta_local("under $150").budget_max == 150
        assert parse_constraint_delta_local("less than 90 please").budget_max == 90

    def test_exclude_color(self):
        assert parse_constraint_delta_local("exclude black").color_exclude == "Black"

    def test_exclude_non_color_ignored(self):
        assert parse_constraint_delta_local("exclude suede").color_exclude is None

    def test_include_color(self):
        assert parse_constraint_delta_local("only navy").color_include == "Navy"
        assert parse_constraint_delta_local("show them in grey").color_include == "Gray"

    def test_category(self):
        assert parse_constraint_delta_local("show loafers instead").category == "Loafers"
        assert parse_constraint_delta_local("t-shirts please").category == "T-Shirts"

    def test_formal(self):
        delta = parse_constraint_delta_local("something more formal")

        assert delta.style == "Formal"
        assert delta.occasion == "Formal"

    def test_informal_is_not_formal(self):
        delta = parse_constraint_delta_local("something informal")

        assert delta.style is None
        assert delta.occasion is None

    def test_relaxed(self):
        assert parse_constraint_delta_local("more relaxed").style == "Casual"

    @pytest.mark.parametrize("text,sort_by", [
        ("cheapest first", SortBy.PRICE_ASC),
        ("lowest price", SortBy.PRICE_ASC),
        ("most expensive", SortBy.PRICE_DESC),
    ])
    def test_sort(self, text, sort_by):
        assert parse_constraint_delta_local(text).sort_by == sort_by

    def test_combined(self):
        delta = parse_constraint_delta_local("exclude black, under 150")

        assert delta.color_exclude == "Black"
        assert delta.budget_max == 150

    def test_nothing_recognized(self):
        assert parse_constraint_delta_local("hmm not sure").is_empty()


class TestMergeConstraints:
    """Tests for applying a delta."""

    def _make_constraints(self, **kw):
        defaults = {"category": "Sneakers", "color": "Black", "budget_max": 200}
        defaults.update(kw)
        return Constraints(**defaults)

    def test_overrides_set_fields(self):
        merged = merge_constraints(self._make_constraints(), ConstraintDelta(budget_max=120, style="Casual"))

        assert merged.budget_max == 120
        assert merged.style == "Casual"
        assert merged.category == "Sneakers"

    def test_exclude_clears_included_color(self):
        merged = merge_constraints(self._make_constraints(), ConstraintDelta(color_exclude="Black"))

        assert merged.color_exclude == "Black"
        assert merged.color is None

    def test_include_replaces_color_and_lifts_matching_exclusion(self):
        existing = self._make_constraints(color=None, color_exclude="White")

        merged = merge_constraints(existing, ConstraintDelta(color_include="White"))

        assert merged.color == "White"
        assert merged.color_exclude is None

    def test_sort_by(self):
        merged = merge_constraints(self._make_constraints(), ConstraintDelta(sort_by=SortBy.PRICE_DESC))

        assert merged.sort_by == "price_desc"

    def test_input_not_modified(self):
        existing = self._make_constraints()

        merge_constraints(existing, ConstraintDelta(color_exclude="Black", exclude_keywords=["suede"]))

        assert existing.color == "Black"
        assert existing.color_exclude is None
        assert existing.exclude_keywords == []

    def test_empty_delta_is_identity(self):
        existing = self._make_constraints()

        assert merge_constraints(existing, ConstraintDelta()) == existing
