"""
Tests for the error taxonomy.
"""

import pytest

from core.errors import (
    CollaboratorError,
    InputError,
    InsufficientCandidatesError,
    NotFoundError,
    ShoppingEngineError,
    TemplateResolutionError,
)


class TestShoppingEngineError:
    """Tests for the base error and its payload."""

    def test_to_dict(self):
        error = InsufficientCandidatesError("Need 3 products", {"availableProducts": 2})

        assert error.to_dict() == {
            "error": "InsufficientCandidatesError",
            "message": "Need 3 products",
            "diagnostics": {"availableProducts": 2},
        }

    def test_diagnostics_default_to_empty(self):
        assert InputError("Query is required").diagnostics == {}

    def test_message_is_str(self):
        assert str(NotFoundError("Product not found: x")) == "Product not found: x"


class TestHierarchy:
    """Client errors double as builtin exception types."""

    def test_input_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise InputError("bad")

    def test_not_found_is_lookup_error(self):
        with pytest.raises(LookupError):
            raise NotFoundError("missing")

    @pytest.mark.parametrize("error_class", [
        InputError, NotFoundError, InsufficientCandidatesError, TemplateResolutionError,
    ])
    def test_pipeline_errors_share_base(self, error_class):
        assert issubclass(error_class, ShoppingEngineError)

    def test_collaborator_error_is_separate(self):
        """Assistant failures are not pipeline errors."""
        assert not issubclass(CollaboratorError, ShoppingEngineError)
