"""
Tests for query tokenization and synonym expansion.
"""

from search.tokenizer import base_tokens, expand_tokens, fold_number, tokenize_query


class TestBaseTokens:
    """Tests for significant-token selection."""

    def test_drops_stop_words_and_short_tokens(self):
        assert base_tokens("The black shirts for me under 50") == ["black", "shirts"]

    def test_lowercases(self):
        assert base_tokens("NAVY Blazer") == ["navy", "blazer"]

    def test_empty(self):
        assert base_tokens("") == []


class TestFoldNumber:
    def test_plural_to_singular(self):
        assert fold_number("shirts") == "shirt"

    def test_singular_to_plural(self):
        assert fold_number("shoe") == "shoes"

    def test_single_s(self):
        assert fold_number("s") is None


class TestExpandTokens:
    """Tests for synonym and typo expansion."""

    def test_original_token_first(self):
        assert expand_tokens(["sneakers"])[0] == "sneakers"

    def test_typo_correction(self):
        expanded = expand_tokens(["snikers"])

        assert "snikers" in expanded
        assert "sneakers" in expanded
        assert "sneaker" in expanded

    def test_synonyms_and_folded_forms(self):
        expanded = expand_tokens(["shoe"])

        assert "sneaker" in expanded
        assert "sneakers" in expanded
        assert "loafer" in expanded
        # folded "shoes" brings its own synonyms
        assert "shoes" in expanded
        assert "trainers" in expanded

    def test_deduplicated(self):
        expanded = expand_tokens(["shirt", "shirts"])

        assert len(expanded) == len(set(expanded))

    def test_unknown_token_still_folded(self):
        assert expand_tokens(["navy"]) == ["navy", "navys"]


class TestTokenizeQuery:
    def test_expands_significant_tokens(self):
        tokens = tokenize_query("black pants")

        assert tokens[:1] == ["black"]
        assert "trousers" in tokens
        assert "chinos" in tokens

    def test_deterministic(self):
        assert tokenize_query("navy blazer for work") == tokenize_query("navy blazer for work")
