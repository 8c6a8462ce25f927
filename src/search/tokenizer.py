"""
Query tokenizer and synonym expansion.

Expansion only widens scoring recall. Nothing produced here is used as a
filter, so a noisy synonym can add score but never remove a product.
"""

from typing import Dict, Iterable, List, Optional

from search.vocabulary import MIN_TOKEN_LENGTH, STOP_WORDS, SYNONYMS, TYPO_CORRECTIONS


def base_tokens(query: str) -> List[str]:
    """Lowercased significant tokens of a query, before expansion."""
    return [
        token
        for token in query.lower().split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def fold_number(term: str) -> Optional[str]:
    """Naive singular/plural flip: "shirts" -> "shirt", "shoe" -> "shoes"."""
    if term.endswith("s"):
        return term[:-1] if len(term) > 1 else None
    return term + "s"


def expand_tokens(tokens: Iterable[str]) -> List[str]:
    """
    Expand tokens with typo corrections, synonyms and plural folding.

    Returns a deduplicated list in first-seen order: each original token,
    then its correction, its synonyms (and their folded forms), then its own
    folded form and that form's synonyms.
    """
    expanded: Dict[str, None] = {}

    def add(term: Optional[str]) -> None:
        if term:
            expanded.setdefault(term.lower(), None)

    for raw in tokens:
        token = raw.lower()
        add(token)

        corrected = TYPO_CORRECTIONS.get(token, token)
        add(corrected)

        for synonym in SYNONYMS.get(token) or SYNONYMS.get(corrected, []):
            add(synonym)
            add(fold_number(synonym.lower()))

        folded = fold_number(token)
        if folded:
            add(folded)
            for synonym in SYNONYMS.get(folded, []):
                add(synonym)

    return list(expanded)


def tokenize_query(query: str) -> List[str]:
    """Significant query tokens plus their expansions."""
    return expand_tokens(base_tokens(query))
