"""
Assistant collaborator: short natural-language text from an LLM.

Used for per-product "why" reasons, follow-up constraint deltas, comparison
verdicts, product insights and shopping briefs. Every call is optional:

- One awaited request per call, never retried (max_retries=0)
- Disabled when no OpenAI API key is configured or the flag is off
- Any failure (timeout, API error, malformed JSON, wrong shape) is logged
  and replaced by deterministic local text

Nothing in this module raises to the caller.
"""

import json
import re
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from pydantic import ValidationError

from catalog.models import Product
from config.settings import Settings, get_settings
from core.errors import CollaboratorError
from core.logging import get_logger
from search.models import Constraints
from search.refinement import ConstraintDelta, parse_constraint_delta_local
from services.models import CompareVerdict, ProductInsight, ShoppingBrief

logger = get_logger(__name__)


class InsightKind(str, Enum):
    SHOPPING_BRIEF = "shopping_brief"
    PRODUCT_REASONS = "product_reasons"
    CONSTRAINT_DELTA = "constraint_delta"
    COMPARE_VERDICT = "compare_verdict"
    PRODUCT_INSIGHT = "product_insight"


_SYSTEM_PROMPT = "You are a helpful shopping assistant. Return only valid JSON. Keep responses concise."

# Products sent to the model per reasons call
MAX_REASON_PRODUCTS = 24

REASON_PADDING: List[str] = ["Matches your search", "Good quality", "Great value"]


# =============================================================================
# Prompts
# =============================================================================

class PromptSpec(NamedTuple):
    build: Callable[[Dict[str, Any]], str]
    expects_array: bool
    temperature: float
    max_tokens: int


def _brief_text(brief: Dict[str, Any]) -> str:
    parts = [f"{k}: {v}" for k, v in (brief or {}).items() if v is not None]
    return ", ".join(parts) or "None specified"


def _product_block(label: str, p: Dict[str, Any]) -> str:
    return (
        f"{label}: {p.get('title')} by {p.get('brand')}\n"
        f"- Price: ${p.get('price')}\n"
        f"- Category: {p.get('category')}\n"
        f"- Color: {p.get('color')}\n"
        f"- Style: {p.get('style')}\n"
        f"- Occasions: {', '.join(p.get('occasionTags') or []) or 'N/A'}"
    )


def _shopping_brief_prompt(payload: Dict[str, Any]) -> str:
    answer = payload.get("userAnswer")
    return (
        "Based on the user's query and optional answer, create a shopping brief.\n\n"
        f'Query: "{payload.get("query", "")}"\n'
        + (f'User\'s answer: "{answer}"\n' if answer else "")
        + "\nReturn ONLY a JSON object (null if not specified):\n"
        '{"budgetMax": number|null, "category": string|null, "color": string|null, '
        '"occasion": string|null, "style": string|null, "notes": string}\n'
        "Only include fields that are clearly mentioned."
    )


def _product_reasons_prompt(payload: Dict[str, Any]) -> str:
    lines = []
    for idx, p in enumerate(payload.get("products", []), start=1):
        role = f" [Role: {p['role']}]" if p.get("role") else ""
        lines.append(f"{idx}. {p.get('title')} ({p.get('brand')}) - ${p.get('price')}{role}")
    answer = payload.get("userAnswer")
    return (
        f'For each product, return 3 short reasons (max 12 words each) why it matches "{payload.get("query", "")}".\n'
        + (f'User said: "{answer}"\n' if answer else "")
        + "\n" + "\n".join(lines) + "\n\n"
        'Return JSON array: [["reason1","reason2","reason3"], ...]\n'
        "No reviews. Keep it short."
    )


def _constraint_delta_prompt(payload: Dict[str, Any]) -> str:
    return (
        f'A user wants to refine their search with: "{payload.get("followUp", "")}"\n\n'
        f"Current constraints: {json.dumps(payload.get('existing', {}))}\n\n"
        "Extract only the NEW or CHANGED constraints. Return ONLY a JSON object "
        "(null if not specified):\n"
        '{"budgetMax": number|null, "category": string|null, "colorInclude": string|null, '
        '"colorExclude": string|null, "style": string|null, "occasion": string|null, '
        '"includeKeywords": string[]|null, "excludeKeywords": string[]|null, '
        '"sortBy": "price_asc"|"price_desc"|null}\n\n'
        "Rules:\n"
        '- "exclude black" -> colorExclude: "Black"\n'
        '- "under 150" -> budgetMax: 150\n'
        '- "show sneakers" -> category: "Sneakers"\n'
        '- "more formal" -> style: "Formal" and occasion: "Formal"\n'
        '- "cheapest first" -> sortBy: "price_asc"'
    )


def _compare_verdict_prompt(payload: Dict[str, Any]) -> str:
    return (
        "Compare two products for a user:\n\n"
        f"{_product_block('Product A', payload.get('productA', {}))}\n\n"
        f"{_product_block('Product B', payload.get('productB', {}))}\n\n"
        f"User's brief: {_brief_text(payload.get('brief', {}))}\n\n"
        "Return ONLY a JSON object:\n"
        '{"verdict": "Choose A if..., choose B if...", "bulletsA": ["..."], '
        '"bulletsB": ["..."], "tags": ["Best for budget"]}\n'
        "Verdict under 30 words, bullets max 10 words, 1-3 tags."
    )


def _product_insight_prompt(payload: Dict[str, Any]) -> str:
    product = payload.get("product", {})
    alternatives = "\n".join(
        f"{a.get('id')}: {a.get('title')} ({a.get('brand')}) - ${a.get('price')}"
        for a in payload.get("alternatives", [])
    )
    return (
        "Provide insights for this product:\n\n"
        f"{_product_block('Product', product)}\n"
        f"- Description: {product.get('description', '')}\n\n"
        f"User's brief: {_brief_text(payload.get('brief', {}))}\n\n"
        f"Alternatives available:\n{alternatives or 'None'}\n\n"
        "Return ONLY a JSON object:\n"
        '{"fitSummary": "one sentence", "tradeoffs": ["..."], "styling": ["..."], '
        '"alternatives": [{"id": "productId", "reason": "..."}]}\n'
        "Max 15 words per item. Only use alternative ids from the list."
    )


PROMPTS: Dict[InsightKind, PromptSpec] = {
    InsightKind.SHOPPING_BRIEF: PromptSpec(_shopping_brief_prompt, False, 0.3, 200),
    InsightKind.PRODUCT_REASONS: PromptSpec(_product_reasons_prompt, True, 0.5, 4000),
    InsightKind.CONSTRAINT_DELTA: PromptSpec(_constraint_delta_prompt, False, 0.3, 200),
    InsightKind.COMPARE_VERDICT: PromptSpec(_compare_verdict_prompt, False, 0.5, 300),
    InsightKind.PRODUCT_INSIGHT: PromptSpec(_product_insight_prompt, False, 0.5, 400),
}


# =============================================================================
# JSON extraction
# =============================================================================

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")


def extract_json(content: Optional[str], expects_array: bool = False) -> Any:
    """
    Pull the first JSON object (or array) out of a model reply.

    Handles markdown code fences, surrounding prose and trailing commas.

    Raises:
        CollaboratorError: no parseable JSON of the expected shape.
    """
    if not content:
        raise CollaboratorError("Empty response")

    fenced = _CODE_FENCE_RE.search(content)
    text = fenced.group(1) if fenced else content

    match = (_ARRAY_RE if expects_array else _OBJECT_RE).search(text)
    if not match:
        raise CollaboratorError("No JSON found in response")

    try:
        data = json.loads(_TRAILING_COMMA_RE.sub(r"\1", match.group(0)))
    except json.JSONDecodeError as e:
        raise CollaboratorError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list if expects_array else dict):
        raise CollaboratorError(f"Unexpected JSON type: {type(data).__name__}")
    return data


# =============================================================================
# Local fallbacks
# =============================================================================

def local_product_reasons(role: Optional[str] = None) -> List[str]:
    return [
        f"Perfect {role} for this look" if role else "Matches your search criteria",
        "Good value for money",
        "Popular choice",
    ]


def local_shopping_brief(notes: str = "Local fallback: No API key configured") -> ShoppingBrief:
    return ShoppingBrief(notes=notes)


def local_compare_verdict(product_a: Product, product_b: Product) -> CompareVerdict:
    cheaper = "A" if product_a.price < product_b.price else "B"
    if product_a.style == "Formal":
        more_formal = "A"
    elif product_b.style == "Formal":
        more_formal = "B"
    else:
        more_formal = "A"

    tags = ["Best for budget"]
    if "Formal" in (product_a.style, product_b.style):
        tags.append("Best for formal")

    return CompareVerdict(
        verdict=f"Choose {cheaper} for budget, {more_formal} for formal occasions.",
        bullets_a=[f"Price: ${product_a.price}", f"Style: {product_a.style}", f"Color: {product_a.color}"],
        bullets_b=[f"Price: ${product_b.price}", f"Style: {product_b.style}", f"Color: {product_b.color}"],
        tags=tags,
    )


def _pairing(category: str) -> str:
    if category == "Shirts":
        return "trousers"
    if category == "Dresses":
        return "accessories"
    return "shirts"


def local_product_insight(product: Product, alternatives: Sequence[Product]) -> ProductInsight:
    tags = list(product.occasion_tags)
    return ProductInsight(
        fit_summary=f"{product.category} in {product.color} fits your needs.",
        tradeoffs=[
            f"Price: ${product.price}",
            f"Style: {product.style}",
            f"Occasions: {', '.join(tags[:2])}",
        ],
        styling=[
            f"Pair with {_pairing(product.category)}",
            f"Works for {tags[0] if tags else 'casual'} occasions",
            f"{product.color} complements neutral colors",
        ],
        alternatives=[
            {
                "id": alt.id,
                "reason": f"Lower price at ${alt.price}" if alt.price < product.price
                else f"Different style: {alt.style}",
            }
            for alt in list(alternatives)[:2]
        ],
    )


# =============================================================================
# Collaborator
# =============================================================================

class AssistantCollaborator:
    """LLM text generation with deterministic local fallbacks."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        settings = settings or get_settings()
        self._client = client
        self._client_lock = threading.Lock()
        self._api_key = settings.openai_api_key
        self._model = settings.assistant_model
        self._timeout = settings.assistant_timeout_seconds
        self._enabled = settings.assistant_enabled and (bool(self._api_key) or client is not None)

    @property
    def client(self):
        """Lazy-load the async OpenAI client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    from openai import AsyncOpenAI
                    self._client = AsyncOpenAI(
                        api_key=self._api_key,
                        timeout=self._timeout,
                        max_retries=0,
                    )
        return self._client

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def generate_text_insights(self, kind: InsightKind, payload: Dict[str, Any]) -> Optional[Any]:
        """
        Ask the model for structured text.

        Returns:
            Parsed JSON (dict, or list for product reasons), or None when the
            assistant is disabled or the call fails in any way.
        """
        kind_name = kind.value if isinstance(kind, InsightKind) else str(kind)
        if not self._enabled:
            logger.debug("Assistant disabled (no API key or feature flag off)", kind=kind_name)
            return None

        try:
            prompt = PROMPTS[InsightKind(kind)]
            response = await self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": prompt.build(payload)},
                ],
                temperature=prompt.temperature,
                max_tokens=prompt.max_tokens,
            )
            content = response.choices[0].message.content
            return extract_json(content, prompt.expects_array)
        except CollaboratorError as e:
            logger.warning("Assistant returned unusable content", kind=kind_name, error=str(e))
            return None
        except Exception as e:
            logger.warning("Assistant call failed, using fallback", kind=kind_name, error=str(e))
            return None

    # -------------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------------

    async def shopping_brief(self, query: str, user_answer: Optional[str] = None) -> ShoppingBrief:
        if not self._enabled:
            return local_shopping_brief()

        data = await self.generate_text_insights(
            InsightKind.SHOPPING_BRIEF, {"query": query, "userAnswer": user_answer}
        )
        if data is None:
            return local_shopping_brief("Error generating brief")
        try:
            return ShoppingBrief.model_validate(data)
        except ValidationError as e:
            logger.warning("Shopping brief failed validation", error=str(e))
            return local_shopping_brief("Error generating brief")

    async def product_reasons(
        self,
        products: Sequence[Product],
        query: str,
        user_answer: Optional[str] = None,
        roles: Optional[Sequence[Optional[str]]] = None,
    ) -> List[List[str]]:
        """Exactly three short reasons per product, in input order."""
        roles = list(roles) if roles is not None else [None] * len(products)
        fallback = [local_product_reasons(role) for role in roles]
        if not products:
            return []

        payload = {
            "query": query,
            "userAnswer": user_answer,
            "products": [
                {"title": p.title, "brand": p.brand, "price": p.price, "category": p.category, "role": role}
                for p, role in zip(list(products)[:MAX_REASON_PRODUCTS], roles)
            ],
        }
        data = await self.generate_text_insights(InsightKind.PRODUCT_REASONS, payload)
        if data is None:
            return fallback

        reasons: List[List[str]] = []
        for idx in range(len(products)):
            entry = data[idx] if idx < len(data) else None
            if not isinstance(entry, list):
                reasons.append(fallback[idx])
                continue
            cleaned = [str(r).strip() for r in entry if isinstance(r, (str, int, float)) and str(r).strip()]
            if not cleaned:
                reasons.append(fallback[idx])
                continue
            reasons.append((cleaned + REASON_PADDING)[:3])
        return reasons

    async def constraint_delta(self, follow_up: str, existing: Constraints) -> ConstraintDelta:
        data = await self.generate_text_insights(
            InsightKind.CONSTRAINT_DELTA, {"followUp": follow_up, "existing": existing.to_dict()}
        )
        if data is not None:
            try:
                return ConstraintDelta.model_validate(data)
            except (ValidationError, ValueError) as e:
                logger.warning("Constraint delta failed validation", error=str(e))
        return parse_constraint_delta_local(follow_up)

    async def compare_verdict(
        self, product_a: Product, product_b: Product, brief: Optional[Dict[str, Any]] = None
    ) -> CompareVerdict:
        data = await self.generate_text_insights(
            InsightKind.COMPARE_VERDICT,
            {"productA": product_a.to_dict(), "productB": product_b.to_dict(), "brief": brief or {}},
        )
        if data is not None:
            try:
                return CompareVerdict.model_validate(data)
            except ValidationError as e:
                logger.warning("Compare verdict failed validation", error=str(e))
        return local_compare_verdict(product_a, product_b)

    async def product_insight(
        self,
        product: Product,
        brief: Optional[Dict[str, Any]] = None,
        alternatives: Sequence[Product] = (),
    ) -> ProductInsight:
        data = await self.generate_text_insights(
            InsightKind.PRODUCT_INSIGHT,
            {
                "product": product.to_dict(),
                "brief": brief or {},
                "alternatives": [alt.to_summary() for alt in alternatives],
            },
        )
        if data is not None:
            try:
                insight = ProductInsight.model_validate(data)
            except ValidationError as e:
                logger.warning("Product insight failed validation", error=str(e))
            else:
                # Models sometimes invent ids
                allowed = {alt.id for alt in alternatives}
                insight.alternatives = [a for a in insight.alternatives if a.id in allowed][:2]
                return insight
        return local_product_insight(product, alternatives)


# =============================================================================
# Singleton
# =============================================================================

_assistant: Optional[AssistantCollaborator] = None
_assistant_lock = threading.Lock()


def get_assistant() -> AssistantCollaborator:
    """Get or create the AssistantCollaborator singleton (thread-safe)."""
    global _assistant
    if _assistant is None:
        with _assistant_lock:
            if _assistant is None:
                _assistant = AssistantCollaborator()
    return _assistant
