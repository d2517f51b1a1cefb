"""LLM-generated rationale and product copy via an OpenAI-compatible API.

Provides:
- Short bullet-point rationale for a recommended product
- SEO-friendly product copy (title, descriptions, bullets, meta)

Every public function degrades to deterministic fallback text when the API
key is missing or the call fails, so callers never see an LLM error.
"""

import hashlib
import json
import logging
import re
import time
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx

from dropship_ai.config import get_settings
from dropship_ai.scoring.models import NicheInfo, ScoringProduct, UserPreferences

logger = logging.getLogger(__name__)

SCRIPT_TAG_RE = re.compile(r"<script.*?>.*?</script>", re.IGNORECASE | re.DOTALL)
HTML_TAG_RE = re.compile(r"<[^>]+>")
# Longer phrases first so they are removed whole
BANNED_CLAIMS_RE = re.compile(
    r"\b(100% waterproof|100% safe|scientifically proven|guaranteed to go viral|"
    r"FDA-approved|guaranteed|proven|magic|viral|cure|heal|treat|medical|"
    r"prescription|diagnosis|FDA)\b|100%",
    re.IGNORECASE,
)
MULTI_SPACE_RE = re.compile(r"[ \t]{2,}")

DESCRIPTION_SAFETY_NOTE = "Review product specifications before publishing."


class LLMError(Exception):
    """Raised when the LLM API cannot produce a usable response."""


@dataclass
class SeoMeta:
    """Search engine metadata for a product page."""

    title: str
    description: str


@dataclass
class ProductCopy:
    """Generated product copy."""

    title: str
    short_description: str
    long_description: str
    bullets: list[str]
    seo_meta: SeoMeta
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys the storefront expects."""
        return {
            "title": self.title,
            "shortDescription": self.short_description,
            "longDescription": self.long_description,
            "bullets": list(self.bullets),
            "seoMeta": asdict(self.seo_meta),
            "fallback": self.fallback,
        }


@dataclass
class _CacheEntry:
    data: Any
    expires_at: float


@dataclass
class TTLCache:
    """Small in-process cache with per-entry expiry.

    Values are copied on the way in and out, so callers may mutate what
    they get back.
    """

    ttl_seconds: float
    clock: Any = time.monotonic
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, init=False, repr=False)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() > entry.expires_at:
            del self._entries[key]
            return None
        return deepcopy(entry.data)

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = _CacheEntry(
            data=deepcopy(data), expires_at=self.clock() + self.ttl_seconds
        )

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_ai_cache: TTLCache | None = None


def get_ai_cache() -> TTLCache:
    """Get the shared rationale/copy cache."""
    global _ai_cache
    if _ai_cache is None:
        _ai_cache = TTLCache(ttl_seconds=get_settings().ai_cache_ttl_seconds)
    return _ai_cache


def clear_ai_cache() -> None:
    """Drop every cached rationale and product copy."""
    get_ai_cache().clear()
    logger.info("Cleared AI cache")


def sanitize_llm_output(text: str | None) -> str:
    """Strip markup and exaggerated, medical or unverifiable claims."""
    if not text or not isinstance(text, str):
        return ""

    text = SCRIPT_TAG_RE.sub("", text)
    text = HTML_TAG_RE.sub("", text)
    text = BANNED_CLAIMS_RE.sub("", text)
    text = MULTI_SPACE_RE.sub(" ", text)
    return text.strip()


def hash_product_id(product_id: str) -> str:
    """Short stable hash so product ids are not logged verbatim."""
    return hashlib.sha256(product_id.encode()).hexdigest()[:16]


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


async def _call_chat_completion(
    messages: list[dict],
    temperature: float = 0.7,
    max_tokens: int = 200,
    json_mode: bool = False,
) -> str:
    """Make a call to the chat completions API.

    Args:
        messages: List of message dicts with role and content
        temperature: Sampling temperature
        max_tokens: Maximum tokens in response
        json_mode: Ask the model for a JSON object

    Returns:
        Raw message content from the first choice

    Raises:
        LLMError: If the key is missing, the call fails or the response is empty
    """
    settings = get_settings()

    if not settings.openai_api_key:
        raise LLMError("OPENAI_API_KEY not configured")

    headers = {
        "Authorization": f"Bearer {settings.openai_api_key}",
        "Content-Type": "application/json",
    }

    payload: dict[str, Any] = {
        "model": settings.openai_model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    try:
        async with httpx.AsyncClient(timeout=settings.rationale_timeout_seconds) as client:
            response = await client.post(
                f"{settings.openai_base_url.rstrip('/')}/chat/completions",
                headers=headers,
                json=payload,
            )
    except httpx.HTTPError as e:
        raise LLMError(f"LLM request failed: {e}") from e

    if response.status_code != 200:
        logger.error(f"LLM API error: {response.status_code} - {response.text[:500]}")
        raise LLMError(f"LLM API error: {response.status_code}")

    try:
        content = response.json()["choices"][0]["message"]["content"] or ""
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise LLMError(f"Unexpected LLM response shape: {e}") from e

    if not content.strip():
        raise LLMError("Empty LLM response")

    return content


def parse_bullets(content: str) -> list[str]:
    """Extract sanitised '-' or '•' bullet lines from model output."""
    bullets = []
    for line in content.splitlines():
        line = line.strip()
        if not (line.startswith("-") or line.startswith("•")):
            continue
        cleaned = sanitize_llm_output(re.sub(r"^[-•]\s*", "", line))
        if cleaned:
            bullets.append(cleaned)
    return bullets


def fallback_rationale(
    product: ScoringProduct,
    score: int,
    niche: NicheInfo | None = None,
) -> list[str]:
    """Deterministic rationale used when the LLM is unavailable."""
    niche_name = niche.name if niche and niche.name else "your niche"

    if product.cost_price and product.price > 0:
        margin = max(0.0, (product.price - product.cost_price) / product.price)
        margin_pct = round(margin * 100)
        margin_line = f"Estimated margin: {margin_pct}%"
    else:
        margin_line = "Estimated margin: 45% (cost price not provided)"

    return [
        f"Good fit for {niche_name} with a score of {score}/100.",
        f"Price point of ₹{product.price} is beginner-friendly.",
        margin_line,
    ]


def _rationale_cache_key(product_id: str, niche_id: str | None) -> str:
    return f"rationale:{product_id}:{niche_id or 'none'}"


async def generate_product_rationale(
    product: ScoringProduct,
    preferences: UserPreferences,
    score: int,
    niche: NicheInfo | None = None,
) -> list[str]:
    """Explain in 2-3 bullets why a product was recommended.

    Args:
        product: Recommended product
        preferences: Caller's niche/goal preferences
        score: Score the product received (0-100)
        niche: Niche the recommendation was made for (optional)

    Returns:
        List of short rationale lines
    """
    cache = get_ai_cache()
    product_hash = hash_product_id(product.id)
    cache_key = _rationale_cache_key(product.id, preferences.niche_id)

    cached = cache.get(cache_key)
    if cached is not None:
        logger.info(f"AI cache hit: rationale for product {product_hash}")
        return cached

    goal = preferences.goal.value if preferences.goal else "not specified"
    cost_line = (
        f"₹{product.cost_price}"
        if product.cost_price
        else "Not provided (estimated margin 45%)"
    )

    messages = [
        {
            "role": "system",
            "content": """You are an assistant helping beginner ecommerce store owners pick a single best product from a catalog.
The user has selected a niche and a goal. Use these inputs and the product attributes to explain why this product was chosen.

Rules:
- Output only 2-3 factual bullet points, each starting with "- "
- No marketing fluff or exaggerated claims
- No HTML formatting
- Mention margin is estimated if cost price is missing
- No invented specifications""",
        },
        {
            "role": "user",
            "content": f"""User goal: {goal}
Niche: {niche.name if niche and niche.name else 'not specified'}
Product: {product.title}
Price: ₹{product.price}
Cost Price: {cost_line}
Images: {len(product.images)}
Tags: {', '.join(product.tags) or 'none'}
Score: {score}/100

Explain in 2-3 bullets why this product is recommended for a beginner.""",
        },
    ]

    started = time.monotonic()
    try:
        content = await _call_chat_completion(messages, temperature=0.7, max_tokens=200)
    except LLMError as e:
        logger.warning(f"Rationale generation failed for product {product_hash}: {e}")
        rationale = fallback_rationale(product, score, niche)
        cache.set(cache_key, rationale)
        return rationale

    latency_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        f"AI request: rationale for product {product_hash}, "
        f"model={get_settings().openai_model}, latency={latency_ms}ms"
    )

    rationale = parse_bullets(content)[:3] or fallback_rationale(product, score, niche)[:2]
    cache.set(cache_key, rationale)
    return rationale


def fallback_product_copy(
    product: ScoringProduct,
    niche: NicheInfo | None = None,
) -> ProductCopy:
    """Generic copy used when the LLM is unavailable."""
    niche_name = niche.name if niche and niche.name else None
    return ProductCopy(
        title=product.title,
        short_description=f"A simple, beginner-friendly {niche_name or 'product'} product.",
        long_description=(
            "This product is ideal for new e-commerce sellers looking to start their store. "
            "It offers good value and is easy to list and sell. Perfect for beginners who "
            f"want to test the market with a reliable product. {DESCRIPTION_SAFETY_NOTE}"
        ),
        bullets=[
            "Beginner-friendly",
            "Easy to list and sell",
            "Affordable price point",
            "Good quality product",
            "Suitable for dropshipping",
        ],
        seo_meta=SeoMeta(
            title=product.title[:60],
            description=f"Affordable {product.title} for {niche_name or 'your store'}."[:150],
        ),
        fallback=True,
    )


def _text_field(data: dict, key: str, default: str) -> str:
    """Sanitised string value, or the default when missing or not a string."""
    return sanitize_llm_output(data.get(key)) or default


def _copy_from_response(data: dict, product: ScoringProduct) -> ProductCopy:
    seo = data.get("seoMeta")
    if not isinstance(seo, dict):
        seo = {}

    raw_bullets = data.get("bullets")
    if not isinstance(raw_bullets, list):
        raw_bullets = []
    bullets = [b for b in (sanitize_llm_output(b) for b in raw_bullets) if b][:5]
    while len(bullets) < 5:
        bullets.append(f"Benefit {len(bullets) + 1}")

    return ProductCopy(
        title=_text_field(data, "title", product.title),
        short_description=_text_field(
            data, "shortDescription", "A useful and affordable product."
        ),
        long_description=_text_field(
            data,
            "longDescription",
            "This product is great for beginners looking to start their store.",
        ),
        bullets=bullets,
        seo_meta=SeoMeta(
            title=_text_field(seo, "title", product.title)[:60],
            description=_text_field(seo, "description", f"Affordable {product.title}.")[:150],
        ),
        fallback=False,
    )


async def generate_product_description(
    product: ScoringProduct,
    tone: str = "persuasive",
    length: str = "short",
    niche: NicheInfo | None = None,
) -> ProductCopy:
    """Generate SEO-friendly product copy.

    Args:
        product: Product to write copy for
        tone: persuasive, informative or seo
        length: short or long
        niche: Niche the product belongs to (optional)

    Returns:
        ProductCopy (with fallback=True if the LLM could not be used)
    """
    cache = get_ai_cache()
    product_hash = hash_product_id(product.id)
    cache_key = f"description:{product.id}:{tone}:{length}"

    cached = cache.get(cache_key)
    if cached is not None:
        logger.info(f"AI cache hit: description for product {product_hash}")
        return cached

    length_rule = "concise" if length == "short" else "detailed (3-4 paragraphs)"
    messages = [
        {
            "role": "system",
            "content": f"""You are a product copywriter specialized in ecommerce. Given product data and target audience, produce SEO-friendly product copy.

Rules:
- No unverifiable claims (no "100%", "guaranteed", "FDA-approved")
- No compliance or health statements
- No made-up details or invented specifications
- No HTML formatting
- Always output valid JSON
- Keep tone {tone}
- Length should be {length_rule}
- Always include final safety note: {DESCRIPTION_SAFETY_NOTE}""",
        },
        {
            "role": "user",
            "content": f"""Product: {product.title}
Existing Description: {(product.description or '')[:1000]}
Price: ₹{product.price}
Images: {len(product.images)}
Tags: {', '.join(product.tags) or 'none'}
Supplier Link: {product.supplier_link or 'Not provided'}
Target audience: Beginner e-commerce store owner
Niche: {niche.name if niche and niche.name else 'General'}

Generate product copy as JSON:
{{
  "title": "SEO-friendly product title",
  "shortDescription": "One-line description",
  "longDescription": "3-4 short paragraphs for product page",
  "bullets": ["benefit 1", "benefit 2", "benefit 3", "benefit 4", "benefit 5"],
  "seoMeta": {{
    "title": "SEO meta title (60 chars max)",
    "description": "SEO meta description (150 chars max)"
  }}
}}""",
        },
    ]

    started = time.monotonic()
    try:
        content = await _call_chat_completion(
            messages, temperature=0.7, max_tokens=800, json_mode=True
        )
        try:
            data = json.loads(_strip_code_fence(content))
        except json.JSONDecodeError as e:
            raise LLMError(f"Invalid JSON response from LLM: {e}") from e
        if not isinstance(data, dict):
            raise LLMError("LLM response is not a JSON object")
        copy = _copy_from_response(data, product)
    except LLMError as e:
        logger.warning(f"Description generation failed for product {product_hash}: {e}")
        copy = fallback_product_copy(product, niche)
        cache.set(cache_key, copy)
        return copy

    latency_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        f"AI request: description for product {product_hash}, "
        f"model={get_settings().openai_model}, latency={latency_ms}ms"
    )

    cache.set(cache_key, copy)
    return copy
