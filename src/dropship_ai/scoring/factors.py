"""Sub-score calculations for product scoring.

Each function returns a value in the 0-1 range and never raises for
missing optional data.
"""

from dropship_ai.scoring.models import (
    NicheInfo,
    ScoringConfig,
    ScoringProduct,
    UserPreferences,
)


def calculate_niche_relevance(
    product: ScoringProduct,
    preferences: UserPreferences,
    niche: NicheInfo | None = None,
    config: ScoringConfig | None = None,
) -> float:
    """Calculate how well the product matches the requested niche.

    Exact niche match = 1.0, tag/synonym overlap = 0.6, anything else = 0.1.
    The floor is deliberately non-zero so unmatched products stay rankable.
    """
    if config is None:
        config = ScoringConfig()

    if not preferences.niche_id or not product.niche_id:
        return config.default_niche_score

    if str(product.niche_id) == str(preferences.niche_id):
        return config.exact_niche_score

    if niche and product.tags and niche.synonyms:
        tags = [t.lower() for t in product.tags if t]
        synonyms = [s.lower() for s in niche.synonyms if s]
        has_overlap = any(
            syn in tag or tag in syn for tag in tags for syn in synonyms
        )
        if has_overlap:
            return config.related_niche_score

    return config.default_niche_score


def calculate_beginner_friendliness(
    product: ScoringProduct,
    config: ScoringConfig | None = None,
) -> float:
    """Calculate how suitable the product is for a first-time seller.

    Moderate price, a short title and at least one image all help. Very
    cheap products get the whole running score scaled down.
    """
    if config is None:
        config = ScoringConfig()

    score = 0.0

    # --- Price band ---
    if config.beginner_price_min <= product.price <= config.beginner_price_max:
        score += 0.6
    elif product.price < config.beginner_price_min:
        score += 0.2  # Too cheap, suspect quality
    else:
        score += 0.3

    # --- Simple title ---
    if product.title and len(product.title) < config.max_simple_title_length:
        score += 0.2

    # --- Has an image ---
    if product.images:
        score += 0.2

    if product.price < config.low_price_threshold:
        score *= config.low_price_multiplier

    return min(1.0, score)


def calculate_profit_margin(
    product: ScoringProduct,
    config: ScoringConfig | None = None,
) -> float:
    """Calculate gross margin as a fraction of the selling price.

    Formula: (price - cost_price) / price, clamped to 0-1.
    Falls back to the estimated margin when cost price is unknown.
    """
    if config is None:
        config = ScoringConfig()

    if product.price <= 0:
        return 0.0

    if product.cost_price is not None and product.cost_price > 0:
        margin = (product.price - product.cost_price) / product.price
    else:
        margin = config.estimated_margin

    return max(0.0, min(1.0, margin))


def calculate_quality(product: ScoringProduct) -> float:
    """Calculate listing quality from description length and image count."""
    score = 0.0

    # --- Description (200-1000 chars is optimal) ---
    desc_length = len(product.description) if product.description else 0
    if 200 <= desc_length <= 1000:
        score += 0.5
    elif desc_length >= 100:
        score += 0.3
    elif desc_length >= 50:
        score += 0.1

    # --- Images ---
    if len(product.images) >= 2:
        score += 0.5
    elif len(product.images) == 1:
        score += 0.2

    return min(1.0, score)


def calculate_popularity(
    product: ScoringProduct,
    config: ScoringConfig | None = None,
) -> float:
    """Calculate popularity from views and imports.

    Imports count for 60% and views for 40%, each saturating at its
    configured normaliser.
    """
    if config is None:
        config = ScoringConfig()

    analytics = product.analytics
    views = analytics.views if analytics else 0
    imports = analytics.imports if analytics else 0

    normalized_views = min(1.0, views / config.views_for_full_score)
    normalized_imports = min(1.0, imports / config.imports_for_full_score)

    return (
        normalized_imports * config.imports_share
        + normalized_views * (1 - config.imports_share)
    )


def calculate_confidence(product: ScoringProduct) -> float:
    """Calculate how much real data backed the score (0.5-1.0).

    Independent of the score itself: a sparse product can still score well,
    it just does so with less confidence.
    """
    confidence = 0.5

    if product.cost_price is not None and product.cost_price > 0:
        confidence += 0.2

    analytics = product.analytics
    if analytics and (analytics.views or analytics.imports):
        confidence += 0.15

    if product.tags:
        confidence += 0.1

    if product.supplier_link:
        confidence += 0.05

    return min(1.0, round(confidence, 4))
