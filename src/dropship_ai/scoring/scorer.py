"""Weighted scoring system for recommending products.

Scoring factors:
| Factor                | Weight |
|-----------------------|--------|
| Niche Relevance       | 0.40   |
| Beginner-Friendliness | 0.20   |
| Profit Margin         | 0.15   |
| Quality               | 0.15   |
| Popularity            | 0.10   |

Sub-scores are 0-1 and the weights sum to 1, so the weighted sum is a
fraction. It is expressed on the 0-100 scale exactly once, before the flat
penalties below are applied:

    score = weighted_sum * 100
            - 15 (no images)
            - 10 (description missing or shorter than 10 chars)

clamped to 0-100 and rounded half up.
"""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from dropship_ai.scoring.factors import (
    calculate_beginner_friendliness,
    calculate_confidence,
    calculate_niche_relevance,
    calculate_popularity,
    calculate_profit_margin,
    calculate_quality,
)
from dropship_ai.scoring.models import (
    NicheInfo,
    ScoreBreakdown,
    ScoringConfig,
    ScoringProduct,
    ScoringResult,
    UserPreferences,
)


@dataclass
class RankedProduct:
    """A candidate paired with its scoring result."""

    product: ScoringProduct
    result: ScoringResult


def calculate_breakdown(
    product: ScoringProduct,
    preferences: UserPreferences,
    niche: NicheInfo | None = None,
    config: ScoringConfig | None = None,
) -> ScoreBreakdown:
    """Calculate all five sub-scores for a product."""
    if config is None:
        config = ScoringConfig()

    return ScoreBreakdown(
        niche_relevance=calculate_niche_relevance(product, preferences, niche, config),
        beginner_friendliness=calculate_beginner_friendliness(product, config),
        profit_margin=calculate_profit_margin(product, config),
        quality=calculate_quality(product),
        popularity=calculate_popularity(product, config),
    )


def weighted_sum(breakdown: ScoreBreakdown, config: ScoringConfig | None = None) -> float:
    """Combine sub-scores into a 0-1 fraction using the configured weights."""
    if config is None:
        config = ScoringConfig()

    return (
        breakdown.niche_relevance * config.niche_relevance_weight
        + breakdown.beginner_friendliness * config.beginner_friendliness_weight
        + breakdown.profit_margin * config.profit_margin_weight
        + breakdown.quality * config.quality_weight
        + breakdown.popularity * config.popularity_weight
    )


def score_product(
    product: ScoringProduct,
    preferences: UserPreferences,
    niche: NicheInfo | None = None,
    config: ScoringConfig | None = None,
) -> ScoringResult:
    """Calculate the complete score for a product.

    This is the main entry point for scoring a product. It is pure: the same
    inputs always produce the same result and nothing is mutated.

    Args:
        product: Product to score
        preferences: Caller's niche/goal preferences
        niche: Niche record for synonym matching (optional)
        config: Scoring configuration

    Returns:
        ScoringResult with score (0-100), confidence (0-1) and breakdown
    """
    if config is None:
        config = ScoringConfig()

    breakdown = calculate_breakdown(product, preferences, niche, config)
    score = weighted_sum(breakdown, config) * 100

    # Penalties for missing critical data
    if not product.images:
        score -= config.no_images_penalty
    if not product.description or len(product.description) < config.min_description_length:
        score -= config.short_description_penalty

    score = max(0.0, min(100.0, score))

    return ScoringResult(
        score=math.floor(score + 0.5),
        confidence=calculate_confidence(product),
        breakdown=breakdown,
    )


def rank_products(
    products: Iterable[ScoringProduct],
    preferences: UserPreferences,
    niche_for: Callable[[ScoringProduct], NicheInfo | None] | None = None,
    config: ScoringConfig | None = None,
) -> list[RankedProduct]:
    """Score and sort products, best first.

    Ties on score are broken by confidence (higher first), then by product
    id (ascending), so the order is reproducible.

    Args:
        products: Candidates to rank
        preferences: Caller's niche/goal preferences
        niche_for: Returns the niche record to match each product against
        config: Scoring configuration

    Returns:
        List of RankedProduct sorted by rank
    """
    ranked = []
    for product in products:
        niche = niche_for(product) if niche_for else None
        ranked.append(RankedProduct(product, score_product(product, preferences, niche, config)))

    ranked.sort(key=lambda r: (-r.result.score, -r.result.confidence, r.product.id))
    return ranked
