"""Product scoring module."""

from dropship_ai.scoring.factors import (
    calculate_beginner_friendliness,
    calculate_confidence,
    calculate_niche_relevance,
    calculate_popularity,
    calculate_profit_margin,
    calculate_quality,
)
from dropship_ai.scoring.models import (
    Goal,
    NicheInfo,
    ProductAnalytics,
    ScoreBreakdown,
    ScoringConfig,
    ScoringProduct,
    ScoringResult,
    UserPreferences,
)
from dropship_ai.scoring.scorer import RankedProduct, rank_products, score_product

__all__ = [
    # Models
    "Goal",
    "NicheInfo",
    "ProductAnalytics",
    "ScoreBreakdown",
    "ScoringConfig",
    "ScoringProduct",
    "ScoringResult",
    "UserPreferences",
    # Factors
    "calculate_niche_relevance",
    "calculate_beginner_friendliness",
    "calculate_profit_margin",
    "calculate_quality",
    "calculate_popularity",
    "calculate_confidence",
    # Scorer
    "RankedProduct",
    "rank_products",
    "score_product",
]
