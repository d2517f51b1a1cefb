"""Business logic services."""

from dropship_ai.services.rate_limiter import (
    InMemoryFixedWindowRateLimiter,
    RateLimitDecision,
    RateLimiter,
    SqlFixedWindowRateLimiter,
)
from dropship_ai.services.recommendation import (
    BudgetRange,
    Recommendation,
    RecommendationError,
    RecommendationMode,
    RecommendationResult,
    RecommendationService,
    WinningProductRequest,
)

__all__ = [
    # Rate limiting
    "InMemoryFixedWindowRateLimiter",
    "RateLimitDecision",
    "RateLimiter",
    "SqlFixedWindowRateLimiter",
    # Recommendations
    "BudgetRange",
    "Recommendation",
    "RecommendationError",
    "RecommendationMode",
    "RecommendationResult",
    "RecommendationService",
    "WinningProductRequest",
]
