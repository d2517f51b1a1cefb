"""Data models for product scoring.

Prices are integers in the minor currency unit (paise for INR).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Goal(str, Enum):
    """What the seller wants to build."""

    DROPSHIP = "dropship"
    BRAND = "brand"
    START_SMALL = "start_small"


class ProductAnalytics(BaseModel):
    """Engagement counters tracked for a catalog product."""

    views: int = Field(0, ge=0, description="Product page views")
    imports: int = Field(0, ge=0, description="Times imported into a seller store")
    conversions: int = Field(0, ge=0, description="Orders attributed to the product")


class ScoringProduct(BaseModel):
    """Input product data for scoring.

    Only ``price`` is required. Everything else may be absent and the scorer
    falls back to neutral defaults.
    """

    model_config = ConfigDict(populate_by_name=True)

    # Identification
    id: str = Field(..., description="Unique product identifier")
    title: str = Field("", description="Product title")

    # Pricing
    price: int = Field(..., ge=0, description="Selling price (minor units)")
    cost_price: Optional[int] = Field(
        None, alias="costPrice", description="Acquisition cost (minor units)"
    )

    # Catalog placement
    niche_id: Optional[str] = Field(None, alias="niche", description="Assigned niche id")
    tags: list[str] = Field(default_factory=list, description="Free-form product tags")

    # Listing content
    images: list[str] = Field(default_factory=list, description="Image URLs")
    description: Optional[str] = Field(None, description="Listing description")

    # Supplier and engagement
    supplier_link: Optional[str] = Field(
        None, alias="supplierLink", description="URL to the supplier listing"
    )
    analytics: Optional[ProductAnalytics] = Field(None, description="Engagement counters")


class NicheInfo(BaseModel):
    """Niche record used for fuzzy relevance matching."""

    id: str
    name: str = ""
    synonyms: list[str] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """What the caller is looking for."""

    niche_id: Optional[str] = Field(None, description="Preferred niche id")
    # Accepted for future weighting; not used by the scoring math yet.
    goal: Optional[Goal] = Field(None, description="Seller goal")


class ScoringConfig(BaseModel):
    """Configuration for scoring calculations."""

    # Factor weights (sum to 1.0)
    niche_relevance_weight: float = Field(0.40, description="Weight of niche relevance")
    beginner_friendliness_weight: float = Field(0.20, description="Weight of beginner fit")
    profit_margin_weight: float = Field(0.15, description="Weight of profit margin")
    quality_weight: float = Field(0.15, description="Weight of listing quality")
    popularity_weight: float = Field(0.10, description="Weight of popularity")

    # Niche relevance
    exact_niche_score: float = Field(1.0, description="Product niche equals requested niche")
    related_niche_score: float = Field(0.6, description="Tags overlap niche synonyms")
    default_niche_score: float = Field(0.1, description="No match or no preference")

    # Beginner price band (minor units, inclusive)
    beginner_price_min: int = Field(10, description="Lower bound of the beginner band")
    beginner_price_max: int = Field(3000, description="Upper bound of the beginner band")
    low_price_threshold: int = Field(99, description="Prices below this are suspicious")
    low_price_multiplier: float = Field(0.7, description="Multiplier for suspicious prices")
    max_simple_title_length: int = Field(60, description="Titles shorter than this are simple")

    # Margin
    estimated_margin: float = Field(0.45, description="Assumed margin when cost is unknown")

    # Popularity normalisers
    views_for_full_score: int = Field(1000, description="Views that saturate popularity")
    imports_for_full_score: int = Field(100, description="Imports that saturate popularity")
    imports_share: float = Field(0.6, description="Share of popularity driven by imports")

    # Flat penalties (points on the 0-100 scale)
    no_images_penalty: float = Field(15.0, description="Penalty when there are no images")
    short_description_penalty: float = Field(10.0, description="Penalty for missing description")
    min_description_length: int = Field(10, description="Shorter descriptions are penalised")


class ScoreBreakdown(BaseModel):
    """Per-factor sub-scores, each 0-1 before weighting."""

    model_config = ConfigDict(populate_by_name=True)

    niche_relevance: float = Field(0.0, alias="nicheRelevance")
    beginner_friendliness: float = Field(0.0, alias="beginnerFriendliness")
    profit_margin: float = Field(0.0, alias="profitMargin")
    quality: float = Field(0.0, alias="quality")
    popularity: float = Field(0.0, alias="popularity")


class ScoringResult(BaseModel):
    """Calculated score for a product."""

    score: int = Field(..., ge=0, le=100, description="Overall score (0-100)")
    confidence: float = Field(..., ge=0, le=1, description="How much real data backed the score")
    breakdown: ScoreBreakdown
