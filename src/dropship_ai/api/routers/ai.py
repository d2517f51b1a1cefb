"""AI recommendation API endpoints.

Endpoints:
- POST /ai/find-winning-product - best product(s) for the caller's niche
- POST /ai/write-product-description - generate product copy
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from dropship_ai.api.deps import enforce_ai_rate_limit, get_current_user
from dropship_ai.db.base import get_db
from dropship_ai.db.models import User
from dropship_ai.scoring.models import ScoreBreakdown
from dropship_ai.services.recommendation import (
    BudgetRange,
    Recommendation,
    RecommendationError,
    RecommendationMode,
    RecommendationService,
    WinningProductRequest,
)

router = APIRouter(prefix="/ai", tags=["ai"])


class CamelModel(BaseModel):
    """Base for wire models that use camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BudgetRangeBody(CamelModel):
    """Inclusive price bounds in minor units."""

    min: int | None = Field(None, ge=0)
    max: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "BudgetRangeBody":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("budgetRange.min must not exceed budgetRange.max")
        return self


class FindWinningProductBody(CamelModel):
    """Request body for finding a winning product."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    niche_id: str | None = Field(None, min_length=1, max_length=64)
    budget_range: BudgetRangeBody | None = None
    mode: RecommendationMode = RecommendationMode.SINGLE

    def to_request(self) -> WinningProductRequest:
        budget = None
        if self.budget_range is not None:
            budget = BudgetRange(min=self.budget_range.min, max=self.budget_range.max)
        return WinningProductRequest(niche_id=self.niche_id, budget_range=budget, mode=self.mode)


class ProductSummary(CamelModel):
    """Product fields returned with a recommendation."""

    id: str
    title: str
    description: str | None
    price: int
    images: list[str]
    niche_id: str | None
    cost_price: int | None
    tags: list[str]
    supplier_link: str | None


class RecommendationOut(CamelModel):
    """One recommendation in the response."""

    product_id: str
    product: ProductSummary
    score: int
    confidence: float
    rationale: list[str]
    breakdown: ScoreBreakdown
    action_links: dict[str, str]
    note: str | None = None

    @classmethod
    def from_recommendation(cls, rec: Recommendation) -> "RecommendationOut":
        p = rec.product
        return cls(
            product_id=p.id,
            product=ProductSummary(
                id=p.id,
                title=p.title,
                description=p.description,
                price=p.price,
                images=p.images,
                niche_id=p.niche_id,
                cost_price=p.cost_price,
                tags=p.tags,
                supplier_link=p.supplier_link,
            ),
            score=rec.score,
            confidence=rec.confidence,
            rationale=rec.rationale,
            breakdown=rec.breakdown,
            action_links=rec.action_links,
            note=rec.note,
        )


class FindWinningProductResponse(CamelModel):
    """Single recommendation for mode=single, a list for mode=top3."""

    success: bool = True
    data: RecommendationOut | list[RecommendationOut]
    cross_niche: bool = False


class WriteDescriptionBody(CamelModel):
    """Request body for product copy generation."""

    product_id: str = Field(..., min_length=1)
    tone: Literal["persuasive", "informative", "seo"] = "persuasive"
    length: Literal["short", "long"] = "short"


class WriteDescriptionResponse(BaseModel):
    """Generated product copy."""

    success: bool = True
    data: dict[str, Any]


@router.post(
    "/find-winning-product",
    response_model=FindWinningProductResponse,
    dependencies=[Depends(enforce_ai_rate_limit)],
)
async def find_winning_product(
    body: FindWinningProductBody,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FindWinningProductResponse:
    """Score the catalog for the caller's niche and return the best pick(s).

    Falls back to the best products across all niches (crossNiche=true)
    when nothing matches the niche and budget.
    """
    service = RecommendationService(db)
    try:
        result = await service.find_winning_product(user, body.to_request())
    except RecommendationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    items = [RecommendationOut.from_recommendation(r) for r in result.recommendations]
    return FindWinningProductResponse(
        data=items if result.mode is RecommendationMode.TOP3 else items[0],
        cross_niche=result.cross_niche,
    )


@router.post(
    "/write-product-description",
    response_model=WriteDescriptionResponse,
    dependencies=[Depends(enforce_ai_rate_limit)],
)
async def write_product_description(
    body: WriteDescriptionBody,
    db: AsyncSession = Depends(get_db),
) -> WriteDescriptionResponse:
    """Generate SEO-friendly copy for an active product."""
    service = RecommendationService(db)
    try:
        copy = await service.write_product_description(body.product_id, body.tone, body.length)
    except RecommendationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    return WriteDescriptionResponse(data=copy.to_dict())
