"""Winning Product Service - picks the best catalog products for a seller.

Resolves the seller's niche, loads candidates, scores them, and attaches an
LLM rationale to each pick.

Usage:
    service = RecommendationService(db_session)
    result = await service.find_winning_product(user, WinningProductRequest(mode=RecommendationMode.TOP3))
    for rec in result.recommendations:
        print(rec.product.title, rec.score, rec.rationale)
"""

import asyncio
import enum
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dropship_ai.config import get_settings
from dropship_ai.db.models import Niche, Product, User
from dropship_ai.scoring.models import (
    NicheInfo,
    ScoreBreakdown,
    ScoringConfig,
    ScoringProduct,
    UserPreferences,
)
from dropship_ai.scoring.scorer import RankedProduct, rank_products
from dropship_ai.services.llm_rationale import (
    ProductCopy,
    fallback_rationale,
    generate_product_description,
    generate_product_rationale,
)

logger = logging.getLogger(__name__)

FALLBACK_POOL_SIZE = 10
CROSS_NICHE_NOTE = (
    "No products found in your selected niche. Showing top products across all niches."
)

RationaleFn = Callable[
    [ScoringProduct, UserPreferences, int, Optional[NicheInfo]], Awaitable[list[str]]
]


class RecommendationError(Exception):
    """Business-rule failure while building recommendations."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NicheRequiredError(RecommendationError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__(
            "Please complete onboarding and select a niche first. "
            "Niche selection is required for product recommendations."
        )


class NicheNotFoundError(RecommendationError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("Selected niche not found or inactive")


class NoProductsAvailableError(RecommendationError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("No products available")


class ProductNotFoundError(RecommendationError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("Product not found")


class ProductInactiveError(RecommendationError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Product is not active")


class RecommendationMode(str, enum.Enum):
    """How many picks to return."""

    SINGLE = "single"
    TOP3 = "top3"

    @property
    def limit(self) -> int:
        return 3 if self is RecommendationMode.TOP3 else 1


@dataclass
class BudgetRange:
    """Inclusive price bounds in minor units; either side may be open."""

    min: int | None = None
    max: int | None = None


@dataclass
class WinningProductRequest:
    """Validated recommendation request."""

    niche_id: str | None = None
    budget_range: BudgetRange | None = None
    mode: RecommendationMode = RecommendationMode.SINGLE


@dataclass
class Recommendation:
    """One recommended product with its score and rationale."""

    product: ScoringProduct
    score: int
    confidence: float
    breakdown: ScoreBreakdown
    rationale: list[str]
    note: str | None = None

    @property
    def action_links(self) -> dict[str, str]:
        return {
            "import": f"/api/products/{self.product.id}/import",
            "writeDescription": (
                f"/api/ai/write-product-description?productId={self.product.id}"
            ),
        }


@dataclass
class RecommendationResult:
    """Result of a recommendation request."""

    mode: RecommendationMode
    recommendations: list[Recommendation] = field(default_factory=list)
    cross_niche: bool = False


def _parse_uuid(value: str | uuid.UUID | None) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class RecommendationService:
    """Orchestrates niche resolution, scoring and rationale generation."""

    def __init__(
        self,
        session: AsyncSession,
        rationale_fn: RationaleFn | None = None,
        rationale_timeout: float | None = None,
        config: ScoringConfig | None = None,
    ):
        """Initialize service.

        Args:
            session: Database session
            rationale_fn: Async rationale generator (defaults to the LLM client)
            rationale_timeout: Per-rationale timeout in seconds
            config: Scoring configuration
        """
        self.session = session
        self.rationale_fn = rationale_fn or generate_product_rationale
        if rationale_timeout is None:
            rationale_timeout = get_settings().rationale_timeout_seconds
        self.rationale_timeout = rationale_timeout
        self.config = config

    async def resolve_niche(self, user: User, request: WinningProductRequest) -> Niche:
        """Pick the request's niche, else the user's onboarding niche.

        Raises:
            NicheRequiredError: Neither the request nor onboarding names a niche
            NicheNotFoundError: The niche does not exist or is inactive/deleted
        """
        niche_id = request.niche_id or user.onboarding_niche_id
        if not niche_id:
            raise NicheRequiredError()

        parsed = _parse_uuid(niche_id)
        if parsed is None:
            raise NicheNotFoundError()

        result = await self.session.execute(
            select(Niche).where(
                Niche.id == parsed,
                Niche.active == True,  # noqa: E712
                Niche.deleted == False,  # noqa: E712
            )
        )
        niche = result.scalar_one_or_none()
        if niche is None:
            raise NicheNotFoundError()
        return niche

    async def fetch_candidates(
        self,
        niche_id: uuid.UUID,
        budget: BudgetRange | None = None,
    ) -> list[Product]:
        """Active products in a niche, optionally within a price range."""
        query = select(Product).where(
            Product.active == True,  # noqa: E712
            Product.niche_id == niche_id,
        )
        if budget is not None and budget.min is not None:
            query = query.where(Product.price >= budget.min)
        if budget is not None and budget.max is not None:
            query = query.where(Product.price <= budget.max)

        result = await self.session.execute(query.order_by(Product.id))
        return list(result.scalars().all())

    async def fetch_fallback_pool(self, limit: int = FALLBACK_POOL_SIZE) -> list[Product]:
        """Active products across all niches."""
        result = await self.session.execute(
            select(Product)
            .where(Product.active == True)  # noqa: E712
            .order_by(Product.created_at, Product.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def load_niches(self, niche_ids: set[uuid.UUID]) -> dict[uuid.UUID, Niche]:
        """Niche records by id (inactive ones included, for synonym matching)."""
        if not niche_ids:
            return {}
        result = await self.session.execute(select(Niche).where(Niche.id.in_(niche_ids)))
        return {n.id: n for n in result.scalars().all()}

    async def find_winning_product(
        self,
        user: User,
        request: WinningProductRequest,
    ) -> RecommendationResult:
        """Recommend the best product(s) for the user.

        Args:
            user: Caller
            request: Niche, budget and mode

        Returns:
            RecommendationResult ordered best first

        Raises:
            RecommendationError: For niche or catalog business-rule failures
        """
        niche = await self.resolve_niche(user, request)
        niche_info = niche.to_niche_info()
        preferences = UserPreferences(niche_id=niche_info.id, goal=user.goal)

        products = await self.fetch_candidates(niche.id, request.budget_range)
        cross_niche = False

        if products:
            ranked = rank_products(
                [p.to_scoring_product() for p in products],
                preferences,
                niche_for=lambda _: niche_info,
                config=self.config,
            )
            niches = {r.product.id: niche_info for r in ranked}
        else:
            products = await self.fetch_fallback_pool()
            if not products:
                raise NoProductsAvailableError()

            cross_niche = True
            logger.info(
                f"No products in niche {niche.slug}; "
                f"falling back to {len(products)} products across all niches"
            )
            records = await self.load_niches({p.niche_id for p in products if p.niche_id})
            niches = {
                str(p.id): records[p.niche_id].to_niche_info() if p.niche_id in records else None
                for p in products
            }
            ranked = rank_products(
                [p.to_scoring_product() for p in products],
                preferences,
                niche_for=lambda sp: niches[sp.id],
                config=self.config,
            )

        top = ranked[: request.mode.limit]
        rationales = await asyncio.gather(
            *(self._rationale_for(r, preferences, niches.get(r.product.id)) for r in top)
        )

        note = CROSS_NICHE_NOTE if cross_niche else None
        recommendations = [
            Recommendation(
                product=r.product,
                score=r.result.score,
                confidence=r.result.confidence,
                breakdown=r.result.breakdown,
                rationale=rationale,
                note=note,
            )
            for r, rationale in zip(top, rationales)
        ]

        logger.info(
            f"Recommended {len(recommendations)} of {len(ranked)} products "
            f"(mode={request.mode.value}, cross_niche={cross_niche})"
        )
        return RecommendationResult(
            mode=request.mode,
            recommendations=recommendations,
            cross_niche=cross_niche,
        )

    async def _rationale_for(
        self,
        ranked: RankedProduct,
        preferences: UserPreferences,
        niche: NicheInfo | None,
    ) -> list[str]:
        """Generate one rationale; failures and timeouts fall back to static text."""
        product, score = ranked.product, ranked.result.score
        try:
            return await asyncio.wait_for(
                self.rationale_fn(product, preferences, score, niche),
                timeout=self.rationale_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Rationale timed out after {self.rationale_timeout}s")
        except Exception as e:
            logger.warning(f"Rationale generation failed: {e}")
        return fallback_rationale(product, score, niche)

    async def write_product_description(
        self,
        product_id: str,
        tone: str = "persuasive",
        length: str = "short",
    ) -> ProductCopy:
        """Generate copy for an active catalog product.

        Raises:
            ProductNotFoundError: Unknown product id
            ProductInactiveError: Product exists but is not active
        """
        parsed = _parse_uuid(product_id)
        if parsed is None:
            raise ProductNotFoundError()

        result = await self.session.execute(select(Product).where(Product.id == parsed))
        product = result.scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError()
        if not product.active:
            raise ProductInactiveError()

        records = await self.load_niches({product.niche_id} if product.niche_id else set())
        niche = records[product.niche_id].to_niche_info() if product.niche_id in records else None
        return await generate_product_description(
            product.to_scoring_product(), tone, length, niche
        )
