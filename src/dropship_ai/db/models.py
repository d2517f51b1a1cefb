"""Database models for niches, catalog products and users."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from dropship_ai.db.base import Base
from dropship_ai.scoring.models import (
    Goal,
    NicheInfo,
    ProductAnalytics,
    ScoringProduct,
)


class Niche(Base):
    """Product category/vertical a seller can pick."""

    __tablename__ = "niches"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    synonyms: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Status
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    priority: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def to_niche_info(self) -> NicheInfo:
        """Convert to the scoring input model."""
        return NicheInfo(id=str(self.id), name=self.name, synonyms=list(self.synonyms or []))

    def __repr__(self) -> str:
        return f"<Niche {self.slug}: {self.name}>"


class Product(Base):
    """Catalog product sellers can import into their store."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Pricing (minor currency units)
    price: Mapped[int] = mapped_column(Integer)
    cost_price: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Catalog placement
    niche_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("niches.id"),
        nullable=True,
        index=True,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Media
    images: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Supplier info
    supplier_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Analytics
    views: Mapped[int] = mapped_column(Integer, default=0)
    imports: Mapped[int] = mapped_column(Integer, default=0)
    conversions: Mapped[int] = mapped_column(Integer, default=0)

    # Status
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def to_scoring_product(self) -> ScoringProduct:
        """Convert to the scoring input model."""
        return ScoringProduct(
            id=str(self.id),
            title=self.title or "",
            price=max(0, self.price or 0),
            cost_price=self.cost_price,
            niche_id=str(self.niche_id) if self.niche_id else None,
            tags=list(self.tags or []),
            images=list(self.images or []),
            description=self.description,
            supplier_link=self.supplier_link or None,
            analytics=ProductAnalytics(
                views=max(0, self.views or 0),
                imports=max(0, self.imports or 0),
                conversions=max(0, self.conversions or 0),
            ),
        )

    def __repr__(self) -> str:
        return f"<Product {self.id}: {self.title}>"


class User(Base):
    """Seller account with onboarding answers."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), default="")

    # Onboarding
    onboarding_niche_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("niches.id"),
        nullable=True,
    )
    onboarding_goal: Mapped[Goal | None] = mapped_column(
        Enum(Goal, name="sellergoal"),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    @property
    def goal(self) -> Goal:
        """Onboarding goal, defaulting to dropship."""
        return self.onboarding_goal or Goal.DROPSHIP

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class RateLimitCounter(Base):
    """Fixed-window request counter keyed by caller."""

    __tablename__ = "rate_limit_counters"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    window_start: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    count: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<RateLimitCounter {self.key}: {self.count}>"
