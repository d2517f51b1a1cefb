"""Niche API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from dropship_ai.db import Niche, get_db

router = APIRouter(prefix="/niches", tags=["niches"])


class NicheResponse(BaseModel):
    """Niche response schema."""

    id: UUID
    name: str
    slug: str
    description: str
    synonyms: list[str]

    class Config:
        from_attributes = True


@router.get("", response_model=list[NicheResponse])
async def list_niches(
    db: AsyncSession = Depends(get_db),
) -> list[Niche]:
    """List niches a seller can pick during onboarding."""
    result = await db.execute(
        select(Niche)
        .where(Niche.active == True, Niche.deleted == False)  # noqa: E712
        .order_by(desc(Niche.priority), Niche.name)
    )
    return list(result.scalars().all())
