"""Shared FastAPI dependencies: caller identity and rate limiting."""

import uuid

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dropship_ai.config import get_settings
from dropship_ai.db.base import get_db
from dropship_ai.db.models import User
from dropship_ai.services.rate_limiter import RateLimiter, SqlFixedWindowRateLimiter


async def get_current_user(
    x_user_id: str | None = Header(None, description="Authenticated caller id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the caller identified by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def get_rate_limiter(db: AsyncSession = Depends(get_db)) -> RateLimiter:
    """Rate limiter for AI endpoints, backed by the database."""
    settings = get_settings()
    return SqlFixedWindowRateLimiter(
        db,
        limit=settings.ai_rate_limit_max,
        window_seconds=settings.ai_rate_limit_window_seconds,
    )


async def enforce_ai_rate_limit(
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """Reject the request with 429 once the caller exhausts their window."""
    decision = await limiter.hit(f"ai:{user.id}")
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many AI requests. Please try again later.",
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )
