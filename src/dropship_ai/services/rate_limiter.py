"""Fixed-window rate limiting keyed by caller identity.

The limiter is injected into the API layer instead of living in module
state, so the SQL-backed implementation survives restarts and is shared by
every instance pointed at the same database.

Usage:
    limiter = SqlFixedWindowRateLimiter(session, limit=10, window_seconds=60)
    decision = await limiter.hit(f"ai:{user_id}")
    if not decision.allowed:
        ...  # respond 429, retry after decision.retry_after_seconds
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from sqlalchemy import case
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dropship_ai.db.models import RateLimitCounter

logger = logging.getLogger(__name__)

_UPSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


@dataclass
class RateLimitDecision:
    """Outcome of recording one request against a limit."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime

    @property
    def retry_after_seconds(self) -> int:
        """Whole seconds until the current window resets (at least 1)."""
        delta = (self.reset_at - datetime.now(timezone.utc)).total_seconds()
        return max(1, int(delta + 0.999))


class RateLimiter(Protocol):
    """Records a request for a key and says whether it is allowed."""

    async def hit(self, key: str) -> RateLimitDecision: ...


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _decide(count: int, limit: int, window_start: datetime, window: timedelta) -> RateLimitDecision:
    return RateLimitDecision(
        allowed=count <= limit,
        limit=limit,
        remaining=max(0, limit - count),
        reset_at=window_start + window,
    )


class InMemoryFixedWindowRateLimiter:
    """Process-local limiter for tests and single-process development."""

    def __init__(self, limit: int, window_seconds: int, clock=None):
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._windows: dict[str, tuple[datetime, int]] = {}

    async def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        window_start, count = self._windows.get(key, (now, 0))

        if now >= window_start + self.window:
            window_start, count = now, 0

        count += 1
        self._windows[key] = (window_start, count)
        return _decide(count, self.limit, window_start, self.window)

    def reset(self) -> None:
        """Forget all windows."""
        self._windows.clear()


class SqlFixedWindowRateLimiter:
    """Limiter persisted in the rate_limit_counters table.

    Each hit is a single upsert that creates the counter, restarts an expired
    window or increments the count, and returns the new row. Concurrent hits
    for the same key therefore never lose an increment or collide on insert.
    """

    def __init__(self, session: AsyncSession, limit: int, window_seconds: int, clock=None):
        self.session = session
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _upsert(self, key: str, now: datetime):
        dialect = self.session.get_bind().dialect.name
        if dialect not in _UPSERTS:
            raise ValueError(f"Rate limiting is not supported on {dialect}")

        stmt = _UPSERTS[dialect](RateLimitCounter).values(key=key, window_start=now, count=1)
        expired = RateLimitCounter.window_start <= now - self.window
        return stmt.on_conflict_do_update(
            index_elements=[RateLimitCounter.key],
            set_={
                "window_start": case(
                    (expired, stmt.excluded.window_start),
                    else_=RateLimitCounter.window_start,
                ),
                "count": case((expired, 1), else_=RateLimitCounter.count + 1),
            },
        ).returning(RateLimitCounter.window_start, RateLimitCounter.count)

    async def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()

        result = await self.session.execute(self._upsert(key, now))
        window_start, count = result.one()

        # Committed now so the hit counts even if the request later fails
        await self.session.commit()

        decision = _decide(count, self.limit, _as_utc(window_start), self.window)
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {key}: {count}/{self.limit}")
        return decision
