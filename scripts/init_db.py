#!/usr/bin/env python3
"""Create the dropship-ai tables without running migrations (local dev only)."""

import asyncio

from dropship_ai.config import get_settings
from dropship_ai.db.base import create_all


async def init_db() -> None:
    tables = await create_all()
    print(f"Created tables in {get_settings().database_url}: {', '.join(tables)}")


if __name__ == "__main__":
    asyncio.run(init_db())
