"""Pytest fixtures for database testing."""

from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dropship_ai.api.app import app
from dropship_ai.config import get_settings
from dropship_ai.db.base import Base, create_all, create_engine_for, get_db
from dropship_ai.db.models import Niche, Product, User
from dropship_ai.scoring.models import Goal
from dropship_ai.services.llm_rationale import clear_ai_cache


# Use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

LONG_DESCRIPTION = (
    "A five piece silicone spatula set for everyday cooking. Each spatula is heat "
    "resistant, dishwasher safe and gentle on non-stick pans. Stainless steel cores "
    "keep the heads firm while the seamless design makes cleanup quick."
)


@pytest.fixture(autouse=True)
def offline_llm(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test without an LLM key and with an empty AI cache."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    clear_ai_cache()
    yield
    clear_ai_cache()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session with isolated transactions.

    Creates an in-memory SQLite database, creates all tables,
    and yields a session. Overrides app's get_db dependency.
    """
    engine = create_engine_for(TEST_DATABASE_URL)
    await create_all(engine)

    # Create session
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        # Override app's get_db dependency
        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

        app.dependency_overrides[get_db] = override_get_db

        try:
            yield session
        finally:
            # Clean up
            app.dependency_overrides.clear()
            await session.rollback()

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def kitchen_niche(test_db: AsyncSession) -> Niche:
    """Active niche with synonyms."""
    niche = Niche(
        name="Kitchen Gadgets",
        slug="kitchen-gadgets",
        synonyms=["kitchen", "cooking", "gadgets"],
        priority=10,
    )
    test_db.add(niche)
    await test_db.flush()
    return niche


@pytest_asyncio.fixture
async def pet_niche(test_db: AsyncSession) -> Niche:
    """Second active niche."""
    niche = Niche(
        name="Pet Supplies",
        slug="pet-supplies",
        synonyms=["pet", "dog", "cat"],
        priority=5,
    )
    test_db.add(niche)
    await test_db.flush()
    return niche


@pytest_asyncio.fixture
async def seller(test_db: AsyncSession, kitchen_niche: Niche) -> User:
    """Seller who picked the kitchen niche during onboarding."""
    user = User(
        email="seller@example.com",
        name="Test Seller",
        onboarding_niche_id=kitchen_niche.id,
        onboarding_goal=Goal.DROPSHIP,
    )
    test_db.add(user)
    await test_db.flush()
    return user


@pytest_asyncio.fixture
async def new_seller(test_db: AsyncSession) -> User:
    """Seller who has not finished onboarding."""
    user = User(email="new@example.com", name="New Seller")
    test_db.add(user)
    await test_db.flush()
    return user


def _make_product(niche: Niche | None, **overrides) -> Product:
    data = {
        "title": "Silicone Spatula Set",
        "description": LONG_DESCRIPTION,
        "price": 1499,
        "cost_price": 620,
        "niche_id": niche.id if niche else None,
        "tags": ["kitchen", "utensils"],
        "images": ["https://example.com/1.jpg", "https://example.com/2.jpg"],
        "supplier_link": "https://supplier.example.com/spatula",
        "views": 400,
        "imports": 30,
        "conversions": 5,
        "active": True,
    }
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def make_product():
    """Factory for catalog products with sensible defaults."""
    return _make_product
