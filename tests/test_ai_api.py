"""Tests for the AI and niche API endpoints.

Endpoints:
- GET /niches - niches available during onboarding
- POST /ai/find-winning-product - best product(s) for the caller
- POST /ai/write-product-description - product copy generation
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from dropship_ai.api.app import app
from dropship_ai.api.deps import get_rate_limiter
from dropship_ai.config import get_settings
from dropship_ai.db.models import Niche
from dropship_ai.services.rate_limiter import InMemoryFixedWindowRateLimiter

FIND_URL = "/api/ai/find-winning-product"
DESCRIBE_URL = "/api/ai/write-product-description"


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _auth(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def limiter(test_db) -> InMemoryFixedWindowRateLimiter:
    """Swap the database limiter for an in-memory one."""
    limiter = InMemoryFixedWindowRateLimiter(limit=100, window_seconds=60)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    return limiter


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self):
        async with _client() as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "llm": "fallback"}


class TestListNiches:
    """Tests for GET /niches."""

    @pytest.mark.asyncio
    async def test_lists_active_niches_by_priority(self, test_db, kitchen_niche, pet_niche):
        test_db.add(Niche(name="Gone", slug="gone", synonyms=[], deleted=True, priority=99))
        await test_db.flush()

        async with _client() as client:
            response = await client.get("/api/niches")

        assert response.status_code == 200
        data = response.json()
        assert [n["slug"] for n in data] == ["kitchen-gadgets", "pet-supplies"]
        assert data[0]["synonyms"] == ["kitchen", "cooking", "gadgets"]


class TestFindWinningProductAuth:
    """Caller identity checks."""

    @pytest.mark.asyncio
    async def test_missing_header(self, test_db):
        async with _client() as client:
            response = await client.post(FIND_URL, json={})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_header(self, test_db):
        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers={"X-User-Id": "abc"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_db):
        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers={"X-User-Id": str(uuid4())})

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"


class TestFindWinningProduct:
    """Tests for POST /ai/find-winning-product."""

    @pytest.mark.asyncio
    async def test_single_response_shape(
        self, seller, kitchen_niche, test_db, limiter, make_product
    ):
        product = make_product(kitchen_niche)
        test_db.add(product)
        await test_db.flush()

        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers=_auth(seller))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["crossNiche"] is False

        data = body["data"]
        assert data["productId"] == str(product.id)
        assert 0 <= data["score"] <= 100
        assert 0.5 <= data["confidence"] <= 1.0
        assert len(data["rationale"]) == 3
        assert set(data["breakdown"]) == {
            "nicheRelevance",
            "beginnerFriendliness",
            "profitMargin",
            "quality",
            "popularity",
        }
        assert data["product"]["costPrice"] == 620
        assert data["product"]["nicheId"] == str(kitchen_niche.id)
        assert data["actionLinks"]["writeDescription"].endswith(f"productId={product.id}")

    @pytest.mark.asyncio
    async def test_top3_returns_list(
        self, seller, kitchen_niche, test_db, limiter, make_product
    ):
        test_db.add_all([make_product(kitchen_niche, title=f"Item {i}") for i in range(4)])
        await test_db.flush()

        async with _client() as client:
            response = await client.post(FIND_URL, json={"mode": "top3"}, headers=_auth(seller))

        assert response.status_code == 200
        data = response.json()["data"]
        assert isinstance(data, list)
        assert len(data) == 3

    @pytest.mark.asyncio
    async def test_budget_and_niche_in_camel_case(
        self, seller, pet_niche, test_db, limiter, make_product
    ):
        test_db.add_all(
            [
                make_product(pet_niche, title="Brush", price=749),
                make_product(pet_niche, title="Bed", price=4999),
            ]
        )
        await test_db.flush()

        payload = {"nicheId": str(pet_niche.id), "budgetRange": {"min": 100, "max": 1000}}
        async with _client() as client:
            response = await client.post(FIND_URL, json=payload, headers=_auth(seller))

        assert response.status_code == 200
        assert response.json()["data"]["product"]["title"] == "Brush"

    @pytest.mark.asyncio
    async def test_cross_niche_flag(self, seller, pet_niche, test_db, limiter, make_product):
        test_db.add(make_product(pet_niche, title="Brush"))
        await test_db.flush()

        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers=_auth(seller))

        body = response.json()
        assert body["crossNiche"] is True
        assert body["data"]["note"].startswith("No products found in your selected niche")

    @pytest.mark.asyncio
    async def test_niche_required(self, new_seller, limiter):
        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers=_auth(new_seller))

        assert response.status_code == 400
        assert "select a niche" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_unknown_niche(self, seller, limiter):
        async with _client() as client:
            response = await client.post(
                FIND_URL, json={"nicheId": str(uuid4())}, headers=_auth(seller)
            )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_no_products(self, seller, limiter):
        async with _client() as client:
            response = await client.post(FIND_URL, json={}, headers=_auth(seller))

        assert response.status_code == 404
        assert response.json()["detail"] == "No products available"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"mode": "top5"},
            {"unexpected": True},
            {"budgetRange": {"min": 2000, "max": 1000}},
            {"budgetRange": {"min": -1}},
            {"nicheId": ""},
        ],
    )
    async def test_invalid_body(self, seller, limiter, payload):
        async with _client() as client:
            response = await client.post(FIND_URL, json=payload, headers=_auth(seller))

        assert response.status_code == 422


class TestRateLimit:
    """AI endpoints share a per-caller budget."""

    @pytest.mark.asyncio
    async def test_in_memory_limit(self, seller, kitchen_niche, test_db, make_product):
        test_db.add(make_product(kitchen_niche))
        await test_db.flush()
        shared = InMemoryFixedWindowRateLimiter(limit=2, window_seconds=60)
        app.dependency_overrides[get_rate_limiter] = lambda: shared

        async with _client() as client:
            statuses = [
                (await client.post(FIND_URL, json={}, headers=_auth(seller))).status_code
                for _ in range(3)
            ]
            blocked = await client.post(
                DESCRIBE_URL, json={"productId": "x"}, headers=_auth(seller)
            )

        assert statuses == [200, 200, 429]
        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1

    @pytest.mark.asyncio
    async def test_database_limit_from_settings(
        self, seller, kitchen_niche, test_db, make_product, monkeypatch
    ):
        monkeypatch.setenv("AI_RATE_LIMIT_MAX", "1")
        get_settings.cache_clear()
        test_db.add(make_product(kitchen_niche))
        await test_db.flush()

        async with _client() as client:
            first = await client.post(FIND_URL, json={}, headers=_auth(seller))
            second = await client.post(FIND_URL, json={}, headers=_auth(seller))

        assert first.status_code == 200
        assert second.status_code == 429
        assert "Too many AI requests" in second.json()["detail"]


class TestWriteProductDescription:
    """Tests for POST /ai/write-product-description."""

    @pytest.mark.asyncio
    async def test_returns_fallback_copy(
        self, seller, kitchen_niche, test_db, limiter, make_product
    ):
        product = make_product(kitchen_niche)
        test_db.add(product)
        await test_db.flush()

        async with _client() as client:
            response = await client.post(
                DESCRIBE_URL,
                json={"productId": str(product.id), "tone": "informative", "length": "long"},
                headers=_auth(seller),
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["fallback"] is True
        assert data["title"] == "Silicone Spatula Set"
        assert len(data["bullets"]) == 5
        assert set(data["seoMeta"]) == {"title", "description"}

    @pytest.mark.asyncio
    async def test_unknown_product(self, seller, limiter):
        async with _client() as client:
            response = await client.post(
                DESCRIBE_URL, json={"productId": str(uuid4())}, headers=_auth(seller)
            )

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    @pytest.mark.asyncio
    async def test_inactive_product(
        self, seller, kitchen_niche, test_db, limiter, make_product
    ):
        product = make_product(kitchen_niche, active=False)
        test_db.add(product)
        await test_db.flush()

        async with _client() as client:
            response = await client.post(
                DESCRIBE_URL, json={"productId": str(product.id)}, headers=_auth(seller)
            )

        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"productId": ""},
            {"productId": "x", "tone": "angry"},
            {"productId": "x", "length": "epic"},
        ],
    )
    async def test_invalid_body(self, seller, limiter, payload):
        async with _client() as client:
            response = await client.post(DESCRIBE_URL, json=payload, headers=_auth(seller))

        assert response.status_code == 422
