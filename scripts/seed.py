#!/usr/bin/env python3
"""Seed the database with sample niches, products and a demo seller."""

import asyncio

from sqlalchemy import select

from dropship_ai.db.base import async_session_maker
from dropship_ai.db.models import Niche, Product, User
from dropship_ai.scoring.models import Goal


SAMPLE_NICHES = [
    {
        "name": "Kitchen Gadgets",
        "slug": "kitchen-gadgets",
        "description": "Small tools that make cooking faster and cleaner.",
        "synonyms": ["kitchen", "cooking", "gadgets", "utensils"],
        "priority": 10,
    },
    {
        "name": "Pet Supplies",
        "slug": "pet-supplies",
        "description": "Accessories and care products for cats and dogs.",
        "synonyms": ["pet", "dog", "cat", "grooming"],
        "priority": 5,
    },
]

SAMPLE_PRODUCTS = {
    "kitchen-gadgets": [
        {
            "title": "Silicone Spatula Set - 5 Piece",
            "description": """A five piece silicone spatula set for everyday cooking.

Each spatula is heat resistant up to 230C, dishwasher safe and gentle on
non-stick pans. Stainless steel cores keep the heads firm while the seamless
design makes cleanup quick. A good starter product for a kitchen store.""",
            "price": 1499,
            "cost_price": 620,
            "tags": ["kitchen", "cooking", "utensils"],
            "images": [
                "https://images.unsplash.com/photo-1556911220-bff31c812dba?w=800",
                "https://images.unsplash.com/photo-1590794056226-79ef3a8147e1?w=800",
            ],
            "supplier_link": "https://supplier.example.com/spatula-set",
            "views": 420,
            "imports": 35,
            "conversions": 6,
        },
        {
            "title": "Magnetic Knife Strip 40cm",
            "description": "Wall mounted magnetic strip that keeps knives within reach.",
            "price": 899,
            "tags": ["kitchen", "storage"],
            "images": ["https://images.unsplash.com/photo-1593618998160-e34014e67546?w=800"],
            "views": 120,
            "imports": 8,
        },
    ],
    "pet-supplies": [
        {
            "title": "Self-Cleaning Slicker Brush for Dogs and Cats",
            "description": """Removes loose undercoat, tangles and knots in minutes.

Press the button to retract the bristles and wipe the hair away. Suitable for
short and long haired pets.""",
            "price": 749,
            "cost_price": 310,
            "tags": ["pet", "grooming"],
            "images": [
                "https://images.unsplash.com/photo-1516734212186-a967f81ad0d7?w=800",
                "https://images.unsplash.com/photo-1583511655857-d19b40a7a54e?w=800",
            ],
            "supplier_link": "https://supplier.example.com/slicker-brush",
            "views": 860,
            "imports": 52,
            "conversions": 11,
        },
    ],
}


async def seed() -> None:
    """Seed niches, products and a demo user."""
    async with async_session_maker() as session:
        niches: dict[str, Niche] = {}
        for niche_data in SAMPLE_NICHES:
            result = await session.execute(
                select(Niche).where(Niche.slug == niche_data["slug"])
            )
            niche = result.scalar_one_or_none()
            if niche:
                print(f"Niche '{niche.slug}' already exists, skipping...")
            else:
                niche = Niche(**niche_data)
                session.add(niche)
                print(f"Created niche: {niche.name}")
            niches[niche_data["slug"]] = niche

        await session.flush()

        for slug, products in SAMPLE_PRODUCTS.items():
            for product_data in products:
                result = await session.execute(
                    select(Product).where(Product.title == product_data["title"])
                )
                if result.scalar_one_or_none():
                    print(f"Product '{product_data['title']}' already exists, skipping...")
                    continue

                session.add(Product(niche_id=niches[slug].id, **product_data))
                print(f"Created product: {product_data['title']}")

        result = await session.execute(select(User).where(User.email == "demo@example.com"))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email="demo@example.com",
                name="Demo Seller",
                onboarding_niche_id=niches["kitchen-gadgets"].id,
                onboarding_goal=Goal.DROPSHIP,
            )
            session.add(user)
            await session.flush()
            print(f"Created demo user: {user.email} (X-User-Id: {user.id})")

        await session.commit()
        print("\nSeeding complete!")


if __name__ == "__main__":
    asyncio.run(seed())
