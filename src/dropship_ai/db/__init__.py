"""Database module."""

from dropship_ai.db.base import get_db
from dropship_ai.db.models import Niche, Product, RateLimitCounter, User

__all__ = ["get_db", "Niche", "Product", "RateLimitCounter", "User"]
