"""FastAPI application for the recommendation API."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dropship_ai.api.routers import ai, niches
from dropship_ai.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with CORS for the storefront and all routers mounted."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Winning-product recommendations and product copy for beginner sellers",
        version="0.1.0",
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(niches.router, prefix=settings.api_prefix)
    app.include_router(ai.router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Liveness plus whether AI text comes from the LLM or the fallbacks."""
        llm = "configured" if get_settings().openai_api_key else "fallback"
        return {"status": "healthy", "llm": llm}

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; AI endpoints will return fallback text")

    return app


app = create_app()
