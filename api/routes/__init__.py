"""API Routes."""

from fastapi import APIRouter

from .articles import router as articles_router
from .categories import router as categories_router
from .columns import router as columns_router
from .comments import router as comments_router
from .drafts import router as drafts_router
from .health import router as health_router
from .moderation import router as moderation_router
from .topics import router as topics_router

# Create main API router
api_router = APIRouter()

# Include route modules
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(articles_router)
api_router.include_router(drafts_router)
api_router.include_router(categories_router)
api_router.include_router(topics_router)
api_router.include_router(comments_router)
api_router.include_router(moderation_router)
api_router.include_router(columns_router)
