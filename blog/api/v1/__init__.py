"""API v1 router initialization."""

from fastapi import APIRouter

from blog.api.v1.auth import router as auth_router
from blog.api.v1.embeds import router as embeds_router
from blog.api.v1.images import router as images_router
from blog.api.v1.posts import router as posts_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Auth"])
router.include_router(posts_router, prefix="/posts", tags=["Posts"])
router.include_router(images_router, prefix="/images", tags=["Images"])
router.include_router(embeds_router, prefix="/embeds", tags=["Embeds"])
