"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    from ..core.flags import get_flags

    flags = get_flags()
    return {
        "status": "ok",
        "service": "tryon",
        "ai_service": "gemini" if flags.use_gemini else "mock",
    }


# ── V1 routes ────────────────────────────────────────────────────────

from .categories import categories_router
from .sessions import sessions_router

router.include_router(categories_router, prefix="/v1")
router.include_router(sessions_router, prefix="/v1")
