"""
FastAPI dependencies. Injected into route handlers.
"""

from fastapi import HTTPException, status

from ..core.exceptions import SessionNotFound
from ..services.genai import GenAIService, get_genai_service
from ..services.session import TryOnSession, get_session


def get_ai_service() -> GenAIService:
    """Active AI service. Overridden in tests."""
    return get_genai_service()


async def get_tryon_session(session_id: str) -> TryOnSession:
    """Resolve the session from the path, 404 if unknown."""
    try:
        return get_session(session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
