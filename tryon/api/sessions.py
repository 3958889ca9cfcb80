"""
Try-on session API - every route maps onto one session command.

POST   /v1/sessions                               - Create a session
GET    /v1/sessions/{session_id}                  - Session snapshot
DELETE /v1/sessions/{session_id}                  - Drop a session
PUT    /v1/sessions/{session_id}/category         - Switch category (clears images)
PUT    /v1/sessions/{session_id}/images/{slot}    - Upload via base64 / data URL
POST   /v1/sessions/{session_id}/images/{slot}/file - Upload via multipart form
DELETE /v1/sessions/{session_id}/images/{slot}    - Clear an image slot
POST   /v1/sessions/{session_id}/generate         - Run analysis + edit
GET    /v1/sessions/{session_id}/result           - Download the last composite
"""

import logging
import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import BaseModel

from ..core.config import get_settings
from ..core.dependencies import get_ai_service, get_tryon_session
from ..core.exceptions import (
    InvalidImageInput,
    NoImageProduced,
    SessionBusy,
    SessionNotReady,
    TryOnError,
    UnknownCategory,
)
from ..models.image import EncodedImage
from ..services.genai import GenAIService
from ..services.session import ImageSlot, TryOnSession, create_session, remove_session

logger = logging.getLogger(__name__)

sessions_router = APIRouter(tags=["sessions"])


# ── Response models ───────────────────────────────────────────────────

class SessionResponse(BaseModel):
    session_id: str
    category: str
    title: str
    item_label: str
    phase: str
    busy: bool
    can_generate: bool
    status: str = ""
    has_model_image: bool = False
    has_item_image: bool = False
    has_result: bool = False


class GenerateResponse(BaseModel):
    image: str  # data:image/png;base64,...
    content_type: str
    size: int
    download_url: str
    status: str


def _snapshot(session: TryOnSession) -> SessionResponse:
    return SessionResponse(**session.snapshot())


# ── Session lifecycle ─────────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    category: Optional[str] = None


@sessions_router.post("/sessions", response_model=SessionResponse, status_code=201)
async def new_session(request: Optional[CreateSessionRequest] = None):
    try:
        if request and request.category:
            session = create_session(request.category)
        else:
            session = create_session()
    except UnknownCategory as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Session created: %s (%s)", session.session_id, session.active_category.value)
    return _snapshot(session)


@sessions_router.get("/sessions/{session_id}", response_model=SessionResponse)
async def read_session(session: TryOnSession = Depends(get_tryon_session)):
    return _snapshot(session)


@sessions_router.delete("/sessions/{session_id}", status_code=204)
async def drop_session(session: TryOnSession = Depends(get_tryon_session)):
    if session.busy:
        raise HTTPException(status_code=409, detail="A generation is already in progress.")
    remove_session(session.session_id)
    return Response(status_code=204)


# ── Category ──────────────────────────────────────────────────────────

class SelectCategoryRequest(BaseModel):
    category: str


@sessions_router.put("/sessions/{session_id}/category", response_model=SessionResponse)
async def select_category(
    request: SelectCategoryRequest,
    session: TryOnSession = Depends(get_tryon_session),
):
    try:
        applied = session.select_category(request.category)
    except UnknownCategory as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not applied:
        raise HTTPException(status_code=409, detail="A generation is already in progress.")
    return _snapshot(session)


# ── Images ────────────────────────────────────────────────────────────

class ImageUploadRequest(BaseModel):
    """Base64 image from the browser drop zone."""
    data: str  # data:image/png;base64,... or raw base64
    content_type: str = ""
    filename: str = ""


@sessions_router.put("/sessions/{session_id}/images/{slot}", response_model=SessionResponse)
async def upload_image(
    slot: str,
    request: ImageUploadRequest,
    session: TryOnSession = Depends(get_tryon_session),
):
    """Store a base64 / data-URL image in the model or item slot."""
    image_slot = _parse_slot(slot)
    content_type = request.content_type or _guess_content_type(request.filename)
    try:
        image = EncodedImage.from_data_url(request.data, content_type=content_type)
    except InvalidImageInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    _check_size(image.size)
    _apply_image(session, image_slot, image)
    logger.info("Session %s %s image: %d bytes (%s)", session.session_id, image_slot.value, image.size, image.content_type)
    return _snapshot(session)


@sessions_router.post("/sessions/{session_id}/images/{slot}/file", response_model=SessionResponse)
async def upload_image_file(
    slot: str,
    file: UploadFile = File(..., description="Image file"),
    session: TryOnSession = Depends(get_tryon_session),
):
    """
    Store an image uploaded as multipart form data.

    Example:
        curl -X POST http://localhost:8000/v1/sessions/<id>/images/model/file -F "file=@me.jpg"
    """
    image_slot = _parse_slot(slot)
    file_bytes = await file.read()
    _check_size(len(file_bytes))

    content_type = file.content_type or _guess_content_type(file.filename or "")
    try:
        image = EncodedImage(data=file_bytes, content_type=content_type)
    except InvalidImageInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    _apply_image(session, image_slot, image)
    logger.info("Session %s %s image: %s (%d bytes)", session.session_id, image_slot.value, file.filename, image.size)
    return _snapshot(session)


@sessions_router.delete("/sessions/{session_id}/images/{slot}", response_model=SessionResponse)
async def remove_image(slot: str, session: TryOnSession = Depends(get_tryon_session)):
    _apply_image(session, _parse_slot(slot), None)
    return _snapshot(session)


# ── Generation ────────────────────────────────────────────────────────

@sessions_router.post("/sessions/{session_id}/generate", response_model=GenerateResponse)
async def generate(
    session: TryOnSession = Depends(get_tryon_session),
    service: GenAIService = Depends(get_ai_service),
):
    """Analyze the model image, then composite the item onto it."""
    try:
        session.ensure_ready()
    except (SessionBusy, SessionNotReady) as e:
        raise HTTPException(status_code=409, detail=str(e))

    result = await session.request_generation(service=service)
    if result is None:
        raise HTTPException(status_code=409, detail="A generation is already in progress.")

    if not result.succeeded:
        raise HTTPException(status_code=_failure_status(result.error), detail=session.status)

    return GenerateResponse(
        image=result.image.to_data_url(),
        content_type=result.image.content_type,
        size=result.image.size,
        download_url=f"/v1/sessions/{session.session_id}/result",
        status=session.status,
    )


@sessions_router.get("/sessions/{session_id}/result")
async def download_result(session: TryOnSession = Depends(get_tryon_session)):
    """Serve the last composite as a downloadable file."""
    result = session.last_result
    if result is None or not result.succeeded:
        raise HTTPException(status_code=404, detail="No generated image yet")

    image = result.image
    filename = f"tryon-{session.active_category.value}{image.extension}"
    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Helpers ───────────────────────────────────────────────────────────

def _parse_slot(slot: str) -> ImageSlot:
    try:
        return ImageSlot(slot.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown image slot '{slot}' (use 'model' or 'item')")


def _apply_image(session: TryOnSession, slot: ImageSlot, image: Optional[EncodedImage]) -> None:
    if not session.set_image(slot, image):
        raise HTTPException(status_code=409, detail="A generation is already in progress.")


def _check_size(size: int) -> None:
    limit = get_settings().max_upload_bytes
    if size > limit:
        raise HTTPException(
            status_code=400,
            detail=f"Image too large (max {limit // (1024 * 1024)}MB).",
        )


def _guess_content_type(filename: str) -> str:
    if not filename:
        return ""
    return mimetypes.guess_type(filename)[0] or ""


def _failure_status(error: Optional[TryOnError]) -> int:
    """502 for upstream failures, 422 when the edit produced no image."""
    if isinstance(error, NoImageProduced):
        return 422
    return 502
