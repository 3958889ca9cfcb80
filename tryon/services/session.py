"""
Try-on session state - one user, one category, two image slots.

Commands (set_model_image, set_item_image, select_category,
request_generation) are explicit state transitions; nothing here knows
about HTTP or rendering.

Phases:
  idle  → fewer than two images present
  ready → model + item present, generation allowed
  busy  → generation in flight; every other command is a no-op

Sessions live in an in-memory registry keyed by session id. Nothing is
persisted; a restart drops them all. The registry holds at most
MAX_SESSIONS entries; the least recently used idle ones are evicted first.
"""

import logging
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Optional, Union

from ..core.config import get_settings
from ..core.exceptions import SessionBusy, SessionNotFound, SessionNotReady, UnknownCategory
from ..core.flags import get_flags
from ..models.generation import GenerationRequest, GenerationResult
from ..models.image import EncodedImage
from . import tryon
from .catalogue import DEFAULT_CATEGORY, Category, CategoryGroup, lookup, resolve_category
from .genai import GenAIService

logger = logging.getLogger(__name__)

STATUS_COMPLETE = "Generation complete!"


class SessionPhase(str, Enum):
    IDLE = "idle"
    READY = "ready"
    BUSY = "busy"


class ImageSlot(str, Enum):
    MODEL = "model"
    ITEM = "item"


def is_category_enabled(category: Category) -> bool:
    if lookup(category).group == CategoryGroup.ACCESSORIES:
        return get_flags().enable_accessories
    return True


class TryOnSession:
    def __init__(
        self,
        session_id: str = "",
        category: Union[Category, str] = DEFAULT_CATEGORY,
        service: Optional[GenAIService] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.active_category = resolve_category(category)
        self.model_image: Optional[EncodedImage] = None
        self.item_image: Optional[EncodedImage] = None
        self.busy = False
        self.status = ""
        self.last_result: Optional[GenerationResult] = None
        self._service = service

    # ── Derived state ────────────────────────────────────────────────

    @property
    def phase(self) -> SessionPhase:
        if self.busy:
            return SessionPhase.BUSY
        if self.model_image is not None and self.item_image is not None:
            return SessionPhase.READY
        return SessionPhase.IDLE

    @property
    def can_generate(self) -> bool:
        return self.phase == SessionPhase.READY

    def ensure_ready(self) -> None:
        """Raise if request_generation would be refused."""
        if self.busy:
            raise SessionBusy("A generation is already in progress.")
        if not self.can_generate:
            raise SessionNotReady("Upload both a model image and an item image first.")

    # ── Commands ─────────────────────────────────────────────────────

    def set_image(self, slot: Union[ImageSlot, str], image: Optional[EncodedImage]) -> bool:
        """Replace (or clear, with None) one image slot. False if ignored."""
        slot = ImageSlot(slot)
        if self.busy:
            logger.warning("Session %s busy, ignoring %s image change", self.session_id, slot.value)
            return False
        if slot == ImageSlot.MODEL:
            self.model_image = image
        else:
            self.item_image = image
        logger.debug("Session %s %s image %s", self.session_id, slot.value, "set" if image else "cleared")
        return True

    def set_model_image(self, image: Optional[EncodedImage]) -> bool:
        return self.set_image(ImageSlot.MODEL, image)

    def set_item_image(self, image: Optional[EncodedImage]) -> bool:
        return self.set_image(ImageSlot.ITEM, image)

    def select_category(self, category: Union[Category, str]) -> bool:
        """Switch category and reset both image slots. False if ignored."""
        if self.busy:
            logger.warning("Session %s busy, ignoring switch to %s", self.session_id, category)
            return False
        category = resolve_category(category)
        if not is_category_enabled(category):
            raise UnknownCategory(f"Category {category.value!r} is disabled")

        self.active_category = category
        self.model_image = None
        self.item_image = None
        self.status = ""
        self.last_result = None
        logger.info("Session %s switched to %s", self.session_id, category.value)
        return True

    async def request_generation(self, service: Optional[GenAIService] = None) -> Optional[GenerationResult]:
        """
        Run one generation from the ready phase.

        Returns None (and does nothing) unless the session is ready.
        Images are kept whatever the outcome, so a failed attempt can be retried.
        """
        if not self.can_generate:
            logger.warning("Session %s not ready (phase=%s), ignoring generate", self.session_id, self.phase.value)
            return None

        request = GenerationRequest(
            category=self.active_category,
            model_image=self.model_image,
            item_image=self.item_image,
        )
        self.busy = True
        self.last_result = None
        try:
            result = await tryon.generate(
                request, service=service or self._service, on_status=self._set_status,
            )
        finally:
            self.busy = False

        self.last_result = result
        self.status = STATUS_COMPLETE if result.succeeded else f"Error: {result.message}"
        return result

    def _set_status(self, status: str) -> None:
        self.status = status

    # ── Views ────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        profile = lookup(self.active_category)
        return {
            "session_id": self.session_id,
            "category": self.active_category.value,
            "title": profile.title,
            "item_label": profile.item_label,
            "phase": self.phase.value,
            "busy": self.busy,
            "can_generate": self.can_generate,
            "status": self.status,
            "has_model_image": self.model_image is not None,
            "has_item_image": self.item_image is not None,
            "has_result": bool(self.last_result and self.last_result.succeeded),
        }


# ── In-memory registry ───────────────────────────────────────────────

# Least recently used first
_sessions: "OrderedDict[str, TryOnSession]" = OrderedDict()


def _evict_idle_sessions(limit: int) -> None:
    """Drop least recently used sessions until there is room for one more."""
    for session_id in list(_sessions):
        if len(_sessions) < limit:
            return
        if _sessions[session_id].busy:
            continue
        del _sessions[session_id]
        logger.info("Evicted idle session %s (limit %d)", session_id, limit)


def create_session(
    category: Union[Category, str] = DEFAULT_CATEGORY,
    service: Optional[GenAIService] = None,
) -> TryOnSession:
    category = resolve_category(category)
    if not is_category_enabled(category):
        raise UnknownCategory(f"Category {category.value!r} is disabled")
    _evict_idle_sessions(max(get_settings().max_sessions, 1))
    session = TryOnSession(category=category, service=service)
    _sessions[session.session_id] = session
    logger.debug("Created session %s (%d active)", session.session_id, len(_sessions))
    return session


def get_session(session_id: str) -> TryOnSession:
    session = _sessions.get(session_id)
    if session is None:
        raise SessionNotFound(f"Session not found: {session_id}")
    _sessions.move_to_end(session_id)
    return session


def remove_session(session_id: str) -> None:
    if _sessions.pop(session_id, None) is None:
        raise SessionNotFound(f"Session not found: {session_id}")
    logger.debug("Removed session %s (%d active)", session_id, len(_sessions))


def clear_sessions() -> None:
    """Drop every session (app shutdown, tests)."""
    _sessions.clear()
